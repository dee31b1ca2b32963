# warehouse/services/notifications.py

"""
메일 릴레이(EmailJS 호환 REST API)를 통한 알림 발송 서비스 모듈입니다.

- EmailRelayClient: 템플릿 ID와 파라미터로 메일 한 통을 발송합니다.
- LowStockNotifier: 재고 부족 알림이 아직 발송되지 않은 품목마다 관리자에게 메일을 보내고
  발송 완료로 표시합니다. 발송에 실패한 품목은 다음 주기에 다시 시도됩니다.
- AppointmentMailer: 입고 예약 등록/취소 시 공급업체 담당자에게 안내 메일을 보냅니다.
"""

import logging
from datetime import date
from typing import Any, Dict, Optional

import httpx
from sqlmodel.ext.asyncio.session import AsyncSession

from warehouse.core.config import settings
from warehouse.domains.apt import crud as apt_crud
from warehouse.domains.inv import crud as inv_crud
from warehouse.domains.rpt import crud as rpt_crud
from warehouse.domains.rpt.models import ActivityAction
from warehouse.domains.rpt.schemas import ActivityLogCreate

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

NO_SUPPLIER = "No supplier assigned"


class EmailDeliveryError(Exception):
    """메일 릴레이 호출 실패 (네트워크 오류 또는 2xx 이외의 응답)."""
    pass


# =============================================================================
# 1. 메일 릴레이 클라이언트
# =============================================================================
class EmailRelayClient:
    def __init__(
        self,
        url: str,
        service_id: Optional[str],
        public_key: Optional[str],
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.service_id = service_id
        self.public_key = public_key
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, transport: Optional[httpx.AsyncBaseTransport] = None) -> "EmailRelayClient":
        public_key = settings.EMAIL_RELAY_PUBLIC_KEY
        return cls(
            url=settings.EMAIL_RELAY_URL,
            service_id=settings.EMAIL_RELAY_SERVICE_ID,
            public_key=public_key.get_secret_value() if public_key else None,
            timeout=settings.EMAIL_TIMEOUT_SECONDS,
            transport=transport,
        )

    @property
    def enabled(self) -> bool:
        return bool(self.service_id and self.public_key)

    async def send(self, template_id: str, template_params: Dict[str, Any]) -> None:
        payload = {
            "service_id": self.service_id,
            "template_id": template_id,
            "user_id": self.public_key,
            "template_params": template_params,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.url, json=payload)
        except httpx.HTTPError as e:
            raise EmailDeliveryError(f"Email relay request failed: {e}") from e
        if not response.is_success:
            raise EmailDeliveryError(f"Email relay returned {response.status_code}: {response.text}")


# =============================================================================
# 2. 재고 부족 알림
# =============================================================================
class LowStockNotifier:
    def __init__(self, relay: EmailRelayClient, admin_email: Optional[str], template_id: str):
        self.relay = relay
        self.admin_email = admin_email
        self.template_id = template_id

    @classmethod
    def from_settings(cls, relay: Optional[EmailRelayClient] = None) -> "LowStockNotifier":
        return cls(
            relay=relay or EmailRelayClient.from_settings(),
            admin_email=settings.ADMIN_EMAIL,
            template_id=settings.EMAIL_TEMPLATE_LOW_STOCK,
        )

    def build_params(self, item: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "to_name": "Admin",
            "to_email": self.admin_email,
            "item_name": item["item_name"],
            "current_quantity": str(item["quantity"]),
            "reorder_level": str(item["reorder_level"]),
            "location": item.get("location_name") or "",
            "category": item.get("category_name") or "",
            "supplier": item.get("supplier_name") or NO_SUPPLIER,
            "alert_date": date.today().isoformat(),
        }

    async def run(self, db: AsyncSession) -> Dict[str, int]:
        """
        미발송 재고 부족 품목마다 메일을 한 통씩 보냅니다.
        발송에 성공한 품목만 발송 완료로 표시하고 'Alert' 활동 기록을 남깁니다.
        """
        result = {"sent": 0, "failed": 0}
        if not self.relay.enabled or not self.admin_email:
            logger.warning("Email relay or admin email not configured, skipping low stock notification.")
            return result

        pending = await inv_crud.low_stock_alert.list_pending(db)
        for item in pending:
            try:
                await self.relay.send(self.template_id, self.build_params(item))
            except EmailDeliveryError as e:
                logger.error("Low stock email for item %s failed: %s", item["id"], e)
                result["failed"] += 1
                continue

            await inv_crud.low_stock_alert.mark_sent(db, item["id"])
            await rpt_crud.create_activity_log(
                db,
                log_in=ActivityLogCreate(
                    item_name=item["item_name"],
                    action=ActivityAction.ALERT,
                    details=f"Low stock alert sent: {item['quantity']} left (reorder level {item['reorder_level']})",
                ),
            )
            logger.info("Low stock email sent for item %s (%s)", item["id"], item["item_name"])
            result["sent"] += 1
        return result


# =============================================================================
# 3. 입고 예약 안내 메일
# =============================================================================
class AppointmentMailer:
    def __init__(self, relay: EmailRelayClient, template_id: str, cancel_template_id: str):
        self.relay = relay
        self.template_id = template_id
        self.cancel_template_id = cancel_template_id

    @classmethod
    def from_settings(cls, relay: Optional[EmailRelayClient] = None) -> "AppointmentMailer":
        return cls(
            relay=relay or EmailRelayClient.from_settings(),
            template_id=settings.EMAIL_TEMPLATE_APPOINTMENT,
            cancel_template_id=settings.EMAIL_TEMPLATE_APPOINTMENT_CANCEL,
        )

    @staticmethod
    def build_params(appointment: Dict[str, Any]) -> Dict[str, Any]:
        lines = appointment["items"]
        return {
            "to_name": appointment.get("supplier_contact_person") or appointment["supplier_name"],
            "to_email": appointment["supplier_contact_email"],
            "supplier_name": appointment["supplier_name"],
            "appointment_date": appointment["date"].isoformat(),
            "appointment_time": appointment["time"].strftime("%H:%M"),
            "items_list": "\n".join(f"• {line['item_name']} - {line['quantity']} units" for line in lines),
            "total_items": str(len(lines)),
            "notes": appointment.get("notes") or "No additional notes",
            "scheduled_by": appointment.get("scheduled_by") or "",
            "status": appointment["status"].value,
            "contact_phone": appointment.get("supplier_contact_phone") or "Not provided",
        }

    async def _send(self, db: AsyncSession, appointment_id: int, template_id: str) -> bool:
        if not self.relay.enabled:
            logger.warning("Email relay not configured, skipping email for appointment %s.", appointment_id)
            return False
        appointment = await apt_crud.appointment.get_detail(db, appointment_id)
        if appointment is None:
            logger.warning("Appointment %s no longer exists, skipping email.", appointment_id)
            return False
        if not appointment["supplier_contact_email"]:
            logger.warning(
                "Supplier %s has no contact email, skipping email for appointment %s.",
                appointment["supplier_name"], appointment_id,
            )
            return False
        await self.relay.send(template_id, self.build_params(appointment))
        logger.info("Appointment email (%s) sent for appointment %s", template_id, appointment_id)
        return True

    async def send_scheduled(self, db: AsyncSession, appointment_id: int) -> bool:
        return await self._send(db, appointment_id, self.template_id)

    async def send_cancelled(self, db: AsyncSession, appointment_id: int) -> bool:
        return await self._send(db, appointment_id, self.cancel_template_id)
