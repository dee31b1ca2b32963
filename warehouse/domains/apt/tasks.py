# warehouse/domains/apt/tasks.py

import logging
from typing import Any, Dict

from warehouse.core.database import get_async_session_context
from warehouse.services.notifications import AppointmentMailer, EmailDeliveryError

#  로거 설정
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def _send(appointment_id: int, cancelled: bool) -> Dict[str, Any]:
    mailer = AppointmentMailer.from_settings()
    async with get_async_session_context() as db:
        try:
            if cancelled:
                sent = await mailer.send_cancelled(db, appointment_id)
            else:
                sent = await mailer.send_scheduled(db, appointment_id)
        except EmailDeliveryError as e:
            logger.error("예약 %s 안내 메일 발송 실패: %s", appointment_id, e)
            return {"status": "failed", "message": str(e)}
    return {"status": "success" if sent else "skipped", "appointment_id": appointment_id}


async def send_appointment_email_task(ctx: Dict[str, Any], appointment_id: int) -> Dict[str, Any]:
    """입고 예약 등록 안내 메일을 공급업체 담당자에게 보냅니다."""
    return await _send(appointment_id, cancelled=False)


async def send_appointment_cancel_email_task(ctx: Dict[str, Any], appointment_id: int) -> Dict[str, Any]:
    """입고 예약 취소 안내 메일을 공급업체 담당자에게 보냅니다."""
    return await _send(appointment_id, cancelled=True)
