# warehouse/domains/apt/crud.py

"""
'apt' 도메인의 CRUD 작업을 위한 함수들을 정의하는 모듈입니다.

입고 완료(complete)는 예약의 모든 품목에 대해 수량 증가, 공급업체 변경, 입고 원장 기록을
수행한 뒤 상태를 completed로 바꾸며, 이 전체가 하나의 트랜잭션입니다.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from redis.exceptions import RedisError
from sqlalchemy import delete
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from warehouse.core.crud_base import CRUDBase
from warehouse.core.database import atomic
from warehouse.core.exceptions import InvalidStateTransition, NotFoundError
from warehouse.domains.apt import models as apt_models
from warehouse.domains.apt import schemas as apt_schemas
from warehouse.domains.inv import crud as inv_crud
from warehouse.domains.inv import models as inv_models
from warehouse.domains.usr.models import User
from warehouse.domains.ven.models import Supplier

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class AppointmentCRUD(CRUDBase[apt_models.Appointment, apt_schemas.AppointmentCreate, apt_schemas.AppointmentUpdate]):
    """입고 예약의 등록, 수정, 완료, 취소를 처리합니다."""

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------
    async def get_for_update(self, db: AsyncSession, id: int) -> Optional[apt_models.Appointment]:
        statement = (
            select(apt_models.Appointment)
            .where(apt_models.Appointment.id == id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await db.execute(statement)
        return result.scalars().one_or_none()

    async def get_lines(self, db: AsyncSession, appointment_id: int) -> List[apt_models.AppointmentItem]:
        """예약 품목을 등록 순서(id)대로 반환합니다."""
        result = await db.execute(
            select(apt_models.AppointmentItem)
            .where(apt_models.AppointmentItem.appointment_id == appointment_id)
            .order_by(apt_models.AppointmentItem.id)
        )
        return result.scalars().all()

    def _header_query(self):
        return (
            select(apt_models.Appointment, Supplier, User.name)
            .join(Supplier, Supplier.id == apt_models.Appointment.supplier_id)
            .outerjoin(User, User.id == apt_models.Appointment.scheduled_by_user_id)
        )

    async def _with_lines(self, db: AsyncSession, rows) -> List[Dict[str, Any]]:
        appointment_ids = [appointment.id for appointment, _, _ in rows]
        lines_by_appointment: Dict[int, List[Dict[str, Any]]] = {id: [] for id in appointment_ids}
        if appointment_ids:
            result = await db.execute(
                select(apt_models.AppointmentItem, inv_models.InventoryItem.item_name)
                .outerjoin(inv_models.InventoryItem, inv_models.InventoryItem.id == apt_models.AppointmentItem.item_id)
                .where(apt_models.AppointmentItem.appointment_id.in_(appointment_ids))
                .order_by(apt_models.AppointmentItem.id)
            )
            for line, item_name in result.all():
                lines_by_appointment[line.appointment_id].append({**line.model_dump(), "item_name": item_name})

        return [
            {
                **appointment.model_dump(),
                "supplier_name": supplier.supplier_name,
                "supplier_contact_person": supplier.contact_person,
                "supplier_contact_email": supplier.contact_email,
                "supplier_contact_phone": supplier.contact_phone,
                "scheduled_by": scheduled_by,
                "items": lines_by_appointment[appointment.id],
            }
            for appointment, supplier, scheduled_by in rows
        ]

    async def get_detail(self, db: AsyncSession, id: int) -> Optional[Dict[str, Any]]:
        result = await db.execute(self._header_query().where(apt_models.Appointment.id == id))
        rows = result.all()
        if not rows:
            return None
        return (await self._with_lines(db, rows))[0]

    async def get_multi_detail(
        self,
        db: AsyncSession,
        *,
        status: Optional[apt_models.AppointmentStatus] = None,
        supplier_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Dict[str, Any]]:
        query = self._header_query()
        if status is not None:
            query = query.where(apt_models.Appointment.status == status)
        if supplier_id is not None:
            query = query.where(apt_models.Appointment.supplier_id == supplier_id)
        query = query.order_by(apt_models.Appointment.date, apt_models.Appointment.time, apt_models.Appointment.id)
        result = await db.execute(query.offset(skip).limit(limit))
        return await self._with_lines(db, result.all())

    # -------------------------------------------------------------------------
    # 등록 / 수정
    # -------------------------------------------------------------------------
    async def _check_references(self, db: AsyncSession, obj_in: apt_schemas.AppointmentCreate) -> None:
        if await db.get(Supplier, obj_in.supplier_id) is None:
            raise NotFoundError(f"Supplier {obj_in.supplier_id} not found")
        for line in obj_in.items:
            if await db.get(inv_models.InventoryItem, line.item_id) is None:
                raise NotFoundError(f"Item {line.item_id} not found")

    @staticmethod
    def _build_lines(appointment_id: int, obj_in: apt_schemas.AppointmentCreate) -> List[apt_models.AppointmentItem]:
        return [
            apt_models.AppointmentItem(appointment_id=appointment_id, item_id=line.item_id, quantity=line.quantity)
            for line in obj_in.items
        ]

    async def _enqueue_email(self, arq_redis_pool, job_name: str, appointment_id: int) -> None:
        if not arq_redis_pool:
            logger.warning("ARQ Redis pool not available, skipping %s for appointment %s.", job_name, appointment_id)
            return
        # 이 시점에 예약 변경은 이미 커밋되어 있습니다.
        try:
            await arq_redis_pool.enqueue_job(job_name, appointment_id)
        except (RedisError, OSError) as e:
            logger.error("Failed to enqueue %s for appointment %s: %s", job_name, appointment_id, e)

    async def create(
        self,
        db: AsyncSession,
        *,
        obj_in: apt_schemas.AppointmentCreate,
        user_id: Optional[int],
        arq_redis_pool=None,
    ) -> apt_models.Appointment:
        """예약 헤더와 품목을 한 트랜잭션으로 등록하고, 공급업체 안내 메일 작업을 등록합니다."""
        await self._check_references(db, obj_in)
        async with atomic(db, "appointment scheduling"):
            appointment = apt_models.Appointment(
                supplier_id=obj_in.supplier_id,
                date=obj_in.date,
                time=obj_in.time,
                status=obj_in.status,
                notes=obj_in.notes,
                scheduled_by_user_id=obj_in.scheduled_by_user_id if obj_in.scheduled_by_user_id is not None else user_id,
            )
            db.add(appointment)
            await db.flush()
            db.add_all(self._build_lines(appointment.id, obj_in))

        logger.info("Scheduled appointment %s with %s line(s)", appointment.id, len(obj_in.items))
        await self._enqueue_email(arq_redis_pool, "send_appointment_email_task", appointment.id)
        return appointment

    async def update(
        self,
        db: AsyncSession,
        *,
        appointment_id: int,
        obj_in: apt_schemas.AppointmentUpdate,
    ) -> apt_models.Appointment:
        """헤더를 갱신하고 기존 품목을 모두 새 품목으로 교체합니다. 종결된 예약은 수정할 수 없습니다."""
        await self._check_references(db, obj_in)
        async with atomic(db, "appointment update"):
            appointment = await self.get_for_update(db, appointment_id)
            if appointment is None:
                raise NotFoundError(f"Appointment {appointment_id} not found")
            if appointment.status.is_terminal:
                raise InvalidStateTransition(appointment.id, appointment.status.value, obj_in.status.value)

            appointment.supplier_id = obj_in.supplier_id
            appointment.date = obj_in.date
            appointment.time = obj_in.time
            appointment.status = obj_in.status
            appointment.notes = obj_in.notes
            if obj_in.scheduled_by_user_id is not None:
                appointment.scheduled_by_user_id = obj_in.scheduled_by_user_id
            db.add(appointment)

            await db.execute(
                delete(apt_models.AppointmentItem).where(apt_models.AppointmentItem.appointment_id == appointment.id)
            )
            db.add_all(self._build_lines(appointment.id, obj_in))
        return appointment

    # -------------------------------------------------------------------------
    # 상태 전이
    # -------------------------------------------------------------------------
    async def complete(
        self, db: AsyncSession, *, appointment_id: int, user_id: Optional[int]
    ) -> apt_models.Appointment:
        """
        입고를 완료합니다.

        각 품목 행을 잠그고 수량을 예약 수량만큼 늘린 뒤, 품목의 공급업체를 예약 공급업체로 바꾸고
        'Restock from appointment' 입고 거래를 기록합니다. 품목 하나라도 없으면 전체가 롤백되고
        예약 상태도 그대로 남습니다.
        """
        async with atomic(db, "appointment completion"):
            appointment = await self.get_for_update(db, appointment_id)
            if appointment is None:
                raise NotFoundError(f"Appointment {appointment_id} not found")
            if appointment.status.is_terminal:
                logger.warning("Rejected completion of %s appointment %s", appointment.status.value, appointment.id)
                raise InvalidStateTransition(
                    appointment.id, appointment.status.value, apt_models.AppointmentStatus.COMPLETED.value
                )

            for line in await self.get_lines(db, appointment.id):
                item = await inv_crud.inventory_item.get_for_update(db, line.item_id)
                if item is None:
                    raise NotFoundError(f"Item {line.item_id} in appointment {appointment.id} no longer exists")

                stock_before = item.quantity
                stock_after = stock_before + line.quantity
                item.quantity = stock_after
                item.supplier_id = appointment.supplier_id
                db.add(item)
                db.add(
                    inv_models.StockTransaction(
                        item_id=item.id,
                        transaction_type=inv_models.TransactionType.IN,
                        quantity=line.quantity,
                        reason=apt_models.RESTOCK_REASON,
                        user_id=user_id,
                        stock_before=stock_before,
                        stock_after=stock_after,
                    )
                )
                if stock_after > item.reorder_level:
                    await inv_crud.low_stock_alert.clear(db, item.id, commit=False)
                # 같은 품목이 다시 나오면 잠금 조회가 이 변경을 읽어야 합니다.
                await db.flush()

            appointment.status = apt_models.AppointmentStatus.COMPLETED
            db.add(appointment)

        logger.info("Completed appointment %s", appointment.id)
        return appointment

    async def cancel(
        self, db: AsyncSession, *, appointment_id: int
    ) -> Tuple[apt_models.Appointment, bool]:
        """
        예약을 취소합니다. 재고와 원장은 변경하지 않습니다.
        이미 취소된 예약은 그대로 성공으로 처리하며, 두 번째 값은 이번 호출로 상태가 바뀌었는지 여부입니다.
        """
        async with atomic(db, "appointment cancellation"):
            appointment = await self.get_for_update(db, appointment_id)
            if appointment is None:
                raise NotFoundError(f"Appointment {appointment_id} not found")
            if appointment.status == apt_models.AppointmentStatus.CANCELLED:
                return appointment, False
            if appointment.status == apt_models.AppointmentStatus.COMPLETED:
                raise InvalidStateTransition(
                    appointment.id, appointment.status.value, apt_models.AppointmentStatus.CANCELLED.value
                )
            appointment.status = apt_models.AppointmentStatus.CANCELLED
            db.add(appointment)

        logger.info("Cancelled appointment %s", appointment.id)
        return appointment, True

    async def enqueue_cancel_email(self, arq_redis_pool, appointment_id: int) -> None:
        await self._enqueue_email(arq_redis_pool, "send_appointment_cancel_email_task", appointment_id)


appointment = AppointmentCRUD(apt_models.Appointment)
