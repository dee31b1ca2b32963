# warehouse/domains/rpt/crud.py

"""
'rpt' 도메인의 조회/집계 함수 모듈입니다.
활동 기록, 대시보드 통계, 재고/거래 보고서를 제공합니다.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import extract, func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from warehouse.domains.apt.models import Appointment, AppointmentStatus
from warehouse.domains.inv import crud as inv_crud
from warehouse.domains.inv.models import DamagedStatus, InventoryItem, StockTransaction, TransactionType
from warehouse.domains.usr.models import User
from . import models, schemas


# =============================================================================
# 1. activity_logs
# =============================================================================
async def create_activity_log(
    db: AsyncSession, *, log_in: schemas.ActivityLogCreate, commit: bool = True
) -> models.ActivityLog:
    """활동 기록을 추가합니다. 다른 작업의 트랜잭션 안에서 쓸 때는 commit=False."""
    db_obj = models.ActivityLog.model_validate(log_in.model_dump())
    db.add(db_obj)
    if commit:
        await db.commit()
        await db.refresh(db_obj)
    return db_obj


async def get_activity_logs(
    db: AsyncSession,
    *,
    action: Optional[models.ActivityAction] = None,
    month: Optional[int] = None,
    year: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[Dict[str, Any]]:
    """활동 기록을 최신순으로 조회합니다 (사용자 이름 포함)."""
    statement = select(models.ActivityLog, User.name).outerjoin(User, User.id == models.ActivityLog.user_id)
    if action is not None:
        statement = statement.where(models.ActivityLog.action == action)
    if month is not None:
        statement = statement.where(extract("month", models.ActivityLog.timestamp) == month)
    if year is not None:
        statement = statement.where(extract("year", models.ActivityLog.timestamp) == year)
    statement = statement.order_by(models.ActivityLog.timestamp.desc(), models.ActivityLog.id.desc())
    result = await db.execute(statement.offset(skip).limit(limit))
    return [{**log.model_dump(), "user_name": user_name} for log, user_name in result.all()]


# =============================================================================
# 2. 대시보드 통계
# =============================================================================
async def _scalar(db: AsyncSession, statement) -> Any:
    result = await db.execute(statement)
    return result.scalar_one()


async def get_dashboard_stats(db: AsyncSession) -> Dict[str, Any]:
    total_items = await _scalar(db, select(func.count(InventoryItem.id)))
    low_stock_items = await _scalar(
        db, select(func.count(InventoryItem.id)).where(InventoryItem.quantity <= InventoryItem.reorder_level)
    )
    damaged_items = await _scalar(
        db, select(func.count(InventoryItem.id)).where(InventoryItem.damaged_status == DamagedStatus.DAMAGED)
    )
    total_value = await _scalar(db, select(func.coalesce(func.sum(InventoryItem.quantity * InventoryItem.price), 0)))
    total_in = await _scalar(
        db,
        select(func.coalesce(func.sum(StockTransaction.quantity), 0))
        .where(StockTransaction.transaction_type == TransactionType.IN),
    )
    total_out = await _scalar(
        db,
        select(func.coalesce(func.sum(StockTransaction.quantity), 0))
        .where(StockTransaction.transaction_type == TransactionType.OUT),
    )
    upcoming_appointments = await _scalar(
        db,
        select(func.count(Appointment.id))
        .where(Appointment.date >= date.today())
        .where(Appointment.status.in_([AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED])),
    )
    return {
        "total_items": total_items,
        "low_stock_items": low_stock_items,
        "damaged_items": damaged_items,
        "total_value": Decimal(str(total_value)).quantize(Decimal("0.01")),
        "total_in": total_in,
        "total_out": total_out,
        "upcoming_appointments": upcoming_appointments,
    }


# =============================================================================
# 3. 보고서
# =============================================================================
async def get_inventory_report(db: AsyncSession) -> List[Dict[str, Any]]:
    """품목별 재고 금액(수량 x 단가)을 포함한 재고 현황."""
    rows = await inv_crud.inventory_item.get_multi_joined(db, limit=None)
    for row in rows:
        row["total_value"] = (Decimal(row["quantity"]) * Decimal(row["price"])).quantize(Decimal("0.01"))
    return rows


async def get_transactions_report(
    db: AsyncSession,
    *,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    transaction_type: Optional[TransactionType] = None,
) -> List[Dict[str, Any]]:
    return await inv_crud.stock_transaction.get_multi_joined(
        db, start_date=start_date, end_date=end_date, transaction_type=transaction_type, limit=None
    )
