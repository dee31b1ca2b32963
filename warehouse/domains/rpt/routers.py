# warehouse/domains/rpt/routers.py

from typing import List, Optional
from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from warehouse.core import dependencies as deps
from warehouse.domains.inv.models import TransactionType
from warehouse.domains.inv.schemas import StockTransactionRead
from warehouse.domains.usr.models import User as UsrUser
from . import crud, models, schemas

router = APIRouter(
    tags=["Report Management (활동 기록 및 보고서)"],
    responses={404: {"description": "Not found"}},
)


# =============================================================================
# 1. activity_logs 엔드포인트
# =============================================================================
@router.post("/activity-logs", response_model=schemas.ActivityLogRead, status_code=status.HTTP_201_CREATED)
async def create_activity_log(
    log_in: schemas.ActivityLogCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """활동 기록을 추가합니다. userId를 생략하면 현재 사용자로 기록합니다."""
    if log_in.user_id is None:
        log_in.user_id = current_user.id
    return await crud.create_activity_log(db, log_in=log_in)


@router.get("/activity-logs", response_model=List[schemas.ActivityLogRead])
async def read_activity_logs(
    skip: int = 0,
    limit: int = 100,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    return await crud.get_activity_logs(db, skip=skip, limit=limit)


# =============================================================================
# 2. 대시보드
# =============================================================================
@router.get("/dashboard/stats", response_model=schemas.DashboardStats)
async def read_dashboard_stats(
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    return await crud.get_dashboard_stats(db)


# =============================================================================
# 3. 보고서
# =============================================================================
@router.get("/reports/activity-logs", response_model=List[schemas.ActivityLogRead])
async def report_activity_logs(
    action: Optional[models.ActivityAction] = None,
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2000),
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    return await crud.get_activity_logs(db, action=action, month=month, year=year, limit=None)


@router.get("/reports/inventory", response_model=List[schemas.InventoryReportRow])
async def report_inventory(
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    return await crud.get_inventory_report(db)


@router.get("/reports/transactions", response_model=List[StockTransactionRead])
async def report_transactions(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    transaction_type: Optional[TransactionType] = Query(None, alias="type"),
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    return await crud.get_transactions_report(
        db, start_date=start_date, end_date=end_date, transaction_type=transaction_type
    )
