# warehouse/domains/apt/routers.py

"""
'apt' 도메인 (공급업체 입고 예약)의 API 엔드포인트를 정의하는 모듈입니다.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlmodel.ext.asyncio.session import AsyncSession

from warehouse.core import dependencies as deps
from warehouse.core.schemas import Message
from warehouse.domains.apt import crud as apt_crud
from warehouse.domains.apt import schemas as apt_schemas
from warehouse.domains.apt.models import AppointmentStatus
from warehouse.domains.usr.models import User as UsrUser

router = APIRouter(
    tags=["Appointment Management (입고 예약 관리)"],
    responses={404: {"description": "Not found"}},
)


# =============================================================================
# 1. appointments 엔드포인트
# =============================================================================
@router.post(
    "/appointments",
    response_model=apt_schemas.AppointmentRead,
    status_code=status.HTTP_201_CREATED,
    summary="입고 예약 등록",
)
async def create_appointment(
    appointment_create: apt_schemas.AppointmentCreate,
    request: Request,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """예약과 품목을 등록하고, Redis가 연결되어 있으면 공급업체 안내 메일을 발송합니다."""
    arq_redis_pool = getattr(request.app.state, "redis", None)
    appointment = await apt_crud.appointment.create(
        db, obj_in=appointment_create, user_id=current_user.id, arq_redis_pool=arq_redis_pool
    )
    return await apt_crud.appointment.get_detail(db, appointment.id)


@router.get("/appointments", response_model=List[apt_schemas.AppointmentRead], summary="입고 예약 목록 조회")
async def read_appointments(
    status_filter: Optional[AppointmentStatus] = Query(None, alias="status"),
    supplier_id: Optional[int] = Query(None, alias="supplierId"),
    skip: int = 0,
    limit: int = 100,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    return await apt_crud.appointment.get_multi_detail(
        db, status=status_filter, supplier_id=supplier_id, skip=skip, limit=limit
    )


@router.get("/appointments/{appointment_id}", response_model=apt_schemas.AppointmentRead, summary="특정 입고 예약 조회")
async def read_appointment(
    appointment_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    appointment = await apt_crud.appointment.get_detail(db, appointment_id)
    if appointment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Appointment not found")
    return appointment


@router.put("/appointments/{appointment_id}", response_model=apt_schemas.AppointmentRead, summary="입고 예약 수정")
async def update_appointment(
    appointment_id: int,
    appointment_update: apt_schemas.AppointmentUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """예약 품목은 요청 본문의 목록으로 전부 교체됩니다."""
    await apt_crud.appointment.update(db, appointment_id=appointment_id, obj_in=appointment_update)
    return await apt_crud.appointment.get_detail(db, appointment_id)


# =============================================================================
# 2. 상태 전이 엔드포인트
# =============================================================================
@router.post("/appointments/{appointment_id}/complete", response_model=Message, summary="입고 완료 처리")
async def complete_appointment(
    appointment_id: int,
    body: Optional[apt_schemas.AppointmentComplete] = None,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """예약 품목 수량만큼 재고를 늘리고 입고 거래를 기록한 뒤 예약을 완료 상태로 바꿉니다."""
    user_id = body.user_id if body and body.user_id is not None else current_user.id
    await apt_crud.appointment.complete(db, appointment_id=appointment_id, user_id=user_id)
    return {"message": "Appointment completed and inventory updated"}


@router.post("/appointments/{appointment_id}/cancel", response_model=Message, summary="입고 예약 취소")
async def cancel_appointment(
    appointment_id: int,
    request: Request,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    appointment, changed = await apt_crud.appointment.cancel(db, appointment_id=appointment_id)
    if changed:
        arq_redis_pool = getattr(request.app.state, "redis", None)
        await apt_crud.appointment.enqueue_cancel_email(arq_redis_pool, appointment.id)
    return {"message": "Appointment cancelled"}
