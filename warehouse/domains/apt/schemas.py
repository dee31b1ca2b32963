# warehouse/domains/apt/schemas.py

"""
'apt' 도메인의 Pydantic 스키마를 정의하는 모듈입니다.
"""

import datetime as dt
from typing import List, Optional
from pydantic import Field, field_validator

from warehouse.core.schemas import CamelModel
from .models import AppointmentStatus

# 등록/수정 요청에서 지정할 수 있는 상태 (종결 상태는 complete/cancel 엔드포인트로만 변경)
SCHEDULABLE_STATUSES = (AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED)


class AppointmentLineCreate(CamelModel):
    item_id: int
    quantity: int = Field(..., gt=0)


class AppointmentCreate(CamelModel):
    supplier_id: int
    date: dt.date
    time: dt.time
    status: AppointmentStatus = AppointmentStatus.PENDING
    notes: Optional[str] = None
    scheduled_by_user_id: Optional[int] = None
    items: List[AppointmentLineCreate] = Field(..., min_length=1)

    @field_validator("status")
    @classmethod
    def status_must_be_schedulable(cls, value: AppointmentStatus) -> AppointmentStatus:
        if value not in SCHEDULABLE_STATUSES:
            raise ValueError("status must be pending or confirmed; use the complete/cancel endpoints instead")
        return value


class AppointmentUpdate(AppointmentCreate):
    """전체 교체(replace-on-edit) 방식의 수정 요청."""
    pass


class AppointmentComplete(CamelModel):
    user_id: Optional[int] = None


class AppointmentLineRead(CamelModel):
    id: int
    item_id: int
    quantity: int
    item_name: Optional[str] = None


class AppointmentRead(CamelModel):
    id: int
    supplier_id: int
    date: dt.date
    time: dt.time
    status: AppointmentStatus
    notes: Optional[str] = None
    scheduled_by_user_id: Optional[int] = None
    scheduled_date: Optional[dt.datetime] = None
    last_updated: Optional[dt.datetime] = None
    supplier_name: Optional[str] = None
    scheduled_by: Optional[str] = None
    items: List[AppointmentLineRead] = []
