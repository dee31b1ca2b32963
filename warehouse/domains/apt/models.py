# warehouse/domains/apt/models.py

"""
'apt' 도메인의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

공급업체 입고 예약(appointments)과 예약 품목(appointment_items)을 관리합니다.
예약 상태는 pending/confirmed에서 completed 또는 cancelled로만 바뀌며,
두 종결 상태에서는 더 이상 전이할 수 없습니다.
"""

import datetime as dt
from typing import Optional
from enum import Enum
from sqlmodel import Field, SQLModel, Column
from sqlalchemy import CheckConstraint, ForeignKey, Integer
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED)


# 입고 완료 시 원장에 남기는 사유
RESTOCK_REASON = "Restock from appointment"


# =============================================================================
# 1. appointments 테이블 모델
# =============================================================================
class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"

    id: Optional[int] = Field(default=None, primary_key=True)
    supplier_id: int = Field(
        sa_column=Column(Integer, ForeignKey("suppliers.id", ondelete="CASCADE"), nullable=False, index=True),
    )
    date: dt.date = Field(description="입고 예정일")
    time: dt.time = Field(description="입고 예정 시각")
    status: AppointmentStatus = Field(default=AppointmentStatus.PENDING)
    notes: Optional[str] = Field(default=None)
    scheduled_by_user_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
    )
    scheduled_date: Optional[dt.datetime] = Field(
        default_factory=lambda: dt.datetime.now(dt.UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="예약 등록 일시"
    )
    last_updated: Optional[dt.datetime] = Field(
        default_factory=lambda: dt.datetime.now(dt.UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
    )


# =============================================================================
# 2. appointment_items 테이블 모델
# =============================================================================
class AppointmentItem(SQLModel, table=True):
    """예약 품목. 수정 시 예약의 모든 품목을 지우고 새로 등록합니다."""
    __tablename__ = "appointment_items"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_appointment_items_quantity"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    appointment_id: int = Field(
        sa_column=Column(Integer, ForeignKey("appointments.id", ondelete="CASCADE"), nullable=False, index=True),
    )
    item_id: int = Field(
        sa_column=Column(Integer, ForeignKey("inventory_items.id", ondelete="CASCADE"), nullable=False),
    )
    quantity: int = Field(description="입고 예정 수량")
