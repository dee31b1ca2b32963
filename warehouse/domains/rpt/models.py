# warehouse/domains/rpt/models.py

"""
'rpt' 도메인의 데이터베이스 ORM 모델을 정의하는 모듈입니다.
품목 등록/수정/삭제, 입출고, 재고 부족 알림에 대한 활동 기록(activity_logs)을 보관합니다.
"""

from typing import Optional
from datetime import datetime, UTC
from enum import Enum
from sqlmodel import Field, SQLModel, Column
from sqlalchemy import ForeignKey, Integer
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP


class ActivityAction(str, Enum):
    ADDED = "Added"
    EDITED = "Edited"
    DELETED = "Deleted"
    TRANSACTION = "Transaction"
    ALERT = "Alert"


class ActivityLog(SQLModel, table=True):
    __tablename__ = "activity_logs"

    id: Optional[int] = Field(default=None, primary_key=True)
    # 품목이 삭제된 후에도 기록이 남도록 이름을 그대로 저장합니다.
    item_name: str = Field(max_length=100)
    action: ActivityAction
    user_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
    )
    details: Optional[str] = Field(default=None)
    timestamp: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), index=True),
    )
