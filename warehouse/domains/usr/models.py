# warehouse/domains/usr/models.py

"""
'usr' 도메인의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

사용자 계정(users)은 가입 후 관리자 승인(pending → approved)을 거쳐야 로그인할 수 있습니다.
사용자를 삭제해도 재고 원장(stock_transactions 등)의 행은 남고 user_id만 NULL이 됩니다.
"""

from typing import Optional
from datetime import datetime, UTC
from enum import Enum
from sqlmodel import Field, SQLModel, Column
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP


class UserRole(str, Enum):
    """
    사용자 역할.
    Admin은 기준 정보 관리와 사용자 승인, Staff는 입출고와 예약 업무를 담당합니다.
    """
    ADMIN = "Admin"
    STAFF = "Staff"


class UserStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# =============================================================================
# 1. users 테이블 모델
# =============================================================================
class UserBase(SQLModel):
    username: str = Field(max_length=50, sa_column_kwargs={"unique": True}, description="로그인 사용자명")
    email: str = Field(max_length=100, sa_column_kwargs={"unique": True}, description="사용자 이메일")
    name: str = Field(max_length=100, description="사용자 이름")
    role: UserRole = Field(default=UserRole.STAFF, description="사용자 역할 (권한)")
    status: UserStatus = Field(default=UserStatus.PENDING, description="가입 승인 상태")


class User(UserBase, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True, description="사용자 고유 ID")
    password_hash: str = Field(max_length=255, description="해싱된 비밀번호")
    signup_date: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="가입 신청 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
        description="레코드 마지막 업데이트 일시"
    )
