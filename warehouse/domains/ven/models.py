# warehouse/domains/ven/models.py

"""
'ven' 도메인의 데이터베이스 ORM 모델을 정의하는 모듈입니다.
재고를 공급하는 공급업체(suppliers)를 관리합니다.
"""

from typing import Optional
from datetime import datetime, UTC
from sqlmodel import Field, SQLModel, Column
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP


# =============================================================================
# 1. suppliers 테이블 모델
# =============================================================================
class SupplierBase(SQLModel):
    supplier_name: str = Field(max_length=100, description="공급업체명")
    contact_person: Optional[str] = Field(default=None, max_length=100, description="담당자")
    contact_email: Optional[str] = Field(default=None, max_length=100, description="담당자 이메일 (예약 메일 수신)")
    contact_phone: Optional[str] = Field(default=None, max_length=50, description="연락처")
    address: Optional[str] = Field(default=None, description="주소")
    is_active: bool = Field(default=True, description="거래 여부")


class Supplier(SupplierBase, table=True):
    __tablename__ = "suppliers"

    id: Optional[int] = Field(default=None, primary_key=True)
    date_added: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="등록 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
        description="레코드 마지막 업데이트 일시"
    )
