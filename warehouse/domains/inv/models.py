# warehouse/domains/inv/models.py

"""
'inv' 도메인의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

- categories: 품목 분류
- inventory_items: 재고 품목 (현재 수량의 유일한 보관처)
- stock_transactions: 입출고 원장. 추가만 되고 수정/삭제되지 않습니다.
- damaged_items: 'Damaged/Discarded' 사유의 출고마다 한 행씩 생성되는 파손 기록
- low_stock_alerts: 현재 재고 부족 상태에 대해 알림 메일을 이미 보냈음을 표시
"""

from typing import Optional
from datetime import datetime, date, UTC
from decimal import Decimal
from enum import Enum
from sqlmodel import Field, SQLModel, Column
from sqlalchemy import CheckConstraint, ForeignKey, Integer, Numeric
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP


class DamagedStatus(str, Enum):
    GOOD = "Good"
    DAMAGED = "Damaged"


class TransactionType(str, Enum):
    IN = "IN"
    OUT = "OUT"


class DamagedItemStatus(str, Enum):
    STANDBY = "Standby"  # 폐기 대기
    THROWN = "Thrown"    # 폐기 완료


# 출고 사유가 정확히 이 값일 때만 파손 기록을 생성합니다.
DAMAGED_REASON = "Damaged/Discarded"


# =============================================================================
# 1. categories 테이블 모델
# =============================================================================
class CategoryBase(SQLModel):
    category_name: str = Field(max_length=100, sa_column_kwargs={"unique": True}, description="분류 명칭")
    description: Optional[str] = Field(default=None)


class Category(CategoryBase, table=True):
    __tablename__ = "categories"

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


# =============================================================================
# 2. inventory_items 테이블 모델
# =============================================================================
class InventoryItem(SQLModel, table=True):
    __tablename__ = "inventory_items"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_inventory_items_quantity"),
        CheckConstraint("reorder_level >= 0", name="ck_inventory_items_reorder_level"),
        CheckConstraint("price >= 0", name="ck_inventory_items_price"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    item_name: str = Field(max_length=100, index=True, description="품목명")
    category_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True),
    )
    quantity: int = Field(default=0, description="현재 재고 수량")
    location_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("locations.id", ondelete="SET NULL"), nullable=True),
    )
    reorder_level: int = Field(default=10, description="재주문 기준 수량 (이하이면 재고 부족)")
    price: Decimal = Field(default=Decimal("0.00"), sa_column=Column(Numeric(10, 2), nullable=False))
    supplier_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True),
    )
    damaged_status: DamagedStatus = Field(default=DamagedStatus.GOOD)
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


# =============================================================================
# 3. stock_transactions 테이블 모델 (입출고 원장)
# =============================================================================
class StockTransaction(SQLModel, table=True):
    __tablename__ = "stock_transactions"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_stock_transactions_quantity"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    item_id: int = Field(
        sa_column=Column(Integer, ForeignKey("inventory_items.id", ondelete="CASCADE"), nullable=False, index=True),
    )
    transaction_type: TransactionType
    quantity: int
    reason: Optional[str] = Field(default=None, max_length=255)
    user_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
    )
    stock_before: int = Field(description="거래 직전 수량")
    stock_after: int = Field(description="거래 직후 수량")
    timestamp: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
    )


# =============================================================================
# 4. damaged_items 테이블 모델
# =============================================================================
class DamagedItem(SQLModel, table=True):
    __tablename__ = "damaged_items"

    id: Optional[int] = Field(default=None, primary_key=True)
    item_id: int = Field(
        sa_column=Column(Integer, ForeignKey("inventory_items.id", ondelete="CASCADE"), nullable=False, index=True),
    )
    quantity: int
    reason: Optional[str] = Field(default=None, max_length=255)
    status: DamagedItemStatus = Field(default=DamagedItemStatus.STANDBY)
    notes: Optional[str] = Field(default=None)
    date_damaged: date = Field(default_factory=date.today)
    last_updated: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
    )


# =============================================================================
# 5. low_stock_alerts 테이블 모델
# =============================================================================
class LowStockAlert(SQLModel, table=True):
    """품목당 최대 한 행. 행이 있으면 현재 부족 상태에 대한 알림이 이미 발송된 것입니다."""
    __tablename__ = "low_stock_alerts"

    id: Optional[int] = Field(default=None, primary_key=True)
    item_id: int = Field(
        sa_column=Column(Integer, ForeignKey("inventory_items.id", ondelete="CASCADE"), nullable=False, unique=True),
    )
    sent_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
    )
