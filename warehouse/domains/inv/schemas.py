# warehouse/domains/inv/schemas.py

"""
'inv' 도메인의 Pydantic 스키마를 정의하는 모듈입니다.
모든 스키마는 CamelModel을 상속하여 JSON에서는 camelCase 필드명을 사용합니다.
"""

from typing import Optional
from datetime import datetime, date
from decimal import Decimal
from pydantic import Field, field_validator

from warehouse.core.schemas import CamelModel
from .models import DamagedItemStatus, DamagedStatus, TransactionType


# =============================================================================
# 1. categories 테이블 스키마
# =============================================================================
class CategoryCreate(CamelModel):
    category_name: str = Field(..., min_length=1, max_length=100, description="분류 명칭")
    description: Optional[str] = Field(None, description="분류 설명")


class CategoryUpdate(CamelModel):
    category_name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None


class CategoryRead(CamelModel):
    id: int
    category_name: str
    description: Optional[str] = None
    date_added: Optional[datetime] = None


# =============================================================================
# 2. inventory_items 테이블 스키마
# =============================================================================
class InventoryItemCreate(CamelModel):
    item_name: str = Field(..., min_length=1, max_length=100)
    category_id: Optional[int] = None
    quantity: int = Field(0, ge=0)
    location_id: Optional[int] = None
    reorder_level: int = Field(10, ge=0)
    price: Decimal = Field(Decimal("0.00"), ge=0, max_digits=10, decimal_places=2)
    supplier_id: Optional[int] = None
    damaged_status: DamagedStatus = DamagedStatus.GOOD


class InventoryItemUpdate(CamelModel):
    """직접 수정. 수량 변경은 원장에 기록되지 않으므로 가급적 입출고 거래를 사용합니다."""
    item_name: Optional[str] = Field(None, min_length=1, max_length=100)
    category_id: Optional[int] = None
    quantity: Optional[int] = Field(None, ge=0)
    location_id: Optional[int] = None
    reorder_level: Optional[int] = Field(None, ge=0)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    supplier_id: Optional[int] = None
    damaged_status: Optional[DamagedStatus] = None

    @field_validator("item_name", "quantity", "reorder_level", "price", "damaged_status")
    @classmethod
    def reject_null(cls, value):
        # 생략은 가능하지만 NOT NULL 컬럼에 null을 넣을 수는 없습니다.
        if value is None:
            raise ValueError("may be omitted but not set to null")
        return value


class InventoryItemRead(CamelModel):
    id: int
    item_name: str
    category_id: Optional[int] = None
    quantity: int
    location_id: Optional[int] = None
    reorder_level: int
    price: Decimal
    supplier_id: Optional[int] = None
    damaged_status: DamagedStatus
    date_added: Optional[datetime] = None
    # 조인된 이름 (목록/상세 조회 시)
    category_name: Optional[str] = None
    location_name: Optional[str] = None
    supplier_name: Optional[str] = None


# =============================================================================
# 3. stock_transactions 테이블 스키마
# =============================================================================
class StockTransactionCreate(CamelModel):
    """
    입출고 요청.
    stockBefore/stockAfter는 호출자가 본 수량으로, 서버가 잠근 행의 수량과 다르면 거부됩니다.
    """
    item_id: int
    transaction_type: TransactionType
    quantity: int
    reason: str = Field(..., max_length=255)
    user_id: Optional[int] = None
    stock_before: Optional[int] = None
    stock_after: Optional[int] = None


class StockTransactionRecorded(CamelModel):
    message: str
    id: int
    stock_before: int
    stock_after: int


class StockTransactionRead(CamelModel):
    id: int
    item_id: int
    transaction_type: TransactionType
    quantity: int
    reason: Optional[str] = None
    user_id: Optional[int] = None
    stock_before: int
    stock_after: int
    timestamp: Optional[datetime] = None
    item_name: Optional[str] = None
    user_name: Optional[str] = None
    user_role: Optional[str] = None


# =============================================================================
# 4. damaged_items 테이블 스키마
# =============================================================================
class DamagedItemUpdate(CamelModel):
    status: Optional[DamagedItemStatus] = None
    notes: Optional[str] = None

    @field_validator("status")
    @classmethod
    def reject_null_status(cls, value):
        if value is None:
            raise ValueError("status may be omitted but not set to null")
        return value


class DamagedItemRead(CamelModel):
    id: int
    item_id: int
    quantity: int
    reason: Optional[str] = None
    status: DamagedItemStatus
    notes: Optional[str] = None
    date_damaged: date
    last_updated: Optional[datetime] = None
    item_name: Optional[str] = None
    location_name: Optional[str] = None
    price: Optional[Decimal] = None


# =============================================================================
# 5. low_stock_alerts 스키마
# =============================================================================
class LowStockNotifyResult(CamelModel):
    message: str
    sent: int = 0
    failed: int = 0
