# warehouse/domains/inv/crud.py

"""
'inv' 도메인의 CRUD 작업을 위한 함수들을 정의하는 모듈입니다.

입출고 기록(StockTransactionCRUD.record)은 품목 수량을 바꾸는 유일한 정식 경로이며,
품목 행을 잠근 상태에서 수량을 계산하고 원장, 파손 기록, 재고 부족 알림을
하나의 트랜잭션으로 변경합니다.
"""

import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import delete
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from warehouse.core.crud_base import CRUDBase
from warehouse.core.database import atomic
from warehouse.core.schemas import CamelModel
from warehouse.core.exceptions import (
    ConstraintConflict,
    NotFoundError,
    StaleSnapshotError,
    ValidationFailure,
)
from warehouse.domains.inv import models as inv_models
from warehouse.domains.inv import schemas as inv_schemas
from warehouse.domains.loc.models import Location
from warehouse.domains.usr.models import User
from warehouse.domains.ven.models import Supplier

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# =============================================================================
# 1. categories CRUD
# =============================================================================
class CategoryCRUD(CRUDBase[inv_models.Category, inv_schemas.CategoryCreate, inv_schemas.CategoryUpdate]):
    """Category 모델에 특화된 CRUD 작업을 처리합니다."""

    async def get_by_name(self, db: AsyncSession, *, name: str) -> Optional[inv_models.Category]:
        return await self.get_by_attribute(db, attribute="category_name", value=name)

    async def create(self, db: AsyncSession, *, obj_in: inv_schemas.CategoryCreate) -> inv_models.Category:
        if await self.get_by_name(db, name=obj_in.category_name):
            raise ConstraintConflict("Category with this name already exists.")
        return await super().create(db, obj_in=obj_in)

    async def update(
        self, db: AsyncSession, *, db_obj: inv_models.Category, obj_in: inv_schemas.CategoryUpdate
    ) -> inv_models.Category:
        new_name = obj_in.category_name
        if new_name and new_name != db_obj.category_name and await self.get_by_name(db, name=new_name):
            raise ConstraintConflict("Category with this name already exists.")
        return await super().update(db, db_obj=db_obj, obj_in=obj_in)


# =============================================================================
# 2. inventory_items CRUD
# =============================================================================
class InventoryItemCRUD(
    CRUDBase[inv_models.InventoryItem, inv_schemas.InventoryItemCreate, inv_schemas.InventoryItemUpdate]
):
    """품목 조회(분류/장소/공급업체 이름 조인)와 직접 수정을 처리합니다."""

    def _joined_query(self):
        return (
            select(
                inv_models.InventoryItem,
                inv_models.Category.category_name,
                Location.location_name,
                Supplier.supplier_name,
            )
            .outerjoin(inv_models.Category, inv_models.Category.id == inv_models.InventoryItem.category_id)
            .outerjoin(Location, Location.id == inv_models.InventoryItem.location_id)
            .outerjoin(Supplier, Supplier.id == inv_models.InventoryItem.supplier_id)
        )

    @staticmethod
    def _to_read(row) -> Dict[str, Any]:
        item, category_name, location_name, supplier_name = row
        return {
            **item.model_dump(),
            "category_name": category_name,
            "location_name": location_name,
            "supplier_name": supplier_name,
        }

    async def get_for_update(self, db: AsyncSession, id: int) -> Optional[inv_models.InventoryItem]:
        """
        품목 행을 잠그고(SELECT ... FOR UPDATE) 최신 값으로 다시 읽습니다.
        같은 트랜잭션이 끝날 때까지 다른 요청은 이 품목 수량을 바꿀 수 없습니다.
        """
        statement = (
            select(inv_models.InventoryItem)
            .where(inv_models.InventoryItem.id == id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await db.execute(statement)
        return result.scalars().one_or_none()

    async def get_joined(self, db: AsyncSession, id: int) -> Optional[Dict[str, Any]]:
        result = await db.execute(self._joined_query().where(inv_models.InventoryItem.id == id))
        row = result.first()
        return self._to_read(row) if row else None

    async def get_multi_joined(
        self,
        db: AsyncSession,
        *,
        search: Optional[str] = None,
        category_id: Optional[int] = None,
        location_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Dict[str, Any]]:
        query = self._joined_query()
        if search:
            query = query.where(inv_models.InventoryItem.item_name.ilike(f"%{search}%"))
        if category_id is not None:
            query = query.where(inv_models.InventoryItem.category_id == category_id)
        if location_id is not None:
            query = query.where(inv_models.InventoryItem.location_id == location_id)
        query = query.order_by(inv_models.InventoryItem.id).offset(skip).limit(limit)
        result = await db.execute(query)
        return [self._to_read(row) for row in result.all()]

    async def list_at_or_below_reorder_level(self, db: AsyncSession) -> List[Dict[str, Any]]:
        """재고 수량이 재주문 기준 이하인 품목을 수량 오름차순으로 반환합니다."""
        query = (
            self._joined_query()
            .where(inv_models.InventoryItem.quantity <= inv_models.InventoryItem.reorder_level)
            .order_by(inv_models.InventoryItem.quantity, inv_models.InventoryItem.id)
        )
        result = await db.execute(query)
        return [self._to_read(row) for row in result.all()]

    async def _check_references(self, db: AsyncSession, data: Dict[str, Any]) -> None:
        for field, model in (
            ("category_id", inv_models.Category),
            ("location_id", Location),
            ("supplier_id", Supplier),
        ):
            ref_id = data.get(field)
            if ref_id is not None and await db.get(model, ref_id) is None:
                raise NotFoundError(f"{model.__name__} {ref_id} not found")

    async def create(self, db: AsyncSession, *, obj_in: inv_schemas.InventoryItemCreate) -> inv_models.InventoryItem:
        await self._check_references(db, obj_in.model_dump())
        return await super().create(db, obj_in=obj_in)

    async def update(
        self, db: AsyncSession, *, db_obj: inv_models.InventoryItem, obj_in: inv_schemas.InventoryItemUpdate
    ) -> inv_models.InventoryItem:
        """
        품목을 직접 수정합니다.
        수정 결과 수량이 재주문 기준을 초과하면 재고 부족 알림 표시도 함께 해제합니다.
        """
        update_data = obj_in.model_dump(exclude_unset=True)
        await self._check_references(db, update_data)
        async with atomic(db, "inventory item update"):
            for key, value in update_data.items():
                setattr(db_obj, key, value)
            db.add(db_obj)
            if db_obj.quantity > db_obj.reorder_level:
                await low_stock_alert.clear(db, db_obj.id, commit=False)
        await db.refresh(db_obj)
        return db_obj


# =============================================================================
# 3. damaged_items CRUD
# =============================================================================
class DamagedItemCRUD(CRUDBase[inv_models.DamagedItem, inv_schemas.DamagedItemUpdate, inv_schemas.DamagedItemUpdate]):
    """파손 기록의 판정, 생성, 관리."""

    @staticmethod
    def classify(transaction_type: inv_models.TransactionType, reason: Optional[str]) -> bool:
        """출고이면서 사유가 정확히 'Damaged/Discarded'인 거래만 파손 기록 대상입니다."""
        return transaction_type == inv_models.TransactionType.OUT and reason == inv_models.DAMAGED_REASON

    @staticmethod
    def build_from_transaction(transaction: inv_models.StockTransaction) -> inv_models.DamagedItem:
        return inv_models.DamagedItem(
            item_id=transaction.item_id,
            quantity=transaction.quantity,
            reason=transaction.reason,
            status=inv_models.DamagedItemStatus.STANDBY,
            date_damaged=date.today(),
        )

    async def get_multi_joined(
        self,
        db: AsyncSession,
        *,
        status: Optional[inv_models.DamagedItemStatus] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Dict[str, Any]]:
        query = (
            select(
                inv_models.DamagedItem,
                inv_models.InventoryItem.item_name,
                Location.location_name,
                inv_models.InventoryItem.price,
            )
            .join(inv_models.InventoryItem, inv_models.InventoryItem.id == inv_models.DamagedItem.item_id)
            .outerjoin(Location, Location.id == inv_models.InventoryItem.location_id)
        )
        if status is not None:
            query = query.where(inv_models.DamagedItem.status == status)
        query = query.order_by(inv_models.DamagedItem.date_damaged.desc(), inv_models.DamagedItem.id.desc())
        result = await db.execute(query.offset(skip).limit(limit))
        return [
            {**damaged.model_dump(), "item_name": item_name, "location_name": location_name, "price": price}
            for damaged, item_name, location_name, price in result.all()
        ]


# =============================================================================
# 4. low_stock_alerts CRUD
# =============================================================================
class LowStockAlertCRUD(CRUDBase[inv_models.LowStockAlert, CamelModel, CamelModel]):
    """
    재고 부족 알림 발송 여부를 관리합니다.
    알림 서비스는 list_pending으로 대상을 조회하고, 발송 후 mark_sent를 호출합니다.
    """

    async def list_pending(self, db: AsyncSession) -> List[Dict[str, Any]]:
        """재주문 기준 이하이면서 아직 알림을 보내지 않은 품목."""
        query = (
            inventory_item._joined_query()
            .outerjoin(inv_models.LowStockAlert, inv_models.LowStockAlert.item_id == inv_models.InventoryItem.id)
            .where(inv_models.InventoryItem.quantity <= inv_models.InventoryItem.reorder_level)
            .where(inv_models.LowStockAlert.id.is_(None))
            .order_by(inv_models.InventoryItem.quantity, inv_models.InventoryItem.id)
        )
        result = await db.execute(query)
        return [inventory_item._to_read(row) for row in result.all()]

    async def get_by_item(self, db: AsyncSession, item_id: int) -> Optional[inv_models.LowStockAlert]:
        return await self.get_by_attribute(db, attribute="item_id", value=item_id)

    async def mark_sent(self, db: AsyncSession, item_id: int) -> inv_models.LowStockAlert:
        """알림 발송을 기록합니다. 이미 기록되어 있으면 기존 행을 그대로 반환합니다."""
        if await db.get(inv_models.InventoryItem, item_id) is None:
            raise NotFoundError(f"Item {item_id} not found")
        existing = await self.get_by_item(db, item_id)
        if existing:
            return existing
        return await self.create(db, obj_in={"item_id": item_id})

    async def clear(self, db: AsyncSession, item_id: int, *, commit: bool = True) -> int:
        """
        품목의 알림 기록을 삭제합니다.
        입출고/입고 완료 트랜잭션 안에서 호출할 때는 commit=False로 호출합니다.
        """
        result = await db.execute(
            delete(inv_models.LowStockAlert).where(inv_models.LowStockAlert.item_id == item_id)
        )
        if commit:
            await db.commit()
        return result.rowcount


# =============================================================================
# 5. stock_transactions CRUD (입출고 기록)
# =============================================================================
class StockTransactionCRUD(
    CRUDBase[inv_models.StockTransaction, inv_schemas.StockTransactionCreate, inv_schemas.StockTransactionCreate]
):
    """입출고 원장. 레코드는 추가만 되며 수정/삭제 API는 제공하지 않습니다."""

    @staticmethod
    def signed_delta(transaction_type: inv_models.TransactionType, quantity: int) -> int:
        return quantity if transaction_type == inv_models.TransactionType.IN else -quantity

    def validate_request(self, obj_in: inv_schemas.StockTransactionCreate) -> None:
        """잠금 전에 확인할 수 있는 입력 오류를 검사합니다."""
        if obj_in.quantity <= 0:
            raise ValidationFailure("Quantity must be greater than zero")
        if obj_in.stock_before is not None and obj_in.stock_after is not None:
            expected_after = obj_in.stock_before + self.signed_delta(obj_in.transaction_type, obj_in.quantity)
            if obj_in.stock_after != expected_after:
                raise ValidationFailure(
                    f"stockAfter must be {expected_after} for {obj_in.transaction_type.value} "
                    f"of {obj_in.quantity} from {obj_in.stock_before}"
                )

    def expected_before(self, obj_in: inv_schemas.StockTransactionCreate) -> Optional[int]:
        if obj_in.stock_before is not None:
            return obj_in.stock_before
        if obj_in.stock_after is not None:
            return obj_in.stock_after - self.signed_delta(obj_in.transaction_type, obj_in.quantity)
        return None

    async def record(
        self,
        db: AsyncSession,
        *,
        obj_in: inv_schemas.StockTransactionCreate,
        user_id: Optional[int],
    ) -> inv_models.StockTransaction:
        """
        입출고 한 건을 원자적으로 기록합니다.

        1. 품목 행을 잠그고 현재 수량을 읽습니다. 호출자가 본 수량과 다르면 거부합니다.
        2. 거래 행을 추가하고 품목 수량을 새 값으로 바꿉니다.
        3. 'Damaged/Discarded' 출고이면 파손 기록을 추가합니다.
        4. 새 수량이 재주문 기준을 넘으면 재고 부족 알림 표시를 해제합니다.
        """
        self.validate_request(obj_in)
        performed_by = obj_in.user_id if obj_in.user_id is not None else user_id
        if obj_in.user_id is not None and await db.get(User, obj_in.user_id) is None:
            raise NotFoundError(f"User {obj_in.user_id} not found")

        async with atomic(db, "stock transaction"):
            item = await inventory_item.get_for_update(db, obj_in.item_id)
            if item is None:
                raise NotFoundError(f"Item {obj_in.item_id} not found")

            stock_before = item.quantity
            expected = self.expected_before(obj_in)
            if expected is not None and expected != stock_before:
                logger.warning(
                    "Rejected stale transaction for item %s: expected %s, current %s",
                    item.id, expected, stock_before,
                )
                raise StaleSnapshotError(item.id, expected, stock_before)

            stock_after = stock_before + self.signed_delta(obj_in.transaction_type, obj_in.quantity)
            if stock_after < 0:
                raise ValidationFailure(
                    f"Insufficient stock for item {item.id}: {stock_before} available, {obj_in.quantity} requested"
                )

            db_obj = inv_models.StockTransaction(
                item_id=item.id,
                transaction_type=obj_in.transaction_type,
                quantity=obj_in.quantity,
                reason=obj_in.reason,
                user_id=performed_by,
                stock_before=stock_before,
                stock_after=stock_after,
            )
            db.add(db_obj)

            item.quantity = stock_after
            db.add(item)

            if damaged_item.classify(obj_in.transaction_type, obj_in.reason):
                db.add(damaged_item.build_from_transaction(db_obj))

            if stock_after > item.reorder_level:
                await low_stock_alert.clear(db, item.id, commit=False)

        logger.info(
            "Recorded %s of %s for item %s (%s -> %s)",
            db_obj.transaction_type.value, db_obj.quantity, db_obj.item_id, stock_before, stock_after,
        )
        return db_obj

    async def get_multi_joined(
        self,
        db: AsyncSession,
        *,
        item_id: Optional[int] = None,
        transaction_type: Optional[inv_models.TransactionType] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Dict[str, Any]]:
        """거래 내역을 최신순으로 조회합니다 (품목명, 처리자 이름/역할 포함)."""
        query = (
            select(inv_models.StockTransaction, inv_models.InventoryItem.item_name, User.name, User.role)
            .join(inv_models.InventoryItem, inv_models.InventoryItem.id == inv_models.StockTransaction.item_id)
            .outerjoin(User, User.id == inv_models.StockTransaction.user_id)
        )
        if item_id is not None:
            query = query.where(inv_models.StockTransaction.item_id == item_id)
        if transaction_type is not None:
            query = query.where(inv_models.StockTransaction.transaction_type == transaction_type)
        if start_date is not None:
            query = query.where(inv_models.StockTransaction.timestamp >= start_date)
        if end_date is not None:
            query = query.where(inv_models.StockTransaction.timestamp < end_date + timedelta(days=1))
        query = query.order_by(inv_models.StockTransaction.timestamp.desc(), inv_models.StockTransaction.id.desc())
        result = await db.execute(query.offset(skip).limit(limit))
        return [
            {
                **transaction.model_dump(),
                "item_name": item_name,
                "user_name": user_name,
                "user_role": user_role.value if user_role else None,
            }
            for transaction, item_name, user_name, user_role in result.all()
        ]


category = CategoryCRUD(inv_models.Category)
inventory_item = InventoryItemCRUD(inv_models.InventoryItem)
damaged_item = DamagedItemCRUD(inv_models.DamagedItem)
low_stock_alert = LowStockAlertCRUD(inv_models.LowStockAlert)
stock_transaction = StockTransactionCRUD(inv_models.StockTransaction)
