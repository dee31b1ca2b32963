# warehouse/domains/ven/crud.py

"""
'ven' 도메인 (공급업체)과 관련된 CRUD 로직을 담당하는 모듈입니다.
"""

from typing import List

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from warehouse.core.crud_base import CRUDBase
from . import models as ven_models
from . import schemas as ven_schemas


class CRUDSupplier(CRUDBase[ven_models.Supplier, ven_schemas.SupplierCreate, ven_schemas.SupplierUpdate]):
    def __init__(self):
        super().__init__(model=ven_models.Supplier)

    async def get_multi_ordered(
        self, db: AsyncSession, *, active_only: bool = False, skip: int = 0, limit: int = 100
    ) -> List[ven_models.Supplier]:
        """공급업체명 순으로 조회합니다."""
        query = select(self.model)
        if active_only:
            query = query.where(self.model.is_active == True)  # noqa: E712
        query = query.order_by(self.model.supplier_name).offset(skip).limit(limit)
        result = await db.execute(query)
        return result.scalars().all()


supplier = CRUDSupplier()
