# warehouse/domains/loc/crud.py

"""
'loc' 도메인 (보관 장소)과 관련된 CRUD 로직을 담당하는 모듈입니다.
"""

from typing import Optional
import logging

from sqlmodel.ext.asyncio.session import AsyncSession

from warehouse.core.crud_base import CRUDBase
from warehouse.core.exceptions import ConstraintConflict
from . import models as loc_models
from . import schemas as loc_schemas

logger = logging.getLogger(__name__)


# =============================================================================
# 1. 장소 (Location) CRUD
# =============================================================================
class CRUDLocation(CRUDBase[loc_models.Location, loc_schemas.LocationCreate, loc_schemas.LocationUpdate]):
    def __init__(self):
        super().__init__(model=loc_models.Location)

    async def get_by_name(self, db: AsyncSession, *, name: str) -> Optional[loc_models.Location]:
        return await self.get_by_attribute(db, attribute="location_name", value=name)

    async def create(self, db: AsyncSession, *, obj_in: loc_schemas.LocationCreate) -> loc_models.Location:
        """이름 중복을 확인하고 생성합니다."""
        if await self.get_by_name(db, name=obj_in.location_name):
            raise ConstraintConflict("Location with this name already exists.")
        return await super().create(db, obj_in=obj_in)

    async def update(
        self, db: AsyncSession, *, db_obj: loc_models.Location, obj_in: loc_schemas.LocationUpdate
    ) -> loc_models.Location:
        new_name = obj_in.location_name
        if new_name and new_name != db_obj.location_name and await self.get_by_name(db, name=new_name):
            raise ConstraintConflict("Location with this name already exists.")
        return await super().update(db, db_obj=db_obj, obj_in=obj_in)


location = CRUDLocation()
