# warehouse/domains/loc/schemas.py

"""
'loc' 도메인의 Pydantic 스키마를 정의하는 모듈입니다.
"""

from typing import Optional
from datetime import datetime
from pydantic import Field

from warehouse.core.schemas import CamelModel


class LocationCreate(CamelModel):
    location_name: str = Field(..., min_length=1, max_length=100, description="장소 명칭")
    description: Optional[str] = Field(None, description="설명")


class LocationUpdate(CamelModel):
    location_name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None


class LocationRead(CamelModel):
    id: int
    location_name: str
    description: Optional[str] = None
    date_added: Optional[datetime] = None
