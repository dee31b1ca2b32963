# warehouse/domains/rpt/schemas.py

from typing import Optional
from datetime import datetime
from decimal import Decimal
from pydantic import Field

from warehouse.core.schemas import CamelModel
from warehouse.domains.inv.schemas import InventoryItemRead
from .models import ActivityAction


class ActivityLogCreate(CamelModel):
    item_name: str = Field(..., min_length=1, max_length=100)
    action: ActivityAction
    user_id: Optional[int] = None
    details: Optional[str] = None


class ActivityLogRead(CamelModel):
    id: int
    item_name: str
    action: ActivityAction
    user_id: Optional[int] = None
    details: Optional[str] = None
    timestamp: Optional[datetime] = None
    user_name: Optional[str] = None


class DashboardStats(CamelModel):
    total_items: int
    low_stock_items: int
    damaged_items: int
    total_value: Decimal
    total_in: int
    total_out: int
    upcoming_appointments: int


class InventoryReportRow(InventoryItemRead):
    total_value: Decimal
