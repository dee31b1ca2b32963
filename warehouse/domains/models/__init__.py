# warehouse/domains/models/__init__.py

"""
모든 도메인의 SQLModel 모델을 한 곳에서 임포트하여
SQLModel.metadata가 모든 테이블을 인식하도록 보장합니다 (Alembic, 테스트 테이블 생성).
"""

# usr (User)
from warehouse.domains.usr.models import User, UserRole, UserStatus

# loc (Location)
from warehouse.domains.loc.models import Location

# ven (Supplier)
from warehouse.domains.ven.models import Supplier

# inv (Category, InventoryItem, StockTransaction, DamagedItem, LowStockAlert)
from warehouse.domains.inv.models import (
    Category, InventoryItem, StockTransaction, DamagedItem, LowStockAlert
)

# apt (Appointment, AppointmentItem)
from warehouse.domains.apt.models import Appointment, AppointmentItem

# rpt (ActivityLog)
from warehouse.domains.rpt.models import ActivityLog

__all__ = [
    "User", "UserRole", "UserStatus",
    "Location",
    "Supplier",
    "Category", "InventoryItem", "StockTransaction", "DamagedItem", "LowStockAlert",
    "Appointment", "AppointmentItem",
    "ActivityLog",
]
