# warehouse/__init__.py

"""
창고 재고 관리(Warehouse Inventory) FastAPI 애플리케이션의 메인 패키지입니다.

core 서브패키지(설정, 데이터베이스, 보안, 공통 CRUD)와
각 비즈니스 도메인을 대표하는 domains 서브패키지로 구성됩니다.
"""

APP_NAME = "Warehouse Inventory API"
APP_VERSION = "0.1.0"
API_PREFIX = "/api/v1"  # API 라우트의 공통 접두사 (main.py에서 적용)

__version__ = APP_VERSION
__title__ = APP_NAME
__description__ = "Warehouse inventory, stock ledger and supplier appointment API backend."
__all__ = []
