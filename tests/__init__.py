# tests/__init__.py

"""
창고 재고 API 테스트 패키지입니다.

- `conftest.py`: 테스트 DB, 사용자/보관 장소/공급업체/품목 픽스처, 인증 클라이언트.
- `domains/`: 도메인별(usr, loc, ven, inv, apt, rpt) API 테스트.
- `test_main.py`, `test_notifier.py`: 앱 진입점과 메일 알림 서비스 테스트.
"""

__title__ = "Warehouse Inventory API Tests"
__version__ = "0.1.0"
__all__ = []
