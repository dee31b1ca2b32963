# tests/test_main.py

"""
FastAPI 애플리케이션의 메인 엔드포인트에 대한 통합 테스트를 정의하는 모듈입니다.

- 애플리케이션의 루트 경로 (`/`) 응답을 테스트합니다.
- 데이터베이스 연결 헬스 체크 엔드포인트 (`/health-check`)를 테스트합니다.
- 도메인 오류가 {"detail": ...} 형식의 HTTP 응답으로 변환되는지 확인합니다.
"""

import pytest
from httpx import AsyncClient
from pydantic import ValidationError

from warehouse.core.config import Settings, settings
from warehouse.core.exceptions import (
    ConstraintConflict,
    InvalidStateTransition,
    NotFoundError,
    StaleSnapshotError,
    StoreFailure,
    ValidationFailure,
)
from warehouse.main import _every_n_minutes


@pytest.mark.asyncio
async def test_read_root(client: AsyncClient):
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json() == {
        "message": f"Welcome to {settings.APP_NAME}. Visit /docs for interactive API documentation."
    }


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """헬스 체크 엔드포인트가 데이터베이스 연결 상태를 반환하는지 테스트합니다."""
    response = await client.get("/health-check")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database_connection": "successful"}


@pytest.mark.asyncio
async def test_domain_error_status_codes():
    assert NotFoundError("x").status_code == 404
    assert ValidationFailure("x").status_code == 400
    assert ConstraintConflict("x").status_code == 409
    assert StaleSnapshotError(1, 5, 3).status_code == 409
    assert InvalidStateTransition(1, "completed", "cancelled").status_code == 409
    assert StoreFailure("x").status_code == 500


@pytest.mark.asyncio
async def test_low_stock_interval_must_divide_an_hour():
    """cron 분 집합이 시간 경계에서도 같은 간격을 유지하도록 60의 약수만 허용합니다."""
    assert _every_n_minutes(15) == {0, 15, 30, 45}
    assert _every_n_minutes(60) == {0}

    required = {"DATABASE_URL": "sqlite+aiosqlite://", "SECRET_KEY": "test-secret"}
    assert Settings(**required, LOW_STOCK_CHECK_INTERVAL_MINUTES=20).LOW_STOCK_CHECK_INTERVAL_MINUTES == 20
    for interval in (0, 7, 45, 90):
        with pytest.raises(ValidationError):
            Settings(**required, LOW_STOCK_CHECK_INTERVAL_MINUTES=interval)
