# warehouse/core/database.py

"""
애플리케이션의 데이터베이스 연결 및 세션 관리를 담당하는 모듈입니다.

- SQLModel의 비동기 엔진을 설정합니다.
- 비동기 세션 생성을 위한 유틸리티 함수를 제공합니다.
- 개발용 테이블 생성 함수를 포함합니다 (운영 환경은 Alembic 사용).
"""

import logging
from typing import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine
from sqlalchemy.orm import sessionmaker

from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from warehouse.core.config import settings
from warehouse.core.exceptions import StoreFailure, WarehouseError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _engine_options() -> dict:
    # SQLite(로컬/테스트)는 풀 크기 옵션을 지원하지 않습니다.
    if settings.DATABASE_URL.get_secret_value().startswith("sqlite"):
        return {}
    return {
        "pool_recycle": 3600,  # 1시간마다 연결 재활용
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
    }


engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL.get_secret_value(),
    echo=settings.DEBUG_MODE,  # 디버그 모드일 때만 SQL 쿼리 출력
    future=True,
    **_engine_options(),
)

# 비동기 세션을 생성하는 '세션 공장'
AsyncSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

metadata = SQLModel.metadata


# =============================================================================
# 데이터베이스 초기화 및 테이블 생성 함수
# =============================================================================
async def create_db_and_tables() -> None:
    """
    모든 테이블을 생성합니다. 개발 환경 전용이며 기존 테이블은 삭제하지 않습니다.
    """
    import warehouse.domains.models  # noqa: F401  모든 테이블을 metadata에 등록

    logger.info("데이터베이스 테이블 생성을 시도합니다...")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("데이터베이스 테이블 생성이 완료되었습니다 (또는 이미 존재).")


# =============================================================================
# 비동기 데이터베이스 세션 의존성 주입
# =============================================================================
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI 의존성 주입을 위한 비동기 데이터베이스 세션 제너레이터입니다.
    요청마다 새로운 세션을 생성하고, 요청 처리 후 세션을 자동으로 닫습니다.
    """
    async with AsyncSessionLocal() as session:
        yield session


@asynccontextmanager
async def get_async_session_context() -> AsyncGenerator[AsyncSession, None]:
    """
    ARQ Task 등 비동기 컨텍스트에서 사용할 수 있는
    독립적인 비동기 DB 세션을 제공하는 컨텍스트 관리자입니다.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@asynccontextmanager
async def atomic(db: AsyncSession, action: str) -> AsyncGenerator[AsyncSession, None]:
    """
    재고 원장을 변경하는 작업 단위를 하나의 DB 트랜잭션으로 묶습니다.
    블록이 정상 종료되면 커밋하고, 예외가 발생하면 전체를 롤백합니다.
    SQLAlchemy 오류는 StoreFailure로 변환되어 전달됩니다.
    """
    try:
        yield db
        await db.commit()
    except WarehouseError:
        await db.rollback()
        raise
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("%s 실행 중 저장소 오류가 발생하여 롤백했습니다.", action)
        raise StoreFailure(f"{action} aborted and rolled back") from e
    except Exception:
        await db.rollback()
        raise
