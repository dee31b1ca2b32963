# warehouse/main.py

import logging
from typing import AsyncGenerator
from contextlib import asynccontextmanager

from arq import cron
from arq.connections import create_pool, RedisSettings
from fastapi import FastAPI, Depends, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from warehouse import API_PREFIX
from warehouse.core.config import settings
from warehouse.core.database import engine, get_session
from warehouse.core.exceptions import WarehouseError

# 태스크 모듈 임포트
from warehouse.core import tasks as core_tasks
from warehouse.domains.inv import tasks as inv_tasks
from warehouse.domains.apt import tasks as apt_tasks

# 도메인 라우터 임포트
from warehouse.domains.usr.routers import router as usr_router
from warehouse.domains.loc.routers import router as loc_router
from warehouse.domains.ven.routers import router as ven_router
from warehouse.domains.inv.routers import router as inv_router
from warehouse.domains.apt.routers import router as apt_router
from warehouse.domains.rpt.routers import router as rpt_router

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# ARQ 워커가 실행할 태스크 함수 목록
worker_functions = [
    core_tasks.health_check_database_task,
    inv_tasks.notify_low_stock_task,
    apt_tasks.send_appointment_email_task,
    apt_tasks.send_appointment_cancel_email_task,
]


def _every_n_minutes(n: int) -> set:
    """n은 60의 약수입니다 (Settings에서 검증)."""
    return set(range(0, 60, n))


# ARQ 워커 설정 클래스 (arq warehouse.main.ArqWorkerSettings)
class ArqWorkerSettings:
    redis_settings = RedisSettings(host=settings.REDIS_HOST, port=settings.REDIS_PORT)
    functions = worker_functions
    cron_jobs = [
        cron(
            core_tasks.health_check_database_task,
            name="daily_db_health_check",
            hour=0,
            minute=0,
            timeout=300,
            keep_result=600,
        ),
        cron(
            inv_tasks.notify_low_stock_task,
            name="low_stock_notification",
            minute=_every_n_minutes(settings.LOW_STOCK_CHECK_INTERVAL_MINUTES),
            timeout=300,
            unique=True,
        ),
    ]


# -- 애플리케이션 수명 주기 이벤트 핸들러 --
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    데이터베이스 엔진과 ARQ Redis 커넥션 풀을 함께 관리합니다.
    Redis에 연결할 수 없으면 메일 작업 없이 API만 동작합니다.
    """
    logger.info("FastAPI 애플리케이션 시작 중...")
    try:
        app.state.redis = await create_pool(ArqWorkerSettings.redis_settings)
        logger.info("ARQ Redis 커넥션 풀 생성 완료.")
    except (RedisError, OSError) as e:
        logger.warning("ARQ Redis 커넥션 풀 생성 실패, 백그라운드 작업 없이 실행합니다: %s", e)
        app.state.redis = None

    yield  # 애플리케이션 실행

    logger.info("FastAPI 애플리케이션 종료 중...")
    if app.state.redis:
        await app.state.redis.close()
        logger.info("ARQ Redis 연결 풀 종료 완료.")
    await engine.dispose()
    logger.info("데이터베이스 연결 풀 종료 완료.")


# -- FastAPI 애플리케이션 인스턴스 생성 --
app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# -- CORS 미들웨어 설정 --
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # 개발용. 프로덕션에서는 프론트엔드 도메인으로 제한
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -- 도메인 오류 처리 --
@app.exception_handler(WarehouseError)
async def warehouse_error_handler(request: Request, exc: WarehouseError) -> JSONResponse:
    """도메인 오류를 각 오류의 HTTP 상태 코드와 {"detail": ...} 본문으로 변환합니다."""
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


# -- 도메인 라우터 포함 --
app.include_router(usr_router, prefix=f"{API_PREFIX}/usr", tags=["User Management (사용자 관리)"])
app.include_router(loc_router, prefix=f"{API_PREFIX}/loc", tags=["Location Management (보관 장소 관리)"])
app.include_router(ven_router, prefix=f"{API_PREFIX}/ven", tags=["Supplier Management (공급업체 관리)"])
app.include_router(inv_router, prefix=f"{API_PREFIX}/inv", tags=["Inventory Management (재고 관리)"])
app.include_router(apt_router, prefix=f"{API_PREFIX}/apt", tags=["Appointment Management (입고 예약 관리)"])
app.include_router(rpt_router, prefix=f"{API_PREFIX}/rpt", tags=["Report Management (활동 기록 및 보고서)"])


# -- 루트 엔드포인트 --
@app.get("/", summary="API Root", response_description="Welcome message and documentation link.")
async def read_root():
    return {"message": f"Welcome to {settings.APP_NAME}. Visit /docs for interactive API documentation."}


# -- 헬스 체크 엔드포인트 --
@app.get("/health-check", summary="Health Check", response_description="Status of the application and database connection.")
async def health_check(session: AsyncSession = Depends(get_session)):
    """데이터베이스 연결을 테스트하여 서비스의 정상 작동 여부를 확인합니다."""
    try:
        result = await session.execute(select(1))
        if result.scalar_one_or_none() == 1:
            return {"status": "ok", "database_connection": "successful"}
    except SQLAlchemyError as e:
        logger.error("Health check failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Database connection error during health check: {e}",
        )
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Database health check failed: No result from test query",
    )
