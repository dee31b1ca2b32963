# tests/conftest.py

import os
import tempfile
from typing import AsyncGenerator, Callable, Awaitable
from contextlib import asynccontextmanager

# 설정 모듈이 로드되기 전에 테스트용 환경 변수를 지정합니다.
TEST_DATABASE_URL = os.environ.get(
    "TEST_DATABASE_URL",
    "sqlite+aiosqlite:///" + os.path.join(tempfile.gettempdir(), "test_warehouse.db"),
)
os.environ.setdefault("DATABASE_URL", TEST_DATABASE_URL)
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-warehouse-api")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402

from sqlalchemy.ext.asyncio import create_async_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: E402

from warehouse.main import app as main_app  # noqa: E402
from warehouse.core import dependencies as deps  # noqa: E402
from warehouse.core.database import get_session  # noqa: E402
from warehouse.core.security import get_password_hash  # noqa: E402

# SQLModel.metadata가 모든 테이블을 인식하도록 전체 모델을 임포트합니다.
from warehouse.domains.models import *  # noqa: F401, F403, E402

from warehouse.domains.usr import models as usr_models  # noqa: E402
from warehouse.domains.loc import models as loc_models  # noqa: E402
from warehouse.domains.ven import models as ven_models  # noqa: E402
from warehouse.domains.inv import models as inv_models  # noqa: E402


# --- 테스트용 데이터베이스 설정 ---
test_engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    future=True,
    poolclass=NullPool,     # 각 연결이 독립적으로 사용되고 바로 닫히도록 함
)

TestingSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# --- 데이터베이스 픽스처 ---
@pytest_asyncio.fixture(scope="function", autouse=True)
async def setup_database():
    """
    테스트마다 모든 테이블을 새로 만듭니다.
    입출고/입고 완료는 내부에서 커밋과 롤백을 직접 수행하므로 외부 트랜잭션 롤백으로 격리하지 않습니다.
    """
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
        await conn.run_sync(SQLModel.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    async with TestingSessionLocal() as session:
        yield session


# --- 사용자 픽스처 ---
@pytest_asyncio.fixture(scope="function")
def user_factory(db_session: AsyncSession) -> Callable[..., Awaitable[usr_models.User]]:
    """역할과 상태를 지정하여 테스트 사용자를 생성하는 팩토리 함수를 반환합니다."""
    async def _create_user(
        username: str,
        password: str,
        role: usr_models.UserRole = usr_models.UserRole.STAFF,
        status: usr_models.UserStatus = usr_models.UserStatus.APPROVED,
        **kwargs,
    ) -> usr_models.User:
        user_data = {
            "username": username,
            "password_hash": get_password_hash(password),
            "email": f"{username}@example.com",
            "name": kwargs.pop("name", username.capitalize()),
            "role": role,
            "status": status,
            **kwargs,
        }
        user = usr_models.User(**user_data)
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user
    return _create_user


@pytest_asyncio.fixture(scope="function")
async def test_admin_user(user_factory: Callable) -> usr_models.User:
    return await user_factory("sysadm", "sysadmpass123", role=usr_models.UserRole.ADMIN, name="System Admin")


@pytest_asyncio.fixture(scope="function")
async def test_user(user_factory: Callable) -> usr_models.User:
    return await user_factory("staff", "staffpass123", role=usr_models.UserRole.STAFF, name="Staff Member")


# --- 인증 클라이언트 픽스처 ---
@pytest_asyncio.fixture(scope="function")
def authorized_client_factory(db_session: AsyncSession):
    """
    특정 사용자로 로그인된 AsyncClient를 생성하는 비동기 컨텍스트 매니저 팩토리를 반환합니다.
    DB 세션만 테스트 세션으로 바꾸고, 사용자와 역할은 각 요청의 Bearer 토큰으로 확인합니다.
    따라서 한 테스트에서 관리자 클라이언트와 Staff 클라이언트를 함께 사용할 수 있습니다.
    """
    @asynccontextmanager
    async def _create_client_context(user: usr_models.User, password: str) -> AsyncGenerator[AsyncClient, None]:
        def override_get_session():
            yield db_session

        original_overrides = main_app.dependency_overrides.copy()
        try:
            main_app.dependency_overrides.update({
                get_session: override_get_session,
                deps.get_db_session: override_get_session,
            })

            transport = ASGITransport(app=main_app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                login_data = {"username": user.username, "password": password}
                res = await client.post("/api/v1/usr/auth/token", data=login_data)
                if res.status_code != 200:
                    pytest.fail(f"Login failed for {user.username}: {res.text}")

                token = res.json()["access_token"]
                client.headers["Authorization"] = f"Bearer {token}"
                yield client
        finally:
            main_app.dependency_overrides.clear()
            main_app.dependency_overrides.update(original_overrides)

    return _create_client_context


@pytest_asyncio.fixture(scope="function")
async def admin_client(authorized_client_factory, test_admin_user: usr_models.User) -> AsyncGenerator[AsyncClient, None]:
    """관리자로 인증된 클라이언트를 반환합니다."""
    async with authorized_client_factory(test_admin_user, "sysadmpass123") as client:
        yield client


@pytest_asyncio.fixture(scope="function")
async def authorized_client(authorized_client_factory, test_user: usr_models.User) -> AsyncGenerator[AsyncClient, None]:
    """Staff 사용자로 인증된 클라이언트를 반환합니다."""
    async with authorized_client_factory(test_user, "staffpass123") as client:
        yield client


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """인증되지 않은 사용자를 위한 AsyncClient. 테스트용 DB 세션만 주입합니다."""
    def override_get_session():
        yield db_session

    original_overrides = main_app.dependency_overrides.copy()
    try:
        main_app.dependency_overrides[get_session] = override_get_session
        main_app.dependency_overrides[deps.get_db_session] = override_get_session
        async with AsyncClient(transport=ASGITransport(app=main_app), base_url="http://test") as async_client:
            yield async_client
    finally:
        main_app.dependency_overrides.clear()
        main_app.dependency_overrides.update(original_overrides)


# --- 도메인별 공통 픽스처 ---
@pytest_asyncio.fixture
async def test_location(db_session: AsyncSession) -> loc_models.Location:
    location = loc_models.Location(location_name="Aisle 1", description="Main aisle")
    db_session.add(location)
    await db_session.commit()
    await db_session.refresh(location)
    return location


@pytest_asyncio.fixture
async def test_supplier(db_session: AsyncSession) -> ven_models.Supplier:
    supplier = ven_models.Supplier(
        supplier_name="Acme Supply",
        contact_person="Jane Kim",
        contact_email="orders@acme.example.com",
        contact_phone="010-1234-5678",
    )
    db_session.add(supplier)
    await db_session.commit()
    await db_session.refresh(supplier)
    return supplier


@pytest_asyncio.fixture
async def test_category(db_session: AsyncSession) -> inv_models.Category:
    category = inv_models.Category(category_name="Hardware")
    db_session.add(category)
    await db_session.commit()
    await db_session.refresh(category)
    return category


@pytest_asyncio.fixture
def item_factory(db_session: AsyncSession, test_category, test_location):
    """수량과 재주문 기준을 지정해 재고 품목을 만드는 팩토리."""
    async def _create_item(item_name: str, quantity: int = 0, reorder_level: int = 10, **kwargs) -> inv_models.InventoryItem:
        item = inv_models.InventoryItem(
            item_name=item_name,
            quantity=quantity,
            reorder_level=reorder_level,
            category_id=kwargs.pop("category_id", test_category.id),
            location_id=kwargs.pop("location_id", test_location.id),
            **kwargs,
        )
        db_session.add(item)
        await db_session.commit()
        await db_session.refresh(item)
        return item
    return _create_item
