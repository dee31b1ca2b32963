# tests/domains/test_usr_n.py

"""
'usr' 도메인 (사용자 및 인증) 관련 API 엔드포인트에 대한 통합 테스트를 정의하는 모듈입니다.

- 가입 신청 → 관리자 승인 → 로그인 흐름
- 승인 대기/승인 사용자 목록, 가입 거절
- 사용자 삭제 (관리자 계정 보호, 원장 기록 보존)
"""

import pytest
from httpx import AsyncClient
from sqlmodel.ext.asyncio.session import AsyncSession

from warehouse.domains.inv import models as inv_models
from warehouse.domains.usr import models as usr_models

SIGNUP_PAYLOAD = {
    "username": "newstaff",
    "email": "newstaff@example.com",
    "password": "newstaffpass123",
    "name": "New Staff",
}


@pytest.mark.asyncio
async def test_signup_creates_pending_staff(client: AsyncClient):
    res = await client.post("/api/v1/usr/auth/signup", json=SIGNUP_PAYLOAD)
    assert res.status_code == 201, res.text
    body = res.json()
    assert body["role"] == "Staff"
    assert body["status"] == "pending"
    assert "password" not in body
    assert "passwordHash" not in body


@pytest.mark.asyncio
async def test_signup_duplicate_username_conflicts(client: AsyncClient, test_user: usr_models.User):
    payload = {**SIGNUP_PAYLOAD, "username": test_user.username}
    res = await client.post("/api/v1/usr/auth/signup", json=payload)
    assert res.status_code == 409


@pytest.mark.asyncio
async def test_pending_user_cannot_log_in(client: AsyncClient, user_factory):
    await user_factory("waiting", "waitingpass123", status=usr_models.UserStatus.PENDING)
    res = await client.post("/api/v1/usr/auth/token", data={"username": "waiting", "password": "waitingpass123"})
    assert res.status_code == 401
    assert res.json()["detail"] == "Account pending approval"


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, test_user: usr_models.User):
    res = await client.post("/api/v1/usr/auth/token", data={"username": test_user.username, "password": "wrong"})
    assert res.status_code == 401


@pytest.mark.asyncio
async def test_login_with_email(client: AsyncClient, test_user: usr_models.User):
    res = await client.post("/api/v1/usr/auth/token", data={"username": test_user.email, "password": "staffpass123"})
    assert res.status_code == 200, res.text
    assert res.json()["token_type"] == "bearer"


@pytest.mark.asyncio
async def test_read_me(authorized_client: AsyncClient, test_user: usr_models.User):
    res = await authorized_client.get("/api/v1/usr/auth/me")
    assert res.status_code == 200
    assert res.json()["username"] == test_user.username


@pytest.mark.asyncio
async def test_admin_approves_pending_user(admin_client: AsyncClient, client: AsyncClient):
    res = await client.post("/api/v1/usr/auth/signup", json=SIGNUP_PAYLOAD)
    user_id = res.json()["id"]

    res = await admin_client.get("/api/v1/usr/users/pending")
    assert [row["id"] for row in res.json()] == [user_id]

    res = await admin_client.post(f"/api/v1/usr/users/{user_id}/approve")
    assert res.status_code == 200
    assert res.json()["message"] == "User approved successfully"

    res = await admin_client.get("/api/v1/usr/users/approved")
    assert user_id in [row["id"] for row in res.json()]

    res = await client.post(
        "/api/v1/usr/auth/token",
        data={"username": SIGNUP_PAYLOAD["username"], "password": SIGNUP_PAYLOAD["password"]},
    )
    assert res.status_code == 200


@pytest.mark.asyncio
async def test_staff_cannot_list_pending_users(authorized_client: AsyncClient):
    res = await authorized_client.get("/api/v1/usr/users/pending")
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_staff_and_admin_clients_keep_their_own_identity(
    authorized_client: AsyncClient, admin_client: AsyncClient
):
    """두 클라이언트를 함께 써도 각 요청은 자신의 토큰 사용자로 인증됩니다."""
    res = await authorized_client.get("/api/v1/usr/auth/me")
    assert res.json()["role"] == "Staff"
    res = await admin_client.get("/api/v1/usr/auth/me")
    assert res.json()["role"] == "Admin"

    res = await authorized_client.get("/api/v1/usr/users/pending")
    assert res.status_code == 403
    res = await admin_client.get("/api/v1/usr/users/pending")
    assert res.status_code == 200


@pytest.mark.asyncio
async def test_reject_only_pending_users(admin_client: AsyncClient, user_factory, test_user: usr_models.User):
    waiting = await user_factory("waiting", "waitingpass123", status=usr_models.UserStatus.PENDING)

    res = await admin_client.delete(f"/api/v1/usr/users/{waiting.id}/reject")
    assert res.status_code == 200
    assert res.json()["message"] == "User rejected and removed"

    res = await admin_client.delete(f"/api/v1/usr/users/{test_user.id}/reject")
    assert res.status_code == 404


@pytest.mark.asyncio
async def test_admin_accounts_cannot_be_deleted(admin_client: AsyncClient, test_admin_user: usr_models.User):
    res = await admin_client.delete(f"/api/v1/usr/users/{test_admin_user.id}")
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_delete_user_keeps_ledger_rows(
    admin_client: AsyncClient, db_session: AsyncSession, user_factory, item_factory
):
    """삭제된 사용자의 입출고 기록은 처리자 없이(NULL) 그대로 남습니다."""
    leaving = await user_factory("leaving", "leavingpass123")
    item = await item_factory("Widget", quantity=5)
    transaction = inv_models.StockTransaction(
        item_id=item.id,
        transaction_type=inv_models.TransactionType.IN,
        quantity=1,
        reason="Restock",
        user_id=leaving.id,
        stock_before=5,
        stock_after=6,
    )
    db_session.add(transaction)
    await db_session.commit()

    res = await admin_client.delete(f"/api/v1/usr/users/{leaving.id}")
    assert res.status_code == 200, res.text
    assert res.json()["message"] == "User account deleted successfully"

    await db_session.refresh(transaction)
    assert transaction.user_id is None
    assert await db_session.get(usr_models.User, leaving.id) is None
