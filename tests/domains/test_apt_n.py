# tests/domains/test_apt_n.py

"""
'apt' 도메인 (공급업체 입고 예약) 관련 API 엔드포인트에 대한 통합 테스트를 정의하는 모듈입니다.

- 예약 등록/조회/수정: `/apt/appointments`
- 입고 완료: `POST /apt/appointments/{id}/complete`
    - 모든 품목의 수량 증가, 공급업체 변경, 입고 원장 기록이 한 트랜잭션으로 처리됩니다.
    - 종결된 예약은 다시 완료할 수 없습니다.
- 예약 취소: `POST /apt/appointments/{id}/cancel`
"""

from datetime import date, timedelta

import pytest
from httpx import AsyncClient
from redis.exceptions import RedisError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from warehouse.domains.apt import models as apt_models
from warehouse.domains.inv import crud as inv_crud
from warehouse.domains.inv import models as inv_models
from warehouse.main import app as main_app

APPOINTMENTS_URL = "/api/v1/apt/appointments"


def _appointment_payload(supplier_id: int, lines, **overrides):
    payload = {
        "supplierId": supplier_id,
        "date": (date.today() + timedelta(days=3)).isoformat(),
        "time": "09:30:00",
        "notes": "Dock 2",
        "items": [{"itemId": item_id, "quantity": quantity} for item_id, quantity in lines],
    }
    payload.update(overrides)
    return payload


async def _schedule(client: AsyncClient, supplier_id: int, lines, **overrides) -> dict:
    res = await client.post(APPOINTMENTS_URL, json=_appointment_payload(supplier_id, lines, **overrides))
    assert res.status_code == 201, res.text
    return res.json()


async def _restock_transactions(db_session: AsyncSession):
    result = await db_session.execute(
        select(inv_models.StockTransaction)
        .where(inv_models.StockTransaction.reason == apt_models.RESTOCK_REASON)
        .order_by(inv_models.StockTransaction.id)
    )
    return result.scalars().all()


async def _status(db_session: AsyncSession, appointment_id: int) -> apt_models.AppointmentStatus:
    appointment = await db_session.get(apt_models.Appointment, appointment_id)
    await db_session.refresh(appointment)
    return appointment.status


# =============================================================================
# 1. 예약 등록 / 조회 / 수정
# =============================================================================
@pytest.mark.asyncio
async def test_schedule_appointment_with_lines(
    authorized_client: AsyncClient, item_factory, test_supplier
):
    item_a = await item_factory("Widget A", quantity=3)
    item_b = await item_factory("Widget B", quantity=8)

    created = await _schedule(authorized_client, test_supplier.id, [(item_a.id, 10), (item_b.id, 5)])
    assert created["status"] == "pending"
    assert created["supplierName"] == "Acme Supply"
    assert created["scheduledBy"] == "Staff Member"
    assert [(line["itemName"], line["quantity"]) for line in created["items"]] == [
        ("Widget A", 10), ("Widget B", 5),
    ]

    res = await authorized_client.get(f"{APPOINTMENTS_URL}/{created['id']}")
    assert res.status_code == 200
    assert res.json()["items"] == created["items"]


@pytest.mark.asyncio
async def test_schedule_with_unknown_item_not_found(authorized_client: AsyncClient, test_supplier):
    res = await authorized_client.post(APPOINTMENTS_URL, json=_appointment_payload(test_supplier.id, [(777, 1)]))
    assert res.status_code == 404


@pytest.mark.asyncio
async def test_schedule_with_unknown_supplier_not_found(authorized_client: AsyncClient, item_factory):
    item = await item_factory("Widget", quantity=1)
    res = await authorized_client.post(APPOINTMENTS_URL, json=_appointment_payload(999, [(item.id, 1)]))
    assert res.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [{"items": []}, {"status": "completed"}, {"items": [{"itemId": 1, "quantity": 0}]}],
)
async def test_schedule_invalid_payload_rejected(
    authorized_client: AsyncClient, item_factory, test_supplier, overrides
):
    item = await item_factory("Widget", quantity=1)
    res = await authorized_client.post(
        APPOINTMENTS_URL, json=_appointment_payload(test_supplier.id, [(item.id, 1)], **overrides)
    )
    assert res.status_code == 422


@pytest.mark.asyncio
async def test_list_appointments_filtered_by_status(
    authorized_client: AsyncClient, item_factory, test_supplier
):
    item = await item_factory("Widget", quantity=1)
    first = await _schedule(authorized_client, test_supplier.id, [(item.id, 1)])
    second = await _schedule(authorized_client, test_supplier.id, [(item.id, 2)], status="confirmed")

    res = await authorized_client.get(APPOINTMENTS_URL)
    assert {row["id"] for row in res.json()} == {first["id"], second["id"]}

    res = await authorized_client.get(APPOINTMENTS_URL, params={"status": "confirmed"})
    assert [row["id"] for row in res.json()] == [second["id"]]


@pytest.mark.asyncio
async def test_edit_replaces_all_lines(
    authorized_client: AsyncClient, db_session: AsyncSession, item_factory, test_supplier
):
    """수정 요청의 품목 목록이 기존 품목을 전부 대체합니다."""
    item_a = await item_factory("Widget A", quantity=1)
    item_b = await item_factory("Widget B", quantity=1)
    item_c = await item_factory("Widget C", quantity=1)
    created = await _schedule(authorized_client, test_supplier.id, [(item_a.id, 4), (item_b.id, 6)])

    res = await authorized_client.put(
        f"{APPOINTMENTS_URL}/{created['id']}",
        json=_appointment_payload(test_supplier.id, [(item_c.id, 9)], status="confirmed", notes="Moved"),
    )
    assert res.status_code == 200, res.text
    updated = res.json()
    assert updated["status"] == "confirmed"
    assert updated["notes"] == "Moved"
    assert [(line["itemId"], line["quantity"]) for line in updated["items"]] == [(item_c.id, 9)]

    result = await db_session.execute(
        select(apt_models.AppointmentItem).where(apt_models.AppointmentItem.appointment_id == created["id"])
    )
    assert [line.item_id for line in result.scalars().all()] == [item_c.id]


# =============================================================================
# 2. 입고 완료
# =============================================================================
@pytest.mark.asyncio
async def test_complete_restocks_every_line(
    authorized_client: AsyncClient, db_session: AsyncSession, item_factory, test_supplier, test_user
):
    """A(3)+10, B(8)+5 → 둘 다 13. 품목마다 입고 거래 한 건, 공급업체 변경, 예약 완료."""
    item_a = await item_factory("Widget A", quantity=3)
    item_b = await item_factory("Widget B", quantity=8)
    created = await _schedule(authorized_client, test_supplier.id, [(item_a.id, 10), (item_b.id, 5)])

    res = await authorized_client.post(f"{APPOINTMENTS_URL}/{created['id']}/complete")
    assert res.status_code == 200, res.text
    assert res.json()["message"] == "Appointment completed and inventory updated"

    for item in (item_a, item_b):
        await db_session.refresh(item)
        assert item.quantity == 13
        assert item.supplier_id == test_supplier.id

    transactions = await _restock_transactions(db_session)
    assert [(t.item_id, t.quantity, t.stock_before, t.stock_after) for t in transactions] == [
        (item_a.id, 10, 3, 13),
        (item_b.id, 5, 8, 13),
    ]
    assert all(t.transaction_type == inv_models.TransactionType.IN for t in transactions)
    assert all(t.user_id == test_user.id for t in transactions)
    assert await _status(db_session, created["id"]) == apt_models.AppointmentStatus.COMPLETED


@pytest.mark.asyncio
async def test_complete_records_one_transaction_per_line(
    authorized_client: AsyncClient, db_session: AsyncSession, item_factory, test_supplier
):
    items = [await item_factory(f"Part {n}", quantity=n) for n in range(1, 5)]
    created = await _schedule(authorized_client, test_supplier.id, [(item.id, 2) for item in items])

    res = await authorized_client.post(f"{APPOINTMENTS_URL}/{created['id']}/complete", json={})
    assert res.status_code == 200

    transactions = await _restock_transactions(db_session)
    assert [t.item_id for t in transactions] == [item.id for item in items]


@pytest.mark.asyncio
async def test_complete_with_repeated_item_chains_snapshots(
    authorized_client: AsyncClient, db_session: AsyncSession, item_factory, test_supplier
):
    item = await item_factory("Widget", quantity=3)
    created = await _schedule(authorized_client, test_supplier.id, [(item.id, 4), (item.id, 6)])

    res = await authorized_client.post(f"{APPOINTMENTS_URL}/{created['id']}/complete")
    assert res.status_code == 200

    await db_session.refresh(item)
    assert item.quantity == 13
    transactions = await _restock_transactions(db_session)
    assert [(t.stock_before, t.stock_after) for t in transactions] == [(3, 7), (7, 13)]


@pytest.mark.asyncio
async def test_complete_records_explicit_user(
    authorized_client: AsyncClient, db_session: AsyncSession, item_factory, test_supplier, test_admin_user
):
    item = await item_factory("Widget", quantity=0)
    created = await _schedule(authorized_client, test_supplier.id, [(item.id, 1)])

    res = await authorized_client.post(
        f"{APPOINTMENTS_URL}/{created['id']}/complete", json={"userId": test_admin_user.id}
    )
    assert res.status_code == 200
    transactions = await _restock_transactions(db_session)
    assert transactions[0].user_id == test_admin_user.id


@pytest.mark.asyncio
async def test_complete_clears_low_stock_alert(
    authorized_client: AsyncClient, db_session: AsyncSession, item_factory, test_supplier
):
    item = await item_factory("Widget", quantity=3, reorder_level=10)
    await inv_crud.low_stock_alert.mark_sent(db_session, item.id)
    created = await _schedule(authorized_client, test_supplier.id, [(item.id, 10)])

    res = await authorized_client.post(f"{APPOINTMENTS_URL}/{created['id']}/complete")
    assert res.status_code == 200
    assert await inv_crud.low_stock_alert.get_by_item(db_session, item.id) is None


@pytest.mark.asyncio
async def test_complete_rolls_back_when_an_item_is_missing(
    authorized_client: AsyncClient, db_session: AsyncSession, item_factory, test_supplier, monkeypatch
):
    """
    두 번째 품목을 잠금 조회에서 찾지 못하면 전체가 롤백되어 첫 번째 품목도 변경되지 않습니다.
    품목 행을 지우면 외래 키 CASCADE로 예약 품목도 지워지므로, 잠금 조회 결과를 바꿔 재현합니다.
    """
    item_a = await item_factory("Widget A", quantity=3)
    item_b = await item_factory("Widget B", quantity=8)
    created = await _schedule(authorized_client, test_supplier.id, [(item_a.id, 10), (item_b.id, 5)])

    missing_id = item_b.id
    lock_item = inv_crud.inventory_item.get_for_update

    async def lock_item_b_missing(db, id):
        if id == missing_id:
            return None
        return await lock_item(db, id)

    monkeypatch.setattr(inv_crud.inventory_item, "get_for_update", lock_item_b_missing)

    res = await authorized_client.post(f"{APPOINTMENTS_URL}/{created['id']}/complete")
    assert res.status_code == 404

    await db_session.refresh(item_a)
    assert item_a.quantity == 3
    assert item_a.supplier_id is None
    assert await _restock_transactions(db_session) == []
    assert await _status(db_session, created["id"]) == apt_models.AppointmentStatus.PENDING


@pytest.mark.asyncio
async def test_complete_twice_conflicts_without_second_restock(
    authorized_client: AsyncClient, db_session: AsyncSession, item_factory, test_supplier
):
    item = await item_factory("Widget", quantity=3)
    created = await _schedule(authorized_client, test_supplier.id, [(item.id, 10)])

    res = await authorized_client.post(f"{APPOINTMENTS_URL}/{created['id']}/complete")
    assert res.status_code == 200
    res = await authorized_client.post(f"{APPOINTMENTS_URL}/{created['id']}/complete")
    assert res.status_code == 409

    await db_session.refresh(item)
    assert item.quantity == 13
    assert len(await _restock_transactions(db_session)) == 1


@pytest.mark.asyncio
async def test_complete_missing_appointment_not_found(authorized_client: AsyncClient):
    res = await authorized_client.post(f"{APPOINTMENTS_URL}/5150/complete")
    assert res.status_code == 404


@pytest.mark.asyncio
async def test_edit_completed_appointment_conflicts(
    authorized_client: AsyncClient, item_factory, test_supplier
):
    item = await item_factory("Widget", quantity=3)
    created = await _schedule(authorized_client, test_supplier.id, [(item.id, 1)])
    await authorized_client.post(f"{APPOINTMENTS_URL}/{created['id']}/complete")

    res = await authorized_client.put(
        f"{APPOINTMENTS_URL}/{created['id']}", json=_appointment_payload(test_supplier.id, [(item.id, 5)])
    )
    assert res.status_code == 409


# =============================================================================
# 3. 예약 취소
# =============================================================================
@pytest.mark.asyncio
async def test_cancel_changes_status_only(
    authorized_client: AsyncClient, db_session: AsyncSession, item_factory, test_supplier
):
    item = await item_factory("Widget", quantity=3)
    created = await _schedule(authorized_client, test_supplier.id, [(item.id, 10)])

    res = await authorized_client.post(f"{APPOINTMENTS_URL}/{created['id']}/cancel")
    assert res.status_code == 200
    assert res.json()["message"] == "Appointment cancelled"

    await db_session.refresh(item)
    assert item.quantity == 3
    assert await _restock_transactions(db_session) == []
    assert await _status(db_session, created["id"]) == apt_models.AppointmentStatus.CANCELLED


@pytest.mark.asyncio
async def test_cancel_twice_is_idempotent(authorized_client: AsyncClient, item_factory, test_supplier):
    item = await item_factory("Widget", quantity=3)
    created = await _schedule(authorized_client, test_supplier.id, [(item.id, 1)])

    for _ in range(2):
        res = await authorized_client.post(f"{APPOINTMENTS_URL}/{created['id']}/cancel")
        assert res.status_code == 200


@pytest.mark.asyncio
async def test_cancel_after_complete_conflicts(
    authorized_client: AsyncClient, db_session: AsyncSession, item_factory, test_supplier
):
    item = await item_factory("Widget", quantity=3)
    created = await _schedule(authorized_client, test_supplier.id, [(item.id, 1)])
    await authorized_client.post(f"{APPOINTMENTS_URL}/{created['id']}/complete")

    res = await authorized_client.post(f"{APPOINTMENTS_URL}/{created['id']}/cancel")
    assert res.status_code == 409
    assert await _status(db_session, created["id"]) == apt_models.AppointmentStatus.COMPLETED


@pytest.mark.asyncio
async def test_complete_after_cancel_conflicts(
    authorized_client: AsyncClient, db_session: AsyncSession, item_factory, test_supplier
):
    item = await item_factory("Widget", quantity=3)
    created = await _schedule(authorized_client, test_supplier.id, [(item.id, 10)])
    await authorized_client.post(f"{APPOINTMENTS_URL}/{created['id']}/cancel")

    res = await authorized_client.post(f"{APPOINTMENTS_URL}/{created['id']}/complete")
    assert res.status_code == 409
    await db_session.refresh(item)
    assert item.quantity == 3


@pytest.mark.asyncio
async def test_cancel_missing_appointment_not_found(authorized_client: AsyncClient):
    res = await authorized_client.post(f"{APPOINTMENTS_URL}/5150/cancel")
    assert res.status_code == 404


class _UnreachableRedisPool:
    """작업 등록 때마다 연결 오류를 내는 arq 풀."""

    def __init__(self):
        self.attempts = []

    async def enqueue_job(self, function, *args):
        self.attempts.append((function, args))
        raise RedisError("Connection refused")


@pytest.mark.asyncio
async def test_email_enqueue_failure_keeps_committed_changes(
    authorized_client: AsyncClient, db_session: AsyncSession, item_factory, test_supplier, monkeypatch
):
    """메일 작업 등록에 실패해도 이미 커밋된 등록/취소는 성공으로 응답합니다."""
    pool = _UnreachableRedisPool()
    monkeypatch.setattr(main_app.state, "redis", pool, raising=False)
    item = await item_factory("Widget", quantity=3)

    created = await _schedule(authorized_client, test_supplier.id, [(item.id, 4)])
    assert await _status(db_session, created["id"]) == apt_models.AppointmentStatus.PENDING

    res = await authorized_client.post(f"{APPOINTMENTS_URL}/{created['id']}/cancel")
    assert res.status_code == 200
    assert await _status(db_session, created["id"]) == apt_models.AppointmentStatus.CANCELLED
    assert [function for function, _ in pool.attempts] == [
        "send_appointment_email_task",
        "send_appointment_cancel_email_task",
    ]
