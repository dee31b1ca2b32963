# tests/domains/test_ven_n.py

"""
'ven' 도메인 (공급업체) 관련 API 엔드포인트에 대한 통합 테스트를 정의하는 모듈입니다.
"""

import pytest
from httpx import AsyncClient

from warehouse.domains.ven.models import Supplier


@pytest.mark.asyncio
async def test_supplier_crud_admin(admin_client: AsyncClient):
    payload = {
        "supplierName": "Northwind",
        "contactPerson": "Sam Lee",
        "contactEmail": "sam@northwind.example.com",
        "contactPhone": "02-555-0100",
    }
    res = await admin_client.post("/api/v1/ven/suppliers", json=payload)
    assert res.status_code == 201, res.text
    supplier_id = res.json()["id"]
    assert res.json()["isActive"] is True

    res = await admin_client.put(f"/api/v1/ven/suppliers/{supplier_id}", json={"isActive": False})
    assert res.status_code == 200
    assert res.json()["isActive"] is False

    res = await admin_client.get("/api/v1/ven/suppliers", params={"active_only": True})
    assert supplier_id not in [row["id"] for row in res.json()]

    res = await admin_client.delete(f"/api/v1/ven/suppliers/{supplier_id}")
    assert res.status_code == 204


@pytest.mark.asyncio
async def test_supplier_invalid_email_rejected(admin_client: AsyncClient):
    res = await admin_client.post(
        "/api/v1/ven/suppliers", json={"supplierName": "Bad Mail", "contactEmail": "not-an-email"}
    )
    assert res.status_code == 422


@pytest.mark.asyncio
async def test_suppliers_ordered_by_name(authorized_client: AsyncClient, test_supplier, db_session):
    db_session.add(Supplier(supplier_name="Zenith Parts"))
    db_session.add(Supplier(supplier_name="Bolt House"))
    await db_session.commit()

    res = await authorized_client.get("/api/v1/ven/suppliers")
    assert res.status_code == 200
    assert [row["supplierName"] for row in res.json()] == ["Acme Supply", "Bolt House", "Zenith Parts"]


@pytest.mark.asyncio
async def test_staff_cannot_delete_supplier(authorized_client: AsyncClient, test_supplier):
    res = await authorized_client.delete(f"/api/v1/ven/suppliers/{test_supplier.id}")
    assert res.status_code == 403
