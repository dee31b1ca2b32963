# warehouse/domains/ven/routers.py

"""
'ven' 도메인 (공급업체 관리)의 API 엔드포인트를 정의하는 모듈입니다.
"""

from typing import List
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlmodel.ext.asyncio.session import AsyncSession

from warehouse.core import dependencies as deps
from warehouse.domains.usr.models import User as UsrUser
from warehouse.domains.ven import crud as ven_crud
from warehouse.domains.ven import schemas as ven_schemas

router = APIRouter(
    tags=["Supplier Management (공급업체 관리)"],
    responses={404: {"description": "Not found"}},
)


# =============================================================================
# 1. suppliers 엔드포인트
# =============================================================================
@router.post("/suppliers", response_model=ven_schemas.SupplierRead, status_code=status.HTTP_201_CREATED, summary="공급업체 등록")
async def create_supplier(
    supplier_create: ven_schemas.SupplierCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    return await ven_crud.supplier.create(db, obj_in=supplier_create)


@router.get("/suppliers", response_model=List[ven_schemas.SupplierRead], summary="공급업체 목록 조회")
async def read_suppliers(
    active_only: bool = False,
    skip: int = 0,
    limit: int = 100,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    return await ven_crud.supplier.get_multi_ordered(db, active_only=active_only, skip=skip, limit=limit)


@router.get("/suppliers/{supplier_id}", response_model=ven_schemas.SupplierRead, summary="특정 공급업체 조회")
async def read_supplier(
    supplier_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    db_supplier = await ven_crud.supplier.get(db, id=supplier_id)
    if db_supplier is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Supplier not found")
    return db_supplier


@router.put("/suppliers/{supplier_id}", response_model=ven_schemas.SupplierRead, summary="공급업체 정보 업데이트")
async def update_supplier(
    supplier_id: int,
    supplier_update: ven_schemas.SupplierUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    db_supplier = await ven_crud.supplier.get(db, id=supplier_id)
    if db_supplier is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Supplier not found")
    return await ven_crud.supplier.update(db, db_obj=db_supplier, obj_in=supplier_update)


@router.delete("/suppliers/{supplier_id}", status_code=status.HTTP_204_NO_CONTENT, summary="공급업체 삭제")
async def delete_supplier(
    supplier_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    db_supplier = await ven_crud.supplier.delete(db, id=supplier_id)
    if db_supplier is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Supplier not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
