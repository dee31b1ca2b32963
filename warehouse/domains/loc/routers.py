# warehouse/domains/loc/routers.py

"""
'loc' 도메인의 API 엔드포인트를 정의하는 모듈입니다.
조회는 인증된 사용자 누구나, 생성/수정/삭제는 관리자만 가능합니다.
"""

from typing import List
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlmodel.ext.asyncio.session import AsyncSession

from warehouse.core import dependencies as deps
from warehouse.domains.usr.models import User as UsrUser
from warehouse.domains.loc import crud as loc_crud
from warehouse.domains.loc import schemas as loc_schemas

router = APIRouter(
    tags=["Location Management (보관 장소 관리)"],
    responses={404: {"description": "Not found"}},
)


# =============================================================================
# 1. locations 엔드포인트
# =============================================================================
@router.post("/locations", response_model=loc_schemas.LocationRead, status_code=status.HTTP_201_CREATED, summary="새 장소 생성")
async def create_location(
    location_create: loc_schemas.LocationCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    return await loc_crud.location.create(db, obj_in=location_create)


@router.get("/locations", response_model=List[loc_schemas.LocationRead], summary="장소 목록 조회")
async def read_locations(
    skip: int = 0,
    limit: int = 100,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    return await loc_crud.location.get_multi(db, skip=skip, limit=limit)


@router.get("/locations/{location_id}", response_model=loc_schemas.LocationRead, summary="특정 장소 조회")
async def read_location(
    location_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    db_location = await loc_crud.location.get(db, id=location_id)
    if db_location is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Location not found")
    return db_location


@router.put("/locations/{location_id}", response_model=loc_schemas.LocationRead, summary="장소 정보 업데이트")
async def update_location(
    location_id: int,
    location_update: loc_schemas.LocationUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    db_location = await loc_crud.location.get(db, id=location_id)
    if db_location is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Location not found")
    return await loc_crud.location.update(db, db_obj=db_location, obj_in=location_update)


@router.delete("/locations/{location_id}", status_code=status.HTTP_204_NO_CONTENT, summary="장소 삭제")
async def delete_location(
    location_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    """장소를 삭제합니다. 이 장소에 있던 품목은 location_id가 NULL이 됩니다."""
    db_location = await loc_crud.location.delete(db, id=location_id)
    if db_location is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Location not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
