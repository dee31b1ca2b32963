# warehouse/domains/usr/routers.py

"""
'usr' 도메인 (사용자 및 인증)과 관련된 API 엔드포인트를 정의하는 모듈입니다.
"""

from typing import List
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlmodel.ext.asyncio.session import AsyncSession

from warehouse.core.config import settings
from warehouse.core import dependencies as deps
from warehouse.core.schemas import Message
from . import crud as usr_crud
from . import models as usr_models
from . import schemas as usr_schemas


router = APIRouter(
    tags=["User Management (사용자 관리)"],
    responses={404: {"description": "Not found"}},
)


# =============================================================================
# 1. 인증 (Authentication) 엔드포인트
# =============================================================================
@router.post("/auth/token", response_model=usr_schemas.Token, summary="Access Token 획득")
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(deps.get_db_session),
):
    """사용자명 또는 이메일로 로그인합니다. 승인된 계정만 토큰을 받을 수 있습니다."""
    user = await usr_crud.user.authenticate(db, login=form_data.username, password=form_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if user.status == usr_models.UserStatus.PENDING:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Account pending approval")
    if user.status != usr_models.UserStatus.APPROVED:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = deps.create_access_token(data={"sub": user.username}, expires_delta=access_token_expires)
    return {"access_token": access_token, "token_type": "bearer"}


@router.get("/auth/me", response_model=usr_schemas.UserRead, summary="현재 사용자 정보 조회")
async def read_users_me(current_user: usr_models.User = Depends(deps.get_current_active_user)):
    return current_user


@router.post(
    "/auth/signup",
    response_model=usr_schemas.UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="가입 신청",
)
async def signup(
    user_in: usr_schemas.UserSignup,
    db: AsyncSession = Depends(deps.get_db_session),
):
    """Staff 계정 가입을 신청합니다. 관리자가 승인해야 로그인할 수 있습니다."""
    return await usr_crud.user.signup(db, obj_in=user_in)


# =============================================================================
# 2. 사용자 승인/관리 엔드포인트 (관리자)
# =============================================================================
@router.get("/users/pending", response_model=List[usr_schemas.UserRead], summary="승인 대기 사용자 목록")
async def read_pending_users(
    db: AsyncSession = Depends(deps.get_db_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    return await usr_crud.user.get_multi_by_status(db, status=usr_models.UserStatus.PENDING)


@router.get("/users/approved", response_model=List[usr_schemas.UserRead], summary="승인된 Staff 목록")
async def read_approved_users(
    db: AsyncSession = Depends(deps.get_db_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    return await usr_crud.user.get_multi_by_status(
        db, status=usr_models.UserStatus.APPROVED, role=usr_models.UserRole.STAFF
    )


@router.post("/users/{user_id}/approve", response_model=Message, summary="가입 승인")
async def approve_user(
    user_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    await usr_crud.user.approve(db, id=user_id)
    return {"message": "User approved successfully"}


@router.delete("/users/{user_id}/reject", response_model=Message, summary="가입 거절")
async def reject_user(
    user_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    await usr_crud.user.reject(db, id=user_id)
    return {"message": "User rejected and removed"}


@router.delete("/users/{user_id}", response_model=Message, summary="사용자 삭제")
async def delete_user(
    user_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    """
    사용자 계정을 삭제합니다. 관리자 계정(본인 포함)은 삭제할 수 없으며,
    삭제된 사용자가 남긴 거래 기록은 처리자 없이 그대로 보존됩니다.
    """
    db_user = await usr_crud.user.get(db, id=user_id)
    if db_user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    if db_user.role == usr_models.UserRole.ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cannot delete admin accounts")
    await usr_crud.user.remove(db, id=user_id)
    return {"message": "User account deleted successfully"}
