# warehouse/domains/usr/schemas.py

"""
'usr' 도메인의 Pydantic 스키마를 정의하는 모듈입니다.
"""

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field

from warehouse.core.schemas import CamelModel
from .models import UserRole, UserStatus


# =============================================================================
# 1. 인증 (Token) 스키마
# =============================================================================
class Token(BaseModel):
    # OAuth2 표준 응답 필드이므로 snake_case를 그대로 사용합니다.
    access_token: str
    token_type: str


# =============================================================================
# 2. users 테이블 스키마
# =============================================================================
class UserSignup(CamelModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=8, description="평문 비밀번호 (저장 시 해싱)")
    name: str = Field(..., max_length=100)


class UserCreate(UserSignup):
    """관리 스크립트 등에서 역할과 상태를 지정해 생성할 때 사용합니다."""
    role: UserRole = UserRole.STAFF
    status: UserStatus = UserStatus.PENDING


class UserRead(CamelModel):
    id: int
    username: str
    email: str
    name: str
    role: UserRole
    status: UserStatus
    signup_date: Optional[datetime] = None
