# warehouse/domains/usr/crud.py

"""
'usr' 도메인의 CRUD 작업을 담당하는 모듈입니다.
가입 신청(pending) → 관리자 승인(approved) 흐름과 계정 삭제를 처리합니다.
"""

import logging
from typing import List, Optional

from sqlalchemy import or_, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from warehouse.core.crud_base import CRUDBase
from warehouse.core.database import atomic
from warehouse.core.exceptions import ConstraintConflict, NotFoundError
from warehouse.core.security import get_password_hash, verify_password
from warehouse.domains.apt.models import Appointment
from warehouse.domains.inv.models import StockTransaction
from warehouse.domains.rpt.models import ActivityLog
from . import models as usr_models
from . import schemas as usr_schemas

logger = logging.getLogger(__name__)


class CRUDUser(CRUDBase[usr_models.User, usr_schemas.UserCreate, usr_schemas.UserCreate]):
    def __init__(self):
        super().__init__(model=usr_models.User)

    async def get_by_username(self, db: AsyncSession, *, username: str) -> Optional[usr_models.User]:
        return await self.get_by_attribute(db, attribute="username", value=username)

    async def get_by_email(self, db: AsyncSession, *, email: str) -> Optional[usr_models.User]:
        return await self.get_by_attribute(db, attribute="email", value=email)

    async def get_by_login(self, db: AsyncSession, *, login: str) -> Optional[usr_models.User]:
        """사용자명 또는 이메일로 사용자를 조회합니다."""
        statement = select(usr_models.User).where(
            or_(usr_models.User.username == login, usr_models.User.email == login)
        )
        result = await db.execute(statement)
        return result.scalars().first()

    async def get_multi_by_status(
        self, db: AsyncSession, *, status: usr_models.UserStatus, role: Optional[usr_models.UserRole] = None
    ) -> List[usr_models.User]:
        statement = select(usr_models.User).where(usr_models.User.status == status)
        if role is not None:
            statement = statement.where(usr_models.User.role == role)
        if status == usr_models.UserStatus.PENDING:
            statement = statement.order_by(usr_models.User.signup_date.desc(), usr_models.User.id.desc())
        else:
            statement = statement.order_by(usr_models.User.name)
        result = await db.execute(statement)
        return result.scalars().all()

    async def create(self, db: AsyncSession, *, obj_in: usr_schemas.UserCreate) -> usr_models.User:
        """새로운 사용자를 생성하며 비밀번호를 해싱하고 중복을 검사합니다."""
        if await self.get_by_username(db, username=obj_in.username):
            raise ConstraintConflict("Username already exists")
        if await self.get_by_email(db, email=obj_in.email):
            raise ConstraintConflict("Email already registered")

        user_data = obj_in.model_dump(exclude={"password"})
        db_user = usr_models.User(**user_data, password_hash=get_password_hash(obj_in.password))
        db.add(db_user)
        await self._commit(db, "create")
        await db.refresh(db_user)
        return db_user

    async def signup(self, db: AsyncSession, *, obj_in: usr_schemas.UserSignup) -> usr_models.User:
        """가입 신청. 항상 승인 대기 중인 Staff 계정으로 생성됩니다."""
        return await self.create(
            db,
            obj_in=usr_schemas.UserCreate(
                **obj_in.model_dump(),
                role=usr_models.UserRole.STAFF,
                status=usr_models.UserStatus.PENDING,
            ),
        )

    async def authenticate(self, db: AsyncSession, *, login: str, password: str) -> Optional[usr_models.User]:
        """사용자명(또는 이메일)과 비밀번호를 사용하여 사용자를 인증합니다."""
        user = await self.get_by_login(db, login=login)
        if not user:
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    async def approve(self, db: AsyncSession, *, id: int) -> usr_models.User:
        db_user = await self.get(db, id=id)
        if db_user is None:
            raise NotFoundError("User not found")
        return await self.update(db, db_obj=db_user, obj_in={"status": usr_models.UserStatus.APPROVED})

    async def reject(self, db: AsyncSession, *, id: int) -> usr_models.User:
        """승인 대기 중인 가입 신청만 삭제할 수 있습니다."""
        db_user = await self.get(db, id=id)
        if db_user is None or db_user.status != usr_models.UserStatus.PENDING:
            raise NotFoundError("User not found or already processed")
        return await super().delete(db, id=id)

    async def remove(self, db: AsyncSession, *, id: int) -> usr_models.User:
        """
        사용자를 삭제합니다. 입출고 원장, 활동 기록, 예약의 사용자 참조는 NULL로 남기고
        기록 자체는 보존합니다.
        """
        db_user = await self.get(db, id=id)
        if db_user is None:
            raise NotFoundError("User not found")

        async with atomic(db, "user deletion"):
            await db.execute(update(StockTransaction).where(StockTransaction.user_id == id).values(user_id=None))
            await db.execute(update(ActivityLog).where(ActivityLog.user_id == id).values(user_id=None))
            await db.execute(
                update(Appointment).where(Appointment.scheduled_by_user_id == id).values(scheduled_by_user_id=None)
            )
            await db.delete(db_user)
        logger.info("Deleted user %s (%s)", db_user.id, db_user.username)
        return db_user


user = CRUDUser()
