# flake8: noqa
# scripts/create_admin.py

import asyncio
import typer
from sqlmodel.ext.asyncio.session import AsyncSession

from warehouse.core.database import AsyncSessionLocal
from warehouse.core.exceptions import ConstraintConflict
from warehouse.domains.usr import crud as usr_crud
from warehouse.domains.usr import schemas as usr_schemas
from warehouse.domains.usr.models import UserRole, UserStatus

cli = typer.Typer()


async def create_admin_user(db: AsyncSession, user_in: usr_schemas.UserCreate) -> bool:
    """
    승인된 관리자(Admin) 계정을 생성합니다. 사용자명이나 이메일이 이미 있으면 만들지 않습니다.
    """
    try:
        await usr_crud.user.create(db, obj_in=user_in)
    except ConstraintConflict as e:
        typer.echo(f"오류: {e.detail}", err=True)
        return False
    typer.echo(f"관리자 계정이 성공적으로 생성되었습니다: {user_in.email} ({user_in.username})")
    return True


@cli.command()
def main(
    email: str = typer.Option(
        ..., '--email', '-e',
        prompt="관리자 이메일을 입력하세요",
        help="생성할 관리자 계정의 이메일 주소입니다."
    ),
    username: str = typer.Option(
        ..., '--username', '-u',
        prompt="관리자 사용자명(ID)을 입력하세요",
        help="로그인 시 사용할 사용자명(ID)입니다."
    ),
    password: str = typer.Option(
        ..., '--password', '-p',
        prompt="관리자 비밀번호를 입력하세요",
        hide_input=True,
        confirmation_prompt=True,
        help="생성할 관리자 계정의 비밀번호입니다. (최소 8자 이상)"
    ),
    name: str = typer.Option(
        "Admin", '--name', '-n',
        prompt="관리자 이름을 입력하세요",
        help="관리자의 이름입니다."
    ),
):
    """
    창고 재고 관리 API의 첫 관리자 계정을 생성합니다.
    가입 신청(signup)으로 만든 계정은 관리자 승인이 필요하므로, 최초 관리자는 이 스크립트로 만듭니다.
    """
    if len(password) < 8:
        typer.echo("오류: 비밀번호는 최소 8자 이상이어야 합니다.", err=True)
        raise typer.Abort()

    user_data = usr_schemas.UserCreate(
        email=email,
        username=username,
        password=password,
        name=name,
        role=UserRole.ADMIN,
        status=UserStatus.APPROVED,
    )

    async def run_creation() -> bool:
        async with AsyncSessionLocal() as db:
            return await create_admin_user(db=db, user_in=user_data)

    if not asyncio.run(run_creation()):
        raise typer.Exit(code=1)


if __name__ == "__main__":
    cli()
