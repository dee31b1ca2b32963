# warehouse/core/schemas.py

"""
API 경계의 공통 Pydantic 기반 스키마.

Python 코드와 DB 컬럼은 snake_case만 사용하고, JSON 직렬화 시에만 camelCase로
변환합니다. 필드 이름 변환은 이 클래스 한 곳에서만 일어납니다.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,   # snake_case 입력도 허용
        from_attributes=True,    # ORM 객체에서 바로 변환
    )


class Message(CamelModel):
    """단순 성공 메시지 응답."""
    message: str
