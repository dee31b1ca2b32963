# warehouse/core/config.py

from typing import Optional
from pydantic import EmailStr, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import os

# 프로젝트의 루트 디렉토리 경로를 계산합니다.
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


class Settings(BaseSettings):
    """
    애플리케이션의 모든 설정을 정의하는 Pydantic BaseSettings 모델입니다.
    환경 변수 및 .env 파일에서 값을 자동으로 로드합니다.
    """

    # --- Pydantic Settings 설정 ---
    model_config = SettingsConfigDict(
        env_file=os.path.join(BASE_DIR, '.env'),  # 프로젝트 루트의 .env 파일
        env_file_encoding='utf-8',
        extra='ignore',                      # 모델에 없는 변수는 무시
        case_sensitive=True
    )

    # --- 애플리케이션 기본 설정 ---
    APP_NAME: str = "Warehouse Inventory API"
    APP_VERSION: str = "0.1.0"
    APP_DESCRIPTION: str = "Warehouse inventory, stock ledger and supplier appointment API"
    APP_ENV: str = Field("development", description="Application environment (e.g., development, production, testing)")
    DEBUG_MODE: bool = Field(False, description="Enable SQL echo and verbose logging")

    # --- 데이터베이스 설정 ---
    DATABASE_URL: SecretStr = Field(..., description="Database connection URL (postgresql+asyncpg://...)")
    DB_POOL_SIZE: int = Field(10, description="Minimum pooled connections")
    DB_MAX_OVERFLOW: int = Field(20, description="Extra connections allowed above the pool size")

    # --- JWT (JSON Web Token) 설정 ---
    SECRET_KEY: SecretStr = Field(..., description="Secret key for JWT token signing. Keep this highly secure!")
    ALGORITHM: str = Field("HS256", description="Algorithm used for JWT signing (e.g., HS256)")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(30, description="Access token expiration time in minutes")

    # --- ARQ (Redis) 설정 ---
    REDIS_HOST: str = Field("localhost", description="Redis host for the ARQ worker pool")
    REDIS_PORT: int = Field(6379, description="Redis port for the ARQ worker pool")

    # --- 알림 메일 설정 ---
    # 재고 부족 알림 수신자. 알림 서비스 생성 시 명시적으로 전달됩니다.
    ADMIN_EMAIL: Optional[EmailStr] = Field(None, description="Recipient of low-stock alert emails")
    EMAIL_RELAY_URL: str = Field("https://api.emailjs.com/api/v1.0/email/send", description="Email relay REST endpoint")
    EMAIL_RELAY_SERVICE_ID: Optional[str] = Field(None, description="Relay service id. Email is disabled when unset.")
    EMAIL_RELAY_PUBLIC_KEY: Optional[SecretStr] = Field(None, description="Relay public key (user_id)")
    EMAIL_TEMPLATE_LOW_STOCK: str = Field("template_low_stock", description="Template id for low-stock alerts")
    EMAIL_TEMPLATE_APPOINTMENT: str = Field("template_appointment", description="Template id for supplier appointment emails")
    EMAIL_TEMPLATE_APPOINTMENT_CANCEL: str = Field("template_appointment_cancel", description="Template id for cancellation emails")
    EMAIL_TIMEOUT_SECONDS: float = Field(10.0, description="HTTP timeout for relay requests")
    LOW_STOCK_CHECK_INTERVAL_MINUTES: int = Field(
        5, description="Spacing of the low-stock polling cron job. Must divide 60 (cron minute set)."
    )

    @field_validator("LOW_STOCK_CHECK_INTERVAL_MINUTES")
    @classmethod
    def interval_divides_hour(cls, value: int) -> int:
        # cron 분(minute) 집합으로 실행하므로 60의 약수여야 간격이 일정합니다.
        if value < 1 or 60 % value != 0:
            raise ValueError("LOW_STOCK_CHECK_INTERVAL_MINUTES must be a divisor of 60 (1, 2, 3, 4, 5, 6, 10, 12, 15, 20, 30, 60)")
        return value

    @property
    def email_enabled(self) -> bool:
        return bool(self.EMAIL_RELAY_SERVICE_ID and self.EMAIL_RELAY_PUBLIC_KEY)


settings = Settings()
