"""
Application configuration.
"""

from typing import Any, Optional

from pydantic import Field, PostgresDsn, RedisDsn, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SERVICE_NAMES = ("gateway", "category", "item", "auth")


class Settings(BaseSettings):
    """
    Application settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
    )

    # Core Settings
    PROJECT_NAME: str = "Storefront Backend"
    PROJECT_DESCRIPTION: str = "E-commerce category, item and auth services behind an API gateway"
    VERSION: str = "1.0.0"
    API_VERSION: str = "v1"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    SERVICE_NAME: str = "gateway"

    # API Settings
    API_PREFIX: str = "/api"
    CORS_ORIGINS_STR: str = "*"

    @field_validator("SERVICE_NAME")
    @classmethod
    def validate_service_name(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in SERVICE_NAMES:
            raise ValueError(f"SERVICE_NAME must be one of {', '.join(SERVICE_NAMES)}")
        return v

    # Database Settings
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "ecommerce_db"
    POSTGRES_PORT: str = "5432"
    DATABASE_URI: Optional[str] = Field(default=None, validate_default=True)
    AUTO_CREATE_TABLES: bool = True

    @field_validator("DATABASE_URI", mode="before")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str], info: ValidationInfo) -> Any:
        if isinstance(v, str):
            return v

        data = info.data
        if not data:
            raise ValueError("Missing data for DATABASE_URI")

        return str(
            PostgresDsn.build(
                scheme="postgresql+asyncpg",
                username=data.get("POSTGRES_USER"),
                password=data.get("POSTGRES_PASSWORD"),
                host=data.get("POSTGRES_SERVER"),
                port=int(data.get("POSTGRES_PORT", 5432)),
                path=f"{data.get('POSTGRES_DB') or ''}",
            )
        )

    # Redis Settings (refresh token registry)
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: Optional[str] = None
    REDIS_URI: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("REDIS_URI", mode="before")
    @classmethod
    def assemble_redis_connection(cls, v: Optional[str], info: ValidationInfo) -> Any:
        if isinstance(v, str):
            return v

        data = info.data
        if not data:
            raise ValueError("Missing data for REDIS_URI")

        return str(
            RedisDsn.build(
                scheme="redis",
                host=data.get("REDIS_HOST", "localhost"),
                port=int(data.get("REDIS_PORT", 6379)),
                path=str(data.get("REDIS_DB", 0)),
                password=data.get("REDIS_PASSWORD"),
            )
        )

    # Auth Settings
    SECRET_KEY: str = "development_secret_key"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_SECONDS: int = 3600
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    BCRYPT_ROUNDS: int = 12

    @property
    def REFRESH_TOKEN_EXPIRE_SECONDS(self) -> int:
        return self.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60

    # Gateway Settings
    CATEGORY_SERVICE_URL: str = "http://localhost:4001"
    ITEM_SERVICE_URL: str = "http://localhost:4002"
    AUTH_SERVICE_URL: str = "http://localhost:4003"
    UPSTREAM_TIMEOUT_SECONDS: float = 10.0

    # Sentry Settings
    SENTRY_DSN: Optional[str] = None
    SENTRY_TRACES_SAMPLE_RATE: float = 0.1

    # Prometheus Metrics
    ENABLE_METRICS: bool = True

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = True

    # Tracing Settings
    ENABLE_TRACING: bool = False
    OTLP_ENDPOINT: Optional[str] = None


settings = Settings()
