"""Application configuration."""

import secrets
import warnings
from pathlib import Path
from typing import Annotated, Any, Literal, Self

from pydantic import (
    AnyUrl,
    BeforeValidator,
    HttpUrl,
    computed_field,
    model_validator,
)
from pydantic_core import MultiHostUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_cors(v: Any) -> list[str] | str:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",")]
    elif isinstance(v, list | str):
        return v
    raise ValueError(v)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Application
    PROJECT_NAME: str = "newsdeck"
    SERVER_PORT: int = 8000
    ROOTPATH: str = ""
    API_PREFIX: str = "/api"
    SECRET_KEY: str = secrets.token_urlsafe(32)
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 30  # 30 days
    FRONTEND_HOST: str = "http://localhost:5173"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Path | None = None  # 设置后按天滚动写入文件
    LOG_RETENTION_DAYS: int = 30
    JWT_ALGORITHM: str = "HS256"

    BACKEND_CORS_ORIGINS: Annotated[
        list[AnyUrl] | str, BeforeValidator(parse_cors)
    ] = []

    @computed_field
    @property
    def all_cors_origins(self) -> list[str]:
        return [str(origin).rstrip("/") for origin in self.BACKEND_CORS_ORIGINS] + [
            self.FRONTEND_HOST
        ]

    CORS_ALLOW_METHODS: list[str] = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    CORS_ALLOW_HEADERS: list[str] = ["Authorization", "Content-Type"]

    # Sentry
    SENTRY_DSN: HttpUrl | None = None

    # PostgreSQL
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = "newsdeck"
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10

    @computed_field
    @property
    def database_url_object(self) -> MultiHostUrl:
        return MultiHostUrl.build(
            scheme="postgresql+psycopg",
            username=self.POSTGRES_USER,
            password=self.POSTGRES_PASSWORD,
            host=self.POSTGRES_SERVER,
            port=self.POSTGRES_PORT,
            path=self.POSTGRES_DB,
        )

    @computed_field
    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        return str(self.database_url_object)

    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_SOCKET_TIMEOUT_SEC: float = 5.0

    # Aggregation
    AGGREGATE_STALE_TTL_SEC: int = 30 * 60
    AGGREGATE_MAX_ITEMS_PER_SOURCE: int = 10
    AGGREGATE_MAX_ITEMS: int = 50
    AGGREGATE_RESPONSE_CACHE_TTL_SEC: int = 5 * 60
    SOURCE_CACHE_RETENTION_SEC: int = 7 * 24 * 3600
    SOURCE_DEFAULT_INTERVAL_MS: int = 10 * 60 * 1000
    AGGREGATE_FORCE_REQUIRES_AUTH: bool = False  # 强制刷新是否要求登录

    # Source catalog & upstream getters
    SOURCE_CATALOG_URL: str | None = None
    SOURCE_CATALOG_FETCH_TIMEOUT_SEC: float = 10.0
    NEWSNOW_API_BASE_URL: str = "https://newsnow.busiyi.world"
    NEWSNOW_API_PATH: str = "/api/s"
    FETCHER_TIMEOUT_SEC: float = 15.0
    FETCHER_USER_AGENT: str = "newsdeck/0.1 (+https://github.com/newsdeck)"

    # Remote sync
    SYNC_ENABLED: bool = True  # 关闭后同步接口返回 506
    SYNC_NOT_PROVISIONED_STATUS: int = 506
    SYNC_NOT_PROVISIONED_MARKER: str = "SYNC_NOT_PROVISIONED"
    SYNC_PUSH_DEBOUNCE_SEC: float = 10.0

    # Aggregated views
    VIEW_NAME_MAX_LENGTH: int = 50
    VIEW_MAX_SOURCES: int = 100

    # Local-first client
    CLIENT_API_BASE_URL: str = "http://localhost:8000/api"
    CLIENT_STORAGE_PATH: Path = Path.home() / ".newsdeck" / "storage.json"
    CLIENT_HTTP_TIMEOUT_SEC: float = 15.0

    def _check_default_secret(self, var_name: str, value: str | None) -> None:
        if value == "changethis":
            message = (
                f'The value of {var_name} is "changethis", '
                "for security, please change it, at least for deployments."
            )
            if self.ENVIRONMENT == "local":
                warnings.warn(message, stacklevel=1)
            else:
                raise ValueError(message)

    @model_validator(mode="after")
    def _enforce_non_default_secrets(self) -> Self:
        self._check_default_secret("SECRET_KEY", self.SECRET_KEY)
        return self


settings = Settings()
