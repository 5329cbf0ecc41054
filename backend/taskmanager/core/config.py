"""Application configuration via pydantic settings."""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import Field
from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Typed application configuration."""

    app_env: Literal["development", "test", "production"] = Field(
        "development", alias="APP_ENV"
    )
    app_name: str = Field("TaskManager API", alias="APP_NAME")
    api_prefix: str = Field("/api", alias="API_PREFIX")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    database_url: str = Field(
        "sqlite+aiosqlite:///./taskmanager.db", alias="DATABASE_URL"
    )
    sync_database_url: str | None = Field(default=None, alias="SYNC_DATABASE_URL")
    database_create_all: bool = Field(False, alias="DATABASE_CREATE_ALL")

    jwt_secret_key: str = Field(
        "dev_secret_change_me", alias="JWT_SECRET_KEY", min_length=8
    )
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        60 * 24 * 7, alias="ACCESS_TOKEN_EXPIRE_MINUTES"
    )
    password_reset_ttl_minutes: int = Field(60, alias="PASSWORD_RESET_TTL_MINUTES")

    cors_allowlist: Annotated[list[str], NoDecode] = Field(
        default_factory=list, alias="CORS_ALLOWLIST"
    )

    redis_url: str | None = Field(default=None, alias="REDIS_URL")
    rate_limit_default: str = Field("120/minute", alias="RATE_LIMIT_DEFAULT")
    rate_limit_auth: str = Field("10/minute", alias="RATE_LIMIT_AUTH")

    upload_dir: Path = Field(Path("uploads"), alias="UPLOAD_DIR")
    uploads_url_prefix: str = "/uploads"
    theme_max_bytes: int = Field(5 * 1024 * 1024, alias="THEME_MAX_BYTES")

    smtp_host: str | None = Field(default=None, alias="SMTP_HOST")
    smtp_port: int | None = Field(default=None, alias="SMTP_PORT")
    smtp_username: str | None = Field(default=None, alias="SMTP_USER")
    smtp_password: str | None = Field(default=None, alias="SMTP_PASSWORD")
    smtp_from: str | None = Field(default=None, alias="SMTP_FROM")

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[3] / ".env",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @field_validator("cors_allowlist", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()  # type: ignore[call-arg]
