"""Storefront settings, read from the environment and ``.env``.

Nested sections map to ``SECTION__FIELD`` variables, e.g.
``LEDGER__MAX_RETRIES=5`` or ``DATABASE__URL=sqlite+aiosqlite:///./shop.db``.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])


class DatabaseSettings(BaseModel):
    url: str = "sqlite+aiosqlite:///./storefront.db"
    echo: bool = False
    pool_size: Optional[int] = None
    max_overflow: Optional[int] = None
    # SQLite only: seconds a writer waits for the database lock.
    busy_timeout: float = 5.0


class SecuritySettings(BaseModel):
    secret_key: str = Field(default="change-me", min_length=8)
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7


class LedgerSettings(BaseModel):
    """Wallet and order ledger tuning."""

    currency: str = "USD"
    # Attempts per atomic operation before the caller sees Unavailable.
    max_retries: int = Field(default=3, ge=1)
    retry_backoff_seconds: float = Field(default=0.05, ge=0)
    max_quantity: int = Field(default=10_000_000, ge=1)


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production", "test"] = "development"
    debug: bool = False
    project_name: str = "Growth Storefront Ledger"
    api_prefix: str = "/api"

    server: ServerSettings = ServerSettings()
    database: DatabaseSettings = DatabaseSettings()
    security: SecuritySettings = SecuritySettings()
    ledger: LedgerSettings = LedgerSettings()
    logging: LoggingSettings = LoggingSettings()

    @property
    def database_url(self) -> str:
        return self.database.url

    @property
    def secret_key(self) -> str:
        return self.security.secret_key

    @property
    def algorithm(self) -> str:
        return self.security.algorithm

    @property
    def access_token_expire_minutes(self) -> int:
        return self.security.access_token_expire_minutes


@lru_cache()
def get_settings() -> Settings:
    return Settings()
