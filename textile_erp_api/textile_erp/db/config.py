from __future__ import annotations

from typing import Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL, make_url

ASYNC_DRIVER = "postgresql+asyncpg"
SYNC_DRIVER = "postgresql"


class Settings(BaseSettings):
    """
    PostgreSQL connection and pool options.

    POSTGRES_URL wins when set; otherwise the URL is assembled from the
    POSTGRES_* parts, of which user, password and database are mandatory.
    """

    POSTGRES_URL: Optional[str] = Field(default=None, description="Full connection URL, any postgres driver")
    POSTGRES_USER: Optional[str] = None
    POSTGRES_PASSWORD: Optional[str] = None
    POSTGRES_DB: Optional[str] = None
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432

    SQL_ECHO: bool = False
    DB_POOL_SIZE: int = Field(default=5, ge=1)
    DB_MAX_OVERFLOW: int = Field(default=10, ge=0)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @model_validator(mode="after")
    def _require_target(self) -> "Settings":
        if not self.POSTGRES_URL and not (self.POSTGRES_USER and self.POSTGRES_PASSWORD and self.POSTGRES_DB):
            raise ValueError("Set POSTGRES_URL, or POSTGRES_USER, POSTGRES_PASSWORD and POSTGRES_DB")
        return self

    def url(self) -> URL:
        if self.POSTGRES_URL:
            return make_url(self.POSTGRES_URL)
        return URL.create(
            SYNC_DRIVER,
            username=self.POSTGRES_USER,
            password=self.POSTGRES_PASSWORD,
            host=self.POSTGRES_HOST,
            port=self.POSTGRES_PORT,
            database=self.POSTGRES_DB,
        )

    @property
    def async_database_url(self) -> str:
        """URL on the asyncpg driver, used by the AsyncEngine."""
        return self.url().set(drivername=ASYNC_DRIVER).render_as_string(hide_password=False)

    @property
    def sync_database_url(self) -> str:
        """Driverless URL; Alembic only needs it in offline mode."""
        return self.url().set(drivername=SYNC_DRIVER).render_as_string(hide_password=False)


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Database settings from the environment (or .env)."""
    return Settings()
