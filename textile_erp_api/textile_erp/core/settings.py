from __future__ import annotations

import json
from functools import lru_cache
from typing import Annotated, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

_ANY = ["*"]
CsvList = Annotated[List[str], NoDecode]


class AppSettings(BaseSettings):
    """
    API-level options: metadata, CORS, startup tasks, JWT and demo seeding.

    Database connection options are read separately by textile_erp.db.config.
    """

    APP_NAME: str = "Textile ERP API"
    APP_DESCRIPTION: str = (
        "Multi-tenant textile manufacturing ERP: companies and members, locations, "
        "catalog and stock, customers and suppliers, sales orders, machines, "
        "quality control, invoices and bills, reports."
    )
    APP_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: CsvList = Field(default_factory=lambda: list(_ANY), description="JSON array or comma list")
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: CsvList = Field(default_factory=lambda: list(_ANY))
    CORS_ALLOW_HEADERS: CsvList = Field(default_factory=lambda: list(_ANY))

    RUN_MIGRATIONS_ON_STARTUP: bool = Field(default=True, description="alembic upgrade head when the app starts")
    AUTO_SEED: bool = Field(default=False, description="Create the demo company after migrating")

    JWT_SECRET_KEY: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60, ge=1)
    REFRESH_TOKEN_EXPIRE_MINUTES: int = Field(default=60 * 24 * 7, ge=1)

    DEFAULT_CURRENCY: str = Field(default="INR", min_length=3, max_length=3)
    SEED_COMPANY_SLUG: str = "demo-textiles"
    SEED_OWNER_EMAIL: str = "owner@demo-textiles.example"
    SEED_OWNER_PASSWORD: str = "ChangeMe123!"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @field_validator("CORS_ORIGINS", "CORS_ALLOW_METHODS", "CORS_ALLOW_HEADERS", mode="before")
    @classmethod
    def _split_list(cls, value):
        if isinstance(value, str):
            text = value.strip()
            value = json.loads(text) if text.startswith("[") else [part.strip() for part in text.split(",")]
        return [v for v in (value or []) if v] or list(_ANY)


# PUBLIC_INTERFACE
@lru_cache
def get_app_settings() -> AppSettings:
    """Settings are read once per process."""
    return AppSettings()
