"""
Persistence layer: declarative Base, connection settings, engine and sessions,
and the per-transaction company binding used by Row-Level Security.

`models` is imported here so every mapped class is registered on Base.metadata
before Alembic or the API touch it.
"""

from .base import TENANT_GUC, Base
from .session import get_async_session, get_engine, get_session_maker, tenant_context

from . import models as models  # noqa: F401
from .models import TENANT_TABLES

__all__ = [
    "Base",
    "TENANT_GUC",
    "TENANT_TABLES",
    "get_async_session",
    "get_engine",
    "get_session_maker",
    "tenant_context",
    "models",
]
