"""
Async engine, session factory and the company binding for Row-Level Security.

The engine is created on first use so that importing the API (tests, OpenAPI
generation) never needs a reachable database.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from functools import lru_cache
from typing import AsyncGenerator, Union
from uuid import UUID

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from .base import TENANT_GUC
from .config import get_settings

# is_local=true: the value lives for the current transaction only.
_SET_TENANT_SQL = text(f"SELECT set_config('{TENANT_GUC}', :company_id, true)")


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_engine() -> AsyncEngine:
    db = get_settings()
    return create_async_engine(
        db.async_database_url,
        echo=db.SQL_ECHO,
        pool_pre_ping=True,
        pool_size=db.DB_POOL_SIZE,
        max_overflow=db.DB_MAX_OVERFLOW,
    )


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """Session factory shared by requests, the seeder and scripts."""
    return async_sessionmaker(bind=get_engine(), expire_on_commit=False, autoflush=False)


# PUBLIC_INTERFACE
async def dispose_engine() -> None:
    """Close pooled connections; a later get_engine() builds a fresh engine."""
    if get_engine.cache_info().currsize:
        await get_engine().dispose()
    get_session_maker.cache_clear()
    get_engine.cache_clear()


# PUBLIC_INTERFACE
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    async with get_session_maker()() as session:
        yield session


# PUBLIC_INTERFACE
async def set_current_tenant(session: AsyncSession, company_id: Union[str, UUID]) -> None:
    """
    Set the tenant GUC for the session's current transaction.

    Row-Level Security policies compare company_id against
    current_setting('app.company_id', true).
    """
    await session.execute(_SET_TENANT_SQL, {"company_id": str(company_id)})


# PUBLIC_INTERFACE
@asynccontextmanager
async def tenant_context(
    session: AsyncSession, company_id: Union[str, UUID]
) -> AsyncGenerator[AsyncSession, None]:
    """
    Bind the session to a company for the duration of the block.

    The GUC is transaction-local, so it is applied to the open transaction (if
    any) and again whenever the session begins a new one, e.g. after a commit.

    Usage:
        async with tenant_context(session, company_id):
            ...
    """
    company = str(company_id)

    def _apply_on_begin(_sync_session, _transaction, connection) -> None:
        connection.execute(_SET_TENANT_SQL, {"company_id": company})

    event.listen(session.sync_session, "after_begin", _apply_on_begin)
    try:
        if session.in_transaction():
            await set_current_tenant(session, company)
        yield session
    finally:
        event.remove(session.sync_session, "after_begin", _apply_on_begin)
