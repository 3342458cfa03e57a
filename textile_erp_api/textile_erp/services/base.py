from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, Optional, TypeVar

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from textile_erp.core.deps import TenantContext
from textile_erp.core.errors import NotFoundError
from textile_erp.repositories.base import TenantRepository
from textile_erp.services.codes import next_code_from

T = TypeVar("T")


class BaseService:
    """
    Base class for services. Holds a session for use across multiple repositories.

    Services keep business logic and orchestration and delegate data access to
    repositories. Each public operation commits once.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def commit(self) -> None:
        await self.session.commit()


class TenantService(BaseService):
    """Service acting on behalf of a TenantContext (company, user, role)."""

    def __init__(self, session: AsyncSession, ctx: TenantContext) -> None:
        super().__init__(session)
        self.ctx = ctx

    @property
    def company_id(self):
        return self.ctx.company_id

    def repo(self, repo_cls: type[TenantRepository]) -> Any:
        return repo_cls(self.session, self.ctx.company_id)

    async def next_code(self, repo: TenantRepository, column: Any, prefix: str, width: int) -> str:
        """Next per-company business code: last code + 1, zero padded."""
        last = await repo.last_code(column, prefix)
        return next_code_from(last, prefix, width)

    @staticmethod
    def require(entity: Optional[T], name: str, identifier: Any = None) -> T:
        """Return the entity or raise NotFoundError (also for rows of other companies)."""
        if entity is None:
            raise NotFoundError(name, identifier)
        return entity


def apply_changes(entity: Any, values: dict[str, Any], *, skip: Iterable[str] = ()) -> None:
    """Copy provided fields onto an ORM entity."""
    skipped = set(skip)
    for key, value in values.items():
        if key in skipped:
            continue
        setattr(entity, key, value)


def dump(payload: BaseModel, *, exclude_unset: bool = False, exclude: Iterable[str] = ()) -> dict[str, Any]:
    """model_dump with enum members reduced to their stored string values."""
    values = payload.model_dump(exclude_unset=exclude_unset, exclude=set(exclude) or None)
    return {k: (v.value if isinstance(v, Enum) else v) for k, v in values.items()}
