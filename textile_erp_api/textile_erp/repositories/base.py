from __future__ import annotations

import re
from typing import Any, Generic, List, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import ColumnElement, Executable, Select, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

ModelT = TypeVar("ModelT")


def numbered_code(column: Any, prefix: str) -> ColumnElement[bool]:
    """`column` is `prefix` followed by digits only (Postgres regex match)."""
    return column.op("~")(f"^{re.escape(prefix)}[0-9]+$")


class BaseRepository:
    """
    Base class for repositories providing common helpers.

    Repositories never commit; the owning service commits once per operation.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def execute(self, statement: Executable, params: Optional[dict[str, Any]] = None):
        """Execute a SQLAlchemy statement."""
        if params:
            return await self.session.execute(statement, params)
        return await self.session.execute(statement)

    async def scalars(self, statement: Executable, params: Optional[dict[str, Any]] = None):
        """Execute and return scalars."""
        result = await self.execute(statement, params)
        return result.scalars()

    async def scalar_one_or_none(self, statement: Executable, params: Optional[dict[str, Any]] = None):
        """Execute and return a single scalar or None."""
        result = await self.execute(statement, params)
        return result.scalar_one_or_none()

    async def add(self, entity: Any) -> None:
        """Add a single entity to session."""
        self.session.add(entity)

    async def flush(self) -> None:
        await self.session.flush()


class TenantRepository(BaseRepository, Generic[ModelT]):
    """
    Repository for company-owned rows.

    Every statement built here carries `company_id == <context company>`; inserts
    are stamped with it. RLS on the database side enforces the same rule.
    """

    model: Type[ModelT]

    def __init__(self, session: AsyncSession, company_id: UUID) -> None:
        super().__init__(session)
        self.company_id = company_id

    def tenant_filter(self) -> ColumnElement[bool]:
        return self.model.company_id == self.company_id  # type: ignore[attr-defined]

    def scoped(self, *entities: Any) -> Select:
        """SELECT restricted to the current company (defaults to the model)."""
        stmt = select(*entities) if entities else select(self.model)
        return stmt.where(self.tenant_filter())

    def stamp(self, entity: ModelT) -> ModelT:
        entity.company_id = self.company_id  # type: ignore[attr-defined]
        return entity

    async def get(self, entity_id: UUID) -> Optional[ModelT]:
        stmt = self.scoped().where(self.model.id == entity_id)  # type: ignore[attr-defined]
        return await self.scalar_one_or_none(stmt)

    async def get_active(self, entity_id: UUID) -> Optional[ModelT]:
        """Like get, but soft-deleted rows (is_active false) are not found."""
        stmt = self.scoped().where(
            self.model.id == entity_id, self.model.is_active.is_(True)  # type: ignore[attr-defined]
        )
        return await self.scalar_one_or_none(stmt)

    async def list_where(
        self,
        *criteria: ColumnElement[bool],
        order_by: Any = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[ModelT]:
        stmt = self.scoped().where(*criteria)
        if order_by is not None:
            stmt = stmt.order_by(*order_by) if isinstance(order_by, (list, tuple)) else stmt.order_by(order_by)
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        res = await self.scalars(stmt)
        return list(res)

    async def count_where(self, *criteria: ColumnElement[bool]) -> int:
        stmt = self.scoped(func.count(self.model.id)).where(*criteria)  # type: ignore[attr-defined]
        result = await self.execute(stmt)
        return int(result.scalar_one() or 0)

    async def create(self, entity: ModelT) -> ModelT:
        """Stamp, add and flush so server defaults (id, timestamps) are available."""
        self.stamp(entity)
        await self.add(entity)
        await self.flush()
        return entity

    async def update_by_id(self, entity_id: UUID, values: dict[str, Any]) -> int:
        if not values:
            return 0
        stmt = (
            update(self.model)
            .where(self.model.id == entity_id, self.tenant_filter())  # type: ignore[attr-defined]
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.execute(stmt)
        return result.rowcount or 0

    async def delete_by_id(self, entity_id: UUID) -> int:
        stmt = delete(self.model).where(
            self.model.id == entity_id, self.tenant_filter()  # type: ignore[attr-defined]
        )
        result = await self.execute(stmt)
        return result.rowcount or 0

    async def last_code(self, column: Any, prefix: str) -> Optional[str]:
        """
        Highest generated business code with the given prefix in this company.

        Only codes made of the prefix and digits count; hand-entered codes that
        share the prefix (CS-RED-XL) are ignored.
        """
        stmt = (
            self.scoped(column)
            .where(numbered_code(column, prefix))
            .order_by(func.length(column).desc(), column.desc())
            .limit(1)
        )
        return await self.scalar_one_or_none(stmt)
