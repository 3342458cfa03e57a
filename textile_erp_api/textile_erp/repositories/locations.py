from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy import or_, update

from textile_erp.db.models.location import Location
from .base import TenantRepository


class LocationRepository(TenantRepository[Location]):
    """Repository for company locations."""

    model = Location

    async def list_locations(
        self,
        *,
        type: Optional[str] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Location]:
        criteria = []
        if type:
            criteria.append(Location.type == type)
        if is_active is not None:
            criteria.append(Location.is_active.is_(is_active))
        if search:
            like = f"%{search}%"
            criteria.append(
                or_(Location.name.ilike(like), Location.location_code.ilike(like), Location.city.ilike(like))
            )
        return await self.list_where(
            *criteria, order_by=Location.location_code, limit=limit, offset=offset
        )

    async def get_headquarters(self) -> Optional[Location]:
        stmt = self.scoped().where(Location.is_headquarters.is_(True)).limit(1)
        return await self.scalar_one_or_none(stmt)

    async def clear_default(self, except_id: Optional[UUID] = None) -> None:
        stmt = update(Location).where(self.tenant_filter(), Location.is_default.is_(True))
        if except_id is not None:
            stmt = stmt.where(Location.id != except_id)
        await self.execute(stmt.values(is_default=False).execution_options(synchronize_session="fetch"))
