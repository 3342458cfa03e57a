from __future__ import annotations

import logging
from typing import List, Optional
from uuid import UUID

from textile_erp.core.errors import BusinessRuleError
from textile_erp.db.models.location import Location
from textile_erp.repositories.locations import LocationRepository
from textile_erp.schemas.locations import LocationCreate, LocationUpdate
from textile_erp.services.base import TenantService, apply_changes, dump
from textile_erp.services.codes import LOCATION_CODE

logger = logging.getLogger(__name__)


class LocationService(TenantService):
    def __init__(self, session, ctx) -> None:
        super().__init__(session, ctx)
        self.locations: LocationRepository = self.repo(LocationRepository)

    async def list_locations(self, **filters) -> List[Location]:
        return await self.locations.list_locations(**filters)

    async def get_location(self, location_id: UUID) -> Location:
        return self.require(await self.locations.get(location_id), "Location", location_id)

    # PUBLIC_INTERFACE
    async def create_location(self, payload: LocationCreate) -> Location:
        """Create a location with the next L### code; optionally make it the default."""
        data = dump(payload)
        code = await self.next_code(self.locations, Location.location_code, *LOCATION_CODE)
        location = Location(location_code=code, is_headquarters=False, is_active=True, **data)
        await self.locations.create(location)
        if location.is_default:
            await self.locations.clear_default(except_id=location.id)
        await self.commit()
        await self.session.refresh(location)
        logger.info("Created location %s (%s)", location.location_code, location.name)
        return location

    async def update_location(self, location_id: UUID, payload: LocationUpdate) -> Location:
        location = await self.get_location(location_id)
        changes = dump(payload, exclude_unset=True)
        if changes.get("is_active") is False:
            self._ensure_removable(location)
        apply_changes(location, changes)
        await self.commit()
        await self.session.refresh(location)
        logger.info("Updated location %s", location.location_code)
        return location

    # PUBLIC_INTERFACE
    async def set_default(self, location_id: UUID) -> Location:
        """Make one location the company default; every other default is cleared in the same transaction."""
        location = await self.get_location(location_id)
        if not location.is_active:
            raise BusinessRuleError("Cannot make an inactive location the default")
        await self.locations.clear_default(except_id=location.id)
        location.is_default = True
        await self.commit()
        await self.session.refresh(location)
        logger.info("Location %s is now the default", location.location_code)
        return location

    async def delete_location(self, location_id: UUID) -> None:
        location = await self.get_location(location_id)
        self._ensure_removable(location)
        location.is_active = False
        await self.commit()
        logger.info("Deactivated location %s", location.location_code)

    @staticmethod
    def _ensure_removable(location: Location) -> None:
        if location.is_default:
            raise BusinessRuleError("Cannot deactivate the default location")
        if location.is_headquarters:
            raise BusinessRuleError("Cannot deactivate the headquarters location")

    async def headquarters(self) -> Optional[Location]:
        return await self.locations.get_headquarters()
