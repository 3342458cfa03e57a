from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from textile_erp.core.deps import ADMINS, TenantContext, get_tenant_context, get_tenant_session, require_roles
from textile_erp.schemas.common import ApiResponse, ok, ok_list
from textile_erp.schemas.enums import LocationType
from textile_erp.schemas.locations import LocationCreate, LocationRead, LocationUpdate
from textile_erp.services.locations import LocationService

router = APIRouter(prefix="/locations", tags=["Locations"])


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=ApiResponse[List[LocationRead]],
    summary="List locations",
    description="Branches, warehouses, factories and stores of the current company.",
)
async def list_locations(
    type: Optional[LocationType] = Query(None, description="Filter by location type"),
    is_active: Optional[bool] = Query(None, description="Filter by active flag"),
    search: Optional[str] = Query(None, description="Match name, code or city"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    rows = await LocationService(session, ctx).list_locations(
        type=type.value if type else None, is_active=is_active, search=search, limit=limit, offset=offset
    )
    return ok_list(LocationRead, rows)


# PUBLIC_INTERFACE
@router.get("/{location_id}", response_model=ApiResponse[LocationRead], summary="Get location")
async def get_location(
    location_id: UUID = Path(..., description="Location ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    return ok(LocationRead.model_validate(await LocationService(session, ctx).get_location(location_id)))


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=ApiResponse[LocationRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create location",
    description="Code L### is assigned per company. Marking it default clears the previous default.",
)
async def create_location(
    payload: LocationCreate,
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*ADMINS)),
):
    location = await LocationService(session, ctx).create_location(payload)
    return ok(LocationRead.model_validate(location), "Location created")


# PUBLIC_INTERFACE
@router.put("/{location_id}", response_model=ApiResponse[LocationRead], summary="Update location")
async def update_location(
    payload: LocationUpdate,
    location_id: UUID = Path(..., description="Location ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*ADMINS)),
):
    location = await LocationService(session, ctx).update_location(location_id, payload)
    return ok(LocationRead.model_validate(location), "Location updated")


# PUBLIC_INTERFACE
@router.post(
    "/{location_id}/set-default",
    response_model=ApiResponse[LocationRead],
    summary="Set default location",
    description="Make this the company's only default location.",
)
async def set_default_location(
    location_id: UUID = Path(..., description="Location ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*ADMINS)),
):
    location = await LocationService(session, ctx).set_default(location_id)
    return ok(LocationRead.model_validate(location), "Default location updated")


# PUBLIC_INTERFACE
@router.delete(
    "/{location_id}",
    response_model=ApiResponse[None],
    summary="Delete location",
    description="Soft delete. The default and headquarters locations can't be removed.",
)
async def delete_location(
    location_id: UUID = Path(..., description="Location ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*ADMINS)),
):
    await LocationService(session, ctx).delete_location(location_id)
    return ok(None, "Location deleted")
