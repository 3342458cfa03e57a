from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from textile_erp.core.deps import MANAGERS, TenantContext, get_tenant_context, get_tenant_session, require_roles
from textile_erp.schemas.common import ApiResponse, EnumOption, enum_options, ok, ok_list
from textile_erp.schemas.enums import AlertStatus, ReservationStatus, ReservationType, StockMovementType
from textile_erp.schemas.inventory import (
    LocationInventoryRead,
    LocationInventoryUpsert,
    ReservationCreate,
    ReservationRead,
    StockAlertRead,
    StockMovementCreate,
    StockMovementRead,
)
from textile_erp.services.inventory import InventoryService

router = APIRouter(prefix="/inventory", tags=["Inventory"])


# PUBLIC_INTERFACE
@router.get(
    "/locations",
    response_model=ApiResponse[List[LocationInventoryRead]],
    summary="List location inventory",
    description="Stock per product and location. low_stock: stock <= reorder level; out_of_stock: stock <= 0.",
)
async def list_location_inventory(
    location_id: Optional[UUID] = Query(None),
    product_id: Optional[UUID] = Query(None),
    low_stock: bool = Query(False),
    out_of_stock: bool = Query(False),
    search: Optional[str] = Query(None, description="Match product name, code or SKU"),
    limit: int = Query(100, ge=1, le=1000, description="Max records"),
    offset: int = Query(0, ge=0, description="Records to skip"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    rows = await InventoryService(session, ctx).list_inventory(
        location_id=location_id,
        product_id=product_id,
        low_stock=low_stock,
        out_of_stock=out_of_stock,
        search=search,
        limit=limit,
        offset=offset,
    )
    return ok_list(LocationInventoryRead, rows)


# PUBLIC_INTERFACE
@router.put(
    "/locations",
    response_model=ApiResponse[LocationInventoryRead],
    summary="Set location stock",
    description="Create or update the stock level of a product at a location.",
)
async def upsert_location_inventory(
    payload: LocationInventoryUpsert,
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    row = await InventoryService(session, ctx).upsert_stock(payload)
    return ok(LocationInventoryRead.model_validate(row), "Inventory updated")


# PUBLIC_INTERFACE
@router.delete(
    "/locations/{row_id}",
    response_model=ApiResponse[None],
    summary="Delete location inventory row",
    description="Refused while the product has active reservations at the location.",
)
async def delete_location_inventory(
    row_id: UUID = Path(..., description="Location inventory row ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    await InventoryService(session, ctx).delete_stock_row(row_id)
    return ok(None, "Inventory record deleted")


# PUBLIC_INTERFACE
@router.get(
    "/movements",
    response_model=ApiResponse[List[StockMovementRead]],
    summary="List stock movements",
    description="Newest first; location matches either side of the movement.",
)
async def list_movements(
    product_id: Optional[UUID] = Query(None),
    location_id: Optional[UUID] = Query(None),
    movement_type: Optional[StockMovementType] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    rows = await InventoryService(session, ctx).list_movements(
        product_id=product_id,
        location_id=location_id,
        movement_type=movement_type.value if movement_type else None,
        limit=limit,
        offset=offset,
    )
    return ok_list(StockMovementRead, rows)


# PUBLIC_INTERFACE
@router.post(
    "/movements",
    response_model=ApiResponse[StockMovementRead],
    status_code=status.HTTP_201_CREATED,
    summary="Record stock movement",
    description="Inbound types add to to_location_id, outbound types take from from_location_id.",
)
async def record_movement(
    payload: StockMovementCreate,
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    movement = await InventoryService(session, ctx).record_movement(payload)
    return ok(StockMovementRead.model_validate(movement), "Stock movement recorded")


# PUBLIC_INTERFACE
@router.get("/reservations", response_model=ApiResponse[List[ReservationRead]], summary="List reservations")
async def list_reservations(
    status_filter: Optional[ReservationStatus] = Query(None, alias="status"),
    product_id: Optional[UUID] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    rows = await InventoryService(session, ctx).list_reservations(
        status=status_filter.value if status_filter else None, product_id=product_id, limit=limit, offset=offset
    )
    return ok_list(ReservationRead, rows)


# PUBLIC_INTERFACE
@router.post(
    "/reservations",
    response_model=ApiResponse[ReservationRead],
    status_code=status.HTTP_201_CREATED,
    summary="Reserve stock",
    description="Needs enough available quantity at the location.",
)
async def create_reservation(
    payload: ReservationCreate,
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    reservation = await InventoryService(session, ctx).reserve(payload)
    return ok(ReservationRead.model_validate(reservation), "Stock reserved")


# PUBLIC_INTERFACE
@router.delete(
    "/reservations/{reservation_id}",
    response_model=ApiResponse[ReservationRead],
    summary="Release reservation",
)
async def release_reservation(
    reservation_id: UUID = Path(..., description="Reservation ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    reservation = await InventoryService(session, ctx).release(reservation_id)
    return ok(ReservationRead.model_validate(reservation), "Reservation released")


# PUBLIC_INTERFACE
@router.get("/alerts", response_model=ApiResponse[List[StockAlertRead]], summary="List stock alerts")
async def list_alerts(
    status_filter: Optional[AlertStatus] = Query(None, alias="status"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    rows = await InventoryService(session, ctx).list_alerts(
        status=status_filter.value if status_filter else None, limit=limit, offset=offset
    )
    return ok_list(StockAlertRead, rows)


# PUBLIC_INTERFACE
@router.patch(
    "/alerts/{alert_id}/acknowledge",
    response_model=ApiResponse[StockAlertRead],
    summary="Acknowledge stock alert",
)
async def acknowledge_alert(
    alert_id: UUID = Path(..., description="Alert ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    alert = await InventoryService(session, ctx).acknowledge_alert(alert_id)
    return ok(StockAlertRead.model_validate(alert), "Alert acknowledged")


# PUBLIC_INTERFACE
@router.get("/movement-types", response_model=ApiResponse[List[EnumOption]], summary="Stock movement types")
async def movement_types(ctx: TenantContext = Depends(get_tenant_context)):
    return ok(enum_options(StockMovementType))


# PUBLIC_INTERFACE
@router.get("/reservation-types", response_model=ApiResponse[List[EnumOption]], summary="Reservation types")
async def reservation_types(ctx: TenantContext = Depends(get_tenant_context)):
    return ok(enum_options(ReservationType))
