from __future__ import annotations

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from textile_erp.core.deps import MANAGERS, TenantContext, get_tenant_context, get_tenant_session, require_roles
from textile_erp.schemas.common import ApiResponse, ok, ok_list
from textile_erp.schemas.enums import OrderPriority, PurchaseOrderStatus
from textile_erp.schemas.procurement import (
    PurchaseOrderCreate,
    PurchaseOrderRead,
    PurchaseOrderStatusUpdate,
    PurchaseOrderUpdate,
)
from textile_erp.services.purchase_orders import PurchaseOrderService

router = APIRouter(prefix="/purchase-orders", tags=["Purchase orders"])


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=ApiResponse[List[PurchaseOrderRead]],
    summary="List purchase orders",
    description="Active purchase orders of the current company, newest first.",
)
async def list_purchase_orders(
    status_filter: Optional[PurchaseOrderStatus] = Query(None, alias="status"),
    priority: Optional[OrderPriority] = Query(None),
    supplier_id: Optional[UUID] = Query(None),
    supplier_name: Optional[str] = Query(None, description="Case-insensitive contains"),
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    rows = await PurchaseOrderService(session, ctx).list_purchase_orders(
        status=status_filter.value if status_filter else None,
        priority=priority.value if priority else None,
        supplier_id=supplier_id,
        supplier_name=supplier_name,
        from_date=from_date,
        to_date=to_date,
        limit=limit,
        offset=offset,
    )
    return ok_list(PurchaseOrderRead, rows)


# PUBLIC_INTERFACE
@router.get("/{po_code}", response_model=ApiResponse[PurchaseOrderRead], summary="Get purchase order by code")
async def get_purchase_order(
    po_code: str = Path(..., description="Purchase order code, e.g. PO001"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    po = await PurchaseOrderService(session, ctx).get_purchase_order(po_code)
    return ok(PurchaseOrderRead.model_validate(po))


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=ApiResponse[PurchaseOrderRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create purchase order",
    description="Create a DRAFT purchase order. Line amounts and totals are computed from unit_cost on the server.",
)
async def create_purchase_order(
    payload: PurchaseOrderCreate,
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    po = await PurchaseOrderService(session, ctx).create_purchase_order(payload)
    return ok(PurchaseOrderRead.model_validate(po), "Purchase order created")


# PUBLIC_INTERFACE
@router.put(
    "/{po_code}",
    response_model=ApiResponse[PurchaseOrderRead],
    summary="Update purchase order",
    description="Not allowed once RECEIVED or CANCELLED. Sending items replaces all lines.",
)
async def update_purchase_order(
    payload: PurchaseOrderUpdate,
    po_code: str = Path(..., description="Purchase order code"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    po = await PurchaseOrderService(session, ctx).update_purchase_order(po_code, payload)
    return ok(PurchaseOrderRead.model_validate(po), "Purchase order updated")


# PUBLIC_INTERFACE
@router.patch(
    "/{po_code}/status",
    response_model=ApiResponse[PurchaseOrderRead],
    summary="Update purchase order status",
    description="Move along DRAFT, SENT, CONFIRMED, PARTIALLY_RECEIVED, RECEIVED or cancel before receipt.",
)
async def update_purchase_order_status(
    payload: PurchaseOrderStatusUpdate,
    po_code: str = Path(..., description="Purchase order code"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    po = await PurchaseOrderService(session, ctx).update_status(po_code, payload)
    return ok(PurchaseOrderRead.model_validate(po), f"Purchase order status is {po.status}")


# PUBLIC_INTERFACE
@router.delete("/{po_code}", response_model=ApiResponse[None], summary="Delete draft purchase order")
async def delete_purchase_order(
    po_code: str = Path(..., description="Purchase order code"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    await PurchaseOrderService(session, ctx).delete_purchase_order(po_code)
    return ok(None, "Purchase order deleted")
