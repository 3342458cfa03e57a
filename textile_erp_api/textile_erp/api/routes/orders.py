from __future__ import annotations

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from textile_erp.core.deps import MANAGERS, TenantContext, get_tenant_context, get_tenant_session, require_roles
from textile_erp.schemas.common import ApiResponse, ok, ok_list
from textile_erp.schemas.enums import OrderPriority, OrderStatus
from textile_erp.schemas.orders import OrderCreate, OrderRead, OrderStatusUpdate, OrderUpdate
from textile_erp.services.orders import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=ApiResponse[List[OrderRead]],
    summary="List orders",
    description="Active orders of the current company, newest first.",
)
async def list_orders(
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    priority: Optional[OrderPriority] = Query(None),
    customer_id: Optional[UUID] = Query(None),
    customer_name: Optional[str] = Query(None, description="Case-insensitive contains"),
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    rows = await OrderService(session, ctx).list_orders(
        status=status_filter.value if status_filter else None,
        priority=priority.value if priority else None,
        customer_id=customer_id,
        customer_name=customer_name,
        from_date=from_date,
        to_date=to_date,
        limit=limit,
        offset=offset,
    )
    return ok_list(OrderRead, rows)


# PUBLIC_INTERFACE
@router.get("/{order_code}", response_model=ApiResponse[OrderRead], summary="Get order by code")
async def get_order(
    order_code: str = Path(..., description="Order code, e.g. SO001"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    return ok(OrderRead.model_validate(await OrderService(session, ctx).get_order(order_code)))


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=ApiResponse[OrderRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create order",
    description="Create a DRAFT order. Line amounts and totals are computed on the server.",
)
async def create_order(
    payload: OrderCreate,
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    order = await OrderService(session, ctx).create_order(payload)
    return ok(OrderRead.model_validate(order), "Order created")


# PUBLIC_INTERFACE
@router.put(
    "/{order_code}",
    response_model=ApiResponse[OrderRead],
    summary="Update order",
    description="Not allowed once DELIVERED or CANCELLED. Sending items replaces all lines.",
)
async def update_order(
    payload: OrderUpdate,
    order_code: str = Path(..., description="Order code"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    order = await OrderService(session, ctx).update_order(order_code, payload)
    return ok(OrderRead.model_validate(order), "Order updated")


# PUBLIC_INTERFACE
@router.patch(
    "/{order_code}/status",
    response_model=ApiResponse[OrderRead],
    summary="Update order status",
    description="Move along DRAFT, CONFIRMED, IN_PRODUCTION, READY_TO_SHIP, SHIPPED, DELIVERED or cancel.",
)
async def update_order_status(
    payload: OrderStatusUpdate,
    order_code: str = Path(..., description="Order code"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    order = await OrderService(session, ctx).update_status(order_code, payload)
    return ok(OrderRead.model_validate(order), f"Order status is {order.status}")


# PUBLIC_INTERFACE
@router.delete("/{order_code}", response_model=ApiResponse[None], summary="Delete order")
async def delete_order(
    order_code: str = Path(..., description="Order code"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    await OrderService(session, ctx).delete_order(order_code)
    return ok(None, "Order deleted")
