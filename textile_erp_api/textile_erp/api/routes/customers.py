from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from textile_erp.core.deps import MANAGERS, TenantContext, get_tenant_context, get_tenant_session, require_roles
from textile_erp.schemas.common import ApiResponse, ok, ok_list
from textile_erp.schemas.partners import CustomerCreate, CustomerRead, CustomerUpdate
from textile_erp.services.partners import CustomerService

router = APIRouter(prefix="/customers", tags=["Customers"])


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=ApiResponse[List[CustomerRead]],
    summary="List customers",
    description="Search matches code, name or email.",
)
async def list_customers(
    search: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    rows = await CustomerService(session, ctx).list_customers(
        search=search, is_active=is_active, limit=limit, offset=offset
    )
    return ok_list(CustomerRead, rows)


# PUBLIC_INTERFACE
@router.get("/{customer_id}", response_model=ApiResponse[CustomerRead], summary="Get customer")
async def get_customer(
    customer_id: UUID = Path(..., description="Customer ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    return ok(CustomerRead.model_validate(await CustomerService(session, ctx).get_customer(customer_id)))


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=ApiResponse[CustomerRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create customer",
    description="Code CUST-### is assigned per company.",
)
async def create_customer(
    payload: CustomerCreate,
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    customer = await CustomerService(session, ctx).create_customer(payload)
    return ok(CustomerRead.model_validate(customer), "Customer created")


# PUBLIC_INTERFACE
@router.put("/{customer_id}", response_model=ApiResponse[CustomerRead], summary="Update customer")
async def update_customer(
    payload: CustomerUpdate,
    customer_id: UUID = Path(..., description="Customer ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    customer = await CustomerService(session, ctx).update_customer(customer_id, payload)
    return ok(CustomerRead.model_validate(customer), "Customer updated")


# PUBLIC_INTERFACE
@router.delete("/{customer_id}", response_model=ApiResponse[None], summary="Delete customer")
async def delete_customer(
    customer_id: UUID = Path(..., description="Customer ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    await CustomerService(session, ctx).delete_customer(customer_id)
    return ok(None, "Customer deleted")
