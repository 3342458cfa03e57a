from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from textile_erp.core.deps import MANAGERS, TenantContext, get_tenant_context, get_tenant_session, require_roles
from textile_erp.schemas.common import ApiResponse, ok, ok_list
from textile_erp.schemas.partners import SupplierCreate, SupplierRead, SupplierUpdate
from textile_erp.services.partners import SupplierService

router = APIRouter(prefix="/suppliers", tags=["Suppliers"])


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=ApiResponse[List[SupplierRead]],
    summary="List suppliers",
    description="Search matches code, name or email.",
)
async def list_suppliers(
    search: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    rows = await SupplierService(session, ctx).list_suppliers(
        search=search, is_active=is_active, limit=limit, offset=offset
    )
    return ok_list(SupplierRead, rows)


# PUBLIC_INTERFACE
@router.get("/{supplier_id}", response_model=ApiResponse[SupplierRead], summary="Get supplier")
async def get_supplier(
    supplier_id: UUID = Path(..., description="Supplier ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    return ok(SupplierRead.model_validate(await SupplierService(session, ctx).get_supplier(supplier_id)))


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=ApiResponse[SupplierRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create supplier",
    description="Code SUPP-### is assigned per company.",
)
async def create_supplier(
    payload: SupplierCreate,
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    supplier = await SupplierService(session, ctx).create_supplier(payload)
    return ok(SupplierRead.model_validate(supplier), "Supplier created")


# PUBLIC_INTERFACE
@router.put("/{supplier_id}", response_model=ApiResponse[SupplierRead], summary="Update supplier")
async def update_supplier(
    payload: SupplierUpdate,
    supplier_id: UUID = Path(..., description="Supplier ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    supplier = await SupplierService(session, ctx).update_supplier(supplier_id, payload)
    return ok(SupplierRead.model_validate(supplier), "Supplier updated")


# PUBLIC_INTERFACE
@router.delete("/{supplier_id}", response_model=ApiResponse[None], summary="Delete supplier")
async def delete_supplier(
    supplier_id: UUID = Path(..., description="Supplier ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    await SupplierService(session, ctx).delete_supplier(supplier_id)
    return ok(None, "Supplier deleted")
