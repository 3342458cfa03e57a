from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from textile_erp.core.deps import MANAGERS, TenantContext, get_tenant_context, get_tenant_session, require_roles
from textile_erp.schemas.common import ApiResponse, ok, ok_list
from textile_erp.schemas.enums import ProductType
from textile_erp.schemas.products import (
    CategoryCreate,
    CategoryRead,
    ProductCreate,
    ProductRead,
    ProductUpdate,
    StockAdjustmentCreate,
    StockAdjustmentRead,
)
from textile_erp.services.products import ProductService

router = APIRouter(prefix="/products", tags=["Products"])


# Categories

# PUBLIC_INTERFACE
@router.get("/categories", response_model=ApiResponse[List[CategoryRead]], summary="List product categories")
async def list_categories(
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    return ok_list(CategoryRead, await ProductService(session, ctx).list_categories())


# PUBLIC_INTERFACE
@router.post(
    "/categories",
    response_model=ApiResponse[CategoryRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create product category",
    description="Category names are unique per company.",
)
async def create_category(
    payload: CategoryCreate,
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    category = await ProductService(session, ctx).create_category(payload)
    return ok(CategoryRead.model_validate(category), "Category created")


# PUBLIC_INTERFACE
@router.delete("/categories/{category_id}", response_model=ApiResponse[None], summary="Delete product category")
async def delete_category(
    category_id: UUID = Path(..., description="Category ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    await ProductService(session, ctx).delete_category(category_id)
    return ok(None, "Category deleted")


# Products

# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=ApiResponse[List[ProductRead]],
    summary="List products",
    description="Active products of the current company; low_stock keeps those at or below their reorder level.",
)
async def list_products(
    category_id: Optional[UUID] = Query(None),
    product_type: Optional[ProductType] = Query(None),
    search: Optional[str] = Query(None, description="Match name, code or SKU"),
    low_stock: bool = Query(False),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    rows = await ProductService(session, ctx).list_products(
        category_id=category_id,
        product_type=product_type.value if product_type else None,
        search=search,
        low_stock=low_stock,
        limit=limit,
        offset=offset,
    )
    return ok_list(ProductRead, rows)


# PUBLIC_INTERFACE
@router.get("/{product_id}", response_model=ApiResponse[ProductRead], summary="Get product")
async def get_product(
    product_id: UUID = Path(..., description="Product ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    return ok(ProductRead.model_validate(await ProductService(session, ctx).get_product(product_id)))


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=ApiResponse[ProductRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create product",
    description="product_code and sku are generated when omitted; duplicates within the company return 409.",
)
async def create_product(
    payload: ProductCreate,
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    product = await ProductService(session, ctx).create_product(payload)
    return ok(ProductRead.model_validate(product), "Product created")


# PUBLIC_INTERFACE
@router.put("/{product_id}", response_model=ApiResponse[ProductRead], summary="Update product")
async def update_product(
    payload: ProductUpdate,
    product_id: UUID = Path(..., description="Product ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    product = await ProductService(session, ctx).update_product(product_id, payload)
    return ok(ProductRead.model_validate(product), "Product updated")


# PUBLIC_INTERFACE
@router.delete("/{product_id}", response_model=ApiResponse[None], summary="Delete product")
async def delete_product(
    product_id: UUID = Path(..., description="Product ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    await ProductService(session, ctx).delete_product(product_id)
    return ok(None, "Product deleted")


# PUBLIC_INTERFACE
@router.post(
    "/{product_id}/stock-adjustments",
    response_model=ApiResponse[StockAdjustmentRead],
    status_code=status.HTTP_201_CREATED,
    summary="Adjust product stock",
    description="ADD/PURCHASE/RETURN increase, REMOVE/SALE/DAMAGE/TRANSFER decrease, SET replaces the stock.",
)
async def adjust_stock(
    payload: StockAdjustmentCreate,
    product_id: UUID = Path(..., description="Product ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    adjustment = await ProductService(session, ctx).adjust_stock(product_id, payload)
    return ok(StockAdjustmentRead.model_validate(adjustment), "Stock adjusted")


# PUBLIC_INTERFACE
@router.get(
    "/{product_id}/stock-adjustments",
    response_model=ApiResponse[List[StockAdjustmentRead]],
    summary="List stock adjustments",
)
async def list_stock_adjustments(
    product_id: UUID = Path(..., description="Product ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    return ok_list(StockAdjustmentRead, await ProductService(session, ctx).list_adjustments(product_id))
