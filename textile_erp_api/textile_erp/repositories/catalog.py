from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_, or_

from textile_erp.db.models.catalog import Product, ProductCategory, StockAdjustment
from .base import TenantRepository


class CategoryRepository(TenantRepository[ProductCategory]):
    model = ProductCategory

    async def list_categories(self) -> List[ProductCategory]:
        return await self.list_where(order_by=ProductCategory.name)

    async def get_by_name(self, name: str) -> Optional[ProductCategory]:
        stmt = self.scoped().where(ProductCategory.name == name).limit(1)
        return await self.scalar_one_or_none(stmt)


class ProductRepository(TenantRepository[Product]):
    """Repository for products, always filtered by company."""

    model = Product

    async def list_products(
        self,
        *,
        category_id: Optional[UUID] = None,
        product_type: Optional[str] = None,
        search: Optional[str] = None,
        low_stock: bool = False,
        is_active: Optional[bool] = True,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Product]:
        criteria = []
        if is_active is not None:
            criteria.append(Product.is_active.is_(is_active))
        if category_id:
            criteria.append(Product.category_id == category_id)
        if product_type:
            criteria.append(Product.product_type == product_type)
        if search:
            like = f"%{search}%"
            criteria.append(
                or_(Product.name.ilike(like), Product.product_code.ilike(like), Product.sku.ilike(like))
            )
        if low_stock:
            criteria.append(
                and_(Product.reorder_level.is_not(None), Product.stock_quantity <= Product.reorder_level)
            )
        return await self.list_where(*criteria, order_by=Product.name, limit=limit, offset=offset)

    async def code_taken(self, *, product_code: Optional[str] = None, sku: Optional[str] = None,
                         exclude_id: Optional[UUID] = None) -> bool:
        checks = []
        if product_code:
            checks.append(Product.product_code == product_code)
        if sku:
            checks.append(Product.sku == sku)
        if not checks:
            return False
        criteria = [or_(*checks)]
        if exclude_id is not None:
            criteria.append(Product.id != exclude_id)
        return await self.count_where(*criteria) > 0


class StockAdjustmentRepository(TenantRepository[StockAdjustment]):
    model = StockAdjustment

    async def list_for_product(self, product_id: UUID) -> List[StockAdjustment]:
        return await self.list_where(
            StockAdjustment.product_id == product_id, order_by=StockAdjustment.created_at.desc()
        )
