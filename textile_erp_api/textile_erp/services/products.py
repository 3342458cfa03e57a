from __future__ import annotations

import logging
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from textile_erp.core.errors import BusinessRuleError, ConflictError
from textile_erp.db.models.catalog import Product, ProductCategory, StockAdjustment
from textile_erp.repositories.catalog import CategoryRepository, ProductRepository, StockAdjustmentRepository
from textile_erp.schemas.products import CategoryCreate, ProductCreate, ProductUpdate, StockAdjustmentCreate
from textile_erp.services.base import TenantService, apply_changes, dump
from textile_erp.services.codes import ADJUSTMENT_CODE, PRODUCT_CODE, next_code_from, sku_prefix
from textile_erp.services.pricing import markup_percent

logger = logging.getLogger(__name__)

INCREASING_ADJUSTMENTS = frozenset({"ADD", "PURCHASE", "RETURN"})
DECREASING_ADJUSTMENTS = frozenset({"REMOVE", "SALE", "DAMAGE", "TRANSFER"})
SKU_SEQUENCE_WIDTH = 4
_REQUIRED_FIELDS = ("name", "product_code", "sku", "product_type", "unit_of_measure", "cost_price", "selling_price", "is_active")


# PUBLIC_INTERFACE
def adjusted_stock(current: Decimal, adjustment_type: str, quantity: Decimal) -> Decimal:
    """
    Stock after applying an adjustment.

    Raises:
        BusinessRuleError: when a decrease would take stock below zero.
    """
    current = Decimal(str(current or 0))
    quantity = Decimal(str(quantity))
    if adjustment_type in INCREASING_ADJUSTMENTS:
        return current + quantity
    if adjustment_type in DECREASING_ADJUSTMENTS:
        if quantity > current:
            raise BusinessRuleError("Insufficient stock")
        return current - quantity
    if adjustment_type == "SET":
        return quantity
    raise BusinessRuleError(f"Unknown adjustment type {adjustment_type}")


class ProductService(TenantService):
    """Product catalog, categories and manual stock adjustments."""

    def __init__(self, session, ctx) -> None:
        super().__init__(session, ctx)
        self.products: ProductRepository = self.repo(ProductRepository)
        self.categories: CategoryRepository = self.repo(CategoryRepository)
        self.adjustments: StockAdjustmentRepository = self.repo(StockAdjustmentRepository)

    # Categories

    async def list_categories(self) -> List[ProductCategory]:
        return await self.categories.list_categories()

    async def create_category(self, payload: CategoryCreate) -> ProductCategory:
        if await self.categories.get_by_name(payload.name):
            raise ConflictError(f"Category '{payload.name}' already exists")
        category = await self.categories.create(ProductCategory(**dump(payload)))
        await self.commit()
        await self.session.refresh(category)
        logger.info("Created product category %s", category.name)
        return category

    async def delete_category(self, category_id: UUID) -> None:
        self.require(await self.categories.get(category_id), "Category", category_id)
        await self.categories.delete_by_id(category_id)
        await self.commit()
        logger.info("Deleted product category %s", category_id)

    # Products

    async def list_products(self, **filters) -> List[Product]:
        return await self.products.list_products(**filters)

    async def get_product(self, product_id: UUID) -> Product:
        return self.require(await self.products.get(product_id), "Product", product_id)

    async def _active_product(self, product_id: UUID) -> Product:
        return self.require(await self.products.get_active(product_id), "Product", product_id)

    async def _check_category(self, category_id: Optional[UUID]) -> None:
        if category_id is not None:
            self.require(await self.categories.get(category_id), "Category", category_id)

    async def _generate_sku(self, name: str) -> str:
        prefix = f"{sku_prefix(name)}-"
        last = await self.products.last_code(Product.sku, prefix)
        return next_code_from(last, prefix, SKU_SEQUENCE_WIDTH)

    # PUBLIC_INTERFACE
    async def create_product(self, payload: ProductCreate) -> Product:
        """
        Create a product.

        product_code defaults to the next PRD### and sku to '<initials>-####'.
        markup_percent is derived from the prices when not given.
        """
        data = dump(payload)
        await self._check_category(data.get("category_id"))
        if not data.get("product_code"):
            data["product_code"] = await self.next_code(self.products, Product.product_code, *PRODUCT_CODE)
        if not data.get("sku"):
            data["sku"] = await self._generate_sku(data["name"])
        if await self.products.code_taken(product_code=data["product_code"], sku=data["sku"]):
            raise ConflictError("Product code or SKU already exists")
        if data.get("markup_percent") is None:
            data["markup_percent"] = markup_percent(data["cost_price"], data["selling_price"])

        product = await self.products.create(Product(is_active=True, **data))
        await self.commit()
        await self.session.refresh(product)
        logger.info("Created product %s (sku=%s)", product.product_code, product.sku)
        return product

    async def update_product(self, product_id: UUID, payload: ProductUpdate) -> Product:
        product = await self.get_product(product_id)
        changes = dump(payload, exclude_unset=True)
        if "category_id" in changes:
            await self._check_category(changes["category_id"])
        if changes.get("product_code") or changes.get("sku"):
            taken = await self.products.code_taken(
                product_code=changes.get("product_code"), sku=changes.get("sku"), exclude_id=product.id
            )
            if taken:
                raise ConflictError("Product code or SKU already exists")
        price_changed = "cost_price" in changes or "selling_price" in changes
        apply_changes(product, changes, skip=[k for k in _REQUIRED_FIELDS if changes.get(k, "") is None])
        if price_changed and "markup_percent" not in changes:
            product.markup_percent = markup_percent(product.cost_price, product.selling_price)
        await self.commit()
        await self.session.refresh(product)
        logger.info("Updated product %s", product.product_code)
        return product

    async def delete_product(self, product_id: UUID) -> None:
        product = await self.get_product(product_id)
        product.is_active = False
        await self.commit()
        logger.info("Deactivated product %s", product.product_code)

    # PUBLIC_INTERFACE
    async def adjust_stock(self, product_id: UUID, payload: StockAdjustmentCreate) -> StockAdjustment:
        """Apply a manual adjustment to the product's aggregate stock and record it."""
        product = await self._active_product(product_id)
        adjustment_type = payload.adjustment_type.value
        previous = Decimal(str(product.stock_quantity or 0))
        new_stock = adjusted_stock(previous, adjustment_type, payload.quantity)

        code = await self.next_code(self.adjustments, StockAdjustment.adjustment_code, *ADJUSTMENT_CODE)
        adjustment = await self.adjustments.create(
            StockAdjustment(
                adjustment_code=code,
                product_id=product.id,
                adjustment_type=adjustment_type,
                quantity=payload.quantity,
                previous_stock=previous,
                new_stock=new_stock,
                reason=payload.reason,
                adjusted_by=self.ctx.user_id,
            )
        )
        product.stock_quantity = new_stock
        await self.commit()
        await self.session.refresh(adjustment)
        logger.info(
            "Stock adjustment %s on %s: %s %s (%s -> %s)",
            code, product.product_code, adjustment_type, payload.quantity, previous, new_stock,
        )
        return adjustment

    async def list_adjustments(self, product_id: UUID) -> List[StockAdjustment]:
        await self.get_product(product_id)
        return await self.adjustments.list_for_product(product_id)
