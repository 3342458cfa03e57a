from __future__ import annotations

from decimal import Decimal
from typing import Optional

from sqlalchemy import ForeignKey, Numeric, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from textile_erp.db.base import Base, SoftDeleteMixin, TenantMixin, TimestampMixin, UUIDPkMixin


class ProductCategory(UUIDPkMixin, TenantMixin, TimestampMixin, Base):
    """Company-defined product grouping."""
    __tablename__ = "product_categories"
    __table_args__ = (
        UniqueConstraint("company_id", "name", name="uq_product_categories_company_name"),
    )

    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class Product(UUIDPkMixin, TenantMixin, SoftDeleteMixin, TimestampMixin, Base):
    """Sellable or consumable item with pricing, aggregate stock and textile attributes."""
    __tablename__ = "products"
    __table_args__ = (
        UniqueConstraint("company_id", "product_code", name="uq_products_company_code"),
        UniqueConstraint("company_id", "sku", name="uq_products_company_sku"),
    )

    product_code: Mapped[str] = mapped_column(Text, nullable=False)
    sku: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category_id: Mapped[Optional[UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("product_categories.id", ondelete="SET NULL"), nullable=True
    )
    product_type: Mapped[str] = mapped_column(Text, nullable=False, server_default="OWN_MANUFACTURE")
    unit_of_measure: Mapped[str] = mapped_column(Text, nullable=False, server_default="PCS")
    cost_price: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=Decimal("0"))
    selling_price: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=Decimal("0"))
    markup_percent: Mapped[Optional[Decimal]] = mapped_column(Numeric(9, 2), nullable=True)
    stock_quantity: Mapped[Decimal] = mapped_column(Numeric(18, 3), nullable=False, default=Decimal("0"))
    reorder_level: Mapped[Optional[Decimal]] = mapped_column(Numeric(18, 3), nullable=True)
    fabric_type: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    color: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    size: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    gsm: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    material: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    hsn_code: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    category: Mapped[Optional["ProductCategory"]] = relationship("ProductCategory", lazy="selectin")


class StockAdjustment(UUIDPkMixin, TenantMixin, TimestampMixin, Base):
    """Audit row for a manual change to a product's aggregate stock."""
    __tablename__ = "stock_adjustments"

    adjustment_code: Mapped[str] = mapped_column(Text, nullable=False)
    product_id: Mapped[UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("products.id", ondelete="CASCADE"), nullable=False
    )
    adjustment_type: Mapped[str] = mapped_column(Text, nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Numeric(18, 3), nullable=False)
    previous_stock: Mapped[Decimal] = mapped_column(Numeric(18, 3), nullable=False)
    new_stock: Mapped[Decimal] = mapped_column(Numeric(18, 3), nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    adjusted_by: Mapped[Optional[UUID]] = mapped_column(UUID(as_uuid=True), nullable=True)
