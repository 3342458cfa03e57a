from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Numeric, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from textile_erp.db.base import Base, TenantMixin, TimestampMixin, UUIDPkMixin
from textile_erp.db.models.catalog import Product
from textile_erp.db.models.location import Location


class LocationInventory(UUIDPkMixin, TenantMixin, TimestampMixin, Base):
    """Stock level of one product at one location."""
    __tablename__ = "location_inventory"
    __table_args__ = (
        UniqueConstraint("company_id", "product_id", "location_id", name="uq_location_inventory_company_product_location"),
    )

    product_id: Mapped[UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("products.id", ondelete="CASCADE"), nullable=False
    )
    location_id: Mapped[UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("locations.id", ondelete="CASCADE"), nullable=False
    )
    stock_quantity: Mapped[Decimal] = mapped_column(Numeric(18, 3), nullable=False, default=Decimal("0"))
    reserved_quantity: Mapped[Decimal] = mapped_column(Numeric(18, 3), nullable=False, default=Decimal("0"))
    reorder_level: Mapped[Optional[Decimal]] = mapped_column(Numeric(18, 3), nullable=True)
    max_stock_level: Mapped[Optional[Decimal]] = mapped_column(Numeric(18, 3), nullable=True)
    updated_by: Mapped[Optional[UUID]] = mapped_column(UUID(as_uuid=True), nullable=True)

    product: Mapped["Product"] = relationship(Product, lazy="joined")
    location: Mapped["Location"] = relationship(Location, lazy="joined")

    @property
    def available_quantity(self) -> Decimal:
        return (self.stock_quantity or Decimal("0")) - (self.reserved_quantity or Decimal("0"))


class StockMovement(UUIDPkMixin, TenantMixin, TimestampMixin, Base):
    """Inbound, outbound or transfer movement of stock."""
    __tablename__ = "stock_movements"

    movement_code: Mapped[str] = mapped_column(Text, nullable=False)
    product_id: Mapped[UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("products.id", ondelete="CASCADE"), nullable=False
    )
    from_location_id: Mapped[Optional[UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("locations.id", ondelete="SET NULL"), nullable=True
    )
    to_location_id: Mapped[Optional[UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("locations.id", ondelete="SET NULL"), nullable=True
    )
    movement_type: Mapped[str] = mapped_column(Text, nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Numeric(18, 3), nullable=False)
    unit_cost: Mapped[Optional[Decimal]] = mapped_column(Numeric(18, 2), nullable=True)
    total_cost: Mapped[Optional[Decimal]] = mapped_column(Numeric(18, 2), nullable=True)
    reference_type: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    reference_id: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_by: Mapped[Optional[UUID]] = mapped_column(UUID(as_uuid=True), nullable=True)


class StockReservation(UUIDPkMixin, TenantMixin, TimestampMixin, Base):
    """Quantity held back at a location for an order, production run or transfer."""
    __tablename__ = "stock_reservations"

    reservation_code: Mapped[str] = mapped_column(Text, nullable=False)
    product_id: Mapped[UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("products.id", ondelete="CASCADE"), nullable=False
    )
    location_id: Mapped[UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("locations.id", ondelete="CASCADE"), nullable=False
    )
    order_id: Mapped[Optional[UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("orders.id", ondelete="SET NULL"), nullable=True
    )
    reserved_quantity: Mapped[Decimal] = mapped_column(Numeric(18, 3), nullable=False)
    reservation_type: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False, server_default="ACTIVE")
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_by: Mapped[Optional[UUID]] = mapped_column(UUID(as_uuid=True), nullable=True)


class StockAlert(UUIDPkMixin, TenantMixin, TimestampMixin, Base):
    """Low or out-of-stock warning for a product at a location."""
    __tablename__ = "stock_alerts"

    alert_code: Mapped[str] = mapped_column(Text, nullable=False)
    product_id: Mapped[UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("products.id", ondelete="CASCADE"), nullable=False
    )
    location_id: Mapped[UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("locations.id", ondelete="CASCADE"), nullable=False
    )
    alert_type: Mapped[str] = mapped_column(Text, nullable=False)
    current_stock: Mapped[Decimal] = mapped_column(Numeric(18, 3), nullable=False)
    threshold_value: Mapped[Decimal] = mapped_column(Numeric(18, 3), nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False, server_default="ACTIVE")
    message: Mapped[str] = mapped_column(Text, nullable=False)
    acknowledged_by: Mapped[Optional[UUID]] = mapped_column(UUID(as_uuid=True), nullable=True)
    acknowledged_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
