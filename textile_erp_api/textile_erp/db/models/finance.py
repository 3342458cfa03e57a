from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import Date, ForeignKey, Index, Integer, Numeric, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from textile_erp.db.base import Base, SoftDeleteMixin, TenantMixin, TimestampMixin, UUIDPkMixin


class _DocumentTotalsMixin:
    """Money columns shared by invoices and bills."""
    subtotal: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=Decimal("0"))
    discount_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=Decimal("0"))
    tax_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=Decimal("0"))
    shipping_charges: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=Decimal("0"))
    total_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=Decimal("0"))
    amount_paid: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=Decimal("0"))
    balance_due: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=Decimal("0"))
    currency: Mapped[str] = mapped_column(Text, nullable=False, server_default="INR")
    payment_terms: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    payment_method: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    payment_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    transaction_ref: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class _DocumentItemMixin:
    line_number: Mapped[int] = mapped_column(Integer, nullable=False)
    item_code: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    quantity: Mapped[Decimal] = mapped_column(Numeric(18, 3), nullable=False)
    unit_of_measure: Mapped[str] = mapped_column(Text, nullable=False, server_default="PCS")
    discount_percent: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, default=Decimal("0"))
    discount_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=Decimal("0"))
    tax_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, default=Decimal("0"))
    tax_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=Decimal("0"))
    line_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=Decimal("0"))


class Invoice(_DocumentTotalsMixin, UUIDPkMixin, TenantMixin, SoftDeleteMixin, TimestampMixin, Base):
    """Customer invoice (accounts receivable)."""
    __tablename__ = "invoices"
    __table_args__ = (
        UniqueConstraint("company_id", "invoice_code", name="uq_invoices_company_code"),
    )

    invoice_code: Mapped[str] = mapped_column(Text, nullable=False)
    customer_id: Mapped[Optional[UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("customers.id", ondelete="SET NULL"), nullable=True
    )
    customer_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    order_id: Mapped[Optional[UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("orders.id", ondelete="SET NULL"), nullable=True
    )
    location_id: Mapped[UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("locations.id", ondelete="RESTRICT"), nullable=False
    )
    invoice_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False, server_default="DRAFT")

    items: Mapped[List["InvoiceItem"]] = relationship(
        "InvoiceItem",
        order_by="InvoiceItem.line_number",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class InvoiceItem(_DocumentItemMixin, UUIDPkMixin, TenantMixin, TimestampMixin, Base):
    __tablename__ = "invoice_items"

    invoice_id: Mapped[UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[Optional[UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("products.id", ondelete="SET NULL"), nullable=True
    )
    unit_price: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)


class Bill(_DocumentTotalsMixin, UUIDPkMixin, TenantMixin, SoftDeleteMixin, TimestampMixin, Base):
    """Supplier bill (accounts payable)."""
    __tablename__ = "bills"
    __table_args__ = (
        UniqueConstraint("company_id", "bill_code", name="uq_bills_company_code"),
    )

    bill_code: Mapped[str] = mapped_column(Text, nullable=False)
    supplier_id: Mapped[Optional[UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True
    )
    supplier_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    supplier_invoice_no: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    location_id: Mapped[UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("locations.id", ondelete="RESTRICT"), nullable=False
    )
    bill_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False, server_default="DRAFT")

    items: Mapped[List["BillItem"]] = relationship(
        "BillItem",
        order_by="BillItem.line_number",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class BillItem(_DocumentItemMixin, UUIDPkMixin, TenantMixin, TimestampMixin, Base):
    __tablename__ = "bill_items"

    bill_id: Mapped[UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("bills.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[Optional[UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("products.id", ondelete="SET NULL"), nullable=True
    )
    unit_cost: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)


class Payment(UUIDPkMixin, TenantMixin, TimestampMixin, Base):
    """One money movement against an invoice (received) or a bill (paid out)."""
    __tablename__ = "payments"
    __table_args__ = (
        UniqueConstraint("company_id", "payment_code", name="uq_payments_company_code"),
        Index("ix_payments_reference", "reference_type", "reference_id"),
    )

    payment_code: Mapped[str] = mapped_column(Text, nullable=False)
    # INVOICE or BILL; reference_id points into the matching table
    reference_type: Mapped[str] = mapped_column(Text, nullable=False)
    reference_id: Mapped[UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    reference_code: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    party_id: Mapped[Optional[UUID]] = mapped_column(UUID(as_uuid=True), nullable=True)
    party_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    currency: Mapped[str] = mapped_column(Text, nullable=False, server_default="INR")
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    payment_method: Mapped[str] = mapped_column(Text, nullable=False)
    transaction_ref: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    bank_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cheque_number: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cheque_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    upi_id: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(Text, nullable=False, server_default="COMPLETED")
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    recorded_by: Mapped[Optional[UUID]] = mapped_column(UUID(as_uuid=True), nullable=True)
