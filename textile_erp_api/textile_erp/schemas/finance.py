from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from textile_erp.schemas.common import ORMModel
from textile_erp.schemas.enums import (
    BillStatus,
    InvoiceStatus,
    PaymentMethod,
    PaymentReferenceType,
    PaymentStatus,
    PaymentTerms,
)
from textile_erp.schemas.orders import LineItemIn


class BillItemIn(BaseModel):
    product_id: Optional[UUID] = None
    item_code: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    quantity: Decimal = Field(..., gt=0)
    unit_of_measure: str = Field("PCS", max_length=20)
    unit_cost: Decimal = Field(..., ge=0)
    discount_percent: Decimal = Field(Decimal("0"), ge=0, le=100)
    tax_rate: Decimal = Field(Decimal("0"), ge=0)


class _DocumentItemRead(ORMModel):
    id: UUID
    line_number: int
    product_id: Optional[UUID] = None
    item_code: str
    description: Optional[str] = None
    quantity: Decimal
    unit_of_measure: str
    discount_percent: Decimal
    discount_amount: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    line_amount: Decimal


class InvoiceItemRead(_DocumentItemRead):
    unit_price: Decimal


class BillItemRead(_DocumentItemRead):
    unit_cost: Decimal


class _DocumentTotalsRead(ORMModel):
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    shipping_charges: Decimal
    total_amount: Decimal
    amount_paid: Decimal
    balance_due: Decimal
    currency: str
    payment_terms: Optional[PaymentTerms] = None
    payment_method: Optional[PaymentMethod] = None
    payment_date: Optional[date] = None
    transaction_ref: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class PaymentRecord(BaseModel):
    """Payment against a document; `amount_paid` is the cumulative amount received or paid."""
    amount_paid: Decimal = Field(..., ge=0)
    payment_method: Optional[PaymentMethod] = None
    payment_date: Optional[date] = None
    transaction_ref: Optional[str] = None


class PaymentIn(BaseModel):
    """One payment against a document; `amount` is added to what is already paid."""
    amount: Decimal = Field(..., gt=0)
    payment_method: PaymentMethod
    payment_date: Optional[date] = Field(None, description="Defaults to today")
    transaction_ref: Optional[str] = None
    bank_name: Optional[str] = None
    cheque_number: Optional[str] = None
    cheque_date: Optional[date] = None
    upi_id: Optional[str] = None
    notes: Optional[str] = None


class PaymentCreate(PaymentIn):
    reference_type: PaymentReferenceType
    reference_id: UUID


class PaymentCancel(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class PaymentRead(ORMModel):
    id: UUID
    payment_code: str
    reference_type: PaymentReferenceType
    reference_id: UUID
    reference_code: Optional[str] = None
    party_id: Optional[UUID] = None
    party_name: Optional[str] = None
    amount: Decimal
    currency: str
    payment_date: date
    payment_method: PaymentMethod
    transaction_ref: Optional[str] = None
    bank_name: Optional[str] = None
    cheque_number: Optional[str] = None
    cheque_date: Optional[date] = None
    upi_id: Optional[str] = None
    status: PaymentStatus
    notes: Optional[str] = None
    recorded_by: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime


# Invoices

class InvoiceCreate(BaseModel):
    customer_id: Optional[UUID] = None
    customer_name: Optional[str] = None
    order_id: Optional[UUID] = None
    location_id: Optional[UUID] = Field(None, description="Defaults to the headquarters location")
    invoice_date: date
    due_date: Optional[date] = Field(None, description="Derived from payment_terms when omitted")
    payment_terms: Optional[PaymentTerms] = None
    currency: str = Field("INR", min_length=3, max_length=3)
    shipping_charges: Decimal = Field(Decimal("0"), ge=0)
    notes: Optional[str] = None
    items: List[LineItemIn] = Field(..., min_length=1)


class InvoiceUpdate(BaseModel):
    customer_id: Optional[UUID] = None
    customer_name: Optional[str] = None
    location_id: Optional[UUID] = None
    invoice_date: Optional[date] = None
    due_date: Optional[date] = None
    payment_terms: Optional[PaymentTerms] = None
    shipping_charges: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = None
    items: Optional[List[LineItemIn]] = Field(None, min_length=1)


class InvoiceFromOrder(BaseModel):
    invoice_date: Optional[date] = Field(None, description="Defaults to today")
    payment_terms: Optional[PaymentTerms] = None
    notes: Optional[str] = None


class InvoiceStatusUpdate(BaseModel):
    status: InvoiceStatus


class InvoiceRead(_DocumentTotalsRead):
    id: UUID
    invoice_code: str
    customer_id: Optional[UUID] = None
    customer_name: Optional[str] = None
    order_id: Optional[UUID] = None
    location_id: UUID
    invoice_date: date
    due_date: date
    status: InvoiceStatus
    items: List[InvoiceItemRead] = Field(default_factory=list)


# Bills

class BillCreate(BaseModel):
    supplier_id: Optional[UUID] = None
    supplier_name: Optional[str] = None
    supplier_invoice_no: Optional[str] = None
    location_id: Optional[UUID] = Field(None, description="Defaults to the headquarters location")
    bill_date: date
    due_date: Optional[date] = None
    payment_terms: Optional[PaymentTerms] = None
    currency: str = Field("INR", min_length=3, max_length=3)
    shipping_charges: Decimal = Field(Decimal("0"), ge=0)
    notes: Optional[str] = None
    items: List[BillItemIn] = Field(..., min_length=1)


class BillUpdate(BaseModel):
    supplier_id: Optional[UUID] = None
    supplier_name: Optional[str] = None
    supplier_invoice_no: Optional[str] = None
    location_id: Optional[UUID] = None
    bill_date: Optional[date] = None
    due_date: Optional[date] = None
    payment_terms: Optional[PaymentTerms] = None
    shipping_charges: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = None
    items: Optional[List[BillItemIn]] = Field(None, min_length=1)


class BillStatusUpdate(BaseModel):
    status: BillStatus


class BillRead(_DocumentTotalsRead):
    id: UUID
    bill_code: str
    supplier_id: Optional[UUID] = None
    supplier_name: Optional[str] = None
    supplier_invoice_no: Optional[str] = None
    location_id: UUID
    bill_date: date
    due_date: date
    status: BillStatus
    items: List[BillItemRead] = Field(default_factory=list)
