from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from textile_erp.schemas.common import ORMModel
from textile_erp.schemas.enums import OrderPriority, PaymentTerms, PurchaseOrderStatus
from textile_erp.schemas.finance import BillItemIn


class PurchaseOrderItemIn(BillItemIn):
    expected_delivery: Optional[date] = None
    notes: Optional[str] = None


class PurchaseOrderItemRead(ORMModel):
    id: UUID
    line_number: int
    product_id: Optional[UUID] = None
    item_code: str
    description: Optional[str] = None
    quantity: Decimal
    unit_of_measure: str
    unit_cost: Decimal
    discount_percent: Decimal
    discount_amount: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    line_amount: Decimal
    expected_delivery: Optional[date] = None
    notes: Optional[str] = None


class _DeliveryFields(BaseModel):
    expected_delivery_date: Optional[date] = None
    delivery_address: Optional[str] = None
    shipping_method: Optional[str] = None
    incoterms: Optional[str] = None


class PurchaseOrderCreate(_DeliveryFields):
    supplier_id: Optional[UUID] = None
    supplier_name: Optional[str] = None
    location_id: Optional[UUID] = None
    po_date: date
    priority: OrderPriority = OrderPriority.NORMAL
    currency: str = Field("INR", min_length=3, max_length=3)
    payment_terms: Optional[PaymentTerms] = None
    reference_number: Optional[str] = None
    shipping_charges: Decimal = Field(Decimal("0"), ge=0)
    notes: Optional[str] = None
    terms_conditions: Optional[str] = None
    items: List[PurchaseOrderItemIn] = Field(..., min_length=1)


class PurchaseOrderUpdate(_DeliveryFields):
    supplier_id: Optional[UUID] = None
    supplier_name: Optional[str] = None
    location_id: Optional[UUID] = None
    po_date: Optional[date] = None
    priority: Optional[OrderPriority] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    payment_terms: Optional[PaymentTerms] = None
    reference_number: Optional[str] = None
    shipping_charges: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = None
    terms_conditions: Optional[str] = None
    items: Optional[List[PurchaseOrderItemIn]] = Field(None, min_length=1)


class PurchaseOrderStatusUpdate(BaseModel):
    status: PurchaseOrderStatus
    expected_delivery_date: Optional[date] = None
    shipping_method: Optional[str] = None


class PurchaseOrderRead(ORMModel):
    id: UUID
    po_code: str
    supplier_id: Optional[UUID] = None
    supplier_name: Optional[str] = None
    supplier_code: Optional[str] = None
    location_id: Optional[UUID] = None
    po_date: date
    expected_delivery_date: Optional[date] = None
    status: PurchaseOrderStatus
    priority: OrderPriority
    currency: str
    payment_terms: Optional[PaymentTerms] = None
    reference_number: Optional[str] = None
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    shipping_charges: Decimal
    total_amount: Decimal
    notes: Optional[str] = None
    terms_conditions: Optional[str] = None
    delivery_address: Optional[str] = None
    shipping_method: Optional[str] = None
    incoterms: Optional[str] = None
    is_active: bool
    items: List[PurchaseOrderItemRead] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
