from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from textile_erp.schemas.common import ORMModel
from textile_erp.schemas.enums import OrderPriority, OrderStatus


class LineItemIn(BaseModel):
    """Item line shared by orders and invoices."""
    product_id: Optional[UUID] = None
    item_code: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    quantity: Decimal = Field(..., gt=0)
    unit_of_measure: str = Field("PCS", max_length=20)
    unit_price: Decimal = Field(..., ge=0)
    discount_percent: Decimal = Field(Decimal("0"), ge=0, le=100)
    tax_rate: Decimal = Field(Decimal("0"), ge=0)
    notes: Optional[str] = None


class OrderItemRead(ORMModel):
    id: UUID
    line_number: int
    product_id: Optional[UUID] = None
    item_code: str
    description: Optional[str] = None
    quantity: Decimal
    unit_of_measure: str
    unit_price: Decimal
    discount_percent: Decimal
    discount_amount: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    line_amount: Decimal
    notes: Optional[str] = None


class _ShippingFields(BaseModel):
    delivery_date: Optional[date] = None
    shipping_address: Optional[str] = None
    shipping_carrier: Optional[str] = None
    tracking_number: Optional[str] = None
    shipping_method: Optional[str] = None
    delivery_window_start: Optional[datetime] = None
    delivery_window_end: Optional[datetime] = None


class OrderCreate(_ShippingFields):
    customer_id: Optional[UUID] = None
    customer_name: Optional[str] = None
    location_id: Optional[UUID] = None
    order_date: date
    priority: OrderPriority = OrderPriority.NORMAL
    currency: str = Field("INR", min_length=3, max_length=3)
    shipping_charges: Decimal = Field(Decimal("0"), ge=0)
    notes: Optional[str] = None
    items: List[LineItemIn] = Field(..., min_length=1)


class OrderUpdate(_ShippingFields):
    customer_id: Optional[UUID] = None
    customer_name: Optional[str] = None
    location_id: Optional[UUID] = None
    order_date: Optional[date] = None
    priority: Optional[OrderPriority] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    shipping_charges: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = None
    items: Optional[List[LineItemIn]] = Field(None, min_length=1)


class OrderStatusUpdate(_ShippingFields):
    status: OrderStatus


class OrderRead(ORMModel):
    id: UUID
    order_code: str
    customer_id: Optional[UUID] = None
    customer_name: Optional[str] = None
    location_id: Optional[UUID] = None
    order_date: date
    delivery_date: Optional[date] = None
    status: OrderStatus
    priority: OrderPriority
    currency: str
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    shipping_charges: Decimal
    total_amount: Decimal
    notes: Optional[str] = None
    shipping_address: Optional[str] = None
    shipping_carrier: Optional[str] = None
    tracking_number: Optional[str] = None
    shipping_method: Optional[str] = None
    delivery_window_start: Optional[datetime] = None
    delivery_window_end: Optional[datetime] = None
    is_active: bool
    items: List[OrderItemRead] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
