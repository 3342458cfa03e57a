from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from textile_erp.schemas.common import ORMModel
from textile_erp.schemas.enums import PaymentTerms


class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    customer_type: Optional[str] = Field(None, description="e.g. RETAIL, WHOLESALE, EXPORT")
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    billing_address: Optional[str] = None
    shipping_address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    payment_terms: Optional[PaymentTerms] = None
    credit_limit: Optional[Decimal] = Field(None, ge=0)
    currency: str = Field("INR", min_length=3, max_length=3)
    tax_id: Optional[str] = None
    notes: Optional[str] = None


class CustomerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    customer_type: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    billing_address: Optional[str] = None
    shipping_address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    payment_terms: Optional[PaymentTerms] = None
    credit_limit: Optional[Decimal] = Field(None, ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    tax_id: Optional[str] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None


class CustomerRead(ORMModel):
    id: UUID
    code: str
    name: str
    customer_type: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    billing_address: Optional[str] = None
    shipping_address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    payment_terms: Optional[str] = None
    credit_limit: Optional[Decimal] = None
    currency: str
    tax_id: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class SupplierCreate(BaseModel):
    """Create supplier payload; the SUPP-### code is generated."""
    name: str = Field(..., min_length=1, max_length=200)
    supplier_type: Optional[str] = Field(None, description="e.g. YARN, FABRIC, DYES, TRIMS")
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    payment_terms: Optional[PaymentTerms] = None
    lead_time_days: Optional[int] = Field(None, ge=0)
    currency: str = Field("INR", min_length=3, max_length=3)
    tax_id: Optional[str] = None
    notes: Optional[str] = None
    min_order_value: Optional[Decimal] = Field(None, ge=0)


class SupplierUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    supplier_type: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    payment_terms: Optional[PaymentTerms] = None
    lead_time_days: Optional[int] = Field(None, ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    tax_id: Optional[str] = None
    notes: Optional[str] = None
    min_order_value: Optional[Decimal] = Field(None, ge=0)
    is_active: Optional[bool] = None


class SupplierRead(ORMModel):
    """Supplier read model."""
    id: UUID
    code: str
    name: str
    supplier_type: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    payment_terms: Optional[str] = None
    lead_time_days: Optional[int] = None
    currency: str
    tax_id: Optional[str] = None
    notes: Optional[str] = None
    min_order_value: Optional[Decimal] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
