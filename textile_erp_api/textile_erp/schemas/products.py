from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from textile_erp.schemas.common import ORMModel
from textile_erp.schemas.enums import ProductType, StockAdjustmentType


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    description: Optional[str] = None


class CategoryRead(ORMModel):
    id: UUID
    name: str
    description: Optional[str] = None
    created_at: datetime


class _TextileAttributes(BaseModel):
    fabric_type: Optional[str] = None
    color: Optional[str] = None
    size: Optional[str] = None
    gsm: Optional[Decimal] = Field(None, ge=0)
    material: Optional[str] = None
    hsn_code: Optional[str] = None


class ProductCreate(_TextileAttributes):
    """New product; codes are generated when omitted."""
    name: str = Field(..., min_length=1, max_length=255)
    product_code: Optional[str] = Field(None, max_length=50)
    sku: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    category_id: Optional[UUID] = None
    product_type: ProductType = ProductType.OWN_MANUFACTURE
    unit_of_measure: str = Field("PCS", max_length=20)
    cost_price: Decimal = Field(Decimal("0"), ge=0)
    selling_price: Decimal = Field(Decimal("0"), ge=0)
    markup_percent: Optional[Decimal] = None
    stock_quantity: Decimal = Field(Decimal("0"), ge=0)
    reorder_level: Optional[Decimal] = Field(None, ge=0)


class ProductUpdate(_TextileAttributes):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    product_code: Optional[str] = Field(None, max_length=50)
    sku: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    category_id: Optional[UUID] = None
    product_type: Optional[ProductType] = None
    unit_of_measure: Optional[str] = Field(None, max_length=20)
    cost_price: Optional[Decimal] = Field(None, ge=0)
    selling_price: Optional[Decimal] = Field(None, ge=0)
    markup_percent: Optional[Decimal] = None
    reorder_level: Optional[Decimal] = Field(None, ge=0)
    is_active: Optional[bool] = None


class ProductRead(ORMModel):
    id: UUID
    product_code: str
    sku: str
    name: str
    description: Optional[str] = None
    category_id: Optional[UUID] = None
    category: Optional[CategoryRead] = None
    product_type: ProductType
    unit_of_measure: str
    cost_price: Decimal
    selling_price: Decimal
    markup_percent: Optional[Decimal] = None
    stock_quantity: Decimal
    reorder_level: Optional[Decimal] = None
    fabric_type: Optional[str] = None
    color: Optional[str] = None
    size: Optional[str] = None
    gsm: Optional[Decimal] = None
    material: Optional[str] = None
    hsn_code: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class StockAdjustmentCreate(BaseModel):
    adjustment_type: StockAdjustmentType
    quantity: Decimal = Field(..., gt=0)
    reason: Optional[str] = None


class StockAdjustmentRead(ORMModel):
    id: UUID
    adjustment_code: str
    product_id: UUID
    adjustment_type: StockAdjustmentType
    quantity: Decimal
    previous_stock: Decimal
    new_stock: Decimal
    reason: Optional[str] = None
    adjusted_by: Optional[UUID] = None
    created_at: datetime
