from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from textile_erp.schemas.common import ORMModel
from textile_erp.schemas.enums import (
    AlertStatus,
    AlertType,
    ReservationStatus,
    ReservationType,
    StockMovementType,
)


class _ProductRef(ORMModel):
    id: UUID
    product_code: str
    sku: str
    name: str
    unit_of_measure: str


class _LocationRef(ORMModel):
    id: UUID
    location_code: str
    name: str


class LocationInventoryRead(ORMModel):
    """Stock of one product at one location."""
    id: UUID = Field(..., description="Row id")
    product_id: UUID
    location_id: UUID
    product: Optional[_ProductRef] = None
    location: Optional[_LocationRef] = None
    stock_quantity: Decimal
    reserved_quantity: Decimal
    available_quantity: Decimal
    reorder_level: Optional[Decimal] = None
    max_stock_level: Optional[Decimal] = None
    updated_by: Optional[UUID] = None
    updated_at: datetime


class LocationInventoryUpsert(BaseModel):
    """Set the stock level of a product at a location (creates the row if needed)."""
    product_id: UUID
    location_id: UUID
    stock_quantity: Decimal = Field(..., ge=0)
    reorder_level: Optional[Decimal] = Field(None, ge=0)
    max_stock_level: Optional[Decimal] = Field(None, ge=0)


class StockMovementCreate(BaseModel):
    product_id: UUID
    movement_type: StockMovementType
    quantity: Decimal = Field(..., gt=0)
    from_location_id: Optional[UUID] = None
    to_location_id: Optional[UUID] = None
    unit_cost: Optional[Decimal] = Field(None, ge=0)
    reference_type: Optional[str] = None
    reference_id: Optional[str] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def _locations_present(self) -> "StockMovementCreate":
        if not self.from_location_id and not self.to_location_id:
            raise ValueError("from_location_id or to_location_id is required")
        return self


class StockMovementRead(ORMModel):
    id: UUID
    movement_code: str
    product_id: UUID
    from_location_id: Optional[UUID] = None
    to_location_id: Optional[UUID] = None
    movement_type: StockMovementType
    quantity: Decimal
    unit_cost: Optional[Decimal] = None
    total_cost: Optional[Decimal] = None
    reference_type: Optional[str] = None
    reference_id: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[UUID] = None
    created_at: datetime


class ReservationCreate(BaseModel):
    product_id: UUID
    location_id: UUID
    quantity: Decimal = Field(..., gt=0)
    reservation_type: ReservationType = ReservationType.MANUAL
    order_id: Optional[UUID] = None
    expires_at: Optional[datetime] = None
    notes: Optional[str] = None


class ReservationRead(ORMModel):
    id: UUID
    reservation_code: str
    product_id: UUID
    location_id: UUID
    order_id: Optional[UUID] = None
    reserved_quantity: Decimal
    reservation_type: ReservationType
    status: ReservationStatus
    expires_at: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime


class StockAlertRead(ORMModel):
    id: UUID
    alert_code: str
    product_id: UUID
    location_id: UUID
    alert_type: AlertType
    current_stock: Decimal
    threshold_value: Decimal
    status: AlertStatus
    message: str
    acknowledged_by: Optional[UUID] = None
    acknowledged_at: Optional[datetime] = None
    created_at: datetime
