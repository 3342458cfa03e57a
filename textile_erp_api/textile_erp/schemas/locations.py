from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from textile_erp.schemas.common import ORMModel
from textile_erp.schemas.enums import LocationType


class _LocationFields(BaseModel):
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None


class LocationCreate(_LocationFields):
    name: str = Field(..., min_length=1, max_length=200)
    type: LocationType = LocationType.BRANCH
    is_default: bool = False


class LocationUpdate(_LocationFields):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    type: Optional[LocationType] = None
    is_active: Optional[bool] = None


class LocationRead(ORMModel):
    id: UUID
    location_code: str
    name: str
    type: LocationType
    is_default: bool
    is_headquarters: bool
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
