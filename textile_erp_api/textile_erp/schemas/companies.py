from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from textile_erp.schemas.common import ORMModel
from textile_erp.schemas.enums import CompanyRole


class CompanyCreate(BaseModel):
    """New company (tenant); the caller becomes its OWNER."""
    name: str = Field(..., min_length=1, max_length=200)
    industry: Optional[str] = Field("Textile Manufacturing")
    country: Optional[str] = Field(None)
    currency: str = Field("INR", min_length=3, max_length=3)
    email: Optional[EmailStr] = Field(None)
    phone: Optional[str] = Field(None)
    tax_id: Optional[str] = Field(None)


class CompanyUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    industry: Optional[str] = None
    country: Optional[str] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    tax_id: Optional[str] = None


class CompanyRead(ORMModel):
    id: UUID
    code: str
    name: str
    slug: str
    industry: Optional[str] = None
    country: Optional[str] = None
    currency: str
    email: Optional[str] = None
    phone: Optional[str] = None
    tax_id: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class CompanyMembershipRead(BaseModel):
    """A company as seen by one of its members."""
    company: CompanyRead
    role: CompanyRole
    joined_at: datetime


class SlugCheck(BaseModel):
    slug: str
    available: bool


class InviteRequest(BaseModel):
    email: EmailStr
    role: CompanyRole = CompanyRole.EMPLOYEE

    @field_validator("role")
    @classmethod
    def _not_owner(cls, v: CompanyRole) -> CompanyRole:
        if v == CompanyRole.OWNER:
            raise ValueError("Cannot invite a user as OWNER")
        return v


class MemberRead(BaseModel):
    """Company member listing entry."""
    user_id: UUID
    email: str
    full_name: Optional[str] = None
    role: CompanyRole
    is_active: bool
    joined_at: datetime


class MemberUpdate(BaseModel):
    role: Optional[CompanyRole] = None
    is_active: Optional[bool] = None
