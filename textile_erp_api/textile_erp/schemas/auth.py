from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from textile_erp.schemas.common import ORMModel
from textile_erp.schemas.enums import CompanyRole


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    full_name: str = Field(..., min_length=1, max_length=200)


class RefreshRequest(BaseModel):
    refresh_token: str


class TokenPair(BaseModel):
    """
    Bearer tokens. When issued for a company (login with X-Tenant-ID, company
    creation or switch) tenant_id and role say which membership they carry.
    """
    token_type: str = "bearer"
    access_token: str
    refresh_token: str
    tenant_id: Optional[UUID] = None
    role: Optional[CompanyRole] = None


class UserRead(ORMModel):
    id: UUID
    email: EmailStr
    full_name: Optional[str] = None
    is_active: bool
    last_login_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class MembershipSummary(BaseModel):
    company_id: UUID
    company_name: str
    company_slug: str
    role: CompanyRole
    joined_at: datetime


class MeResponse(BaseModel):
    """The caller and every active company they can switch into."""
    user: UserRead
    companies: List[MembershipSummary] = Field(default_factory=list)
