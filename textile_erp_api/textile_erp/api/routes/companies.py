from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from textile_erp.core.deps import get_current_user, get_session_no_tenant
from textile_erp.db.models.company import User
from textile_erp.schemas.auth import TokenPair
from textile_erp.schemas.common import ApiResponse, ok
from textile_erp.schemas.companies import (
    CompanyCreate,
    CompanyMembershipRead,
    CompanyRead,
    CompanyUpdate,
    InviteRequest,
    MemberRead,
    SlugCheck,
)
from textile_erp.services.companies import CompanyService
from textile_erp.services.members import member_read

router = APIRouter(prefix="/companies", tags=["Companies"])


def _service(
    session: AsyncSession = Depends(get_session_no_tenant),
    user: User = Depends(get_current_user),
) -> CompanyService:
    return CompanyService(session, user)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=ApiResponse[CompanyMembershipRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create company",
    description="Create a company with its headquarters location; the caller becomes OWNER.",
)
async def create_company(payload: CompanyCreate, service: CompanyService = Depends(_service)):
    return ok(await service.create_company(payload), "Company created")


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=ApiResponse[List[CompanyMembershipRead]],
    summary="List my companies",
    description="Companies the caller is an active member of, with role and join date.",
)
async def list_companies(service: CompanyService = Depends(_service)):
    return ok(await service.list_companies())


# PUBLIC_INTERFACE
@router.get(
    "/check-slug",
    response_model=ApiResponse[SlugCheck],
    summary="Check slug availability",
)
async def check_slug(
    slug: str = Query(..., min_length=1, description="Desired company slug"),
    service: CompanyService = Depends(_service),
):
    return ok(await service.check_slug(slug))


# PUBLIC_INTERFACE
@router.get(
    "/{company_id}",
    response_model=ApiResponse[CompanyRead],
    summary="Get company",
    description="Requires membership; other companies are reported as not found.",
)
async def get_company(
    company_id: UUID = Path(..., description="Company ID"),
    service: CompanyService = Depends(_service),
):
    return ok(CompanyRead.model_validate(await service.get_company(company_id)))


# PUBLIC_INTERFACE
@router.put(
    "/{company_id}",
    response_model=ApiResponse[CompanyRead],
    summary="Update company",
    description="Requires OWNER or ADMIN of the company.",
)
async def update_company(
    payload: CompanyUpdate,
    company_id: UUID = Path(..., description="Company ID"),
    service: CompanyService = Depends(_service),
):
    company = await service.update_company(company_id, payload)
    return ok(CompanyRead.model_validate(company), "Company updated")


# PUBLIC_INTERFACE
@router.delete(
    "/{company_id}",
    response_model=ApiResponse[None],
    summary="Delete company",
    description="Soft delete; OWNER only.",
)
async def delete_company(
    company_id: UUID = Path(..., description="Company ID"),
    service: CompanyService = Depends(_service),
):
    await service.delete_company(company_id)
    return ok(None, "Company deleted")


# PUBLIC_INTERFACE
@router.post(
    "/{company_id}/switch",
    response_model=TokenPair,
    summary="Switch company",
    description="Issue tokens bound to the company and the caller's role there.",
)
async def switch_company(
    company_id: UUID = Path(..., description="Company ID"),
    service: CompanyService = Depends(_service),
) -> TokenPair:
    return await service.switch_company(company_id)


# PUBLIC_INTERFACE
@router.post(
    "/{company_id}/invite",
    response_model=ApiResponse[MemberRead],
    status_code=status.HTTP_201_CREATED,
    summary="Invite user",
    description="Add an existing user to the company with a non-OWNER role. Requires OWNER or ADMIN.",
)
async def invite_user(
    payload: InviteRequest,
    company_id: UUID = Path(..., description="Company ID"),
    service: CompanyService = Depends(_service),
):
    membership = await service.invite(company_id, payload)
    return ok(member_read(membership), "User invited")
