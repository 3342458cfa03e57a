from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from textile_erp.core.deps import ADMINS, TenantContext, get_tenant_context, get_tenant_session, require_roles
from textile_erp.schemas.common import ApiResponse, ok
from textile_erp.schemas.companies import MemberRead, MemberUpdate
from textile_erp.services.members import MemberService

router = APIRouter(prefix="/users", tags=["Users"])


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=ApiResponse[List[MemberRead]],
    summary="List company users",
    description="List members of the current company with their role.",
)
async def list_users(
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    return ok(await MemberService(session, ctx).list_members())


# PUBLIC_INTERFACE
@router.patch(
    "/{user_id}",
    response_model=ApiResponse[MemberRead],
    summary="Update company user",
    description="Change a member's role or active flag. OWNER memberships can only be changed by an OWNER.",
)
async def update_user(
    payload: MemberUpdate,
    user_id: UUID = Path(..., description="User ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*ADMINS)),
):
    return ok(await MemberService(session, ctx).update_member(user_id, payload), "User updated")


# PUBLIC_INTERFACE
@router.delete(
    "/{user_id}",
    response_model=ApiResponse[None],
    summary="Remove company user",
    description="Deactivate the membership; the last active OWNER can't be removed.",
)
async def remove_user(
    user_id: UUID = Path(..., description="User ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*ADMINS)),
):
    await MemberService(session, ctx).remove_member(user_id)
    return ok(None, "User removed from company")
