from __future__ import annotations

import logging
from typing import List
from uuid import UUID

from textile_erp.core.errors import BusinessRuleError, NotFoundError, PermissionDeniedError
from textile_erp.db.models.company import UserCompany
from textile_erp.repositories.companies import MembershipRepository
from textile_erp.schemas.companies import MemberRead, MemberUpdate
from textile_erp.services.base import TenantService, dump

logger = logging.getLogger(__name__)


def member_read(m: UserCompany) -> MemberRead:
    return MemberRead(
        user_id=m.user_id,
        email=m.user.email,
        full_name=m.user.full_name,
        role=m.role,
        is_active=m.is_active,
        joined_at=m.joined_at,
    )


class MemberService(TenantService):
    """Users of the current company, managed through their memberships."""

    def __init__(self, session, ctx) -> None:
        super().__init__(session, ctx)
        self.memberships = MembershipRepository(session)

    async def _get(self, user_id: UUID) -> UserCompany:
        membership = await self.memberships.get_membership(user_id, self.company_id)
        if membership is None:
            raise NotFoundError("User", user_id)
        return membership

    async def _guard_owner(self, membership: UserCompany, *, demoting: bool) -> None:
        """Owners are only changed by owners, and the last active owner stays."""
        if membership.role != "OWNER" or not demoting:
            return
        if self.ctx.role != "OWNER":
            raise PermissionDeniedError("Only an owner can change another owner")
        if membership.is_active and await self.memberships.count_active_owners(self.company_id) <= 1:
            raise BusinessRuleError("Cannot remove or demote the last owner of the company")

    # PUBLIC_INTERFACE
    async def list_members(self) -> List[MemberRead]:
        return [member_read(m) for m in await self.memberships.list_for_company(self.company_id)]

    # PUBLIC_INTERFACE
    async def update_member(self, user_id: UUID, payload: MemberUpdate) -> MemberRead:
        membership = await self._get(user_id)
        changes = dump(payload, exclude_unset=True)
        new_role = changes.get("role")
        demoting = (new_role is not None and new_role != "OWNER") or changes.get("is_active") is False
        await self._guard_owner(membership, demoting=demoting)
        if new_role == "OWNER" and self.ctx.role != "OWNER":
            raise PermissionDeniedError("Only an owner can grant the OWNER role")

        if new_role is not None:
            membership.role = new_role
        if "is_active" in changes and changes["is_active"] is not None:
            membership.is_active = changes["is_active"]
        await self.commit()
        await self.session.refresh(membership)
        logger.info("Updated membership of user %s: role=%s active=%s", user_id, membership.role, membership.is_active)
        return member_read(membership)

    # PUBLIC_INTERFACE
    async def remove_member(self, user_id: UUID) -> None:
        """Deactivate the membership; the user account itself is kept."""
        membership = await self._get(user_id)
        await self._guard_owner(membership, demoting=True)
        membership.is_active = False
        await self.commit()
        logger.info("Removed user %s from company %s", user_id, self.company_id)
