from __future__ import annotations

import logging
from typing import List
from uuid import UUID

from textile_erp.core.errors import ConflictError, NotFoundError, PermissionDeniedError
from textile_erp.db.models.company import Company, User, UserCompany
from textile_erp.db.models.location import Location
from textile_erp.db.session import tenant_context
from textile_erp.repositories.companies import CompanyRepository, MembershipRepository, UserRepository
from textile_erp.repositories.locations import LocationRepository
from textile_erp.schemas.auth import TokenPair
from textile_erp.schemas.companies import (
    CompanyCreate,
    CompanyMembershipRead,
    CompanyRead,
    CompanyUpdate,
    InviteRequest,
    SlugCheck,
)
from textile_erp.services.auth import issue_tokens
from textile_erp.services.base import BaseService, apply_changes, dump
from textile_erp.services.codes import COMPANY_CODE, LOCATION_CODE, format_code, next_code_from, slugify

logger = logging.getLogger(__name__)

COMPANY_ADMINS = ("OWNER", "ADMIN")


class CompanyService(BaseService):
    """
    Company (tenant) lifecycle on behalf of a signed-in user.

    Companies and memberships are global tables; only the headquarters location
    created with a company is written inside that company's tenant context.
    """

    def __init__(self, session, user: User) -> None:
        super().__init__(session)
        self.user = user
        self.companies = CompanyRepository(session)
        self.memberships = MembershipRepository(session)

    async def _unique_slug(self, name: str) -> str:
        base = slugify(name) or "company"
        slug, n = base, 0
        while await self.companies.slug_exists(slug):
            n += 1
            slug = f"{base}-{n}"
        return slug

    async def _membership(self, company_id: UUID, roles=None) -> UserCompany:
        """Active membership of the caller; 404 when absent, 403 when the role is not allowed."""
        membership = await self.memberships.get_active_membership(self.user.id, company_id)
        if membership is None:
            raise NotFoundError("Company", company_id)
        if roles and membership.role not in roles:
            raise PermissionDeniedError()
        return membership

    # PUBLIC_INTERFACE
    async def create_company(self, payload: CompanyCreate) -> CompanyMembershipRead:
        """
        Create a company, its headquarters location (L001) and the caller's
        OWNER membership in a single transaction.
        """
        code = next_code_from(await self.companies.last_company_code(), *COMPANY_CODE)
        company = Company(
            code=code,
            slug=await self._unique_slug(payload.name),
            is_active=True,
            **dump(payload),
        )
        await self.companies.create_company(company)

        async with tenant_context(self.session, company.id):
            await LocationRepository(self.session, company.id).create(
                Location(
                    location_code=format_code(LOCATION_CODE[0], 1, LOCATION_CODE[1]),
                    name=f"{company.name} Headquarters",
                    type="BRANCH",
                    is_default=True,
                    is_headquarters=True,
                    is_active=True,
                    country=company.country,
                    email=company.email,
                    phone=company.phone,
                )
            )
            membership = await self.memberships.create_membership(
                user_id=self.user.id, company_id=company.id, role="OWNER"
            )
            await self.commit()
            await self.session.refresh(company)
            await self.session.refresh(membership)

        logger.info("Created company %s (%s) owned by %s", company.code, company.slug, self.user.email)
        return CompanyMembershipRead(
            company=CompanyRead.model_validate(company), role=membership.role, joined_at=membership.joined_at
        )

    # PUBLIC_INTERFACE
    async def list_companies(self) -> List[CompanyMembershipRead]:
        memberships = await self.memberships.list_for_user(self.user.id)
        return [
            CompanyMembershipRead(
                company=CompanyRead.model_validate(m.company), role=m.role, joined_at=m.joined_at
            )
            for m in memberships
        ]

    # PUBLIC_INTERFACE
    async def check_slug(self, slug: str) -> SlugCheck:
        normalized = slugify(slug)
        available = bool(normalized) and not await self.companies.slug_exists(normalized)
        return SlugCheck(slug=normalized, available=available)

    # PUBLIC_INTERFACE
    async def get_company(self, company_id: UUID) -> Company:
        membership = await self._membership(company_id)
        return membership.company

    # PUBLIC_INTERFACE
    async def update_company(self, company_id: UUID, payload: CompanyUpdate) -> Company:
        membership = await self._membership(company_id, COMPANY_ADMINS)
        company = membership.company
        apply_changes(company, dump(payload, exclude_unset=True))
        await self.commit()
        await self.session.refresh(company)
        logger.info("Updated company %s", company.code)
        return company

    # PUBLIC_INTERFACE
    async def delete_company(self, company_id: UUID) -> None:
        """Soft delete; OWNER only."""
        membership = await self._membership(company_id, ("OWNER",))
        membership.company.is_active = False
        await self.commit()
        logger.info("Deactivated company %s", membership.company.code)

    # PUBLIC_INTERFACE
    async def switch_company(self, company_id: UUID) -> TokenPair:
        membership = await self._membership(company_id)
        return issue_tokens(self.user.id, company_id, membership.role)

    # PUBLIC_INTERFACE
    async def invite(self, company_id: UUID, payload: InviteRequest) -> UserCompany:
        """
        Add an existing user to the company.

        Raises:
            NotFoundError: no user with that email
            ConflictError: already an active member
        """
        await self._membership(company_id, COMPANY_ADMINS)
        invitee = await UserRepository(self.session).get_user_by_email(payload.email)
        if invitee is None:
            raise NotFoundError("User", payload.email)

        role = payload.role.value
        existing = await self.memberships.get_membership(invitee.id, company_id)
        if existing is not None:
            if existing.is_active:
                raise ConflictError("User is already a member of this company")
            existing.is_active = True
            existing.role = role
            membership = existing
        else:
            membership = await self.memberships.create_membership(
                user_id=invitee.id, company_id=company_id, role=role
            )
        await self.commit()
        await self.session.refresh(membership)
        logger.info("Invited %s to company %s as %s", invitee.email, company_id, role)
        return membership
