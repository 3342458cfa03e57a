from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select

from textile_erp.db.models.company import AuditLog, Company, User, UserCompany
from .base import BaseRepository, TenantRepository, numbered_code


class UserRepository(BaseRepository):
    """Global user accounts (not company-scoped)."""

    async def get_user_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(func.lower(User.email) == email.lower())
        return await self.scalar_one_or_none(stmt)

    async def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        stmt = select(User).where(User.id == user_id)
        return await self.scalar_one_or_none(stmt)

    async def create_user(self, *, email: str, full_name: Optional[str], hashed_password: str) -> User:
        user = User(email=email.lower(), full_name=full_name, hashed_password=hashed_password, is_active=True)
        await self.add(user)
        await self.flush()
        return user


class CompanyRepository(BaseRepository):
    """Companies are the tenants themselves; lookups here are global."""

    async def get_company(self, company_id: UUID) -> Optional[Company]:
        stmt = select(Company).where(Company.id == company_id)
        return await self.scalar_one_or_none(stmt)

    async def get_by_slug(self, slug: str) -> Optional[Company]:
        stmt = select(Company).where(Company.slug == slug)
        return await self.scalar_one_or_none(stmt)

    async def slug_exists(self, slug: str) -> bool:
        stmt = select(func.count(Company.id)).where(Company.slug == slug)
        result = await self.execute(stmt)
        return int(result.scalar_one() or 0) > 0

    async def last_company_code(self) -> Optional[str]:
        stmt = (
            select(Company.code)
            .where(numbered_code(Company.code, "C"))
            .order_by(func.length(Company.code).desc(), Company.code.desc())
            .limit(1)
        )
        return await self.scalar_one_or_none(stmt)

    async def create_company(self, company: Company) -> Company:
        await self.add(company)
        await self.flush()
        return company


class MembershipRepository(BaseRepository):
    """user_companies rows: who belongs to which company, with what role."""

    async def get_membership(self, user_id: UUID, company_id: UUID) -> Optional[UserCompany]:
        stmt = select(UserCompany).where(UserCompany.user_id == user_id, UserCompany.company_id == company_id)
        return await self.scalar_one_or_none(stmt)

    async def get_active_membership(self, user_id: UUID, company_id: UUID) -> Optional[UserCompany]:
        """Active membership in an active company, or None."""
        stmt = (
            select(UserCompany)
            .join(Company, Company.id == UserCompany.company_id)
            .where(
                UserCompany.user_id == user_id,
                UserCompany.company_id == company_id,
                UserCompany.is_active.is_(True),
                Company.is_active.is_(True),
            )
        )
        return await self.scalar_one_or_none(stmt)

    async def list_for_user(self, user_id: UUID) -> List[UserCompany]:
        stmt = (
            select(UserCompany)
            .join(Company, Company.id == UserCompany.company_id)
            .where(
                UserCompany.user_id == user_id,
                UserCompany.is_active.is_(True),
                Company.is_active.is_(True),
            )
            .order_by(UserCompany.joined_at)
        )
        res = await self.scalars(stmt)
        return list(res.unique())

    async def list_for_company(self, company_id: UUID) -> List[UserCompany]:
        stmt = (
            select(UserCompany)
            .where(UserCompany.company_id == company_id)
            .order_by(UserCompany.joined_at)
        )
        res = await self.scalars(stmt)
        return list(res.unique())

    async def count_active_owners(self, company_id: UUID) -> int:
        stmt = select(func.count(UserCompany.id)).where(
            UserCompany.company_id == company_id,
            UserCompany.role == "OWNER",
            UserCompany.is_active.is_(True),
        )
        result = await self.execute(stmt)
        return int(result.scalar_one() or 0)

    async def create_membership(self, *, user_id: UUID, company_id: UUID, role: str) -> UserCompany:
        membership = UserCompany(user_id=user_id, company_id=company_id, role=role, is_active=True)
        await self.add(membership)
        await self.flush()
        return membership


class AuditRepository(TenantRepository[AuditLog]):
    model = AuditLog

    async def record(
        self,
        *,
        actor_user_id: Optional[UUID],
        action: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        metadata: Optional[dict] = None,
    ) -> AuditLog:
        entry = AuditLog(
            actor_user_id=actor_user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            metadata_=metadata or {},
        )
        self.stamp(entry)
        await self.add(entry)
        return entry
