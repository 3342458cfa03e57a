from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import UUID

from jose import JWTError

from textile_erp.core.errors import AuthenticationError, ConflictError, PermissionDeniedError
from textile_erp.core.security import (
    REFRESH_TOKEN_TYPE,
    create_access_token,
    create_refresh_token,
    decode_token,
    get_password_hash,
    verify_password,
)
from textile_erp.db.models.company import User
from textile_erp.repositories.companies import MembershipRepository, UserRepository
from textile_erp.schemas.auth import MeResponse, MembershipSummary, RegisterRequest, TokenPair, UserRead
from textile_erp.services.base import BaseService

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
def issue_tokens(user_id: UUID, tenant_id: Optional[UUID] = None, role: Optional[str] = None) -> TokenPair:
    """Build an access/refresh pair, optionally bound to a company and role."""
    tenant = str(tenant_id) if tenant_id else None
    return TokenPair(
        access_token=create_access_token(subject=str(user_id), tenant_id=tenant, role=role),
        refresh_token=create_refresh_token(subject=str(user_id), tenant_id=tenant),
        tenant_id=tenant_id,
        role=role,
    )


class AuthService(BaseService):
    """Registration, login and token refresh for global user accounts."""

    def __init__(self, session) -> None:
        super().__init__(session)
        self.users = UserRepository(session)
        self.memberships = MembershipRepository(session)

    # PUBLIC_INTERFACE
    async def register(self, payload: RegisterRequest) -> User:
        """Create a user; 409 if the email is already registered."""
        if await self.users.get_user_by_email(payload.email):
            raise ConflictError("User with this email already exists")
        user = await self.users.create_user(
            email=payload.email,
            full_name=payload.full_name,
            hashed_password=get_password_hash(payload.password),
        )
        await self.commit()
        await self.session.refresh(user)
        logger.info("Registered user %s", user.email)
        return user

    async def _role_in(self, user_id: UUID, tenant_id: UUID) -> str:
        membership = await self.memberships.get_active_membership(user_id, tenant_id)
        if membership is None:
            raise PermissionDeniedError("Access denied to this company")
        return membership.role

    # PUBLIC_INTERFACE
    async def login(self, email: str, password: str, tenant_id: Optional[UUID] = None) -> TokenPair:
        """
        Authenticate with email and password.

        With a tenant the caller must be an active member there and the tokens
        carry that company and role; without one the tokens carry no tenant.
        """
        user = await self.users.get_user_by_email(email)
        if not user or not verify_password(password, user.hashed_password):
            raise AuthenticationError("Invalid credentials")
        if not user.is_active:
            raise PermissionDeniedError("User is inactive")

        role = await self._role_in(user.id, tenant_id) if tenant_id else None
        user.last_login_at = datetime.now(tz=timezone.utc)
        await self.commit()
        logger.info("User %s logged in (tenant=%s)", user.email, tenant_id or "-")
        return issue_tokens(user.id, tenant_id, role)

    # PUBLIC_INTERFACE
    async def refresh(self, refresh_token: str) -> TokenPair:
        """Issue a new pair; the role is re-read from the membership."""
        try:
            claims: Dict[str, Any] = decode_token(refresh_token)
        except JWTError:
            raise AuthenticationError("Invalid refresh token")
        if claims.get("type") != REFRESH_TOKEN_TYPE:
            raise AuthenticationError("Invalid token type")

        try:
            user_id = UUID(str(claims.get("sub")))
        except ValueError:
            raise AuthenticationError("Invalid refresh token")
        user = await self.users.get_user_by_id(user_id)
        if not user or not user.is_active:
            raise AuthenticationError("User not found or inactive")

        tenant_claim = claims.get("tenant_id")
        tenant_id = UUID(str(tenant_claim)) if tenant_claim else None
        role = await self._role_in(user.id, tenant_id) if tenant_id else None
        return issue_tokens(user.id, tenant_id, role)

    # PUBLIC_INTERFACE
    async def me(self, user: User) -> MeResponse:
        memberships = await self.memberships.list_for_user(user.id)
        return MeResponse(
            user=UserRead.model_validate(user),
            companies=[
                MembershipSummary(
                    company_id=m.company.id,
                    company_name=m.company.name,
                    company_slug=m.company.slug,
                    role=m.role,
                    joined_at=m.joined_at,
                )
                for m in memberships
            ],
        )
