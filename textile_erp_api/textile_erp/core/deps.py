from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, AsyncGenerator, Dict
from uuid import UUID

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from textile_erp.core.security import ACCESS_TOKEN_TYPE, decode_token
from textile_erp.db.models.company import User
from textile_erp.db.session import get_async_session, tenant_context
from textile_erp.repositories.companies import AuditRepository, MembershipRepository, UserRepository

logger = logging.getLogger(__name__)

# OAuth2 bearer (used by docs)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

MUTATING_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


@dataclass(frozen=True)
class TenantContext:
    """Who is acting, in which company, with which membership role."""

    company_id: UUID
    user_id: UUID
    role: str


def parse_tenant_header(value: str | None) -> UUID:
    if not value:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Tenant context required")
    try:
        return UUID(value)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-Tenant-ID header must be a valid UUID string.",
        )


# PUBLIC_INTERFACE
async def get_tenant_id(x_tenant_id: str | None = Header(default=None, alias="X-Tenant-ID")) -> UUID:
    """
    Extract and validate the company id from the X-Tenant-ID header.

    Raises:
        HTTPException: 400 if the header is missing or not a UUID.
    """
    return parse_tenant_header(x_tenant_id)


# PUBLIC_INTERFACE
async def get_optional_tenant_id(
    x_tenant_id: str | None = Header(default=None, alias="X-Tenant-ID"),
) -> UUID | None:
    """Like get_tenant_id, but absent header means 'no company selected'."""
    if not x_tenant_id:
        return None
    return parse_tenant_header(x_tenant_id)


# PUBLIC_INTERFACE
async def get_session_no_tenant(
    session: AsyncSession = Depends(get_async_session),
) -> AsyncGenerator[AsyncSession, None]:
    """
    Yield an AsyncSession without tenant context.

    Used for global tables (users, companies, memberships) and for flows that
    bind the tenant themselves, e.g. company creation.
    """
    yield session


# PUBLIC_INTERFACE
async def get_token_payload(token: str = Depends(oauth2_scheme)) -> Dict[str, Any]:
    """Decode the bearer token; only access tokens are accepted."""
    try:
        payload = decode_token(token)
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    if payload.get("type") != ACCESS_TOKEN_TYPE or not payload.get("sub"):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return payload


# PUBLIC_INTERFACE
async def get_current_user(
    payload: Dict[str, Any] = Depends(get_token_payload),
    session: AsyncSession = Depends(get_async_session),
) -> User:
    """Resolve the active user named by the access token."""
    try:
        user_id = UUID(str(payload["sub"]))
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    user = await UserRepository(session).get_user_by_id(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user")
    return user


# PUBLIC_INTERFACE
async def get_tenant_context(
    tenant_id: UUID = Depends(get_tenant_id),
    payload: Dict[str, Any] = Depends(get_token_payload),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
) -> TenantContext:
    """
    Combine header, token and membership into a TenantContext.

    - a token issued for another company -> 403 "Tenant mismatch"
    - no active membership in an active company -> 403 "Access denied to this company"
    The role always comes from the membership row, not the token.
    """
    tok_tenant = payload.get("tenant_id")
    if tok_tenant and str(tok_tenant) != str(tenant_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Tenant mismatch")

    membership = await MembershipRepository(session).get_active_membership(user.id, tenant_id)
    if membership is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied to this company")

    return TenantContext(company_id=tenant_id, user_id=user.id, role=membership.role)


# PUBLIC_INTERFACE
async def get_tenant_session(
    request: Request,
    ctx: TenantContext = Depends(get_tenant_context),
    session: AsyncSession = Depends(get_async_session),
) -> AsyncGenerator[AsyncSession, None]:
    """
    Yield the request session bound to the caller's company (RLS GUC set).

    Mutating requests get an audit_log entry that commits with the operation.
    """
    async with tenant_context(session, ctx.company_id):
        if request.method in MUTATING_METHODS:
            await AuditRepository(session, ctx.company_id).record(
                actor_user_id=ctx.user_id,
                action=f"{request.method} {request.url.path}",
                entity_type=_entity_type_from_path(request.url.path),
                metadata={"role": ctx.role, "query": str(request.url.query) or None},
            )
        yield session


def _entity_type_from_path(path: str) -> str | None:
    parts = [p for p in path.split("/") if p]
    # /api/v1/<resource>/...
    return parts[2] if len(parts) > 2 else None


# PUBLIC_INTERFACE
def require_roles(*required: str):
    """
    Dependency factory: 403 "Insufficient permissions" unless the membership
    role is one of `required`. Returns the TenantContext.
    """

    async def _dep(ctx: TenantContext = Depends(get_tenant_context)) -> TenantContext:
        if ctx.role not in required:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return ctx

    return _dep


MANAGERS = ("OWNER", "ADMIN", "MANAGER")
ADMINS = ("OWNER", "ADMIN")
