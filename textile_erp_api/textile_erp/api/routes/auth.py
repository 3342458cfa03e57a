from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from textile_erp.core.deps import get_current_user, get_optional_tenant_id, get_session_no_tenant
from textile_erp.db.models.company import User
from textile_erp.schemas.auth import MeResponse, RefreshRequest, RegisterRequest, TokenPair, UserRead
from textile_erp.schemas.common import ApiResponse, MessageResponse, ok
from textile_erp.services.auth import AuthService

router = APIRouter(prefix="/auth", tags=["Auth"])


# PUBLIC_INTERFACE
@router.post(
    "/register",
    response_model=ApiResponse[UserRead],
    status_code=status.HTTP_201_CREATED,
    summary="Register user",
    description="Creates a global account with no company access; 409 when the email is taken.",
)
async def register_user(payload: RegisterRequest, session: AsyncSession = Depends(get_session_no_tenant)):
    user = await AuthService(session).register(payload)
    return ok(UserRead.model_validate(user), "User registered")


# PUBLIC_INTERFACE
@router.post(
    "/login",
    response_model=TokenPair,
    summary="Login",
    description=(
        "OAuth2 password form (username is the email). Sending X-Tenant-ID binds the "
        "tokens to that company and the caller's membership role in it."
    ),
)
async def login_for_tokens(
    form_data: OAuth2PasswordRequestForm = Depends(),
    tenant_id: Optional[UUID] = Depends(get_optional_tenant_id),
    session: AsyncSession = Depends(get_session_no_tenant),
) -> TokenPair:
    return await AuthService(session).login(form_data.username, form_data.password, tenant_id)


# PUBLIC_INTERFACE
@router.post(
    "/refresh",
    response_model=TokenPair,
    summary="Refresh tokens",
    description="New pair for the same user and company; the role is re-read from the membership.",
)
async def refresh_token(payload: RefreshRequest, session: AsyncSession = Depends(get_session_no_tenant)) -> TokenPair:
    return await AuthService(session).refresh(payload.refresh_token)


# PUBLIC_INTERFACE
@router.post("/logout", response_model=MessageResponse, summary="Logout")
async def logout() -> MessageResponse:
    """Tokens are stateless; the client drops them."""
    return MessageResponse(message="Logged out")


# PUBLIC_INTERFACE
@router.get("/me", response_model=ApiResponse[MeResponse], summary="Current user and companies")
async def read_current_user(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session_no_tenant),
):
    return ok(await AuthService(session).me(user))
