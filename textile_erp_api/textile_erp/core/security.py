"""
Password hashing (passlib bcrypt) and JWT issuing/decoding (python-jose).

Access tokens carry `sub` (user id) and, once a company is selected, the
`tenant_id` and membership `role`. Refresh tokens carry `sub` and `tenant_id`
so a refresh keeps the caller in the same company.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import jwt
from passlib.context import CryptContext

from textile_erp.core.settings import get_app_settings

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

_passwords = CryptContext(schemes=["bcrypt"], deprecated="auto")


# PUBLIC_INTERFACE
def get_password_hash(password: str) -> str:
    return _passwords.hash(password)


# PUBLIC_INTERFACE
def verify_password(plain_password: str, hashed_password: str) -> bool:
    return _passwords.verify(plain_password, hashed_password)


def _sign(claims: Dict[str, Any], lifetime_minutes: int, token_type: str) -> str:
    settings = get_app_settings()
    issued = datetime.now(tz=timezone.utc)
    body = {k: v for k, v in claims.items() if v is not None}
    body.update(type=token_type, iat=issued, exp=issued + timedelta(minutes=lifetime_minutes))
    return jwt.encode(body, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


# PUBLIC_INTERFACE
def create_access_token(
    subject: str,
    tenant_id: Optional[str] = None,
    role: Optional[str] = None,
    expires_minutes: Optional[int] = None,
) -> str:
    minutes = expires_minutes or get_app_settings().ACCESS_TOKEN_EXPIRE_MINUTES
    return _sign({"sub": subject, "tenant_id": tenant_id, "role": role}, minutes, ACCESS_TOKEN_TYPE)


# PUBLIC_INTERFACE
def create_refresh_token(subject: str, tenant_id: Optional[str] = None, expires_minutes: Optional[int] = None) -> str:
    minutes = expires_minutes or get_app_settings().REFRESH_TOKEN_EXPIRE_MINUTES
    return _sign({"sub": subject, "tenant_id": tenant_id}, minutes, REFRESH_TOKEN_TYPE)


# PUBLIC_INTERFACE
def decode_token(token: str) -> Dict[str, Any]:
    """Verified claims; raises jose.JWTError when the signature or expiry is bad."""
    settings = get_app_settings()
    return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
