"""
Domain exceptions raised by services and repositories.

Route handlers let these propagate; textile_erp.api.main renders them with the
standard ErrorResponse envelope.
"""

from __future__ import annotations

from typing import Any, Optional


class AppError(Exception):
    """Base application error carrying an HTTP status and machine-readable code."""

    status_code: int = 500
    code: str = "internal_error"

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        self.details = details


class NotFoundError(AppError):
    status_code = 404
    code = "not_found"

    def __init__(self, entity: str, identifier: Any = None) -> None:
        msg = f"{entity} not found" if identifier is None else f"{entity} '{identifier}' not found"
        super().__init__(msg)


class ConflictError(AppError):
    status_code = 409
    code = "conflict"


class BusinessRuleError(AppError):
    """A request that is well-formed but violates a business rule."""

    status_code = 400
    code = "business_rule"


class PermissionDeniedError(AppError):
    status_code = 403
    code = "forbidden"

    def __init__(self, message: str = "Insufficient permissions") -> None:
        super().__init__(message)


class AuthenticationError(AppError):
    status_code = 401
    code = "unauthorized"

    def __init__(self, message: str = "Could not validate credentials") -> None:
        super().__init__(message)
