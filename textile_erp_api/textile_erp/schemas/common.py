"""
Envelopes and small shared models.

Domain endpoints answer with ApiResponse[T] ({success, data, message}); every
error, whatever raised it, is rendered as ErrorResponse by the handlers in
textile_erp.api.main.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Generic, Iterable, List, Optional, Type, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class ORMModel(BaseModel):
    """Read model validated straight from ORM rows."""

    model_config = ConfigDict(from_attributes=True)


class MessageResponse(BaseModel):
    message: str
    details: Optional[dict] = None


class TenantEcho(BaseModel):
    tenant_id: UUID = Field(..., description="Company id taken from X-Tenant-ID")


class EnumOption(BaseModel):
    value: str
    label: str


def enum_options(enum_cls: Type[Enum]) -> List[EnumOption]:
    """TRANSFER_IN -> {"value": "TRANSFER_IN", "label": "Transfer In"}"""
    return [EnumOption(value=m.value, label=m.value.replace("_", " ").title()) for m in enum_cls]


# PUBLIC_INTERFACE
class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None


# PUBLIC_INTERFACE
def ok(data: Any = None, message: Optional[str] = None) -> ApiResponse:
    return ApiResponse(success=True, data=data, message=message)


def ok_list(read_model: Type[BaseModel], rows: Iterable[Any], message: Optional[str] = None) -> ApiResponse:
    """Validate ORM rows into `read_model` and wrap them."""
    return ApiResponse(success=True, data=[read_model.model_validate(r) for r in rows], message=message)


class ErrorInfo(BaseModel):
    type: str = Field(..., description="Machine-readable code, e.g. not_found or validation_error")
    message: str
    details: Optional[Any] = Field(default=None, description="Validation issues or extra context")


# PUBLIC_INTERFACE
class ErrorResponse(BaseModel):
    success: bool = False
    status: int
    message: str
    error: ErrorInfo
    correlation_id: Optional[str] = None
    tenant_id: Optional[str] = Field(default=None, description="X-Tenant-ID of the failed request, if sent")
    path: Optional[str] = None
    method: Optional[str] = None
    timestamp: datetime
