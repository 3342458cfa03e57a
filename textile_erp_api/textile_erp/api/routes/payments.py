from __future__ import annotations

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from textile_erp.core.deps import ADMINS, MANAGERS, TenantContext, get_tenant_session, require_roles
from textile_erp.schemas.common import ApiResponse, ok, ok_list
from textile_erp.schemas.enums import PaymentMethod, PaymentReferenceType, PaymentStatus
from textile_erp.schemas.finance import PaymentCancel, PaymentCreate, PaymentRead
from textile_erp.services.payments import PaymentService

router = APIRouter(prefix="/payments", tags=["Payments"])


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=ApiResponse[List[PaymentRead]],
    summary="List payments",
    description="Payments received on invoices and paid on bills, newest first.",
)
async def list_payments(
    reference_type: Optional[PaymentReferenceType] = Query(None),
    status_filter: Optional[PaymentStatus] = Query(None, alias="status"),
    payment_method: Optional[PaymentMethod] = Query(None),
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    rows = await PaymentService(session, ctx).list_payments(
        reference_type=reference_type.value if reference_type else None,
        status=status_filter.value if status_filter else None,
        payment_method=payment_method.value if payment_method else None,
        from_date=from_date,
        to_date=to_date,
        limit=limit,
        offset=offset,
    )
    return ok_list(PaymentRead, rows)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=ApiResponse[PaymentRead],
    status_code=status.HTTP_201_CREATED,
    summary="Record payment",
    description="Adds to the document's amount paid; the amount may not exceed its balance due.",
)
async def record_payment(
    payload: PaymentCreate,
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    payment = await PaymentService(session, ctx).record_payment(payload)
    return ok(PaymentRead.model_validate(payment), "Payment recorded")


# PUBLIC_INTERFACE
@router.get(
    "/reference/{reference_type}/{reference_id}",
    response_model=ApiResponse[List[PaymentRead]],
    summary="Payments of an invoice or bill",
)
async def list_reference_payments(
    reference_type: PaymentReferenceType = Path(...),
    reference_id: UUID = Path(..., description="Invoice or bill ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    rows = await PaymentService(session, ctx).list_for_reference(reference_type.value, reference_id)
    return ok_list(PaymentRead, rows)


# PUBLIC_INTERFACE
@router.get("/{payment_code}", response_model=ApiResponse[PaymentRead], summary="Get payment by code")
async def get_payment(
    payment_code: str = Path(..., description="Payment code, e.g. PAY0001"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    return ok(PaymentRead.model_validate(await PaymentService(session, ctx).get_payment(payment_code)))


# PUBLIC_INTERFACE
@router.patch(
    "/{payment_code}/cancel",
    response_model=ApiResponse[PaymentRead],
    summary="Cancel payment",
    description="Voids the payment and takes its amount back off the invoice or bill.",
)
async def cancel_payment(
    payload: Optional[PaymentCancel] = None,
    payment_code: str = Path(..., description="Payment code"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*ADMINS)),
):
    payment = await PaymentService(session, ctx).cancel_payment(payment_code, payload.reason if payload else None)
    return ok(PaymentRead.model_validate(payment), "Payment cancelled")
