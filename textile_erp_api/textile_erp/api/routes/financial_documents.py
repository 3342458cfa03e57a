from __future__ import annotations

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from textile_erp.core.deps import MANAGERS, TenantContext, get_tenant_context, get_tenant_session, require_roles
from textile_erp.schemas.common import ApiResponse, ok, ok_list
from textile_erp.schemas.enums import BillStatus, InvoiceStatus
from textile_erp.schemas.finance import (
    BillCreate,
    BillRead,
    BillStatusUpdate,
    BillUpdate,
    InvoiceCreate,
    InvoiceFromOrder,
    InvoiceRead,
    InvoiceStatusUpdate,
    InvoiceUpdate,
    PaymentRecord,
)
from textile_erp.services.finance import BillService, InvoiceService

router = APIRouter(prefix="/financial-documents", tags=["Financial documents"])


# Invoices

# PUBLIC_INTERFACE
@router.get("/invoices", response_model=ApiResponse[List[InvoiceRead]], summary="List invoices")
async def list_invoices(
    status_filter: Optional[InvoiceStatus] = Query(None, alias="status"),
    customer_id: Optional[UUID] = Query(None),
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    rows = await InvoiceService(session, ctx).list_invoices(
        status=status_filter.value if status_filter else None,
        customer_id=customer_id,
        from_date=from_date,
        to_date=to_date,
        limit=limit,
        offset=offset,
    )
    return ok_list(InvoiceRead, rows)


# PUBLIC_INTERFACE
@router.post(
    "/invoices",
    response_model=ApiResponse[InvoiceRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create invoice",
    description="DRAFT invoice INV###; the due date follows the payment terms when omitted.",
)
async def create_invoice(
    payload: InvoiceCreate,
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    invoice = await InvoiceService(session, ctx).create_invoice(payload)
    return ok(InvoiceRead.model_validate(invoice), "Invoice created")


# PUBLIC_INTERFACE
@router.post(
    "/invoices/from-order/{order_code}",
    response_model=ApiResponse[InvoiceRead],
    status_code=status.HTTP_201_CREATED,
    summary="Invoice an order",
    description="Copy the order lines into a new DRAFT invoice. Cancelled orders can't be invoiced.",
)
async def create_invoice_from_order(
    payload: Optional[InvoiceFromOrder] = None,
    order_code: str = Path(..., description="Order code"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    invoice = await InvoiceService(session, ctx).create_from_order(order_code, payload or InvoiceFromOrder())
    return ok(InvoiceRead.model_validate(invoice), "Invoice created from order")


# PUBLIC_INTERFACE
@router.get("/invoices/{invoice_id}", response_model=ApiResponse[InvoiceRead], summary="Get invoice")
async def get_invoice(
    invoice_id: UUID = Path(..., description="Invoice ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    return ok(InvoiceRead.model_validate(await InvoiceService(session, ctx).get_document(invoice_id)))


# PUBLIC_INTERFACE
@router.put(
    "/invoices/{invoice_id}",
    response_model=ApiResponse[InvoiceRead],
    summary="Update invoice",
    description="Refused once the invoice is paid, partially paid or cancelled.",
)
async def update_invoice(
    payload: InvoiceUpdate,
    invoice_id: UUID = Path(..., description="Invoice ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    invoice = await InvoiceService(session, ctx).update_invoice(invoice_id, payload)
    return ok(InvoiceRead.model_validate(invoice), "Invoice updated")


# PUBLIC_INTERFACE
@router.patch("/invoices/{invoice_id}/status", response_model=ApiResponse[InvoiceRead], summary="Update invoice status")
async def update_invoice_status(
    payload: InvoiceStatusUpdate,
    invoice_id: UUID = Path(..., description="Invoice ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    invoice = await InvoiceService(session, ctx).update_status(invoice_id, payload.status.value)
    return ok(InvoiceRead.model_validate(invoice), f"Invoice status is {invoice.status}")


# PUBLIC_INTERFACE
@router.post(
    "/invoices/{invoice_id}/payment",
    response_model=ApiResponse[InvoiceRead],
    summary="Record invoice payment",
    description="amount_paid is cumulative; the increase is booked as a payment (see /payments). Lowering it is refused.",
)
async def record_invoice_payment(
    payload: PaymentRecord,
    invoice_id: UUID = Path(..., description="Invoice ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    invoice = await InvoiceService(session, ctx).record_payment(invoice_id, payload)
    return ok(InvoiceRead.model_validate(invoice), "Payment recorded")


# PUBLIC_INTERFACE
@router.delete(
    "/invoices/{invoice_id}",
    response_model=ApiResponse[None],
    summary="Delete invoice",
    description="Only DRAFT invoices can be deleted.",
)
async def delete_invoice(
    invoice_id: UUID = Path(..., description="Invoice ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    await InvoiceService(session, ctx).delete_document(invoice_id)
    return ok(None, "Invoice deleted")


# Bills

# PUBLIC_INTERFACE
@router.get("/bills", response_model=ApiResponse[List[BillRead]], summary="List bills")
async def list_bills(
    status_filter: Optional[BillStatus] = Query(None, alias="status"),
    supplier_id: Optional[UUID] = Query(None),
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    rows = await BillService(session, ctx).list_bills(
        status=status_filter.value if status_filter else None,
        supplier_id=supplier_id,
        from_date=from_date,
        to_date=to_date,
        limit=limit,
        offset=offset,
    )
    return ok_list(BillRead, rows)


# PUBLIC_INTERFACE
@router.post(
    "/bills",
    response_model=ApiResponse[BillRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create bill",
    description="DRAFT supplier bill BILL###; items are priced by unit_cost.",
)
async def create_bill(
    payload: BillCreate,
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    bill = await BillService(session, ctx).create_bill(payload)
    return ok(BillRead.model_validate(bill), "Bill created")


# PUBLIC_INTERFACE
@router.get("/bills/{bill_id}", response_model=ApiResponse[BillRead], summary="Get bill")
async def get_bill(
    bill_id: UUID = Path(..., description="Bill ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    return ok(BillRead.model_validate(await BillService(session, ctx).get_document(bill_id)))


# PUBLIC_INTERFACE
@router.put("/bills/{bill_id}", response_model=ApiResponse[BillRead], summary="Update bill")
async def update_bill(
    payload: BillUpdate,
    bill_id: UUID = Path(..., description="Bill ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    bill = await BillService(session, ctx).update_bill(bill_id, payload)
    return ok(BillRead.model_validate(bill), "Bill updated")


# PUBLIC_INTERFACE
@router.patch("/bills/{bill_id}/status", response_model=ApiResponse[BillRead], summary="Update bill status")
async def update_bill_status(
    payload: BillStatusUpdate,
    bill_id: UUID = Path(..., description="Bill ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    bill = await BillService(session, ctx).update_status(bill_id, payload.status.value)
    return ok(BillRead.model_validate(bill), f"Bill status is {bill.status}")


# PUBLIC_INTERFACE
@router.post("/bills/{bill_id}/payment", response_model=ApiResponse[BillRead], summary="Record bill payment")
async def record_bill_payment(
    payload: PaymentRecord,
    bill_id: UUID = Path(..., description="Bill ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    bill = await BillService(session, ctx).record_payment(bill_id, payload)
    return ok(BillRead.model_validate(bill), "Payment recorded")


# PUBLIC_INTERFACE
@router.delete(
    "/bills/{bill_id}",
    response_model=ApiResponse[None],
    summary="Delete bill",
    description="Only DRAFT bills can be deleted.",
)
async def delete_bill(
    bill_id: UUID = Path(..., description="Bill ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    await BillService(session, ctx).delete_document(bill_id)
    return ok(None, "Bill deleted")
