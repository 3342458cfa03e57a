from __future__ import annotations

from datetime import date
from typing import List, Optional
from uuid import UUID

from textile_erp.db.models.finance import Bill, Invoice, Payment
from .base import TenantRepository


class InvoiceRepository(TenantRepository[Invoice]):
    """Customer invoices."""

    model = Invoice

    async def list_invoices(
        self,
        *,
        status: Optional[str] = None,
        customer_id: Optional[UUID] = None,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Invoice]:
        criteria = [Invoice.is_active.is_(True)]
        if status:
            criteria.append(Invoice.status == status)
        if customer_id:
            criteria.append(Invoice.customer_id == customer_id)
        if from_date:
            criteria.append(Invoice.invoice_date >= from_date)
        if to_date:
            criteria.append(Invoice.invoice_date <= to_date)
        return await self.list_where(
            *criteria, order_by=[Invoice.invoice_date.desc(), Invoice.invoice_code.desc()], limit=limit, offset=offset
        )


class BillRepository(TenantRepository[Bill]):
    """Supplier bills."""

    model = Bill

    async def list_bills(
        self,
        *,
        status: Optional[str] = None,
        supplier_id: Optional[UUID] = None,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Bill]:
        criteria = [Bill.is_active.is_(True)]
        if status:
            criteria.append(Bill.status == status)
        if supplier_id:
            criteria.append(Bill.supplier_id == supplier_id)
        if from_date:
            criteria.append(Bill.bill_date >= from_date)
        if to_date:
            criteria.append(Bill.bill_date <= to_date)
        return await self.list_where(
            *criteria, order_by=[Bill.bill_date.desc(), Bill.bill_code.desc()], limit=limit, offset=offset
        )


class PaymentRepository(TenantRepository[Payment]):
    """Payment ledger rows for invoices and bills."""

    model = Payment

    async def get_by_code(self, payment_code: str) -> Optional[Payment]:
        return await self.scalar_one_or_none(self.scoped().where(Payment.payment_code == payment_code))

    async def list_payments(
        self,
        *,
        reference_type: Optional[str] = None,
        status: Optional[str] = None,
        payment_method: Optional[str] = None,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Payment]:
        criteria = []
        if reference_type:
            criteria.append(Payment.reference_type == reference_type)
        if status:
            criteria.append(Payment.status == status)
        if payment_method:
            criteria.append(Payment.payment_method == payment_method)
        if from_date:
            criteria.append(Payment.payment_date >= from_date)
        if to_date:
            criteria.append(Payment.payment_date <= to_date)
        return await self.list_where(
            *criteria, order_by=[Payment.payment_date.desc(), Payment.payment_code.desc()], limit=limit, offset=offset
        )

    async def list_for(self, reference_type: str, reference_id: UUID) -> List[Payment]:
        return await self.list_where(
            Payment.reference_type == reference_type,
            Payment.reference_id == reference_id,
            order_by=Payment.payment_date.desc(),
        )
