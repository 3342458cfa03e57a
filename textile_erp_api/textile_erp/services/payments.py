from __future__ import annotations

from typing import Dict, List, Optional, Type
from uuid import UUID

from textile_erp.db.models.finance import Payment
from textile_erp.repositories.finance import PaymentRepository
from textile_erp.schemas.finance import PaymentCreate
from textile_erp.services.base import TenantService
from textile_erp.services.finance import BillService, InvoiceService, _DocumentService

_DOCUMENT_SERVICES: Dict[str, Type[_DocumentService]] = {
    "INVOICE": InvoiceService,
    "BILL": BillService,
}


class PaymentService(TenantService):
    """Payment ledger across invoices and bills."""

    def __init__(self, session, ctx) -> None:
        super().__init__(session, ctx)
        self.payments: PaymentRepository = self.repo(PaymentRepository)

    def _documents(self, reference_type: str) -> _DocumentService:
        return _DOCUMENT_SERVICES[reference_type](self.session, self.ctx)

    async def list_payments(self, **filters) -> List[Payment]:
        return await self.payments.list_payments(**filters)

    async def get_payment(self, payment_code: str) -> Payment:
        return self.require(await self.payments.get_by_code(payment_code), "Payment", payment_code)

    # PUBLIC_INTERFACE
    async def list_for_reference(self, reference_type: str, reference_id: UUID) -> List[Payment]:
        """Payments against one invoice or bill; the document must exist in this company."""
        await self._documents(reference_type).get_document(reference_id)
        return await self.payments.list_for(reference_type, reference_id)

    # PUBLIC_INTERFACE
    async def record_payment(self, payload: PaymentCreate) -> Payment:
        return await self._documents(payload.reference_type.value).add_payment(payload.reference_id, payload)

    # PUBLIC_INTERFACE
    async def cancel_payment(self, payment_code: str, reason: Optional[str] = None) -> Payment:
        payment = await self.get_payment(payment_code)
        return await self._documents(payment.reference_type).cancel_payment(payment, reason)
