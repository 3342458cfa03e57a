from __future__ import annotations

import logging
import re
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple, Type
from uuid import UUID

from textile_erp.core.errors import BusinessRuleError
from textile_erp.db.models.finance import Bill, BillItem, Invoice, InvoiceItem, Payment
from textile_erp.repositories.base import TenantRepository
from textile_erp.repositories.catalog import ProductRepository
from textile_erp.repositories.finance import BillRepository, InvoiceRepository, PaymentRepository
from textile_erp.repositories.locations import LocationRepository
from textile_erp.repositories.procurement import SupplierRepository
from textile_erp.repositories.sales import CustomerRepository, OrderRepository
from textile_erp.schemas.finance import (
    BillCreate,
    BillUpdate,
    InvoiceCreate,
    InvoiceFromOrder,
    InvoiceUpdate,
    PaymentIn,
    PaymentRecord,
)
from textile_erp.services.base import TenantService, apply_changes, dump
from textile_erp.services.codes import BILL_CODE, INVOICE_CODE, PAYMENT_CODE
from textile_erp.services.orders import apply_totals, check_transition, price_items
from textile_erp.services.pricing import ZERO, money

logger = logging.getLogger(__name__)

INVOICE_TRANSITIONS: Mapping[str, FrozenSet[str]] = {
    "DRAFT": frozenset({"SENT", "CANCELLED"}),
    "SENT": frozenset({"PARTIALLY_PAID", "PAID", "OVERDUE", "CANCELLED"}),
    "PARTIALLY_PAID": frozenset({"PAID", "OVERDUE"}),
    "OVERDUE": frozenset({"PARTIALLY_PAID", "PAID"}),
    "PAID": frozenset(),
    "CANCELLED": frozenset(),
}
BILL_TRANSITIONS: Mapping[str, FrozenSet[str]] = {
    "DRAFT": frozenset({"RECEIVED", "CANCELLED"}),
    "RECEIVED": frozenset({"PARTIALLY_PAID", "PAID", "OVERDUE", "CANCELLED"}),
    "PARTIALLY_PAID": frozenset({"PAID", "OVERDUE"}),
    "OVERDUE": frozenset({"PARTIALLY_PAID", "PAID"}),
    "PAID": frozenset(),
    "CANCELLED": frozenset(),
}
PAID_STATUSES = frozenset({"PARTIALLY_PAID", "PAID"})
UNPAYABLE_STATUSES = frozenset({"DRAFT", "PAID", "CANCELLED"})

_DELETE_REASONS = {
    "SENT": "it has already been issued",
    "RECEIVED": "it has already been received",
    "PARTIALLY_PAID": "payments have been recorded against it",
    "PAID": "it has been paid",
    "OVERDUE": "it is overdue with an outstanding balance",
    "CANCELLED": "cancelled documents are kept for the audit trail",
}
_NET_TERMS = re.compile(r"^NET_(\d+)$")


# PUBLIC_INTERFACE
def due_date_for(document_date: date, payment_terms: Optional[str]) -> date:
    """NET_n terms add n days to the document date; every other term is due on the date itself."""
    match = _NET_TERMS.match(payment_terms or "")
    return document_date + timedelta(days=int(match.group(1))) if match else document_date


# PUBLIC_INTERFACE
def settle(total: Decimal, amount_paid: Decimal) -> Tuple[Decimal, Optional[str]]:
    """
    Balance and payment status for a cumulative amount paid.

    Returns (balance_due, status) where status is PAID, PARTIALLY_PAID or
    None when nothing has been paid.
    """
    total = money(total)
    paid = money(amount_paid)
    balance = max(total - paid, ZERO)
    if paid <= ZERO:
        return balance, None
    return balance, "PAID" if paid >= total else "PARTIALLY_PAID"


# PUBLIC_INTERFACE
def deletion_blocker(label: str, status: str) -> Optional[str]:
    """Reason a document in `status` can't be deleted, or None for DRAFT."""
    if status == "DRAFT":
        return None
    reason = _DELETE_REASONS.get(status, "only drafts can be deleted")
    return f"Cannot delete {label} in {status} status: {reason}"


def _pricing_inputs(item: Any, price_field: str) -> Dict[str, Any]:
    """Pricing inputs of a stored item row."""
    return {
        "quantity": item.quantity,
        price_field: getattr(item, price_field),
        "discount_percent": item.discount_percent,
        "tax_rate": item.tax_rate,
    }


class _DocumentService(TenantService):
    """
    Shared workflow for invoices and bills.

    Subclasses set the model, the counterparty and the transition map; header
    math, payments and deletion rules are the same for both.
    """

    label: str
    model: Type[Any]
    item_model: Type[Any]
    repo_cls: Type[TenantRepository]
    code_field: str
    code: Tuple[str, int]
    date_field: str
    price_field: str
    party_field: str
    party_name_field: str
    party_repo_cls: Type[TenantRepository]
    party_label: str
    transitions: Mapping[str, FrozenSet[str]]
    # payment ledger reference type, and the status a fully refunded document returns to
    reference_type: str
    issued_status: str

    def __init__(self, session, ctx) -> None:
        super().__init__(session, ctx)
        self.documents = self.repo(self.repo_cls)

    async def get_document(self, document_id: UUID):
        return self.require(await self.documents.get_active(document_id), self.label.capitalize(), document_id)

    async def _party_name(self, party_id: Optional[UUID]) -> Optional[str]:
        if party_id is None:
            return None
        party = self.require(await self.repo(self.party_repo_cls).get_active(party_id), self.party_label, party_id)
        return party.name

    async def _location(self, location_id: Optional[UUID]) -> UUID:
        locations = self.repo(LocationRepository)
        if location_id is not None:
            return self.require(await locations.get_active(location_id), "Location", location_id).id
        hq = await locations.get_headquarters()
        if hq is None:
            raise BusinessRuleError("No headquarters location configured for this company")
        return hq.id

    async def _items(self, items, shipping_charges):
        products = self.repo(ProductRepository)
        for item in items:
            if getattr(item, "product_id", None) is not None:
                self.require(await products.get_active(item.product_id), "Product", item.product_id)
        rows, totals = price_items(items, price_field=self.price_field, shipping_charges=shipping_charges)
        columns = set(self.item_model.__table__.columns.keys())
        built = [
            self.item_model(company_id=self.company_id, **{k: v for k, v in row.items() if k in columns})
            for row in rows
        ]
        return built, totals

    def _refresh_balance(self, document) -> None:
        document.balance_due, _ = settle(document.total_amount, document.amount_paid or ZERO)

    async def _create(self, data: Dict[str, Any], items) -> Any:
        doc_date = data[self.date_field]
        data["location_id"] = await self._location(data.get("location_id"))
        if not data.get("due_date"):
            data["due_date"] = due_date_for(doc_date, data.get("payment_terms"))
        if data.get(self.party_field):
            name = await self._party_name(data[self.party_field])
            data[self.party_name_field] = data.get(self.party_name_field) or name

        built, totals = await self._items(items, data.get("shipping_charges"))
        code = await self.next_code(self.documents, getattr(self.model, self.code_field), *self.code)
        document = self.model(
            status="DRAFT", is_active=True, amount_paid=ZERO, **{self.code_field: code}, **data
        )
        apply_totals(document, totals)
        self._refresh_balance(document)
        document.items = built
        await self.documents.create(document)
        await self.commit()
        await self.session.refresh(document)
        logger.info("Created %s %s with %d items, total %s", self.label, code, len(built), document.total_amount)
        return document

    # PUBLIC_INTERFACE
    async def update_document(self, document_id: UUID, payload) -> Any:
        """Header and item changes; refused once any payment has been recorded."""
        document = await self.get_document(document_id)
        if document.status in PAID_STATUSES:
            raise BusinessRuleError(f"Cannot modify a {self.label} in {document.status} status")
        if document.status == "CANCELLED":
            raise BusinessRuleError(f"Cannot modify a cancelled {self.label}")

        changes = dump(payload, exclude_unset=True, exclude=("items",))
        if changes.get("location_id"):
            changes["location_id"] = await self._location(changes["location_id"])
        if changes.get(self.party_field):
            name = await self._party_name(changes[self.party_field])
            changes.setdefault(self.party_name_field, name)
        required = ("location_id", self.date_field, "due_date", "shipping_charges")
        apply_changes(document, changes, skip=[k for k in required if changes.get(k, "") is None])

        if payload.items is not None:
            built, totals = await self._items(payload.items, document.shipping_charges)
            document.items = built
            apply_totals(document, totals)
        elif "shipping_charges" in changes:
            rows = [_pricing_inputs(i, self.price_field) for i in document.items]
            _, totals = price_items(rows, price_field=self.price_field, shipping_charges=document.shipping_charges)
            apply_totals(document, totals)
        self._refresh_balance(document)

        await self.commit()
        await self.session.refresh(document)
        logger.info("Updated %s %s", self.label, getattr(document, self.code_field))
        return document

    # PUBLIC_INTERFACE
    async def update_status(self, document_id: UUID, status: str) -> Any:
        """Workflow move; marking a document PAID books its outstanding balance as one payment."""
        document = await self.get_document(document_id)
        if not check_transition(self.transitions, document.status, status):
            return document
        previous = document.status
        if status == "PAID":
            outstanding, _ = settle(document.total_amount, document.amount_paid or ZERO)
            if outstanding > ZERO:
                await self._post_payment(
                    document,
                    outstanding,
                    payment_method=document.payment_method or "OTHER",
                    notes=f"Balance settled when the {self.label} was marked paid",
                )
        document.status = status
        await self.commit()
        await self.session.refresh(document)
        logger.info("%s %s status %s -> %s", self.label.capitalize(), getattr(document, self.code_field), previous, status)
        return document

    async def _post_payment(
        self,
        document,
        amount: Decimal,
        *,
        payment_method: str,
        payment_date: Optional[date] = None,
        transaction_ref: Optional[str] = None,
        **details: Any,
    ) -> Payment:
        """Add one payment row and roll it into the document's amount paid and status (no commit)."""
        if document.status in UNPAYABLE_STATUSES:
            raise BusinessRuleError(f"Cannot record a payment on a {self.label} in {document.status} status")
        amount = money(amount)
        outstanding, _ = settle(document.total_amount, document.amount_paid or ZERO)
        if amount > outstanding:
            raise BusinessRuleError(f"Payment amount ({amount}) exceeds balance due ({outstanding})")

        paid = money((document.amount_paid or ZERO) + amount)
        balance, paid_status = settle(document.total_amount, paid)
        check_transition(self.transitions, document.status, paid_status)
        document.status = paid_status
        document.amount_paid = paid
        document.balance_due = balance
        document.payment_method = payment_method
        document.payment_date = payment_date or date.today()
        if transaction_ref is not None:
            document.transaction_ref = transaction_ref

        payments = self.repo(PaymentRepository)
        code = await self.next_code(payments, Payment.payment_code, *PAYMENT_CODE)
        payment = Payment(
            payment_code=code,
            reference_type=self.reference_type,
            reference_id=document.id,
            reference_code=getattr(document, self.code_field),
            party_id=getattr(document, self.party_field),
            party_name=getattr(document, self.party_name_field),
            amount=amount,
            currency=document.currency,
            payment_date=document.payment_date,
            payment_method=payment_method,
            transaction_ref=transaction_ref,
            status="COMPLETED",
            recorded_by=self.ctx.user_id,
            **details,
        )
        await payments.create(payment)
        logger.info(
            "Payment %s of %s on %s %s: paid %s, balance %s (%s)",
            code, amount, self.label, payment.reference_code, paid, balance, paid_status,
        )
        return payment

    # PUBLIC_INTERFACE
    async def add_payment(self, document_id: UUID, payload: PaymentIn) -> Payment:
        """Record one payment of `payload.amount` against the document."""
        document = await self.get_document(document_id)
        details = dump(payload, exclude=("amount", "reference_type", "reference_id"))
        payment = await self._post_payment(document, payload.amount, **details)
        await self.commit()
        await self.session.refresh(payment)
        return payment

    # PUBLIC_INTERFACE
    async def record_payment(self, document_id: UUID, payload: PaymentRecord) -> Any:
        """
        Bring the cumulative amount paid up to `payload.amount_paid`.

        The increase is booked as a payment row. Lowering the amount is refused:
        payments are taken back by cancelling them.
        """
        document = await self.get_document(document_id)
        if document.status in UNPAYABLE_STATUSES:
            raise BusinessRuleError(f"Cannot record a payment on a {self.label} in {document.status} status")

        increase = money(payload.amount_paid) - money(document.amount_paid or ZERO)
        if increase < ZERO:
            raise BusinessRuleError(
                f"Amount paid cannot be lowered below {money(document.amount_paid)}; cancel a payment instead"
            )
        details = dump(payload, exclude_unset=True, exclude=("amount_paid",))
        if increase > ZERO:
            method = details.pop("payment_method", None) or document.payment_method or "OTHER"
            await self._post_payment(document, increase, payment_method=method, **details)
        else:
            apply_changes(document, details)
        await self.commit()
        await self.session.refresh(document)
        return document

    # PUBLIC_INTERFACE
    async def cancel_payment(self, payment: Payment, reason: Optional[str] = None) -> Payment:
        """
        Void a payment and take its amount back off the document.

        The document returns to its issued status once nothing is paid, else
        stays PARTIALLY_PAID. This reversal is outside the forward workflow.
        """
        if payment.status == "CANCELLED":
            raise BusinessRuleError("Payment is already cancelled")
        document = self.require(await self.documents.get(payment.reference_id), self.label.capitalize(), payment.reference_id)

        paid = max(ZERO, money((document.amount_paid or ZERO) - payment.amount))
        balance, paid_status = settle(document.total_amount, paid)
        document.amount_paid = paid
        document.balance_due = balance
        document.status = paid_status or self.issued_status

        payment.status = "CANCELLED"
        note = f"Cancelled: {reason}" if reason else "Cancelled"
        payment.notes = f"{payment.notes}\n{note}" if payment.notes else note
        await self.commit()
        await self.session.refresh(payment)
        logger.info(
            "Cancelled payment %s on %s %s: paid %s, balance %s (%s)",
            payment.payment_code, self.label, payment.reference_code, paid, balance, document.status,
        )
        return payment

    # PUBLIC_INTERFACE
    async def delete_document(self, document_id: UUID) -> None:
        document = await self.get_document(document_id)
        blocker = deletion_blocker(self.label, document.status)
        if blocker:
            raise BusinessRuleError(blocker)
        document.is_active = False
        await self.commit()
        logger.info("Deleted draft %s %s", self.label, getattr(document, self.code_field))


class InvoiceService(_DocumentService):
    """Customer invoices (accounts receivable)."""

    label = "invoice"
    model = Invoice
    item_model = InvoiceItem
    repo_cls = InvoiceRepository
    code_field = "invoice_code"
    code = INVOICE_CODE
    date_field = "invoice_date"
    price_field = "unit_price"
    party_field = "customer_id"
    party_name_field = "customer_name"
    party_repo_cls = CustomerRepository
    party_label = "Customer"
    transitions = INVOICE_TRANSITIONS
    reference_type = "INVOICE"
    issued_status = "SENT"

    async def list_invoices(self, **filters) -> List[Invoice]:
        return await self.documents.list_invoices(**filters)

    async def _check_order(self, order_id: Optional[UUID]) -> None:
        if order_id is None:
            return
        order = self.require(await self.repo(OrderRepository).get_active(order_id), "Order", order_id)
        if order.status == "CANCELLED":
            raise BusinessRuleError(f"Cannot invoice cancelled order {order.order_code}")

    # PUBLIC_INTERFACE
    async def create_invoice(self, payload: InvoiceCreate) -> Invoice:
        await self._check_order(payload.order_id)
        return await self._create(dump(payload, exclude=("items",)), payload.items)

    # PUBLIC_INTERFACE
    async def create_from_order(self, order_code: str, payload: InvoiceFromOrder) -> Invoice:
        """Copy an order's customer, lines and shipping into a new DRAFT invoice."""
        order = self.require(await self.repo(OrderRepository).get_by_code(order_code), "Order", order_code)
        if order.status == "CANCELLED":
            raise BusinessRuleError(f"Cannot invoice cancelled order {order.order_code}")

        data = dump(payload)
        data.update(
            invoice_date=data.get("invoice_date") or date.today(),
            customer_id=order.customer_id,
            customer_name=order.customer_name,
            order_id=order.id,
            location_id=order.location_id,
            currency=order.currency,
            shipping_charges=order.shipping_charges,
        )
        items = [
            {
                "product_id": i.product_id,
                "item_code": i.item_code,
                "description": i.description,
                "quantity": i.quantity,
                "unit_of_measure": i.unit_of_measure,
                "unit_price": i.unit_price,
                "discount_percent": i.discount_percent,
                "tax_rate": i.tax_rate,
            }
            for i in order.items
        ]
        if not items:
            raise BusinessRuleError(f"Order {order.order_code} has no items to invoice")
        return await self._create(data, items)

    async def update_invoice(self, invoice_id: UUID, payload: InvoiceUpdate) -> Invoice:
        return await self.update_document(invoice_id, payload)


class BillService(_DocumentService):
    """Supplier bills (accounts payable)."""

    label = "bill"
    model = Bill
    item_model = BillItem
    repo_cls = BillRepository
    code_field = "bill_code"
    code = BILL_CODE
    date_field = "bill_date"
    price_field = "unit_cost"
    party_field = "supplier_id"
    party_name_field = "supplier_name"
    party_repo_cls = SupplierRepository
    party_label = "Supplier"
    transitions = BILL_TRANSITIONS
    reference_type = "BILL"
    issued_status = "RECEIVED"

    async def list_bills(self, **filters) -> List[Bill]:
        return await self.documents.list_bills(**filters)

    # PUBLIC_INTERFACE
    async def create_bill(self, payload: BillCreate) -> Bill:
        return await self._create(dump(payload, exclude=("items",)), payload.items)

    async def update_bill(self, bill_id: UUID, payload: BillUpdate) -> Bill:
        return await self.update_document(bill_id, payload)
