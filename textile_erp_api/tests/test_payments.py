"""Payment ledger: recording and cancelling payments against invoices and bills."""
import uuid
from decimal import Decimal

import pytest

from textile_erp.core.errors import BusinessRuleError, NotFoundError
from textile_erp.db.models.finance import Bill, Invoice, Payment
from textile_erp.schemas.finance import PaymentCreate, PaymentIn, PaymentRecord
from textile_erp.services.finance import BillService, InvoiceService
from textile_erp.services.payments import PaymentService


def _invoice(status="SENT", total="1000", paid="0"):
    total, paid = Decimal(total), Decimal(paid)
    return Invoice(
        id=uuid.uuid4(),
        invoice_code="INV007",
        customer_id=uuid.uuid4(),
        customer_name="Loom House",
        status=status,
        currency="INR",
        total_amount=total,
        amount_paid=paid,
        balance_due=total - paid,
    )


def _bill(status="RECEIVED", total="300", paid="0"):
    total, paid = Decimal(total), Decimal(paid)
    return Bill(
        id=uuid.uuid4(),
        bill_code="BILL004",
        supplier_id=uuid.uuid4(),
        supplier_name="Arvind Yarns",
        status=status,
        currency="INR",
        total_amount=total,
        amount_paid=paid,
        balance_due=total - paid,
    )


def _payment(document, amount, reference_type="INVOICE", **kw):
    return Payment(
        id=uuid.uuid4(),
        payment_code="PAY0002",
        reference_type=reference_type,
        reference_id=document.id,
        amount=Decimal(amount),
        status="COMPLETED",
        **kw,
    )


class TestRecordPayment:
    async def test_overdue_invoice_becomes_partially_paid(self, scripted, tenant_ctx):
        invoice = _invoice(status="OVERDUE")
        session = scripted(invoice, None)
        await InvoiceService(session, tenant_ctx).record_payment(invoice.id, PaymentRecord(amount_paid=Decimal("400")))
        assert invoice.status == "PARTIALLY_PAID"
        assert invoice.amount_paid == Decimal("400")
        assert invoice.balance_due == Decimal("600")
        (payment,) = session.added
        assert payment.payment_code == "PAY0001"
        assert payment.amount == Decimal("400")
        assert payment.reference_type == "INVOICE"
        assert payment.party_name == "Loom House"
        assert payment.payment_method == "OTHER"
        assert session.commits == 1

    async def test_cumulative_amount_books_only_the_increase(self, scripted, tenant_ctx):
        invoice = _invoice(status="PARTIALLY_PAID", paid="400")
        session = scripted(invoice, "PAY0003")
        payload = PaymentRecord(amount_paid=Decimal("1000"), payment_method="UPI")
        await InvoiceService(session, tenant_ctx).record_payment(invoice.id, payload)
        (payment,) = session.added
        assert payment.payment_code == "PAY0004"
        assert payment.amount == Decimal("600")
        assert invoice.status == "PAID"
        assert invoice.balance_due == Decimal("0")
        assert invoice.payment_method == "UPI"

    async def test_lowering_the_amount_paid_is_refused(self, scripted, tenant_ctx):
        invoice = _invoice(status="PARTIALLY_PAID", paid="400")
        session = scripted(invoice)
        with pytest.raises(BusinessRuleError, match="cancel a payment"):
            await InvoiceService(session, tenant_ctx).record_payment(invoice.id, PaymentRecord(amount_paid=Decimal("300")))
        assert invoice.amount_paid == Decimal("400")
        assert session.commits == 0

    async def test_payment_above_the_balance_is_refused(self, scripted, tenant_ctx):
        invoice = _invoice(status="PARTIALLY_PAID", paid="400")
        session = scripted(invoice)
        payload = PaymentIn(amount=Decimal("700"), payment_method="CASH")
        with pytest.raises(BusinessRuleError, match=r"Payment amount \(700.00\) exceeds balance due \(600.00\)"):
            await InvoiceService(session, tenant_ctx).add_payment(invoice.id, payload)
        assert session.added == []

    @pytest.mark.parametrize("status", ["DRAFT", "PAID", "CANCELLED"])
    async def test_unpayable_documents(self, scripted, tenant_ctx, status):
        invoice = _invoice(status=status)
        session = scripted(invoice)
        with pytest.raises(BusinessRuleError, match=f"in {status} status"):
            await InvoiceService(session, tenant_ctx).add_payment(
                invoice.id, PaymentIn(amount=Decimal("10"), payment_method="CASH")
            )

    async def test_bill_payment_through_the_ledger(self, scripted, tenant_ctx):
        bill = _bill()
        session = scripted(bill, None)
        payload = PaymentCreate(
            reference_type="BILL",
            reference_id=bill.id,
            amount=Decimal("100"),
            payment_method="CHEQUE",
            cheque_number="004512",
        )
        payment = await PaymentService(session, tenant_ctx).record_payment(payload)
        assert payment.reference_type == "BILL"
        assert payment.reference_code == "BILL004"
        assert payment.party_id == bill.supplier_id
        assert payment.cheque_number == "004512"
        assert payment.recorded_by == tenant_ctx.user_id
        assert bill.status == "PARTIALLY_PAID"
        assert bill.balance_due == Decimal("200")

    async def test_marking_paid_books_the_outstanding_balance(self, scripted, tenant_ctx):
        invoice = _invoice(status="PARTIALLY_PAID", paid="250")
        session = scripted(invoice, None)
        await InvoiceService(session, tenant_ctx).update_status(invoice.id, "PAID")
        (payment,) = session.added
        assert payment.amount == Decimal("750")
        assert invoice.status == "PAID"
        assert invoice.amount_paid == Decimal("1000")
        assert invoice.balance_due == Decimal("0")


class TestCancelPayment:
    async def test_partial_reversal_keeps_partially_paid(self, scripted, tenant_ctx):
        invoice = _invoice(status="PAID", paid="1000")
        payment = _payment(invoice, "400")
        session = scripted(payment, invoice)
        cancelled = await PaymentService(session, tenant_ctx).cancel_payment("PAY0002", "Cheque bounced")
        assert cancelled.status == "CANCELLED"
        assert cancelled.notes == "Cancelled: Cheque bounced"
        assert invoice.amount_paid == Decimal("600")
        assert invoice.balance_due == Decimal("400")
        assert invoice.status == "PARTIALLY_PAID"
        assert session.commits == 1

    async def test_full_reversal_returns_invoice_to_sent(self, scripted, tenant_ctx):
        invoice = _invoice(status="PARTIALLY_PAID", paid="400")
        session = scripted(_payment(invoice, "400", notes="NEFT"), invoice)
        cancelled = await PaymentService(session, tenant_ctx).cancel_payment("PAY0002")
        assert cancelled.notes == "NEFT\nCancelled"
        assert invoice.amount_paid == Decimal("0")
        assert invoice.status == "SENT"

    async def test_full_reversal_returns_bill_to_received(self, scripted, tenant_ctx):
        bill = _bill(status="PAID", paid="300")
        session = scripted(_payment(bill, "300", reference_type="BILL"), bill)
        await PaymentService(session, tenant_ctx).cancel_payment("PAY0002")
        assert bill.status == "RECEIVED"
        assert bill.balance_due == Decimal("300")

    async def test_cancelling_twice_is_refused(self, scripted, tenant_ctx):
        invoice = _invoice(status="SENT")
        payment = _payment(invoice, "400")
        payment.status = "CANCELLED"
        session = scripted(payment)
        with pytest.raises(BusinessRuleError, match="Payment is already cancelled"):
            await PaymentService(session, tenant_ctx).cancel_payment("PAY0002")
        assert session.commits == 0

    async def test_unknown_code_is_a_404(self, scripted, tenant_ctx):
        with pytest.raises(NotFoundError):
            await PaymentService(scripted(None), tenant_ctx).cancel_payment("PAY9999")


async def test_payments_of_a_foreign_invoice_are_not_listed(scripted, tenant_ctx):
    session = scripted(None)
    with pytest.raises(NotFoundError):
        await PaymentService(session, tenant_ctx).list_for_reference("INVOICE", uuid.uuid4())
    assert len(session.statements) == 1
