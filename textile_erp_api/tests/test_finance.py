from datetime import date
from decimal import Decimal

from textile_erp.services.finance import deletion_blocker, due_date_for, settle


def test_net_terms_push_the_due_date():
    assert due_date_for(date(2024, 1, 15), "NET_30") == date(2024, 2, 14)
    assert due_date_for(date(2024, 12, 20), "NET_15") == date(2025, 1, 4)


def test_other_terms_are_due_on_the_document_date():
    assert due_date_for(date(2024, 1, 15), "IMMEDIATE") == date(2024, 1, 15)
    assert due_date_for(date(2024, 1, 15), None) == date(2024, 1, 15)


class TestSettle:
    def test_nothing_paid(self):
        assert settle(Decimal("500"), Decimal("0")) == (Decimal("500.00"), None)

    def test_partial_payment(self):
        balance, status = settle(Decimal("500"), Decimal("120.50"))
        assert balance == Decimal("379.50")
        assert status == "PARTIALLY_PAID"

    def test_full_payment(self):
        assert settle(Decimal("500"), Decimal("500")) == (Decimal("0.00"), "PAID")

    def test_overpayment_leaves_no_negative_balance(self):
        balance, status = settle(Decimal("500"), Decimal("650"))
        assert balance == Decimal("0")
        assert status == "PAID"


def test_only_drafts_can_be_deleted():
    assert deletion_blocker("invoice", "DRAFT") is None
    reason = deletion_blocker("invoice", "SENT")
    assert reason.startswith("Cannot delete invoice in SENT status")
    assert "issued" in reason
    assert "audit trail" in deletion_blocker("bill", "CANCELLED")
