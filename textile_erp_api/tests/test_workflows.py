"""Status workflows: sales and purchase orders, machines, inspections and financial documents."""
import pytest

from textile_erp.core.errors import BusinessRuleError
from textile_erp.services.finance import BILL_TRANSITIONS, INVOICE_TRANSITIONS
from textile_erp.services.machines import machine_status_changes
from textile_erp.services.orders import ORDER_TRANSITIONS, check_transition
from textile_erp.services.purchase_orders import PURCHASE_ORDER_TRANSITIONS
from textile_erp.services.quality import INSPECTION_TRANSITIONS


@pytest.mark.parametrize(
    "current,target",
    [
        ("DRAFT", "CONFIRMED"),
        ("CONFIRMED", "IN_PRODUCTION"),
        ("IN_PRODUCTION", "READY_TO_SHIP"),
        ("READY_TO_SHIP", "SHIPPED"),
        ("SHIPPED", "DELIVERED"),
        ("IN_PRODUCTION", "CANCELLED"),
    ],
)
def test_order_allowed_moves(current, target):
    assert check_transition(ORDER_TRANSITIONS, current, target) is True


@pytest.mark.parametrize(
    "current,target",
    [
        ("DRAFT", "SHIPPED"),
        ("SHIPPED", "CANCELLED"),
        ("DELIVERED", "DRAFT"),
        ("CANCELLED", "CONFIRMED"),
    ],
)
def test_order_rejected_moves(current, target):
    with pytest.raises(BusinessRuleError) as exc:
        check_transition(ORDER_TRANSITIONS, current, target)
    assert exc.value.status_code == 400
    assert current in exc.value.message and target in exc.value.message


def test_same_status_is_a_no_op():
    assert check_transition(ORDER_TRANSITIONS, "CONFIRMED", "CONFIRMED") is False
    assert check_transition(INVOICE_TRANSITIONS, "PAID", "PAID") is False


def test_unknown_current_status_rejects_everything():
    with pytest.raises(BusinessRuleError):
        check_transition(ORDER_TRANSITIONS, "ARCHIVED", "DRAFT")


def test_invoice_and_bill_issue_step_differs():
    assert check_transition(INVOICE_TRANSITIONS, "DRAFT", "SENT")
    assert check_transition(BILL_TRANSITIONS, "DRAFT", "RECEIVED")
    with pytest.raises(BusinessRuleError):
        check_transition(BILL_TRANSITIONS, "DRAFT", "SENT")


def test_completed_inspections_are_terminal():
    assert check_transition(INSPECTION_TRANSITIONS, "PENDING", "IN_PROGRESS")
    assert check_transition(INSPECTION_TRANSITIONS, "IN_PROGRESS", "PASSED")
    with pytest.raises(BusinessRuleError):
        check_transition(INSPECTION_TRANSITIONS, "FAILED", "PASSED")


def test_purchase_order_receiving_path():
    assert check_transition(PURCHASE_ORDER_TRANSITIONS, "DRAFT", "SENT")
    assert check_transition(PURCHASE_ORDER_TRANSITIONS, "SENT", "CONFIRMED")
    assert check_transition(PURCHASE_ORDER_TRANSITIONS, "CONFIRMED", "PARTIALLY_RECEIVED")
    assert check_transition(PURCHASE_ORDER_TRANSITIONS, "PARTIALLY_RECEIVED", "RECEIVED")
    assert check_transition(PURCHASE_ORDER_TRANSITIONS, "CONFIRMED", "RECEIVED")


@pytest.mark.parametrize(
    "current,target",
    [
        ("DRAFT", "CONFIRMED"),
        ("PARTIALLY_RECEIVED", "CANCELLED"),
        ("RECEIVED", "CANCELLED"),
        ("CANCELLED", "DRAFT"),
    ],
)
def test_purchase_order_rejected_moves(current, target):
    with pytest.raises(BusinessRuleError):
        check_transition(PURCHASE_ORDER_TRANSITIONS, current, target)


class TestMachineStatus:
    def test_any_status_may_follow_any_other(self):
        assert machine_status_changes("IN_USE", "UNDER_REPAIR") is True
        assert machine_status_changes("UNDER_REPAIR", "IDLE") is True
        assert machine_status_changes("IDLE", "NEW") is True
        assert machine_status_changes(None, "NEW") is True

    def test_unchanged_status(self):
        assert machine_status_changes("UNDER_MAINTENANCE", "UNDER_MAINTENANCE") is False

    def test_decommissioned_is_final(self):
        with pytest.raises(BusinessRuleError):
            machine_status_changes("DECOMMISSIONED", "IN_USE")
