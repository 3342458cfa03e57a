import uuid
from decimal import Decimal

import pytest

from textile_erp.core.errors import BusinessRuleError
from textile_erp.services.inventory import alert_type_for, movement_effect
from textile_erp.services.products import adjusted_stock

WAREHOUSE = uuid.uuid4()
STORE = uuid.uuid4()


class TestAdjustedStock:
    def test_increasing_types(self):
        for kind in ("ADD", "PURCHASE", "RETURN"):
            assert adjusted_stock(Decimal("10"), kind, Decimal("5")) == Decimal("15")

    def test_decreasing_types(self):
        for kind in ("REMOVE", "SALE", "DAMAGE", "TRANSFER"):
            assert adjusted_stock(Decimal("10"), kind, Decimal("4")) == Decimal("6")

    def test_decrease_to_exactly_zero(self):
        assert adjusted_stock(Decimal("4"), "SALE", Decimal("4")) == Decimal("0")

    def test_decrease_below_zero_is_rejected(self):
        with pytest.raises(BusinessRuleError, match="Insufficient stock"):
            adjusted_stock(Decimal("3"), "REMOVE", Decimal("5"))

    def test_set_replaces_stock(self):
        assert adjusted_stock(Decimal("40"), "SET", Decimal("12")) == Decimal("12")

    def test_missing_current_stock_counts_as_zero(self):
        assert adjusted_stock(None, "ADD", Decimal("2")) == Decimal("2")


class TestMovementEffect:
    def test_purchase_adds_at_destination(self):
        effect = movement_effect("PURCHASE", None, WAREHOUSE)
        assert (effect.take_from, effect.put_to, effect.aggregate_sign) == (False, True, 1)

    def test_sale_removes_at_source(self):
        effect = movement_effect("SALE", STORE, None)
        assert (effect.take_from, effect.put_to, effect.aggregate_sign) == (True, False, -1)

    def test_transfer_between_locations_keeps_total(self):
        effect = movement_effect("TRANSFER_OUT", WAREHOUSE, STORE)
        assert (effect.take_from, effect.put_to, effect.aggregate_sign) == (True, True, 0)

    def test_one_sided_transfer_changes_total(self):
        assert movement_effect("TRANSFER_IN", None, STORE).aggregate_sign == 1
        assert movement_effect("TRANSFER_OUT", WAREHOUSE, None).aggregate_sign == -1

    def test_transfer_to_same_location_is_rejected(self):
        with pytest.raises(BusinessRuleError):
            movement_effect("TRANSFER_IN", WAREHOUSE, WAREHOUSE)

    def test_missing_location_is_rejected(self):
        with pytest.raises(BusinessRuleError, match="to_location_id"):
            movement_effect("PRODUCTION_IN", None, None)
        with pytest.raises(BusinessRuleError, match="from_location_id"):
            movement_effect("DAMAGE", None, None)


@pytest.mark.parametrize(
    "stock,reorder,expected",
    [
        (Decimal("100"), Decimal("50"), None),
        (Decimal("50"), Decimal("50"), "LOW_STOCK"),
        (Decimal("12"), Decimal("50"), "LOW_STOCK"),
        (Decimal("0"), Decimal("50"), "OUT_OF_STOCK"),
        (Decimal("0"), None, None),
    ],
)
def test_alert_type(stock, reorder, expected):
    assert alert_type_for(stock, reorder) == expected
