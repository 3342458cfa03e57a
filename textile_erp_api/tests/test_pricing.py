from decimal import Decimal

from textile_erp.services.pricing import compute_line, compute_totals, markup_percent, money


def test_line_applies_discount_before_tax():
    line = compute_line(Decimal("10"), Decimal("100"), Decimal("10"), Decimal("5"))
    assert line.base == Decimal("1000.00")
    assert line.discount == Decimal("100.00")
    assert line.tax == Decimal("45.00")
    assert line.line == Decimal("945.00")


def test_line_without_discount_or_tax():
    line = compute_line(3, "12.5")
    assert line.line == Decimal("37.50")
    assert line.discount == Decimal("0.00")
    assert line.tax == Decimal("0.00")


def test_totals_include_shipping():
    lines = [
        compute_line(Decimal("10"), Decimal("100"), Decimal("10"), Decimal("5")),
        compute_line(Decimal("2"), Decimal("50")),
    ]
    totals = compute_totals(lines, Decimal("25"))
    assert totals.subtotal == Decimal("1100.00")
    assert totals.discount_amount == Decimal("100.00")
    assert totals.tax_amount == Decimal("45.00")
    assert totals.shipping_charges == Decimal("25.00")
    assert totals.total_amount == Decimal("1070.00")


def test_totals_of_no_lines_are_zero():
    totals = compute_totals([])
    assert totals.total_amount == Decimal("0.00")


def test_money_rounds_half_up():
    assert money("2.345") == Decimal("2.35")
    assert money(None) == Decimal("0.00")


def test_markup_percent():
    assert markup_percent(Decimal("80"), Decimal("100")) == Decimal("25.00")
    assert markup_percent(0, Decimal("100")) is None
    assert markup_percent(None, None) is None
