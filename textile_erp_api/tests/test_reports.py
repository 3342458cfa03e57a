import uuid
from datetime import date
from decimal import Decimal

import pytest

from textile_erp.services.reports import age_balances, aging_bucket, profit_and_loss

AS_OF = date(2024, 6, 30)


@pytest.mark.parametrize(
    "days,bucket",
    [(-10, "current"), (0, "current"), (30, "current"), (31, "days_31_60"), (60, "days_31_60"),
     (61, "days_61_90"), (90, "days_61_90"), (91, "over_90")],
)
def test_aging_bucket_edges(days, bucket):
    assert aging_bucket(days) == bucket


def test_age_balances_groups_by_party():
    lotus = uuid.uuid4()
    rows = [
        ("INV001", lotus, "Lotus Retail", date(2024, 6, 20), Decimal("1000")),
        ("INV002", lotus, "Lotus Retail", date(2024, 4, 1), Decimal("250.50")),
        ("INV003", None, None, date(2024, 1, 1), Decimal("99.50")),
    ]
    report, frame = age_balances(rows, AS_OF)

    assert report.totals.current == 1000.0
    assert report.totals.days_61_90 == 250.5
    assert report.totals.over_90 == 99.5
    assert report.totals.total == 1350.0

    assert [p.party_name for p in report.parties] == ["Lotus Retail", "Unknown"]
    assert report.parties[0].party_id == str(lotus)
    assert report.parties[0].total == 1250.5
    assert report.parties[1].party_id is None
    assert list(frame["bucket"]) == ["current", "days_61_90", "over_90"]


def test_age_balances_with_no_open_documents():
    report, frame = age_balances([], AS_OF)
    assert report.totals.total == 0.0
    assert report.parties == []
    assert frame.empty


def test_profit_and_loss_splits_purchases():
    report = profit_and_loss(
        Decimal("10000"),
        Decimal("4000"),
        [("Poplin", Decimal("6000")), ("Yarn", Decimal("2500")), ("Poplin", Decimal("1500"))],
    )
    assert report.revenue == 10000.0
    assert report.cost_of_goods_sold == 2800.0
    assert report.operating_expenses == 1200.0
    assert report.gross_profit == 7200.0
    assert report.net_profit == 6000.0
    assert report.profit_margin == 60.0
    assert [(r.product, r.amount, r.percentage) for r in report.revenue_breakdown] == [
        ("Poplin", 7500.0, 75.0),
        ("Yarn", 2500.0, 25.0),
    ]


def test_profit_and_loss_without_revenue():
    report = profit_and_loss(Decimal("0"), Decimal("0"), [])
    assert report.net_profit == 0.0
    assert report.profit_margin == 0.0
    assert report.revenue_breakdown == []
