from datetime import datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace

from textile_erp.services.quality import summarize_inspections, within_range

T0 = datetime(2024, 5, 2, 9, 0, tzinfo=timezone.utc)


def _inspection(status, minutes=None):
    started = T0 if minutes is not None else None
    completed = T0 + timedelta(minutes=minutes) if minutes is not None else None
    return SimpleNamespace(status=status, started_at=started, completed_at=completed)


def test_within_range_bounds_are_inclusive():
    assert within_range(Decimal("120"), Decimal("110"), Decimal("130"))
    assert within_range(Decimal("110"), Decimal("110"), Decimal("130"))
    assert within_range(Decimal("130"), Decimal("110"), Decimal("130"))
    assert not within_range(Decimal("109.9"), Decimal("110"), Decimal("130"))
    assert not within_range(Decimal("131"), Decimal("110"), Decimal("130"))


def test_within_range_with_open_bounds():
    assert within_range(Decimal("5"), None, None)
    assert within_range(Decimal("500"), Decimal("1"), None)
    assert not within_range(Decimal("500"), None, Decimal("100"))


def test_summarize_inspections():
    metrics = summarize_inspections(
        [
            _inspection("PASSED", 30),
            _inspection("PASSED", 50),
            _inspection("FAILED", 40),
            _inspection("PENDING"),
        ]
    )
    assert metrics.total == 4
    assert metrics.passed == 2
    assert metrics.failed == 1
    assert metrics.conditional == 0
    assert metrics.pass_rate == 50.0
    assert metrics.average_inspection_minutes == 40.0


def test_summarize_nothing():
    metrics = summarize_inspections([])
    assert metrics.total == 0
    assert metrics.pass_rate == 0.0
    assert metrics.average_inspection_minutes is None
