from datetime import datetime, timedelta, timezone
from decimal import Decimal

from textile_erp.services.machines import downtime_hours, next_due_after

T0 = datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)


def test_downtime_hours_rounds_to_cents():
    assert downtime_hours(T0, T0 + timedelta(hours=2, minutes=20)) == Decimal("2.33")


def test_downtime_accepts_naive_datetimes_as_utc():
    start = datetime(2024, 3, 1, 8, 0)
    assert downtime_hours(start, T0 + timedelta(hours=1)) == Decimal("1.00")


def test_downtime_is_never_negative():
    assert downtime_hours(T0, T0 - timedelta(hours=3)) == Decimal("0.00")


def test_next_due_from_frequency():
    assert next_due_after(T0, 30) == T0 + timedelta(days=30)


def test_explicit_next_date_wins():
    explicit = T0 + timedelta(days=3)
    assert next_due_after(T0, 30, explicit) == explicit


def test_no_frequency_means_no_next_date():
    assert next_due_after(T0, None) is None
    assert next_due_after(T0, 0) is None
