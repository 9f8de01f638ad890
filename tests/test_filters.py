from datetime import date, datetime, timedelta

import pytest

from clinic_dashboard.filters import ALL_SCHEDULED, FUTURE_ONLY, NEXT_20_DAYS, in_scope, is_in_window
from clinic_dashboard.models import Appointment, AppointmentStatus

NOW = datetime(2025, 10, 10, 16, 30)
TODAY = date(2025, 10, 10)


def test_unparseable_never_in_window():
    for window in (ALL_SCHEDULED, FUTURE_ONLY, NEXT_20_DAYS):
        assert is_in_window(None, NOW, window) is False


def test_unbounded_window_includes_past():
    assert is_in_window(date(2019, 1, 1), NOW, ALL_SCHEDULED)


def test_future_only():
    assert is_in_window(TODAY, NOW, FUTURE_ONLY)
    assert is_in_window(date(2030, 1, 1), NOW, FUTURE_ONLY)
    assert not is_in_window(TODAY - timedelta(days=1), NOW, FUTURE_ONLY)


def test_twenty_day_window_is_inclusive():
    assert is_in_window(TODAY, NOW, NEXT_20_DAYS)
    assert is_in_window(TODAY + timedelta(days=20), NOW, NEXT_20_DAYS)
    assert not is_in_window(TODAY + timedelta(days=21), NOW, NEXT_20_DAYS)
    assert not is_in_window(TODAY - timedelta(days=1), NOW, NEXT_20_DAYS)


def test_bounded_window_implies_unbounded():
    for offset in range(-30, 40):
        d = TODAY + timedelta(days=offset)
        if is_in_window(d, NOW, NEXT_20_DAYS):
            assert is_in_window(d, NOW, ALL_SCHEDULED)


def test_negative_window_rejected():
    with pytest.raises(ValueError):
        is_in_window(TODAY, NOW, -1)


def test_in_scope_drops_unscheduled_and_unparseable():
    rows = [
        Appointment(patient_name="A", date="2025-10-12", start_time="09:00"),
        Appointment(patient_name="B", date="soon", start_time="09:00"),
        Appointment(patient_name="C", date="2025-10-12", start_time="10:00", status=AppointmentStatus.COMPLETED),
        Appointment(patient_name="D", date="2025-10-01", start_time="10:00"),
    ]
    assert [a.patient_name for a in in_scope(rows, NOW, ALL_SCHEDULED)] == ["A", "D"]
    assert [a.patient_name for a in in_scope(rows, NOW, FUTURE_ONLY)] == ["A"]
