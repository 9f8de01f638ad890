from datetime import date, datetime

import pytest

from clinic_dashboard.dates import display_label, normalize


@pytest.mark.parametrize("now", [date(2020, 1, 1), date(2025, 11, 10), date(2031, 6, 30)])
def test_iso_dates_ignore_reference(now):
    assert normalize("2025-10-14", now) == date(2025, 10, 14)
    assert normalize("2024-02-29T09:00:00", now) == date(2024, 2, 29)
    assert normalize("2025-1-5", now) == date(2025, 1, 5)


def test_iso_invalid_calendar_date():
    assert normalize("2025-02-30", date(2025, 1, 1)) is None
    assert normalize("2025-13-01", date(2025, 1, 1)) is None
    assert normalize("2025-10", date(2025, 1, 1)) is None


def test_ordinal_rolls_into_next_year():
    assert normalize("14th Jan", date(2025, 11, 10)) == date(2026, 1, 14)


def test_ordinal_within_six_months_back_keeps_year():
    assert normalize("3rd Aug", date(2025, 10, 1)) == date(2025, 8, 3)


def test_ordinal_exactly_six_months_back_keeps_year():
    assert normalize("10th May", date(2025, 11, 10)) == date(2025, 5, 10)
    assert normalize("9th May", date(2025, 11, 10)) == date(2026, 5, 9)


def test_ordinal_with_year_is_taken_literally():
    assert normalize("14th Jan 2024", date(2025, 11, 10)) == date(2024, 1, 14)


@pytest.mark.parametrize("raw", ["14th Oct", "14 October", "Oct 14th", "october 14", "Tue, 14th Oct", "14TH OCT"])
def test_ordinal_spellings(raw):
    assert normalize(raw, date(2025, 10, 1)) == date(2025, 10, 14)


def test_accepts_datetime_reference():
    assert normalize("1st Dec", datetime(2025, 10, 1, 18, 45)) == date(2025, 12, 1)


@pytest.mark.parametrize("raw", ["soon", "", "   ", None, "31st Feb", "Oct", "14th", "14th Foo", "14 15 Oct", "29th Feb"])
def test_unparseable(raw):
    assert normalize(raw, date(2025, 10, 1)) is None


def test_display_label():
    assert display_label(date(2025, 10, 14)) == "Tue, 14 Oct 2025"


def test_leap_day_rolled_into_non_leap_year():
    # literal 2024-02-29 is valid but more than six months back; 2025-02-29 is not
    assert normalize("29th Feb", date(2024, 11, 10)) is None
    assert normalize("29th Feb", date(2024, 3, 1)) == date(2024, 2, 29)


def test_display_label_is_locale_independent():
    assert display_label(date(2025, 3, 2)) == "Sun, 02 Mar 2025"
    assert display_label(date(2026, 1, 14)) == "Wed, 14 Jan 2026"
