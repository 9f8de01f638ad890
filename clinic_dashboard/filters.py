from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Optional

from .dates import CalendarDate, as_date, normalize
from .models import Appointment, AppointmentStatus

# window_days values used by the dashboard screens
ALL_SCHEDULED = None
FUTURE_ONLY = 0
NEXT_20_DAYS = 20


def is_in_window(normalized: Optional[date], reference_now: CalendarDate, window_days: Optional[int]) -> bool:
    """Decide whether a normalized date is shown.

    ``None`` shows every parseable date, ``0`` shows today onwards with no upper
    bound, ``N`` shows today through today + N days inclusive.
    """
    if normalized is None:
        return False
    if window_days is None:
        return True
    if window_days < 0:
        raise ValueError(f"window_days must be >= 0, got {window_days}")
    today = as_date(reference_now)
    if window_days == 0:
        return normalized >= today
    return today <= normalized <= today + timedelta(days=window_days)


def in_scope(
    appointments: Iterable[Appointment],
    reference_now: CalendarDate,
    window_days: Optional[int],
) -> list[Appointment]:
    """Scheduled appointments inside the window, in input order."""
    return [
        appt for appt in appointments
        if appt.status == AppointmentStatus.SCHEDULED
        and is_in_window(normalize(appt.raw_date, reference_now), reference_now, window_days)
    ]
