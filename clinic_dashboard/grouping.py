from __future__ import annotations

from datetime import date
from typing import Iterable, Iterator

from .dates import CalendarDate, display_label, normalize
from .models import Appointment, DateBucket, GroupKey


def group_appointments(
    appointments: Iterable[Appointment],
    reference_now: CalendarDate,
    key: GroupKey = GroupKey.RAW,
) -> list[DateBucket]:
    """Bucket appointments by day, oldest bucket first, each bucket sorted by start time.

    Appointments with an unreadable date are dropped. The result depends only
    on the input, so it is recomputed whenever the working set changes.
    """
    members: dict[str, list[Appointment]] = {}
    days: dict[str, date] = {}
    for appt in appointments:
        day = normalize(appt.raw_date, reference_now)
        if day is None:
            continue
        label = appt.raw_date if key == GroupKey.RAW else display_label(day)
        if label not in members:
            members[label] = []
            days[label] = day
        members[label].append(appt)

    # sorted() is stable: same-day buckets keep first-seen order
    ordered = sorted(members, key=lambda label: days[label])
    return [
        DateBucket(
            key=label,
            day=days[label],
            appointments=sorted(members[label], key=lambda a: a.start_time),
        )
        for label in ordered
    ]


def flatten(buckets: Iterable[DateBucket]) -> Iterator[Appointment]:
    for bucket in buckets:
        yield from bucket.appointments
