"""Date normalization for the stored ``date`` column.

Rows carry either an ISO-like date ("2025-10-14") or a hand-typed ordinal
form ("14th Oct", "Oct 14th, 2025"). Both are reduced to a ``datetime.date``;
anything else becomes ``None`` and is left out of filtering and grouping.
"""
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional, Union

CalendarDate = Union[date, datetime]

MONTHS = [
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
]
WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

ROLLOVER_MONTHS = 6

ordinal_suffix_pattern = re.compile(r"(\d+)(st|nd|rd|th)\b", flags=re.IGNORECASE)
token_pattern = re.compile(r"[A-Za-z]+|\d+")


def as_date(value: CalendarDate) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def _lookup(word: str, names: list[str]) -> Optional[int]:
    word = word.lower()
    if len(word) < 3:
        return None
    for i, name in enumerate(names):
        if name.startswith(word):
            return i + 1
    return None


def _months_before(d: date, months: int) -> date:
    index = d.year * 12 + (d.month - 1) - months
    year, month = divmod(index, 12)
    month += 1
    # clamp 31st -> 30th/28th
    for day in (d.day, 30, 29, 28):
        try:
            return date(year, month, day)
        except ValueError:
            continue
    raise ValueError(f"no valid day in {year}-{month}")


def _parse_iso(raw: str) -> Optional[date]:
    head = raw.strip().split("T", 1)[0].split(" ", 1)[0]
    parts = head.split("-")
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        return None
    try:
        return date(int(parts[0]), int(parts[1]), int(parts[2]))
    except ValueError:
        return None


def _parse_ordinal(raw: str, today: date) -> Optional[date]:
    cleaned = ordinal_suffix_pattern.sub(r"\1", raw)
    day = month = year = None
    for token in token_pattern.findall(cleaned):
        if token.isdigit():
            if len(token) == 4 and year is None:
                year = int(token)
            elif len(token) <= 2 and day is None:
                day = int(token)
            else:
                return None
            continue
        found = _lookup(token, MONTHS)
        if found is not None and month is None:
            month = found
        elif _lookup(token, WEEKDAYS) is None:
            return None
    if day is None or month is None:
        return None

    try:
        if year is not None:
            return date(year, month, day)
        candidate = date(today.year, month, day)
        if candidate < _months_before(today, ROLLOVER_MONTHS):
            candidate = date(today.year + 1, month, day)
        return candidate
    except ValueError:
        return None


def normalize(raw: Optional[str], reference_now: CalendarDate) -> Optional[date]:
    """Return the calendar date ``raw`` denotes, or ``None`` when it can't be read.

    A year-less ordinal date falling more than six months before
    ``reference_now`` is taken to mean next year ("14th Jan" typed in November).
    """
    if not raw or not raw.strip():
        return None
    if "-" in raw:
        return _parse_iso(raw)
    return _parse_ordinal(raw, as_date(reference_now))


def display_label(day: date) -> str:
    """Human label for a bucket, e.g. ``Tue, 14 Oct 2025``."""
    weekday = WEEKDAYS[day.weekday()][:3].title()
    month = MONTHS[day.month - 1][:3].title()
    return f"{weekday}, {day.day:02d} {month} {day.year}"
