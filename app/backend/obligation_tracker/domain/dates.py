"""Parsing helpers for the DD/MM/YYYY conventions used across task records."""

from __future__ import annotations

import re
from datetime import date, datetime

LAST_EDIT_SEPARATOR = " em "

_BR_DATE_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_BR_TIME_RE = re.compile(r"^(\d{1,2}):(\d{1,2})(?::\d{1,2})?$")


def parse_br_date(value: str | None) -> date | None:
    """Parse ``DD/MM/YYYY`` into a date, or ``None`` when absent or malformed."""

    if not value:
        return None
    match = _BR_DATE_RE.match(value.strip())
    if match is None:
        return None
    day, month, year = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_last_edit(value: str | None) -> datetime | None:
    """Extract the timestamp from a ``"<name> em DD/MM/YYYY HH:mm[:ss]"`` annotation.

    Seconds are ignored. Returns ``None`` when the separator is missing or the
    timestamp part cannot be read.
    """

    if not value or LAST_EDIT_SEPARATOR not in value:
        return None
    stamp = value.split(LAST_EDIT_SEPARATOR, 1)[1].strip().replace(",", "")
    parts = stamp.split()
    if len(parts) != 2:
        return None
    day = parse_br_date(parts[0])
    time_match = _BR_TIME_RE.match(parts[1])
    if day is None or time_match is None:
        return None
    hour, minute = int(time_match.group(1)), int(time_match.group(2))
    if hour > 23 or minute > 59:
        return None
    return datetime(day.year, day.month, day.day, hour, minute)


def format_last_editor(name: str, when: datetime) -> str:
    return f"{name.strip()}{LAST_EDIT_SEPARATOR}{when.strftime('%d/%m/%Y %H:%M:%S')}"


def days_until(due: date, today: date) -> int:
    """Whole days from ``today`` (at midnight) to ``due``; negative when past."""

    return (due - today).days
