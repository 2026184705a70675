"""
Opening-hours helpers.

Hours are stored as ``{"mon": {"open": "09:00", "close": "17:00"}, ...}`` with
lowercase three-letter English weekday keys. A close time at or before the
open time means the window runs past midnight.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Mapping, Optional

WEEKDAY_KEYS = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")
MINUTES_PER_DAY = 24 * 60

_TIME_RE = re.compile(r"^([01]?\d|2[0-4]):([0-5]\d)$")


def weekday_key(when: datetime) -> str:
    return WEEKDAY_KEYS[when.weekday()]


def parse_hhmm(value: str) -> Optional[int]:
    """Minutes since midnight, or None if the value is not ``HH:MM``."""
    match = _TIME_RE.match((value or "").strip())
    if not match:
        return None
    minutes = int(match.group(1)) * 60 + int(match.group(2))
    if minutes > MINUTES_PER_DAY:
        return None
    return minutes


def _window(day_hours: Optional[Mapping[str, str]]) -> Optional[tuple[int, int]]:
    if not day_hours:
        return None
    start = parse_hhmm(day_hours.get("open", ""))
    end = parse_hhmm(day_hours.get("close", ""))
    if start is None or end is None:
        return None
    return start, end


def is_open_at(
    hours: Optional[Mapping[str, Mapping[str, str]]], when: datetime
) -> Optional[bool]:
    """
    Whether a center is open at ``when``.

    Returns None when no hours are recorded at all, so callers can tell
    "unknown" apart from "closed".
    """
    if not hours:
        return None
    now = when.hour * 60 + when.minute
    index = when.weekday()

    today = _window(hours.get(WEEKDAY_KEYS[index]))
    if today:
        start, end = today
        if end > start and start <= now < end:
            return True
        if end <= start and now >= start:
            return True

    yesterday = _window(hours.get(WEEKDAY_KEYS[(index - 1) % 7]))
    if yesterday:
        start, end = yesterday
        if end <= start and now < end:
            return True
    return False


def format_operating_hours(
    hours: Optional[Mapping[str, Mapping[str, str]]], when: Optional[datetime] = None
) -> str:
    if not hours:
        return "Hours not specified"
    today = hours.get(weekday_key(when or datetime.now()))
    if not today:
        return "Closed today"
    return f"{today.get('open', '')} - {today.get('close', '')}"
