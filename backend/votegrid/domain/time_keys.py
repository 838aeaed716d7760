"""Canonical string keys for votable time units.

Two domains share the ``TimeKey`` string type:

  * DayKey  ``YYYY-MM-DD`` (a real calendar date)
  * SlotKey ``HH:mm`` with minutes restricted to ``00`` / ``30`` (48 per day)

Both are zero-padded, so plain string comparison gives chronological order.
"""
from __future__ import annotations

import re
from datetime import date, datetime
from typing import List, Optional, Tuple

from .enums import TimeKeyDomain

TimeKey = str

HOURS_PER_DAY = 24
SLOTS_PER_HOUR = 2
SLOT_MINUTES = (0, 30)

_DAY_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_SLOT_RE = re.compile(r"^(\d{2}):(\d{2})$")


def pad(n: int) -> str:
    return str(n).zfill(2)


def day_key(d: date) -> TimeKey:
    return d.strftime("%Y-%m-%d")


def slot_key(hour: int, minute: int) -> TimeKey:
    if not 0 <= hour < HOURS_PER_DAY or minute not in SLOT_MINUTES:
        raise ValueError(f"invalid slot {hour}:{minute}")
    return f"{pad(hour)}:{pad(minute)}"


def slot_key_for_cell(row: int, col: int) -> TimeKey:
    """Row is the hour, column 0 is ``:00`` and column 1 is ``:30``."""
    if not 0 <= col < SLOTS_PER_HOUR:
        raise ValueError(f"invalid slot column {col}")
    return slot_key(row, SLOT_MINUTES[col])


def parse_day_key(key) -> Optional[date]:
    if not isinstance(key, str):
        return None
    m = _DAY_RE.match(key)
    if not m:
        return None
    try:
        return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    except ValueError:
        return None


def parse_slot_key(key) -> Optional[Tuple[int, int]]:
    if not isinstance(key, str):
        return None
    m = _SLOT_RE.match(key)
    if not m:
        return None
    hour, minute = int(m.group(1)), int(m.group(2))
    if hour >= HOURS_PER_DAY or minute not in SLOT_MINUTES:
        return None
    return hour, minute


def slot_cell(key: TimeKey) -> Optional[Tuple[int, int]]:
    """Inverse of ``slot_key_for_cell``."""
    parsed = parse_slot_key(key)
    if parsed is None:
        return None
    hour, minute = parsed
    return hour, SLOT_MINUTES.index(minute)


def domain_of(key) -> Optional[TimeKeyDomain]:
    if parse_day_key(key) is not None:
        return TimeKeyDomain.DAY
    if parse_slot_key(key) is not None:
        return TimeKeyDomain.SLOT
    return None


def is_valid(key, domain: TimeKeyDomain) -> bool:
    if domain == TimeKeyDomain.DAY:
        return parse_day_key(key) is not None
    return parse_slot_key(key) is not None


def all_slot_keys() -> List[TimeKey]:
    return [slot_key(h, m) for h in range(HOURS_PER_DAY) for m in SLOT_MINUTES]


def split_datetime_key(value: str) -> Optional[Tuple[TimeKey, TimeKey]]:
    """Split ``YYYY-MM-DDTHH:mm[...]`` into ``(day_key, slot_key)``."""
    if not isinstance(value, str) or len(value) < 16 or value[10] != "T":
        return None
    day, slot = value[:10], value[11:16]
    if parse_day_key(day) is None or parse_slot_key(slot) is None:
        return None
    return day, slot


def join_datetime_key(day: TimeKey, slot: TimeKey) -> str:
    return f"{day}T{slot}"


def local_midnight(day: TimeKey, tz) -> datetime:
    d = parse_day_key(day)
    if d is None:
        raise ValueError(f"invalid day key {day!r}")
    return datetime(d.year, d.month, d.day, tzinfo=tz)
