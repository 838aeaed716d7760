"""Normalize server-side vote shapes into ``Vote`` records.

Malformed records are dropped here, before aggregation, so one bad row never
blanks the whole heatmap.
"""
from __future__ import annotations

import os
from datetime import datetime, tzinfo
from typing import Any, Iterable, List, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..domain.enums import GridKind, VoteStatus
from ..domain.time_keys import day_key, parse_day_key, split_datetime_key
from .aggregation_service import Vote, skip_vote


def default_timezone() -> tzinfo:
    name = os.getenv("VOTEGRID_TIMEZONE", "UTC")
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo("UTC")


def first_param(value: Union[str, List[str], None]) -> Optional[str]:
    """Router params may arrive as ``str`` or ``list[str]``; keep the first string."""
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)) and value and isinstance(value[0], str):
        return value[0]
    return None


_DAY_VOTE_FIELDS = ("day", "dayVotes", "days")
_TIME_VOTE_FIELDS = ("time", "timeVotes", "times")


def event_votes(event: Any, kind: GridKind) -> List[Any]:
    """Raw vote records of one kind from an event snapshot.

    ``votes`` is either one flat list (the per-kind normalizers drop what does
    not fit) or a mapping split into day and time lists.
    """
    if not isinstance(event, dict):
        return []
    fields = _DAY_VOTE_FIELDS if kind == GridKind.DAY else _TIME_VOTE_FIELDS
    votes = event.get("votes")
    if isinstance(votes, list):
        return votes
    for source in (votes, event):
        if not isinstance(source, dict):
            continue
        for name in fields:
            value = source.get(name)
            if isinstance(value, list):
                return value
    return []


def _participant(record: dict) -> Optional[str]:
    for name in ("userId", "uid", "participantId"):
        value = record.get(name)
        if isinstance(value, bool):
            continue
        if isinstance(value, int):
            return str(value)
        if isinstance(value, str) and value:
            return value
    return None


def normalize_day_votes(records: Iterable[Any], tz: Optional[tzinfo] = None) -> List[Vote]:
    """``{uid|userId, time: unix seconds, type: P|N|I}`` -> day votes in ``tz``."""
    tz = tz or default_timezone()
    out: List[Vote] = []
    for record in records or []:
        if not isinstance(record, dict):
            skip_vote("not_a_record", record)
            continue
        participant = _participant(record)
        status = VoteStatus.parse(record.get("type", record.get("status")))
        key = _day_from(record, tz)
        if participant is None or status is None or key is None:
            skip_vote("malformed_day_vote", record)
            continue
        out.append(Vote(participant, key, status))
    return out


def _day_from(record: dict, tz: tzinfo) -> Optional[str]:
    ts = record.get("time")
    if isinstance(ts, (int, float)) and not isinstance(ts, bool):
        try:
            return day_key(datetime.fromtimestamp(ts, tz))
        except (OverflowError, OSError, ValueError):
            return None
    value = record.get("date")
    if parse_day_key(value) is not None:
        return value
    return None


def normalize_time_votes(records: Iterable[Any], date: str) -> List[Vote]:
    """``{userId, datetime: 'YYYY-MM-DDTHH:mm', status}`` -> slot votes for ``date`` only."""
    out: List[Vote] = []
    for record in records or []:
        if not isinstance(record, dict):
            skip_vote("not_a_record", record)
            continue
        parts = split_datetime_key(record.get("datetime"))
        participant = _participant(record)
        status = VoteStatus.parse(record.get("status"))
        if parts is None or participant is None or status is None:
            skip_vote("malformed_time_vote", record)
            continue
        day, slot = parts
        if day != date:
            continue
        out.append(Vote(participant, slot, status))
    return out
