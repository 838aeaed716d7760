from fastapi import APIRouter
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..domain.enums import TimeKeyDomain
from ..domain.time_keys import parse_day_key
from ..errors import ValidationAppError
from ..services.aggregation_service import aggregate, lookup, max_preferred_baseline
from ..services.geometry_service import SlotGridLayout
from ..services.heatmap_service import paint_grid
from ..services.vote_normalizer import default_timezone, normalize_day_votes, normalize_time_votes

router = APIRouter(prefix="/heatmap", tags=["heatmap"])


class DayHeatmapRequest(BaseModel):
    votes: List[Any] = Field(default_factory=list)
    tz: Optional[str] = None
    days: Optional[List[str]] = None


class SlotHeatmapRequest(BaseModel):
    date: str
    votes: List[Any] = Field(default_factory=list)


def resolve_tz(name: Optional[str]):
    if not name:
        return default_timezone()
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationAppError("INVALID_TIMEZONE", f"unknown time zone {name}")


def check_days(days: Optional[List[str]]) -> None:
    bad = [d for d in days or [] if parse_day_key(d) is None]
    if bad:
        raise ValidationAppError("INVALID_DATE", f"days must be YYYY-MM-DD: {bad}")


def day_heatmap_view(raw_votes: List[Any], tz, days: Optional[List[str]] = None) -> Dict[str, Any]:
    """Day cells for ``days`` (every voted day when omitted)."""
    check_days(days)
    votes = normalize_day_votes(raw_votes, tz)
    aggregates = aggregate(votes, TimeKeyDomain.DAY)
    keys = list(days) if days else list(aggregates)
    cells = paint_grid(aggregates, keys)
    return {
        "baseline": max_preferred_baseline(aggregates),
        "cells": {
            key: {**paint.to_dict(), "counts": lookup(aggregates, key).to_dict()}
            for key, paint in cells.items()
        },
    }


def slot_heatmap_view(raw_votes: List[Any], date: Optional[str]) -> Dict[str, Any]:
    """24 rows of two half-hour cells for one date."""
    if parse_day_key(date) is None:
        raise ValidationAppError("INVALID_DATE", "date must be YYYY-MM-DD")
    votes = normalize_time_votes(raw_votes, date)
    aggregates = aggregate(votes, TimeKeyDomain.SLOT)
    layout_keys = SlotGridLayout().keys()
    cells = paint_grid(aggregates, [k for row in layout_keys for k in row])
    return {
        "date": date,
        "baseline": max_preferred_baseline(aggregates),
        "rows": [
            [{"key": k, **cells[k].to_dict(), "counts": lookup(aggregates, k).to_dict()} for k in row]
            for row in layout_keys
        ],
    }


@router.post("/days")
def day_heatmap(body: DayHeatmapRequest):
    return day_heatmap_view(body.votes, resolve_tz(body.tz), body.days)


@router.post("/slots")
def slot_heatmap(body: SlotHeatmapRequest):
    return slot_heatmap_view(body.votes, body.date)
