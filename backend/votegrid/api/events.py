from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from ..adapters.vote_api_client import VoteApiClient
from ..domain.enums import GridKind
from ..domain.time_keys import parse_day_key
from ..errors import ValidationAppError
from ..ports.vote_sink import VoteSource
from ..services.vote_normalizer import event_votes, first_param
from .heatmap import check_days, day_heatmap_view, resolve_tz, slot_heatmap_view

router = APIRouter(prefix="/events", tags=["events"])


def get_vote_source() -> VoteSource:
    return VoteApiClient()


@router.get("/{event_id}/heatmap")
def event_heatmap(
    event_id: str,
    kind: GridKind = Query(GridKind.DAY),
    date: Optional[List[str]] = Query(None),
    tz: Optional[List[str]] = Query(None),
    days: Optional[List[str]] = Query(None),
    source: VoteSource = Depends(get_vote_source),
):
    """Fetch an event's votes upstream and paint them as a day or slot heatmap."""
    date_str = first_param(date)
    # parameters are checked before the upstream call
    if kind == GridKind.SLOT:
        if parse_day_key(date_str) is None:
            raise ValidationAppError("INVALID_DATE", "date must be YYYY-MM-DD")
    else:
        zone = resolve_tz(first_param(tz))
        check_days(days)

    event = source.fetch_event(event_id)
    records = event_votes(event, kind)
    if kind == GridKind.SLOT:
        view = slot_heatmap_view(records, date_str)
    else:
        view = day_heatmap_view(records, zone, days)
    title = event.get("title") if isinstance(event, dict) else None
    return {"eventId": event_id, "title": title, "kind": kind.value, **view}
