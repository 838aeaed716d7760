"""Turn a working selection into the external vote payload and submit it."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timezone, tzinfo
from enum import Enum
from typing import Any, Dict, List, Union

from prometheus_client import Counter

from ..domain.enums import SlotMode, VoteStatus
from ..domain.time_keys import join_datetime_key, local_midnight, parse_day_key
from ..errors import BaseAppException, UpstreamError, ValidationAppError
from ..infrastructure.observability.logging import get_logger
from ..ports.vote_sink import VoteSubmissionSink
from .selection_service import DragPaintStateMachine, WorkingSelection

logger = get_logger(__name__)

SUBMISSIONS = Counter(
    "votegrid_submissions_total", "Vote submissions by grid kind and outcome", ["kind", "outcome"]
)


@dataclass(frozen=True)
class DayVoteContext:
    """Day-level voting; keys are turned into local-midnight unix seconds."""
    tz: tzinfo = field(default=timezone.utc)


@dataclass(frozen=True)
class SlotVoteContext:
    """Slot-level voting for one fixed date."""
    date: str

    def __post_init__(self):
        if parse_day_key(self.date) is None:
            raise ValueError(f"invalid date {self.date!r}")


VoteContext = Union[DayVoteContext, SlotVoteContext]


def _slot_status(mode: Enum) -> str:
    if mode == SlotMode.POSSIBLE or mode == VoteStatus.PREFERRED:
        return VoteStatus.PREFERRED.value
    if mode == SlotMode.IMPOSSIBLE:
        return VoteStatus.IMPOSSIBLE.value
    raise ValueError(f"mode {mode!r} cannot be submitted as a time vote")


def _day_code(mode: Enum) -> str:
    status = VoteStatus.parse(mode.value if isinstance(mode, Enum) else mode)
    if status is None:
        raise ValueError(f"mode {mode!r} cannot be submitted as a day vote")
    return status.wire_code


def to_payload(selection: WorkingSelection, context: VoteContext) -> List[Dict[str, Any]]:
    """One record per selected key, in key order. Unset keys are never sent."""
    records: List[Dict[str, Any]] = []
    for key, mode in selection.items():
        if isinstance(context, SlotVoteContext):
            records.append({"datetime": join_datetime_key(context.date, key), "status": _slot_status(mode)})
        else:
            midnight = local_midnight(key, context.tz)
            records.append({"time": int(midnight.timestamp()), "type": _day_code(mode)})
    return records


class SubmissionFailed(UpstreamError):
    def __init__(self, message: str):
        super().__init__("SUBMISSION_FAILED", message)


class SubmissionService:
    """Submits one participant's selection; the selection survives failures for retry."""

    def __init__(self, sink: VoteSubmissionSink):
        self.sink = sink

    def submit(self, event_id: str, machine: DragPaintStateMachine, context: VoteContext) -> Dict[str, Any]:
        kind = "slot" if isinstance(context, SlotVoteContext) else "day"
        if not event_id:
            raise ValidationAppError("NO_EVENT", "event id is required")
        payload = to_payload(machine.selection, context)
        if not payload:
            SUBMISSIONS.labels(kind=kind, outcome="empty").inc()
            raise ValidationAppError("EMPTY_SELECTION", "no changes selected")
        try:
            if kind == "slot":
                self.sink.submit_time_votes(event_id, payload)
            else:
                self.sink.submit_day_votes(event_id, payload)
        except BaseAppException as e:
            SUBMISSIONS.labels(kind=kind, outcome="failed").inc()
            logger.warning("Vote submission failed", event_id=event_id, kind=kind, code=e.code)
            raise SubmissionFailed(e.message) from e
        except Exception as e:
            SUBMISSIONS.labels(kind=kind, outcome="failed").inc()
            logger.warning("Vote submission failed", event_id=event_id, kind=kind, error=str(e))
            raise SubmissionFailed(f"submission failed: {e}") from e

        machine.gesture_cancel()
        machine.selection.clear()
        SUBMISSIONS.labels(kind=kind, outcome="ok").inc()
        logger.info("Votes submitted", event_id=event_id, kind=kind, count=len(payload))
        return {"eventId": event_id, "submitted": len(payload), "records": payload}
