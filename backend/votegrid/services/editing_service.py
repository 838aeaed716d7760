"""Editing sessions: one drag-paint machine per participant, driven over HTTP.

Each session pairs a grid layout (month of days or 24×2 half-hour slots) with
a geometry resolver, a working selection and the context needed to submit it.
The store is any ``SessionStore``; the in-memory one is the default.
"""
from __future__ import annotations
from datetime import date, tzinfo
from typing import Any, Dict, Optional

from ..domain.enums import DAY_MODES, SLOT_MODES, GridKind
from ..domain.time_keys import parse_day_key
from ..errors import NotFoundError, ValidationAppError
from .geometry_service import (
    RESERVED_HEIGHT_EDIT,
    GeometryResolver,
    MonthGridLayout,
    Point,
    SlotGridLayout,
    Viewport,
)
from .selection_service import DragPaintStateMachine, InvalidMode
from .session_store import EditingSession, MemorySessionStore, SessionStore
from .submission_service import DayVoteContext, SlotVoteContext, SubmissionService, to_payload
from .vote_normalizer import default_timezone


class EditingService:
    """Creates and drives drag-paint editing sessions for the HTTP layer."""

    def __init__(self, store: Optional[SessionStore] = None):
        self.store: SessionStore = store if store is not None else MemorySessionStore()

    def create_session(
        self,
        event_id: str,
        kind: GridKind,
        date_str: Optional[str] = None,
        year: Optional[int] = None,
        month: Optional[int] = None,
        mode: Optional[str] = None,
        tz: Optional[tzinfo] = None,
    ) -> EditingSession:
        if not event_id:
            raise ValidationAppError("NO_EVENT", "event id is required")
        if kind == GridKind.SLOT:
            if parse_day_key(date_str) is None:
                raise ValidationAppError("INVALID_DATE", "date must be YYYY-MM-DD")
            layout = SlotGridLayout()
            modes = SLOT_MODES
            context = SlotVoteContext(date_str)
        else:
            today = date.today()
            year = year or today.year
            month = month or today.month
            if not 1 <= month <= 12 or not 1 <= year <= 9999:
                raise ValidationAppError("INVALID_MONTH", "year/month out of range")
            layout = MonthGridLayout(year, month)
            modes = DAY_MODES
            context = DayVoteContext(tz or default_timezone())

        resolver = GeometryResolver(layout.rows, layout.columns, RESERVED_HEIGHT_EDIT)
        try:
            machine = DragPaintStateMachine(layout, resolver, modes, initial_mode=mode)
        except InvalidMode as e:
            raise ValidationAppError("INVALID_MODE", str(e))
        now = self.store.time_provider()
        session = EditingSession(
            id=self.store.new_id(),
            event_id=event_id,
            kind=kind,
            machine=machine,
            context=context,
            created_at=now,
        )
        self.store.put(session)
        return session

    def get_session(self, session_id: str) -> EditingSession:
        session = self.store.get(session_id)
        if session is None:
            raise NotFoundError("SESSION_NOT_FOUND", "editing session not found")
        return session

    def set_mode(self, session_id: str, mode: str) -> EditingSession:
        session = self.get_session(session_id)
        try:
            session.machine.mode = mode
        except InvalidMode as e:
            raise ValidationAppError("INVALID_MODE", str(e))
        return session

    def measure(self, session_id: str, viewport: Viewport, reserved_height: Optional[float] = None,
                origin: Point = Point(0.0, 0.0)) -> EditingSession:
        session = self.get_session(session_id)
        session.machine.resolver.measure(viewport, reserved_height, origin)
        return session

    def invalidate(self, session_id: str) -> EditingSession:
        session = self.get_session(session_id)
        session.machine.resolver.invalidate()
        return session

    def gesture(self, session_id: str, kind: str, point: Optional[Point] = None) -> Dict[str, Any]:
        session = self.get_session(session_id)
        machine = session.machine
        painted = None
        if kind in ("start", "move", "tap") and point is None:
            raise ValidationAppError("NO_POINT", f"{kind} requires x and y")
        if kind == "start":
            painted = machine.gesture_start(point)
        elif kind == "move":
            painted = machine.gesture_move(point)
        elif kind == "tap":
            painted = machine.tap(point)
        elif kind == "end":
            machine.gesture_end()
        elif kind == "cancel":
            machine.gesture_cancel()
        else:
            raise ValidationAppError("INVALID_GESTURE", f"unknown gesture {kind!r}")
        return {"painted": painted, "session": describe(session)}

    def payload(self, session_id: str):
        session = self.get_session(session_id)
        return to_payload(session.machine.selection, session.context)

    def submit(self, session_id: str, submitter: SubmissionService) -> Dict[str, Any]:
        session = self.get_session(session_id)
        return submitter.submit(session.event_id, session.machine, session.context)


def describe(session: EditingSession) -> Dict[str, Any]:
    machine = session.machine
    geometry = machine.resolver.geometry
    out = {
        "id": session.id,
        "eventId": session.event_id,
        "kind": session.kind.value,
        "mode": machine.mode.value,
        "modes": [m.value for m in machine.modes],
        "state": machine.state.value,
        "selection": {k: v.value for k, v in machine.selection.items()},
        "geometry": geometry.to_dict() if geometry else None,
        "rows": machine.layout.rows,
        "columns": machine.layout.columns,
    }
    if isinstance(session.context, SlotVoteContext):
        out["date"] = session.context.date
    return out
