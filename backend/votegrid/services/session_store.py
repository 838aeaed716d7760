"""Editing session store.

Holds one drag-paint machine per participant editing session. In-memory with
TTL expiry and a capacity cap; sessions are disposable working state, never the
source of truth for votes.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Protocol, Optional, Dict, Callable
import os
import time
import uuid

from ..domain.enums import GridKind
from .selection_service import DragPaintStateMachine
from .submission_service import VoteContext


@dataclass
class EditingSession:
    id: str
    event_id: str
    kind: GridKind
    machine: DragPaintStateMachine
    context: VoteContext
    created_at: float
    touched_at: float = field(default=0.0)


class SessionStore(Protocol):
    time_provider: Callable[[], float]

    def new_id(self) -> str: ...
    def put(self, session: EditingSession) -> None: ...
    def get(self, session_id: str) -> Optional[EditingSession]: ...
    def pop(self, session_id: str) -> Optional[EditingSession]: ...
    def prune(self) -> None: ...
    def size(self) -> int: ...
    def clear(self) -> None: ...


class MemorySessionStore:
    def __init__(self, ttl_seconds: Optional[int] = None, max_entries: Optional[int] = None,
                 time_provider: Optional[Callable[[], float]] = None):
        self._data: Dict[str, EditingSession] = {}
        self.ttl_seconds = ttl_seconds or int(os.getenv("SESSION_TTL_SECONDS", "1800"))
        self.max_entries = max_entries or int(os.getenv("SESSION_MAX_ENTRIES", "500"))
        self.time_provider = time_provider or time.time

    def new_id(self) -> str:
        return uuid.uuid4().hex

    def put(self, session: EditingSession) -> None:
        session.touched_at = self.time_provider()
        self._data[session.id] = session
        self.prune()

    def get(self, session_id: str) -> Optional[EditingSession]:
        self.prune()
        session = self._data.get(session_id)
        if session is not None:
            session.touched_at = self.time_provider()
        return session

    def pop(self, session_id: str) -> Optional[EditingSession]:
        self.prune()
        return self._data.pop(session_id, None)

    def prune(self) -> None:
        now_ts = self.time_provider()
        # Expiry (idle time since last access)
        expired = [k for k, v in self._data.items() if now_ts - v.touched_at > self.ttl_seconds]
        for k in expired:
            self._data.pop(k, None)
        # Enforce cap
        while len(self._data) > self.max_entries:
            oldest_key = min(self._data.items(), key=lambda kv: kv[1].touched_at)[0]
            self._data.pop(oldest_key, None)

    def size(self) -> int:
        return len(self._data)

    def clear(self) -> None:
        self._data.clear()
