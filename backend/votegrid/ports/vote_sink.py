from __future__ import annotations
from typing import Protocol, Dict, Any, List


class VoteSubmissionSink(Protocol):
    """Abstracts the external vote endpoints for testability."""

    def submit_day_votes(self, event_id: str, records: List[Dict[str, Any]]) -> Any:
        """Post day-level records shaped ``{time: <unix seconds>, type: 'P'|'N'|'I'}``."""
        ...

    def submit_time_votes(self, event_id: str, records: List[Dict[str, Any]]) -> Any:
        """Post slot-level records shaped ``{datetime: 'YYYY-MM-DDTHH:mm', status}``."""
        ...


class VoteSource(Protocol):
    """Fetches the raw vote snapshot for an event."""

    def fetch_event(self, event_id: str) -> Dict[str, Any]:
        ...
