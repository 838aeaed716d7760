"""HTTP client for the external event/vote API."""
from __future__ import annotations
import os
from typing import Any, Dict, List, Optional

import requests

from ..errors import UpstreamError
from ..infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://api.ldh.monster"


class VoteApiError(UpstreamError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__("VOTE_API_ERROR", message)
        self.status_code = status_code


class VoteApiClient:
    """Implements VoteSubmissionSink and VoteSource over HTTP.

    Only an access token is sent; refreshing it is the host's job.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or os.getenv("VOTE_API_BASE_URL") or DEFAULT_BASE_URL).rstrip("/")
        self.token = token if token is not None else os.getenv("VOTE_API_TOKEN")
        self.timeout = timeout or float(os.getenv("VOTE_API_TIMEOUT_SECONDS", "10"))
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.base_url}{path}"

    def _headers(self, has_body: bool) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if has_body:
            headers["Content-Type"] = "application/json"
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(self, method: str, path: str, body: Any = None) -> Any:
        url = self._url(path)
        try:
            res = self.session.request(
                method,
                url,
                json=body,
                headers=self._headers(body is not None),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("Vote API unreachable", method=method, url=url, error=str(e))
            raise VoteApiError(f"vote API unreachable: {e}") from e
        if not res.ok:
            raise _to_api_error(res)
        return _safe_json(res)

    def fetch_event(self, event_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/api/event/{event_id}") or {}

    def submit_day_votes(self, event_id: str, records: List[Dict[str, Any]]) -> Any:
        return self._request("POST", f"/api/vote/{event_id}/day", records)

    def submit_time_votes(self, event_id: str, records: List[Dict[str, Any]]) -> Any:
        return self._request("POST", f"/api/event/{event_id}/time-vote", records)


def _safe_json(res: requests.Response) -> Any:
    text = res.text
    if not text:
        return None
    try:
        return res.json()
    except ValueError:
        return text


def _to_api_error(res: requests.Response) -> VoteApiError:
    detail = _safe_json(res)
    if isinstance(detail, dict):
        detail = detail.get("message")
    parts = [f"{res.status_code} {res.reason or ''}".strip(), detail if isinstance(detail, str) else None]
    msg = " | ".join(p for p in parts if p)
    logger.warning("Vote API request failed", status_code=res.status_code, message=msg)
    return VoteApiError(msg, status_code=res.status_code)
