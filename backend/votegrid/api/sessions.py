from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, ConfigDict
from typing import Literal, Optional

from ..adapters.vote_api_client import VoteApiClient
from ..domain.enums import GridKind
from ..services.editing_service import EditingService, describe
from ..services.geometry_service import Point, Viewport
from ..services.submission_service import SubmissionService

router = APIRouter(prefix="/sessions", tags=["sessions"])

_editing_service = EditingService()


def get_editing_service() -> EditingService:
    return _editing_service


def get_submission_service() -> SubmissionService:
    return SubmissionService(VoteApiClient())


class SessionCreate(BaseModel):
    event_id: str = Field(..., min_length=1, alias="eventId")
    kind: GridKind
    date: Optional[str] = None
    year: Optional[int] = None
    month: Optional[int] = None
    mode: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class ModeUpdate(BaseModel):
    mode: str


class ViewportUpdate(BaseModel):
    width: float
    height: float
    reserved_height: Optional[float] = Field(default=None, alias="reservedHeight")
    origin_x: float = Field(default=0.0, alias="originX")
    origin_y: float = Field(default=0.0, alias="originY")
    settled: bool = True

    model_config = ConfigDict(populate_by_name=True)


class GestureEvent(BaseModel):
    type: Literal["start", "move", "end", "cancel", "tap"]
    x: Optional[float] = None
    y: Optional[float] = None


@router.post("", status_code=201)
def create_session(body: SessionCreate, svc: EditingService = Depends(get_editing_service)):
    session = svc.create_session(
        body.event_id, body.kind, date_str=body.date, year=body.year, month=body.month, mode=body.mode
    )
    return describe(session)


@router.get("/{session_id}")
def get_session(session_id: str, svc: EditingService = Depends(get_editing_service)):
    return describe(svc.get_session(session_id))


@router.put("/{session_id}/mode")
def set_mode(session_id: str, body: ModeUpdate, svc: EditingService = Depends(get_editing_service)):
    return describe(svc.set_mode(session_id, body.mode))


@router.put("/{session_id}/viewport")
def set_viewport(session_id: str, body: ViewportUpdate, svc: EditingService = Depends(get_editing_service)):
    if not body.settled:
        # layout still moving: drop the old geometry instead of trusting it
        return describe(svc.invalidate(session_id))
    session = svc.measure(
        session_id,
        Viewport(body.width, body.height),
        body.reserved_height,
        Point(body.origin_x, body.origin_y),
    )
    return describe(session)


@router.post("/{session_id}/gestures")
def gesture(session_id: str, body: GestureEvent, svc: EditingService = Depends(get_editing_service)):
    point = Point(body.x, body.y) if body.x is not None and body.y is not None else None
    return svc.gesture(session_id, body.type, point)


@router.get("/{session_id}/payload")
def payload(session_id: str, svc: EditingService = Depends(get_editing_service)):
    return {"records": svc.payload(session_id)}


@router.post("/{session_id}/submit")
def submit(
    session_id: str,
    svc: EditingService = Depends(get_editing_service),
    submitter: SubmissionService = Depends(get_submission_service),
):
    return svc.submit(session_id, submitter)
