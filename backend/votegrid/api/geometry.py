from fastapi import APIRouter
from pydantic import BaseModel, Field, ConfigDict

from ..errors import ValidationAppError
from ..services.geometry_service import RESERVED_HEIGHT_VIEW, Viewport, compute_geometry

router = APIRouter(prefix="/geometry", tags=["geometry"])


class GeometryRequest(BaseModel):
    width: float
    height: float
    reserved_height: float = Field(default=RESERVED_HEIGHT_VIEW, alias="reservedHeight")
    rows: int = Field(default=24, ge=1)
    columns: int = Field(default=2, ge=1)

    model_config = ConfigDict(populate_by_name=True)


@router.post("")
def geometry(body: GeometryRequest):
    geo = compute_geometry(Viewport(body.width, body.height), body.reserved_height, body.rows, body.columns)
    if geo is None:
        raise ValidationAppError("GEOMETRY_UNAVAILABLE", "viewport too small or not measured")
    return geo.to_dict()
