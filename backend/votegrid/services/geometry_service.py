"""Grid geometry: cell sizing from the viewport and pointer-to-cell resolution.

Independent of rendering. Geometry measured before the host layout settles is
stale; ``GeometryResolver`` refuses to resolve points until it is re-measured.
"""
from __future__ import annotations

import calendar
import math
from dataclasses import asdict, dataclass
from datetime import date
from typing import List, Optional, Protocol

from ..domain.time_keys import HOURS_PER_DAY, SLOTS_PER_HOUR, TimeKey, day_key, slot_key_for_cell

MIN_CELL_HEIGHT = 16
LABEL_WIDTH = 44
WIDTH_FRACTION = 0.9
# Space taken by header/chrome around the grid
RESERVED_HEIGHT_VIEW = 200
RESERVED_HEIGHT_EDIT = 220


@dataclass(frozen=True)
class Viewport:
    width: float
    height: float


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class CellIndex:
    row: int
    col: int


@dataclass(frozen=True)
class GridGeometry:
    rows: int
    columns_per_row: int
    cell_width: float
    cell_height: float
    origin_x: float = 0.0
    origin_y: float = 0.0

    @property
    def origin(self) -> Point:
        return Point(self.origin_x, self.origin_y)

    @property
    def is_usable(self) -> bool:
        return self.rows > 0 and self.columns_per_row > 0 and self.cell_width > 0 and self.cell_height > 0

    def to_dict(self):
        d = asdict(self)
        return {
            "rows": d["rows"],
            "columnsPerRow": d["columns_per_row"],
            "cellWidth": d["cell_width"],
            "cellHeight": d["cell_height"],
            "originX": d["origin_x"],
            "originY": d["origin_y"],
        }


def compute_geometry(
    viewport: Viewport,
    reserved_height: float,
    row_count: int,
    columns_per_row: int,
    *,
    min_cell_height: int = MIN_CELL_HEIGHT,
    label_width: float = LABEL_WIDTH,
    width_fraction: float = WIDTH_FRACTION,
    origin: Point = Point(0.0, 0.0),
) -> Optional[GridGeometry]:
    """Size cells so every row fits without scrolling, down to ``min_cell_height``.

    Returns None when the viewport is not measured yet or the grid is empty.
    """
    if viewport is None or viewport.width <= 0 or viewport.height <= 0:
        return None
    if row_count <= 0 or columns_per_row <= 0:
        return None
    cell_height = max(min_cell_height, math.floor((viewport.height - reserved_height) / row_count))
    available_width = viewport.width * width_fraction - label_width
    cell_width = math.floor(available_width / columns_per_row)
    if cell_width <= 0:
        return None
    return GridGeometry(
        rows=row_count,
        columns_per_row=columns_per_row,
        cell_width=cell_width,
        cell_height=cell_height,
        origin_x=origin.x,
        origin_y=origin.y,
    )


def point_to_cell(point: Point, origin: Point, geometry: Optional[GridGeometry]) -> Optional[CellIndex]:
    """Map a pointer position to a cell; off-grid points are "no cell", never clamped."""
    if geometry is None or not geometry.is_usable:
        return None
    row = math.floor((point.y - origin.y) / geometry.cell_height)
    col = math.floor((point.x - origin.x) / geometry.cell_width)
    if not (0 <= row < geometry.rows and 0 <= col < geometry.columns_per_row):
        return None
    return CellIndex(row, col)


class GeometryResolver:
    """Pull-based geometry holder for one grid."""

    def __init__(self, row_count: int, columns_per_row: int, reserved_height: float = RESERVED_HEIGHT_EDIT):
        self.row_count = row_count
        self.columns_per_row = columns_per_row
        self.reserved_height = reserved_height
        self._geometry: Optional[GridGeometry] = None

    @property
    def geometry(self) -> Optional[GridGeometry]:
        return self._geometry

    def measure(self, viewport: Viewport, reserved_height: Optional[float] = None,
                origin: Point = Point(0.0, 0.0)) -> Optional[GridGeometry]:
        if reserved_height is not None:
            self.reserved_height = reserved_height
        self._geometry = compute_geometry(
            viewport, self.reserved_height, self.row_count, self.columns_per_row, origin=origin
        )
        return self._geometry

    def invalidate(self) -> None:
        self._geometry = None

    def locate(self, point: Point) -> Optional[CellIndex]:
        if self._geometry is None:
            return None
        return point_to_cell(point, self._geometry.origin, self._geometry)


class GridLayout(Protocol):
    rows: int
    columns: int

    def key_at(self, cell: CellIndex) -> Optional[TimeKey]: ...


class SlotGridLayout:
    """24 hour rows, two half-hour columns."""

    rows = HOURS_PER_DAY
    columns = SLOTS_PER_HOUR

    def key_at(self, cell: CellIndex) -> Optional[TimeKey]:
        if not (0 <= cell.row < self.rows and 0 <= cell.col < self.columns):
            return None
        return slot_key_for_cell(cell.row, cell.col)

    def keys(self) -> List[List[TimeKey]]:
        return [[slot_key_for_cell(r, c) for c in range(self.columns)] for r in range(self.rows)]


class MonthGridLayout:
    """Calendar month, one row per week; cells outside the month map to no key."""

    columns = 7

    def __init__(self, year: int, month: int, first_weekday: int = calendar.SUNDAY):
        self.year = year
        self.month = month
        self._weeks = calendar.Calendar(first_weekday).monthdayscalendar(year, month)
        self.rows = len(self._weeks)

    def key_at(self, cell: CellIndex) -> Optional[TimeKey]:
        if not (0 <= cell.row < self.rows and 0 <= cell.col < self.columns):
            return None
        day = self._weeks[cell.row][cell.col]
        if day == 0:
            return None
        return day_key(date(self.year, self.month, day))

    def keys(self) -> List[List[Optional[TimeKey]]]:
        return [[self.key_at(CellIndex(r, c)) for c in range(self.columns)] for r in range(self.rows)]
