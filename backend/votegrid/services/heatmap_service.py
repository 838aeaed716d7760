"""Heat color policy shared by the day calendar and the half-hour grid."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional

from ..domain.time_keys import TimeKey
from .aggregation_service import Aggregate, max_preferred_baseline

TEXT_LIGHT_THRESHOLD = 0.65


@dataclass(frozen=True)
class Color:
    r: int
    g: int
    b: int

    @classmethod
    def from_hex(cls, value: str) -> "Color":
        h = value.lstrip("#")
        if len(h) == 3:
            h = "".join(c + c for c in h)
        if len(h) != 6:
            raise ValueError(f"invalid hex color {value!r}")
        x = int(h, 16)
        return cls((x >> 16) & 255, (x >> 8) & 255, x & 255)

    @property
    def hex(self) -> str:
        return "#" + "".join(f"{v:02x}" for v in (self.r, self.g, self.b))


WHITE = Color.from_hex("#FFFFFF")
IMPOSSIBLE_GRAY = Color.from_hex("#CBD5E1")
ACCENT = Color.from_hex("#F43F5E")


@dataclass(frozen=True)
class CellPaint:
    background: Color
    text_is_light: bool = False
    show_secondary_marker: bool = False

    def to_dict(self) -> Dict:
        return {
            "background": self.background.hex,
            "textIsLight": self.text_is_light,
            "showSecondaryMarker": self.show_secondary_marker,
        }


BLANK = CellPaint(WHITE)
VETOED = CellPaint(IMPOSSIBLE_GRAY)


def _round_half_up(v: float) -> int:
    return int(math.floor(v + 0.5))


def clamp(v: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return max(lo, min(hi, v))


def mix(a: Color, b: Color, t: float) -> Color:
    """Componentwise linear interpolation in RGB space."""
    t = clamp(t)
    return Color(
        _round_half_up(a.r + (b.r - a.r) * t),
        _round_half_up(a.g + (b.g - a.g) * t),
        _round_half_up(a.b + (b.b - a.b) * t),
    )


def color_for(agg: Optional[Aggregate], baseline: int) -> CellPaint:
    """Paint one cell. Rules are evaluated in order and the first match wins.

    1. no votes -> white
    2. any impossible vote -> gray, regardless of how many prefer it
    3. white-to-accent gradient by preferred / baseline, with a marker
       when someone voted non-preferred
    """
    if agg is None or agg.total == 0:
        return BLANK
    if agg.impossible > 0:
        return VETOED
    ratio = clamp(agg.preferred / baseline) if baseline > 0 else 0.0
    return CellPaint(
        background=mix(WHITE, ACCENT, ratio),
        text_is_light=ratio > TEXT_LIGHT_THRESHOLD,
        show_secondary_marker=agg.non_preferred > 0,
    )


def paint_grid(aggregates: Mapping[TimeKey, Aggregate], keys: Iterable[TimeKey]) -> Dict[TimeKey, CellPaint]:
    """Paint every requested key against one group-wide baseline."""
    baseline = max_preferred_baseline(aggregates)
    return {key: color_for(aggregates.get(key), baseline) for key in keys}
