"""Drag-to-paint selection over a time grid.

One machine owns one participant's working selection. A gesture paints every
cell it crosses at most once, with the mode captured when the gesture began.
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, Iterator, Optional, Set, Tuple

from ..domain.enums import VoteStatus
from ..domain.time_keys import TimeKey
from ..infrastructure.observability.logging import get_logger
from .geometry_service import GeometryResolver, GridLayout, Point

logger = get_logger(__name__)


class InvalidMode(ValueError):
    pass


class WorkingSelection:
    """In-progress, unsubmitted choices: time key -> editing mode."""

    def __init__(self, initial: Optional[Dict[TimeKey, Enum]] = None):
        self._entries: Dict[TimeKey, Enum] = dict(initial or {})

    def toggle_apply(self, key: TimeKey, mode: Enum) -> Optional[Enum]:
        """Same mode again clears the cell, any other mode overwrites it."""
        if self._entries.get(key) == mode:
            del self._entries[key]
            return None
        self._entries[key] = mode
        return mode

    def get(self, key: TimeKey) -> Optional[Enum]:
        return self._entries.get(key)

    def items(self) -> Iterator[Tuple[TimeKey, Enum]]:
        return iter(sorted(self._entries.items()))

    def snapshot(self) -> Dict[TimeKey, Enum]:
        return dict(sorted(self._entries.items()))

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key) -> bool:
        return key in self._entries

    def __bool__(self) -> bool:
        return bool(self._entries)


class DragState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


class DragPaintStateMachine:
    def __init__(
        self,
        layout: GridLayout,
        resolver: GeometryResolver,
        modes: Iterable[Enum],
        initial_mode: Optional[Enum] = None,
        selection: Optional[WorkingSelection] = None,
    ):
        self.layout = layout
        self.resolver = resolver
        self.modes: Tuple[Enum, ...] = tuple(modes)
        if not self.modes:
            raise InvalidMode("at least one editing mode is required")
        self._mode = self._check_mode(initial_mode if initial_mode is not None else self.modes[0])
        # an empty selection is still the host's handle: keep it
        self.selection = selection if selection is not None else WorkingSelection()
        self.state = DragState.IDLE
        self._drag_mode: Optional[Enum] = None
        self._touched: Set[TimeKey] = set()

    @property
    def mode(self) -> Enum:
        return self._mode

    @mode.setter
    def mode(self, value) -> None:
        # takes effect from the next gesture
        self._mode = self._check_mode(value)

    @property
    def touched(self) -> frozenset:
        return frozenset(self._touched)

    def _check_mode(self, value) -> Enum:
        """Resolve ``value`` to one of this grid's modes; status aliases such as ``nonPreferred`` count."""
        candidates = [value, VoteStatus.parse(value)]
        if isinstance(value, str):
            candidates.append(value.strip().lower())
        for candidate in candidates:
            if candidate is None:
                continue
            for m in self.modes:
                if candidate == m or candidate == m.value:
                    return m
        raise InvalidMode(f"mode {value!r} is not one of {[m.value for m in self.modes]}")

    def _resolve_key(self, point: Point) -> Optional[TimeKey]:
        cell = self.resolver.locate(point)
        if cell is None:
            return None
        return self.layout.key_at(cell)

    def _paint(self, point: Point) -> Optional[TimeKey]:
        key = self._resolve_key(point)
        if key is None or key in self._touched:
            return None
        self._touched.add(key)
        self.selection.toggle_apply(key, self._drag_mode)
        return key

    def gesture_start(self, point: Point) -> Optional[TimeKey]:
        """Begin a gesture; ignored while another gesture is active (multi-touch)."""
        if self.state == DragState.DRAGGING:
            logger.debug("gesture_start ignored while dragging")
            return None
        self.state = DragState.DRAGGING
        self._drag_mode = self._mode
        self._touched.clear()
        return self._paint(point)

    def gesture_move(self, point: Point) -> Optional[TimeKey]:
        if self.state != DragState.DRAGGING:
            return None
        return self._paint(point)

    def gesture_end(self) -> None:
        self.state = DragState.IDLE
        self._drag_mode = None
        self._touched.clear()

    def gesture_cancel(self) -> None:
        # same as a normal end: applied toggles stay
        self.gesture_end()

    def tap(self, point: Point) -> Optional[TimeKey]:
        if self.state == DragState.DRAGGING:
            return None
        key = self.gesture_start(point)
        self.gesture_end()
        return key
