import pytest

from votegrid.domain.enums import DAY_MODES, SLOT_MODES, SlotMode, VoteStatus
from votegrid.services.geometry_service import GeometryResolver, MonthGridLayout, Point, SlotGridLayout, Viewport
from votegrid.services.selection_service import (
    DragPaintStateMachine,
    DragState,
    InvalidMode,
    WorkingSelection,
)

# 400x800 viewport, 220 reserved -> cells are 158 wide, 24 tall
CELL_W = 158
CELL_H = 24


def at(row, col):
    return Point(col * CELL_W + 5, row * CELL_H + 5)


def make_machine(mode=None, measured=True):
    layout = SlotGridLayout()
    resolver = GeometryResolver(layout.rows, layout.columns, reserved_height=220)
    if measured:
        resolver.measure(Viewport(400, 800))
    return DragPaintStateMachine(layout, resolver, SLOT_MODES, initial_mode=mode)


def test_toggle_apply_sets_then_clears():
    sel = WorkingSelection()
    assert sel.toggle_apply("09:00", SlotMode.POSSIBLE) == SlotMode.POSSIBLE
    assert sel.get("09:00") == SlotMode.POSSIBLE
    assert sel.toggle_apply("09:00", SlotMode.POSSIBLE) is None
    assert "09:00" not in sel


def test_toggle_apply_with_other_mode_overwrites():
    sel = WorkingSelection({"09:00": SlotMode.IMPOSSIBLE})
    sel.toggle_apply("09:00", SlotMode.POSSIBLE)
    assert sel.get("09:00") == SlotMode.POSSIBLE


def test_toggle_twice_restores_unset_or_same_mode_state():
    for start in ({}, {"09:00": SlotMode.POSSIBLE}):
        sel = WorkingSelection(start)
        sel.toggle_apply("09:00", SlotMode.POSSIBLE)
        sel.toggle_apply("09:00", SlotMode.POSSIBLE)
        assert sel.snapshot() == start


def test_toggle_twice_from_other_mode_ends_unset():
    sel = WorkingSelection({"09:00": SlotMode.IMPOSSIBLE})
    sel.toggle_apply("09:00", SlotMode.POSSIBLE)
    sel.toggle_apply("09:00", SlotMode.POSSIBLE)
    assert sel.snapshot() == {}


def test_machine_paints_into_callers_empty_selection():
    layout = SlotGridLayout()
    resolver = GeometryResolver(layout.rows, layout.columns, reserved_height=220)
    resolver.measure(Viewport(400, 800))
    shared = WorkingSelection()
    m = DragPaintStateMachine(layout, resolver, SLOT_MODES, selection=shared)
    assert m.selection is shared
    m.tap(at(0, 0))
    assert shared.get("00:00") == SlotMode.POSSIBLE


def test_drag_example_paints_three_cells():
    m = make_machine(SlotMode.POSSIBLE)
    m.gesture_start(at(0, 0))
    m.gesture_move(at(0, 1))
    m.gesture_move(at(1, 1))
    m.gesture_end()
    assert m.selection.snapshot() == {
        "00:00": SlotMode.POSSIBLE,
        "00:30": SlotMode.POSSIBLE,
        "01:30": SlotMode.POSSIBLE,
    }
    assert m.state == DragState.IDLE


def test_drag_never_revisits_a_cell_within_one_gesture():
    m = make_machine(SlotMode.POSSIBLE)
    m.gesture_start(at(3, 0))
    for _ in range(4):
        m.gesture_move(at(3, 1))
        m.gesture_move(at(3, 0))
    m.gesture_end()
    assert m.selection.snapshot() == {"03:00": SlotMode.POSSIBLE, "03:30": SlotMode.POSSIBLE}


def test_new_gesture_can_toggle_cell_back_off():
    m = make_machine(SlotMode.POSSIBLE)
    m.tap(at(5, 0))
    assert m.selection.get("05:00") == SlotMode.POSSIBLE
    m.tap(at(5, 0))
    assert "05:00" not in m.selection


def test_drag_over_marked_cells_switches_mode():
    m = make_machine(SlotMode.IMPOSSIBLE)
    m.tap(at(8, 0))
    m.mode = SlotMode.POSSIBLE
    m.gesture_start(at(8, 0))
    m.gesture_move(at(8, 1))
    m.gesture_end()
    assert m.selection.snapshot() == {"08:00": SlotMode.POSSIBLE, "08:30": SlotMode.POSSIBLE}


def test_mode_change_mid_gesture_applies_to_next_gesture():
    m = make_machine(SlotMode.POSSIBLE)
    m.gesture_start(at(1, 0))
    m.mode = "impossible"
    m.gesture_move(at(1, 1))
    m.gesture_end()
    assert m.selection.get("01:30") == SlotMode.POSSIBLE
    m.tap(at(2, 0))
    assert m.selection.get("02:00") == SlotMode.IMPOSSIBLE


def test_second_start_while_dragging_is_ignored():
    m = make_machine(SlotMode.POSSIBLE)
    m.gesture_start(at(0, 0))
    assert m.gesture_start(at(10, 0)) is None
    assert "10:00" not in m.selection
    m.gesture_move(at(0, 0))
    assert m.selection.get("00:00") == SlotMode.POSSIBLE


def test_cancel_keeps_applied_toggles():
    m = make_machine(SlotMode.POSSIBLE)
    m.gesture_start(at(4, 0))
    m.gesture_move(at(4, 1))
    m.gesture_cancel()
    assert m.state == DragState.IDLE
    assert m.touched == frozenset()
    assert len(m.selection) == 2


def test_move_without_start_is_ignored():
    m = make_machine(SlotMode.POSSIBLE)
    assert m.gesture_move(at(0, 0)) is None
    assert len(m.selection) == 0


def test_unmeasured_geometry_touches_nothing():
    m = make_machine(SlotMode.POSSIBLE, measured=False)
    m.gesture_start(at(0, 0))
    m.gesture_move(at(0, 1))
    m.gesture_end()
    assert len(m.selection) == 0


def test_off_grid_points_touch_nothing():
    m = make_machine(SlotMode.POSSIBLE)
    m.gesture_start(Point(-10, 5))
    m.gesture_move(Point(2 * CELL_W + 1, 5))
    m.gesture_move(Point(5, 24 * CELL_H + 1))
    m.gesture_end()
    assert len(m.selection) == 0


def test_unknown_mode_rejected():
    with pytest.raises(InvalidMode):
        make_machine("preferred")
    m = make_machine()
    assert m.mode == SlotMode.POSSIBLE
    with pytest.raises(InvalidMode):
        m.mode = "non-preferred"


def test_status_aliases_select_day_modes():
    layout = MonthGridLayout(2025, 8)
    resolver = GeometryResolver(layout.rows, layout.columns, reserved_height=220)
    m = DragPaintStateMachine(layout, resolver, DAY_MODES, initial_mode="nonPreferred")
    assert m.mode == VoteStatus.NON_PREFERRED
    m.mode = "I"
    assert m.mode == VoteStatus.IMPOSSIBLE
    m.mode = "Preferred"
    assert m.mode == VoteStatus.PREFERRED
    with pytest.raises(InvalidMode):
        m.mode = "possible"


def test_slot_modes_are_case_insensitive():
    m = make_machine()
    m.mode = "IMPOSSIBLE"
    assert m.mode == SlotMode.IMPOSSIBLE


def test_day_grid_drag_skips_padding_cells():
    layout = MonthGridLayout(2025, 8)
    resolver = GeometryResolver(layout.rows, layout.columns, reserved_height=220)
    resolver.measure(Viewport(800, 800))
    geo = resolver.geometry
    m = DragPaintStateMachine(layout, resolver, DAY_MODES, initial_mode=VoteStatus.NON_PREFERRED)

    def day_at(row, col):
        return Point(col * geo.cell_width + 1, row * geo.cell_height + 1)

    m.gesture_start(day_at(0, 4))  # padding before Aug 1st
    m.gesture_move(day_at(0, 5))
    m.gesture_move(day_at(0, 6))
    m.gesture_end()
    assert m.selection.snapshot() == {
        "2025-08-01": VoteStatus.NON_PREFERRED,
        "2025-08-02": VoteStatus.NON_PREFERRED,
    }
