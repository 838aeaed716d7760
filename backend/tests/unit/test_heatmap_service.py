import pytest

from votegrid.services.aggregation_service import Aggregate
from votegrid.services.heatmap_service import (
    ACCENT,
    IMPOSSIBLE_GRAY,
    WHITE,
    Color,
    color_for,
    mix,
    paint_grid,
)


def _brightness(c: Color) -> int:
    return c.r + c.g + c.b


def test_no_votes_paints_white():
    for agg in (None, Aggregate()):
        paint = color_for(agg, 4)
        assert paint.background == WHITE
        assert paint.text_is_light is False
        assert paint.show_secondary_marker is False


def test_half_ratio_is_midpoint_color():
    paint = color_for(Aggregate(preferred=2), 4)
    assert paint.background.hex == "#fa9faf"
    assert paint.text_is_light is False


def test_full_ratio_is_accent_with_light_text():
    paint = color_for(Aggregate(preferred=4), 4)
    assert paint.background == ACCENT
    assert paint.text_is_light is True


def test_ratio_clamps_above_baseline():
    assert color_for(Aggregate(preferred=9), 3).background == ACCENT


def test_text_crossover_just_above_threshold():
    assert color_for(Aggregate(preferred=13), 20).text_is_light is False  # 0.65
    assert color_for(Aggregate(preferred=66), 100).text_is_light is True


@pytest.mark.parametrize("preferred", [0, 1, 5, 100])
def test_any_impossible_vote_paints_gray(preferred):
    paint = color_for(Aggregate(preferred=preferred, non_preferred=2, impossible=1), 4)
    assert paint.background == IMPOSSIBLE_GRAY
    assert paint.show_secondary_marker is False
    assert paint.text_is_light is False


def test_non_preferred_shows_marker_independent_of_background():
    paint = color_for(Aggregate(preferred=4, non_preferred=1), 4)
    assert paint.background == ACCENT
    assert paint.show_secondary_marker is True
    only_np = color_for(Aggregate(non_preferred=1), 4)
    assert only_np.background == WHITE
    assert only_np.show_secondary_marker is True


def test_more_preferred_is_never_lighter():
    baseline = 6
    previous = None
    for preferred in range(0, 8):
        current = color_for(Aggregate(preferred=preferred, non_preferred=1), baseline).background
        if previous is not None:
            assert _brightness(current) <= _brightness(previous)
        previous = current


def test_mix_endpoints_and_hex_parsing():
    assert mix(WHITE, ACCENT, 0) == WHITE
    assert mix(WHITE, ACCENT, 1) == ACCENT
    assert mix(WHITE, ACCENT, -3) == WHITE
    assert Color.from_hex("#fff") == WHITE
    assert Color.from_hex("F43F5E").hex == "#f43f5e"
    with pytest.raises(ValueError):
        Color.from_hex("#12345")


def test_paint_grid_uses_one_baseline_for_all_keys():
    aggregates = {
        "2025-08-17": Aggregate(preferred=2, impossible=1),
        "2025-08-18": Aggregate(preferred=4),
        "2025-08-19": Aggregate(preferred=2),
    }
    cells = paint_grid(aggregates, ["2025-08-17", "2025-08-18", "2025-08-19", "2025-08-20"])
    assert cells["2025-08-17"].background == IMPOSSIBLE_GRAY
    assert cells["2025-08-18"].background == ACCENT
    assert cells["2025-08-19"].background.hex == "#fa9faf"
    assert cells["2025-08-20"].background == WHITE
