import pytest

from segment_player.domain.layout import (
    PlayerGeometry,
    SegmentSpan,
    calc_segment_positions,
    segment_at,
    time_in_span,
)

GEOMETRY = PlayerGeometry()


def test_two_segments_share_bar_by_duration():
    layout = calc_segment_positions([2.0, 4.0], 400, GEOMETRY)

    assert layout == [SegmentSpan(70.0, 100.0), SegmentSpan(170.0, 200.0)]
    assert layout[-1].end == 370.0


@pytest.mark.parametrize("width", [101, 250, 400, 1024, 1921])
def test_layout_fills_bar_without_gaps(width):
    durations = [0.7, 3.3, 1.25, 9.0]
    layout = calc_segment_positions(durations, width, GEOMETRY)

    assert sum(span.width for span in layout) == pytest.approx(width - 100)
    for left, right in zip(layout, layout[1:]):
        assert left.end == pytest.approx(right.x)
    assert layout[0].x == GEOMETRY.left_margin


def test_zero_total_duration_splits_evenly():
    layout = calc_segment_positions([0.0, 0.0, 0.0], 400, GEOMETRY)

    assert [span.width for span in layout] == [100.0, 100.0, 100.0]
    assert [span.x for span in layout] == [70.0, 170.0, 270.0]


def test_failed_segment_gets_zero_width_when_others_loaded():
    layout = calc_segment_positions([2.0, 0.0, 2.0], 400, GEOMETRY)

    assert [span.width for span in layout] == [150.0, 0.0, 150.0]
    assert layout[1].x == layout[2].x == 220.0


def test_empty_and_narrow_canvas():
    assert calc_segment_positions([], 400, GEOMETRY) == []
    narrow = calc_segment_positions([1.0, 1.0], 50, GEOMETRY)
    assert [span.width for span in narrow] == [0.0, 0.0]


def test_boundary_click_belongs_to_exactly_one_segment():
    layout = calc_segment_positions([2.0, 4.0], 400, GEOMETRY)

    assert segment_at(layout, 170.0) == 1
    assert segment_at(layout, 169.999) == 0
    assert segment_at(layout, 70.0) == 0
    assert segment_at(layout, 370.0) == 1
    assert segment_at(layout, 370.5) is None
    assert segment_at(layout, 69.0) is None


def test_segment_at_skips_zero_width_spans():
    layout = calc_segment_positions([2.0, 0.0, 2.0], 400, GEOMETRY)

    assert segment_at(layout, 220.0) == 2
    assert segment_at([SegmentSpan(70.0, 0.0)], 70.0) is None


def test_time_in_span_is_proportional_and_clamped():
    span = SegmentSpan(170.0, 200.0)

    assert time_in_span(span, 270.0, 4.0) == pytest.approx(2.0)
    assert time_in_span(span, 100.0, 4.0) == 0.0
    assert time_in_span(span, 999.0, 4.0) == 4.0
    assert time_in_span(SegmentSpan(0.0, 0.0), 0.0, 4.0) == 0.0


def test_geometry_hit_regions():
    height = 300
    cx, cy = GEOMETRY.button_center(height)
    assert (cx, cy) == (30.0, 270.0)
    assert GEOMETRY.hits_play_button(cx + 19, cy, height)
    assert not GEOMETRY.hits_play_button(cx + 20, cy, height)

    x, y, width, bar_height = GEOMETRY.progress_bar_rect(400, height)
    assert (x, y, width, bar_height) == (70.0, 260.0, 300.0, 20.0)
    assert GEOMETRY.hits_progress_bar(70.0, 260.0, 400, height)
    assert GEOMETRY.hits_progress_bar(370.0, 280.0, 400, height)
    assert not GEOMETRY.hits_progress_bar(200.0, 259.0, 400, height)
    assert not GEOMETRY.hits_progress_bar(371.0, 270.0, 400, height)
