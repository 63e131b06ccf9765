# tests/test_timeline_layout.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from phaseboard.schemas.enums import Granularity
from phaseboard.timeline.layout import (
    RENDERER_PADDING,
    Margin,
    TimeScale,
    calculate_timeline_layout,
    compute_domain,
)


def utc(year, month, day, hour=0):
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


NOW = utc(2024, 5, 1)


@pytest.fixture()
def two_projects(make_project, make_phase):
    return [
        make_project("a", "Alpha", phases=[make_phase("a", "Kickoff", "completed", utc(2024, 3, 1), utc(2024, 3, 31))]),
        make_project("b", "Beta", phases=[
            make_phase("b", "Build", "in_progress", utc(2024, 4, 10), utc(2024, 6, 15)),
            make_phase("b", "Review", "pending", utc(2024, 6, 1), utc(2024, 6, 1, 1)),
        ]),
    ]


def test_month_domain_is_padded_and_snapped(two_projects):
    layout = calculate_timeline_layout(two_projects, width=1200, now=NOW)
    assert layout.domain_start == utc(2024, 2, 1)
    assert layout.domain_end == datetime(2024, 7, 31, 23, 59, 59, 999999, tzinfo=timezone.utc)


def test_month_ticks_cover_domain(two_projects):
    layout = calculate_timeline_layout(two_projects, width=1200, now=NOW)
    assert [tick.label for tick in layout.ticks] == ["Feb", "Mar", "Apr", "May", "Jun", "Jul"]
    assert layout.ticks[0].x == pytest.approx(0.0)
    xs = [tick.x for tick in layout.ticks]
    assert xs == sorted(xs)


def test_scale_maps_domain_edges_to_inner_width(two_projects):
    layout = calculate_timeline_layout(two_projects, width=1200, now=NOW)
    assert layout.inner_width == 1200 - 200 - 20
    assert layout.x_scale(layout.domain_start) == pytest.approx(0.0)
    assert layout.x_scale(layout.domain_end) == pytest.approx(layout.inner_width)


def test_scale_is_monotonic():
    scale = TimeScale(utc(2024, 1, 1), utc(2024, 12, 31), 0.0, 980.0)
    days = [utc(2024, 1, 1) + timedelta(days=n) for n in range(0, 365, 9)]
    xs = [scale(d) for d in days]
    assert all(x1 <= x2 for x1, x2 in zip(xs, xs[1:]))
    assert abs(scale.invert(scale(utc(2024, 7, 1))) - utc(2024, 7, 1)) < timedelta(seconds=1)


def test_rows_are_fixed_height_bands(two_projects):
    layout = calculate_timeline_layout(two_projects, width=1200, now=NOW)
    assert [row.y for row in layout.rows] == [0, 80]
    assert layout.rows[1].band_y == pytest.approx(88.0)
    assert layout.rows[0].band_height == pytest.approx(64.0)
    assert layout.height == 2 * 80 + 60 + 40
    assert layout.y_scale.row_y("b") == 80
    assert layout.y_scale.row_y("missing") is None


def test_short_phase_gets_minimum_width_and_no_label(two_projects):
    layout = calculate_timeline_layout(two_projects, width=1200, now=NOW)
    review = layout.rows[1].blocks[1]
    assert review.width == 20
    assert not review.show_label
    assert review.glyph_x == pytest.approx(review.x + 12)
    assert review.opacity == 0.6
    build = layout.rows[1].blocks[0]
    assert build.width > 60 and build.show_label
    assert build.color == "#eab308" and build.glyph == "⟳"


def test_blocks_carry_advisory_status_without_changing_it(make_project, make_phase):
    projects = [make_project("a", "Alpha", phases=[make_phase("a", "Late", "pending", utc(2024, 3, 1), utc(2024, 3, 31))])]
    block = calculate_timeline_layout(projects, width=1200, now=NOW).rows[0].blocks[0]
    assert block.status == "pending"
    assert block.suggested_status == "delayed"
    assert block.overdue


def test_unknown_status_renders_as_pending():
    phase = SimpleNamespace(
        id="x", name="Odd", status="archived",
        start_date=utc(2024, 3, 1), end_date=utc(2024, 4, 1),
    )
    project = SimpleNamespace(id="p", name="P", client=None, phases=[phase])
    block = calculate_timeline_layout([project], width=1200, now=NOW).rows[0].blocks[0]
    assert block.color == "#94a3b8"
    assert block.glyph == "○"
    assert block.opacity == 0.6


def test_zoom_scales_width_only(two_projects):
    base = calculate_timeline_layout(two_projects, width=1200, now=NOW)
    zoomed = calculate_timeline_layout(two_projects, width=1200, zoom=2.0, now=NOW)
    assert zoomed.width == 2400
    assert zoomed.inner_width == 2400 - 220
    assert [row.y for row in zoomed.rows] == [row.y for row in base.rows]


def test_empty_input_is_a_single_instant():
    layout = calculate_timeline_layout([], width=1200, now=NOW)
    assert layout.domain_start == layout.domain_end == NOW
    assert len(layout.ticks) == 1
    assert layout.ticks[0].x == 0
    assert layout.x_scale(utc(2030, 1, 1)) == 0
    assert layout.rows == []


def test_projects_without_phases_still_get_rows(make_project):
    layout = calculate_timeline_layout([make_project("a", "Empty")], width=1200, now=NOW)
    assert layout.domain_start == NOW
    assert layout.rows[0].blocks == []
    assert layout.rows[0].progress == 0


def test_week_and_day_padding():
    wednesday = utc(2024, 3, 13, 10)
    start, _ = compute_domain(wednesday, wednesday, Granularity.WEEK)
    assert start == utc(2024, 3, 3)
    start, end = compute_domain(wednesday, wednesday, Granularity.DAY)
    assert start == utc(2024, 3, 12)
    assert end == datetime(2024, 3, 14, 23, 59, 59, 999999, tzinfo=timezone.utc)
    start, _ = compute_domain(wednesday, wednesday, Granularity.DAY, RENDERER_PADDING[Granularity.DAY])
    assert start == utc(2024, 3, 6)


def test_day_ticks_use_day_labels(make_project, make_phase):
    projects = [make_project("a", "Alpha", phases=[make_phase("a", "Sprint", "pending", utc(2024, 3, 4), utc(2024, 3, 5))])]
    layout = calculate_timeline_layout(projects, width=1200, granularity="day", now=NOW)
    assert [tick.label for tick in layout.ticks] == ["Mar 03", "Mar 04", "Mar 05", "Mar 06"]


def test_custom_margin(two_projects):
    layout = calculate_timeline_layout(two_projects, width=1000, margin=Margin(10, 10, 10, 100), now=NOW)
    assert layout.inner_width == 890
    assert layout.height == 2 * 80 + 20


def test_width_narrower_than_margins_collapses_to_zero(two_projects):
    layout = calculate_timeline_layout(two_projects, width=150, now=NOW)
    assert layout.inner_width == 0
    assert layout.x_scale(layout.domain_start) == 0
    assert layout.x_scale(layout.domain_end) == 0
    assert all(tick.x == 0 for tick in layout.ticks)
    assert all(block.x >= 0 for row in layout.rows for block in row.blocks)
