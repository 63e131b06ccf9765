# tests/test_view_state.py
from __future__ import annotations

from datetime import datetime, timezone

import pytest

from phaseboard.schemas.enums import Granularity
from phaseboard.timeline.view_state import TimelineViewState, ZoomState, clamp_zoom


def test_zoom_steps_and_clamps():
    zoom = ZoomState()
    assert zoom.zoom_in().factor == pytest.approx(1.2)
    assert zoom.zoom_out().factor == pytest.approx(1 / 1.2)

    for _ in range(20):
        zoom = zoom.zoom_in()
    assert zoom.factor == 3.0
    assert not zoom.can_zoom_in
    assert zoom.can_zoom_out

    for _ in range(20):
        zoom = zoom.zoom_out()
    assert zoom.factor == 0.5
    assert not zoom.can_zoom_out
    assert zoom.fit().factor == 1.0


def test_clamp_zoom():
    assert clamp_zoom(10) == 3.0
    assert clamp_zoom(0.1) == 0.5
    assert ZoomState(7).factor == 3.0


def test_transitions_return_new_states():
    state = TimelineViewState()
    zoomed = state.with_zoom_in()
    assert state.zoom.factor == 1.0
    assert zoomed.zoom.factor == pytest.approx(1.2)
    assert zoomed.with_fit().zoom.factor == 1.0

    weekly = state.with_granularity("week")
    assert weekly.granularity is Granularity.WEEK
    assert state.granularity is Granularity.MONTH

    filtered = state.with_filters(status="delayed", assignee_id="u1")
    assert filtered.filters.active_count == 2
    assert filtered.without_filter("status").filters.active_count == 1
    assert filtered.with_filters_reset().filters.is_empty
    assert state.filters.is_empty


def test_render_applies_filters_and_zoom(four_project_fixture):
    state = TimelineViewState().with_filters(status="delayed").with_zoom_in()
    layout = state.render(four_project_fixture, now=datetime(2024, 5, 1, tzinfo=timezone.utc))
    assert [row.project_id for row in layout.rows] == ["p1", "p3"]
    assert layout.phase_count == 2
    assert layout.width == pytest.approx(1200 * 1.2)
