# tests/test_date_utils.py
from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from phaseboard.schemas.enums import Granularity, PhaseStatus
from phaseboard.timeline.date_utils import (
    add_months,
    calculate_phase_duration,
    calculate_project_duration,
    calculate_project_progress,
    end_of_unit,
    format_date_for_input,
    format_date_range,
    format_phase_date,
    format_project_date,
    get_phase_progress,
    get_phase_status_from_dates,
    get_status_color,
    get_status_icon,
    is_phase_overdue,
    is_phase_upcoming,
    parse_date,
    start_of_unit,
    status_style,
)

NOW = datetime(2024, 5, 1, 12, tzinfo=timezone.utc)


def _phases(*statuses):
    return [SimpleNamespace(status=s) for s in statuses]


# --- parsing & formatting ----------------------------------------------------

def test_parse_date_accepts_strings_dates_and_naive_datetimes():
    assert parse_date("2024-03-15T10:00:00Z") == datetime(2024, 3, 15, 10, tzinfo=timezone.utc)
    assert parse_date(date(2024, 3, 15)) == datetime(2024, 3, 15, tzinfo=timezone.utc)
    assert parse_date(datetime(2024, 3, 15, 8)).tzinfo == timezone.utc


def test_parse_date_converts_offsets_to_utc():
    assert parse_date("2024-03-15T10:00:00+02:00") == datetime(2024, 3, 15, 8, tzinfo=timezone.utc)


def test_parse_date_accepts_basic_iso_form():
    assert parse_date("20240315") == datetime(2024, 3, 15, tzinfo=timezone.utc)
    assert parse_date("20240315T1000Z") == datetime(2024, 3, 15, 10, tzinfo=timezone.utc)


def test_parse_date_rejects_garbage():
    with pytest.raises(ValueError):
        parse_date("not a date")


def test_formatting():
    assert format_project_date("2024-03-15") == "Mar 15, 2024"
    assert format_project_date("2024-03-05") == "Mar 5, 2024"
    assert format_phase_date("2024-03-15T23:00:00Z") == "Mar 15"
    assert format_date_for_input(datetime(2024, 3, 5, tzinfo=timezone.utc)) == "2024-03-05"
    assert format_date_range("2024-03-05", "2024-04-02") == "Mar 05 - Apr 02"


# --- date checks -------------------------------------------------------------

def test_overdue_is_strictly_before_now():
    assert is_phase_overdue(NOW - timedelta(seconds=1), now=NOW)
    assert not is_phase_overdue(NOW, now=NOW)
    assert not is_phase_overdue(NOW + timedelta(days=1), now=NOW)


def test_upcoming_window_is_inclusive():
    assert is_phase_upcoming(NOW, now=NOW)
    assert is_phase_upcoming(NOW + timedelta(days=7), now=NOW)
    assert not is_phase_upcoming(NOW + timedelta(days=7, seconds=1), now=NOW)
    assert not is_phase_upcoming(NOW - timedelta(seconds=1), now=NOW)
    assert is_phase_upcoming(NOW + timedelta(days=10), within_days=14, now=NOW)


# --- durations & progress ----------------------------------------------------

def test_project_duration_truncates_and_may_be_negative():
    assert calculate_project_duration("2024-01-01", "2024-01-31") == 30
    assert calculate_project_duration("2024-01-31", "2024-01-01") == -30
    assert calculate_project_duration("2024-01-01T00:00:00", "2024-01-01T12:00:00") == 0


def test_phase_duration_rounds_up():
    assert calculate_phase_duration("2024-01-01T00:00:00", "2024-01-01T12:00:00") == 1
    assert calculate_phase_duration("2024-01-01", "2024-01-31") == 30


@pytest.mark.parametrize(
    "statuses, expected",
    [
        ((), 0),
        (("completed",), 100),
        (("completed", "pending", "pending"), 33),
        (("completed", "completed", "pending"), 67),
        (("completed",) + ("pending",) * 7, 13),
        (("delayed", "in_progress"), 0),
    ],
)
def test_project_progress(statuses, expected):
    assert calculate_project_progress(_phases(*statuses)) == expected


def test_project_progress_accepts_enum_statuses():
    assert calculate_project_progress(_phases(PhaseStatus.COMPLETED, PhaseStatus.PENDING)) == 50


def test_phase_progress_is_elapsed_share():
    phase = SimpleNamespace(start_date="2024-05-01T00:00:00Z", end_date="2024-05-03T00:00:00Z")
    assert get_phase_progress(phase, now="2024-04-30T00:00:00Z") == 0
    assert get_phase_progress(phase, now="2024-05-02T00:00:00Z") == 50
    assert get_phase_progress(phase, now="2024-05-04T00:00:00Z") == 100


# --- derived status ----------------------------------------------------------

def test_completed_is_sticky():
    assert get_phase_status_from_dates("2024-01-01", "2024-02-01", "completed", now=NOW) == "completed"
    again = get_phase_status_from_dates("2024-01-01", "2024-02-01", "completed", now=NOW)
    assert get_phase_status_from_dates("2024-01-01", "2024-02-01", again, now=NOW) == "completed"


def test_status_suggestions_follow_precedence():
    assert get_phase_status_from_dates("2024-01-01", "2024-02-01", "pending", now=NOW) == "delayed"
    assert get_phase_status_from_dates("2024-04-01", "2024-06-01", "pending", now=NOW) == "in_progress"
    assert get_phase_status_from_dates("2024-06-01", "2024-07-01", "in_progress", now=NOW) == "pending"
    assert get_phase_status_from_dates("2024-04-01", "2024-06-01", PhaseStatus.DELAYED, now=NOW) == "in_progress"


# --- styling -----------------------------------------------------------------

def test_status_table():
    assert get_status_color("completed") == "#22c55e"
    assert get_status_icon("in_progress") == "⟳"
    assert get_status_icon(PhaseStatus.DELAYED) == "⚠"
    assert status_style("completed").opacity == 1.0


def test_unknown_status_gets_pending_treatment():
    assert get_status_color("archived") == get_status_color("pending") == "#94a3b8"
    assert get_status_icon("archived") == "○"
    assert status_style("archived").opacity == 0.6


# --- granularity arithmetic --------------------------------------------------

def test_add_months_clamps_day():
    assert add_months(datetime(2024, 1, 31, tzinfo=timezone.utc), 1).date() == date(2024, 2, 29)
    assert add_months(datetime(2024, 1, 15, tzinfo=timezone.utc), -1).date() == date(2023, 12, 15)
    assert add_months(datetime(2024, 3, 31, tzinfo=timezone.utc), -1).date() == date(2024, 2, 29)
    assert add_months(datetime(2024, 11, 30, tzinfo=timezone.utc), 3).date() == date(2025, 2, 28)


def test_unit_boundaries():
    wednesday = datetime(2024, 3, 13, 15, 30, tzinfo=timezone.utc)
    assert start_of_unit(wednesday, Granularity.WEEK) == datetime(2024, 3, 10, tzinfo=timezone.utc)
    assert start_of_unit(wednesday, Granularity.DAY) == datetime(2024, 3, 13, tzinfo=timezone.utc)
    assert start_of_unit(wednesday, Granularity.MONTH) == datetime(2024, 3, 1, tzinfo=timezone.utc)
    assert end_of_unit(datetime(2024, 2, 10, tzinfo=timezone.utc), Granularity.MONTH) == datetime(
        2024, 2, 29, 23, 59, 59, 999999, tzinfo=timezone.utc
    )
    assert end_of_unit(wednesday, Granularity.WEEK) == datetime(2024, 3, 16, 23, 59, 59, 999999, tzinfo=timezone.utc)
