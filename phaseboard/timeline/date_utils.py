"""
PhaseBoard - Date & Status Utilities
Pure date normalization, formatting, duration/progress math and status styling
"""

# ===============================================================================
# STANDARD IMPORTS SECTION
# ===============================================================================

# Standard library imports (alphabetical)
import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, Iterable, Optional, Union

# Third-party imports (alphabetical)
from dateutil.parser import isoparse
from dateutil.relativedelta import SU, relativedelta

# Local imports (alphabetical)
from phaseboard.schemas.enums import Granularity, PhaseStatus

DateLike = Union[datetime, date, str]

# ===============================================================================
# CONSTANTS & CONFIGURATION
# ===============================================================================

ONE_DAY = timedelta(days=1)
DEFAULT_UPCOMING_DAYS = 7


@dataclass(frozen=True)
class StatusStyle:
    color: str
    glyph: str
    opacity: float = 1.0


STATUS_STYLES: Dict[str, StatusStyle] = {
    PhaseStatus.COMPLETED.value: StatusStyle(color="#22c55e", glyph="✓"),
    PhaseStatus.IN_PROGRESS.value: StatusStyle(color="#eab308", glyph="⟳"),
    PhaseStatus.DELAYED.value: StatusStyle(color="#ef4444", glyph="⚠"),
    PhaseStatus.PENDING.value: StatusStyle(color="#94a3b8", glyph="○", opacity=0.6),
}

# ===============================================================================
# NORMALIZATION
# ===============================================================================

def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_date(value: DateLike) -> datetime:
    """
    Normalize a date-like value to an aware UTC datetime.

    Accepts datetimes, dates (midnight UTC) and ISO-8601 strings in basic or
    extended form. Naive values are taken to be UTC.
    """
    if isinstance(value, datetime):
        result = value
    elif isinstance(value, date):
        result = datetime.combine(value, time.min)
    elif isinstance(value, str):
        try:
            result = isoparse(value.strip())
        except ValueError as e:
            raise ValueError(f"Invalid date value: {value!r}") from e
    else:
        raise TypeError(f"Unsupported date value: {type(value).__name__}")

    if result.tzinfo is None:
        return result.replace(tzinfo=timezone.utc)
    return result.astimezone(timezone.utc)


def _resolve_now(now: Optional[DateLike]) -> datetime:
    return utc_now() if now is None else parse_date(now)


def _status_value(status: Any) -> str:
    return status.value if isinstance(status, PhaseStatus) else str(status or "")

# ===============================================================================
# FORMATTING
# ===============================================================================

def format_project_date(value: DateLike) -> str:
    """``Mar 15, 2024``"""
    d = parse_date(value)
    return f"{d:%b} {d.day}, {d.year}"


def format_phase_date(value: DateLike) -> str:
    """``Mar 15``"""
    d = parse_date(value)
    return f"{d:%b} {d.day}"


def format_date_for_input(value: DateLike) -> str:
    return parse_date(value).strftime("%Y-%m-%d")


def format_date_range(start: DateLike, end: DateLike) -> str:
    return f"{parse_date(start):%b %d} - {parse_date(end):%b %d}"

# ===============================================================================
# DATE CHECKS & DURATIONS
# ===============================================================================

def is_phase_overdue(end_date: DateLike, now: Optional[DateLike] = None) -> bool:
    return parse_date(end_date) < _resolve_now(now)


def is_phase_upcoming(
    start_date: DateLike,
    within_days: int = DEFAULT_UPCOMING_DAYS,
    now: Optional[DateLike] = None,
) -> bool:
    current = _resolve_now(now)
    start = parse_date(start_date)
    return current <= start <= current + timedelta(days=within_days)


def calculate_project_duration(start_date: DateLike, end_date: DateLike) -> int:
    """Whole days from start to end, truncated toward zero."""
    delta = parse_date(end_date) - parse_date(start_date)
    return int(delta / ONE_DAY)


def calculate_phase_duration(start_date: DateLike, end_date: DateLike) -> int:
    delta = parse_date(end_date) - parse_date(start_date)
    return math.ceil(delta / ONE_DAY)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_project_progress(phases: Iterable[Any]) -> int:
    """Percentage of completed phases; 0 for a project without phases."""
    statuses = [_status_value(getattr(phase, "status", None)) for phase in phases]
    if not statuses:
        return 0
    completed = sum(1 for status in statuses if status == PhaseStatus.COMPLETED.value)
    return _round_half_up(100 * completed / len(statuses))


def get_phase_progress(phase: Any, now: Optional[DateLike] = None) -> int:
    """Elapsed share of the phase's date range, clamped to 0..100."""
    current = _resolve_now(now)
    start = parse_date(phase.start_date)
    end = parse_date(phase.end_date)

    if current < start:
        return 0
    if current > end:
        return 100
    total = (end - start).total_seconds()
    if total <= 0:
        return 100
    elapsed = (current - start).total_seconds()
    return _round_half_up(100 * elapsed / total)


def get_phase_status_from_dates(
    start_date: DateLike,
    end_date: DateLike,
    current_status: Any,
    now: Optional[DateLike] = None,
) -> str:
    """
    Suggest a status from the phase's dates.

    Completed is sticky; otherwise past the end is delayed, inside the range
    is in progress and before the start is pending. The suggestion is never
    written back to the phase.
    """
    status = _status_value(current_status)
    if status == PhaseStatus.COMPLETED.value:
        return status

    current = _resolve_now(now)
    start = parse_date(start_date)
    end = parse_date(end_date)

    if current > end:
        return PhaseStatus.DELAYED.value
    if start <= current <= end:
        return PhaseStatus.IN_PROGRESS.value
    if start > current:
        return PhaseStatus.PENDING.value
    return status

# ===============================================================================
# STATUS STYLING
# ===============================================================================

def status_style(status: Any) -> StatusStyle:
    return STATUS_STYLES.get(_status_value(status), STATUS_STYLES[PhaseStatus.PENDING.value])


def get_status_color(status: Any) -> str:
    return status_style(status).color


def get_status_icon(status: Any) -> str:
    return status_style(status).glyph

# ===============================================================================
# GRANULARITY ARITHMETIC
# ===============================================================================

_UNIT_STEP: Dict[Granularity, str] = {
    Granularity.MONTH: "months",
    Granularity.WEEK: "weeks",
    Granularity.DAY: "days",
}

_MIDNIGHT = relativedelta(hour=0, minute=0, second=0, microsecond=0)


def add_months(value: datetime, months: int) -> datetime:
    """Calendar month shift; the day is clamped to the target month's length."""
    return value + relativedelta(months=months)


def add_units(value: datetime, granularity: Granularity, count: int) -> datetime:
    granularity = Granularity(granularity)
    return value + relativedelta(**{_UNIT_STEP[granularity]: count})


def start_of_unit(value: datetime, granularity: Granularity) -> datetime:
    """First instant of the day, week (Sunday) or month containing ``value``."""
    granularity = Granularity(granularity)
    if granularity is Granularity.MONTH:
        return value + _MIDNIGHT + relativedelta(day=1)
    if granularity is Granularity.WEEK:
        return value + _MIDNIGHT + relativedelta(weekday=SU(-1))
    return value + _MIDNIGHT


def end_of_unit(value: datetime, granularity: Granularity) -> datetime:
    """Last microsecond of the unit containing ``value``."""
    granularity = Granularity(granularity)
    start = start_of_unit(value, granularity)
    return start + relativedelta(**{_UNIT_STEP[granularity]: 1, "microseconds": -1})
