"""
PhaseBoard - Timeline Layout Engine
Maps a hydrated project/phase collection onto screen-space coordinates

The engine is pure: given projects, a pixel size, a margin and a granularity
it returns the padded time domain, the tick marks, and one row per project
holding a positioned block per phase. Rendering is left to the client.
"""

# ===============================================================================
# STANDARD IMPORTS SECTION
# ===============================================================================

# Standard library imports (alphabetical)
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

# Local imports (alphabetical)
from phaseboard.schemas.enums import Granularity
from phaseboard.timeline.date_utils import (
    DateLike,
    add_units,
    calculate_project_progress,
    end_of_unit,
    get_phase_status_from_dates,
    is_phase_overdue,
    parse_date,
    start_of_unit,
    status_style,
    utc_now,
)

# ===============================================================================
# CONSTANTS & CONFIGURATION
# ===============================================================================

ROW_HEIGHT = 80.0
BAND_PADDING = 0.2
BLOCK_OFFSET = 10.0
BLOCK_HEIGHT = 35.0
MIN_BLOCK_WIDTH = 20.0
LABEL_MIN_WIDTH = 60.0
GLYPH_INSET = 8.0

DEFAULT_PADDING_UNITS = 1

# Padding the interactive renderer applied per granularity
RENDERER_PADDING: Dict[Granularity, int] = {
    Granularity.MONTH: 1,
    Granularity.WEEK: 2,
    Granularity.DAY: 7,
}

TICK_LABEL_FORMATS: Dict[Granularity, str] = {
    Granularity.MONTH: "%b",
    Granularity.WEEK: "%b %d",
    Granularity.DAY: "%b %d",
}

# ===============================================================================
# SCALES
# ===============================================================================

@dataclass(frozen=True)
class Margin:
    top: float = 60.0
    right: float = 20.0
    bottom: float = 40.0
    left: float = 200.0


@dataclass(frozen=True)
class TimeScale:
    """Linear map from ``[start, end]`` to ``[range_start, range_end]``."""
    start: datetime
    end: datetime
    range_start: float
    range_end: float

    @property
    def span_seconds(self) -> float:
        return (self.end - self.start).total_seconds()

    def __call__(self, value: DateLike) -> float:
        span = self.span_seconds
        if span == 0:
            return self.range_start
        offset = (parse_date(value) - self.start).total_seconds()
        return self.range_start + (offset / span) * (self.range_end - self.range_start)

    def invert(self, x: float) -> datetime:
        width = self.range_end - self.range_start
        if width == 0:
            return self.start
        fraction = (x - self.range_start) / width
        return self.start + (self.end - self.start) * fraction


@dataclass(frozen=True)
class BandScale:
    """Fixed-height rows in list order; unknown keys map to ``None``."""
    keys: Tuple[str, ...]
    row_height: float = ROW_HEIGHT
    padding: float = BAND_PADDING

    @property
    def bandwidth(self) -> float:
        return self.row_height * (1 - self.padding)

    @property
    def band_offset(self) -> float:
        return self.row_height * self.padding / 2

    def row_y(self, key: str) -> Optional[float]:
        try:
            return self.keys.index(key) * self.row_height
        except ValueError:
            return None

    def __call__(self, key: str) -> Optional[float]:
        y = self.row_y(key)
        return None if y is None else y + self.band_offset

# ===============================================================================
# LAYOUT RESULT TYPES
# ===============================================================================

@dataclass(frozen=True)
class Tick:
    date: datetime
    x: float
    label: str


@dataclass(frozen=True)
class PhaseBlock:
    phase_id: str
    name: str
    status: str
    suggested_status: str
    overdue: bool
    start_date: datetime
    end_date: datetime
    x: float
    y: float
    width: float
    height: float
    color: str
    glyph: str
    glyph_x: float
    opacity: float
    show_label: bool


@dataclass(frozen=True)
class ProjectRow:
    project_id: str
    name: str
    client: Optional[str]
    y: float
    band_y: float
    band_height: float
    progress: int
    blocks: List[PhaseBlock] = field(default_factory=list)


@dataclass(frozen=True)
class TimelineLayout:
    domain_start: datetime
    domain_end: datetime
    granularity: Granularity
    zoom: float
    width: float
    height: float
    inner_width: float
    margin: Margin
    ticks: List[Tick]
    rows: List[ProjectRow]
    x_scale: TimeScale
    y_scale: BandScale

    @property
    def project_count(self) -> int:
        return len(self.rows)

    @property
    def phase_count(self) -> int:
        return sum(len(row.blocks) for row in self.rows)

# ===============================================================================
# DOMAIN & TICKS
# ===============================================================================

def collect_time_points(projects: Sequence[Any]) -> List[datetime]:
    points = []
    for project in projects:
        for phase in getattr(project, "phases", None) or []:
            points.append(parse_date(phase.start_date))
            points.append(parse_date(phase.end_date))
    return points


def compute_domain(
    min_date: datetime,
    max_date: datetime,
    granularity: Granularity = Granularity.MONTH,
    padding_units: int = DEFAULT_PADDING_UNITS,
) -> Tuple[datetime, datetime]:
    """Widen ``[min_date, max_date]`` by padding units, snapped to unit edges."""
    start = start_of_unit(add_units(min_date, granularity, -padding_units), granularity)
    end = end_of_unit(add_units(max_date, granularity, padding_units), granularity)
    return start, end


def generate_ticks(
    domain_start: datetime,
    domain_end: datetime,
    granularity: Granularity,
    x_scale: TimeScale,
) -> List[Tick]:
    label_format = TICK_LABEL_FORMATS[Granularity(granularity)]
    ticks = []
    current = start_of_unit(domain_start, granularity)
    if current < domain_start:
        current = add_units(current, granularity, 1)
    while current <= domain_end:
        ticks.append(Tick(date=current, x=x_scale(current), label=current.strftime(label_format)))
        current = add_units(current, granularity, 1)
    return ticks

# ===============================================================================
# LAYOUT
# ===============================================================================

def _layout_block(phase: Any, row_y: float, x_scale: TimeScale, now: datetime) -> PhaseBlock:
    start = parse_date(phase.start_date)
    end = parse_date(phase.end_date)
    status = getattr(phase.status, "value", phase.status)
    style = status_style(status)

    x = x_scale(start)
    width = max(x_scale(end) - x, MIN_BLOCK_WIDTH)

    return PhaseBlock(
        phase_id=phase.id,
        name=phase.name,
        status=status,
        suggested_status=get_phase_status_from_dates(start, end, status, now=now),
        overdue=is_phase_overdue(end, now=now),
        start_date=start,
        end_date=end,
        x=x,
        y=row_y + BLOCK_OFFSET,
        width=width,
        height=BLOCK_HEIGHT,
        color=style.color,
        glyph=style.glyph,
        glyph_x=x + width - GLYPH_INSET,
        opacity=style.opacity,
        show_label=width > LABEL_MIN_WIDTH,
    )


def calculate_timeline_layout(
    projects: Sequence[Any],
    width: float,
    height: Optional[float] = None,
    margin: Margin = Margin(),
    granularity: Granularity = Granularity.MONTH,
    zoom: float = 1.0,
    padding_units: int = DEFAULT_PADDING_UNITS,
    now: Optional[DateLike] = None,
) -> TimelineLayout:
    """
    Compute the timeline layout for ``projects``.

    Args:
        projects: Hydrated projects, each exposing ``id``, ``name``,
            ``client`` and ``phases``
        width: Base pixel width before zoom; a plot area narrower than the
            margins collapses to zero width rather than running backwards
        height: Pixel height; defaults to the stacked row height plus margins
        margin: Space reserved around the plot area
        granularity: Padding and tick unit
        zoom: Width multiplier; it never changes the vertical scale
        padding_units: Units of granularity added on each side of the data
        now: Reference instant for empty input and status suggestions

    Returns:
        TimelineLayout with the domain, ticks and one row per project
    """
    granularity = Granularity(granularity)
    current = utc_now() if now is None else parse_date(now)

    effective_width = width * zoom
    inner_width = max(effective_width - margin.left - margin.right, 0.0)
    content_height = len(projects) * ROW_HEIGHT + margin.top + margin.bottom
    total_height = content_height if height is None else height

    points = collect_time_points(projects)
    if points:
        domain_start, domain_end = compute_domain(min(points), max(points), granularity, padding_units)
    else:
        domain_start = domain_end = current

    x_scale = TimeScale(domain_start, domain_end, 0.0, inner_width)
    y_scale = BandScale(keys=tuple(project.id for project in projects))

    if points:
        ticks = generate_ticks(domain_start, domain_end, granularity, x_scale)
    else:
        ticks = [Tick(date=current, x=0.0, label=current.strftime(TICK_LABEL_FORMATS[granularity]))]

    rows = []
    for index, project in enumerate(projects):
        row_y = index * ROW_HEIGHT
        phases = list(getattr(project, "phases", None) or [])
        rows.append(ProjectRow(
            project_id=project.id,
            name=project.name,
            client=getattr(project, "client", None),
            y=row_y,
            band_y=row_y + y_scale.band_offset,
            band_height=y_scale.bandwidth,
            progress=calculate_project_progress(phases),
            blocks=[_layout_block(phase, row_y, x_scale, current) for phase in phases],
        ))

    return TimelineLayout(
        domain_start=domain_start,
        domain_end=domain_end,
        granularity=granularity,
        zoom=zoom,
        width=effective_width,
        height=total_height,
        inner_width=inner_width,
        margin=margin,
        ticks=ticks,
        rows=rows,
        x_scale=x_scale,
        y_scale=y_scale,
    )
