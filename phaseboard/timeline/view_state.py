"""
PhaseBoard - Timeline View State
Immutable zoom, granularity and filter state with value-returning transitions
"""

from dataclasses import dataclass, field, replace
from typing import Any, Optional, Sequence

from phaseboard.schemas.enums import Granularity
from phaseboard.timeline.filters import FilterState, filter_projects
from phaseboard.timeline.layout import Margin, TimelineLayout, calculate_timeline_layout

MIN_ZOOM = 0.5
MAX_ZOOM = 3.0
ZOOM_STEP = 1.2
DEFAULT_ZOOM = 1.0
BASE_WIDTH = 1200.0


def clamp_zoom(factor: float) -> float:
    return max(MIN_ZOOM, min(MAX_ZOOM, factor))


@dataclass(frozen=True)
class ZoomState:
    factor: float = DEFAULT_ZOOM

    def __post_init__(self):
        object.__setattr__(self, "factor", clamp_zoom(float(self.factor)))

    @property
    def can_zoom_in(self) -> bool:
        return self.factor < MAX_ZOOM

    @property
    def can_zoom_out(self) -> bool:
        return self.factor > MIN_ZOOM

    def zoom_in(self) -> "ZoomState":
        return ZoomState(self.factor * ZOOM_STEP)

    def zoom_out(self) -> "ZoomState":
        return ZoomState(self.factor / ZOOM_STEP)

    def fit(self) -> "ZoomState":
        return ZoomState(DEFAULT_ZOOM)


@dataclass(frozen=True)
class TimelineViewState:
    """Everything a timeline view needs besides the data itself"""
    zoom: ZoomState = field(default_factory=ZoomState)
    granularity: Granularity = Granularity.MONTH
    filters: FilterState = field(default_factory=FilterState)
    base_width: float = BASE_WIDTH
    margin: Margin = field(default_factory=Margin)

    def with_zoom_in(self) -> "TimelineViewState":
        return replace(self, zoom=self.zoom.zoom_in())

    def with_zoom_out(self) -> "TimelineViewState":
        return replace(self, zoom=self.zoom.zoom_out())

    def with_fit(self) -> "TimelineViewState":
        return replace(self, zoom=self.zoom.fit())

    def with_granularity(self, granularity: Granularity) -> "TimelineViewState":
        return replace(self, granularity=Granularity(granularity))

    def with_filters(self, **changes: Any) -> "TimelineViewState":
        return replace(self, filters=replace(self.filters, **changes))

    def without_filter(self, key: str) -> "TimelineViewState":
        return replace(self, filters=self.filters.cleared(key))

    def with_filters_reset(self) -> "TimelineViewState":
        return replace(self, filters=self.filters.reset())

    def render(
        self,
        projects: Sequence[Any],
        padding_units: int = 1,
        height: Optional[float] = None,
        now: Any = None,
    ) -> TimelineLayout:
        """Filter ``projects`` and lay them out for this state."""
        return calculate_timeline_layout(
            filter_projects(projects, self.filters),
            width=self.base_width,
            height=height,
            margin=self.margin,
            granularity=self.granularity,
            zoom=self.zoom.factor,
            padding_units=padding_units,
            now=now,
        )
