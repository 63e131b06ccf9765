"""PhaseBoard timeline engine: date utilities, layout, filtering and view state."""

from .filters import FilterState, filter_projects, search_projects
from .layout import Margin, TimelineLayout, calculate_timeline_layout
from .view_state import TimelineViewState, ZoomState

__all__ = [
    "FilterState",
    "Margin",
    "TimelineLayout",
    "TimelineViewState",
    "ZoomState",
    "calculate_timeline_layout",
    "filter_projects",
    "search_projects",
]
