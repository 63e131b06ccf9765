"""Response contracts for the stats snapshot and the timeline layout."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from phaseboard.schemas.entities import CamelModel
from phaseboard.schemas.enums import Granularity, PhaseStatus


class ActivityEntry(CamelModel):
    type: str
    action: str
    target: str
    project: Optional[str] = None
    user: Optional[str] = None
    timestamp: Optional[datetime] = None


class TeamMemberSummary(CamelModel):
    id: str
    name: str
    role: str
    active_phases: int = 0


class StatsResponse(CamelModel):
    total_projects: int = 0
    pending_phases: int = 0
    in_progress_phases: int = 0
    completed_phases: int = 0
    delayed_phases: int = 0
    recent_activity: List[ActivityEntry] = Field(default_factory=list)
    team_members: List[TeamMemberSummary] = Field(default_factory=list)


class MarginSchema(CamelModel):
    top: float
    right: float
    bottom: float
    left: float


class TickSchema(CamelModel):
    date: datetime
    x: float
    label: str


class PhaseBlockSchema(CamelModel):
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


class ProjectRowSchema(CamelModel):
    project_id: str
    name: str
    client: Optional[str] = None
    y: float
    band_y: float
    band_height: float
    progress: int
    blocks: List[PhaseBlockSchema] = Field(default_factory=list)


class ActiveFiltersSchema(CamelModel):
    text_query: str = ""
    status: Optional[PhaseStatus] = None
    assignee_id: str = ""
    project_id: str = ""
    active_count: int = 0


class TimelineLayoutResponse(CamelModel):
    domain_start: datetime
    domain_end: datetime
    granularity: Granularity
    zoom: float
    width: float
    height: float
    inner_width: float
    margin: MarginSchema
    ticks: List[TickSchema] = Field(default_factory=list)
    rows: List[ProjectRowSchema] = Field(default_factory=list)
    project_count: int = 0
    phase_count: int = 0
    filters: ActiveFiltersSchema = Field(default_factory=ActiveFiltersSchema)
