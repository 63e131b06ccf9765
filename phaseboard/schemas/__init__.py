"""PhaseBoard request/response schemas."""

from .enums import Granularity, PhaseStatus, RecentActivityOrder
from .entities import (
    NewProjectPhase,
    PhaseCreate,
    PhaseResponse,
    PhaseUpdate,
    PhaseView,
    PhaseWithDetails,
    ProjectCreate,
    ProjectResponse,
    ProjectUpdate,
    ProjectWithPhases,
    UserCreate,
    UserResponse,
)

__all__ = [
    "Granularity",
    "NewProjectPhase",
    "PhaseCreate",
    "PhaseResponse",
    "PhaseStatus",
    "PhaseUpdate",
    "PhaseView",
    "PhaseWithDetails",
    "ProjectCreate",
    "ProjectResponse",
    "ProjectUpdate",
    "ProjectWithPhases",
    "RecentActivityOrder",
    "UserCreate",
    "UserResponse",
]
