"""
PhaseBoard - Aggregation & Stats
Dashboard snapshot computed from the unfiltered entity collections
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from phaseboard.schemas.dashboard import ActivityEntry, StatsResponse, TeamMemberSummary
from phaseboard.schemas.entities import PhaseResponse, ProjectResponse, UserResponse
from phaseboard.schemas.enums import PhaseStatus, RecentActivityOrder
from phaseboard.services.hydration import index_users, resolve_user

RECENT_ACTIVITY_LIMIT = 5
TEAM_MEMBER_LIMIT = 5

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _status(phase: PhaseResponse) -> str:
    return getattr(phase.status, "value", phase.status)


def _activity_time(phase: PhaseResponse) -> Optional[datetime]:
    return phase.updated_at or phase.created_at


def select_recent_phases(
    phases: Sequence[PhaseResponse],
    order: RecentActivityOrder = RecentActivityOrder.COLLECTION,
    limit: int = RECENT_ACTIVITY_LIMIT,
) -> List[PhaseResponse]:
    """
    Pick the phases shown in the activity feed.

    ``collection`` takes the last ``limit`` phases in the order given;
    ``updated_at`` takes the most recently touched ones, newest first.
    """
    if limit <= 0:
        return []
    if RecentActivityOrder(order) is RecentActivityOrder.UPDATED_AT:
        ranked = sorted(phases, key=lambda phase: _activity_time(phase) or _EPOCH, reverse=True)
        return ranked[:limit]
    return list(phases[-limit:])


def build_activity_entry(
    phase: PhaseResponse,
    projects_by_id: Dict[str, ProjectResponse],
    users_by_id: Dict[str, UserResponse],
) -> ActivityEntry:
    kind = "completed" if _status(phase) == PhaseStatus.COMPLETED.value else "updated"
    project = projects_by_id.get(phase.project_id)
    assignee = resolve_user(phase.assignee_id, users_by_id)
    return ActivityEntry(
        type=kind,
        action=kind,
        target=phase.name,
        project=project.name if project else None,
        user=assignee.name if assignee else None,
        timestamp=_activity_time(phase),
    )


def compute_stats(
    projects: Sequence[ProjectResponse],
    phases: Sequence[PhaseResponse],
    users: Sequence[UserResponse],
    recent_order: RecentActivityOrder = RecentActivityOrder.COLLECTION,
) -> StatsResponse:
    counts = {status.value: 0 for status in PhaseStatus}
    for phase in phases:
        status = _status(phase)
        if status in counts:
            counts[status] += 1

    projects_by_id = {project.id: project for project in projects}
    users_by_id = index_users(users)

    team_members = [
        TeamMemberSummary(
            id=user.id,
            name=user.name,
            role=user.role,
            active_phases=sum(
                1 for phase in phases
                if phase.assignee_id == user.id and _status(phase) == PhaseStatus.IN_PROGRESS.value
            ),
        )
        for user in users[:TEAM_MEMBER_LIMIT]
    ]

    return StatsResponse(
        total_projects=len(projects),
        pending_phases=counts[PhaseStatus.PENDING.value],
        in_progress_phases=counts[PhaseStatus.IN_PROGRESS.value],
        completed_phases=counts[PhaseStatus.COMPLETED.value],
        delayed_phases=counts[PhaseStatus.DELAYED.value],
        recent_activity=[
            build_activity_entry(phase, projects_by_id, users_by_id)
            for phase in select_recent_phases(phases, recent_order)
        ],
        team_members=team_members,
    )
