"""Read-time joins that attach assignees, creators and projects to records."""

from typing import Dict, Iterable, List, Optional, Sequence

from phaseboard.schemas.entities import (
    PhaseResponse,
    PhaseView,
    PhaseWithDetails,
    ProjectResponse,
    ProjectWithPhases,
    UserResponse,
)

UserIndex = Dict[str, UserResponse]


def index_users(users: Iterable[UserResponse]) -> UserIndex:
    return {user.id: user for user in users}


def resolve_user(user_id: Optional[str], users_by_id: UserIndex) -> Optional[UserResponse]:
    """Unset and dangling references both resolve to ``None``."""
    if not user_id:
        return None
    return users_by_id.get(user_id)


def _display_order(phases: Iterable[PhaseResponse]) -> List[PhaseResponse]:
    # order is caller-assigned and may repeat; creation time breaks ties
    return sorted(phases, key=lambda phase: (phase.order, phase.created_at is None, phase.created_at))


def hydrate_phase(phase: PhaseResponse, users_by_id: UserIndex) -> PhaseView:
    return PhaseView(
        **phase.model_dump(),
        assignee=resolve_user(phase.assignee_id, users_by_id),
    )


def hydrate_project(
    project: ProjectResponse,
    phases: Iterable[PhaseResponse],
    users_by_id: UserIndex,
) -> ProjectWithPhases:
    own_phases = [phase for phase in phases if phase.project_id == project.id]
    return ProjectWithPhases(
        **project.model_dump(),
        phases=[hydrate_phase(phase, users_by_id) for phase in _display_order(own_phases)],
        creator=resolve_user(project.created_by, users_by_id),
    )


def hydrate_projects(
    projects: Sequence[ProjectResponse],
    phases: Sequence[PhaseResponse],
    users: Iterable[UserResponse],
) -> List[ProjectWithPhases]:
    users_by_id = index_users(users)
    by_project: Dict[str, List[PhaseResponse]] = {}
    for phase in phases:
        by_project.setdefault(phase.project_id, []).append(phase)
    return [
        hydrate_project(project, by_project.get(project.id, []), users_by_id)
        for project in projects
    ]


def phase_details(
    phase: PhaseResponse,
    project: Optional[ProjectResponse],
    users_by_id: UserIndex,
) -> PhaseWithDetails:
    return PhaseWithDetails(
        **phase.model_dump(),
        project=project,
        assignee=resolve_user(phase.assignee_id, users_by_id),
    )
