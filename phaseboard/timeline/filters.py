"""
PhaseBoard - Filter & Search Engine
Pure narrowing of the hydrated project collection for timeline views
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, List, Sequence, Tuple

FILTER_KEYS = ("text_query", "status", "assignee_id", "project_id")


@dataclass(frozen=True)
class FilterState:
    """Active restrictions; an empty string means no restriction"""
    text_query: str = ""
    status: str = ""
    assignee_id: str = ""
    project_id: str = ""

    def __post_init__(self):
        # Accept enum members and None for convenience
        for key in FILTER_KEYS:
            value = getattr(self, key)
            if value is None:
                object.__setattr__(self, key, "")
            elif not isinstance(value, str) or hasattr(value, "value"):
                object.__setattr__(self, key, str(getattr(value, "value", value)))

    @property
    def active_count(self) -> int:
        return sum(1 for key in FILTER_KEYS if getattr(self, key))

    @property
    def is_empty(self) -> bool:
        return self.active_count == 0

    def cleared(self, key: str) -> "FilterState":
        if key not in FILTER_KEYS:
            raise KeyError(f"Unknown filter: {key}")
        return replace(self, **{key: ""})

    def reset(self) -> "FilterState":
        return FilterState()

    def as_dict(self) -> Dict[str, str]:
        return {key: getattr(self, key) for key in FILTER_KEYS}


def _contains(haystack: Any, needle: str) -> bool:
    return bool(haystack) and needle in str(haystack).lower()


def _status_of(phase: Any) -> str:
    return str(getattr(phase.status, "value", phase.status))


def project_matches(project: Any, state: FilterState) -> bool:
    if state.text_query:
        query = state.text_query.lower()
        if not (_contains(project.name, query) or _contains(getattr(project, "client", None), query)):
            return False
    return not state.project_id or project.id == state.project_id


def phase_matches(phase: Any, state: FilterState) -> bool:
    if state.status and _status_of(phase) != state.status:
        return False
    return not state.assignee_id or getattr(phase, "assignee_id", None) == state.assignee_id


def _with_phases(project: Any, phases: List[Any]) -> Any:
    if hasattr(project, "model_copy"):
        return project.model_copy(update={"phases": phases})
    return replace(project, phases=phases)


def filter_projects(projects: Sequence[Any], state: FilterState) -> List[Any]:
    """
    Apply ``state`` to the hydrated collection.

    Projects are matched on text and identity, then their phases on status
    and assignee. Projects left without phases are dropped. Inputs are never
    mutated; each kept project is a copy holding only its matching phases.
    """
    result = []
    for project in projects:
        if not project_matches(project, state):
            continue
        phases = [phase for phase in (project.phases or []) if phase_matches(phase, state)]
        if phases:
            result.append(_with_phases(project, phases))
    return result


def search_projects(projects: Sequence[Any], query: str) -> List[Any]:
    """Name/client search that keeps projects regardless of their phases."""
    if not query:
        return list(projects)
    needle = query.lower()
    return [
        project for project in projects
        if _contains(project.name, needle) or _contains(getattr(project, "client", None), needle)
    ]


def collect_filter_options(projects: Sequence[Any]) -> Dict[str, Tuple[str, ...]]:
    """Distinct project ids, assignee ids and statuses in first-seen order."""
    project_ids: Dict[str, None] = {}
    assignees: Dict[str, None] = {}
    statuses: Dict[str, None] = {}
    for project in projects:
        project_ids.setdefault(project.id)
        for phase in project.phases or []:
            if getattr(phase, "assignee_id", None):
                assignees.setdefault(phase.assignee_id)
            statuses.setdefault(_status_of(phase))
    return {
        "projects": tuple(project_ids),
        "assignees": tuple(assignees),
        "statuses": tuple(statuses),
    }


def count_phases(projects: Sequence[Any]) -> int:
    return sum(len(project.phases or []) for project in projects)
