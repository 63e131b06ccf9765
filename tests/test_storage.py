# tests/test_storage.py
from __future__ import annotations

from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from phaseboard.core.exceptions import PersistenceError, ValidationError
from phaseboard.database.seeds import SEED_PHASES, seed_database
from phaseboard.schemas.entities import (
    NewProjectPhase,
    PhaseCreate,
    PhaseUpdate,
    ProjectCreate,
    ProjectUpdate,
    UserCreate,
)
from phaseboard.schemas.enums import PhaseStatus, RecentActivityOrder


def utc(year, month, day):
    return datetime(year, month, day, tzinfo=timezone.utc)


async def _user(storage, username="jsmith", name="Jane Smith"):
    return await storage.create_user(UserCreate(username=username, email=f"{username}@example.com", name=name))


async def _project(storage, name="Website Redesign", **extra):
    return await storage.create_project(
        ProjectCreate(name=name, start_date=utc(2024, 1, 1), end_date=utc(2024, 6, 30), **extra)
    )


async def _phase(storage, project_id, name="Design", **extra):
    return await storage.create_phase(
        PhaseCreate(project_id=project_id, name=name, start_date=utc(2024, 2, 1), end_date=utc(2024, 3, 1), **extra)
    )


# --- users -------------------------------------------------------------------

async def test_create_and_lookup_user(storage):
    user = await _user(storage)
    assert user.role == "team_member"
    assert (await storage.get_user(user.id)).username == "jsmith"
    assert (await storage.get_user_by_username("jsmith")).id == user.id
    assert await storage.get_user("missing") is None


async def test_duplicate_user_is_a_validation_error(storage):
    await _user(storage)
    with pytest.raises(ValidationError) as excinfo:
        await storage.create_user(UserCreate(username="jsmith", email="other@example.com", name="Other"))
    assert [error.field for error in excinfo.value.errors] == ["username"]
    assert len(await storage.get_users()) == 1


# --- projects ----------------------------------------------------------------

async def test_project_hydration_omits_missing_assignee(storage):
    user = await _user(storage)
    project = await _project(storage, created_by=user.id)
    await _phase(storage, project.id, "Site", order=1)
    await _phase(storage, project.id, "Design", order=0, assignee_id=user.id)

    hydrated = await storage.get_project(project.id)
    assert [phase.name for phase in hydrated.phases] == ["Design", "Site"]
    assert hydrated.phases[0].assignee.name == "Jane Smith"
    assert hydrated.phases[1].assignee is None
    assert hydrated.creator.id == user.id

    payload = hydrated.model_dump(mode="json", by_alias=True)
    assert "assignee" not in payload["phases"][1]
    assert payload["phases"][1]["assigneeId"] is None


async def test_get_projects_includes_projects_without_phases(storage):
    first = await _project(storage, "First")
    await _project(storage, "Second")
    await _phase(storage, first.id)
    projects = await storage.get_projects()
    assert [len(project.phases) for project in projects] == [1, 0]
    assert await storage.get_timeline_data() == projects


async def test_unknown_references_are_rejected(storage):
    with pytest.raises(ValidationError) as excinfo:
        await _project(storage, created_by="ghost")
    assert excinfo.value.errors[0].field == "createdBy"

    with pytest.raises(ValidationError) as excinfo:
        await _phase(storage, "no-such-project")
    assert excinfo.value.errors[0].field == "projectId"

    project = await _project(storage)
    with pytest.raises(ValidationError):
        await _phase(storage, project.id, assignee_id="ghost")


async def test_update_project(storage):
    project = await _project(storage)
    updated = await storage.update_project(project.id, ProjectUpdate(status="on_hold", client="Acme"))
    assert updated.status == "on_hold"
    assert updated.client == "Acme"
    assert updated.name == project.name
    assert updated.updated_at is not None
    assert await storage.update_project("missing", ProjectUpdate(status="active")) is None


async def test_delete_project_cascades_to_phases(storage):
    project = await _project(storage)
    for name in ("One", "Two", "Three"):
        await _phase(storage, project.id, name)

    assert await storage.delete_project(project.id) is True
    assert await storage.get_project(project.id) is None
    assert await storage.get_phases_by_project(project.id) == []
    assert await storage.delete_project(project.id) is False


async def test_create_project_with_phases(storage):
    user = await _user(storage)
    data = ProjectCreate(
        name="Launch",
        start_date=utc(2024, 1, 1),
        end_date=utc(2024, 3, 1),
        phases=[
            NewProjectPhase(name="Plan", start_date=utc(2024, 1, 1), end_date=utc(2024, 1, 31), assignee_id=user.id),
            NewProjectPhase(name="Ship", start_date=utc(2024, 2, 1), end_date=utc(2024, 3, 1)),
        ],
    )
    project = await storage.create_project_with_phases(data)
    assert [(phase.name, phase.order) for phase in project.phases] == [("Plan", 0), ("Ship", 1)]
    assert all(phase.status == PhaseStatus.PENDING for phase in project.phases)


async def test_partial_phase_failure_keeps_the_rest(storage):
    data = ProjectCreate(
        name="Launch",
        start_date=utc(2024, 1, 1),
        end_date=utc(2024, 3, 1),
        phases=[
            NewProjectPhase(name="Plan", start_date=utc(2024, 1, 1), end_date=utc(2024, 1, 31)),
            NewProjectPhase(name="Broken", start_date=utc(2024, 1, 1), end_date=utc(2024, 1, 31), assignee_id="ghost"),
            NewProjectPhase(name="Ship", start_date=utc(2024, 2, 1), end_date=utc(2024, 3, 1)),
        ],
    )
    with pytest.raises(ValidationError):
        await storage.create_project_with_phases(data)

    [project] = await storage.get_projects()
    assert sorted(phase.name for phase in project.phases) == ["Plan", "Ship"]


# --- phases ------------------------------------------------------------------

async def test_phase_details_and_ordering(storage):
    project = await _project(storage)
    late = await _phase(storage, project.id, "Late", order=2)
    await _phase(storage, project.id, "Early", order=1)

    details = await storage.get_phase(late.id)
    assert details.project.name == "Website Redesign"
    assert details.assignee is None
    assert [phase.name for phase in await storage.get_phases_by_project(project.id)] == ["Early", "Late"]
    assert await storage.get_phase("missing") is None


async def test_update_and_delete_phase(storage):
    project = await _project(storage)
    phase = await _phase(storage, project.id)

    updated = await storage.update_phase(phase.id, PhaseUpdate(status="completed", notes="done"))
    assert updated.status == PhaseStatus.COMPLETED
    assert updated.notes == "done"
    assert updated.updated_at is not None
    assert await storage.update_phase("missing", PhaseUpdate(status="delayed")) is None

    assert await storage.delete_phase(phase.id) is True
    assert await storage.delete_phase(phase.id) is False


@pytest.mark.filterwarnings("ignore:Pydantic serializer warnings:UserWarning")
async def test_constraint_violation_becomes_persistence_error(storage):
    project = await _project(storage)
    bogus = PhaseCreate.model_construct(
        project_id=project.id,
        name="Odd",
        assignee_id=None,
        status="archived",
        start_date=utc(2024, 1, 1),
        end_date=utc(2024, 2, 1),
        notes=None,
        order=0,
    )
    with pytest.raises(PersistenceError) as excinfo:
        await storage.create_phase(bogus)
    assert excinfo.value.message == "Failed to create phase"
    assert isinstance(excinfo.value.__cause__, IntegrityError)


# --- aggregates --------------------------------------------------------------

async def test_stats_reflect_store(storage):
    user = await _user(storage)
    project = await _project(storage, "Mobile App")
    await _phase(storage, project.id, "Design", status="in_progress", assignee_id=user.id)
    await _phase(storage, project.id, "Build", status="completed")

    stats = await storage.get_stats()
    assert stats.total_projects == 1
    assert stats.in_progress_phases == 1
    assert stats.completed_phases == 1
    assert stats.recent_activity[-1].type == "completed"
    assert stats.recent_activity[-1].project == "Mobile App"
    assert stats.team_members[0].active_phases == 1


async def test_stats_updated_at_order(storage):
    storage.recent_order = RecentActivityOrder.UPDATED_AT
    project = await _project(storage)
    first = await _phase(storage, project.id, "First")
    await _phase(storage, project.id, "Second")
    await storage.update_phase(first.id, PhaseUpdate(notes="touched"))

    stats = await storage.get_stats()
    assert stats.recent_activity[0].target == "First"


async def test_seed_database(storage):
    summary = await seed_database(storage)
    expected_phases = sum(len(phases) for phases in SEED_PHASES.values())
    assert summary == {"users": 5, "projects": 4, "phases": expected_phases}

    assert await seed_database(storage) == {"users": 0, "projects": 0, "phases": 0}
    assert (await seed_database(storage, force=True))["users"] == 5
    assert len(await storage.get_users()) == 5

    stats = await storage.get_stats()
    assert stats.delayed_phases == 1
    assert len(stats.team_members) == 5
