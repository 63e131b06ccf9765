"""Pytest fixtures for PhaseBoard"""
from __future__ import annotations

import itertools
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import httpx
import pytest

from phaseboard.config.settings import Settings
from phaseboard.database.connection import DatabaseManager
from phaseboard.main import create_app
from phaseboard.schemas.entities import PhaseView, ProjectWithPhases
from phaseboard.services.storage import PhaseBoardStorage


def utc(year: int, month: int, day: int, hour: int = 0) -> datetime:
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        ENVIRONMENT="testing",
        DATABASE_URL=f"sqlite:///{tmp_path / 'phaseboard-test.db'}",
        CACHE_BACKEND="memory",
        LOG_LEVEL="WARNING",
        LOG_FORMAT="console",
        SEED_ON_STARTUP=False,
    )


@pytest.fixture()
async def app(settings: Settings):
    application = create_app(settings)
    async with application.router.lifespan_context(application):
        yield application


@pytest.fixture()
async def client(app):
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
        yield http


@pytest.fixture()
async def storage(settings: Settings):
    manager = DatabaseManager(settings.database_config())
    await manager.initialize()
    try:
        yield PhaseBoardStorage(manager.session_factory)
    finally:
        await manager.close()


# --- In-memory view factories -------------------------------------------------

@pytest.fixture()
def make_phase():
    counter = itertools.count(1)

    def _make(
        project_id: str = "p1",
        name: Optional[str] = None,
        status: str = "pending",
        start: datetime = utc(2024, 3, 1),
        end: datetime = utc(2024, 3, 31),
        assignee_id: Optional[str] = None,
        order: int = 0,
        updated_at: Optional[datetime] = None,
    ) -> PhaseView:
        n = next(counter)
        return PhaseView(
            id=f"ph{n}",
            project_id=project_id,
            name=name or f"Phase {n}",
            status=status,
            start_date=start,
            end_date=end,
            assignee_id=assignee_id,
            order=order,
            created_at=utc(2024, 1, 1),
            updated_at=updated_at,
        )

    return _make


@pytest.fixture()
def make_project():
    def _make(project_id: str, name: str, phases=(), client: Optional[str] = None) -> ProjectWithPhases:
        return ProjectWithPhases(
            id=project_id,
            name=name,
            client=client,
            start_date=utc(2024, 1, 1),
            end_date=utc(2024, 12, 31),
            status="active",
            phases=list(phases),
        )

    return _make


@pytest.fixture()
def four_project_fixture(make_project, make_phase):
    """Four projects, ten phases, exactly two delayed in two different projects."""
    return [
        make_project("p1", "Website Redesign", client="TechCorp Inc", phases=[
            make_phase("p1", "Discovery", "completed", assignee_id="u1"),
            make_phase("p1", "Design", "delayed", assignee_id="u2"),
            make_phase("p1", "Development", "in_progress", assignee_id="u3"),
        ]),
        make_project("p2", "Mobile App", client="StartupXYZ", phases=[
            make_phase("p2", "Requirements", "completed", assignee_id="u1"),
            make_phase("p2", "iOS", "pending", assignee_id="u3"),
        ]),
        make_project("p3", "E-commerce Platform", client="RetailCo", phases=[
            make_phase("p3", "Planning", "completed", assignee_id="u2"),
            make_phase("p3", "Frontend", "delayed", assignee_id="u4"),
            make_phase("p3", "Launch", "pending", assignee_id="u1"),
        ]),
        make_project("p4", "Analytics Dashboard", client="DataCorp", phases=[
            make_phase("p4", "Integration", "in_progress", assignee_id="u3"),
            make_phase("p4", "Dashboard Design", "in_progress", assignee_id="u2"),
        ]),
    ]
