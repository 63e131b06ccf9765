"""
PhaseBoard - Database Seeds
Demo fixture: five team members, four client projects and their phases
"""

# ===============================================================================
# STANDARD IMPORTS SECTION
# ===============================================================================

# Standard library imports (alphabetical)
import asyncio
from datetime import datetime, timezone
from typing import Dict, List, Tuple

# Third-party imports (alphabetical)
import structlog
from sqlalchemy import delete

# Local imports (alphabetical)
from phaseboard.config.settings import get_settings
from phaseboard.core.structured_logger import configure_logging
from phaseboard.database.connection import DatabaseManager
from phaseboard.database.models import Phase, Project, User
from phaseboard.schemas.entities import PhaseCreate, ProjectCreate, UserCreate
from phaseboard.services.storage import PhaseBoardStorage

# ===============================================================================
# LOGGING CONFIGURATION
# ===============================================================================

logger = structlog.get_logger("phaseboard.database.seeds")

# ===============================================================================
# SEED DATA
# ===============================================================================


def _d(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)


SEED_USERS: List[Dict[str, str]] = [
    {"username": "admin", "email": "admin@projectflow.com", "name": "Admin User", "role": "admin"},
    {"username": "jdoe", "email": "john.doe@projectflow.com", "name": "John Doe", "role": "project_manager"},
    {"username": "jsmith", "email": "jane.smith@projectflow.com", "name": "Jane Smith", "role": "developer"},
    {"username": "bwilson", "email": "bob.wilson@projectflow.com", "name": "Bob Wilson", "role": "designer"},
    {"username": "ajones", "email": "alice.jones@projectflow.com", "name": "Alice Jones", "role": "team_member"},
]

# (name, client, description, start, end, creator index)
SEED_PROJECTS: List[Tuple[str, str, str, datetime, datetime, int]] = [
    ("Website Redesign", "TechCorp Inc",
     "Complete overhaul of the company website with modern UI/UX",
     _d(2024, 1, 1), _d(2024, 6, 30), 0),
    ("Mobile App Development", "StartupXYZ",
     "Native mobile app for iOS and Android platforms",
     _d(2024, 2, 15), _d(2024, 8, 15), 1),
    ("E-commerce Platform", "RetailCo",
     "Full-stack e-commerce solution with payment integration",
     _d(2024, 3, 1), _d(2024, 10, 31), 0),
    ("Data Analytics Dashboard", "DataCorp",
     "Real-time analytics dashboard for business intelligence",
     _d(2024, 4, 1), _d(2024, 9, 30), 1),
]

# project index -> [(name, assignee index, status, start, end, notes)]
SEED_PHASES: Dict[int, List[Tuple[str, int, str, datetime, datetime, str]]] = {
    0: [
        ("Discovery & Research", 1, "completed", _d(2024, 1, 1), _d(2024, 1, 31),
         "User research, competitor analysis, and requirements gathering"),
        ("Design Phase", 3, "completed", _d(2024, 2, 1), _d(2024, 3, 15),
         "UI/UX design, wireframes, and mockups"),
        ("Development", 2, "in_progress", _d(2024, 3, 16), _d(2024, 6, 15),
         "Frontend and backend development"),
        ("Testing & QA", 4, "pending", _d(2024, 6, 16), _d(2024, 6, 30),
         "Quality assurance and bug fixing"),
    ],
    1: [
        ("Requirements Analysis", 1, "completed", _d(2024, 2, 15), _d(2024, 3, 15),
         "Define app features and technical requirements"),
        ("UI/UX Design", 3, "in_progress", _d(2024, 3, 16), _d(2024, 5, 15),
         "Mobile app design for both platforms"),
        ("iOS Development", 2, "pending", _d(2024, 5, 16), _d(2024, 7, 15),
         "Native iOS app development"),
        ("Android Development", 2, "pending", _d(2024, 5, 16), _d(2024, 7, 15),
         "Native Android app development"),
        ("App Store Deployment", 1, "pending", _d(2024, 7, 16), _d(2024, 8, 15),
         "Deploy to App Store and Google Play"),
    ],
    2: [
        ("Platform Planning", 0, "completed", _d(2024, 3, 1), _d(2024, 3, 31),
         "E-commerce architecture and technology stack planning"),
        ("Backend Development", 2, "in_progress", _d(2024, 4, 1), _d(2024, 7, 31),
         "API development, database design, payment integration"),
        ("Frontend Development", 4, "delayed", _d(2024, 5, 1), _d(2024, 7, 31),
         "Shopping cart, product catalog, checkout flow - delayed due to resource constraints"),
        ("Launch & Marketing", 1, "pending", _d(2024, 9, 1), _d(2024, 10, 31),
         "Go-live preparation and marketing campaign"),
    ],
    3: [
        ("Data Source Integration", 2, "in_progress", _d(2024, 4, 1), _d(2024, 6, 30),
         "Connect to various data sources and ETL processes"),
        ("Dashboard Design", 3, "in_progress", _d(2024, 5, 1), _d(2024, 7, 15),
         "Data visualization and dashboard layout"),
        ("Real-time Features", 2, "pending", _d(2024, 7, 16), _d(2024, 9, 30),
         "Implement real-time data streaming and alerts"),
    ],
}

# ===============================================================================
# SEEDING FUNCTIONS
# ===============================================================================

async def clear_database(storage: PhaseBoardStorage) -> None:
    async with storage.session_factory() as session:
        await session.execute(delete(Phase))
        await session.execute(delete(Project))
        await session.execute(delete(User))
        await session.commit()


async def seed_database(storage: PhaseBoardStorage, force: bool = False) -> Dict[str, int]:
    """
    Insert the demo fixture.

    Skipped when users already exist unless ``force`` is set, in which case
    every table is cleared first. Returns the number of rows created per table.
    """
    if not force and await storage.get_users():
        logger.info("Seed skipped, database already populated")
        return {"users": 0, "projects": 0, "phases": 0}

    if force:
        await clear_database(storage)

    users = [await storage.create_user(UserCreate(**data)) for data in SEED_USERS]

    phase_count = 0
    for index, (name, client, description, start, end, creator) in enumerate(SEED_PROJECTS):
        project = await storage.create_project(ProjectCreate(
            name=name,
            client=client,
            description=description,
            start_date=start,
            end_date=end,
            created_by=users[creator].id,
        ))
        for order, (phase_name, assignee, status, phase_start, phase_end, notes) in enumerate(SEED_PHASES[index], start=1):
            await storage.create_phase(PhaseCreate(
                project_id=project.id,
                name=phase_name,
                assignee_id=users[assignee].id,
                status=status,
                start_date=phase_start,
                end_date=phase_end,
                notes=notes,
                order=order,
            ))
            phase_count += 1

    summary = {"users": len(users), "projects": len(SEED_PROJECTS), "phases": phase_count}
    logger.info("Database seeded", **summary)
    return summary


async def main(force: bool = True) -> Dict[str, int]:
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    manager = DatabaseManager(settings.database_config())
    await manager.initialize()
    try:
        storage = PhaseBoardStorage(manager.session_factory, settings.RECENT_ACTIVITY_ORDER)
        return await seed_database(storage, force=force)
    finally:
        await manager.close()


if __name__ == "__main__":
    asyncio.run(main())
