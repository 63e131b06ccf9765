"""
PhaseBoard - CRUD Service Layer
Async storage for users, projects and phases with read-time hydration
"""

# ===============================================================================
# STANDARD IMPORTS SECTION
# ===============================================================================

# Standard library imports (alphabetical)
import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

# Third-party imports (alphabetical)
import structlog
from sqlalchemy import delete, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

# Local imports (alphabetical)
from phaseboard.core.exceptions import FieldError, PersistenceError, PhaseBoardError, ValidationError
from phaseboard.database.models import Phase, Project, User, utcnow
from phaseboard.schemas.dashboard import StatsResponse
from phaseboard.schemas.entities import (
    NewProjectPhase,
    PhaseCreate,
    PhaseResponse,
    PhaseUpdate,
    PhaseWithDetails,
    ProjectCreate,
    ProjectResponse,
    ProjectUpdate,
    ProjectWithPhases,
    UserCreate,
    UserResponse,
)
from phaseboard.schemas.enums import RecentActivityOrder
from phaseboard.services.hydration import hydrate_project, hydrate_projects, index_users, phase_details
from phaseboard.services.stats import compute_stats

# ===============================================================================
# LOGGING CONFIGURATION
# ===============================================================================

logger = structlog.get_logger("phaseboard.storage")

# ===============================================================================
# HELPERS
# ===============================================================================

def _to_utc(values: Dict[str, Any]) -> Dict[str, Any]:
    """Normalize datetimes to aware UTC and enums to their values."""
    normalized = {}
    for key, value in values.items():
        if isinstance(value, datetime):
            value = value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value.astimezone(timezone.utc)
        elif hasattr(value, "value") and isinstance(value, str):
            value = value.value
        normalized[key] = value
    return normalized

# ===============================================================================
# CORE IMPLEMENTATION CLASSES
# ===============================================================================

class PhaseBoardStorage:
    """
    Storage facade used by the HTTP routes.

    Every operation runs in its own session: committed on success, rolled
    back on failure. Driver and constraint failures surface as
    ``PersistenceError`` with the original exception chained; the taxonomy
    errors raised here pass through untouched.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        recent_order: RecentActivityOrder = RecentActivityOrder.COLLECTION,
    ):
        self.session_factory = session_factory
        self.recent_order = RecentActivityOrder(recent_order)
        self.logger = logger.bind(component="storage")

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        session = self.session_factory()
        try:
            yield session
            await session.commit()
        except PhaseBoardError:
            await session.rollback()
            raise
        except SQLAlchemyError as e:
            await session.rollback()
            self.logger.error("Database operation failed", operation=operation, error=str(e))
            raise PersistenceError(f"Failed to {operation.replace('_', ' ')}", operation=operation) from e
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def _require_user(self, session: AsyncSession, user_id: Optional[str], field_name: str) -> None:
        if user_id and await session.get(User, user_id) is None:
            raise ValidationError.for_field(field_name, f"User {user_id} does not exist", "reference_error")

    async def _require_project(self, session: AsyncSession, project_id: str) -> None:
        if await session.get(Project, project_id) is None:
            raise ValidationError.for_field("projectId", f"Project {project_id} does not exist", "reference_error")

    # ===== raw collection reads =====

    async def _list_projects(self) -> List[ProjectResponse]:
        async with self._session("get_projects") as session:
            result = await session.execute(select(Project).order_by(Project.created_at, Project.id))
            return [ProjectResponse.model_validate(row) for row in result.scalars().all()]

    async def _fetch_project(self, project_id: str) -> Optional[ProjectResponse]:
        async with self._session("get_project") as session:
            project = await session.get(Project, project_id)
            return ProjectResponse.model_validate(project) if project else None

    async def _list_phases(self, project_id: Optional[str] = None) -> List[PhaseResponse]:
        query = select(Phase).order_by(Phase.created_at, Phase.id)
        if project_id is not None:
            query = query.where(Phase.project_id == project_id)
        async with self._session("get_phases") as session:
            result = await session.execute(query)
            return [PhaseResponse.model_validate(row) for row in result.scalars().all()]

    # ===============================================================================
    # USERS
    # ===============================================================================

    async def get_user(self, user_id: str) -> Optional[UserResponse]:
        async with self._session("get_user") as session:
            user = await session.get(User, user_id)
            return UserResponse.model_validate(user) if user else None

    async def get_user_by_username(self, username: str) -> Optional[UserResponse]:
        async with self._session("get_user") as session:
            result = await session.execute(select(User).where(User.username == username))
            user = result.scalar_one_or_none()
            return UserResponse.model_validate(user) if user else None

    async def get_users(self) -> List[UserResponse]:
        async with self._session("get_users") as session:
            result = await session.execute(select(User).order_by(User.created_at, User.id))
            return [UserResponse.model_validate(row) for row in result.scalars().all()]

    async def create_user(self, data: UserCreate) -> UserResponse:
        async with self._session("create_user") as session:
            result = await session.execute(
                select(User).where(or_(User.username == data.username, User.email == data.email))
            )
            errors = []
            for existing in result.scalars().all():
                if existing.username == data.username:
                    errors.append(FieldError("username", "Username already exists", "unique_error"))
                if existing.email == data.email:
                    errors.append(FieldError("email", "Email already exists", "unique_error"))
            if errors:
                raise ValidationError("Invalid user data", errors=errors)

            user = User(**_to_utc(data.model_dump()))
            session.add(user)
            await session.flush()
            created = UserResponse.model_validate(user)

        self.logger.info("User created", user_id=created.id, username=created.username)
        return created

    # ===============================================================================
    # PROJECTS
    # ===============================================================================

    async def get_projects(self) -> List[ProjectWithPhases]:
        projects, phases, users = await asyncio.gather(
            self._list_projects(),
            self._list_phases(),
            self.get_users(),
        )
        return hydrate_projects(projects, phases, users)

    async def get_project(self, project_id: str) -> Optional[ProjectWithPhases]:
        project, phases, users = await asyncio.gather(
            self._fetch_project(project_id),
            self._list_phases(project_id),
            self.get_users(),
        )
        if project is None:
            return None
        return hydrate_project(project, phases, index_users(users))

    async def create_project(self, data: ProjectCreate) -> ProjectResponse:
        async with self._session("create_project") as session:
            await self._require_user(session, data.created_by, "createdBy")
            project = Project(**_to_utc(data.project_values()))
            session.add(project)
            await session.flush()
            created = ProjectResponse.model_validate(project)

        self.logger.info("Project created", project_id=created.id, name=created.name)
        return created

    async def create_project_with_phases(
        self,
        data: ProjectCreate,
        phases: Optional[Sequence[NewProjectPhase]] = None,
    ) -> ProjectWithPhases:
        """
        Create a project and then its phases concurrently.

        Phases get their position as ``order`` and start pending. The phase
        writes are independent: when one fails the others stay persisted and
        the first failure is raised once every write has settled.
        """
        phases = list(data.phases if phases is None else phases)
        project = await self.create_project(data)

        payloads = [
            PhaseCreate(
                project_id=project.id,
                name=phase.name,
                assignee_id=phase.assignee_id,
                start_date=phase.start_date,
                end_date=phase.end_date,
                notes=phase.notes,
                order=index,
            )
            for index, phase in enumerate(phases)
        ]
        results = await asyncio.gather(
            *(self.create_phase(payload) for payload in payloads),
            return_exceptions=True,
        )

        failures = [result for result in results if isinstance(result, BaseException)]
        if failures:
            self.logger.warning(
                "Project created with partial phases",
                project_id=project.id,
                requested=len(payloads),
                persisted=len(payloads) - len(failures),
                error=str(failures[0]),
            )
            raise failures[0]

        hydrated = await self.get_project(project.id)
        if hydrated is None:
            # Deleted by a concurrent request before it could be read back
            return ProjectWithPhases(**project.model_dump())
        return hydrated

    async def update_project(self, project_id: str, patch: ProjectUpdate) -> Optional[ProjectResponse]:
        changes = _to_utc(patch.changes())
        async with self._session("update_project") as session:
            project = await session.get(Project, project_id)
            if project is None:
                return None
            if "created_by" in changes:
                await self._require_user(session, changes["created_by"], "createdBy")
            for key, value in changes.items():
                setattr(project, key, value)
            project.updated_at = utcnow()
            await session.flush()
            updated = ProjectResponse.model_validate(project)

        self.logger.info("Project updated", project_id=project_id, fields=sorted(changes))
        return updated

    async def delete_project(self, project_id: str) -> bool:
        async with self._session("delete_project") as session:
            result = await session.execute(delete(Project).where(Project.id == project_id))
            removed = result.rowcount > 0

        if removed:
            self.logger.info("Project deleted", project_id=project_id)
        return removed

    # ===============================================================================
    # PHASES
    # ===============================================================================

    async def get_phases_by_project(self, project_id: str) -> List[PhaseWithDetails]:
        phases, project, users = await asyncio.gather(
            self._list_phases(project_id),
            self._fetch_project(project_id),
            self.get_users(),
        )
        users_by_id = index_users(users)
        ordered = sorted(phases, key=lambda phase: phase.order)
        return [phase_details(phase, project, users_by_id) for phase in ordered]

    async def get_phase(self, phase_id: str) -> Optional[PhaseWithDetails]:
        async with self._session("get_phase") as session:
            row = await session.get(Phase, phase_id)
            phase = PhaseResponse.model_validate(row) if row else None
        if phase is None:
            return None

        project, users = await asyncio.gather(
            self._fetch_project(phase.project_id),
            self.get_users(),
        )
        return phase_details(phase, project, index_users(users))

    async def create_phase(self, data: PhaseCreate) -> PhaseResponse:
        async with self._session("create_phase") as session:
            await self._require_project(session, data.project_id)
            await self._require_user(session, data.assignee_id, "assigneeId")
            phase = Phase(**_to_utc(data.model_dump()))
            session.add(phase)
            await session.flush()
            created = PhaseResponse.model_validate(phase)

        self.logger.info("Phase created", phase_id=created.id, project_id=created.project_id)
        return created

    async def update_phase(self, phase_id: str, patch: PhaseUpdate) -> Optional[PhaseResponse]:
        changes = _to_utc(patch.changes())
        async with self._session("update_phase") as session:
            phase = await session.get(Phase, phase_id)
            if phase is None:
                return None
            if "project_id" in changes:
                await self._require_project(session, changes["project_id"])
            if "assignee_id" in changes:
                await self._require_user(session, changes["assignee_id"], "assigneeId")
            for key, value in changes.items():
                setattr(phase, key, value)
            phase.updated_at = utcnow()
            await session.flush()
            updated = PhaseResponse.model_validate(phase)

        self.logger.info("Phase updated", phase_id=phase_id, fields=sorted(changes))
        return updated

    async def delete_phase(self, phase_id: str) -> bool:
        async with self._session("delete_phase") as session:
            result = await session.execute(delete(Phase).where(Phase.id == phase_id))
            removed = result.rowcount > 0

        if removed:
            self.logger.info("Phase deleted", phase_id=phase_id)
        return removed

    # ===============================================================================
    # AGGREGATES
    # ===============================================================================

    async def get_timeline_data(self) -> List[ProjectWithPhases]:
        return await self.get_projects()

    async def get_stats(self) -> StatsResponse:
        projects, phases, users = await asyncio.gather(
            self._list_projects(),
            self._list_phases(),
            self.get_users(),
        )
        return compute_stats(projects, phases, users, self.recent_order)
