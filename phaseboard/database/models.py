"""
PhaseBoard - Database Models
Relational schema for users, projects and phases
"""

# ===============================================================================
# STANDARD IMPORTS SECTION
# ===============================================================================

# Standard library imports (alphabetical)
import uuid
from datetime import datetime, timezone
from typing import Optional

# Third-party imports (alphabetical)
from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.types import TypeDecorator

# Local imports (alphabetical)
from phaseboard.schemas.enums import PHASE_STATUSES, PhaseStatus

# ===============================================================================
# BASE DECLARATIVE MODEL
# ===============================================================================

Base = declarative_base()


def generate_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware UTC datetimes on every backend.

    SQLite drops tzinfo on the way out; naive values read back are UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

# ===============================================================================
# ENTITY MODELS
# ===============================================================================

class User(Base):
    """Team member; append-only"""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_id)
    username = Column(String(50), unique=True, nullable=False)
    email = Column(String(100), unique=True, nullable=False)
    name = Column(String(200), nullable=False)
    role = Column(String(50), nullable=False, default="team_member")
    avatar = Column(Text, nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow, index=True)

    def __repr__(self) -> str:
        return f"<User {self.username}>"


class Project(Base):
    """Top-level unit of work; owns its phases"""
    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(Text, nullable=False)
    client = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    start_date = Column(UTCDateTime, nullable=False)
    end_date = Column(UTCDateTime, nullable=False)
    status = Column(String(50), nullable=False, default="active")
    created_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow)

    phases = relationship(
        "Phase",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Phase.order",
    )

    def __repr__(self) -> str:
        return f"<Project {self.name}>"


class Phase(Base):
    """Ordered, time-boxed unit of work inside a project"""
    __tablename__ = "phases"
    __table_args__ = (
        CheckConstraint(
            "status IN ({})".format(", ".join(f"'{value}'" for value in PHASE_STATUSES)),
            name="ck_phases_status",
        ),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    project_id = Column(
        String(36),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(Text, nullable=False)
    assignee_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    status = Column(String(20), nullable=False, default=PhaseStatus.PENDING.value)
    start_date = Column(UTCDateTime, nullable=False)
    end_date = Column(UTCDateTime, nullable=False)
    notes = Column(Text, nullable=True)
    order = Column(Integer, nullable=False, default=0)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow)

    project = relationship("Project", back_populates="phases")

    def __repr__(self) -> str:
        return f"<Phase {self.name} ({self.status})>"
