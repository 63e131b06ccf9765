"""PhaseBoard persistence: ORM models, connection management and seed data."""

from .connection import DatabaseManager
from .models import Base, Phase, Project, User

__all__ = [
    "Base",
    "DatabaseManager",
    "Phase",
    "Project",
    "User",
]
