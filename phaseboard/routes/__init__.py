"""PhaseBoard HTTP routes."""

from fastapi import FastAPI

from .dashboard_routes import router as dashboard_router
from .phase_routes import router as phase_router
from .project_routes import router as project_router
from .user_routes import router as user_router


def configure_routes(app: FastAPI) -> None:
    """Mount every API router on ``app``."""
    app.include_router(project_router)
    app.include_router(phase_router)
    app.include_router(user_router)
    app.include_router(dashboard_router)


__all__ = ["configure_routes"]
