"""
PhaseBoard - Main Application
FastAPI application factory, lifespan management and entry point
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Dict, Optional

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from phaseboard import __version__
from phaseboard.cache.view_cache import BaseCacheManager, create_cache_manager
from phaseboard.config.settings import Settings, get_settings
from phaseboard.core.error_handler import register_error_handlers
from phaseboard.core.logging_middleware import RequestLoggingMiddleware
from phaseboard.core.structured_logger import configure_logging
from phaseboard.database.connection import DatabaseManager
from phaseboard.database.seeds import seed_database
from phaseboard.routes import configure_routes
from phaseboard.schemas.entities import CamelModel
from phaseboard.services.storage import PhaseBoardStorage

logger = structlog.get_logger("phaseboard.main")


class HealthResponse(CamelModel):
    status: str
    version: str
    timestamp: str
    services: Dict[str, str]
    cache_stats: Dict[str, int]


class PhaseBoardState:
    """Long-lived resources owned by one application instance"""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.db_manager = DatabaseManager(settings.database_config())
        self.cache: BaseCacheManager = create_cache_manager(settings)
        self.storage: Optional[PhaseBoardStorage] = None
        self.initialized = False

    async def initialize(self):
        """Initialize application components"""
        try:
            logger.info("Initializing PhaseBoard", environment=self.settings.ENVIRONMENT)
            await self.db_manager.initialize()
            await self.cache.initialize()

            self.storage = PhaseBoardStorage(
                self.db_manager.session_factory,
                recent_order=self.settings.RECENT_ACTIVITY_ORDER,
            )

            if self.settings.SEED_ON_STARTUP:
                await seed_database(self.storage)

            self.initialized = True
            logger.info("PhaseBoard initialization completed", cache_backend=self.settings.CACHE_BACKEND)
        except Exception as e:
            logger.error("Failed to initialize PhaseBoard", error=str(e))
            await self.cleanup()
            raise

    async def cleanup(self):
        """Cleanup application resources"""
        logger.info("Shutting down PhaseBoard")
        await self.cache.cleanup()
        await self.db_manager.close()
        self.initialized = False


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build a PhaseBoard application for ``settings`` (environment by default)."""
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    state = PhaseBoardState(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await state.initialize()
        app.state.storage = state.storage
        app.state.cache = state.cache
        yield
        await state.cleanup()

    app = FastAPI(
        title=settings.APP_NAME,
        description="Project and phase tracking with a computed timeline",
        version=settings.VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
    )
    app.state.phaseboard = state

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    register_error_handlers(app)
    configure_routes(app)

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health_check(request: Request):
        """Liveness plus database and cache reachability"""
        phaseboard_state: PhaseBoardState = request.app.state.phaseboard
        database_ok = await phaseboard_state.db_manager.health_check()
        cache_status = await phaseboard_state.cache.health_check()
        return HealthResponse(
            status="operational" if database_ok else "degraded",
            version=__version__,
            timestamp=datetime.now(timezone.utc).isoformat(),
            services={
                "database": "healthy" if database_ok else "unavailable",
                "cache": "healthy" if cache_status.get("healthy") else "unavailable",
            },
            cache_stats=phaseboard_state.cache.stats.as_dict(),
        )

    return app


app = create_app()


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "phaseboard.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )
