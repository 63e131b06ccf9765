"""
PhaseBoard Database Connection Manager
Handles engine setup, table creation and session management
"""

from typing import Optional

import structlog
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from phaseboard.config.settings import DatabaseConfig
from phaseboard.database.models import Base

logger = structlog.get_logger("phaseboard.database")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE clauses unless asked per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseManager:
    """Database connection and session manager"""

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker] = None

    async def initialize(self, create_tables: bool = True):
        """Initialize database connection and create tables"""
        try:
            self.engine = create_async_engine(self.config.async_url, **self.config.engine_options)

            if self.config.database_type == "sqlite":
                event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

            self.session_factory = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )

            if create_tables:
                async with self.engine.begin() as conn:
                    await conn.run_sync(Base.metadata.create_all)

            logger.info("Database initialized", database_type=self.config.database_type)

        except Exception as e:
            logger.error("Failed to initialize database", error=str(e))
            raise

    async def health_check(self) -> bool:
        if not self.engine:
            return False
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Database health check failed", error=str(e))
            return False

    async def close(self):
        """Close database connections"""
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self.session_factory = None
            logger.info("Database connections closed")

