"""
PhaseBoard - Settings Configuration
Environment-based application settings
"""

# ===============================================================================
# STANDARD IMPORTS SECTION
# ===============================================================================

# Standard library imports (alphabetical)
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Dict, List
from urllib.parse import urlparse

# Third-party imports (alphabetical)
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.pool import NullPool, StaticPool

# Local imports (alphabetical)
from phaseboard.schemas.enums import RecentActivityOrder

# ===============================================================================
# CONSTANTS & CONFIGURATION
# ===============================================================================

DEFAULT_DATABASE_URL = "sqlite:///./phaseboard.db"
DEFAULT_REDIS_URL = "redis://localhost:6379/0"

ALLOWED_ENVIRONMENTS = ("development", "testing", "staging", "production")
ALLOWED_CACHE_BACKENDS = ("memory", "redis", "none")
ALLOWED_LOG_FORMATS = ("json", "console")

# ===============================================================================
# DATA MODELS & SCHEMAS
# ===============================================================================

@dataclass
class DatabaseConfig:
    """Database configuration settings"""
    url: str
    pool_size: int = 10
    max_overflow: int = 20
    echo: bool = False
    database_type: str = field(init=False, default="")

    def __post_init__(self):
        if not self.url:
            raise ValueError("Database URL cannot be empty")

        parsed = urlparse(self.url)
        if not parsed.scheme:
            raise ValueError("Database URL must include scheme (postgresql://, sqlite://, etc.)")

        scheme = parsed.scheme.split("+")[0]
        self.database_type = "postgresql" if scheme == "postgres" else scheme

    @property
    def is_memory_sqlite(self) -> bool:
        return self.database_type == "sqlite" and ":memory:" in self.url

    @property
    def async_url(self) -> str:
        """Get async-compatible database URL"""
        if "+" in self.url.split("://", 1)[0]:
            return self.url
        if self.url.startswith("postgres://"):
            return self.url.replace("postgres://", "postgresql+asyncpg://", 1)
        if self.database_type == "postgresql":
            return self.url.replace("postgresql://", "postgresql+asyncpg://", 1)
        if self.database_type == "sqlite":
            return self.url.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return self.url

    @property
    def engine_options(self) -> Dict[str, Any]:
        """Get SQLAlchemy engine options"""
        options: Dict[str, Any] = {"echo": self.echo}

        if self.database_type == "sqlite":
            # In-memory databases live and die with a single connection
            if self.is_memory_sqlite:
                options["poolclass"] = StaticPool
                options["connect_args"] = {"check_same_thread": False}
            else:
                options["poolclass"] = NullPool
                options["connect_args"] = {"timeout": 30}
        else:
            options.update({
                "pool_size": self.pool_size,
                "max_overflow": self.max_overflow,
                "pool_pre_ping": True,
            })

        return options

# ===============================================================================
# CORE SETTINGS CLASS
# ===============================================================================

class Settings(BaseSettings):
    """
    Application settings read from the environment (and an optional .env file).

    Field names double as environment variable names.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ===== APPLICATION CONFIGURATION =====
    APP_NAME: str = Field(default="PhaseBoard", description="Application name")
    VERSION: str = Field(default="1.0.0", description="Application version")
    ENVIRONMENT: str = Field(default="development", description="Deployment environment")
    DEBUG: bool = Field(default=False, description="Enable debug mode")

    # ===== DATABASE CONFIGURATION =====
    DATABASE_URL: str = Field(default=DEFAULT_DATABASE_URL, description="Primary database URL")
    DATABASE_POOL_SIZE: int = Field(default=10, ge=1, le=100, description="Connection pool size")
    DATABASE_MAX_OVERFLOW: int = Field(default=20, ge=0, le=100, description="Max overflow connections")
    DATABASE_ECHO: bool = Field(default=False, description="Echo SQL statements")

    # ===== CACHE CONFIGURATION =====
    CACHE_BACKEND: str = Field(default="memory", description="memory, redis or none")
    REDIS_URL: str = Field(default=DEFAULT_REDIS_URL, description="Redis connection URL")
    CACHE_TTL: int = Field(default=30, ge=1, le=86400, description="View cache TTL in seconds")
    CACHE_MAX_ENTRIES: int = Field(default=1024, ge=1, le=1000000, description="In-process cache entry limit")

    # ===== API CONFIGURATION =====
    API_HOST: str = Field(default="0.0.0.0", description="API host address")
    API_PORT: int = Field(default=8000, ge=1, le=65535, description="API port number")
    CORS_ORIGINS: str = Field(default="*", description="Comma separated allowed origins")

    # ===== LOGGING CONFIGURATION =====
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: str = Field(default="json", description="Log format (json/console)")

    # ===== DASHBOARD CONFIGURATION =====
    SEED_ON_STARTUP: bool = Field(default=False, description="Load demo data into an empty database")
    RECENT_ACTIVITY_ORDER: RecentActivityOrder = Field(
        default=RecentActivityOrder.COLLECTION,
        description="collection (tail of stored order) or updated_at (newest first)"
    )

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        if v.lower() not in ALLOWED_ENVIRONMENTS:
            raise ValueError(f"Environment must be one of: {list(ALLOWED_ENVIRONMENTS)}")
        return v.lower()

    @field_validator("CACHE_BACKEND")
    @classmethod
    def validate_cache_backend(cls, v: str) -> str:
        if v.lower() not in ALLOWED_CACHE_BACKENDS:
            raise ValueError(f"Cache backend must be one of: {list(ALLOWED_CACHE_BACKENDS)}")
        return v.lower()

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        if v.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError("Invalid log level")
        return v.upper()

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v.lower() not in ALLOWED_LOG_FORMATS:
            raise ValueError(f"Log format must be one of: {list(ALLOWED_LOG_FORMATS)}")
        return v.lower()

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    def database_config(self) -> DatabaseConfig:
        return DatabaseConfig(
            url=self.DATABASE_URL,
            pool_size=self.DATABASE_POOL_SIZE,
            max_overflow=self.DATABASE_MAX_OVERFLOW,
            echo=self.DATABASE_ECHO,
        )


@lru_cache()
def get_settings() -> Settings:
    """Get application settings (cached)"""
    return Settings()
