"""PhaseBoard configuration package."""

from .settings import DatabaseConfig, Settings, get_settings

__all__ = ["DatabaseConfig", "Settings", "get_settings"]
