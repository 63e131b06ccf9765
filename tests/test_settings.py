# tests/test_settings.py
from __future__ import annotations

import pytest
from pydantic import ValidationError as SettingsValidationError
from sqlalchemy.pool import NullPool, StaticPool

from phaseboard.config.settings import DatabaseConfig, Settings
from phaseboard.schemas.enums import RecentActivityOrder


@pytest.mark.parametrize(
    "url, expected",
    [
        ("sqlite:///./phaseboard.db", "sqlite+aiosqlite:///./phaseboard.db"),
        ("postgres://u:p@db/phaseboard", "postgresql+asyncpg://u:p@db/phaseboard"),
        ("postgresql://u:p@db/phaseboard", "postgresql+asyncpg://u:p@db/phaseboard"),
        ("postgresql+asyncpg://u:p@db/phaseboard", "postgresql+asyncpg://u:p@db/phaseboard"),
    ],
)
def test_async_url(url, expected):
    assert DatabaseConfig(url=url).async_url == expected


def test_sqlite_pooling():
    assert DatabaseConfig(url="sqlite:///:memory:").engine_options["poolclass"] is StaticPool
    assert DatabaseConfig(url="sqlite:///./phaseboard.db").engine_options["poolclass"] is NullPool
    assert DatabaseConfig(url="postgresql://db/x").engine_options["pool_pre_ping"] is True


def test_database_url_requires_scheme():
    with pytest.raises(ValueError):
        DatabaseConfig(url="phaseboard.db")


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("CACHE_BACKEND", "REDIS")
    monkeypatch.setenv("RECENT_ACTIVITY_ORDER", "updated_at")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")
    settings = Settings(_env_file=None)
    assert settings.CACHE_BACKEND == "redis"
    assert settings.RECENT_ACTIVITY_ORDER is RecentActivityOrder.UPDATED_AT
    assert settings.cors_origins == ["http://a.test", "http://b.test"]


def test_settings_reject_unknown_values():
    with pytest.raises(SettingsValidationError):
        Settings(_env_file=None, CACHE_BACKEND="memcached")
    with pytest.raises(SettingsValidationError):
        Settings(_env_file=None, ENVIRONMENT="qa")
