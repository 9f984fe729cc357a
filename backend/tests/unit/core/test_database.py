"""
Unit Tests for database URL and engine configuration
"""
import pytest
from sqlalchemy.pool import NullPool

from safedrive.core import database
from safedrive.core.config import settings


class TestDatabaseUrl:

    @pytest.mark.parametrize("configured,expected", [
        ("postgres://u:p@db:5432/safedrive", "postgresql+asyncpg://u:p@db:5432/safedrive"),
        ("postgresql://u:p@db/safedrive", "postgresql+asyncpg://u:p@db/safedrive"),
        ("postgresql+asyncpg://u:p@db/safedrive", "postgresql+asyncpg://u:p@db/safedrive"),
        ("sqlite+aiosqlite:///./safedrive.db", "sqlite+aiosqlite:///./safedrive.db"),
    ])
    def test_scheme_rewrite(self, monkeypatch, configured, expected):
        monkeypatch.setattr(settings, "DATABASE_URL", configured)

        assert database.database_url() == expected


class TestEngineOptions:

    def test_sqlite_runs_without_pool(self):
        options = database.engine_options("sqlite+aiosqlite:///./x.db")

        assert options["poolclass"] is NullPool
        assert options["connect_args"] == {"check_same_thread": False}

    def test_postgres_is_pooled_outside_development(self, monkeypatch):
        monkeypatch.setattr(settings, "ENVIRONMENT", "production")
        monkeypatch.setattr(settings, "DEBUG", False)

        options = database.engine_options("postgresql+asyncpg://db/safedrive")

        assert options["pool_size"] == settings.DB_POOL_SIZE
        assert options["pool_pre_ping"] is True
        assert "poolclass" not in options

    def test_postgres_in_development_has_no_pool(self, monkeypatch):
        monkeypatch.setattr(settings, "ENVIRONMENT", "development")

        assert database.engine_options("postgresql+asyncpg://db/safedrive") == {"poolclass": NullPool}


class TestIds:

    def test_generate_id_is_uuid_string(self):
        first, second = database.generate_id(), database.generate_id()

        assert len(first) == 36
        assert first != second
