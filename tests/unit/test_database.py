"""Tests for engine construction."""

from meetnotes.config import Settings
from meetnotes.infrastructure.database import build_engine


class TestBuildEngine:
    def test_postgres_engine_uses_sized_pool(self):
        engine = build_engine(Settings(_env_file=None))
        assert engine.dialect.name == "postgresql"
        assert engine.pool.size() == 5

    def test_sqlite_engine_skips_pool_sizing(self):
        engine = build_engine(Settings(_env_file=None, database_url="sqlite+aiosqlite:///:memory:"))
        assert engine.dialect.name == "sqlite"
        assert engine.url.database == ":memory:"
