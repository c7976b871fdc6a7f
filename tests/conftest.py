"""Shared pytest fixtures for all test suites."""

import os
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from tripgen.config import Settings
from tripgen.db.models import Base
from support import JWT_SECRET


@pytest.fixture
def test_settings() -> Settings:
    """Settings with a known JWT secret and no upstream credentials."""
    return Settings(
        _env_file=None,
        database_url=os.environ.get("DATABASE_URL"),
        auth_jwt_secret=JWT_SECRET,
        stripe_secret_key="sk_test_123",
        stripe_webhook_secret="whsec_test",
        site_url="https://trips.example.com",
    )


@pytest_asyncio.fixture
async def sqlite_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite engine with the schema created."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'tripgen.db'}",
        poolclass=NullPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()
