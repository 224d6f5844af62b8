"""
Shared pytest fixtures

Every test gets its own in-memory SQLite database. Coroutines are driven
with asyncio.run inside the test, so no async plugin is needed.
"""

import asyncio
import os
import tempfile

# Must be set before unitprefs reads its settings
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="unitprefs-logs-"))

import pytest

from unitprefs.database import create_engine_for, create_session_factory, init_db
from unitprefs.repositories.user_preferences_repository import SqlAlchemyUserPreferencesRepository

from tests.factories import METRIC_ONBOARDING, IMPERIAL_ONBOARDING


@pytest.fixture
def run_with_repository():
    """
    Run a coroutine function against a fresh database

    Example:
        def test_something(run_with_repository):
            async def body(repository):
                ...
            run_with_repository(body)
    """
    def runner(body):
        async def main():
            engine = create_engine_for("sqlite+aiosqlite://")
            await init_db(engine)
            repository = SqlAlchemyUserPreferencesRepository(create_session_factory(engine))
            try:
                return await body(repository)
            finally:
                await engine.dispose()

        return asyncio.run(main())

    return runner


@pytest.fixture
def metric_onboarding():
    return dict(METRIC_ONBOARDING)


@pytest.fixture
def imperial_onboarding():
    return dict(IMPERIAL_ONBOARDING)
