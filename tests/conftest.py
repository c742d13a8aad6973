"""Pytest configuration and fixtures."""
import os
import uuid
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config as AlembicConfig
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

BASE_DIR = Path(__file__).resolve().parent.parent
TEST_DB_PATH = BASE_DIR / "test.db"

# Ensure the application uses a dedicated SQLite database during tests
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
os.environ["ENVIRONMENT"] = "development"
os.environ.setdefault("TAPVOTE_LOG_DIR", str(BASE_DIR / "logs"))

from tapvote.config import get_settings

settings = get_settings()


@pytest.fixture(scope="session", autouse=True)
def apply_migrations():
    """Apply database migrations against the test database."""
    if TEST_DB_PATH.exists():
        TEST_DB_PATH.unlink()

    alembic_cfg = AlembicConfig(str(BASE_DIR / "alembic.ini"))
    alembic_cfg.set_main_option("sqlalchemy.url", settings.database_url.replace("%", "%%"))
    command.upgrade(alembic_cfg, "head")

    yield

    if TEST_DB_PATH.exists():
        try:
            TEST_DB_PATH.unlink()
        except PermissionError:
            # On Windows, database might still be in use
            pass


@pytest.fixture
async def test_engine():
    """Engine bound to the migrated test database.

    NullPool gives every session its own connection, which the concurrency
    tests rely on.
    """
    engine = create_async_engine(settings.database_url, echo=False, poolclass=NullPool)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    """Create test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def test_app(session_factory):
    """Create test app with database override."""
    from tapvote.main import app
    from tapvote.database import get_db

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def owner_token():
    """Factory returning (owner_id, bearer token) for a fresh organizer."""
    from tapvote.services import AuthService

    def _issue(owner_id: str | None = None):
        owner_id = owner_id or f"owner_{uuid.uuid4().hex[:8]}"
        return owner_id, AuthService().issue_owner_token(owner_id)

    return _issue


@pytest.fixture
def device_id():
    """Unique device id per test so the shared database never collides."""
    return f"device-{uuid.uuid4().hex}"


@pytest.fixture
async def survey_factory(db_session):
    """Factory for creating surveys with sensible defaults."""
    from tapvote.services import SurveyService

    async def _create_survey(
        title: str = "Lunch poll",
        question: str = "Did you enjoy lunch?",
        follow_up_questions=None,
        owner_id: str | None = None,
    ):
        owner_id = owner_id or f"owner_{uuid.uuid4().hex[:8]}"
        survey_id = await SurveyService(db_session).create(
            title=title,
            question=question,
            follow_up_questions=follow_up_questions,
            owner_id=owner_id,
        )
        return await SurveyService(db_session).get(survey_id)

    return _create_survey
