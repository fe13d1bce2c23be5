"""
Pytest fixtures for maktab curriculum tests.
"""

import os
import tempfile
import uuid
from datetime import date
from typing import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

# Use file-based SQLite so all connections share the same DB
_tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
_tmp.close()
TEST_DB_PATH = _tmp.name
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
from maktab.config import Settings, get_settings
get_settings.cache_clear()

from maktab.database import async_session_maker, engine
from maktab.engines.progress.confirmation import CompletionGate
from maktab.kernel.models import Base
from maktab.orchestration.progress_service import ProgressService
from maktab.schemas.progress import ActorIdentity, StudentCurriculumRecord

# A Monday; boys are prompted Mon-Thu, girls Tue/Wed
TODAY = date(2026, 10, 19)
HIFZ_TEACHER = "Ml Hifz"


@pytest.fixture
def make_record() -> Callable[..., StudentCurriculumRecord]:
    """Factory for in-memory curriculum records."""

    def _make(**overrides) -> StudentCurriculumRecord:
        values = {
            "id": uuid.uuid4(),
            "name": "Test Student",
            "gender": "boys",
            "student_group": "A1",
        }
        values.update(overrides)
        return StudentCurriculumRecord(**values)

    return _make


@pytest.fixture
def actor() -> ActorIdentity:
    return ActorIdentity(performed_by="teacher-1", performed_by_name="Ustadh Test")


@pytest.fixture
def gate() -> CompletionGate:
    return CompletionGate(ttl_seconds=600)


@pytest_asyncio.fixture
async def db_tables():
    """Create all tables for one test and drop them afterwards."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session(db_tables) -> AsyncGenerator[AsyncSession, None]:
    """Session against the test database; rolled back after the test."""
    async with async_session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(hifz_teacher=HIFZ_TEACHER, snapshot_on_progress=True)


@pytest.fixture
def service(db_session: AsyncSession, gate: CompletionGate, test_settings: Settings) -> ProgressService:
    return ProgressService(db_session, gate, settings=test_settings, today=lambda: TODAY)
