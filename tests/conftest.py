"""
Shared pytest fixtures.
"""

from unittest.mock import AsyncMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from focusplan.core.config import Settings
from focusplan.infrastructure.local.block_repository import SqlitePlannedBlockRepository
from focusplan.infrastructure.local.database import Base
from focusplan.infrastructure.local.proposal_repository import SqliteProposalRepository
from focusplan.infrastructure.local.session_repository import SqliteSessionRepository
from focusplan.infrastructure.local.task_repository import SqliteTaskRepository


@pytest.fixture
async def session_factory(tmp_path):
    """File-backed SQLite so concurrent sessions see each other's writes."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'focusplan_test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def test_user_id() -> str:
    return "test_user"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        DEFAULT_TIMEZONE="UTC",
        WORKDAY_START="09:00",
        WORKDAY_END="17:00",
        BUFFER_MINUTES=0,
        BREAK_AFTER_TASK_MINUTES=0,
        DEFAULT_TASK_MINUTES=30,
        PROPOSAL_TTL_MINUTES=60,
        CALENDAR_TIMEOUT_SECONDS=0.5,
    )


@pytest.fixture
def task_repo(session_factory):
    return SqliteTaskRepository(session_factory=session_factory)


@pytest.fixture
def proposal_repo(session_factory):
    return SqliteProposalRepository(session_factory=session_factory)


@pytest.fixture
def block_repo(session_factory):
    return SqlitePlannedBlockRepository(session_factory=session_factory)


@pytest.fixture
def session_repo(session_factory):
    return SqliteSessionRepository(session_factory=session_factory)


@pytest.fixture
def calendar():
    """Calendar provider mock handing out sequential event IDs."""
    provider = AsyncMock()
    provider.list_busy_intervals.return_value = []
    counter = {"n": 0}

    async def _create_event(user_id, event):
        counter["n"] += 1
        return f"evt-{counter['n']}"

    provider.create_event.side_effect = _create_event
    provider.delete_event.return_value = True
    return provider
