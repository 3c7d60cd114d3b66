"""
Ella Rises - Test Configuration and Fixtures
"""
import os
import tempfile
from datetime import datetime, timedelta
from pathlib import Path
from typing import AsyncGenerator

import pytest
from faker import Faker

# Point settings at a scratch directory before anything imports them
_scratch = Path(tempfile.mkdtemp(prefix="ella_rises_tests_"))
os.environ['DB_PATH'] = str(_scratch / 'app.db')
os.environ['LOG_DIR'] = str(_scratch / 'logs')

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

import ella_rises.models  # noqa: F401
from ella_rises.caller import Caller
from ella_rises.db import make_engine, make_session_pool
from ella_rises.models import EventDefinition, EventInstance, Participant

fake = Faker()


@pytest.fixture
async def engine(tmp_path):
    """Fresh SQLite file per test so concurrent connections share real locking"""
    test_engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_pool(engine):
    return make_session_pool(engine)


@pytest.fixture
async def db_session(session_pool) -> AsyncGenerator[AsyncSession, None]:
    async with session_pool() as session:
        yield session


@pytest.fixture
def now() -> datetime:
    return datetime(2026, 3, 2, 18, 0, 0)


@pytest.fixture
def manager() -> Caller:
    return Caller(user_id='director@ellarises.org', level='M')


@pytest.fixture
def make_participant(session_pool):
    """Insert a participant and return a participant-level Caller for them"""
    async def _make(email: str | None = None) -> Caller:
        email = email or fake.unique.email()
        async with session_pool() as session:
            session.add(Participant(email=email, first_name=fake.first_name(), last_name=fake.last_name()))
            await session.commit()
        return Caller(user_id=email, level='U')
    return _make


@pytest.fixture
def make_event(session_pool):
    async def _make(name: str = 'Mentor Night', **fields) -> str:
        async with session_pool() as session:
            session.add(EventDefinition(name=name, **fields))
            await session.commit()
        return name
    return _make


@pytest.fixture
def make_instance(session_pool, make_event, now):
    """Insert an instance of an (auto-created) event definition"""
    created_events: set[str] = set()

    async def _make(event_name: str = 'Mentor Night', start: datetime | None = None, **fields) -> int:
        if event_name not in created_events:
            await make_event(event_name, type='Mentoring', description='Monthly mentoring evening')
            created_events.add(event_name)
        start = start or now + timedelta(hours=1)
        fields.setdefault('end_time', start + timedelta(hours=2))
        async with session_pool() as session:
            instance = EventInstance(event_name=event_name, start_time=start, **fields)
            session.add(instance)
            await session.commit()
            return instance.id
    return _make
