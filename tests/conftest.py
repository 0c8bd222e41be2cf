"""
Shared fixtures.

The application engine is configured from the environment at import time,
so the test database URL is set before anything from ``stagenotes`` loads.
"""

import os
import tempfile

_TEST_DIR = tempfile.mkdtemp(prefix="stagenotes-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/app.db"
os.environ["LOG_LEVEL"] = "WARNING"

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import stagenotes.models  # noqa: F401
from stagenotes.database import Base
from stagenotes.models.note import NoteType
from stagenotes.schemas.note import NoteOut
from stagenotes.services.board_store import BoardStore
from stagenotes.services.change_feed import NoteChangeFeed

BASE_TIME = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
async def session_factory(tmp_path):
    """A fresh SQLite database per test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def feed():
    return NoteChangeFeed()


@pytest.fixture
def store(db, feed):
    return BoardStore(db, feed)


@pytest.fixture
def make_note():
    """Build a NoteOut snapshot; ``minutes`` offsets created_at from a fixed base."""
    def _make(note_id=None, votes=0, minutes=0, note_type=NoteType.Question, text="Note", board_id="board-1"):
        return NoteOut(
            id=note_id or str(uuid.uuid4()),
            board_id=board_id,
            text=text,
            type=note_type,
            author=None,
            votes=votes,
            created_at=BASE_TIME + timedelta(minutes=minutes),
        )
    return _make


@pytest.fixture
def client():
    """TestClient with its own cookie jar, i.e. a fresh device per test."""
    from stagenotes.main import app

    with TestClient(app) as test_client:
        yield test_client
