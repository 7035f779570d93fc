from __future__ import annotations
import os
import tempfile
import uuid

# Must run before anything imports showdown.config / showdown.db
_DB_PATH = os.path.join(tempfile.gettempdir(), f"showdown-test-{uuid.uuid4().hex}.db")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_PATH}"
os.environ["RESEND_API_KEY"] = ""

import httpx
import pytest
import pytest_asyncio
from datetime import datetime, timedelta, timezone
from httpx import AsyncClient

from showdown.config import settings
from showdown.db import Base, engine, SessionLocal
from showdown.main import app
from showdown.models.submission import Submission, PENDING
from showdown.models.user import User
from showdown.services.anon_id import generate_anonymous_id


@pytest_asyncio.fixture
async def db():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session(db):
    async with SessionLocal() as s:
        yield s


@pytest_asyncio.fixture
async def client(db):
    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture(autouse=True)
def stored_objects(monkeypatch):
    """In-memory stand-in for the object store."""
    stored: dict[str, tuple[bytes, str]] = {}

    def _put(key: str, data: bytes, content_type: str) -> str:
        stored[key] = (data, content_type)
        return f"https://cdn.test/{key}"

    monkeypatch.setattr("showdown.services.submissions.put_bytes", _put)
    monkeypatch.setattr("showdown.services.submissions.delete_object", lambda key: stored.pop(key, None))
    return stored


@pytest.fixture
def competition_running(monkeypatch):
    """Place 'now' in week 1 of the competition."""
    start = datetime.now(timezone.utc).date() - timedelta(days=2)
    monkeypatch.setattr(settings, "competition_start_date", start)
    return start


@pytest.fixture
def make_user(session):
    async def _make(name: str | None = None) -> User:
        name = name or f"user_{uuid.uuid4().hex[:8]}"
        u = User(email=f"{name}@example.com", username=name, password_hash="x")
        session.add(u)
        await session.flush()
        return u
    return _make


@pytest.fixture
def make_submission(session):
    async def _make(user: User, week: int = 1, status: str = PENDING, **counters) -> Submission:
        s = Submission(
            user_id=user.id,
            user_name=user.username,
            email=user.email,
            part_name="Spoiler",
            part_type="spoiler",
            car_model="Civic",
            description="",
            file_path=f"https://cdn.test/{uuid.uuid4().hex}.glb",
            file_size=128,
            week_number=week,
            status=status,
            anonymous_id=generate_anonymous_id(),
            times_shown=counters.get("times_shown", 0),
            thumbs_up=counters.get("thumbs_up", 0),
            thumbs_down=counters.get("thumbs_down", 0),
            total_votes=counters.get("thumbs_up", 0) + counters.get("thumbs_down", 0),
            votes_completed=counters.get("votes_completed", 0),
            is_winner=False,
        )
        session.add(s)
        await session.flush()
        return s
    return _make
