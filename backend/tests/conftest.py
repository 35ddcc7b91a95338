"""
Pytest fixtures for test database, client, and authentication.

Every test gets its own SQLite file (via aiosqlite) with the full schema.
Each HTTP request runs in its own session that commits on success and
rolls back on error, exactly like the production get_db dependency.
"""

import os
from datetime import datetime, timezone, timedelta
from typing import AsyncGenerator, Optional

os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from eventhub.main import app
from eventhub.db.base import Base
from eventhub.db.session import get_db
from eventhub.core.security import create_access_token, hash_password
from eventhub.models.user import User
from eventhub.models.event import Event

PASSWORD = "testpassword123"


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Fresh SQLite database file with all tables."""
    test_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        connect_args={"timeout": 30},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for arranging data and inspecting results directly."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that points the DB dependency at the test database."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def _create_user(db: AsyncSession, name: str, email: str, role: str) -> User:
    user = User(
        name=name,
        email=email,
        hashed_password=hash_password(PASSWORD),
        role=role,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


def _headers(user: User) -> dict:
    token = create_access_token(data={"sub": str(user.id), "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "Test User", "test@example.com", "user")


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "Other User", "other@example.com", "user")


@pytest_asyncio.fixture
async def organizer(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "Olive Organizer", "organizer@example.com", "organizer")


@pytest_asyncio.fixture
async def other_organizer(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "Oscar Organizer", "organizer2@example.com", "organizer")


@pytest_asyncio.fixture
async def admin(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "Ada Admin", "admin@example.com", "admin")


@pytest_asyncio.fixture
async def auth_headers(test_user: User) -> dict:
    """Authorization headers with Bearer token for a regular user."""
    return _headers(test_user)


@pytest_asyncio.fixture
async def other_headers(other_user: User) -> dict:
    return _headers(other_user)


@pytest_asyncio.fixture
async def organizer_headers(organizer: User) -> dict:
    return _headers(organizer)


@pytest_asyncio.fixture
async def other_organizer_headers(other_organizer: User) -> dict:
    return _headers(other_organizer)


@pytest_asyncio.fixture
async def admin_headers(admin: User) -> dict:
    return _headers(admin)


async def _create_event(
    db: AsyncSession,
    organizer: User,
    title: str,
    capacity: int,
    price: float,
    available_tickets: Optional[int] = None,
) -> Event:
    event = Event(
        title=title,
        slug=title.lower().replace(" ", "-"),
        description=f"{title} description",
        location="Test Venue",
        date=datetime.now(timezone.utc) + timedelta(days=30),
        start_time="19:00",
        end_time="22:00",
        capacity=capacity,
        available_tickets=capacity if available_tickets is None else available_tickets,
        price=price,
        is_published=True,
        organizer_id=organizer.id,
    )
    db.add(event)
    await db.commit()
    await db.refresh(event)
    return event


@pytest_asyncio.fixture
async def test_event(db_session: AsyncSession, organizer: User) -> Event:
    """A paid event with 10 tickets."""
    return await _create_event(db_session, organizer, "Test Concert", capacity=10, price=25.0)


@pytest_asyncio.fixture
async def free_event(db_session: AsyncSession, organizer: User) -> Event:
    return await _create_event(db_session, organizer, "Free Meetup", capacity=50, price=0)


@pytest_asyncio.fixture
async def almost_full_event(db_session: AsyncSession, organizer: User) -> Event:
    """Capacity 10 with only 2 tickets left."""
    return await _create_event(
        db_session, organizer, "Almost Full Show", capacity=10, price=15.0, available_tickets=2
    )


@pytest_asyncio.fixture
async def sold_out_event(db_session: AsyncSession, organizer: User) -> Event:
    return await _create_event(
        db_session, organizer, "Sold Out Show", capacity=50, price=30.0, available_tickets=0
    )
