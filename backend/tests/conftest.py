"""
Pytest fixtures for test database, client, and authentication.

Each test gets its own SQLite file database built from the model metadata,
so the partial unique index and check constraints are the real ones.
Requests go through the ASGI app with bearer tokens minted locally.
"""

import os
from decimal import Decimal
from typing import AsyncGenerator, Callable

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from venue_booking.main import app
from venue_booking.core.config import get_settings
from venue_booking.core.security import create_access_token
from venue_booking.db.base import Base
from venue_booking.db.session import get_db, get_engine, get_sessionmaker, dispose_engine
from venue_booking.models import User, UserRole, Venue, VenueStatus
from venue_booking.schemas.user import CurrentUser


@pytest.fixture
def db_url(tmp_path, monkeypatch) -> str:
    url = f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    get_settings.cache_clear()
    yield url
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def session_factory(db_url: str) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Create tables, hand out the sessionmaker, then dispose the engine."""
    async with get_engine(db_url).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield get_sessionmaker(db_url)

    await dispose_engine(db_url)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client; every request gets its own session, like production."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def _make_user(db_session: AsyncSession, username: str, role: UserRole) -> User:
    user = User(email=f"{username}@example.com", username=username, role=role)
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def owner(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "owner_u1", UserRole.CLIENT)


@pytest_asyncio.fixture
async def guest(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "guest_u2", UserRole.GUEST)


@pytest_asyncio.fixture
async def other_guest(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "guest_u3", UserRole.GUEST)


@pytest_asyncio.fixture
async def stranger(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "stranger", UserRole.CLIENT)


@pytest_asyncio.fixture
async def admin(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "admin", UserRole.ADMIN)


async def _make_venue(
    db_session: AsyncSession,
    owner: User,
    title: str,
    status: VenueStatus = VenueStatus.OPEN,
    price: str = "150.00",
    with_coordinates: bool = True,
) -> Venue:
    venue = Venue(
        owner_id=owner.id,
        title=title,
        description=f"{title} description",
        price=Decimal(price),
        capacity=120,
        status=status,
        latitude=14.5995 if with_coordinates else None,
        longitude=120.9842 if with_coordinates else None,
    )
    db_session.add(venue)
    await db_session.commit()
    await db_session.refresh(venue)
    return venue


@pytest_asyncio.fixture
async def venue(db_session: AsyncSession, owner: User) -> Venue:
    """Open venue V1 owned by U1."""
    return await _make_venue(db_session, owner, "Garden Pavilion")


@pytest_asyncio.fixture
async def closed_venue(db_session: AsyncSession, owner: User) -> Venue:
    return await _make_venue(db_session, owner, "Closed Hall", status=VenueStatus.CLOSED)


@pytest.fixture
def make_venue(db_session: AsyncSession):
    async def factory(owner: User, title: str, **kwargs) -> Venue:
        return await _make_venue(db_session, owner, title, **kwargs)
    return factory


@pytest.fixture
def headers_for() -> Callable[[User], dict]:
    """Authorization headers with a Bearer token for the given user."""

    def build(user: User) -> dict:
        token = create_access_token(data={"sub": str(user.id)})
        return {"Authorization": f"Bearer {token}"}

    return build


@pytest.fixture
def actor_of() -> Callable[[User], CurrentUser]:
    """Explicit caller context for direct service calls."""

    def build(user: User) -> CurrentUser:
        return CurrentUser(id=user.id, role=user.role)

    return build
