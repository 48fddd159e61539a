import os

# Settings are read at import time
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-which-is-long-enough-0123456789")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["ENV"] = "development"

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from socialnet.core.deps import get_pair_locks
from socialnet.core.security import pwd_context
from socialnet.core.token import create_access_token
from socialnet.infra.db import get_db
from socialnet.main import create_app
from socialnet.models import Base
from socialnet.services.connection_manager import ConnectionManager
from socialnet.services.friends import FriendService
from socialnet.services.identity import IdentityService
from socialnet.services.locks import PairLockRegistry
from socialnet.services.notifications import NotificationRelay, get_notification_relay

# Minimum bcrypt cost keeps the suite fast
pwd_context.update(bcrypt__rounds=4)


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'socialnet-test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def connections():
    return ConnectionManager()


@pytest_asyncio.fixture
async def relay(session_factory, connections):
    relay = NotificationRelay(session_factory, connections)
    yield relay
    await relay.drain()


@pytest.fixture
def locks():
    return PairLockRegistry()


@pytest.fixture
def friend_service(db, relay, locks):
    return FriendService(db, relay=relay, locks=locks)


@pytest_asyncio.fixture
async def make_user(session_factory):
    counter = {"n": 0}

    async def _make(name: str = None, **kwargs):
        counter["n"] += 1
        n = counter["n"]
        async with session_factory() as session:
            return await IdentityService(session).create_user(
                email=kwargs.pop("email", f"user{n}@example.com"),
                username=kwargs.pop("username", f"user{n}"),
                name=name or f"User {n}",
                password=kwargs.pop("password", "password123"),
                **kwargs,
            )

    return _make


@pytest_asyncio.fixture
async def client(session_factory, relay, locks):
    app = create_app()

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_relay] = lambda: relay
    app.dependency_overrides[get_pair_locks] = lambda: locks

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers():
    def _headers(user_id: str) -> dict:
        return {"Authorization": f"Bearer {create_access_token({'sub': user_id})}"}

    return _headers
