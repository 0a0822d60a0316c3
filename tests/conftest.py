"""Test fixtures — isolated live services, HTTP clients and DB sessions.

Learn: Every test gets its own LiveLogoService built on fakes:
- FakeFetcher returns (or raises) a scripted sequence of results
- RecordingPersist remembers every PNG handed to history

The app is built with create_app(live=...) so routes see the test's service.
httpx's ASGITransport does not run lifespan, so no update loop ever polls
the real upstream API during tests.

Database tests use a savepoint-per-test session against the configured
Postgres and are skipped when it is not reachable.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from logo_png.config import settings
from logo_png.db.engine import get_db
from logo_png.db.models import Base
from logo_png.history.store import StoreError
from logo_png.live.service import LiveLogoService
from logo_png.live.source import FetchError
from logo_png.logo.models import LogoDescription
from logo_png.main import create_app

TEST_DB_URL = settings.database_url

RED_PIXEL = LogoDescription(logo=((("#ff0000",),),))
GREEN_PIXEL = LogoDescription(logo=((("00ff00",),),))


class FakeFetcher:
    """Scripted SourceFetcher stand-in.

    Each fetch() pops the next item: a LogoDescription is returned, an
    exception is raised. When the script runs out, the last item repeats.
    """

    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0
        self.closed = False

    async def fetch(self) -> LogoDescription:
        self.calls += 1
        if len(self.results) > 1:
            result = self.results.pop(0)
        elif self.results:
            result = self.results[0]
        else:
            raise FetchError("network", "no scripted result")
        if isinstance(result, Exception):
            raise result
        return result

    async def aclose(self) -> None:
        self.closed = True


class RecordingPersist:
    """Async persist callable that records images (or fails on demand)."""

    def __init__(self, fail: bool = False):
        self.images: list[bytes] = []
        self.fail = fail

    async def __call__(self, image: bytes) -> None:
        if self.fail:
            raise StoreError("database is down")
        self.images.append(image)


@pytest.fixture()
def fetcher():
    return FakeFetcher(RED_PIXEL)


@pytest.fixture()
def persist():
    return RecordingPersist()


@pytest.fixture()
def live_service(fetcher, persist):
    return LiveLogoService(fetcher, persist=persist, poll_interval=0.01)


@pytest.fixture()
def app(live_service):
    return create_app(live=live_service)


@pytest_asyncio.fixture()
async def client(app):
    """HTTP client bound to the test app (no lifespan, no update loop)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture()
async def db_session():
    """Per-test session with automatic rollback via savepoints.

    join_transaction_mode="create_savepoint" means every session.commit()
    becomes a SAVEPOINT. After the test, the outer transaction rolls back.
    """
    engine = create_async_engine(TEST_DB_URL, echo=False)
    try:
        conn = await engine.connect()
    except (SQLAlchemyError, OSError) as e:
        await engine.dispose()
        pytest.skip(f"Postgres not available: {e}")

    try:
        trans = await conn.begin()
        await conn.run_sync(Base.metadata.create_all)
        session = AsyncSession(
            bind=conn,
            expire_on_commit=False,
            join_transaction_mode="create_savepoint",
        )
        try:
            yield session
        finally:
            await session.close()
            await trans.rollback()
    finally:
        await conn.close()
        await engine.dispose()


@pytest_asyncio.fixture()
async def history_client(app, db_session):
    """HTTP client with get_db overridden to the rollback session."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
