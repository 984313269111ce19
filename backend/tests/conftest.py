"""Root conftest - shared fixtures: in-memory SQLite store, engine, facade, API client.

Invariants:
    - Every test gets a fresh temp-file SQLite database
    - Time is a FakeClock; tests move it explicitly
    - The API client talks to the app through ASGITransport with the
      workspace dependency overridden (no lifespan, no real settings DB)
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FORMAT", "text")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

import linkvault.infrastructure.database as db_module
import linkvault.services.workspace as workspace_module
from linkvault.db.base import Base
from linkvault.infrastructure.database import DatabaseSessionManager
from linkvault.infrastructure.document_store import SqlDocumentStore
from linkvault.services.identity import IdentityProvider
from linkvault.services.mutations import MutationFacade
from linkvault.services.sync_engine import SyncEngine
from linkvault.services.workspace import Workspace, get_workspace
import linkvault.models  # noqa: F401

NOW_MS = 1_760_000_000_000


class FakeClock:
    """Epoch-millis clock that only moves when told to."""

    def __init__(self, now: int = NOW_MS):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
async def db_manager(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield DatabaseSessionManager.from_engine(engine)
    await engine.dispose()


@pytest.fixture
async def store(db_manager):
    return SqlDocumentStore(db_manager)


@pytest.fixture
def identity():
    return IdentityProvider()


@pytest.fixture
async def engine(store):
    sync = SyncEngine(store)
    yield sync
    await sync.close()


@pytest.fixture
def mutations(store, identity, clock):
    return MutationFacade(store, identity, clock)


@pytest.fixture
async def workspace(db_manager, store, clock):
    ws = Workspace.create(db_manager, store=store, clock=clock)
    ws.switch_timeout = 2.0
    await ws.start()
    yield ws
    await ws.stop()


@pytest.fixture
async def client(workspace, db_manager):
    """FastAPI test client bound to the test workspace."""
    from linkvault.main import app

    app.dependency_overrides[get_workspace] = lambda: workspace
    original_manager = db_module.db_manager
    original_workspace = workspace_module.workspace
    db_module.db_manager = db_manager
    workspace_module.workspace = workspace

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
    workspace_module.workspace = original_workspace
