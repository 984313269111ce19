"""Workspace - the process-wide client instance behind the HTTP layer.

Invariants:
    - One IdentityProvider, SyncEngine, MutationFacade and VaultLock per process
    - The engine follows the identity provider; sign-in/out return once the
      engine has switched to the new user
    - The vault re-locks on every sign-in and sign-out

Design Decisions:
    - Module-level workspace singleton, initialized in the FastAPI lifespan
      (same lifecycle as db_manager); single-process uvicorn only
"""

import asyncio
import logging
from dataclasses import dataclass, field

from linkvault.core.domain_types import MS_PER_DAY
from linkvault.core.errors import NotAuthenticatedError
from linkvault.infrastructure.database import DatabaseSessionManager
from linkvault.infrastructure.document_store import RemoteStore, SqlDocumentStore
from linkvault.services.identity import Identity, IdentityProvider
from linkvault.services.mutations import Clock, MutationFacade, epoch_millis
from linkvault.services.profiles import ensure_profile, update_display_name
from linkvault.services.sync_engine import SyncEngine
from linkvault.services.vault import PinGate, VaultLock

logger = logging.getLogger(__name__)


@dataclass
class Workspace:
    """Everything one signed-in client needs, wired together."""
    db: DatabaseSessionManager
    store: RemoteStore
    identity: IdentityProvider
    engine: SyncEngine
    mutations: MutationFacade
    pin_gate: PinGate
    vault: VaultLock
    clock: Clock = epoch_millis
    recent_window_ms: int = 7 * MS_PER_DAY
    switch_timeout: float = 10.0
    _follow_task: asyncio.Task | None = field(default=None, repr=False)

    @classmethod
    def create(
        cls,
        db: DatabaseSessionManager,
        store: RemoteStore | None = None,
        clock: Clock = epoch_millis,
        recent_window_days: int = 7,
    ) -> "Workspace":
        store = store or SqlDocumentStore(db)
        identity = IdentityProvider()
        pin_gate = PinGate(db)
        return cls(
            db=db,
            store=store,
            identity=identity,
            engine=SyncEngine(store),
            mutations=MutationFacade(store, identity, clock),
            pin_gate=pin_gate,
            vault=VaultLock(pin_gate),
            clock=clock,
            recent_window_ms=recent_window_days * MS_PER_DAY,
        )

    async def start(self) -> None:
        if self._follow_task is None:
            self._follow_task = asyncio.create_task(
                self.engine.follow(self.identity), name="sync-follow-identity",
            )

    async def stop(self) -> None:
        if self._follow_task is not None:
            self._follow_task.cancel()
            await asyncio.gather(self._follow_task, return_exceptions=True)
            self._follow_task = None
        await self.engine.close()

    def require_user(self) -> str:
        user_id = self.identity.current_user_id
        if user_id is None:
            raise NotAuthenticatedError()
        return user_id

    def now_ms(self) -> int:
        return self.clock()

    async def sign_in(self, identity: Identity) -> None:
        await ensure_profile(self.db, identity)
        self.vault.lock()
        self.identity.sign_in(identity)
        await self.engine.wait_for(
            lambda engine: engine.user_id == identity.uid, self.switch_timeout,
        )

    async def sign_out(self) -> None:
        self.vault.lock()
        self.identity.sign_out()
        await self.engine.wait_for(
            lambda engine: engine.user_id is None, self.switch_timeout,
        )

    async def rename(self, name: str) -> Identity | None:
        user_id = self.require_user()
        await update_display_name(self.db, user_id, name)
        return self.identity.update_display_name(name)


# Singleton (initialized on startup)
workspace: Workspace | None = None


def init_workspace(db: DatabaseSessionManager, **kwargs) -> Workspace:
    global workspace
    workspace = Workspace.create(db, **kwargs)
    return workspace


def get_workspace() -> Workspace:
    """FastAPI dependency for the process workspace."""
    if not workspace:
        raise RuntimeError("Workspace not initialized")
    return workspace
