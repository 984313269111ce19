"""Sync Engine - keeps the in-memory folders/links in step with the remote store.

Invariants:
    - Idle (no user): collections empty, loading False
    - Syncing: loading True until BOTH subscriptions delivered a first snapshot or error
    - Live: every snapshot replaces its collection wholesale (no merge)
    - Switching users tears both subscriptions down (unsubscribe once each)
      and clears the collections before the next user's subscriptions open
    - Snapshots from a torn-down generation are discarded, so a previous
      user's documents never appear under the current user
    - A subscription error marks that subscription ready and keeps its
      last-known-good collection; the other subscription is untouched
    - Nothing raised by a subscription escapes the engine (logged instead)
    - Only this class assigns folders/links; readers get immutable tuples

Design Decisions:
    - One pump task per subscription, tagged with a generation counter
    - asyncio.Condition + version counter lets consumers await changes
      (wait_for, changes) without registering callbacks
    - WorkspaceView rebuilt eagerly on every accepted snapshot
"""

import asyncio
import logging
from typing import AsyncIterator, Callable

from linkvault.core.domain_types import CollectionKind, SyncPhase
from linkvault.core.entities import Folder, LinkItem
from linkvault.core.projections import WorkspaceView
from linkvault.infrastructure.document_store import RemoteStore, Snapshot
from linkvault.infrastructure.live_sequence import LiveSequence
from linkvault.services.identity import IdentityProvider

logger = logging.getLogger(__name__)


class SyncEngine:
    """Per-session owner of the synchronized folders and links."""

    def __init__(self, store: RemoteStore):
        self._store = store
        self._user_id: str | None = None
        self._phase = SyncPhase.IDLE
        self._folders: tuple[Folder, ...] = ()
        self._links: tuple[LinkItem, ...] = ()
        self._view = WorkspaceView()
        self._ready: dict[CollectionKind, bool] = {k: False for k in CollectionKind}
        self._sequences: dict[CollectionKind, LiveSequence[Snapshot]] = {}
        self._pumps: dict[CollectionKind, asyncio.Task] = {}
        self._generation = 0
        self._version = 0
        self._changed = asyncio.Condition()
        self._switch_lock = asyncio.Lock()

    # --- Read side -------------------------------------------------------------

    @property
    def user_id(self) -> str | None:
        return self._user_id

    @property
    def phase(self) -> SyncPhase:
        return self._phase

    @property
    def loading(self) -> bool:
        return self._phase == SyncPhase.SYNCING

    @property
    def folders(self) -> tuple[Folder, ...]:
        return self._folders

    @property
    def links(self) -> tuple[LinkItem, ...]:
        return self._links

    @property
    def view(self) -> WorkspaceView:
        return self._view

    @property
    def version(self) -> int:
        return self._version

    def is_ready(self, kind: CollectionKind) -> bool:
        return self._ready[kind]

    async def wait_for(
        self, predicate: Callable[["SyncEngine"], bool], timeout: float | None = None,
    ) -> None:
        """Block until predicate(engine) holds. Raises TimeoutError on timeout."""
        async def _wait():
            async with self._changed:
                await self._changed.wait_for(lambda: predicate(self))
        await asyncio.wait_for(_wait(), timeout)

    async def wait_until_ready(self, timeout: float | None = None) -> None:
        await self.wait_for(lambda engine: not engine.loading, timeout)

    async def changes(self) -> AsyncIterator[WorkspaceView]:
        """Current view, then one view per observable change."""
        seen = self._version
        yield self._view
        while True:
            await self.wait_for(lambda engine: engine.version != seen)
            seen = self._version
            yield self._view

    # --- Session lifecycle -----------------------------------------------------

    async def set_user(self, user_id: str | None) -> None:
        """Move to Idle (None) or start syncing user_id. Same user is a no-op."""
        async with self._switch_lock:
            if user_id == self._user_id:
                return
            await self._teardown()
            if user_id is not None:
                await self._start(user_id)

    async def follow(self, provider: IdentityProvider) -> None:
        """Track the provider's identity until cancelled."""
        sequence = provider.watch()
        try:
            async for identity in sequence:
                await self.set_user(identity.uid if identity else None)
        finally:
            sequence.unsubscribe()

    async def close(self) -> None:
        async with self._switch_lock:
            await self._teardown()

    async def _teardown(self) -> None:
        self._generation += 1
        sequences, self._sequences = self._sequences, {}
        pumps, self._pumps = self._pumps, {}
        previous = self._user_id

        self._user_id = None
        self._folders = ()
        self._links = ()
        self._view = WorkspaceView()
        self._ready = {k: False for k in CollectionKind}
        self._phase = SyncPhase.IDLE

        for sequence in sequences.values():
            sequence.unsubscribe()
        for task in pumps.values():
            task.cancel()
        if pumps:
            await asyncio.gather(*pumps.values(), return_exceptions=True)
        if previous is not None:
            logger.info("Sync stopped", extra={"user_id": previous})
        await self._notify()

    async def _start(self, user_id: str) -> None:
        generation = self._generation
        self._user_id = user_id
        self._phase = SyncPhase.SYNCING
        await self._notify()
        logger.info(
            "Sync starting", extra={"user_id": user_id, "phase": self._phase.value},
        )

        for kind in CollectionKind:
            try:
                sequence = await self._store.subscribe(user_id, kind)
            except Exception as e:
                logger.warning(
                    f"Subscribe failed: {e}",
                    extra={"user_id": user_id, "collection": kind.value},
                )
                await self._mark_ready(kind)
                continue
            self._sequences[kind] = sequence
            self._pumps[kind] = asyncio.create_task(
                self._pump(kind, sequence, generation),
                name=f"sync-{kind.value}-{user_id}",
            )

    # --- Snapshot handling -----------------------------------------------------

    async def _pump(
        self, kind: CollectionKind, sequence: LiveSequence[Snapshot], generation: int,
    ) -> None:
        try:
            async for snapshot in sequence:
                if generation != self._generation:
                    break
                if snapshot.ok:
                    self._replace(kind, snapshot)
                else:
                    logger.warning(
                        f"Subscription error, keeping last snapshot: {snapshot.error.message}",
                        extra={"user_id": self._user_id, "collection": kind.value,
                               "error_code": snapshot.error.code},
                    )
                await self._mark_ready(kind)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if generation == self._generation:
                logger.warning(
                    f"Subscription stream failed: {e}",
                    extra={"user_id": self._user_id, "collection": kind.value},
                )
                await self._mark_ready(kind)

    def _replace(self, kind: CollectionKind, snapshot: Snapshot) -> None:
        if kind == CollectionKind.FOLDERS:
            parsed = [Folder.from_document(d) for d in snapshot.documents]
        else:
            parsed = [LinkItem.from_document(d) for d in snapshot.documents]
        owned = [e for e in parsed if not e.user_id or e.user_id == self._user_id]
        if len(owned) != len(parsed):
            logger.warning(
                f"Dropped {len(parsed) - len(owned)} documents owned by another user",
                extra={"user_id": self._user_id, "collection": kind.value},
            )
        if kind == CollectionKind.FOLDERS:
            self._folders = tuple(owned)
        else:
            self._links = tuple(owned)
        self._view = WorkspaceView.build(self._folders, self._links)

    async def _mark_ready(self, kind: CollectionKind) -> None:
        self._ready[kind] = True
        if self._user_id is not None and all(self._ready.values()):
            if self._phase != SyncPhase.LIVE:
                logger.info(
                    "Sync live",
                    extra={"user_id": self._user_id, "phase": SyncPhase.LIVE.value},
                )
            self._phase = SyncPhase.LIVE
        await self._notify()

    async def _notify(self) -> None:
        self._version += 1
        async with self._changed:
            self._changed.notify_all()
