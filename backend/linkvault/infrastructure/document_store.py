"""Remote Store Adapter - per-user document collections with live snapshots and atomic batches.

Invariants:
    - Every emission is the complete current collection for (user, kind), never a delta
    - subscribe() enqueues the current snapshot before returning; later commits
      push fresh snapshots to every open subscription for the touched (user, kind)
    - A failed read becomes an error snapshot; the subscription stays open
    - update() merges partial fields; a missing target raises WriteError
    - batch_write() applies all operations or none; an invalid operation aborts
      the whole batch before commit
    - delete of an absent document is a no-op (single and batched)
    - Queries always filter on user_id: a caller never reads another user's partition

Design Decisions:
    - RemoteStore Protocol: the sync engine and facade depend on the interface,
      tests substitute doubles
    - Reads and snapshot pushes are serialized by one asyncio.Lock, so
      snapshots reach subscribers in commit order (SQLite has a single writer anyway)
    - No retries: at most one attempt per call, failures surface as WriteError
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Protocol

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from linkvault.core.domain_types import BatchAction, CollectionKind
from linkvault.core.entities import KEY_ID
from linkvault.core.errors import DatabaseError, SubscriptionError, WriteError
from linkvault.infrastructure.database import DatabaseSessionManager
from linkvault.infrastructure.live_sequence import LiveSequence
from linkvault.models.document import StoredDocument, new_document_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    """One emission of a live subscription: full documents, or an error."""
    kind: CollectionKind
    documents: tuple[dict[str, Any], ...] = ()
    error: SubscriptionError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class BatchOperation:
    """One step of an atomic batch write."""
    kind: CollectionKind
    document_id: str
    action: BatchAction
    fields: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def update(
        cls, kind: CollectionKind, document_id: str, fields: dict[str, Any],
    ) -> "BatchOperation":
        return cls(kind, document_id, BatchAction.UPDATE, dict(fields))

    @classmethod
    def delete(cls, kind: CollectionKind, document_id: str) -> "BatchOperation":
        return cls(kind, document_id, BatchAction.DELETE)


class RemoteStore(Protocol):
    """Interface consumed by the sync engine and the mutation facade."""

    async def subscribe(
        self, user_id: str, kind: CollectionKind,
    ) -> LiveSequence[Snapshot]: ...

    async def fetch_all(
        self, user_id: str, kind: CollectionKind,
    ) -> list[dict[str, Any]]: ...

    async def create(
        self, user_id: str, kind: CollectionKind, fields: dict[str, Any],
    ) -> str: ...

    async def update(
        self, user_id: str, kind: CollectionKind, document_id: str,
        fields: dict[str, Any],
    ) -> None: ...

    async def delete_one(
        self, user_id: str, kind: CollectionKind, document_id: str,
    ) -> None: ...

    async def batch_write(
        self, user_id: str, operations: Iterable[BatchOperation],
    ) -> None: ...


def _without_id(fields: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in fields.items() if k != KEY_ID}


class SqlDocumentStore:
    """RemoteStore on SQLAlchemy: one `documents` table partitioned by (user_id, kind)."""

    def __init__(self, db: DatabaseSessionManager):
        self._db = db
        self._lock = asyncio.Lock()
        self._subscribers: dict[tuple[str, CollectionKind], list[LiveSequence[Snapshot]]] = {}

    # --- Subscriptions ---------------------------------------------------------

    async def subscribe(
        self, user_id: str, kind: CollectionKind,
    ) -> LiveSequence[Snapshot]:
        key = (user_id, kind)
        sequence: LiveSequence[Snapshot] = LiveSequence(
            f"{kind.value}:{user_id}",
            on_close=lambda: self._detach(key, sequence),
        )
        async with self._lock:
            self._subscribers.setdefault(key, []).append(sequence)
            sequence.push(await self._snapshot(user_id, kind))
        logger.debug(
            "Subscribed", extra={"user_id": user_id, "collection": kind.value},
        )
        return sequence

    def subscriber_count(self, user_id: str, kind: CollectionKind) -> int:
        return len(self._subscribers.get((user_id, kind), []))

    def _detach(self, key: tuple[str, CollectionKind], sequence: LiveSequence) -> None:
        subscribers = self._subscribers.get(key, [])
        if sequence in subscribers:
            subscribers.remove(sequence)
        if not subscribers:
            self._subscribers.pop(key, None)

    async def _snapshot(self, user_id: str, kind: CollectionKind) -> Snapshot:
        """Read (user, kind) as a Snapshot. Caller holds the lock."""
        try:
            documents = await self._read(user_id, kind)
        except DatabaseError as e:
            logger.warning(
                f"Snapshot read failed: {e.message}",
                extra={"user_id": user_id, "collection": kind.value},
            )
            return Snapshot(kind, error=SubscriptionError(e.message, kind.value))
        return Snapshot(kind, tuple(documents))

    async def _publish(self, user_id: str, kinds: Iterable[CollectionKind]) -> None:
        """Push a fresh snapshot to every open subscription. Caller holds the lock."""
        for kind in kinds:
            subscribers = self._subscribers.get((user_id, kind))
            if not subscribers:
                continue
            snapshot = await self._snapshot(user_id, kind)
            for sequence in list(subscribers):
                sequence.push(snapshot)

    # --- Reads -----------------------------------------------------------------

    async def _read(self, user_id: str, kind: CollectionKind) -> list[dict[str, Any]]:
        async with self._db.session() as db:
            result = await db.execute(
                select(StoredDocument)
                .where(StoredDocument.user_id == user_id)
                .where(StoredDocument.kind == kind.value)
                .order_by(StoredDocument.created_at, StoredDocument.id),
            )
            return [
                {**row.data, KEY_ID: row.id} for row in result.scalars().all()
            ]

    async def fetch_all(
        self, user_id: str, kind: CollectionKind,
    ) -> list[dict[str, Any]]:
        """One-shot read of a whole collection."""
        async with self._lock:
            try:
                return await self._read(user_id, kind)
            except DatabaseError as e:
                raise WriteError(e.message, "read", kind.value) from e

    # --- Writes ----------------------------------------------------------------

    async def create(
        self, user_id: str, kind: CollectionKind, fields: dict[str, Any],
    ) -> str:
        document_id = new_document_id()
        async with self._lock:
            try:
                async with self._db.session() as db:
                    db.add(StoredDocument(
                        id=document_id, user_id=user_id, kind=kind.value,
                        data=_without_id(fields),
                    ))
                    await db.commit()
            except DatabaseError as e:
                raise WriteError(e.message, "create", kind.value) from e
            await self._publish(user_id, [kind])
        logger.info(
            "Document created",
            extra={"user_id": user_id, "collection": kind.value,
                   "document_id": document_id},
        )
        return document_id

    async def update(
        self, user_id: str, kind: CollectionKind, document_id: str,
        fields: dict[str, Any],
    ) -> None:
        async with self._lock:
            try:
                async with self._db.session() as db:
                    await self._merge(db, user_id, kind, document_id, fields, "update")
                    await db.commit()
            except DatabaseError as e:
                raise WriteError(e.message, "update", kind.value, document_id) from e
            await self._publish(user_id, [kind])

    async def delete_one(
        self, user_id: str, kind: CollectionKind, document_id: str,
    ) -> None:
        async with self._lock:
            try:
                async with self._db.session() as db:
                    await self._delete(db, user_id, kind, document_id)
                    await db.commit()
            except DatabaseError as e:
                raise WriteError(e.message, "delete", kind.value, document_id) from e
            await self._publish(user_id, [kind])
        logger.info(
            "Document deleted",
            extra={"user_id": user_id, "collection": kind.value,
                   "document_id": document_id},
        )

    async def batch_write(
        self, user_id: str, operations: Iterable[BatchOperation],
    ) -> None:
        operations = list(operations)
        if not operations:
            return
        async with self._lock:
            try:
                async with self._db.session() as db:
                    for op in operations:
                        await self._apply(db, user_id, op)
                    await db.commit()
            except DatabaseError as e:
                raise WriteError(e.message, "batch") from e
            touched = {op.kind for op in operations}
            await self._publish(user_id, sorted(touched, key=lambda k: k.value))
        logger.info(
            f"Batch committed ({len(operations)} operations)",
            extra={"user_id": user_id, "operation": "batch"},
        )

    # --- Helpers (inside an open session) --------------------------------------

    async def _apply(self, db: AsyncSession, user_id: str, op: BatchOperation) -> None:
        try:
            action = BatchAction(op.action)
        except ValueError:
            raise WriteError(
                f"unknown batch action {op.action!r}", "batch",
                op.kind.value, op.document_id,
            )
        if action == BatchAction.DELETE:
            await self._delete(db, user_id, op.kind, op.document_id)
        else:
            await self._merge(db, user_id, op.kind, op.document_id, op.fields, "batch")

    async def _merge(
        self, db: AsyncSession, user_id: str, kind: CollectionKind,
        document_id: str, fields: dict[str, Any], operation: str,
    ) -> None:
        result = await db.execute(
            select(StoredDocument)
            .where(StoredDocument.id == document_id)
            .where(StoredDocument.user_id == user_id)
            .where(StoredDocument.kind == kind.value),
        )
        row = result.scalar_one_or_none()
        if row is None:
            raise WriteError(
                "document does not exist", operation, kind.value, document_id,
            )
        # JSON columns track reassignment, not in-place mutation
        row.data = {**row.data, **_without_id(fields)}

    async def _delete(
        self, db: AsyncSession, user_id: str, kind: CollectionKind, document_id: str,
    ) -> None:
        await db.execute(
            delete(StoredDocument)
            .where(StoredDocument.id == document_id)
            .where(StoredDocument.user_id == user_id)
            .where(StoredDocument.kind == kind.value),
        )
