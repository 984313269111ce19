"""FakeStore - hand-driven RemoteStore for sync engine scenarios.

Invariants:
    - subscribe() never emits on its own; tests call emit()/fail()
    - unsubscribe calls are counted per (user, kind)
    - Writes are recorded, not applied
"""

from collections import Counter

from linkvault.core.domain_types import CollectionKind
from linkvault.core.errors import SubscriptionError
from linkvault.infrastructure.document_store import Snapshot
from linkvault.infrastructure.live_sequence import LiveSequence


class FakeStore:
    def __init__(self):
        self.sequences: dict[tuple[str, CollectionKind], list[LiveSequence]] = {}
        self.unsubscribe_calls: Counter = Counter()
        self.fail_subscribe: set[CollectionKind] = set()
        self.writes: list[tuple] = []

    async def subscribe(self, user_id: str, kind: CollectionKind) -> LiveSequence:
        if kind in self.fail_subscribe:
            raise ConnectionError("store unreachable")
        key = (user_id, kind)
        sequence = LiveSequence(
            f"{kind.value}:{user_id}",
            on_close=lambda: self.unsubscribe_calls.update([key]),
        )
        self.sequences.setdefault(key, []).append(sequence)
        return sequence

    def latest(self, user_id: str, kind: CollectionKind) -> LiveSequence:
        return self.sequences[(user_id, kind)][-1]

    def emit(self, user_id: str, kind: CollectionKind, documents: list[dict]) -> None:
        self.latest(user_id, kind).push(Snapshot(kind, tuple(documents)))

    def fail(self, user_id: str, kind: CollectionKind) -> None:
        self.latest(user_id, kind).push(
            Snapshot(kind, error=SubscriptionError("permission denied", kind.value)),
        )

    async def fetch_all(self, user_id, kind):
        return []

    async def create(self, user_id, kind, fields):
        self.writes.append(("create", user_id, kind, fields))
        return "new-id"

    async def update(self, user_id, kind, document_id, fields):
        self.writes.append(("update", user_id, kind, document_id, fields))

    async def delete_one(self, user_id, kind, document_id):
        self.writes.append(("delete", user_id, kind, document_id))

    async def batch_write(self, user_id, operations):
        self.writes.append(("batch", user_id, list(operations)))
