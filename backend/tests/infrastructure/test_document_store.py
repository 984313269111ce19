"""SqlDocumentStore - live snapshots, partial updates and atomic batches on SQLite.

Tests cover:
    - subscribe() delivers the current collection first
    - Every write pushes a complete fresh snapshot to open subscriptions
    - Partitions are isolated per (user, kind)
    - update() on a missing document raises WriteError
    - batch_write() is all-or-nothing
    - unsubscribe detaches the subscription from the store
"""

import asyncio

import pytest

from linkvault.core.domain_types import CollectionKind
from linkvault.core.errors import WriteError
from linkvault.infrastructure.document_store import BatchOperation

FOLDERS = CollectionKind.FOLDERS
LINKS = CollectionKind.LINKS


async def _next(sequence, timeout=1.0):
    return await asyncio.wait_for(sequence.__anext__(), timeout)


async def test_subscribe_emits_current_collection(store):
    await store.create("u1", FOLDERS, {"name": "A", "createdAt": 1})
    seq = await store.subscribe("u1", FOLDERS)
    snapshot = await _next(seq)
    assert snapshot.ok
    assert [d["name"] for d in snapshot.documents] == ["A"]
    assert snapshot.documents[0]["id"]
    seq.unsubscribe()


async def test_empty_collection_emits_empty_snapshot(store):
    seq = await store.subscribe("u1", LINKS)
    snapshot = await _next(seq)
    assert snapshot.ok
    assert snapshot.documents == ()
    seq.unsubscribe()


async def test_writes_push_full_snapshots(store):
    seq = await store.subscribe("u1", FOLDERS)
    await _next(seq)

    first = await store.create("u1", FOLDERS, {"name": "A"})
    assert [d["name"] for d in (await _next(seq)).documents] == ["A"]

    await store.create("u1", FOLDERS, {"name": "B"})
    assert sorted(d["name"] for d in (await _next(seq)).documents) == ["A", "B"]

    await store.delete_one("u1", FOLDERS, first)
    assert [d["name"] for d in (await _next(seq)).documents] == ["B"]
    seq.unsubscribe()


async def test_partitions_are_isolated(store):
    other = await store.subscribe("u2", FOLDERS)
    await _next(other)
    links = await store.subscribe("u1", LINKS)
    await _next(links)

    await store.create("u1", FOLDERS, {"name": "mine"})

    assert await store.fetch_all("u2", FOLDERS) == []
    with pytest.raises(asyncio.TimeoutError):
        await _next(other, timeout=0.05)
    with pytest.raises(asyncio.TimeoutError):
        await _next(links, timeout=0.05)
    other.unsubscribe()
    links.unsubscribe()


async def test_update_merges_partial_fields(store):
    doc_id = await store.create("u1", LINKS, {"title": "t", "isFavorite": False})
    await store.update("u1", LINKS, doc_id, {"isFavorite": True})
    [doc] = await store.fetch_all("u1", LINKS)
    assert doc == {"id": doc_id, "title": "t", "isFavorite": True}


async def test_update_missing_document_raises(store):
    with pytest.raises(WriteError) as exc:
        await store.update("u1", LINKS, "nope", {"title": "x"})
    assert exc.value.context.document_id == "nope"


async def test_update_cannot_reach_another_users_document(store):
    doc_id = await store.create("u1", LINKS, {"title": "t"})
    with pytest.raises(WriteError):
        await store.update("u2", LINKS, doc_id, {"title": "stolen"})
    [doc] = await store.fetch_all("u1", LINKS)
    assert doc["title"] == "t"


async def test_delete_absent_document_is_noop(store):
    await store.delete_one("u1", LINKS, "never-existed")
    assert await store.fetch_all("u1", LINKS) == []


async def test_id_field_is_never_stored(store):
    doc_id = await store.create("u1", FOLDERS, {"id": "forged", "name": "A"})
    [doc] = await store.fetch_all("u1", FOLDERS)
    assert doc["id"] == doc_id != "forged"


async def test_batch_applies_all_operations(store):
    f1 = await store.create("u1", FOLDERS, {"name": "A"})
    f2 = await store.create("u1", FOLDERS, {"name": "B"})
    link = await store.create("u1", LINKS, {"title": "t", "folderId": f1})

    await store.batch_write("u1", [
        BatchOperation.delete(LINKS, link),
        BatchOperation.delete(FOLDERS, f1),
        BatchOperation.update(FOLDERS, f2, {"order": 0}),
    ])

    assert await store.fetch_all("u1", LINKS) == []
    [remaining] = await store.fetch_all("u1", FOLDERS)
    assert remaining["id"] == f2
    assert remaining["order"] == 0


async def test_batch_is_atomic(store):
    folder = await store.create("u1", FOLDERS, {"name": "A"})
    link = await store.create("u1", LINKS, {"title": "t", "folderId": folder})

    with pytest.raises(WriteError):
        await store.batch_write("u1", [
            BatchOperation.delete(LINKS, link),
            BatchOperation.update(FOLDERS, "missing", {"order": 0}),
            BatchOperation.delete(FOLDERS, folder),
        ])

    assert [d["id"] for d in await store.fetch_all("u1", LINKS)] == [link]
    assert [d["id"] for d in await store.fetch_all("u1", FOLDERS)] == [folder]


async def test_batch_publishes_every_touched_kind(store):
    folder = await store.create("u1", FOLDERS, {"name": "A"})
    link = await store.create("u1", LINKS, {"title": "t", "folderId": folder})
    folders_seq = await store.subscribe("u1", FOLDERS)
    links_seq = await store.subscribe("u1", LINKS)
    await _next(folders_seq)
    await _next(links_seq)

    await store.batch_write("u1", [
        BatchOperation.delete(LINKS, link),
        BatchOperation.delete(FOLDERS, folder),
    ])

    assert (await _next(folders_seq)).documents == ()
    assert (await _next(links_seq)).documents == ()
    folders_seq.unsubscribe()
    links_seq.unsubscribe()


async def test_empty_batch_is_noop(store):
    seq = await store.subscribe("u1", FOLDERS)
    await _next(seq)
    await store.batch_write("u1", [])
    with pytest.raises(asyncio.TimeoutError):
        await _next(seq, timeout=0.05)
    seq.unsubscribe()


async def test_unsubscribe_detaches(store):
    seq = await store.subscribe("u1", FOLDERS)
    assert store.subscriber_count("u1", FOLDERS) == 1
    seq.unsubscribe()
    seq.unsubscribe()
    assert store.subscriber_count("u1", FOLDERS) == 0
    await store.create("u1", FOLDERS, {"name": "A"})
    assert [item async for item in seq] == []
