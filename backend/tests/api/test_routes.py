"""HTTP surface - session, folders, links, vault and the workspace stream.

The client fixture binds the app to a workspace over in-memory SQLite.
Writes return once committed; tests then wait for the sync engine to
receive the resulting snapshot before reading views.
"""

import json

import pytest

from tests.conftest import NOW_MS

DAY = 24 * 60 * 60 * 1000


async def _sign_in(client, uid="u1"):
    resp = await client.post("/api/v1/auth/session", json={"uid": uid, "email": f"{uid}@example.com"})
    assert resp.status_code == 201
    return resp.json()


async def _until(workspace, predicate):
    await workspace.engine.wait_for(predicate, timeout=2)


# --- Health & session ---------------------------------------------------------

async def test_health(client):
    resp = await client.get("/api/v1/health/")
    assert resp.status_code == 200
    assert resp.json()["service"] == "linkvault-api"

    ready = await client.get("/api/v1/health/ready")
    assert ready.status_code == 200
    assert ready.json()["checks"]["database"] == "healthy"
    assert ready.json()["checks"]["sync"] == {
        "phase": "idle", "loading": False, "signed_in": False,
    }


async def test_readiness_reports_live_sync(client, workspace):
    await _sign_in(client)
    await _until(workspace, lambda e: not e.loading)
    sync = (await client.get("/api/v1/health/ready")).json()["checks"]["sync"]
    assert sync == {"phase": "live", "loading": False, "signed_in": True}


async def test_readiness_fails_without_database(client, monkeypatch):
    import linkvault.infrastructure.database as db_module

    monkeypatch.setattr(db_module, "db_manager", None)
    resp = await client.get("/api/v1/health/ready")
    assert resp.status_code == 503
    assert resp.json()["reason"] == "database_unavailable"


async def test_readiness_fails_without_workspace(client, monkeypatch):
    import linkvault.services.workspace as workspace_module

    monkeypatch.setattr(workspace_module, "workspace", None)
    resp = await client.get("/api/v1/health/ready")
    assert resp.status_code == 503
    assert resp.json()["reason"] == "workspace_unavailable"


async def test_session_lifecycle(client, workspace):
    resp = await client.get("/api/v1/auth/session")
    assert resp.json()["user"] is None
    assert resp.json()["sync"]["phase"] == "idle"

    body = await _sign_in(client)
    assert body["user"]["uid"] == "u1"
    assert body["vault_unlocked"] is False
    await _until(workspace, lambda e: not e.loading)

    resp = await client.get("/api/v1/auth/session")
    sync = resp.json()["sync"]
    assert sync["phase"] == "live"
    assert sync["loading"] is False

    resp = await client.delete("/api/v1/auth/session")
    assert resp.json()["user"] is None
    resp = await client.delete("/api/v1/auth/session")
    assert resp.status_code == 200


async def test_rename_profile(client):
    await _sign_in(client)
    resp = await client.patch("/api/v1/auth/profile", json={"display_name": "Ana"})
    assert resp.status_code == 200
    assert resp.json()["user"]["display_name"] == "Ana"


async def test_mutations_require_session(client):
    resp = await client.post("/api/v1/folders", json={"name": "A"})
    assert resp.status_code == 401
    assert resp.json()["error"]["code"] == "NOT_AUTHENTICATED"


# --- Folders ------------------------------------------------------------------

async def test_folder_crud_and_counts(client, workspace):
    await _sign_in(client)

    resp = await client.post("/api/v1/folders", json={"name": "Reading"})
    assert resp.status_code == 201
    folder = resp.json()
    assert folder["name"] == "Reading"
    assert folder["order"] is None
    assert folder["createdAt"] == NOW_MS

    for title in ("a", "b"):
        await client.post("/api/v1/links", json={
            "title": title, "url": "https://x", "folder_id": folder["id"],
        })
    await _until(workspace, lambda e: e.view.count_for(folder["id"]) == 2)

    listed = (await client.get("/api/v1/folders")).json()["folders"]
    assert [(f["id"], f["linkCount"]) for f in listed] == [(folder["id"], 2)]

    resp = await client.patch(f"/api/v1/folders/{folder['id']}", json={"name": "Books"})
    assert resp.status_code == 200
    await _until(workspace, lambda e: e.view.folder(folder["id"]).name == "Books")

    resp = await client.delete(f"/api/v1/folders/{folder['id']}")
    assert resp.json() == {"id": folder["id"], "links_removed": 2}
    await _until(workspace, lambda e: not e.folders and not e.links)


async def test_private_folders_hidden_from_listing(client, workspace):
    await _sign_in(client)
    await client.post("/api/v1/folders", json={"name": "Public"})
    await client.post("/api/v1/folders", json={"name": "Secret", "is_private": True})
    await _until(workspace, lambda e: len(e.folders) == 2)

    listed = (await client.get("/api/v1/folders")).json()["folders"]
    assert [f["name"] for f in listed] == ["Public"]


async def test_folder_validation_errors(client):
    await _sign_in(client)
    resp = await client.post("/api/v1/folders", json={"name": ""})
    assert resp.status_code == 400
    assert resp.json()["error"]["details"][0]["field"] == "name"

    resp = await client.patch("/api/v1/folders/f1", json={"userId": "u2"})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"
    assert resp.json()["error"]["details"][0]["field"] == "userId"

    resp = await client.put("/api/v1/folders/order", json={"folder_ids": ["a", "a"]})
    assert resp.status_code == 400


async def test_update_missing_folder_is_a_write_error(client):
    await _sign_in(client)
    resp = await client.patch("/api/v1/folders/ghost", json={"name": "B"})
    assert resp.status_code == 503
    assert resp.json()["error"]["code"] == "WRITE_ERROR"


async def test_reorder_and_move(client, workspace):
    await _sign_in(client)
    ids = []
    for name in ("A", "B", "C"):
        ids.append((await client.post("/api/v1/folders", json={"name": name})).json()["id"])
    await _until(workspace, lambda e: len(e.folders) == 3)

    resp = await client.put("/api/v1/folders/order", json={"folder_ids": [ids[2], ids[0], ids[1]]})
    assert resp.status_code == 200
    await _until(workspace, lambda e: [f.id for f in e.view.public_folders] == [ids[2], ids[0], ids[1]])

    resp = await client.post(f"/api/v1/folders/{ids[2]}/move", json={"target_id": ids[1]})
    assert resp.json()["folder_ids"] == [ids[0], ids[1], ids[2]]
    await _until(workspace, lambda e: [f.id for f in e.view.public_folders] == [ids[0], ids[1], ids[2]])

    resp = await client.post(f"/api/v1/folders/{ids[0]}/move", json={"target_id": "nope"})
    assert resp.status_code == 404


async def test_folder_search(client, workspace):
    await _sign_in(client)
    for name in ("Work", "Homework", "Fun"):
        await client.post("/api/v1/folders", json={"name": name})
    await _until(workspace, lambda e: len(e.folders) == 3)

    listed = (await client.get("/api/v1/folders", params={"search": "WORK"})).json()["folders"]
    assert sorted(f["name"] for f in listed) == ["Homework", "Work"]


# --- Links --------------------------------------------------------------------

async def test_link_tabs_and_search(client, workspace, clock):
    await _sign_in(client)
    folder_id = (await client.post("/api/v1/folders", json={"name": "F"})).json()["id"]

    clock.advance(-10 * DAY)
    old = (await client.post("/api/v1/links", json={
        "title": "Old news", "url": "https://old", "folder_id": folder_id,
    })).json()
    clock.advance(10 * DAY - 60_000)
    fresh = (await client.post("/api/v1/links", json={
        "title": "Fresh blog", "url": "https://fresh", "folder_id": folder_id,
        "is_favorite": True,
    })).json()
    clock.advance(60_000)
    await _until(workspace, lambda e: e.view.count_for(folder_id) == 2)

    async def ids(**params):
        resp = await client.get("/api/v1/links", params={"folder_id": folder_id, **params})
        return [l["id"] for l in resp.json()["links"]]

    assert sorted(await ids()) == sorted([old["id"], fresh["id"]])
    assert await ids(tab="recent") == [fresh["id"]]
    assert await ids(tab="favorites") == [fresh["id"]]
    assert await ids(search="NEWS") == [old["id"]]
    assert await ids(tab="favorites", search="news") == []


async def test_unfiled_links_listed_without_folder(client, workspace):
    await _sign_in(client)
    link = (await client.post("/api/v1/links", json={"title": "t", "url": "https://x"})).json()
    assert link["folderId"] is None
    await _until(workspace, lambda e: len(e.links) == 1)

    resp = await client.get("/api/v1/links")
    assert [l["id"] for l in resp.json()["links"]] == [link["id"]]


async def test_favorite_round_trip_and_delete(client, workspace):
    await _sign_in(client)
    link = (await client.post("/api/v1/links", json={"title": "t", "url": "https://x"})).json()

    resp = await client.post(f"/api/v1/links/{link['id']}/favorite", json={"current_status": False})
    assert resp.json() == {"id": link["id"], "isFavorite": True}
    await _until(workspace, lambda e: e.links and e.links[0].is_favorite)

    await client.post(f"/api/v1/links/{link['id']}/favorite", json={"current_status": True})
    await _until(workspace, lambda e: e.links and not e.links[0].is_favorite)

    resp = await client.delete(f"/api/v1/links/{link['id']}")
    assert resp.json()["deleted"] is True
    await _until(workspace, lambda e: not e.links)


async def test_invalid_link_rejected(client):
    await _sign_in(client)
    resp = await client.post("/api/v1/links", json={"title": "  ", "url": "https://x"})
    assert resp.status_code == 400


# --- User switching -----------------------------------------------------------

async def test_switching_users_hides_previous_data(client, workspace):
    await _sign_in(client, "u1")
    await client.post("/api/v1/folders", json={"name": "Mine"})
    await client.post("/api/v1/links", json={"title": "t", "url": "https://x"})
    await _until(workspace, lambda e: e.folders and e.links)

    await _sign_in(client, "u2")
    await _until(workspace, lambda e: not e.loading)

    body = (await client.get("/api/v1/workspace")).json()
    assert body["folders"] == []
    assert body["links"] == []
    assert (await client.get("/api/v1/links")).json()["links"] == []


# --- Vault --------------------------------------------------------------------

async def test_vault_flow(client, workspace):
    await _sign_in(client)
    await client.post("/api/v1/links", json={"title": "pub", "url": "https://p"})
    secret = (await client.post("/api/v1/links", json={
        "title": "sec", "url": "https://s", "is_private": True,
    })).json()
    await _until(workspace, lambda e: len(e.links) == 2)

    assert (await client.get("/api/v1/vault/pin")).json() == {"has_pin": False}
    assert (await client.get("/api/v1/vault/links")).status_code == 423

    assert (await client.put("/api/v1/vault/pin", json={"pin": "1234"})).status_code == 200
    assert (await client.get("/api/v1/vault/pin")).json() == {"has_pin": True}

    rejected = await client.post("/api/v1/vault/unlock", json={"pin": "0000"})
    assert rejected.status_code == 403
    assert rejected.json()["error"]["code"] == "PIN_REJECTED"
    assert (await client.post("/api/v1/vault/unlock", json={"pin": "1234"})).status_code == 200

    links = (await client.get("/api/v1/vault/links")).json()["links"]
    assert [l["id"] for l in links] == [secret["id"]]

    public = (await client.get("/api/v1/workspace")).json()["links"]
    assert secret["id"] not in [l["id"] for l in public]

    await client.post("/api/v1/vault/lock")
    assert (await client.get("/api/v1/vault/links")).status_code == 423


async def test_link_listing_never_exposes_private_links(client, workspace):
    await _sign_in(client)
    await client.put("/api/v1/vault/pin", json={"pin": "1234"})
    folder_id = (await client.post("/api/v1/folders", json={"name": "F"})).json()["id"]
    await client.post("/api/v1/links", json={"title": "bank", "url": "https://secret", "is_private": True})
    await client.post("/api/v1/links", json={
        "title": "bank statement", "url": "https://secret/2", "is_private": True,
        "folder_id": folder_id,
    })
    await _until(workspace, lambda e: len(e.links) == 2)
    assert (await client.get("/api/v1/vault/links")).status_code == 423

    unfiled = await client.get("/api/v1/links")
    assert unfiled.json()["links"] == []
    scoped = await client.get("/api/v1/links", params={"folder_id": folder_id, "search": "bank"})
    assert scoped.json()["links"] == []

    await client.post("/api/v1/vault/unlock", json={"pin": "1234"})
    assert (await client.get("/api/v1/links")).json()["links"] == []
    assert len((await client.get("/api/v1/vault/links")).json()["links"]) == 2


async def test_sign_in_relocks_vault(client):
    await _sign_in(client)
    await client.put("/api/v1/vault/pin", json={"pin": "1234"})
    await client.post("/api/v1/vault/unlock", json={"pin": "1234"})

    body = await _sign_in(client, "u2")
    assert body["vault_unlocked"] is False


@pytest.mark.parametrize("pin", ["123", "abcd"])
async def test_bad_pin_format(client, pin):
    await _sign_in(client)
    resp = await client.put("/api/v1/vault/pin", json={"pin": pin})
    assert resp.status_code == 400


async def test_forgot_pin_reset(client):
    await _sign_in(client)
    await client.put("/api/v1/vault/pin", json={"pin": "1234"})
    await client.post("/api/v1/vault/unlock", json={"pin": "1234"})

    resp = await client.delete("/api/v1/vault/pin")
    assert resp.json() == {"has_pin": False}
    assert (await client.get("/api/v1/vault/links")).status_code == 423


# --- Workspace view & stream --------------------------------------------------

async def test_workspace_view(client, workspace):
    await _sign_in(client)
    folder_id = (await client.post("/api/v1/folders", json={"name": "F"})).json()["id"]
    await client.post("/api/v1/links", json={"title": "t", "url": "https://x", "folder_id": folder_id})
    await _until(workspace, lambda e: e.view.count_for(folder_id) == 1)

    body = (await client.get("/api/v1/workspace")).json()
    assert body["linkCounts"] == {folder_id: 1}
    assert body["folders"][0]["linkCount"] == 1
    assert body["sync"]["loading"] is False


async def test_workspace_stream_first_event(client, workspace):
    await _sign_in(client)
    await _until(workspace, lambda e: not e.loading)

    resp = await client.get("/api/v1/workspace/stream", params={"max_events": 1})
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/event-stream")

    [line] = [l for l in resp.text.splitlines() if l.startswith("data: ")]
    event = json.loads(line[len("data: "):])
    assert event["type"] == "workspace"
    assert event["data"]["folders"] == []
