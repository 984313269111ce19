"""Folder Routes - public folder listing, CRUD, reorder and drag-and-drop move.

Invariants:
    - Listing reads the sync engine's view (never the store directly)
    - Every mutation requires a signed-in user (401 otherwise)
    - DELETE cascades to the folder's links in one atomic batch
    - move only accepts ids of currently visible public folders (404 otherwise)
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Query, status

from linkvault.core.errors import ResourceNotFoundError
from linkvault.schemas.folder import FolderCreate, FolderMove, FolderReorder
from linkvault.services.workspace import Workspace, get_workspace
from linkvault.api.routes.payloads import folder_payload, sync_payload

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/folders", tags=["folders"])


@router.get("")
async def list_folders(
    search: str = Query("", max_length=200),
    ws: Workspace = Depends(get_workspace),
):
    """Public folders in display order, filtered by name."""
    view = ws.engine.view
    return {
        "folders": [folder_payload(f, view) for f in view.filtered_folders(search)],
        "sync": sync_payload(ws),
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_folder(body: FolderCreate, ws: Workspace = Depends(get_workspace)):
    user_id = ws.require_user()
    folder = await ws.mutations.add_folder(
        body.name, body.is_private, user_id,
        description=body.description, color=body.color,
    )
    return folder.to_dict()


@router.put("/order")
async def reorder_folders(body: FolderReorder, ws: Workspace = Depends(get_workspace)):
    """Persist the complete order of the visible public folders."""
    ws.require_user()
    await ws.mutations.reorder_folders(body.folder_ids)
    return {"folder_ids": body.folder_ids}


@router.patch("/{folder_id}")
async def update_folder(
    folder_id: str,
    updates: dict[str, Any] = Body(...),
    ws: Workspace = Depends(get_workspace),
):
    """Rename / privacy toggle. Unknown or immutable fields are rejected (400)."""
    ws.require_user()
    await ws.mutations.update_folder(folder_id, updates)
    return {"id": folder_id, "updated": sorted(updates)}


@router.delete("/{folder_id}")
async def delete_folder(folder_id: str, ws: Workspace = Depends(get_workspace)):
    ws.require_user()
    removed = await ws.mutations.delete_folder(folder_id)
    return {"id": folder_id, "links_removed": removed}


@router.post("/{folder_id}/move")
async def move_folder(
    folder_id: str, body: FolderMove, ws: Workspace = Depends(get_workspace),
):
    """Drag folder_id onto target_id; returns the persisted order."""
    ws.require_user()
    visible = [f.id for f in ws.engine.view.public_folders]
    for fid in (folder_id, body.target_id):
        if fid not in visible:
            raise ResourceNotFoundError("Folder", fid)
    new_order = await ws.mutations.move_folder(folder_id, body.target_id, visible)
    return {"folder_ids": new_order}
