"""Vault Routes - PIN management and the locked private-link view.

Invariants:
    - GET /links returns 423 until POST /unlock succeeded for the current user
    - A wrong PIN returns 403 and leaves the vault locked
    - DELETE /pin (forgot-PIN reset) also locks the vault
"""

import logging

from fastapi import APIRouter, Depends

from linkvault.core.errors import PinRejectedError
from linkvault.schemas.vault import PinInput
from linkvault.services.workspace import Workspace, get_workspace
from linkvault.api.routes.payloads import link_payload

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/vault", tags=["vault"])


@router.get("/pin")
async def has_pin(ws: Workspace = Depends(get_workspace)):
    user_id = ws.require_user()
    return {"has_pin": await ws.pin_gate.has_pin(user_id)}


@router.put("/pin")
async def set_pin(body: PinInput, ws: Workspace = Depends(get_workspace)):
    user_id = ws.require_user()
    await ws.pin_gate.set_pin(user_id, body.pin)
    return {"has_pin": True}


@router.delete("/pin")
async def remove_pin(ws: Workspace = Depends(get_workspace)):
    user_id = ws.require_user()
    await ws.pin_gate.remove_pin(user_id)
    ws.vault.lock()
    return {"has_pin": False}


@router.post("/unlock")
async def unlock(body: PinInput, ws: Workspace = Depends(get_workspace)):
    user_id = ws.require_user()
    if not await ws.vault.unlock(user_id, body.pin):
        raise PinRejectedError()
    return {"unlocked": True}


@router.post("/lock")
async def lock(ws: Workspace = Depends(get_workspace)):
    ws.vault.lock()
    return {"unlocked": False}


@router.get("/links")
async def private_links(ws: Workspace = Depends(get_workspace)):
    user_id = ws.require_user()
    links = ws.vault.private_links(user_id, ws.engine.view)
    return {"links": [link_payload(link) for link in links]}
