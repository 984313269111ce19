"""Auth Session - records the outcome of an external sign-in as the current identity.

Invariants:
    - POST /session returns after the sync engine switched to the new user
    - DELETE /session is idempotent (signing out twice is fine)
    - Password/OAuth flows are out of scope: the caller already authenticated
"""

import logging

from fastapi import APIRouter, Depends, status

from linkvault.schemas.vault import DisplayNameUpdate, SignInRequest
from linkvault.services.identity import Identity
from linkvault.services.workspace import Workspace, get_workspace
from linkvault.api.routes.payloads import session_payload

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post("/session", status_code=status.HTTP_201_CREATED)
async def sign_in(body: SignInRequest, ws: Workspace = Depends(get_workspace)):
    """Sign in (or switch user)."""
    await ws.sign_in(Identity(
        uid=body.uid, email=body.email,
        display_name=body.display_name, photo_url=body.photo_url,
    ))
    return session_payload(ws)


@router.get("/session")
async def current_session(ws: Workspace = Depends(get_workspace)):
    return session_payload(ws)


@router.delete("/session")
async def sign_out(ws: Workspace = Depends(get_workspace)):
    await ws.sign_out()
    return session_payload(ws)


@router.patch("/profile")
async def rename(body: DisplayNameUpdate, ws: Workspace = Depends(get_workspace)):
    """Update the display name in the profile row and the live identity."""
    await ws.rename(body.display_name.strip() or "User")
    return session_payload(ws)
