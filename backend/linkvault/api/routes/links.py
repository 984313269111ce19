"""Link Routes - folder-scoped filtered listing, create, delete, favorite toggle.

Invariants:
    - GET lists public links only: private links are served by the vault routes
      once unlocked
    - GET scopes by exact folder_id (omitted = unfiled links), then tab, then search
    - POST takes user_id from the session, never from the body
    - favorite toggling sends the pre-toggle value (no read-before-write)
"""

import logging

from fastapi import APIRouter, Depends, Query, status

from linkvault.core.domain_types import FilterTab
from linkvault.core.projections import filtered_links
from linkvault.schemas.link import FavoriteToggle, LinkCreateRequest
from linkvault.services.workspace import Workspace, get_workspace
from linkvault.api.routes.payloads import link_payload, sync_payload

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/links", tags=["links"])


@router.get("")
async def list_links(
    folder_id: str | None = Query(None),
    tab: FilterTab = Query(FilterTab.ALL),
    search: str = Query("", max_length=200),
    ws: Workspace = Depends(get_workspace),
):
    links = filtered_links(
        ws.engine.view.public_links, folder_id, tab, search,
        ws.now_ms(), ws.recent_window_ms,
    )
    return {
        "links": [link_payload(link) for link in links],
        "sync": sync_payload(ws),
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_link(body: LinkCreateRequest, ws: Workspace = Depends(get_workspace)):
    user_id = ws.require_user()
    link = await ws.mutations.add_link({**body.model_dump(), "user_id": user_id})
    return link.to_dict()


@router.delete("/{link_id}")
async def delete_link(link_id: str, ws: Workspace = Depends(get_workspace)):
    ws.require_user()
    await ws.mutations.delete_link(link_id)
    return {"id": link_id, "deleted": True}


@router.post("/{link_id}/favorite")
async def toggle_favorite(
    link_id: str, body: FavoriteToggle, ws: Workspace = Depends(get_workspace),
):
    ws.require_user()
    await ws.mutations.toggle_favorite(link_id, body.current_status)
    return {"id": link_id, "isFavorite": not body.current_status}
