"""Response Payloads - JSON shapes shared by the workspace routes.

Invariants:
    - Entity payloads use the store's camelCase keys plus id
    - Folder payloads always carry linkCount (0 when the folder is empty)
"""

from linkvault.core.entities import Folder, LinkItem
from linkvault.core.projections import WorkspaceView
from linkvault.services.workspace import Workspace


def folder_payload(folder: Folder, view: WorkspaceView) -> dict:
    return {**folder.to_dict(), "linkCount": view.count_for(folder.id)}


def link_payload(link: LinkItem) -> dict:
    return link.to_dict()


def sync_payload(ws: Workspace) -> dict:
    return {
        "phase": ws.engine.phase.value,
        "loading": ws.engine.loading,
        "version": ws.engine.version,
    }


def session_payload(ws: Workspace) -> dict:
    identity = ws.identity.current
    return {
        "user": None if identity is None else {
            "uid": identity.uid,
            "email": identity.email,
            "display_name": identity.display_name,
            "photo_url": identity.photo_url,
        },
        "sync": sync_payload(ws),
        "vault_unlocked": ws.vault.is_unlocked(ws.identity.current_user_id),
    }


def view_payload(ws: Workspace, view: WorkspaceView) -> dict:
    """Public workspace: public folders (sorted, counted) and public links."""
    return {
        "folders": [folder_payload(f, view) for f in view.public_folders],
        "links": [link_payload(link) for link in view.public_links],
        "linkCounts": dict(view.link_counts),
        "sync": sync_payload(ws),
    }
