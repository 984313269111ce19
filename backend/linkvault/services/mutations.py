"""Mutation Facade - validated, user-scoped writes against the remote store.

Invariants:
    - Input is validated before any store call; failures raise ValidationError
    - Without a signed-in session every mutation is a no-op, except add_folder
      and add_link which take an explicit user id
    - WriteError from the store propagates to the caller; no retries
    - Nothing here touches the sync engine's collections: results arrive back
      through the live subscription
    - delete_folder: read links, then ONE batch deleting matching links + folder
    - reorder_folders: ONE batch setting order = index; omitted ids untouched

Design Decisions:
    - toggle_favorite trusts the caller's current_status (no read-before-write);
      concurrent toggles from other devices can race, last write wins
    - Cascade delete keeps the read-then-batch gap: a link added to the folder
      between the read and the commit is left orphaned, not deleted
    - Clock injected so tests control createdAt
"""

import logging
import time
from dataclasses import replace
from typing import Any, Callable, Iterable, Sequence

import pydantic

from linkvault.core.domain_types import CollectionKind
from linkvault.core.entities import (
    Folder, LinkItem, KEY_FOLDER_ID, KEY_ID, KEY_IS_FAVORITE, KEY_ORDER,
)
from linkvault.core.errors import ValidationError, WriteError
from linkvault.core.ordering import move_folder
from linkvault.infrastructure.document_store import BatchOperation, RemoteStore
from linkvault.schemas.folder import FolderCreate, FolderUpdate, FolderReorder
from linkvault.schemas.link import LinkCreate
from linkvault.services.identity import IdentityProvider

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def epoch_millis() -> int:
    return int(time.time() * 1000)


def _validated(schema: type[pydantic.BaseModel], data: dict[str, Any]):
    """Run a pydantic schema, re-raising its first error as ValidationError."""
    try:
        return schema.model_validate(data)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(loc) for loc in first["loc"]) or schema.__name__
        raise ValidationError(first["msg"], field) from e


class MutationFacade:
    """All client-side writes. Reads come from the SyncEngine."""

    def __init__(
        self,
        store: RemoteStore,
        identity: IdentityProvider,
        clock: Clock = epoch_millis,
    ):
        self._store = store
        self._identity = identity
        self._clock = clock

    def _session_user(self, operation: str) -> str | None:
        user_id = self._identity.current_user_id
        if user_id is None:
            logger.info(f"{operation} skipped: no signed-in user")
        return user_id

    async def _guarded(self, awaitable, operation: str, user_id: str):
        try:
            return await awaitable
        except WriteError as e:
            logger.error(
                f"{operation} failed: {e.message}",
                extra={"user_id": user_id, "operation": operation,
                       "error_code": e.code,
                       "collection": e.context.collection,
                       "document_id": e.context.document_id},
            )
            raise

    # --- Folders ---------------------------------------------------------------

    async def add_folder(
        self,
        name: str,
        is_private: bool,
        user_id: str,
        description: str | None = None,
        color: str | None = None,
    ) -> Folder:
        """Create a folder with createdAt=now and no order (sorts last)."""
        if not user_id:
            raise ValidationError("user id is required", "user_id")
        body = _validated(FolderCreate, {
            "name": name, "is_private": is_private,
            "description": description, "color": color,
        })
        folder = Folder(
            id="", name=body.name, user_id=user_id,
            is_private=body.is_private, created_at=self._clock(),
            description=body.description, color=body.color,
        )
        folder_id = await self._guarded(
            self._store.create(user_id, CollectionKind.FOLDERS, folder.to_document()),
            "add_folder", user_id,
        )
        return replace(folder, id=folder_id)

    async def update_folder(self, folder_id: str, updates: dict[str, Any]) -> None:
        """Partial update (rename, privacy flag, decoration)."""
        body = _validated(FolderUpdate, updates)
        user_id = self._session_user("update_folder")
        if user_id is None:
            return
        fields = body.to_fields()
        if not fields:
            return
        await self._guarded(
            self._store.update(user_id, CollectionKind.FOLDERS, folder_id, fields),
            "update_folder", user_id,
        )

    async def delete_folder(self, folder_id: str) -> int:
        """Cascade delete. Returns the number of links removed with the folder."""
        user_id = self._session_user("delete_folder")
        if user_id is None:
            return 0
        documents = await self._guarded(
            self._store.fetch_all(user_id, CollectionKind.LINKS),
            "delete_folder", user_id,
        )
        link_ids = [d[KEY_ID] for d in documents if d.get(KEY_FOLDER_ID) == folder_id]
        operations = [
            BatchOperation.delete(CollectionKind.LINKS, link_id) for link_id in link_ids
        ]
        operations.append(BatchOperation.delete(CollectionKind.FOLDERS, folder_id))
        await self._guarded(
            self._store.batch_write(user_id, operations), "delete_folder", user_id,
        )
        logger.info(
            f"Folder deleted with {len(link_ids)} links",
            extra={"user_id": user_id, "document_id": folder_id},
        )
        return len(link_ids)

    async def reorder_folders(self, ordered_folder_ids: Iterable[str]) -> None:
        """Set order = index for each id, atomically."""
        body = _validated(FolderReorder, {"folder_ids": list(ordered_folder_ids)})
        user_id = self._session_user("reorder_folders")
        if user_id is None or not body.folder_ids:
            return
        operations = [
            BatchOperation.update(CollectionKind.FOLDERS, folder_id, {KEY_ORDER: index})
            for index, folder_id in enumerate(body.folder_ids)
        ]
        await self._guarded(
            self._store.batch_write(user_id, operations), "reorder_folders", user_id,
        )

    async def move_folder(
        self, dragged_id: str, target_id: str, visible_ids: Sequence[str],
    ) -> list[str]:
        """Drag-and-drop onto target, persisting the full resulting order."""
        new_order = move_folder(visible_ids, dragged_id, target_id)
        if new_order == list(visible_ids):
            return new_order
        await self.reorder_folders(new_order)
        return new_order

    # --- Links -----------------------------------------------------------------

    async def add_link(self, fields: LinkCreate | dict[str, Any]) -> LinkItem:
        """Create a link with createdAt=now. folder_id may be None."""
        if isinstance(fields, LinkCreate):
            body = fields
        else:
            body = _validated(LinkCreate, fields)
        link = LinkItem(
            id="", title=body.title, url=body.url, user_id=body.user_id,
            platform=body.platform, folder_id=body.folder_id,
            is_private=body.is_private, is_favorite=body.is_favorite,
            created_at=self._clock(), description=body.description,
        )
        link_id = await self._guarded(
            self._store.create(body.user_id, CollectionKind.LINKS, link.to_document()),
            "add_link", body.user_id,
        )
        return replace(link, id=link_id)

    async def toggle_favorite(self, link_id: str, current_status: bool) -> None:
        user_id = self._session_user("toggle_favorite")
        if user_id is None:
            return
        await self._guarded(
            self._store.update(
                user_id, CollectionKind.LINKS, link_id,
                {KEY_IS_FAVORITE: not current_status},
            ),
            "toggle_favorite", user_id,
        )

    async def delete_link(self, link_id: str) -> None:
        user_id = self._session_user("delete_link")
        if user_id is None:
            return
        await self._guarded(
            self._store.delete_one(user_id, CollectionKind.LINKS, link_id),
            "delete_link", user_id,
        )
