"""Entities - Folder and LinkItem as immutable values parsed from store documents.

Invariants:
    - Store documents use camelCase keys (isPrivate, createdAt, userId, folderId)
    - from_document never raises: documents are schemaless and may be partial
    - folder_id None means the link is unfiled
    - A link's is_private is its own flag, never inherited from its folder

Design Decisions:
    - Frozen dataclasses, not ORM rows: the sync engine replaces whole
      collections per snapshot and never mutates an entity in place
    - Key names live here once so services/ and projections agree on them
"""

from dataclasses import dataclass, field
from typing import Any

from linkvault.core.domain_types import FolderId, LinkId, Platform, UserId
from linkvault.core.ordering import FolderOrder, UNORDERED, order_from_value


# ─── Document keys ───────────────────────────────────────────────

KEY_ID = "id"
KEY_NAME = "name"
KEY_DESCRIPTION = "description"
KEY_IS_PRIVATE = "isPrivate"
KEY_CREATED_AT = "createdAt"
KEY_USER_ID = "userId"
KEY_COLOR = "color"
KEY_ORDER = "order"
KEY_TITLE = "title"
KEY_URL = "url"
KEY_PLATFORM = "platform"
KEY_FOLDER_ID = "folderId"
KEY_IS_FAVORITE = "isFavorite"


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return int(value)
    return 0


def _as_platform(value: Any) -> Platform:
    try:
        return Platform(value)
    except ValueError:
        return Platform.WEB


@dataclass(frozen=True)
class Folder:
    """Named grouping of links, optionally private and optionally ordered."""
    id: FolderId
    name: str
    user_id: UserId
    is_private: bool = False
    created_at: int = 0
    order: FolderOrder = field(default=UNORDERED)
    description: str | None = None
    color: str | None = None

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Folder":
        return cls(
            id=FolderId(str(doc.get(KEY_ID, ""))),
            name=str(doc.get(KEY_NAME) or ""),
            user_id=UserId(str(doc.get(KEY_USER_ID) or "")),
            is_private=bool(doc.get(KEY_IS_PRIVATE, False)),
            created_at=_as_int(doc.get(KEY_CREATED_AT)),
            order=order_from_value(doc.get(KEY_ORDER)),
            description=doc.get(KEY_DESCRIPTION),
            color=doc.get(KEY_COLOR),
        )

    def to_document(self) -> dict[str, Any]:
        """Stored fields (id excluded - the store owns it). Absent order is omitted."""
        doc: dict[str, Any] = {
            KEY_NAME: self.name,
            KEY_IS_PRIVATE: self.is_private,
            KEY_CREATED_AT: self.created_at,
            KEY_USER_ID: self.user_id,
        }
        if self.order.to_value() is not None:
            doc[KEY_ORDER] = self.order.to_value()
        if self.description is not None:
            doc[KEY_DESCRIPTION] = self.description
        if self.color is not None:
            doc[KEY_COLOR] = self.color
        return doc

    def to_dict(self) -> dict[str, Any]:
        """API shape: stored fields plus id, order always present (None if unset)."""
        return {
            KEY_ID: self.id,
            **self.to_document(),
            KEY_ORDER: self.order.to_value(),
        }


@dataclass(frozen=True)
class LinkItem:
    """A stored URL or phone contact."""
    id: LinkId
    title: str
    url: str
    user_id: UserId
    platform: Platform = Platform.WEB
    folder_id: FolderId | None = None
    is_private: bool = False
    is_favorite: bool = False
    created_at: int = 0
    description: str | None = None

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "LinkItem":
        folder_id = doc.get(KEY_FOLDER_ID)
        return cls(
            id=LinkId(str(doc.get(KEY_ID, ""))),
            title=str(doc.get(KEY_TITLE) or ""),
            url=str(doc.get(KEY_URL) or ""),
            user_id=UserId(str(doc.get(KEY_USER_ID) or "")),
            platform=_as_platform(doc.get(KEY_PLATFORM)),
            folder_id=FolderId(str(folder_id)) if folder_id else None,
            is_private=bool(doc.get(KEY_IS_PRIVATE, False)),
            is_favorite=bool(doc.get(KEY_IS_FAVORITE) or False),
            created_at=_as_int(doc.get(KEY_CREATED_AT)),
            description=doc.get(KEY_DESCRIPTION),
        )

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {
            KEY_TITLE: self.title,
            KEY_URL: self.url,
            KEY_PLATFORM: self.platform.value,
            KEY_FOLDER_ID: self.folder_id,
            KEY_IS_PRIVATE: self.is_private,
            KEY_IS_FAVORITE: self.is_favorite,
            KEY_CREATED_AT: self.created_at,
            KEY_USER_ID: self.user_id,
        }
        if self.description is not None:
            doc[KEY_DESCRIPTION] = self.description
        return doc

    def to_dict(self) -> dict[str, Any]:
        return {KEY_ID: self.id, **self.to_document()}

    @property
    def is_phone(self) -> bool:
        return self.platform == Platform.PHONE
