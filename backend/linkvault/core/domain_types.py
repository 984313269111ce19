"""Domain Types - rich types that replace bare primitives across the codebase.

Invariants:
    - UserId, FolderId, LinkId wrap store-assigned string ids
    - All valid states encoded as Enums - no raw string matching
    - RECENT_WINDOW_MS is the default look-back of the Recent tab (7 days)

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: values are exactly what the document store persists
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", str)
FolderId = NewType("FolderId", str)
LinkId = NewType("LinkId", str)


# ─── Constants ───────────────────────────────────────────────────

MS_PER_DAY = 24 * 3600 * 1000
RECENT_WINDOW_MS = 7 * MS_PER_DAY
PIN_LENGTH = 4


# ─── Enums ───────────────────────────────────────────────────────

class CollectionKind(str, Enum):
    """Per-user document collections held by the remote store."""
    FOLDERS = "folders"
    LINKS = "links"


class Platform(str, Enum):
    """Link classification. PHONE entries carry a phone number in `url`."""
    WEB = "web"
    VIDEO = "video"
    ARTICLE = "article"
    CODE = "code"
    SHOP = "shop"
    PHONE = "phone"


class FilterTab(str, Enum):
    """Folder detail tabs, applied before the search term."""
    ALL = "all"
    RECENT = "recent"
    FAVORITES = "favorites"


class SyncPhase(str, Enum):
    """Sync engine lifecycle."""
    IDLE = "idle"
    SYNCING = "syncing"
    LIVE = "live"


class BatchAction(str, Enum):
    """Operations allowed inside an atomic batch write."""
    UPDATE = "update"
    DELETE = "delete"
