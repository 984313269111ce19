"""Projections - pure derivations over the synchronized folders and links.

Invariants:
    - public_folders: non-private folders sorted by FolderOrder (Unordered last, stable ties)
    - link_counts[f] == number of links with folder_id == f; unfiled links count nowhere
    - filtered_links applies the tab first, then the search term; search only narrows
    - Recent keeps links with now - created_at <= window, newest first
    - Nothing here mutates its inputs or reads the clock

Design Decisions:
    - Free functions over plain sequences, plus WorkspaceView to hold one
      consistent derivation per (folders, links) pair
    - WorkspaceView is rebuilt by the sync engine on every accepted snapshot
      and shared read-only with consumers
"""

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from linkvault.core.domain_types import FilterTab, RECENT_WINDOW_MS
from linkvault.core.entities import Folder, LinkItem


# ─── Partitions ──────────────────────────────────────────────────

def public_folders(folders: Iterable[Folder]) -> list[Folder]:
    return sorted(
        (f for f in folders if not f.is_private),
        key=lambda f: f.order.sort_key(),
    )


def public_links(links: Iterable[LinkItem]) -> list[LinkItem]:
    return [link for link in links if not link.is_private]


def private_links(links: Iterable[LinkItem]) -> list[LinkItem]:
    return [link for link in links if link.is_private]


def link_counts(links: Iterable[LinkItem]) -> dict[str, int]:
    """Links per folder id. Unfiled links (folder_id None) are skipped."""
    counts: dict[str, int] = {}
    for link in links:
        if link.folder_id:
            counts[link.folder_id] = counts.get(link.folder_id, 0) + 1
    return counts


def folder_links(links: Iterable[LinkItem], folder_id: str | None) -> list[LinkItem]:
    """Links whose folder_id equals folder_id exactly (None selects unfiled links)."""
    return [link for link in links if link.folder_id == folder_id]


# ─── Filters ─────────────────────────────────────────────────────

def _matches_link(link: LinkItem, term: str) -> bool:
    return (
        term in link.title.lower()
        or term in link.url.lower()
        or term in (link.description or "").lower()
    )


def apply_tab(
    links: Sequence[LinkItem],
    tab: FilterTab,
    now_ms: int,
    recent_window_ms: int = RECENT_WINDOW_MS,
) -> list[LinkItem]:
    if tab == FilterTab.RECENT:
        recent = [
            link for link in links
            if now_ms - link.created_at <= recent_window_ms
        ]
        return sorted(recent, key=lambda link: link.created_at, reverse=True)
    if tab == FilterTab.FAVORITES:
        return [link for link in links if link.is_favorite]
    return list(links)


def search_links(links: Sequence[LinkItem], search_term: str) -> list[LinkItem]:
    """Case-insensitive substring match across title, url and description."""
    if not search_term:
        return list(links)
    term = search_term.lower()
    return [link for link in links if _matches_link(link, term)]


def filtered_links(
    links: Iterable[LinkItem],
    folder_id: str | None,
    tab: FilterTab,
    search_term: str,
    now_ms: int,
    recent_window_ms: int = RECENT_WINDOW_MS,
) -> list[LinkItem]:
    scoped = folder_links(links, folder_id)
    tabbed = apply_tab(scoped, tab, now_ms, recent_window_ms)
    return search_links(tabbed, search_term)


def filtered_folders(folders: Iterable[Folder], search_term: str) -> list[Folder]:
    """Case-insensitive substring match on folder name."""
    folders = list(folders)
    if not search_term:
        return folders
    term = search_term.lower()
    return [f for f in folders if term in f.name.lower()]


# ─── WorkspaceView ───────────────────────────────────────────────

@dataclass(frozen=True)
class WorkspaceView:
    """One consistent projection of a user's folders and links."""
    folders: tuple[Folder, ...] = ()
    links: tuple[LinkItem, ...] = ()
    public_folders: tuple[Folder, ...] = ()
    public_links: tuple[LinkItem, ...] = ()
    private_links: tuple[LinkItem, ...] = ()
    link_counts: dict[str, int] = field(default_factory=dict)

    @classmethod
    def build(
        cls, folders: Sequence[Folder], links: Sequence[LinkItem],
    ) -> "WorkspaceView":
        return cls(
            folders=tuple(folders),
            links=tuple(links),
            public_folders=tuple(public_folders(folders)),
            public_links=tuple(public_links(links)),
            private_links=tuple(private_links(links)),
            link_counts=link_counts(links),
        )

    def folder(self, folder_id: str) -> Folder | None:
        return next((f for f in self.folders if f.id == folder_id), None)

    def folder_links(self, folder_id: str | None) -> list[LinkItem]:
        return folder_links(self.links, folder_id)

    def filtered_links(
        self,
        folder_id: str | None,
        tab: FilterTab,
        search_term: str,
        now_ms: int,
        recent_window_ms: int = RECENT_WINDOW_MS,
    ) -> list[LinkItem]:
        return filtered_links(
            self.links, folder_id, tab, search_term, now_ms, recent_window_ms,
        )

    def filtered_folders(self, search_term: str) -> list[Folder]:
        """Search over public folders, keeping their sort order."""
        return filtered_folders(self.public_folders, search_term)

    def count_for(self, folder_id: str) -> int:
        return self.link_counts.get(folder_id, 0)
