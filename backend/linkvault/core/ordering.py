"""Folder Ordering - explicit sum type for a folder's optional sort position.

Invariants:
    - Ordered(n) < Ordered(m) iff n < m
    - Every Ordered(...) sorts before Unordered
    - Unordered compares equal to Unordered (ties keep input order, sort is stable)

Design Decisions:
    - Ordered | Unordered instead of a float('inf') sentinel: the total order is
      defined by sort_key(), not by numeric comparison tricks
    - move_folder is the pure half of drag-and-drop; the write lives in services/
"""

from dataclasses import dataclass
from typing import Any, Sequence


@dataclass(frozen=True)
class Ordered:
    """Folder with an explicit position among public folders."""
    position: int

    def sort_key(self) -> tuple[int, int]:
        return (0, self.position)

    def to_value(self) -> int:
        return self.position


@dataclass(frozen=True)
class Unordered:
    """Folder that was never reordered - sorts after every Ordered folder."""

    def sort_key(self) -> tuple[int, int]:
        return (1, 0)

    def to_value(self) -> None:
        return None


FolderOrder = Ordered | Unordered

UNORDERED = Unordered()


def order_from_value(value: Any) -> FolderOrder:
    """Parse the schemaless `order` field of a stored folder document.

    Anything that is not an integer (missing, None, bool, float with a
    fractional part, string) is Unordered.
    """
    if isinstance(value, bool):
        return UNORDERED
    if isinstance(value, int):
        return Ordered(value)
    if isinstance(value, float) and value.is_integer():
        return Ordered(int(value))
    return UNORDERED


def move_folder(
    ordered_ids: Sequence[str], dragged_id: str, target_id: str,
) -> list[str]:
    """Drop dragged_id at target_id's position, shifting the rest.

    Returns a new list. Unknown ids, or dragging onto itself, leave the
    sequence unchanged.
    """
    result = list(ordered_ids)
    if dragged_id == target_id:
        return result
    if dragged_id not in result or target_id not in result:
        return result
    target_index = result.index(target_id)
    result.remove(dragged_id)
    result.insert(target_index, dragged_id)
    return result
