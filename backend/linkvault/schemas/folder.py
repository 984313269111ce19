"""Folder Schemas - validated input for folder creation, update and reordering.

Invariants:
    - name is stripped and non-empty (1-200 chars)
    - FolderUpdate forbids immutable fields (id, user_id, created_at)
    - FolderUpdate rejects an explicit null for name, is_private and order;
      description and color may be cleared with null
    - FolderReorder.folder_ids has no duplicates

Design Decisions:
    - to_fields() maps snake_case input onto the store's camelCase keys
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from linkvault.core.entities import (
    KEY_COLOR, KEY_DESCRIPTION, KEY_IS_PRIVATE, KEY_NAME, KEY_ORDER,
)

_FIELD_KEYS = {
    "name": KEY_NAME,
    "is_private": KEY_IS_PRIVATE,
    "description": KEY_DESCRIPTION,
    "color": KEY_COLOR,
    "order": KEY_ORDER,
}


def _strip_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("name cannot be empty or whitespace")
    return v


class FolderCreate(BaseModel):
    """New folder. user_id comes from the session, not the body."""
    name: str = Field(min_length=1, max_length=200)
    is_private: bool = False
    description: str | None = Field(None, max_length=2000)
    color: str | None = Field(None, max_length=32)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return _strip_name(v)


class FolderUpdate(BaseModel):
    """Partial update: rename, privacy toggle, decoration, explicit order."""
    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(None, min_length=1, max_length=200)
    is_private: bool | None = None
    description: str | None = Field(None, max_length=2000)
    color: str | None = Field(None, max_length=32)
    order: int | None = Field(None, ge=0)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str | None) -> str | None:
        if v is None:
            raise ValueError("name cannot be null")
        return _strip_name(v)

    @field_validator("is_private", "order")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("value cannot be null")
        return v

    def to_fields(self) -> dict[str, Any]:
        """Only the fields the caller actually sent, under store keys."""
        return {
            _FIELD_KEYS[name]: value
            for name, value in self.model_dump(exclude_unset=True).items()
        }


class FolderReorder(BaseModel):
    """Complete desired ordering of the visible public folders."""
    folder_ids: list[str]

    @field_validator("folder_ids")
    @classmethod
    def no_duplicates(cls, v: list[str]) -> list[str]:
        if len(set(v)) != len(v):
            raise ValueError("folder_ids must not contain duplicates")
        return v


class FolderMove(BaseModel):
    """Drag-and-drop: drop the path folder onto target_id's position."""
    target_id: str = Field(min_length=1)
