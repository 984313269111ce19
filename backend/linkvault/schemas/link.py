"""Link Schemas - validated input for link creation and favorite toggling.

Invariants:
    - title and url are stripped and non-empty
    - platform is one of Platform; PHONE means url holds a phone number
    - folder_id None (or empty) files the link nowhere
"""

from pydantic import BaseModel, Field, field_validator

from linkvault.core.domain_types import Platform


class LinkCreate(BaseModel):
    """New link. user_id is mandatory: creation never falls back to the session."""
    user_id: str = Field(min_length=1)
    title: str = Field(min_length=1, max_length=500)
    url: str = Field(min_length=1, max_length=4096)
    platform: Platform = Platform.WEB
    description: str | None = Field(None, max_length=2000)
    folder_id: str | None = None
    is_private: bool = False
    is_favorite: bool = False

    @field_validator("title", "url")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("value cannot be empty or whitespace")
        return v

    @field_validator("folder_id")
    @classmethod
    def blank_folder_is_unfiled(cls, v: str | None) -> str | None:
        return v or None


class LinkCreateRequest(BaseModel):
    """HTTP body for POST /links (user_id taken from the signed-in session)."""
    title: str
    url: str
    platform: Platform = Platform.WEB
    description: str | None = None
    folder_id: str | None = None
    is_private: bool = False
    is_favorite: bool = False


class FavoriteToggle(BaseModel):
    """The favorite flag as the caller last saw it (pre-toggle)."""
    current_status: bool
