"""Vault & Session Schemas - PIN input and identity payloads.

Invariants:
    - PinInput.pin is exactly four ASCII digits
"""

from pydantic import BaseModel, Field


class PinInput(BaseModel):
    pin: str = Field(pattern=r"^[0-9]{4}$")


class SignInRequest(BaseModel):
    """Outcome of an external sign-in, recorded as the current identity."""
    uid: str = Field(min_length=1, max_length=128)
    email: str | None = Field(None, max_length=320)
    display_name: str | None = Field(None, max_length=200)
    photo_url: str | None = Field(None, max_length=2048)


class DisplayNameUpdate(BaseModel):
    display_name: str = Field(min_length=1, max_length=200)
