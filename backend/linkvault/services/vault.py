"""Vault Gate - PIN storage (PinGate) and the per-session private-vault lock (VaultLock).

Invariants:
    - PINs are exactly 4 digits; anything else raises ValidationError before IO
    - verify_pin is False when the user has no profile row or no PIN
    - VaultLock starts locked, unlocks only on a successful verify_pin,
      and re-locks whenever the signed-in user changes
    - private_links() raises VaultLockedError while locked

Design Decisions:
    - The PIN digest (core/pin_hash.py) is NOT cryptographic: the vault is an
      access-convenience gate, not a confidentiality control
    - Lock state is independent of the isPrivate data partition: the sync
      engine always holds private links; only their exposure is gated
"""

import logging

from sqlalchemy import select

from linkvault.core.entities import LinkItem
from linkvault.core.errors import ValidationError, VaultLockedError
from linkvault.core.pin_hash import hash_pin, is_valid_pin
from linkvault.core.projections import WorkspaceView
from linkvault.infrastructure.database import DatabaseSessionManager
from linkvault.models.user_profile import UserProfile

logger = logging.getLogger(__name__)


def _require_valid(pin: str) -> None:
    if not is_valid_pin(pin):
        raise ValidationError("PIN must be exactly 4 digits", "pin")


class PinGate:
    """hasPin / setPin / verifyPin / removePin on user_profiles.vault_pin."""

    def __init__(self, db: DatabaseSessionManager):
        self._db = db

    async def _stored_pin(self, user_id: str) -> str | None:
        async with self._db.session() as db:
            result = await db.execute(
                select(UserProfile.vault_pin).where(UserProfile.uid == user_id),
            )
            return result.scalar_one_or_none()

    async def has_pin(self, user_id: str) -> bool:
        return bool(await self._stored_pin(user_id))

    async def set_pin(self, user_id: str, pin: str) -> None:
        """Create or replace the PIN. Creates the profile row if missing."""
        _require_valid(pin)
        async with self._db.session() as db:
            profile = await db.get(UserProfile, user_id)
            if profile is None:
                profile = UserProfile(uid=user_id)
                db.add(profile)
            profile.vault_pin = hash_pin(pin)
            await db.commit()
        logger.info("Vault PIN set", extra={"user_id": user_id})

    async def verify_pin(self, user_id: str, pin: str) -> bool:
        _require_valid(pin)
        stored = await self._stored_pin(user_id)
        return stored is not None and stored == hash_pin(pin)

    async def remove_pin(self, user_id: str) -> None:
        """Forgot-PIN reset: clears the digest, keeps the profile."""
        async with self._db.session() as db:
            profile = await db.get(UserProfile, user_id)
            if profile is None:
                return
            profile.vault_pin = None
            await db.commit()
        logger.info("Vault PIN removed", extra={"user_id": user_id})


class VaultLock:
    """Locked/unlocked state of the private vault for one client session."""

    def __init__(self, gate: PinGate):
        self._gate = gate
        self._unlocked_for: str | None = None

    def is_unlocked(self, user_id: str | None) -> bool:
        return user_id is not None and self._unlocked_for == user_id

    async def unlock(self, user_id: str, pin: str) -> bool:
        if await self._gate.verify_pin(user_id, pin):
            self._unlocked_for = user_id
            logger.info("Vault unlocked", extra={"user_id": user_id})
            return True
        logger.info("Vault PIN rejected", extra={"user_id": user_id})
        return False

    def lock(self) -> None:
        self._unlocked_for = None

    def private_links(self, user_id: str | None, view: WorkspaceView) -> list[LinkItem]:
        if not self.is_unlocked(user_id):
            raise VaultLockedError()
        return list(view.private_links)
