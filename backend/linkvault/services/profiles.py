"""User Profiles - create-on-first-sign-in and display-name updates.

Invariants:
    - ensure_profile never overwrites an existing row
    - display_name defaults to "User" when the identity has none
"""

import logging

from linkvault.infrastructure.database import DatabaseSessionManager
from linkvault.models.user_profile import UserProfile
from linkvault.services.identity import Identity

logger = logging.getLogger(__name__)


async def ensure_profile(db_manager: DatabaseSessionManager, identity: Identity) -> bool:
    """Insert the profile row if missing. Returns True when a row was created."""
    async with db_manager.session() as db:
        if await db.get(UserProfile, identity.uid) is not None:
            return False
        db.add(UserProfile(
            uid=identity.uid,
            email=identity.email,
            display_name=identity.display_name or "User",
            photo_url=identity.photo_url,
        ))
        await db.commit()
    logger.info("Profile created", extra={"user_id": identity.uid})
    return True


async def update_display_name(
    db_manager: DatabaseSessionManager, user_id: str, name: str,
) -> None:
    async with db_manager.session() as db:
        profile = await db.get(UserProfile, user_id)
        if profile is None:
            profile = UserProfile(uid=user_id)
            db.add(profile)
        profile.display_name = name
        await db.commit()
