"""UserProfile ORM - per-user profile row, also holding the vault PIN digest.

Invariants:
    - uid is the identity provider's user id (primary key)
    - vault_pin is None when no PIN is set; otherwise a core.pin_hash digest

Design Decisions:
    - Created lazily on first sign-in (services/profiles.py)
"""

from datetime import datetime, timezone

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from linkvault.db.base import Base


class UserProfile(Base):
    """Profile and vault settings for one user."""
    __tablename__ = "user_profiles"

    uid: Mapped[str] = mapped_column(String(128), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    display_name: Mapped[str] = mapped_column(
        String(200), nullable=False, default="User",
    )
    photo_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    vault_pin: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
