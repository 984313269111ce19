"""StoredDocument ORM - one folder or link document in a user's partition.

Invariants:
    - id is a store-assigned uuid4 hex string, unique across kinds and users
    - (user_id, kind) selects one collection; queries always filter on both
    - data holds the schemaless field set (camelCase keys), never the id

Design Decisions:
    - JSON column for data: partial-merge updates rewrite the whole dict
    - created_at/updated_at are store bookkeeping, separate from the
      document's own createdAt field
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, JSON, Index
from sqlalchemy.orm import Mapped, mapped_column

from linkvault.db.base import Base


def new_document_id() -> str:
    return uuid.uuid4().hex


class StoredDocument(Base):
    """A schemaless document in a per-user collection."""
    __tablename__ = "documents"
    __table_args__ = (
        Index("ix_documents_user_kind", "user_id", "kind"),
    )

    id: Mapped[str] = mapped_column(
        String(32), primary_key=True, default=new_document_id,
    )
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)
    kind: Mapped[str] = mapped_column(String(20), nullable=False)
    data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
