"""ORM Models - SQLAlchemy declarative models for persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Every row is partitioned by its owning user id

Design Decisions:
    - Folders and links share one schemaless `documents` table keyed by
      (user_id, kind); their field sets live in core/entities.py
    - All models imported here so Base.metadata is complete before create_all
"""

from linkvault.models.document import StoredDocument  # noqa: F401
from linkvault.models.user_profile import UserProfile  # noqa: F401
