"""Identity Provider - in-process source of the current signed-in user.

Invariants:
    - current is None when signed out
    - watch() yields the current value first, then every change, in order
    - Only uid is consumed downstream as the partition key; display fields
      changing for the same uid still emit (consumers ignore same-uid updates)

Design Decisions:
    - Authentication itself (passwords, OAuth) happens elsewhere; this class
      only records the outcome and fans it out through LiveSequence channels
"""

import logging
from dataclasses import dataclass, replace

from linkvault.infrastructure.live_sequence import LiveSequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """Signed-in user as reported by the auth provider."""
    uid: str
    email: str | None = None
    display_name: str | None = None
    photo_url: str | None = None


class IdentityProvider:
    """Holds the current Identity and broadcasts changes to watchers."""

    def __init__(self, initial: Identity | None = None):
        self._current = initial
        self._watchers: list[LiveSequence[Identity | None]] = []

    @property
    def current(self) -> Identity | None:
        return self._current

    @property
    def current_user_id(self) -> str | None:
        return self._current.uid if self._current else None

    def watch(self) -> LiveSequence[Identity | None]:
        sequence: LiveSequence[Identity | None] = LiveSequence(
            "identity", on_close=lambda: self._watchers.remove(sequence),
        )
        self._watchers.append(sequence)
        sequence.push(self._current)
        return sequence

    def sign_in(self, identity: Identity) -> None:
        logger.info("Signed in", extra={"user_id": identity.uid})
        self._emit(identity)

    def sign_out(self) -> None:
        if self._current is None:
            return
        logger.info("Signed out", extra={"user_id": self._current.uid})
        self._emit(None)

    def update_display_name(self, name: str) -> Identity | None:
        if self._current is None:
            return None
        self._emit(replace(self._current, display_name=name))
        return self._current

    def _emit(self, identity: Identity | None) -> None:
        self._current = identity
        for watcher in list(self._watchers):
            watcher.push(identity)
