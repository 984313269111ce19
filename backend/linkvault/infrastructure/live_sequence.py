"""Live Sequence - lazy, unbounded, cancelable async sequence of emissions.

Invariants:
    - Emissions are delivered in push order
    - unsubscribe() is idempotent; the on_close callback runs exactly once
    - After unsubscribe() iteration ends (StopAsyncIteration), even if
      emissions are still buffered
    - push() after unsubscribe() is silently dropped

Design Decisions:
    - asyncio.Queue channel with an explicit unsubscribe handle instead of
      ambient listener callbacks
    - Generic over the emission type: used for store snapshots and identity changes
"""

import asyncio
import logging
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_CLOSED = object()


class LiveSequence(Generic[T]):
    """Buffered async iterator with an idempotent unsubscribe."""

    def __init__(self, name: str, on_close: Callable[[], None] | None = None):
        self.name = name
        self._queue: asyncio.Queue = asyncio.Queue()
        self._on_close = on_close
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def push(self, item: T) -> None:
        if self._closed:
            return
        self._queue.put_nowait(item)

    def unsubscribe(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)
        if self._on_close is not None:
            self._on_close()
        logger.debug("Live sequence closed: %s", self.name)

    def __aiter__(self) -> "LiveSequence[T]":
        return self

    async def __anext__(self) -> T:
        if self._closed:
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED or self._closed:
            raise StopAsyncIteration
        return item
