# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Bridge queue between push-based event delivery and pull-based consumption.

The transport delivers events from its own task by calling ``produce()``
synchronously. The stream driver pulls them with ``await consume()``. At
any moment the queue holds either buffered messages or a single pending
waiter, never both:

- produce() with a waiter pending resolves the waiter directly
- produce() with no waiter appends to the buffer
- consume() with a non-empty buffer pops without suspending
- consume() with an empty buffer parks a waiter future and suspends

Delivery order is the order of ``produce()`` calls regardless of which
path each message took.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BridgeQueue(Generic[T]):
    """
    Unbounded FIFO with a single-slot waiter.

    There is exactly one consumer (the stream driver), so at most one
    waiter is ever registered.
    """

    __slots__ = ("_closed", "_pending", "_waiter")

    def __init__(self) -> None:
        self._pending: deque[T] = deque()
        self._waiter: asyncio.Future[T | None] | None = None
        self._closed = False

    def __len__(self) -> int:
        return len(self._pending)

    @property
    def closed(self) -> bool:
        """True once ``close()`` has been called."""
        return self._closed

    @property
    def has_waiter(self) -> bool:
        """True while a consumer is suspended in ``consume()``."""
        return self._waiter is not None and not self._waiter.done()

    def produce(self, item: T) -> None:
        """
        Hand ``item`` to the waiting consumer, or buffer it.

        Never suspends, so it is safe to call from a delivery callback.
        A waiter whose consumer was cancelled counts as absent; the item
        is buffered instead of being dropped.
        """
        waiter = self._waiter
        self._waiter = None
        if waiter is not None and not waiter.done():
            waiter.set_result(item)
        else:
            self._pending.append(item)

    async def consume(self) -> T | None:
        """
        Return the next item, suspending until one is produced.

        Returns:
            The oldest item, or None once the queue is closed and drained.
        """
        if self._pending:
            return self._pending.popleft()
        if self._closed:
            return None

        waiter: asyncio.Future[T | None] = asyncio.get_running_loop().create_future()
        self._waiter = waiter
        try:
            return await waiter
        finally:
            if self._waiter is waiter:
                self._waiter = None

    def close(self) -> None:
        """
        Mark the end of input and wake a suspended consumer with None.

        Items already buffered remain available to ``consume()``.
        """
        if self._closed:
            return
        self._closed = True
        waiter = self._waiter
        self._waiter = None
        if waiter is not None and not waiter.done():
            waiter.set_result(None)
        logger.debug(f"Bridge queue closed with {len(self._pending)} buffered item(s)")


__all__ = ["BridgeQueue"]
