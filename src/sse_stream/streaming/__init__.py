# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Bridge between push-based event delivery and pull-based iteration.

Classes:
    EventRouter: Subscribes to the listen set on a transport and normalizes
        each delivered event into an SSEMessage.
    BridgeQueue: Unbounded FIFO with a single-slot waiter connecting the
        router (producer) to the driver (consumer).
    EventStream: Async iterator that starts the transport on first pull,
        applies the [DONE] sentinel, and closes the transport on every
        exit path.
    StreamContext: Per-stream bookkeeping used for logging and metrics.
"""

from ..types.termination import TerminationReason
from .context import StreamContext
from .driver import EventStream
from .queue import BridgeQueue
from .router import EventRouter

__all__ = [
    "BridgeQueue",
    "EventRouter",
    "EventStream",
    "StreamContext",
    "TerminationReason",
]
