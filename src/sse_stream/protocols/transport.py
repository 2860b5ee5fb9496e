# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Protocol for event stream transports."""

from __future__ import annotations

from collections.abc import Callable
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from httpx_sse import ServerSentEvent


class ReadyState(IntEnum):
    """Transport lifecycle states, mirroring the browser EventSource values."""

    INITIALIZING = -1
    CONNECTING = 0
    OPEN = 1
    CLOSED = 2


EventHandler = Callable[["ServerSentEvent"], None]
ErrorHandler = Callable[[str], None]
LifecycleHandler = Callable[[], None]


@runtime_checkable
class TransportProtocol(Protocol):
    """
    Protocol for the streaming HTTP client behind an EventStream.

    The transport owns the connection and the wire-format parsing. It must
    not send anything until ``stream()`` is called, and must invoke handlers
    synchronously from its delivery context.
    """

    on_open: LifecycleHandler | None
    on_error: ErrorHandler | None
    on_close: LifecycleHandler | None

    @property
    def ready_state(self) -> ReadyState:
        """Current lifecycle state."""
        ...

    @property
    def response(self) -> Any:
        """Request handle for status/header inspection, once connected."""
        ...

    def add_event_listener(self, event: str, handler: EventHandler) -> None:
        """Register a handler for one named event type."""
        ...

    def stream(self) -> None:
        """Begin the request."""
        ...

    async def aclose(self) -> None:
        """Terminate the connection."""
        ...
