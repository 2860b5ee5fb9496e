# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Event router: transport events in, SSEMessage records out."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from ..types.message import SSEMessage

if TYPE_CHECKING:
    from httpx_sse import ServerSentEvent

    from ..protocols.transport import TransportProtocol


class EventRouter:
    """
    Subscribes to every event type in the listen set and forwards one
    SSEMessage per delivered event to ``sink``.

    The router is a pure fan-in normalizer: it does not reorder, filter,
    or coalesce events.
    """

    def __init__(
        self,
        transport: TransportProtocol,
        event_types: Iterable[str],
        sink: Callable[[SSEMessage], None],
    ) -> None:
        self._sink = sink
        self.event_types = tuple(event_types)
        self.routed_count = 0
        for event_type in self.event_types:
            transport.add_event_listener(event_type, self._handler_for(event_type))

    def _handler_for(self, event_type: str) -> Callable[[ServerSentEvent], None]:
        def handle(sse: ServerSentEvent) -> None:
            self.route(sse, event_type)

        return handle

    def route(self, sse: ServerSentEvent, event_type: str) -> SSEMessage:
        """Normalize one transport event and hand it to the sink."""
        event_id = sse.id or None
        # last_id mirrors the event's own id
        message = SSEMessage(
            data=sse.data,
            id=event_id,
            last_id=event_id,
            event=event_type,
        )
        self.routed_count += 1
        self._sink(message)
        return message


__all__ = ["EventRouter"]
