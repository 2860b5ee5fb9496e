# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Message type yielded by event streams.

This module defines the canonical record the event router builds for every
delivered server-sent event.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

DEFAULT_EVENT = "message"
"""Event type used by servers that do not send an ``event:`` field."""

DONE_SENTINEL = "[DONE]"
"""Payload that marks an explicit end of stream. Never yielded to callers."""


@dataclass(frozen=True)
class SSEMessage:
    """
    A single server-sent event, normalized for consumers.

    Attributes:
        data: Raw payload text, unparsed. Usually a JSON document for
            token streams.
        id: Event id reported by the server, or None if the event had none.
        last_id: Id of the most recently seen event when this one was
            received. This is the event's own id.
        event: The subscribed event type that produced this message.
    """

    data: str
    id: str | None = None
    last_id: str | None = None
    event: str = DEFAULT_EVENT

    @property
    def is_done(self) -> bool:
        """True if this message is the end-of-stream sentinel."""
        return self.data == DONE_SENTINEL

    def json(self) -> Any:
        """Decode ``data`` as JSON."""
        return json.loads(self.data)


__all__ = ["DEFAULT_EVENT", "DONE_SENTINEL", "SSEMessage"]
