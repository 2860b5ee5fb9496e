# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Request descriptor for event stream requests.

The descriptor is assembled once per ``sse()`` call and handed to the
transport factory. It is never mutated afterwards.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

EVENT_STREAM_MEDIA_TYPE = "text/event-stream"
JSON_CONTENT_TYPE = "application/json; charset=utf-8"


@dataclass(frozen=True)
class RequestDescriptor:
    """
    Immutable description of one streaming request.

    Attributes:
        url: Fully resolved request URL
        method: Upper-case HTTP method
        headers: Read-only header mapping; always carries Accept: text/event-stream
        body: Serialized request body, or None
        with_credentials: Whether cookies are sent
        debug: Whether the transport logs every dispatched event
        listen: Event types the router subscribes to
        timeout: Connect/write/pool timeout in seconds (None disables)
        cookies: Cookies to send when with_credentials is set
    """

    url: str
    method: str
    headers: Mapping[str, str]
    body: str | bytes | None = None
    with_credentials: bool = False
    debug: bool = False
    listen: tuple[str, ...] = ("message",)
    timeout: float | None = 30.0
    cookies: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None


__all__ = ["EVENT_STREAM_MEDIA_TYPE", "JSON_CONTENT_TYPE", "RequestDescriptor"]
