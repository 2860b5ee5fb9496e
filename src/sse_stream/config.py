# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Stream configuration for sse-stream.

This module provides the options accepted by ``sse()``. Options are
validated once, at construction, so malformed calls fail before any
connection is opened.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .exceptions import ConfigurationError
from .types.message import DEFAULT_EVENT

if TYPE_CHECKING:
    import httpx

    from .observability.metrics import StreamMetrics
    from .protocols.transport import TransportProtocol
    from .types.request import RequestDescriptor

    ConnectCallback = Callable[[httpx.Response], None]
    ErrorCallback = Callable[[str, httpx.Response | None], None]
    TransportFactory = Callable[[RequestDescriptor], TransportProtocol]


@dataclass
class SSEOptions:
    """
    Options for a single server-sent events request.

    Only ``url`` is required. Everything else has a default that matches
    a plain ``EventSource`` GET request listening for ``message`` events.
    """

    # === Request ===

    url: str
    """Request URL. Relative to ``base_url`` when one is given."""

    base_url: str | None = None
    """Base URL. Trailing slashes are stripped."""

    data: Any = None
    """Request body. Strings and bytes are sent as-is, anything else as JSON."""

    headers: Mapping[str, str] | None = None
    """Custom request headers. ``Accept`` is always forced to text/event-stream."""

    method: str | None = None
    """HTTP method. Defaults to POST when a body is present, GET otherwise."""

    with_credentials: bool = False
    """Send ``cookies`` with the request."""

    cookies: Mapping[str, str] | None = None
    """Cookies sent when ``with_credentials`` is enabled."""

    timeout: float | None = 30.0
    """Connect/write/pool timeout in seconds. Reads never time out."""

    debug: bool = False
    """Log every event the transport dispatches at DEBUG level."""

    # === Event handling ===

    listen: str | Sequence[str] | None = None
    """Event type, or list of event types, to subscribe to."""

    on_connect: ConnectCallback | None = None
    """Called once with the response when the connection opens."""

    on_error: ErrorCallback | None = None
    """Called with the error text and the response (if any) on transport errors."""

    # === Collaborators ===

    client: httpx.AsyncClient | None = None
    """Shared httpx client. When omitted each stream creates and closes its own."""

    transport_factory: TransportFactory | None = None
    """Builds the transport from the request descriptor. Defaults to EventSource."""

    metrics: StreamMetrics | None = None
    """Metrics sink for stream lifecycle counters."""

    prometheus: bool = False
    """Also export lifecycle metrics through the Prometheus singleton."""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not isinstance(self.url, str) or not self.url:
            raise ConfigurationError("url must be a non-empty string")
        if self.base_url is not None and not isinstance(self.base_url, str):
            raise ConfigurationError("base_url must be a string")
        if self.method is not None and not isinstance(self.method, str):
            raise ConfigurationError("method must be a string")
        if self.method is not None and not self.method.strip():
            raise ConfigurationError("method must not be empty")
        if self.timeout is not None and self.timeout < 0:
            raise ConfigurationError("timeout must be non-negative")
        for name in ("on_connect", "on_error", "transport_factory"):
            value = getattr(self, name)
            if value is not None and not callable(value):
                raise ConfigurationError(f"{name} must be callable")
        self.listen = self.event_types

    @property
    def event_types(self) -> tuple[str, ...]:
        """The listen set as a tuple, defaulting to ``("message",)``."""
        if self.listen is None:
            return (DEFAULT_EVENT,)
        if isinstance(self.listen, str):
            types: tuple[str, ...] = (self.listen,)
        else:
            types = tuple(self.listen)
        if not types:
            raise ConfigurationError("listen must name at least one event type")
        for event_type in types:
            if not isinstance(event_type, str) or not event_type:
                raise ConfigurationError(
                    f"event types must be non-empty strings, got {event_type!r}"
                )
        return types


__all__ = ["SSEOptions"]
