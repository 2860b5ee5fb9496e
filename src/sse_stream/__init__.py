# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""sse-stream - Server-Sent Events as async iterators.

This library turns a streaming HTTP response (text/event-stream) into an
``async for`` sequence of typed messages, which is the natural way to
consume token-by-token model output.

Key Features:
    - Pull-based iteration over a push-based event transport
    - Ordered delivery across any number of subscribed event types
    - ``[DONE]`` sentinel handling
    - The connection is closed on every exit path, including early break
    - JSON request bodies and event-stream headers assembled for you
    - Optional in-process and Prometheus metrics

Quick Start:
    >>> from sse_stream import sse
    >>>
    >>> async def main():
    ...     async with sse(base_url="https://api.example.com",
    ...                    url="/v1/stream",
    ...                    data={"prompt": "Hi"}) as stream:
    ...         async for message in stream:
    ...             print(message.data)

Main Exports:
    - sse, SSEOptions: Entry point and its options
    - SSEMessage: Message type yielded by streams
    - EventStream: The async iterator returned by sse()
    - EventSource, ReadyState: Default httpx transport and its states
    - StreamMetrics: Lifecycle metrics

Note: Prometheus metrics require the 'prometheus' extra. Install with:
    pip install sse-stream[prometheus]

Version: 1.0.0
"""

__version__ = "1.0.0"

from .client import build_request, resolve_url, sse
from .config import SSEOptions
from .exceptions import (
    ConfigurationError,
    SSEStreamError,
    TransportError,
    TransportStateError,
)
from .observability import (
    PROMETHEUS_AVAILABLE,
    PrometheusStreamMetrics,
    StreamMetrics,
)
from .protocols import ReadyState, TransportProtocol
from .streaming import (
    BridgeQueue,
    EventRouter,
    EventStream,
    StreamContext,
    TerminationReason,
)
from .transport import EventSource
from .types import (
    DEFAULT_EVENT,
    DONE_SENTINEL,
    RequestDescriptor,
    SSEMessage,
)

__all__ = [
    "DEFAULT_EVENT",
    "DONE_SENTINEL",
    "PROMETHEUS_AVAILABLE",
    "BridgeQueue",
    # Exceptions
    "ConfigurationError",
    "EventRouter",
    # Transport
    "EventSource",
    # Streaming
    "EventStream",
    "PrometheusStreamMetrics",
    "ReadyState",
    "RequestDescriptor",
    "SSEMessage",
    "SSEOptions",
    "SSEStreamError",
    "StreamContext",
    # Observability
    "StreamMetrics",
    "TerminationReason",
    "TransportError",
    "TransportProtocol",
    "TransportStateError",
    "build_request",
    "resolve_url",
    "sse",
]
