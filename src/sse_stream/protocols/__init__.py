# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Protocol definitions for sse-stream components.

Available protocols:
- TransportProtocol: Interface for the streaming HTTP client that parses
  the event stream and dispatches named events

Supporting types:
- ReadyState: Transport lifecycle states
"""

from .transport import (
    ErrorHandler,
    EventHandler,
    LifecycleHandler,
    ReadyState,
    TransportProtocol,
)

__all__ = [
    "ErrorHandler",
    "EventHandler",
    "LifecycleHandler",
    "ReadyState",
    "TransportProtocol",
]
