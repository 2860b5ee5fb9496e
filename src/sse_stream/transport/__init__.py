# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Event stream transports.

Classes:
    EventSource: httpx + httpx-sse transport implementing TransportProtocol.
"""

from ..protocols.transport import ReadyState
from .event_source import EventSource

__all__ = ["EventSource", "ReadyState"]
