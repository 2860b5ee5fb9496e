# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Core types for sse-stream.

- SSEMessage: one normalized server-sent event
- RequestDescriptor: immutable description of a streaming request
"""

from .message import DEFAULT_EVENT, DONE_SENTINEL, SSEMessage
from .request import EVENT_STREAM_MEDIA_TYPE, JSON_CONTENT_TYPE, RequestDescriptor

__all__ = [
    "DEFAULT_EVENT",
    "DONE_SENTINEL",
    "EVENT_STREAM_MEDIA_TYPE",
    "JSON_CONTENT_TYPE",
    "RequestDescriptor",
    "SSEMessage",
]
