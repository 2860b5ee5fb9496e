# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Per-stream bookkeeping.

This module provides the StreamContext dataclass that tracks one event
stream from construction to cleanup. The driver updates it as messages
arrive and reads it when recording metrics.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field

from ..types.termination import TerminationReason


@dataclass
class StreamContext:
    """
    Context for tracking one event stream through its lifecycle.

    Attributes:
        url: The resolved request URL
        method: The HTTP method
        request_id: Unique identifier for log correlation
        created_at: Timestamp when the stream object was created

    Runtime tracking attributes:
        started_at: Timestamp of the first pull (transport start)
        connected_at: Timestamp when the connection opened
        message_count: Messages yielded to the consumer
        error_count: Transport errors reported
        last_message_at: Timestamp of the last yielded message
        last_event_id: Id of the last yielded message that carried one
        termination: Why the stream ended, once it has
    """

    url: str
    method: str
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    created_at: float = field(default_factory=time.time)

    started_at: float | None = field(default=None, repr=False)
    connected_at: float | None = field(default=None, repr=False)
    message_count: int = field(default=0, repr=False)
    error_count: int = field(default=0, repr=False)
    last_message_at: float | None = field(default=None, repr=False)
    last_event_id: str | None = field(default=None, repr=False)
    termination: TerminationReason | None = field(default=None, repr=False)

    def record_start(self) -> None:
        """Record the first pull."""
        self.started_at = time.time()

    def record_connected(self) -> None:
        """Record the connection opening."""
        self.connected_at = time.time()

    def record_message(self, event_id: str | None = None) -> None:
        """Record a message handed to the consumer."""
        self.last_message_at = time.time()
        self.message_count += 1
        if event_id is not None:
            self.last_event_id = event_id

    def record_error(self) -> None:
        """Record a transport error notification."""
        self.error_count += 1

    @property
    def duration_seconds(self) -> float | None:
        """
        Time since the stream was started, or None if it never was.
        """
        if self.started_at is None:
            return None
        return time.time() - self.started_at


__all__ = ["StreamContext", "TerminationReason"]
