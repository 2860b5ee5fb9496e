# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Stream termination reasons."""

from enum import Enum


class TerminationReason(Enum):
    """Why an event stream stopped producing messages.

    - SENTINEL: the server sent the ``[DONE]`` marker
    - CLOSED: the transport closed and every buffered message was drained
    - ABANDONED: the consumer stopped pulling (break + aclose, cancellation,
      an exception in the consumer, or garbage collection)
    """

    SENTINEL = "sentinel"
    CLOSED = "closed"
    ABANDONED = "abandoned"


__all__ = ["TerminationReason"]
