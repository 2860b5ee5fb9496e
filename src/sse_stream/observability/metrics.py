# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Stream metrics for sse-stream.

This module provides:
1. StreamMetrics - Dataclass counting stream lifecycle events in-process
2. PrometheusStreamMetrics - Optional Prometheus-style metrics for observability

The StreamMetrics class provides observability into:
- How many streams were started
- How each stream ended (sentinel, transport closed, abandoned)
- Transport errors reported through the error callback
- Messages delivered, overall and per event type

Usage:
    metrics = StreamMetrics()

    async for message in sse(base_url=API_URL, url="/v1/chat", data=payload, metrics=metrics):
        ...

    stats = metrics.get_stats()

Important Notes on Event Types:
    The per-event tracking dictionary is keyed by the subscribed event type,
    which is a small categorical set in practice. If a server uses many
    distinct event names, set max_tracked_events to enable LRU eviction.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ..types.termination import TerminationReason

logger = logging.getLogger(__name__)

# Default maximum tracked event types (0 = unlimited)
DEFAULT_MAX_TRACKED_EVENTS = 0

# Type declarations for optional prometheus_client imports
if TYPE_CHECKING:
    from prometheus_client import Counter as CounterType, Histogram as HistogramType
else:
    CounterType = object
    HistogramType = object

# Try to import prometheus_client for optional Prometheus metrics
try:
    from prometheus_client import Counter as _Counter, Histogram as _Histogram

    Counter: type[CounterType] | None = _Counter
    Histogram: type[HistogramType] | None = _Histogram
    PROMETHEUS_AVAILABLE = True
except ImportError:
    Counter = None
    Histogram = None
    PROMETHEUS_AVAILABLE = False


@dataclass
class StreamMetrics:
    """
    In-process counters for event stream lifecycles.

    Thread Safety:
        Simple counter increments use Python's GIL for atomicity.
        Per-event dictionary updates use a threading.Lock so that one
        StreamMetrics can be shared by streams running on different loops.

    Example:
        >>> metrics = StreamMetrics()
        >>> metrics.record_start()
        >>> metrics.record_message("message")
        >>> metrics.record_termination(TerminationReason.SENTINEL)
        >>> metrics.get_completion_rate()
        1.0
    """

    # Stream lifecycle counters
    streams_started: int = 0
    streams_completed: int = 0  # Ended on the [DONE] sentinel
    streams_closed: int = 0  # Transport closed and queue drained
    streams_abandoned: int = 0  # Consumer stopped pulling

    # Traffic
    messages_received: int = 0
    transport_errors: int = 0

    _per_event_messages: OrderedDict[str, int] = field(
        default_factory=OrderedDict, repr=False
    )

    max_tracked_events: int = field(default=DEFAULT_MAX_TRACKED_EVENTS, repr=False)

    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def streams_finished(self) -> int:
        """Streams that have ended for any reason."""
        return self.streams_completed + self.streams_closed + self.streams_abandoned

    def get_completion_rate(self) -> float:
        """
        Proportion of finished streams that ended without being abandoned.

        Returns:
            A float between 0.0 and 1.0. Returns 1.0 if no stream has
            finished yet (optimistic default).
        """
        finished = self.streams_finished
        if finished == 0:
            return 1.0
        return (self.streams_completed + self.streams_closed) / finished

    def record_start(self) -> None:
        """Record a stream issuing its request."""
        self.streams_started += 1

    def record_message(self, event: str) -> None:
        """Record one message yielded to a consumer."""
        self.messages_received += 1
        self._update_per_event_counter(event, 1)

    def record_error(self) -> None:
        """Record a transport error notification."""
        self.transport_errors += 1

    def record_termination(self, reason: TerminationReason) -> None:
        """Record how a stream ended."""
        if reason is TerminationReason.SENTINEL:
            self.streams_completed += 1
        elif reason is TerminationReason.CLOSED:
            self.streams_closed += 1
        else:
            self.streams_abandoned += 1

    def get_stats(self) -> dict[str, Any]:
        """
        Return metrics as a dictionary for JSON serialization.

        Returns:
            Dictionary containing all counters and derived rates.
        """
        with self._lock:
            per_event = dict(self._per_event_messages)
        return {
            "streams_started": self.streams_started,
            "streams_completed": self.streams_completed,
            "streams_closed": self.streams_closed,
            "streams_abandoned": self.streams_abandoned,
            "completion_rate": self.get_completion_rate(),
            "messages_received": self.messages_received,
            "transport_errors": self.transport_errors,
            "per_event_messages": per_event,
        }

    def reset(self) -> None:
        """Reset all metrics to zero."""
        self.streams_started = 0
        self.streams_completed = 0
        self.streams_closed = 0
        self.streams_abandoned = 0
        self.messages_received = 0
        self.transport_errors = 0

        with self._lock:
            self._per_event_messages.clear()

    def _update_per_event_counter(self, event: str, increment: int) -> None:
        """Thread-safe per-event increment with optional LRU eviction."""
        with self._lock:
            self._per_event_messages[event] = (
                self._per_event_messages.get(event, 0) + increment
            )
            self._per_event_messages.move_to_end(event)

            if self.max_tracked_events > 0:
                while len(self._per_event_messages) > self.max_tracked_events:
                    oldest_key, _ = self._per_event_messages.popitem(last=False)
                    logger.debug(f"LRU evicted per-event metrics for: {oldest_key}")


class PrometheusStreamMetrics:
    """
    Optional Prometheus metrics for event streams.

    Only instantiated if prometheus_client is available.

    Metrics:
        - sse_stream_started_total: Counter of streams that issued a request
        - sse_stream_messages_total: Counter of yielded messages by event type
        - sse_stream_transport_errors_total: Counter of transport errors
        - sse_stream_terminations_total: Counter of finished streams by reason
        - sse_stream_duration_seconds: Histogram of stream durations by reason
    """

    def __init__(self, registry: Any | None = None) -> None:
        """
        Initialize Prometheus stream metrics.

        Args:
            registry: Optional CollectorRegistry. If None, uses the default registry.

        Raises:
            ImportError: If prometheus_client is not available.
        """
        if not PROMETHEUS_AVAILABLE or Counter is None or Histogram is None:
            raise ImportError(
                "prometheus_client is not available. "
                "Install with: pip install sse-stream[prometheus]"
            )

        self.streams_started = Counter(
            "sse_stream_started_total",
            "Event streams that issued their request",
            registry=registry,
        )

        self.messages = Counter(
            "sse_stream_messages_total",
            "Messages yielded to consumers",
            ["event"],
            registry=registry,
        )

        self.transport_errors = Counter(
            "sse_stream_transport_errors_total",
            "Transport errors reported through the error callback",
            registry=registry,
        )

        self.terminations = Counter(
            "sse_stream_terminations_total",
            "Finished event streams",
            ["reason"],  # Values: sentinel, closed, abandoned
            registry=registry,
        )

        self.duration_seconds = Histogram(
            "sse_stream_duration_seconds",
            "Duration of event streams from first pull to cleanup",
            ["reason"],
            buckets=[0.1, 0.5, 1, 5, 10, 30, 60, 120, 300, 600],
            registry=registry,
        )

        logger.info("Prometheus stream metrics initialized")

    def observe_start(self) -> None:
        """Observe a stream issuing its request."""
        self.streams_started.inc()

    def observe_message(self, event: str) -> None:
        """Observe one yielded message."""
        self.messages.labels(event=event).inc()

    def observe_error(self) -> None:
        """Observe a transport error."""
        self.transport_errors.inc()

    def observe_termination(
        self,
        reason: TerminationReason,
        duration_seconds: float | None = None,
    ) -> None:
        """
        Observe a finished stream.

        Args:
            reason: Why the stream ended
            duration_seconds: Time from first pull to cleanup, if it was started
        """
        self.terminations.labels(reason=reason.value).inc()
        if duration_seconds is not None:
            self.duration_seconds.labels(reason=reason.value).observe(
                duration_seconds
            )


# Module-level singleton for Prometheus metrics (optional)
_prometheus_stream_metrics: PrometheusStreamMetrics | None = None
_prometheus_lock = threading.Lock()


def get_prometheus_stream_metrics() -> PrometheusStreamMetrics | None:
    """
    Get or create the Prometheus stream metrics singleton.

    Uses double-checked locking so concurrent first calls cannot register
    the same collectors twice.

    Returns:
        PrometheusStreamMetrics instance if prometheus_client is available,
        None otherwise.
    """
    global _prometheus_stream_metrics

    if not PROMETHEUS_AVAILABLE:
        return None

    if _prometheus_stream_metrics is None:
        with _prometheus_lock:
            if _prometheus_stream_metrics is None:
                try:
                    _prometheus_stream_metrics = PrometheusStreamMetrics()
                except Exception as e:
                    logger.warning(f"Failed to initialize Prometheus stream metrics: {e}")
                    return None

    return _prometheus_stream_metrics


def reset_prometheus_stream_metrics() -> None:
    """Reset the Prometheus stream metrics singleton (mainly for testing)."""
    global _prometheus_stream_metrics
    _prometheus_stream_metrics = None


__all__ = [
    "PROMETHEUS_AVAILABLE",
    "PrometheusStreamMetrics",
    "StreamMetrics",
    "get_prometheus_stream_metrics",
    "reset_prometheus_stream_metrics",
]
