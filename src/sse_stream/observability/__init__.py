# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Observability for sse-stream.

Classes:
    StreamMetrics: In-process counters for stream lifecycles.
    PrometheusStreamMetrics: Optional Prometheus counters and histograms.

Functions:
    get_prometheus_stream_metrics: Get or create the Prometheus metrics singleton.
    reset_prometheus_stream_metrics: Reset the Prometheus metrics singleton.

Constants:
    PROMETHEUS_AVAILABLE: Whether prometheus_client is available.
"""

from .metrics import (
    PROMETHEUS_AVAILABLE,
    PrometheusStreamMetrics,
    StreamMetrics,
    get_prometheus_stream_metrics,
    reset_prometheus_stream_metrics,
)

__all__ = [
    "PROMETHEUS_AVAILABLE",
    "PrometheusStreamMetrics",
    "StreamMetrics",
    "get_prometheus_stream_metrics",
    "reset_prometheus_stream_metrics",
]
