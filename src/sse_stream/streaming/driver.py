# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Pull-based event stream over a push-based transport.

This module provides the EventStream class, which owns one streaming
request end to end and exposes it as an ``async for`` sequence of
SSEMessage records.

Lifecycle:
1. Construction wires transport -> router -> bridge queue. Nothing is sent.
2. The first ``__anext__`` starts the transport.
3. Messages are pulled from the bridge queue in delivery order. A message
   whose data is ``[DONE]`` ends the stream and is not yielded.
4. The loop keeps draining buffered messages after the transport closes.
5. On every exit path (sentinel, transport closed, ``aclose()``, ``async
   with`` exit, cancellation, garbage collection) the transport is closed
   exactly once if it is not already closed.

Transport errors never propagate into the loop. They are passed to the
``on_error`` callback and the stream keeps going until the transport closes
or the consumer stops pulling.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, AsyncIterator, Callable
from typing import TYPE_CHECKING, Any

from ..protocols.transport import ReadyState, TransportProtocol
from ..transport.event_source import EventSource
from ..types.message import SSEMessage
from ..types.termination import TerminationReason
from .context import StreamContext
from .queue import BridgeQueue
from .router import EventRouter

if TYPE_CHECKING:
    import httpx

    from ..observability.metrics import PrometheusStreamMetrics, StreamMetrics
    from ..types.request import RequestDescriptor

logger = logging.getLogger(__name__)


class EventStream(AsyncIterator[SSEMessage]):
    """
    Async iterator of server-sent events for one request.

    Usage:
        async with sse(base_url=API_URL, url="/v1/chat/completions", data=payload) as stream:
            async for message in stream:
                print(message.data)
        print(stream.response.status_code)

    A bare ``async for`` works too. Breaking out of it early leaves the
    connection open until the iterator is garbage collected, so prefer
    ``async with`` (or ``contextlib.aclosing``) when you may stop early.

    The request handle (``httpx.Response`` for the default transport) is
    available as ``response`` once the connection opens and after the
    stream finishes.
    """

    __slots__ = (
        "__weakref__",
        "_context",
        "_descriptor",
        "_gen",
        "_metrics",
        "_on_connect",
        "_on_error",
        "_prometheus",
        "_queue",
        "_router",
        "_transport",
    )

    def __init__(
        self,
        descriptor: RequestDescriptor,
        *,
        transport: TransportProtocol | None = None,
        on_connect: Callable[[Any], None] | None = None,
        on_error: Callable[[str, Any], None] | None = None,
        metrics: StreamMetrics | None = None,
        prometheus: PrometheusStreamMetrics | None = None,
    ) -> None:
        """
        Wire up the stream without starting it.

        Args:
            descriptor: The request to issue
            transport: Transport to use. Defaults to an EventSource built
                from the descriptor.
            on_connect: Called once with the response when the connection opens
            on_error: Called with the error text and the response (or None)
                on every transport error
            metrics: In-process metrics sink
            prometheus: Prometheus metrics sink
        """
        self._descriptor = descriptor
        self._transport: TransportProtocol = (
            transport if transport is not None else EventSource.from_descriptor(descriptor)
        )
        self._on_connect = on_connect
        self._on_error = on_error
        self._metrics = metrics
        self._prometheus = prometheus
        self._context = StreamContext(url=descriptor.url, method=descriptor.method)

        self._queue: BridgeQueue[SSEMessage] = BridgeQueue()
        self._router = EventRouter(self._transport, descriptor.listen, self._queue.produce)
        self._transport.on_open = self._handle_open
        self._transport.on_error = self._handle_error
        self._transport.on_close = self._queue.close

        self._gen: AsyncGenerator[SSEMessage, None] = self._drive()

    def __aiter__(self) -> EventStream:
        """Return self as the async iterator."""
        return self

    async def __anext__(self) -> SSEMessage:
        return await self._gen.__anext__()

    async def aclose(self) -> None:
        """
        Stop the stream and close the transport.

        Idempotent. Calling it before the first pull never starts the
        transport.
        """
        await self._gen.aclose()

    async def __aenter__(self) -> EventStream:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    @property
    def response(self) -> httpx.Response | None:
        """The request handle, once the transport has one."""
        return self._transport.response

    @property
    def transport(self) -> TransportProtocol:
        return self._transport

    @property
    def descriptor(self) -> RequestDescriptor:
        return self._descriptor

    @property
    def context(self) -> StreamContext:
        """
        Per-stream bookkeeping.

        Useful for debugging and testing.
        """
        return self._context

    async def _drive(self) -> AsyncGenerator[SSEMessage, None]:
        transport = self._transport
        queue = self._queue
        reason = TerminationReason.ABANDONED

        self._context.record_start()
        if self._metrics is not None:
            self._metrics.record_start()
        if self._prometheus is not None:
            self._prometheus.observe_start()
        logger.debug(
            f"Stream {self._context.request_id} starting "
            f"{self._descriptor.method} {self._descriptor.url} "
            f"listening for {', '.join(self._descriptor.listen)}"
        )

        try:
            transport.stream()
            while queue or transport.ready_state is not ReadyState.CLOSED:
                message = await queue.consume()
                if message is None:
                    # Transport closed with nothing left to drain
                    reason = TerminationReason.CLOSED
                    break
                if message.is_done:
                    reason = TerminationReason.SENTINEL
                    break
                self._record_message(message)
                yield message
            else:
                reason = TerminationReason.CLOSED
        finally:
            self._context.termination = reason
            try:
                if transport.ready_state is not ReadyState.CLOSED:
                    await transport.aclose()
            finally:
                self._record_termination(reason)

    def _record_message(self, message: SSEMessage) -> None:
        self._context.record_message(message.id)
        if self._metrics is not None:
            self._metrics.record_message(message.event)
        if self._prometheus is not None:
            self._prometheus.observe_message(message.event)

    def _record_termination(self, reason: TerminationReason) -> None:
        duration = self._context.duration_seconds
        duration_str = f"{duration:.2f}s" if duration is not None else "N/A"
        logger.debug(
            f"Stream {self._context.request_id} ended ({reason.value}) after "
            f"{self._context.message_count} message(s) in {duration_str}"
        )
        if self._metrics is not None:
            self._metrics.record_termination(reason)
        if self._prometheus is not None:
            try:
                self._prometheus.observe_termination(reason, duration)
            except Exception as e:
                logger.debug(f"Prometheus termination metrics failed: {e}")

    def _handle_open(self) -> None:
        self._context.record_connected()
        if self._on_connect is None:
            return
        try:
            self._on_connect(self._transport.response)
        except Exception as e:
            logger.warning(
                f"on_connect callback failed for stream {self._context.request_id}: "
                f"{type(e).__name__}: {e}"
            )

    def _handle_error(self, error: str) -> None:
        self._context.record_error()
        if self._metrics is not None:
            self._metrics.record_error()
        if self._prometheus is not None:
            self._prometheus.observe_error()
        logger.debug(f"Stream {self._context.request_id} transport error: {error}")
        if self._on_error is None:
            return
        try:
            self._on_error(error, self._transport.response)
        except Exception as e:
            logger.warning(
                f"on_error callback failed for stream {self._context.request_id}: "
                f"{type(e).__name__}: {e}"
            )


__all__ = ["EventStream"]
