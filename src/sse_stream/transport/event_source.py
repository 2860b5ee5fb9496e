# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
httpx-based event stream transport.

EventSource opens a streaming HTTP request with httpx, parses the body
with httpx-sse, and dispatches each event to the listeners registered for
its type. It follows the browser EventSource lifecycle:

    INITIALIZING --stream()--> CONNECTING --2xx--> OPEN --eof/error--> CLOSED

Unlike the browser API it accepts any method and body, and it never starts
on its own: nothing is sent until ``stream()`` is called from a running
event loop. Delivery happens in a single background task and every handler
is invoked synchronously from that task.

Failures (connection errors, non-2xx statuses, malformed content types)
are logged and reported through ``on_error``. They are never raised to the
code that started the stream.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import Mapping
from typing import TYPE_CHECKING

import httpx
from httpx_sse import EventSource as SSEParser, ServerSentEvent

from ..exceptions import TransportError, TransportStateError
from ..protocols.transport import (
    ErrorHandler,
    EventHandler,
    LifecycleHandler,
    ReadyState,
)
from ..types.message import DEFAULT_EVENT

if TYPE_CHECKING:
    from ..types.request import RequestDescriptor

logger = logging.getLogger(__name__)


class EventSource:
    """
    Streaming HTTP client that dispatches server-sent events by type.

    Listeners receive each event with its own id: an event without an
    ``id:`` field has ``id == ""`` even after an earlier event set one.
    The carried-forward value is available as ``last_event_id``.

    Usage:
        source = EventSource("https://api.example.com/v1/stream", method="POST",
                             body='{"prompt": "hi"}')
        source.add_event_listener("message", lambda sse: print(sse.data))
        source.on_error = lambda text: print("error:", text)
        source.stream()
        ...
        await source.aclose()
    """

    INITIALIZING = ReadyState.INITIALIZING
    CONNECTING = ReadyState.CONNECTING
    OPEN = ReadyState.OPEN
    CLOSED = ReadyState.CLOSED

    def __init__(
        self,
        url: str,
        *,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        body: str | bytes | None = None,
        with_credentials: bool = False,
        cookies: Mapping[str, str] | None = None,
        debug: bool = False,
        timeout: float | None = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the transport without starting it.

        Args:
            url: Fully resolved request URL
            method: HTTP method
            headers: Request headers
            body: Request body, sent as-is
            with_credentials: Send ``cookies`` with the request
            cookies: Cookies to send when with_credentials is set
            debug: Log every dispatched event at DEBUG level
            timeout: Connect/write/pool timeout in seconds, used only when
                the transport creates its own client
            client: Shared httpx client. The transport never closes it.
        """
        self.url = url
        self.method = method
        self.headers = dict(headers or {})
        self.body = body
        self.with_credentials = with_credentials
        self.cookies = dict(cookies or {})
        self.debug = debug
        self.timeout = timeout

        self.on_open: LifecycleHandler | None = None
        self.on_error: ErrorHandler | None = None
        self.on_close: LifecycleHandler | None = None

        self._client = client
        self._listeners: defaultdict[str, list[EventHandler]] = defaultdict(list)
        self._ready_state = ReadyState.INITIALIZING
        self._response: httpx.Response | None = None
        self._last_event_id = ""
        self._task: asyncio.Task[None] | None = None

    @classmethod
    def from_descriptor(
        cls,
        descriptor: RequestDescriptor,
        client: httpx.AsyncClient | None = None,
    ) -> EventSource:
        """Build a transport from a request descriptor."""
        return cls(
            descriptor.url,
            method=descriptor.method,
            headers=descriptor.headers,
            body=descriptor.body,
            with_credentials=descriptor.with_credentials,
            cookies=descriptor.cookies,
            debug=descriptor.debug,
            timeout=descriptor.timeout,
            client=client,
        )

    @property
    def ready_state(self) -> ReadyState:
        """Current lifecycle state."""
        return self._ready_state

    @property
    def response(self) -> httpx.Response | None:
        """The streaming response, available from the moment headers arrive."""
        return self._response

    @property
    def last_event_id(self) -> str:
        """The stream's last-event-id, carried forward across events."""
        return self._last_event_id

    def add_event_listener(self, event: str, handler: EventHandler) -> None:
        """Register ``handler`` for events named ``event``."""
        self._listeners[event].append(handler)

    def remove_event_listener(self, event: str, handler: EventHandler) -> None:
        """Remove a previously registered handler. Unknown handlers are ignored."""
        handlers = self._listeners.get(event)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def stream(self) -> None:
        """
        Begin the request.

        Must be called from a running event loop. The request itself is
        issued by a background task, so this returns immediately.

        Raises:
            TransportStateError: If the transport was already started or closed
        """
        if self._task is not None or self._ready_state is ReadyState.CLOSED:
            raise TransportStateError(
                f"EventSource for {self.url} cannot be started in state "
                f"{self._ready_state.name}"
            )
        self._ready_state = ReadyState.CONNECTING
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name=f"sse-stream {self.method} {self.url}"
        )

    async def aclose(self) -> None:
        """
        Terminate the connection.

        Marks the transport closed, cancels the delivery task and waits
        for it to release the connection. Safe to call more than once.
        ``on_close`` is not invoked for caller-initiated closes.
        """
        self._ready_state = ReadyState.CLOSED
        task = self._task
        if task is None or task.done() or task is asyncio.current_task():
            return
        task.cancel()
        # asyncio.wait does not re-raise the task's CancelledError
        await asyncio.wait([task])
        logger.debug(f"EventSource for {self.url} closed by caller")

    async def _run(self) -> None:
        """Delivery task: issue the request and dispatch events until EOF."""
        try:
            if self._client is not None:
                await self._consume(self._client)
            else:
                timeout = httpx.Timeout(self.timeout, read=None)
                async with httpx.AsyncClient(timeout=timeout) as client:
                    await self._consume(client)
        except Exception as e:
            logger.warning(
                f"Event stream {self.method} {self.url} failed: "
                f"{type(e).__name__}: {e}"
            )
            self._dispatch_error(str(e) or type(e).__name__)
        finally:
            self._mark_closed()

    async def _consume(self, client: httpx.AsyncClient) -> None:
        async with client.stream(
            self.method,
            self.url,
            headers=self._request_headers(),
            content=self.body,
        ) as response:
            self._response = response

            if not response.is_success:
                await response.aread()
                error = TransportError(
                    response.text or response.reason_phrase,
                    status_code=response.status_code,
                    response=response,
                )
                logger.warning(
                    f"Event stream {self.method} {self.url} rejected with "
                    f"status {response.status_code}"
                )
                self._dispatch_error(str(error))
                return

            self._ready_state = ReadyState.OPEN
            logger.debug(
                f"Event stream {self.method} {self.url} open "
                f"(status {response.status_code})"
            )
            if self.on_open is not None:
                self.on_open()

            async for sse in SSEParser(response).aiter_sse():
                self._dispatch_event(sse)

    def _request_headers(self) -> dict[str, str]:
        headers = dict(self.headers)
        if self.with_credentials and self.cookies:
            headers["Cookie"] = "; ".join(
                f"{name}={value}" for name, value in self.cookies.items()
            )
        return headers

    def _dispatch_event(self, sse: ServerSentEvent) -> None:
        event_type = sse.event or DEFAULT_EVENT
        # The parser repeats the last id on events without an id field, so only
        # a changed id belongs to this event. A repeated identical id reads as absent.
        own_id = sse.id if sse.id != self._last_event_id else ""
        self._last_event_id = sse.id
        if own_id != sse.id:
            sse = ServerSentEvent(
                event=sse.event, data=sse.data, id=own_id, retry=sse.retry
            )
        if self.debug:
            logger.debug(
                f"Event stream {self.url} dispatching {event_type!r} "
                f"(id={sse.id!r}): {sse.data!r}"
            )
        for handler in list(self._listeners.get(event_type, ())):
            handler(sse)

    def _dispatch_error(self, text: str) -> None:
        if self.on_error is not None:
            self.on_error(text)

    def _mark_closed(self) -> None:
        if self._ready_state is ReadyState.CLOSED:
            return
        self._ready_state = ReadyState.CLOSED
        logger.debug(f"Event stream {self.method} {self.url} closed")
        if self.on_close is not None:
            self.on_close()


__all__ = ["EventSource"]
