"""
Shared fixtures for sse-stream unit tests.

FakeTransport implements TransportProtocol in memory so tests can decide
exactly when events are delivered relative to the consumer's pulls.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from types import MappingProxyType
from typing import Any
from unittest.mock import Mock

import pytest
from httpx_sse import ServerSentEvent

from sse_stream.protocols.transport import ReadyState
from sse_stream.types.request import RequestDescriptor


class FakeTransport:
    """
    In-memory transport.

    ``script`` is a list of steps played in a single loop callback right
    after ``stream()``:
        ("open",)
        ("event", data)  or  ("event", data, event_type)  or  ("event", data, event_type, id)
        ("error", text)
        ("close",)
    Tests can also call ``emit``/``fail``/``finish`` directly.
    """

    def __init__(self, script: list[tuple[Any, ...]] | None = None) -> None:
        self.script = list(script or [])
        self.on_open = None
        self.on_error = None
        self.on_close = None
        self.listeners: defaultdict[str, list[Any]] = defaultdict(list)
        self.stream_calls = 0
        self.close_calls = 0
        self._ready_state = ReadyState.INITIALIZING
        self._response: Any = None

    @property
    def ready_state(self) -> ReadyState:
        return self._ready_state

    @property
    def response(self) -> Any:
        return self._response

    def add_event_listener(self, event: str, handler: Any) -> None:
        self.listeners[event].append(handler)

    def stream(self) -> None:
        self.stream_calls += 1
        self._ready_state = ReadyState.CONNECTING
        if self.script:
            asyncio.get_running_loop().call_soon(self._play)

    async def aclose(self) -> None:
        self.close_calls += 1
        self._ready_state = ReadyState.CLOSED

    def _play(self) -> None:
        for step in self.script:
            kind, *args = step
            if kind == "open":
                self.open()
            elif kind == "event":
                self.emit(*args)
            elif kind == "error":
                self.fail(*args)
            elif kind == "close":
                self.finish()
            else:
                raise ValueError(f"unknown step {kind!r}")

    def open(self, response: Any = None) -> None:
        self._response = response if response is not None else Mock(status_code=200)
        self._ready_state = ReadyState.OPEN
        if self.on_open is not None:
            self.on_open()

    def emit(self, data: str, event: str = "message", id: str = "") -> None:
        sse = ServerSentEvent(event=event, data=data, id=id)
        for handler in list(self.listeners.get(event, ())):
            handler(sse)

    def fail(self, text: str) -> None:
        if self.on_error is not None:
            self.on_error(text)

    def finish(self) -> None:
        if self._ready_state is ReadyState.CLOSED:
            return
        self._ready_state = ReadyState.CLOSED
        if self.on_close is not None:
            self.on_close()


def make_descriptor(
    listen: tuple[str, ...] = ("message",),
    url: str = "https://api.example.com/v1/stream",
) -> RequestDescriptor:
    """Build a minimal GET descriptor."""
    return RequestDescriptor(
        url=url,
        method="GET",
        headers=MappingProxyType({"Accept": "text/event-stream"}),
        listen=listen,
    )


@pytest.fixture
def descriptor() -> RequestDescriptor:
    """A GET descriptor listening for 'message' events."""
    return make_descriptor()


@pytest.fixture
def descriptor_factory():
    """Factory for descriptors with a custom listen set."""
    return make_descriptor


@pytest.fixture
def fake_transport_factory():
    """Factory for FakeTransport instances with an optional script."""

    def factory(script: list[tuple[Any, ...]] | None = None) -> FakeTransport:
        return FakeTransport(script)

    return factory
