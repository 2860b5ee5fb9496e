"""
Unit tests for the httpx-based EventSource transport.

Requests are served by httpx.MockTransport, so no network is involved.

Tests cover:
- Lifecycle states and callbacks
- Dispatch by event type
- Error reporting for non-2xx statuses, bad content types and
  connection failures
- Caller-initiated close of a stream that never ends
- Request headers, body and cookies
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from unittest.mock import Mock

import httpx
import pytest

from sse_stream.exceptions import TransportStateError
from sse_stream.protocols.transport import ReadyState
from sse_stream.transport.event_source import EventSource

URL = "https://api.example.com/v1/stream"
SSE_HEADERS = {"content-type": "text/event-stream"}


def sse_response(body: bytes, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, headers=SSE_HEADERS, content=body)


def mock_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


async def run_until_closed(source: EventSource) -> None:
    """Start ``source`` and wait for it to close on its own."""
    closed = asyncio.Event()
    source.on_close = closed.set
    source.stream()
    await asyncio.wait_for(closed.wait(), timeout=5.0)


class NeverEndingStream(httpx.AsyncByteStream):
    """Response body that sends one event and then stalls forever."""

    def __init__(self) -> None:
        self.closed = False

    async def __aiter__(self) -> AsyncIterator[bytes]:
        yield b"data: first\n\n"
        await asyncio.Event().wait()

    async def aclose(self) -> None:
        self.closed = True


class TestEventSourceLifecycle:
    """Tests for ready states and lifecycle callbacks."""

    def test_initial_state(self) -> None:
        """A new transport is idle and has no response."""
        source = EventSource(URL)

        assert source.ready_state is ReadyState.INITIALIZING
        assert source.response is None

    @pytest.mark.asyncio
    async def test_successful_stream(self) -> None:
        """2xx opens the transport, dispatches events, then closes it."""
        async with mock_client(lambda request: sse_response(b"data: A\n\ndata: B\n\n")) as client:
            source = EventSource(URL, client=client)
            received: list[str] = []
            states: list[ReadyState] = []
            source.add_event_listener("message", lambda sse: received.append(sse.data))
            source.on_open = lambda: states.append(source.ready_state)

            await run_until_closed(source)

        assert received == ["A", "B"]
        assert states == [ReadyState.OPEN]
        assert source.ready_state is ReadyState.CLOSED
        assert source.response is not None
        assert source.response.status_code == 200

    @pytest.mark.asyncio
    async def test_stream_twice_raises(self) -> None:
        """A transport can only be started once."""
        async with mock_client(lambda request: sse_response(b"")) as client:
            source = EventSource(URL, client=client)
            source.stream()

            with pytest.raises(TransportStateError):
                source.stream()

            await source.aclose()

    @pytest.mark.asyncio
    async def test_stream_after_close_raises(self) -> None:
        source = EventSource(URL)
        await source.aclose()

        with pytest.raises(TransportStateError):
            source.stream()

    @pytest.mark.asyncio
    async def test_aclose_before_stream_is_harmless(self) -> None:
        """Closing an unstarted transport only marks it closed."""
        source = EventSource(URL)

        await source.aclose()
        await source.aclose()

        assert source.ready_state is ReadyState.CLOSED


class TestEventSourceDispatch:
    """Tests for routing events to listeners."""

    @pytest.mark.asyncio
    async def test_dispatch_by_event_type(self) -> None:
        """Named events go to their listeners; unnamed ones to 'message'."""
        body = b"event: delta\ndata: x\nid: 1\n\ndata: y\n\nevent: ping\ndata: z\n\n"
        async with mock_client(lambda request: sse_response(body)) as client:
            source = EventSource(URL, client=client)
            deltas = []
            messages = []
            source.add_event_listener("delta", deltas.append)
            source.add_event_listener("message", messages.append)

            await run_until_closed(source)

        assert [(sse.data, sse.id) for sse in deltas] == [("x", "1")]
        assert [sse.data for sse in messages] == ["y"]

    @pytest.mark.asyncio
    async def test_event_without_id_field_has_no_id(self) -> None:
        """Listeners see each event's own id, not the carried-forward one."""
        body = b"id: 1\ndata: A\n\ndata: B\n\nid: 2\ndata: C\n\ndata: D\n\n"
        async with mock_client(lambda request: sse_response(body)) as client:
            source = EventSource(URL, client=client)
            received = []
            source.add_event_listener(
                "message", lambda sse: received.append((sse.data, sse.id))
            )

            await run_until_closed(source)

        assert received == [("A", "1"), ("B", ""), ("C", "2"), ("D", "")]
        assert source.last_event_id == "2"

    @pytest.mark.asyncio
    async def test_multiline_data_is_joined(self) -> None:
        async with mock_client(
            lambda request: sse_response(b"data: line one\ndata: line two\n\n")
        ) as client:
            source = EventSource(URL, client=client)
            received = []
            source.add_event_listener("message", lambda sse: received.append(sse.data))

            await run_until_closed(source)

        assert received == ["line one\nline two"]

    @pytest.mark.asyncio
    async def test_removed_listener_is_not_called(self) -> None:
        async with mock_client(lambda request: sse_response(b"data: A\n\n")) as client:
            source = EventSource(URL, client=client)
            handler = Mock()
            source.add_event_listener("message", handler)
            source.remove_event_listener("message", handler)
            source.remove_event_listener("unknown", handler)

            await run_until_closed(source)

        handler.assert_not_called()

    @pytest.mark.asyncio
    async def test_debug_logs_dispatched_events(self, caplog) -> None:
        """With debug enabled every dispatched event is logged."""
        async with mock_client(lambda request: sse_response(b"data: A\n\n")) as client:
            source = EventSource(URL, client=client, debug=True)

            with caplog.at_level(logging.DEBUG, logger="sse_stream.transport.event_source"):
                await run_until_closed(source)

        assert "dispatching 'message'" in caplog.text


class TestEventSourceErrors:
    """Tests for failure reporting through on_error."""

    @pytest.mark.asyncio
    async def test_non_2xx_reports_body(self) -> None:
        """A rejected request reports the response body and keeps the response."""
        async with mock_client(
            lambda request: httpx.Response(401, text="invalid api key")
        ) as client:
            source = EventSource(URL, client=client)
            on_open = Mock()
            errors: list[str] = []
            source.on_open = on_open
            source.on_error = errors.append

            await run_until_closed(source)

        assert errors == ["invalid api key"]
        on_open.assert_not_called()
        assert source.response.status_code == 401
        assert source.ready_state is ReadyState.CLOSED

    @pytest.mark.asyncio
    async def test_non_2xx_without_body_reports_reason(self) -> None:
        async with mock_client(lambda request: httpx.Response(503)) as client:
            source = EventSource(URL, client=client)
            errors: list[str] = []
            source.on_error = errors.append

            await run_until_closed(source)

        assert errors == ["Service Unavailable"]

    @pytest.mark.asyncio
    async def test_wrong_content_type_reports_error(self, caplog) -> None:
        """A 2xx response that is not an event stream is an error."""
        async with mock_client(
            lambda request: httpx.Response(200, json={"not": "a stream"})
        ) as client:
            source = EventSource(URL, client=client)
            errors: list[str] = []
            source.on_error = errors.append

            with caplog.at_level(logging.WARNING, logger="sse_stream.transport.event_source"):
                await run_until_closed(source)

        assert len(errors) == 1
        assert "text/event-stream" in errors[0]
        assert "failed" in caplog.text

    @pytest.mark.asyncio
    async def test_connection_failure_reports_error(self) -> None:
        """Connection errors are reported with no response."""

        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with mock_client(refuse) as client:
            source = EventSource(URL, client=client)
            errors: list[str] = []
            source.on_error = errors.append

            await run_until_closed(source)

        assert errors == ["connection refused"]
        assert source.response is None

    @pytest.mark.asyncio
    async def test_failing_listener_closes_stream(self) -> None:
        """An exception from a listener ends delivery and is reported."""
        async with mock_client(
            lambda request: sse_response(b"data: A\n\ndata: B\n\n")
        ) as client:
            source = EventSource(URL, client=client)
            errors: list[str] = []
            source.on_error = errors.append
            source.add_event_listener("message", Mock(side_effect=RuntimeError("bad handler")))

            await run_until_closed(source)

        assert errors == ["bad handler"]


class TestEventSourceClose:
    """Tests for caller-initiated close."""

    @pytest.mark.asyncio
    async def test_aclose_cancels_stalled_stream(self) -> None:
        """Closing a stream that never ends releases the connection."""
        body = NeverEndingStream()
        async with mock_client(
            lambda request: httpx.Response(200, headers=SSE_HEADERS, stream=body)
        ) as client:
            source = EventSource(URL, client=client)
            first = asyncio.Event()
            on_close = Mock()
            source.on_close = on_close
            source.add_event_listener("message", lambda sse: first.set())
            source.stream()
            await asyncio.wait_for(first.wait(), timeout=5.0)

            await asyncio.wait_for(source.aclose(), timeout=5.0)

        assert source.ready_state is ReadyState.CLOSED
        assert body.closed is True
        on_close.assert_not_called()


class TestEventSourceRequest:
    """Tests for what goes on the wire."""

    @pytest.mark.asyncio
    async def test_method_headers_and_body(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return sse_response(b"")

        async with mock_client(handler) as client:
            source = EventSource(
                URL,
                method="POST",
                headers={"Accept": "text/event-stream", "Authorization": "Bearer t"},
                body='{"x":1}',
                client=client,
            )
            await run_until_closed(source)

        (request,) = seen
        assert request.method == "POST"
        assert request.headers["accept"] == "text/event-stream"
        assert request.headers["authorization"] == "Bearer t"
        assert request.content == b'{"x":1}'

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("with_credentials", "expected"),
        [(True, "session=abc; theme=dark"), (False, None)],
    )
    async def test_cookies_only_with_credentials(self, with_credentials, expected) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return sse_response(b"")

        async with mock_client(handler) as client:
            source = EventSource(
                URL,
                with_credentials=with_credentials,
                cookies={"session": "abc", "theme": "dark"},
                client=client,
            )
            await run_until_closed(source)

        assert seen[0].headers.get("cookie") == expected

    def test_from_descriptor(self, descriptor) -> None:
        source = EventSource.from_descriptor(descriptor)

        assert source.url == descriptor.url
        assert source.method == "GET"
        assert source.headers == {"Accept": "text/event-stream"}
        assert source.timeout == 30.0
