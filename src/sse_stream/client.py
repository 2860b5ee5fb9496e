# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Entry point for consuming server-sent events as an async iterator.

``sse()`` assembles the request once, wires an EventStream around a
transport, and returns it unstarted. The request is issued on the first
pull.

Example:
    async def main() -> None:
        async with sse(
            base_url="https://api.openai.com",
            url="/v1/chat/completions",
            data={
                "model": "gpt-4o-mini",
                "stream": True,
                "messages": [{"role": "user", "content": "Hi!"}],
            },
            headers={"Authorization": "Bearer YOUR_API_KEY"},
            on_error=lambda error, response: print(
                f"Code: {response.status_code if response else None}, Error: {error}"
            ),
        ) as stream:
            async for message in stream:
                print(message.json()["choices"][0]["delta"].get("content", ""))
"""

from __future__ import annotations

import json
import logging
from types import MappingProxyType
from typing import Any

from .config import SSEOptions
from .exceptions import ConfigurationError
from .observability.metrics import get_prometheus_stream_metrics
from .streaming.driver import EventStream
from .transport.event_source import EventSource
from .types.request import (
    EVENT_STREAM_MEDIA_TYPE,
    JSON_CONTENT_TYPE,
    RequestDescriptor,
)

logger = logging.getLogger(__name__)


def resolve_url(url: str, base_url: str | None = None) -> str:
    """
    Join ``base_url`` and ``url``.

    Trailing slashes are stripped from ``base_url`` and a single leading
    slash is ensured on ``url``.
    """
    base = base_url.rstrip("/") if base_url else ""
    path = url if url.startswith("/") else f"/{url}"
    return f"{base}{path}"


def serialize_body(data: Any) -> tuple[str | bytes | None, bool]:
    """
    Serialize a request body.

    Returns:
        (body, is_json). Strings and bytes pass through unchanged, None
        stays None, anything else becomes compact JSON.

    Raises:
        ConfigurationError: If the value is not JSON serializable
    """
    if data is None or isinstance(data, (str, bytes)):
        return data, False
    try:
        return json.dumps(data, separators=(",", ":"), ensure_ascii=False), True
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"request data is not JSON serializable: {e}") from e


def build_request(options: SSEOptions) -> RequestDescriptor:
    """
    Assemble the immutable request descriptor for ``options``.

    - Non-string bodies are JSON encoded and, unless the caller set one,
      get ``Content-Type: application/json; charset=utf-8``.
    - ``Accept: text/event-stream`` always replaces any caller value.
    - The method defaults to POST when there is a body, GET otherwise.
    - The caller's headers mapping is copied, never mutated.
    """
    body, is_json = serialize_body(options.data)

    headers = dict(options.headers or {})
    if is_json and not any(name.lower() == "content-type" for name in headers):
        headers["Content-Type"] = JSON_CONTENT_TYPE
    for name in [name for name in headers if name.lower() == "accept"]:
        del headers[name]
    headers["Accept"] = EVENT_STREAM_MEDIA_TYPE

    if options.method:
        method = options.method.strip().upper()
    else:
        method = "POST" if body else "GET"

    return RequestDescriptor(
        url=resolve_url(options.url, options.base_url),
        method=method,
        headers=MappingProxyType(headers),
        body=body,
        with_credentials=options.with_credentials,
        debug=options.debug,
        listen=options.event_types,
        timeout=options.timeout,
        cookies=MappingProxyType(dict(options.cookies or {})),
    )


def sse(options: SSEOptions | None = None, /, **kwargs: Any) -> EventStream:
    """
    Open a server-sent events request as an async iterator of SSEMessage.

    Accepts either an SSEOptions instance or the same fields as keyword
    arguments. Nothing is sent until the returned stream is first pulled.

    Args:
        options: Prebuilt options. Mutually exclusive with keyword arguments.
        **kwargs: SSEOptions fields (url, base_url, data, headers, method,
            with_credentials, debug, listen, on_connect, on_error, ...)

    Returns:
        An unstarted EventStream. Its ``response`` property holds the
        request handle once connected.

    Raises:
        ConfigurationError: If the options are invalid
    """
    if options is None:
        try:
            options = SSEOptions(**kwargs)
        except TypeError as e:
            raise ConfigurationError(str(e)) from e
    elif kwargs:
        raise ConfigurationError("pass either an SSEOptions instance or keyword options, not both")

    descriptor = build_request(options)
    if options.transport_factory is not None:
        transport = options.transport_factory(descriptor)
    else:
        transport = EventSource.from_descriptor(descriptor, client=options.client)

    return EventStream(
        descriptor,
        transport=transport,
        on_connect=options.on_connect,
        on_error=options.on_error,
        metrics=options.metrics,
        prometheus=get_prometheus_stream_metrics() if options.prometheus else None,
    )


__all__ = ["build_request", "resolve_url", "serialize_body", "sse"]
