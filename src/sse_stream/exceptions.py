# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Exception classes for the sse-stream library.

This module defines the exception hierarchy used throughout the library.
All exceptions inherit from SSEStreamError, making it easy to catch
all library errors with a single except clause.

Note that transport failures during streaming are never raised into the
``async for`` loop. They are reported through the ``on_error`` callback.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx


class SSEStreamError(Exception):
    """Base exception for all sse-stream errors.

    Example:
        try:
            stream = sse(base_url=API_URL, url="/v1/chat", data=payload)
        except SSEStreamError as e:
            logger.error(f"Could not start stream: {e}")
    """

    pass


class ConfigurationError(SSEStreamError):
    """Raised when stream options are invalid.

    Raised synchronously by ``SSEOptions`` and ``sse()`` before any bytes
    are sent, so a malformed call never opens a connection.

    Common causes include:
    - Missing or empty ``url``
    - An empty ``listen`` list, or an empty event type name
    - A negative ``timeout``
    - Callbacks that are not callable

    Example:
        try:
            stream = sse(url="", listen=[])
        except ConfigurationError as e:
            logger.error(f"Invalid stream options: {e}")
    """

    pass


class TransportError(SSEStreamError):
    """Describes a failed streaming request.

    The transport builds one of these when the server answers with a
    non-2xx status or the connection fails, logs it, and hands its text
    to the ``on_error`` callback. It is not raised into the consumer.

    Attributes:
        status_code: HTTP status of the response, or None if the request
            failed before a response was received.
        response: The ``httpx.Response`` if one exists.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response: httpx.Response | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class TransportStateError(SSEStreamError):
    """Raised when a transport lifecycle method is called out of order.

    ``EventSource.stream()`` may only be called once, and never after the
    transport has been closed.
    """

    pass


__all__ = [
    "ConfigurationError",
    "SSEStreamError",
    "TransportError",
    "TransportStateError",
]
