"""Transport abstraction used to talk to MockServer.

A TransportClient turns a payload into a single HTTP PUT with
``Content-Type: application/json`` and returns the status code and raw
body. It never retries: retry policy belongs to the verification poller.

Implementations only need to provide ``put``. ``execute`` validates and
serializes the payload and is shared by all implementations.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import httpx

from mockserver_client.errors import ErrorCode, ErrorContext, TransportError

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


@dataclass(frozen=True)
class TransportResponse:
    """Status code and raw body of a MockServer response."""

    status_code: int
    body: bytes = b""

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def __str__(self) -> str:
        text = self.text
        return f"HTTP {self.status_code}: {text}" if text else f"HTTP {self.status_code}"


def serialize_payload(payload: Any, uri: str) -> bytes:
    """Serialize a payload for sending.

    Raises:
        TransportError: If there is no payload or it cannot be encoded
    """
    if payload is None:
        raise TransportError(
            "Request not provided",
            error_code=ErrorCode.NOTHING_TO_SEND,
            context=ErrorContext(uri=uri),
        )
    try:
        return json.dumps(payload, allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise TransportError(
            f"JSON marshal error: {e}",
            error_code=ErrorCode.TRANSPORT_FAILED,
            context=ErrorContext(uri=uri),
            cause=e,
        ) from e


def _wrap_http_error(error: httpx.HTTPError, uri: str) -> TransportError:
    return TransportError(
        f"PUT {uri} failed: {error}",
        context=ErrorContext(uri=uri),
        cause=error,
    )


class TransportClient(ABC):
    """Sends payloads to MockServer."""

    @abstractmethod
    def put(self, uri: str, content: bytes | None) -> TransportResponse:
        """Issue a single PUT with a JSON content type.

        Raises:
            TransportError: If the request cannot be completed
        """
        ...

    def execute(self, payload: Any, uri: str) -> TransportResponse:
        """Serialize ``payload`` and PUT it to ``uri``."""
        content = serialize_payload(payload, uri)
        return self.put(uri, content)

    def close(self) -> None:
        """Release any resources held by the transport."""


class AsyncTransportClient(ABC):
    """Async counterpart of TransportClient."""

    @abstractmethod
    async def put(self, uri: str, content: bytes | None) -> TransportResponse:
        ...

    async def execute(self, payload: Any, uri: str) -> TransportResponse:
        content = serialize_payload(payload, uri)
        return await self.put(uri, content)

    async def aclose(self) -> None:
        """Release any resources held by the transport."""


class HttpxTransport(TransportClient):
    """TransportClient backed by ``httpx.Client``.

    A caller-supplied client is used as-is and never closed here. When no
    client is given one is created lazily and closed by ``close()``.
    """

    def __init__(self, client: httpx.Client | None = None, timeout: float = 30.0) -> None:
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout)
            logger.debug("Created httpx client for MockServer transport")
        return self._client

    def put(self, uri: str, content: bytes | None) -> TransportResponse:
        try:
            response = self._get_client().put(uri, content=content, headers=JSON_HEADERS)
        except httpx.HTTPError as e:
            raise _wrap_http_error(e, uri) from e
        return TransportResponse(status_code=response.status_code, body=response.content)

    def close(self) -> None:
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None


class AsyncHttpxTransport(AsyncTransportClient):
    """AsyncTransportClient backed by ``httpx.AsyncClient``."""

    def __init__(self, client: httpx.AsyncClient | None = None, timeout: float = 30.0) -> None:
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def put(self, uri: str, content: bytes | None) -> TransportResponse:
        try:
            response = await self._get_client().put(uri, content=content, headers=JSON_HEADERS)
        except httpx.HTTPError as e:
            raise _wrap_http_error(e, uri) from e
        return TransportResponse(status_code=response.status_code, body=response.content)

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
