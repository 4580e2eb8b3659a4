"""Tests for the httpx-backed transports."""

from __future__ import annotations

import json
import math

import httpx
import pytest

from mockserver_client.errors import ErrorCode, TransportError
from mockserver_client.transport import (
    AsyncHttpxTransport,
    HttpxTransport,
    TransportResponse,
    serialize_payload,
)

URI = "http://localhost:1080/mockserver/expectation"


class RecordingHandler:
    def __init__(self, response: httpx.Response | Exception) -> None:
        self.response = response
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


def make_transport(handler: RecordingHandler) -> HttpxTransport:
    return HttpxTransport(client=httpx.Client(transport=httpx.MockTransport(handler)))


class TestTransportResponse:
    def test_text_decodes_body(self) -> None:
        assert TransportResponse(406, b"not met").text == "not met"

    def test_text_is_lenient(self) -> None:
        assert TransportResponse(400, b"\xff").text == "�"

    def test_str(self) -> None:
        assert str(TransportResponse(202)) == "HTTP 202"
        assert str(TransportResponse(400, b"bad")) == "HTTP 400: bad"


class TestSerializePayload:
    def test_none_payload(self) -> None:
        with pytest.raises(TransportError) as exc_info:
            serialize_payload(None, URI)
        assert exc_info.value.error_code is ErrorCode.NOTHING_TO_SEND
        assert exc_info.value.context.uri == URI

    def test_unserializable_payload(self) -> None:
        with pytest.raises(TransportError, match="JSON marshal error"):
            serialize_payload({"when": object()}, URI)

    def test_non_finite_payload(self) -> None:
        with pytest.raises(TransportError, match="JSON marshal error"):
            serialize_payload({"v": math.nan}, URI)

    def test_encodes_json(self) -> None:
        assert json.loads(serialize_payload({"a": [1, 2]}, URI)) == {"a": [1, 2]}


class TestHttpxTransport:
    """Tests for the synchronous transport."""

    def test_execute_sends_json_put(self) -> None:
        handler = RecordingHandler(httpx.Response(201, content=b"created"))
        transport = make_transport(handler)

        response = transport.execute({"httpRequest": {"path": "/a"}}, URI)

        assert response == TransportResponse(status_code=201, body=b"created")
        sent = handler.requests[0]
        assert sent.method == "PUT"
        assert str(sent.url) == URI
        assert sent.headers["Content-Type"] == "application/json"
        assert json.loads(sent.content) == {"httpRequest": {"path": "/a"}}

    def test_execute_without_payload_sends_nothing(self) -> None:
        handler = RecordingHandler(httpx.Response(201))
        transport = make_transport(handler)

        with pytest.raises(TransportError):
            transport.execute(None, URI)

        assert handler.requests == []

    def test_put_without_body(self) -> None:
        handler = RecordingHandler(httpx.Response(200))
        transport = make_transport(handler)

        response = transport.put("http://localhost:1080/mockserver/reset", None)

        assert response.status_code == 200
        assert handler.requests[0].content == b""
        assert handler.requests[0].headers["Content-Type"] == "application/json"

    def test_connection_error_is_wrapped(self) -> None:
        handler = RecordingHandler(httpx.ConnectError("Connection refused"))
        transport = make_transport(handler)

        with pytest.raises(TransportError) as exc_info:
            transport.execute({"a": 1}, URI)

        assert isinstance(exc_info.value.cause, httpx.ConnectError)
        assert exc_info.value.error_code is ErrorCode.TRANSPORT_FAILED

    def test_timeout_is_wrapped(self) -> None:
        handler = RecordingHandler(httpx.ReadTimeout("timed out"))
        transport = make_transport(handler)

        with pytest.raises(TransportError):
            transport.execute({"a": 1}, URI)

    def test_does_not_retry(self) -> None:
        handler = RecordingHandler(httpx.Response(500))
        transport = make_transport(handler)

        response = transport.execute({"a": 1}, URI)

        assert response.status_code == 500
        assert len(handler.requests) == 1

    def test_close_leaves_supplied_client_open(self) -> None:
        client = httpx.Client(transport=httpx.MockTransport(RecordingHandler(httpx.Response(200))))
        transport = HttpxTransport(client=client)

        transport.close()

        assert client.is_closed is False
        client.close()

    def test_owned_client_created_lazily_and_closed(self) -> None:
        transport = HttpxTransport(timeout=5.0)
        assert transport._client is None

        client = transport._get_client()
        assert transport._get_client() is client

        transport.close()
        assert client.is_closed
        assert transport._client is None


class TestAsyncHttpxTransport:
    """Tests for the async transport."""

    @pytest.mark.asyncio
    async def test_execute_sends_json_put(self) -> None:
        handler = RecordingHandler(httpx.Response(202))
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        transport = AsyncHttpxTransport(client=client)

        response = await transport.execute({"times": {"atLeast": 1}}, URI)

        assert response.status_code == 202
        assert handler.requests[0].method == "PUT"
        assert json.loads(handler.requests[0].content) == {"times": {"atLeast": 1}}
        await client.aclose()

    @pytest.mark.asyncio
    async def test_connection_error_is_wrapped(self) -> None:
        handler = RecordingHandler(httpx.ConnectError("Connection refused"))
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        transport = AsyncHttpxTransport(client=client)

        with pytest.raises(TransportError):
            await transport.execute({"a": 1}, URI)
        await client.aclose()

    @pytest.mark.asyncio
    async def test_execute_without_payload(self) -> None:
        transport = AsyncHttpxTransport()
        with pytest.raises(TransportError):
            await transport.execute(None, URI)
        await transport.aclose()
