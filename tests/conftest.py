"""Pytest fixtures for mockserver-client tests."""

from __future__ import annotations

import json
from typing import Any

import pytest

from mockserver_client.models import (
    Expectation,
    HttpRequestSpec,
    Verification,
    a_request,
    a_response,
    once,
)
from mockserver_client.reporters import Outcome, Reporter
from mockserver_client.transport import AsyncTransportClient, TransportClient, TransportResponse

ScriptItem = int | TransportResponse | BaseException


def _respond(item: ScriptItem) -> TransportResponse:
    if isinstance(item, BaseException):
        raise item
    if isinstance(item, int):
        return TransportResponse(status_code=item)
    return item


class ScriptedTransport(TransportClient):
    """Transport returning scripted responses; the last item repeats."""

    def __init__(self, *script: ScriptItem, events: list[tuple[str, Any]] | None = None) -> None:
        self.script = list(script)
        self.calls: list[tuple[str, bytes | None]] = []
        self.events = events if events is not None else []
        self.closed = False

    def put(self, uri: str, content: bytes | None) -> TransportResponse:
        self.calls.append((uri, content))
        self.events.append(("call", len(self.calls)))
        index = min(len(self.calls), len(self.script)) - 1
        return _respond(self.script[index])

    def close(self) -> None:
        self.closed = True

    @property
    def payloads(self) -> list[Any]:
        return [json.loads(content) for _, content in self.calls if content is not None]


class AsyncScriptedTransport(AsyncTransportClient):
    def __init__(self, *script: ScriptItem) -> None:
        self.script = list(script)
        self.calls: list[tuple[str, bytes | None]] = []
        self.closed = False

    async def put(self, uri: str, content: bytes | None) -> TransportResponse:
        self.calls.append((uri, content))
        index = min(len(self.calls), len(self.script)) - 1
        return _respond(self.script[index])

    async def aclose(self) -> None:
        self.closed = True


class FakeSleep:
    """Records requested delays instead of sleeping."""

    def __init__(self, events: list[tuple[str, Any]] | None = None) -> None:
        self.delays: list[float] = []
        self.events = events if events is not None else []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        self.events.append(("sleep", seconds))


class AsyncFakeSleep(FakeSleep):
    async def __call__(self, seconds: float) -> None:  # type: ignore[override]
        super().__call__(seconds)


class RecordingReporter(Reporter):
    def __init__(self, transport: ScriptedTransport | None = None) -> None:
        self.logs: list[str] = []
        self.failures: list[tuple[str, Outcome]] = []
        self.failure_call_counts: list[int] = []
        self._transport = transport

    def log(self, message: str) -> None:
        self.logs.append(message)

    def fail(self, message: str, outcome: Outcome) -> None:
        self.failures.append((message, outcome))
        if self._transport is not None:
            self.failure_call_counts.append(len(self._transport.calls))


@pytest.fixture
def events() -> list[tuple[str, Any]]:
    return []


@pytest.fixture
def fake_sleep(events: list[tuple[str, Any]]) -> FakeSleep:
    return FakeSleep(events)


@pytest.fixture
def order_request() -> HttpRequestSpec:
    return (
        a_request()
        .with_method("POST")
        .with_path("/api/orders")
        .with_header({"Content-Type": "application/json"})
        .with_body({"item_id": 1, "quantity": 2})
    )


@pytest.fixture
def order_expectation(order_request: HttpRequestSpec) -> Expectation:
    return Expectation.when(order_request).respond(
        a_response().with_status_code(201).with_body({"id": 42, "status": "created"})
    )


@pytest.fixture
def order_verification(order_expectation: Expectation) -> Verification:
    return Verification.of(order_expectation, once())
