"""Tests for the MockServer client facade."""

from __future__ import annotations

import threading
from unittest.mock import patch

import pytest

from mockserver_client.client import AsyncMockServerClient, MockServerClient
from mockserver_client.config import MockServerSettings
from mockserver_client.errors import ExpectationRejectedError, VerificationFailedError
from mockserver_client.models import Expectation, Verification
from mockserver_client.reporters import LoggingReporter, RaisingReporter
from mockserver_client.results import FailureReason
from mockserver_client.transport import AsyncHttpxTransport, HttpxTransport
from tests.conftest import AsyncScriptedTransport, RecordingReporter, ScriptedTransport


class TestMockServerClient:
    """Tests for the synchronous client."""

    def test_initialization(self) -> None:
        client = MockServerClient("localhost:1080")

        assert client.address == "localhost:1080"
        assert client.poll_interval == 1.0
        assert isinstance(client.transport, HttpxTransport)
        assert isinstance(client.reporter, LoggingReporter)

    def test_endpoint_uris(self) -> None:
        client = MockServerClient("mock:9000", transport=ScriptedTransport(200))

        assert client.expectation_uri == "http://mock:9000/mockserver/expectation"
        assert client.verify_uri == "http://mock:9000/mockserver/verify"
        assert client.reset_uri == "http://mock:9000/mockserver/reset"

    def test_https_scheme(self) -> None:
        client = MockServerClient("mock:443", transport=ScriptedTransport(200), scheme="https")
        assert client.reset_uri == "https://mock:443/mockserver/reset"

    def test_from_settings(self) -> None:
        settings = MockServerSettings(address="mock:1090", timeout=5.0, poll_interval=0.5)

        client = MockServerClient.from_settings(settings, transport=ScriptedTransport(200))

        assert client.address == "mock:1090"
        assert client.poll_interval == 0.5

    def test_expect_reports_success(self, order_expectation: Expectation) -> None:
        transport = ScriptedTransport(201)
        reporter = RecordingReporter()
        client = MockServerClient("localhost:1080", transport=transport, reporter=reporter)

        result = client.expect(order_expectation)

        assert result.accepted
        assert reporter.logs == ["Expectation has been created"]
        assert reporter.failures == []
        assert transport.calls[0][0] == "http://localhost:1080/mockserver/expectation"

    def test_expect_reports_failure(self, order_expectation: Expectation) -> None:
        reporter = RecordingReporter()
        client = MockServerClient(
            "localhost:1080", transport=ScriptedTransport(400), reporter=reporter
        )

        result = client.expect(order_expectation)

        assert result.reason is FailureReason.MALFORMED_REQUEST
        assert len(reporter.failures) == 1
        assert reporter.failures[0][1] is result

    def test_verify_reports_failure_only_on_final_attempt(
        self, order_verification: Verification
    ) -> None:
        transport = ScriptedTransport(400)
        reporter = RecordingReporter(transport)
        client = MockServerClient("localhost:1080", transport=transport, reporter=reporter)

        with patch("mockserver_client.verification.time.sleep") as mock_sleep:
            result = client.verify(order_verification, max_attempts=3)

        assert result.reason is FailureReason.MALFORMED_REQUEST
        assert len(transport.calls) == 3
        assert reporter.failure_call_counts == [3]
        assert mock_sleep.call_count == 2
        mock_sleep.assert_called_with(1.0)

    def test_verify_satisfied(self, order_verification: Verification) -> None:
        transport = ScriptedTransport(406, 202)
        reporter = RecordingReporter()
        client = MockServerClient("localhost:1080", transport=transport, reporter=reporter)

        with patch("mockserver_client.verification.time.sleep"):
            result = client.verify(order_verification, max_attempts=5)

        assert result.satisfied
        assert reporter.logs == ["Expectation has been met"]
        assert transport.calls[0][0] == "http://localhost:1080/mockserver/verify"

    def test_verify_uses_poll_interval(self, order_verification: Verification) -> None:
        transport = ScriptedTransport(406, 202)
        client = MockServerClient("localhost:1080", transport=transport, poll_interval=0.2)

        with patch("mockserver_client.verification.time.sleep") as mock_sleep:
            client.verify(order_verification, max_attempts=2)

        mock_sleep.assert_called_once_with(0.2)

    def test_verify_with_cancel(self, order_verification: Verification) -> None:
        cancel = threading.Event()
        cancel.set()
        transport = ScriptedTransport(202)
        client = MockServerClient("localhost:1080", transport=transport, reporter=RecordingReporter())

        result = client.verify(order_verification, max_attempts=5, cancel=cancel)

        assert result.reason is FailureReason.CANCELLED
        assert transport.calls == []

    def test_raising_reporter(self, order_verification: Verification) -> None:
        client = MockServerClient(
            "localhost:1080", transport=ScriptedTransport(406), reporter=RaisingReporter()
        )

        with pytest.raises(VerificationFailedError) as exc_info:
            client.verify(order_verification, max_attempts=1)

        assert exc_info.value.reason is FailureReason.NOT_YET_MET
        assert exc_info.value.attempts == 1

    def test_raising_reporter_on_expect(self, order_expectation: Expectation) -> None:
        client = MockServerClient(
            "localhost:1080", transport=ScriptedTransport(406), reporter=RaisingReporter()
        )

        with pytest.raises(ExpectationRejectedError):
            client.expect(order_expectation)

    def test_reset(self) -> None:
        transport = ScriptedTransport(200)
        reporter = RecordingReporter()
        client = MockServerClient("localhost:1080", transport=transport, reporter=reporter)

        result = client.reset()

        assert result.ok
        assert transport.calls == [("http://localhost:1080/mockserver/reset", None)]
        assert reporter.logs == ["Expectations have been reset"]

    def test_reset_failure_reported(self) -> None:
        reporter = RecordingReporter()
        client = MockServerClient(
            "localhost:1080", transport=ScriptedTransport(500), reporter=reporter
        )

        result = client.reset()

        assert not result.ok
        assert reporter.failures[0][0] == result.message

    def test_context_manager_keeps_supplied_transport(self) -> None:
        transport = ScriptedTransport(200)

        with MockServerClient("localhost:1080", transport=transport):
            pass

        assert transport.closed is False

    def test_context_manager_closes_owned_transport(self) -> None:
        with patch.object(HttpxTransport, "close") as mock_close:
            with MockServerClient("localhost:1080"):
                pass

        mock_close.assert_called_once()


class TestAsyncMockServerClient:
    """Tests for the async client."""

    def test_initialization(self) -> None:
        client = AsyncMockServerClient("localhost:1080")
        assert isinstance(client.transport, AsyncHttpxTransport)
        assert client.verify_uri == "http://localhost:1080/mockserver/verify"

    @pytest.mark.asyncio
    async def test_expect_verify_reset(
        self, order_expectation: Expectation, order_verification: Verification
    ) -> None:
        transport = AsyncScriptedTransport(201, 202, 200)
        reporter = RecordingReporter()

        async with AsyncMockServerClient(
            "localhost:1080", transport=transport, reporter=reporter
        ) as client:
            assert (await client.expect(order_expectation)).accepted
            assert (await client.verify(order_verification, max_attempts=3)).satisfied
            assert (await client.reset()).ok

        assert [uri for uri, _ in transport.calls] == [
            "http://localhost:1080/mockserver/expectation",
            "http://localhost:1080/mockserver/verify",
            "http://localhost:1080/mockserver/reset",
        ]
        assert reporter.failures == []
        assert transport.closed is False

    @pytest.mark.asyncio
    async def test_verify_failure_reported(self, order_verification: Verification) -> None:
        transport = AsyncScriptedTransport(403)
        reporter = RecordingReporter()
        client = AsyncMockServerClient(
            "localhost:1080", transport=transport, reporter=reporter, poll_interval=0.01
        )

        result = await client.verify(order_verification, max_attempts=2)

        assert result.reason is FailureReason.SERVER_REJECTED
        assert len(transport.calls) == 2
        assert len(reporter.failures) == 1
