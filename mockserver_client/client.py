"""MockServer client: create expectations, verify them, reset the server."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any

from mockserver_client.config import MockServerSettings
from mockserver_client.expectations import (
    AsyncExpectationSubmitter,
    AsyncResetOperation,
    ExpectationSubmitter,
    ResetOperation,
)
from mockserver_client.models import Expectation, Verification
from mockserver_client.reporters import LoggingReporter, Reporter
from mockserver_client.results import ResetResult, SubmitResult, VerificationResult
from mockserver_client.transport import (
    AsyncHttpxTransport,
    AsyncTransportClient,
    HttpxTransport,
    TransportClient,
)
from mockserver_client.verification import (
    POLL_INTERVAL_SECONDS,
    AsyncVerificationPoller,
    VerificationPoller,
)

logger = logging.getLogger(__name__)

EXPECTATION_PATH = "/mockserver/expectation"
VERIFY_PATH = "/mockserver/verify"
RESET_PATH = "/mockserver/reset"


class _EndpointsMixin:
    address: str
    scheme: str

    def _uri(self, path: str) -> str:
        return f"{self.scheme}://{self.address}{path}"

    @property
    def expectation_uri(self) -> str:
        return self._uri(EXPECTATION_PATH)

    @property
    def verify_uri(self) -> str:
        return self._uri(VERIFY_PATH)

    @property
    def reset_uri(self) -> str:
        return self._uri(RESET_PATH)


class MockServerClient(_EndpointsMixin):
    """Synchronous MockServer client.

    Every terminal outcome is returned to the caller and also handed to
    ``reporter`` (log on success, fail on failure).

    Example:
        >>> with MockServerClient("localhost:1080") as mockserver:
        ...     mockserver.expect(expectation).raise_for_outcome()
        ...     # ... exercise the system under test ...
        ...     mockserver.verify(Verification.of(expectation, once()), max_attempts=5)
    """

    def __init__(
        self,
        address: str,
        transport: TransportClient | None = None,
        reporter: Reporter | None = None,
        scheme: str = "http",
        timeout: float = 30.0,
        poll_interval: float = POLL_INTERVAL_SECONDS,
    ) -> None:
        self.address = address
        self.scheme = scheme
        self.poll_interval = poll_interval
        self.reporter = reporter or LoggingReporter()
        self._owns_transport = transport is None
        self.transport = transport or HttpxTransport(timeout=timeout)

    @classmethod
    def from_settings(
        cls,
        settings: MockServerSettings,
        transport: TransportClient | None = None,
        reporter: Reporter | None = None,
    ) -> MockServerClient:
        return cls(
            settings.address,
            transport=transport,
            reporter=reporter,
            scheme=settings.scheme,
            timeout=settings.timeout,
            poll_interval=settings.poll_interval,
        )

    def expect(self, expectation: Expectation) -> SubmitResult:
        """Register an expectation. Exactly one request, never retried."""
        result = ExpectationSubmitter(self.transport, self.expectation_uri).submit(expectation)
        if result.accepted:
            self.reporter.log(result.message)
        else:
            self.reporter.fail(result.message, result)
        return result

    def verify(
        self,
        verification: Verification,
        max_attempts: int,
        cancel: threading.Event | None = None,
    ) -> VerificationResult:
        """Poll MockServer until ``verification`` is satisfied or fails.

        Args:
            verification: Request pattern and expected call-count range
            max_attempts: Number of verify calls allowed
            cancel: Optional event that stops polling when set
        """
        poller = VerificationPoller(self.transport, self.verify_uri, interval=self.poll_interval)
        result = poller.verify(verification, max_attempts, cancel=cancel)
        if result.satisfied:
            self.reporter.log(result.message)
        else:
            self.reporter.fail(result.message, result)
        return result

    def reset(self) -> ResetResult:
        """Clear all expectations and recorded requests."""
        result = ResetOperation(self.transport, self.reset_uri).reset()
        if result.ok:
            self.reporter.log(result.message)
        else:
            self.reporter.fail(result.message, result)
        return result

    def close(self) -> None:
        if self._owns_transport:
            self.transport.close()

    def __enter__(self) -> MockServerClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class AsyncMockServerClient(_EndpointsMixin):
    """Async MockServer client."""

    def __init__(
        self,
        address: str,
        transport: AsyncTransportClient | None = None,
        reporter: Reporter | None = None,
        scheme: str = "http",
        timeout: float = 30.0,
        poll_interval: float = POLL_INTERVAL_SECONDS,
    ) -> None:
        self.address = address
        self.scheme = scheme
        self.poll_interval = poll_interval
        self.reporter = reporter or LoggingReporter()
        self._owns_transport = transport is None
        self.transport = transport or AsyncHttpxTransport(timeout=timeout)

    async def expect(self, expectation: Expectation) -> SubmitResult:
        submitter = AsyncExpectationSubmitter(self.transport, self.expectation_uri)
        result = await submitter.submit(expectation)
        if result.accepted:
            self.reporter.log(result.message)
        else:
            self.reporter.fail(result.message, result)
        return result

    async def verify(
        self,
        verification: Verification,
        max_attempts: int,
        cancel: asyncio.Event | None = None,
    ) -> VerificationResult:
        poller = AsyncVerificationPoller(
            self.transport, self.verify_uri, interval=self.poll_interval
        )
        result = await poller.verify(verification, max_attempts, cancel=cancel)
        if result.satisfied:
            self.reporter.log(result.message)
        else:
            self.reporter.fail(result.message, result)
        return result

    async def reset(self) -> ResetResult:
        result = await AsyncResetOperation(self.transport, self.reset_uri).reset()
        if result.ok:
            self.reporter.log(result.message)
        else:
            self.reporter.fail(result.message, result)
        return result

    async def aclose(self) -> None:
        if self._owns_transport:
            await self.transport.aclose()

    async def __aenter__(self) -> AsyncMockServerClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
