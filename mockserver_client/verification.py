"""Verification polling against MockServer's verify endpoint.

The system under test may not have made the expected call yet when a test
starts verifying, so the poller asks MockServer repeatedly:

1. Build the verify payload (rebuilt on every attempt).
2. PUT it to ``/mockserver/verify``.
3. Classify the status code:
   - 202 -> satisfied, stop
   - 406 -> expectation exists but the call count is not met yet
   - 400 -> MockServer rejected the payload shape
   - 403 -> MockServer reported an unknown error
   - anything else -> unclassified
4. On the last attempt, fail with the classification. Otherwise wait a
   fixed interval and try again.

A transport failure stops the loop at once: not being able to talk to the
server is different from getting an unexpected answer. Classified failures
are tolerated while attempts remain, and always surface on the final one.

Example:
    >>> poller = VerificationPoller(HttpxTransport(), "http://localhost:1080/mockserver/verify")
    >>> result = poller.verify(Verification.of(expectation, once()), max_attempts=5)
    >>> assert result.satisfied, result.message
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum

from mockserver_client.errors import PayloadConstructionError, TransportError
from mockserver_client.models import Verification
from mockserver_client.payloads import build_verification_payload
from mockserver_client.results import FailureReason, VerificationResult
from mockserver_client.transport import AsyncTransportClient, TransportClient, TransportResponse

logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = 1.0


class PollOutcome(Enum):
    """Classification of a single verify response."""

    SATISFIED = "satisfied"
    TRANSIENT_UNMET = "transient_unmet"
    MALFORMED = "malformed"
    SERVER_REJECTED = "server_rejected"
    UNCLASSIFIED = "unclassified"

    @property
    def failure_reason(self) -> FailureReason | None:
        return _FAILURE_REASONS.get(self)


_FAILURE_REASONS = {
    PollOutcome.TRANSIENT_UNMET: FailureReason.NOT_YET_MET,
    PollOutcome.MALFORMED: FailureReason.MALFORMED_REQUEST,
    PollOutcome.SERVER_REJECTED: FailureReason.SERVER_REJECTED,
    PollOutcome.UNCLASSIFIED: FailureReason.UNCLASSIFIED,
}

_STATUS_OUTCOMES = {
    202: PollOutcome.SATISFIED,
    406: PollOutcome.TRANSIENT_UNMET,
    400: PollOutcome.MALFORMED,
    403: PollOutcome.SERVER_REJECTED,
}


def classify_verify_status(status_code: int) -> PollOutcome:
    """Map a verify response status code to a PollOutcome."""
    return _STATUS_OUTCOMES.get(status_code, PollOutcome.UNCLASSIFIED)


def _failure_message(outcome: PollOutcome, response: TransportResponse) -> str:
    if outcome is PollOutcome.TRANSIENT_UNMET:
        return (
            "Expectation was not met. Api not received specified numbers of time. "
            f"Error response body: {response.text}"
        )
    if outcome is PollOutcome.MALFORMED:
        return f"Incorrect request format: {response}"
    if outcome is PollOutcome.SERVER_REJECTED:
        return f"MockServer unknown error. Details: {response}"
    return f"Unknown error. Check response: {response}"


def _check_max_attempts(max_attempts: int) -> None:
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")


@dataclass
class VerificationPollState:
    """Progress of one verify call. Discarded when the call returns."""

    attempt: int = 1
    last_outcome: PollOutcome | None = None
    last_response: TransportResponse | None = None

    def record(self, outcome: PollOutcome, response: TransportResponse) -> None:
        self.last_outcome = outcome
        self.last_response = response


class _PollerBase:
    """Result construction shared by the sync and async pollers."""

    def __init__(self, uri: str, interval: float = POLL_INTERVAL_SECONDS) -> None:
        self.uri = uri
        self.interval = interval

    def _build(
        self, verification: Verification, state: VerificationPollState
    ) -> dict | VerificationResult:
        try:
            return build_verification_payload(verification)
        except PayloadConstructionError as e:
            logger.error(f"Unable to create verifier: {e}")
            return VerificationResult(
                satisfied=False,
                attempts=state.attempt - 1,
                reason=FailureReason.CONSTRUCTION_ERROR,
                error=e,
                message=f"Unable to create verifier: {e.message}",
            )

    def _transport_failed(
        self, error: TransportError, state: VerificationPollState
    ) -> VerificationResult:
        logger.error(f"Verification aborted on attempt {state.attempt}: {error}")
        return VerificationResult(
            satisfied=False,
            attempts=state.attempt,
            reason=FailureReason.UNCLASSIFIED,
            error=error,
            message=f"Verification aborted on attempt {state.attempt}: {error.message}",
        )

    def _cancelled(self, state: VerificationPollState) -> VerificationResult:
        attempts = state.attempt if state.last_outcome is not None else 0
        logger.info(f"Verification cancelled after {attempts} attempt(s)")
        response = state.last_response
        return VerificationResult(
            satisfied=False,
            attempts=attempts,
            reason=FailureReason.CANCELLED,
            status_code=response.status_code if response else None,
            detail=response.text if response else None,
            message=f"Verification cancelled after {attempts} attempt(s)",
        )

    def _evaluate(
        self,
        response: TransportResponse,
        state: VerificationPollState,
        max_attempts: int,
    ) -> VerificationResult | None:
        """Classify a response; return a terminal result or None to keep polling."""
        outcome = classify_verify_status(response.status_code)
        state.record(outcome, response)

        if outcome is PollOutcome.SATISFIED:
            logger.info("Expectation has been met")
            return VerificationResult(
                satisfied=True,
                attempts=state.attempt,
                status_code=response.status_code,
                message="Expectation has been met",
            )

        if state.attempt >= max_attempts:
            message = _failure_message(outcome, response)
            logger.error(message)
            return VerificationResult(
                satisfied=False,
                attempts=state.attempt,
                reason=outcome.failure_reason,
                status_code=response.status_code,
                detail=response.text or None,
                message=message,
            )

        logger.warning(
            f"Verification attempt {state.attempt}/{max_attempts} returned "
            f"HTTP {response.status_code} ({outcome.value}), retrying in {self.interval}s"
        )
        return None


class VerificationPoller(_PollerBase):
    """Polls the verify endpoint until satisfied or out of attempts.

    Not safe for concurrent ``verify`` calls on the same instance.
    """

    def __init__(
        self,
        transport: TransportClient,
        uri: str,
        interval: float = POLL_INTERVAL_SECONDS,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        super().__init__(uri, interval)
        self.transport = transport
        self._sleep = sleep or time.sleep

    def verify(
        self,
        verification: Verification,
        max_attempts: int,
        cancel: threading.Event | None = None,
    ) -> VerificationResult:
        """Poll until the verification is satisfied or fails.

        Args:
            verification: Request pattern and expected call-count range
            max_attempts: Number of verify calls allowed; no default
            cancel: Optional event; setting it stops the loop, also mid-wait

        Returns:
            Terminal VerificationResult
        """
        _check_max_attempts(max_attempts)
        state = VerificationPollState()

        while True:
            if cancel is not None and cancel.is_set():
                return self._cancelled(state)

            logger.info(f"Attempting {state.attempt} of {max_attempts}: {verification.describe()}")

            payload = self._build(verification, state)
            if isinstance(payload, VerificationResult):
                return payload

            try:
                response = self.transport.execute(payload, self.uri)
            except TransportError as e:
                return self._transport_failed(e, state)

            result = self._evaluate(response, state, max_attempts)
            if result is not None:
                return result

            if self._wait(cancel):
                return self._cancelled(state)
            state.attempt += 1

    def _wait(self, cancel: threading.Event | None) -> bool:
        """Wait one interval. Returns True if cancelled while waiting."""
        if cancel is None:
            self._sleep(self.interval)
            return False
        return cancel.wait(self.interval)


class AsyncVerificationPoller(_PollerBase):
    """Async counterpart of VerificationPoller.

    Cancelling the surrounding task also stops the loop.
    """

    def __init__(
        self,
        transport: AsyncTransportClient,
        uri: str,
        interval: float = POLL_INTERVAL_SECONDS,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        super().__init__(uri, interval)
        self.transport = transport
        self._sleep = sleep or asyncio.sleep

    async def verify(
        self,
        verification: Verification,
        max_attempts: int,
        cancel: asyncio.Event | None = None,
    ) -> VerificationResult:
        _check_max_attempts(max_attempts)
        state = VerificationPollState()

        while True:
            if cancel is not None and cancel.is_set():
                return self._cancelled(state)

            logger.info(f"Attempting {state.attempt} of {max_attempts}: {verification.describe()}")

            payload = self._build(verification, state)
            if isinstance(payload, VerificationResult):
                return payload

            try:
                response = await self.transport.execute(payload, self.uri)
            except TransportError as e:
                return self._transport_failed(e, state)

            result = self._evaluate(response, state, max_attempts)
            if result is not None:
                return result

            if await self._wait(cancel):
                return self._cancelled(state)
            state.attempt += 1

    async def _wait(self, cancel: asyncio.Event | None) -> bool:
        if cancel is None:
            await self._sleep(self.interval)
            return False
        try:
            await asyncio.wait_for(cancel.wait(), timeout=self.interval)
        except asyncio.TimeoutError:
            return False
        return True
