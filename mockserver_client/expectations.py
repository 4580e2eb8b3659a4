"""Creating expectations and resetting MockServer.

Both operations make exactly one request. Registering an expectation is
synchronous on the server side, so a failed attempt is always terminal.
"""

from __future__ import annotations

import logging

from mockserver_client.errors import PayloadConstructionError, TransportError
from mockserver_client.models import Expectation
from mockserver_client.payloads import build_expectation_payload
from mockserver_client.results import FailureReason, ResetResult, SubmitResult
from mockserver_client.transport import AsyncTransportClient, TransportClient, TransportResponse

logger = logging.getLogger(__name__)


def classify_submit_response(response: TransportResponse) -> SubmitResult:
    """Map an expectation response to a SubmitResult."""
    status = response.status_code
    if status == 201:
        logger.info("Expectation has been created")
        return SubmitResult(accepted=True, status_code=status, message="Expectation has been created")

    if status == 400:
        reason = FailureReason.MALFORMED_REQUEST
        message = f"Incorrect request format: {response.text}"
    elif status == 406:
        reason = FailureReason.SERVER_UNKNOWN_ERROR
        message = f"MockServer unknown error. Details: {response}"
    else:
        reason = FailureReason.UNCLASSIFIED
        message = f"Unknown error. Check response: {response}"

    logger.error(message)
    return SubmitResult(
        accepted=False,
        reason=reason,
        status_code=status,
        detail=response.text or None,
        message=message,
    )


def _construction_failed(error: PayloadConstructionError) -> SubmitResult:
    logger.error(f"Unable to create expectation: {error}")
    return SubmitResult(
        accepted=False,
        reason=FailureReason.CONSTRUCTION_ERROR,
        error=error,
        message=f"Unable to create expectation: {error.message}",
    )


def _transport_failed(error: TransportError) -> SubmitResult:
    logger.error(f"Unable to submit expectation: {error}")
    return SubmitResult(
        accepted=False,
        reason=FailureReason.UNCLASSIFIED,
        error=error,
        message=f"Unable to submit expectation: {error.message}",
    )


class ExpectationSubmitter:
    """Registers expectations through ``PUT /mockserver/expectation``."""

    def __init__(self, transport: TransportClient, uri: str) -> None:
        self.transport = transport
        self.uri = uri

    def submit(self, expectation: Expectation) -> SubmitResult:
        try:
            payload = build_expectation_payload(expectation)
        except PayloadConstructionError as e:
            return _construction_failed(e)

        try:
            response = self.transport.execute(payload, self.uri)
        except TransportError as e:
            return _transport_failed(e)

        return classify_submit_response(response)


class AsyncExpectationSubmitter:
    def __init__(self, transport: AsyncTransportClient, uri: str) -> None:
        self.transport = transport
        self.uri = uri

    async def submit(self, expectation: Expectation) -> SubmitResult:
        try:
            payload = build_expectation_payload(expectation)
        except PayloadConstructionError as e:
            return _construction_failed(e)

        try:
            response = await self.transport.execute(payload, self.uri)
        except TransportError as e:
            return _transport_failed(e)

        return classify_submit_response(response)


def _reset_result(response: TransportResponse) -> ResetResult:
    if response.status_code == 200:
        logger.info("MockServer expectations have been reset")
        return ResetResult(ok=True, status_code=200, message="Expectations have been reset")
    message = f"Unable to reset expectations. Status: {response.status_code}"
    logger.error(message)
    return ResetResult(ok=False, status_code=response.status_code, message=message)


def _reset_transport_failed(error: TransportError) -> ResetResult:
    logger.error(f"Reset expectations fail. Error: {error}")
    return ResetResult(
        ok=False,
        error=error,
        message=f"Reset expectations fail. Error: {error.message}",
    )


class ResetOperation:
    """Clears all expectations and recorded requests on MockServer."""

    def __init__(self, transport: TransportClient, uri: str) -> None:
        self.transport = transport
        self.uri = uri

    def reset(self) -> ResetResult:
        try:
            response = self.transport.put(self.uri, None)
        except TransportError as e:
            return _reset_transport_failed(e)
        return _reset_result(response)


class AsyncResetOperation:
    def __init__(self, transport: AsyncTransportClient, uri: str) -> None:
        self.transport = transport
        self.uri = uri

    async def reset(self) -> ResetResult:
        try:
            response = await self.transport.put(self.uri, None)
        except TransportError as e:
            return _reset_transport_failed(e)
        return _reset_result(response)
