"""Terminal outcomes of expectation, verification and reset calls.

Operations return these values instead of raising, so callers decide how
a failure is surfaced (assertion, log line, test failure). Each result
offers ``raise_for_outcome()`` for callers who prefer exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from mockserver_client.errors import (
    ErrorCode,
    ErrorContext,
    ExpectationRejectedError,
    MockServerClientError,
    ResetFailedError,
    VerificationFailedError,
)


class FailureReason(Enum):
    """Why an operation ended without success."""

    MALFORMED_REQUEST = "malformed_request"
    SERVER_REJECTED = "server_rejected"
    SERVER_UNKNOWN_ERROR = "server_unknown_error"
    NOT_YET_MET = "not_yet_met"
    UNCLASSIFIED = "unclassified"
    CONSTRUCTION_ERROR = "construction_error"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class SubmitResult:
    """Outcome of creating an expectation."""

    accepted: bool
    reason: FailureReason | None = None
    status_code: int | None = None
    detail: str | None = None
    error: MockServerClientError | None = None
    message: str = ""

    @property
    def rejected(self) -> bool:
        return not self.accepted

    def raise_for_outcome(self) -> None:
        """Raise ExpectationRejectedError if the expectation was rejected."""
        if self.accepted:
            return
        raise ExpectationRejectedError(
            self.message,
            reason=self.reason,
            context=ErrorContext(status_code=self.status_code, response_body=self.detail),
            cause=self.error,
        )


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of a verification poll loop."""

    satisfied: bool
    attempts: int
    reason: FailureReason | None = None
    status_code: int | None = None
    detail: str | None = None
    error: MockServerClientError | None = None
    message: str = ""

    @property
    def failed(self) -> bool:
        return not self.satisfied

    def raise_for_outcome(self) -> None:
        """Raise VerificationFailedError if the verification failed."""
        if self.satisfied:
            return
        error_code = (
            ErrorCode.VERIFICATION_CANCELLED
            if self.reason is FailureReason.CANCELLED
            else ErrorCode.VERIFICATION_FAILED
        )
        raise VerificationFailedError(
            self.message,
            reason=self.reason,
            attempts=self.attempts,
            error_code=error_code,
            context=ErrorContext(
                status_code=self.status_code,
                response_body=self.detail,
                attempt=self.attempts,
            ),
            cause=self.error,
        )


@dataclass(frozen=True)
class ResetResult:
    """Outcome of resetting MockServer."""

    ok: bool
    status_code: int | None = None
    error: MockServerClientError | None = None
    message: str = ""

    def raise_for_outcome(self) -> None:
        if self.ok:
            return
        raise ResetFailedError(
            self.message,
            context=ErrorContext(status_code=self.status_code),
            cause=self.error,
        )
