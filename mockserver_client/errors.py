"""Exception hierarchy for mockserver-client.

Every error raised by this package inherits from MockServerClientError and
carries:
- error_code: an ErrorCode enum member for programmatic handling
- context: ErrorContext with the endpoint, status and payload involved
- suggestions: actionable steps to resolve the issue

Most operations report failures as result values (see
``mockserver_client.results``). Exceptions are raised for construction
problems, transport failures inside a TransportClient, and by the
``raise_for_outcome()`` helpers when a caller prefers exceptions.

Example:
    try:
        client.expect(expectation).raise_for_outcome()
    except ExpectationRejectedError as e:
        print(f"Error [{e.error_code.value}]: {e.message}")
        for suggestion in e.suggestions:
            print(f"  - {suggestion}")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes.

    Error codes are organized by category:
    - E0xx: Payload construction errors
    - E1xx: Transport errors
    - E2xx: Protocol errors reported by the remote server
    - E3xx: Verification errors
    - E9xx: Unknown/internal errors
    """

    # Construction errors (E0xx)
    PAYLOAD_INVALID = "E001"
    SERIALIZATION_FAILED = "E002"
    INVALID_RANGE = "E003"

    # Transport errors (E1xx)
    TRANSPORT_FAILED = "E101"
    NOTHING_TO_SEND = "E102"

    # Protocol errors (E2xx)
    EXPECTATION_REJECTED = "E201"
    RESET_FAILED = "E202"

    # Verification errors (E3xx)
    VERIFICATION_FAILED = "E301"
    VERIFICATION_CANCELLED = "E302"

    UNKNOWN = "E999"

    @property
    def category(self) -> str:
        """Get the error category name."""
        code_num = int(self.value[1:])
        if code_num < 100:
            return "construction"
        elif code_num < 200:
            return "transport"
        elif code_num < 300:
            return "protocol"
        elif code_num < 400:
            return "verification"
        else:
            return "unknown"


@dataclass
class ErrorContext:
    """Structured context captured when an error occurs.

    Attributes:
        uri: Endpoint the request was sent to
        status_code: HTTP status returned by the server (if any)
        response_body: Response text returned by the server (if any)
        attempt: Verification attempt number (if polling)
        extra: Additional context-specific information
        timestamp: When the error occurred
    """

    uri: str | None = None
    status_code: int | None = None
    response_body: str | None = None
    attempt: int | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for serialization."""
        result = {
            "uri": self.uri,
            "status_code": self.status_code,
            "response_body": self.response_body,
            "attempt": self.attempt,
            "extra": self.extra,
            "timestamp": self.timestamp.isoformat(),
        }
        return {k: v for k, v in result.items() if v is not None}

    def format_location(self) -> str:
        """Format the request location as a readable string."""
        parts = []
        if self.uri:
            parts.append(f"uri={self.uri}")
        if self.status_code is not None:
            parts.append(f"status={self.status_code}")
        if self.attempt is not None:
            parts.append(f"attempt={self.attempt}")
        return " ".join(parts) if parts else "unknown location"


class MockServerClientError(Exception):
    """Base exception for all mockserver-client errors.

    Attributes:
        error_code: Unique ErrorCode for this error type
        message: Human-readable error description
        context: ErrorContext with request details
        suggestions: List of actionable steps to resolve the issue
        cause: The underlying exception (if any)
    """

    error_code: ErrorCode = ErrorCode.UNKNOWN
    default_message: str = "An unexpected error occurred"
    default_suggestions: list[str] = []

    def __init__(
        self,
        message: str | None = None,
        error_code: ErrorCode | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
        suggestions: list[str] | None = None,
        **extra_context: Any,
    ) -> None:
        self.message = message or self.default_message
        self.error_code = error_code or self.error_code
        self.context = context or ErrorContext()
        self.cause = cause
        self._suggestions = suggestions

        if extra_context:
            self.context.extra.update(extra_context)

        super().__init__(self.message)

    @property
    def suggestions(self) -> list[str]:
        """Get actionable suggestions for resolving this error."""
        if self._suggestions is not None:
            return self._suggestions
        return self.default_suggestions.copy()

    def __str__(self) -> str:
        parts = [f"[{self.error_code.value}] {self.message}"]

        location = self.context.format_location()
        if location != "unknown location":
            parts.append(location)

        return " | ".join(parts)

    def format_verbose(self) -> str:
        """Format error with full details including suggestions."""
        lines = [
            f"Error [{self.error_code.value}]: {self.message}",
            "",
        ]

        location = self.context.format_location()
        if location != "unknown location":
            lines.append(f"Location: {location}")

        if self.context.response_body:
            lines.append(f"Response body: {self.context.response_body}")

        if self.cause is not None:
            lines.append(f"Caused by: {self.cause!r}")

        if self.suggestions:
            lines.append("")
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  - {suggestion}")

        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error_code": self.error_code.value,
            "error_type": self.__class__.__name__,
            "message": self.message,
            "suggestions": self.suggestions,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


class PayloadConstructionError(MockServerClientError):
    """A wire payload could not be built.

    Raised before any network call when a body fails to serialize to JSON
    or a verification range is invalid. Never retried.
    """

    error_code = ErrorCode.PAYLOAD_INVALID
    default_message = "Unable to build request payload"
    default_suggestions = [
        "Make sure request and response bodies are JSON-serializable",
        "Check that at_least <= at_most and both are non-negative",
    ]


class TransportError(MockServerClientError):
    """The request could not be sent or the response could not be read.

    Distinguishes "could not talk to the server" from "talked to the
    server and got an unexpected answer".
    """

    error_code = ErrorCode.TRANSPORT_FAILED
    default_message = "Unable to reach MockServer"
    default_suggestions = [
        "Verify MockServer is running (try: curl -X PUT http://<address>/mockserver/status)",
        "Check the configured address (MOCKSERVER_ADDRESS) matches host:port",
        "Ensure no firewall or proxy is blocking the connection",
    ]


class ExpectationRejectedError(MockServerClientError):
    """MockServer refused to create an expectation."""

    error_code = ErrorCode.EXPECTATION_REJECTED
    default_message = "MockServer rejected the expectation"
    default_suggestions = [
        "Check the expectation has a path",
        "Inspect the response body for the field MockServer complained about",
    ]

    def __init__(
        self,
        message: str | None = None,
        reason: Any = None,
        **kwargs: Any,
    ) -> None:
        self.reason = reason
        super().__init__(message=message, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["reason"] = getattr(self.reason, "value", self.reason)
        return result


class VerificationFailedError(MockServerClientError, AssertionError):
    """A verification did not reach the expected call count."""

    error_code = ErrorCode.VERIFICATION_FAILED
    default_message = "Expectation was not met"
    default_suggestions = [
        "Increase max_attempts if the call under test happens asynchronously",
        "Check the request pattern matches what the system under test sends",
        "Use a wider VerificationTimes range if the exact count is not important",
    ]

    def __init__(
        self,
        message: str | None = None,
        reason: Any = None,
        attempts: int = 0,
        **kwargs: Any,
    ) -> None:
        self.reason = reason
        self.attempts = attempts
        super().__init__(message=message, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["reason"] = getattr(self.reason, "value", self.reason)
        result["attempts"] = self.attempts
        return result


class ResetFailedError(MockServerClientError):
    """MockServer did not confirm the reset."""

    error_code = ErrorCode.RESET_FAILED
    default_message = "Unable to reset expectations"
    default_suggestions = [
        "Verify MockServer is running and reachable",
        "Check the server logs for the reset request",
    ]
