"""mockserver-client - declare and verify HTTP interactions against MockServer.

Test code registers expectations on a remote MockServer ("if a request
matches P, respond with R") and later verifies how many times a matching
request arrived. Verification polls the server at a fixed interval, so
calls made asynchronously by the system under test are picked up.

Example:
    >>> from mockserver_client import (
    ...     Expectation, MockServerClient, Verification, a_request, a_response, once,
    ... )
    >>>
    >>> expectation = Expectation.when(
    ...     a_request().with_method("GET").with_path("/api/users/1")
    ... ).respond(
    ...     a_response().with_status_code(200).with_body({"id": 1, "name": "Ada"})
    ... )
    >>>
    >>> with MockServerClient("localhost:1080") as mockserver:
    ...     mockserver.expect(expectation).raise_for_outcome()
    ...     # ... exercise the system under test ...
    ...     result = mockserver.verify(Verification.of(expectation, once()), max_attempts=5)
    ...     assert result.satisfied, result.message

Core Models:
    HttpRequestSpec, HttpResponseSpec: Request pattern and canned response
    Expectation: Request pattern paired with a response
    VerificationTimes: Closed call-count range (never/once/twice/exactly/between)
    Verification: Request pattern paired with a VerificationTimes

Execution:
    MockServerClient / AsyncMockServerClient: expect, verify, reset
    VerificationPoller / AsyncVerificationPoller: verify polling loop
    TransportClient / HttpxTransport: PUT payloads to MockServer

Error Handling:
    MockServerClientError: Base exception
    PayloadConstructionError, TransportError: construction and transport failures
    ExpectationRejectedError, VerificationFailedError, ResetFailedError
"""

from mockserver_client.client import AsyncMockServerClient, MockServerClient
from mockserver_client.config import MockServerSettings, load_settings
from mockserver_client.errors import (
    ErrorCode,
    ErrorContext,
    ExpectationRejectedError,
    MockServerClientError,
    PayloadConstructionError,
    ResetFailedError,
    TransportError,
    VerificationFailedError,
)
from mockserver_client.expectations import (
    AsyncExpectationSubmitter,
    AsyncResetOperation,
    ExpectationSubmitter,
    ResetOperation,
)
from mockserver_client.loader import InteractionFile, InteractionFileError, load_interactions
from mockserver_client.models import (
    Expectation,
    HttpRequestSpec,
    HttpResponseSpec,
    Verification,
    VerificationTimes,
    a_request,
    a_response,
    between,
    exactly,
    never,
    once,
    twice,
)
from mockserver_client.payloads import build_expectation_payload, build_verification_payload
from mockserver_client.reporters import LoggingReporter, RaisingReporter, Reporter
from mockserver_client.results import FailureReason, ResetResult, SubmitResult, VerificationResult
from mockserver_client.transport import (
    AsyncHttpxTransport,
    AsyncTransportClient,
    HttpxTransport,
    TransportClient,
    TransportResponse,
)
from mockserver_client.verification import (
    AsyncVerificationPoller,
    PollOutcome,
    VerificationPoller,
    classify_verify_status,
)

__version__ = "0.1.0"

__all__ = [
    # Models
    "HttpRequestSpec",
    "HttpResponseSpec",
    "Expectation",
    "Verification",
    "VerificationTimes",
    "a_request",
    "a_response",
    "never",
    "once",
    "twice",
    "exactly",
    "between",
    # Payloads
    "build_expectation_payload",
    "build_verification_payload",
    # Transport
    "TransportClient",
    "AsyncTransportClient",
    "HttpxTransport",
    "AsyncHttpxTransport",
    "TransportResponse",
    # Operations
    "ExpectationSubmitter",
    "AsyncExpectationSubmitter",
    "ResetOperation",
    "AsyncResetOperation",
    "VerificationPoller",
    "AsyncVerificationPoller",
    "PollOutcome",
    "classify_verify_status",
    # Results
    "FailureReason",
    "SubmitResult",
    "VerificationResult",
    "ResetResult",
    # Client
    "MockServerClient",
    "AsyncMockServerClient",
    "Reporter",
    "LoggingReporter",
    "RaisingReporter",
    # Config
    "MockServerSettings",
    "load_settings",
    # Files
    "InteractionFile",
    "InteractionFileError",
    "load_interactions",
    # Errors
    "ErrorCode",
    "ErrorContext",
    "MockServerClientError",
    "PayloadConstructionError",
    "TransportError",
    "ExpectationRejectedError",
    "VerificationFailedError",
    "ResetFailedError",
]
