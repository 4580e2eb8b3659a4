"""Interaction and verification models.

An interaction is described by a request pattern (HttpRequestSpec) and,
for expectations, the canned response MockServer should return
(HttpResponseSpec). Verifications pair a request pattern with a
VerificationTimes range.

All models are frozen. The fluent ``with_*`` methods return a new value
instead of mutating the receiver, so a pattern can be shared and extended
safely.

Example:
    >>> from mockserver_client import a_request, a_response, Expectation, once
    >>>
    >>> expectation = Expectation.when(
    ...     a_request().with_method("POST").with_path("/api/orders").with_body({"item": 1})
    ... ).respond(
    ...     a_response().with_status_code(201).with_body({"id": 42})
    ... )
    >>> verification = Verification.of(expectation, once())
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from mockserver_client.errors import ErrorCode, PayloadConstructionError


@dataclass(frozen=True)
class HttpRequestSpec:
    """Pattern describing an incoming HTTP request.

    Attributes:
        method: HTTP verb; None matches any method
        path: URL path pattern; MockServer rejects patterns without one
        headers: Header name to value
        query_params: Parameter name to a value or list of alternative values
        path_parameters: Path segment name to ordered alternative values
        cookies: Cookie name to value
        body: JSON-serializable body, matched strictly
    """

    method: str | None = None
    path: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    query_params: dict[str, Any] = field(default_factory=dict)
    path_parameters: dict[str, list[str]] = field(default_factory=dict)
    cookies: dict[str, str] = field(default_factory=dict)
    body: Any = None

    def with_method(self, method: str) -> HttpRequestSpec:
        return replace(self, method=method)

    def with_path(self, path: str) -> HttpRequestSpec:
        return replace(self, path=path)

    def with_header(self, headers: dict[str, str]) -> HttpRequestSpec:
        return replace(self, headers=dict(headers))

    def with_query_params(self, query_params: dict[str, Any]) -> HttpRequestSpec:
        return replace(self, query_params=dict(query_params))

    def with_path_parameters(self, path_parameters: dict[str, list[str]]) -> HttpRequestSpec:
        return replace(
            self,
            path_parameters={name: list(values) for name, values in path_parameters.items()},
        )

    def with_cookies(self, cookies: dict[str, str]) -> HttpRequestSpec:
        return replace(self, cookies=dict(cookies))

    def with_body(self, body: Any) -> HttpRequestSpec:
        return replace(self, body=body)

    @property
    def has_path(self) -> bool:
        return bool(self.path)

    def describe(self) -> str:
        """Short human-readable form, e.g. ``GET /api/users``."""
        return f"{self.method or 'ANY'} {self.path or '<no path>'}"


@dataclass(frozen=True)
class HttpResponseSpec:
    """Canned response returned by MockServer when an expectation matches."""

    status_code: int = 0
    body: Any = None

    def with_status_code(self, status_code: int) -> HttpResponseSpec:
        return replace(self, status_code=status_code)

    def with_body(self, body: Any) -> HttpResponseSpec:
        return replace(self, body=body)


@dataclass(frozen=True)
class Expectation:
    """A rule stored on MockServer: if a request matches, respond with R."""

    request: HttpRequestSpec = field(default_factory=HttpRequestSpec)
    response: HttpResponseSpec = field(default_factory=HttpResponseSpec)

    @classmethod
    def when(cls, request: HttpRequestSpec) -> Expectation:
        return cls(request=request)

    def respond(self, response: HttpResponseSpec) -> Expectation:
        return replace(self, response=response)


@dataclass(frozen=True)
class VerificationTimes:
    """Closed range of how many times an interaction must have occurred."""

    at_least: int
    at_most: int

    def __post_init__(self) -> None:
        if self.at_least < 0 or self.at_most < 0:
            raise PayloadConstructionError(
                f"Verification bounds must be non-negative, got "
                f"at_least={self.at_least}, at_most={self.at_most}",
                error_code=ErrorCode.INVALID_RANGE,
            )
        if self.at_least > self.at_most:
            raise PayloadConstructionError(
                f"at_least ({self.at_least}) must not exceed at_most ({self.at_most})",
                error_code=ErrorCode.INVALID_RANGE,
            )

    def to_dict(self) -> dict[str, int]:
        return {"atLeast": self.at_least, "atMost": self.at_most}

    def __str__(self) -> str:
        if self.at_least == self.at_most:
            return f"exactly {self.at_least} time(s)"
        return f"between {self.at_least} and {self.at_most} times"


def never() -> VerificationTimes:
    return VerificationTimes(at_least=0, at_most=0)


def once() -> VerificationTimes:
    return VerificationTimes(at_least=1, at_most=1)


def twice() -> VerificationTimes:
    return VerificationTimes(at_least=2, at_most=2)


def exactly(times: int) -> VerificationTimes:
    return VerificationTimes(at_least=times, at_most=times)


def between(at_least: int, at_most: int) -> VerificationTimes:
    return VerificationTimes(at_least=at_least, at_most=at_most)


@dataclass(frozen=True)
class Verification:
    """Query asking MockServer whether a request arrived ``times`` times."""

    request: HttpRequestSpec
    times: VerificationTimes

    @classmethod
    def of(cls, expectation: Expectation, times: VerificationTimes) -> Verification:
        return cls(request=expectation.request, times=times)

    def describe(self) -> str:
        return f"{self.request.describe()} {self.times}"


def a_request() -> HttpRequestSpec:
    """Start building a request pattern."""
    return HttpRequestSpec()


def a_response() -> HttpResponseSpec:
    """Start building a canned response."""
    return HttpResponseSpec()
