"""Wire payloads for the MockServer expectation and verify endpoints.

The request body is always matched strictly as JSON:

    {"contentType": "application/json", "type": "JSON",
     "matchType": "STRICT", "json": <body>}

The two endpoints disagree on how ``json`` is encoded. Expectations embed
the structured body as-is. Verifications embed the body already encoded
as a JSON string. MockServer's verify endpoint expects the second form,
so the asymmetry must stay.
"""

from __future__ import annotations

import json
from typing import Any

from mockserver_client.errors import ErrorCode, PayloadConstructionError
from mockserver_client.models import Expectation, HttpRequestSpec, Verification

JSON_CONTENT_TYPE = "application/json"


def _encode(value: Any, what: str) -> str:
    try:
        return json.dumps(value, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise PayloadConstructionError(
            f"Unable to serialize {what} to JSON: {e}",
            error_code=ErrorCode.SERIALIZATION_FAILED,
            cause=e,
        ) from e


def body_envelope(json_value: Any) -> dict[str, Any]:
    """Wrap a body in the strict JSON matcher envelope."""
    return {
        "contentType": JSON_CONTENT_TYPE,
        "type": "JSON",
        "matchType": "STRICT",
        "json": json_value,
    }


def build_http_request(request: HttpRequestSpec, json_value: Any = None) -> dict[str, Any]:
    """Build the ``httpRequest`` object.

    Optional members are omitted when empty: MockServer treats an absent
    ``pathParameters`` differently from an empty one.
    """
    wire: dict[str, Any] = {}
    if request.method:
        wire["method"] = request.method
    wire["path"] = request.path
    if request.path_parameters:
        wire["pathParameters"] = {k: list(v) for k, v in request.path_parameters.items()}
    if request.query_params:
        wire["queryStringParameters"] = dict(request.query_params)
    if request.headers:
        wire["headers"] = dict(request.headers)
    if request.cookies:
        wire["cookies"] = dict(request.cookies)
    if json_value is not None:
        wire["body"] = body_envelope(json_value)
    return wire


def build_expectation_payload(expectation: Expectation) -> dict[str, Any]:
    """Build the ``PUT /mockserver/expectation`` body.

    Raises:
        PayloadConstructionError: If the request or response body is not
            JSON-serializable
    """
    request = expectation.request
    response = expectation.response
    if request.body is not None:
        _encode(request.body, "request body")

    http_response: dict[str, Any] = {}
    if response.status_code:
        http_response["statusCode"] = response.status_code
    if response.body is not None:
        http_response["body"] = _encode(response.body, "response body")

    return {
        "httpRequest": build_http_request(request, request.body),
        "httpResponse": http_response,
    }


def build_verification_payload(verification: Verification) -> dict[str, Any]:
    """Build the ``PUT /mockserver/verify`` body.

    Raises:
        PayloadConstructionError: If the request body is not JSON-serializable
    """
    request = verification.request
    encoded_body = None
    if request.body is not None:
        encoded_body = _encode(request.body, "request body")

    return {
        "httpRequest": build_http_request(request, encoded_body),
        "times": verification.times.to_dict(),
    }
