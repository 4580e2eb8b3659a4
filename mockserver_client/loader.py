"""Load expectations and verifications from YAML or JSON files.

Expected format:
```yaml
expectations:
  - request:
      method: POST
      path: /api/orders
      headers:
        Content-Type: application/json
      body:
        item_id: 1
    response:
      status_code: 201
      body:
        id: 42

verifications:
  - request:
      method: POST
      path: /api/orders
    times: once          # never | once | twice | <n> | {at_least: 1, at_most: 3}
```
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from mockserver_client.errors import ErrorCode, MockServerClientError
from mockserver_client.models import (
    Expectation,
    HttpRequestSpec,
    HttpResponseSpec,
    Verification,
    VerificationTimes,
    exactly,
    never,
    once,
    twice,
)

_TIMES_PRESETS = {"never": never, "once": once, "twice": twice}

_REQUEST_KEYS = {
    "method": "method",
    "path": "path",
    "headers": "headers",
    "query_params": "query_params",
    "queryStringParameters": "query_params",
    "path_parameters": "path_parameters",
    "pathParameters": "path_parameters",
    "cookies": "cookies",
    "body": "body",
}


class InteractionFileError(MockServerClientError):
    """An expectations file could not be read or parsed."""

    error_code = ErrorCode.PAYLOAD_INVALID
    default_message = "Invalid expectations file"
    default_suggestions = [
        "Check the file is valid YAML or JSON",
        "Each entry needs a 'request' mapping with at least a 'path'",
    ]


@dataclass
class InteractionFile:
    """Parsed contents of an expectations file."""

    expectations: list[Expectation] = field(default_factory=list)
    verifications: list[Verification] = field(default_factory=list)


def _as_int(value: Any, what: str) -> int:
    if isinstance(value, bool):
        raise InteractionFileError(f"{what} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise InteractionFileError(f"{what} must be an integer, got {value!r}", cause=e) from e


def parse_request(data: dict[str, Any]) -> HttpRequestSpec:
    if not isinstance(data, dict):
        raise InteractionFileError(f"request must be a mapping, got {type(data).__name__}")

    kwargs: dict[str, Any] = {}
    for key, value in data.items():
        target = _REQUEST_KEYS.get(key)
        if target is None:
            raise InteractionFileError(f"Unknown request field: {key}")
        kwargs[target] = value

    if "path_parameters" in kwargs:
        kwargs["path_parameters"] = {
            name: values if isinstance(values, list) else [values]
            for name, values in kwargs["path_parameters"].items()
        }
    return HttpRequestSpec(**kwargs)


def parse_response(data: dict[str, Any] | None) -> HttpResponseSpec:
    if data is None:
        return HttpResponseSpec()
    if not isinstance(data, dict):
        raise InteractionFileError(f"response must be a mapping, got {type(data).__name__}")
    return HttpResponseSpec(
        status_code=_as_int(data.get("status_code", data.get("statusCode", 0)), "status_code"),
        body=data.get("body"),
    )


def parse_times(value: Any) -> VerificationTimes:
    """Parse a ``times`` value: preset name, exact count, or bounds mapping."""
    if isinstance(value, bool):
        raise InteractionFileError(f"Invalid times value: {value!r}")
    if isinstance(value, str):
        preset = _TIMES_PRESETS.get(value.lower())
        if preset is None:
            raise InteractionFileError(
                f"Unknown times preset {value!r}. Valid: {sorted(_TIMES_PRESETS)}"
            )
        return preset()
    if isinstance(value, int):
        return exactly(value)
    if isinstance(value, dict):
        at_least = value.get("at_least", value.get("atLeast", 0))
        at_most = value.get("at_most", value.get("atMost", at_least))
        return VerificationTimes(
            at_least=_as_int(at_least, "at_least"),
            at_most=_as_int(at_most, "at_most"),
        )
    raise InteractionFileError(f"Invalid times value: {value!r}")


def parse_interactions(raw: dict[str, Any] | None) -> InteractionFile:
    result = InteractionFile()
    if not raw:
        return result

    for index, entry in enumerate(raw.get("expectations") or []):
        if not isinstance(entry, dict) or "request" not in entry:
            raise InteractionFileError(f"expectations[{index}] needs a 'request' mapping")
        result.expectations.append(
            Expectation(
                request=parse_request(entry["request"]),
                response=parse_response(entry.get("response")),
            )
        )

    for index, entry in enumerate(raw.get("verifications") or []):
        if not isinstance(entry, dict) or "request" not in entry:
            raise InteractionFileError(f"verifications[{index}] needs a 'request' mapping")
        result.verifications.append(
            Verification(
                request=parse_request(entry["request"]),
                times=parse_times(entry.get("times", "once")),
            )
        )

    return result


def load_interactions(path: str | Path) -> InteractionFile:
    """Load an expectations file.

    Raises:
        InteractionFileError: If the file is missing or malformed
    """
    path = Path(path)
    if not path.exists():
        raise InteractionFileError(f"File not found: {path}")

    try:
        with open(path) as f:
            if path.suffix == ".json":
                raw = json.load(f)
            else:
                raw = yaml.safe_load(f)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise InteractionFileError(f"Unable to parse {path}: {e}", cause=e) from e

    if raw is not None and not isinstance(raw, dict):
        raise InteractionFileError(f"{path} must contain a mapping at the top level")

    return parse_interactions(raw)
