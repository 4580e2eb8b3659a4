"""Configuration settings and loading."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MockServerSettings(BaseSettings):
    """Connection settings for a MockServer instance."""

    model_config = SettingsConfigDict(
        env_prefix="MOCKSERVER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    address: str = "localhost:1080"
    scheme: str = "http"
    timeout: float = 30.0
    poll_interval: float = 1.0
    # No default: each caller picks a budget matching its own timeout tolerance.
    verify_attempts: int | None = None
    verbose: bool = False

    @field_validator("address")
    @classmethod
    def validate_address(cls, v: str) -> str:
        host, sep, port = v.rpartition(":")
        if not sep or not host or not port.isdigit():
            raise ValueError(f"address must be host:port, got {v!r}")
        return v

    @field_validator("scheme")
    @classmethod
    def validate_scheme(cls, v: str) -> str:
        if v not in ("http", "https"):
            raise ValueError(f"scheme must be 'http' or 'https', got {v!r}")
        return v

    @field_validator("timeout", "poll_interval")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be positive")
        return v

    @field_validator("verify_attempts")
    @classmethod
    def validate_attempts(cls, v: int | None) -> int | None:
        if v is not None and v < 1:
            raise ValueError("verify_attempts must be at least 1")
        return v

    @property
    def base_url(self) -> str:
        return f"{self.scheme}://{self.address}"


def load_settings(config_path: str | Path | None = None) -> MockServerSettings:
    """Load settings from a YAML file and the environment.

    Priority: env vars > config file > defaults
    """
    config_data: dict[str, Any] = {}

    if config_path is not None:
        config_path = Path(config_path)
        if config_path.exists():
            with open(config_path) as f:
                raw = yaml.safe_load(f) or {}
            config_data = raw.get("mockserver", raw)

    config_data.update(_get_env_overrides())

    return MockServerSettings(**config_data)


def _get_env_overrides() -> dict[str, Any]:
    """Get configuration overrides from environment variables."""
    overrides: dict[str, Any] = {}

    env_mappings = {
        "MOCKSERVER_ADDRESS": "address",
        "MOCKSERVER_SCHEME": "scheme",
        "MOCKSERVER_TIMEOUT": ("timeout", float),
        "MOCKSERVER_POLL_INTERVAL": ("poll_interval", float),
        "MOCKSERVER_VERIFY_ATTEMPTS": ("verify_attempts", int),
        "MOCKSERVER_VERBOSE": ("verbose", lambda x: x.lower() in ("true", "1", "yes")),
    }

    for env_key, config_key in env_mappings.items():
        value = os.environ.get(env_key)
        if value is not None:
            if isinstance(config_key, tuple):
                key, converter = config_key
                overrides[key] = converter(value)
            else:
                overrides[config_key] = value

    return overrides
