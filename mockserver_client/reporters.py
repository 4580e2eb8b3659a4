"""Sinks that surface terminal outcomes to the caller.

The pollers and submitters return result values. MockServerClient hands
each terminal outcome to a Reporter, which decides how it is surfaced:
logged, raised, or reported through a test framework.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from mockserver_client.results import ResetResult, SubmitResult, VerificationResult

logger = logging.getLogger(__name__)

Outcome = SubmitResult | VerificationResult | ResetResult


class Reporter(ABC):
    """Receives success and failure messages."""

    @abstractmethod
    def log(self, message: str) -> None:
        ...

    @abstractmethod
    def fail(self, message: str, outcome: Outcome) -> None:
        ...


class LoggingReporter(Reporter):
    """Logs outcomes and lets the caller inspect the returned result."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._logger = log or logger

    def log(self, message: str) -> None:
        self._logger.info(message)

    def fail(self, message: str, outcome: Outcome) -> None:
        self._logger.error(message)


class RaisingReporter(Reporter):
    """Raises the outcome's exception on failure."""

    def log(self, message: str) -> None:
        logger.info(message)

    def fail(self, message: str, outcome: Outcome) -> None:
        outcome.raise_for_outcome()
