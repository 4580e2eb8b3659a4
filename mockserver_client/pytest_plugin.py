"""pytest integration.

Registered through the ``pytest11`` entry point. Provides:

- ``--mockserver-address`` command line option (falls back to
  MOCKSERVER_ADDRESS / defaults from MockServerSettings)
- ``mockserver`` fixture: a MockServerClient that fails the current test
  on any terminal failure and resets the server after the test

Example:
    def test_order_created(mockserver):
        expectation = Expectation.when(
            a_request().with_method("POST").with_path("/api/orders")
        ).respond(a_response().with_status_code(201))
        mockserver.expect(expectation)

        place_order()

        mockserver.verify(Verification.of(expectation, once()), max_attempts=5)
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest

from mockserver_client.client import MockServerClient
from mockserver_client.config import MockServerSettings, load_settings
from mockserver_client.expectations import ResetOperation
from mockserver_client.reporters import Outcome, Reporter

logger = logging.getLogger(__name__)


class PytestReporter(Reporter):
    """Reports terminal failures through ``pytest.fail``."""

    def log(self, message: str) -> None:
        logger.info(message)

    def fail(self, message: str, outcome: Outcome) -> None:
        pytest.fail(message, pytrace=False)


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("mockserver")
    group.addoption(
        "--mockserver-address",
        action="store",
        default=None,
        help="MockServer host:port used by the mockserver fixture",
    )
    group.addoption(
        "--mockserver-config",
        action="store",
        default=None,
        help="YAML file with mockserver settings",
    )


@pytest.fixture(scope="session")
def mockserver_settings(pytestconfig: pytest.Config) -> MockServerSettings:
    settings = load_settings(pytestconfig.getoption("mockserver_config"))
    address = pytestconfig.getoption("mockserver_address")
    if address:
        settings = MockServerSettings(**{**settings.model_dump(), "address": address})
    return settings


@pytest.fixture
def mockserver(mockserver_settings: MockServerSettings) -> Iterator[MockServerClient]:
    client = MockServerClient.from_settings(mockserver_settings, reporter=PytestReporter())
    try:
        yield client
    finally:
        # Reset without the pytest reporter so teardown never masks the test outcome.
        result = ResetOperation(client.transport, client.reset_uri).reset()
        if not result.ok:
            logger.warning(f"MockServer reset after test failed: {result.message}")
        client.close()
