"""CLI commands for mockserver-client."""

from __future__ import annotations

import logging
import sys

import click
from rich.console import Console

from mockserver_client.client import MockServerClient
from mockserver_client.config import MockServerSettings, load_settings
from mockserver_client.errors import MockServerClientError
from mockserver_client.loader import load_interactions
from mockserver_client.reporters import LoggingReporter

console = Console()


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity level."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _client(ctx: click.Context) -> MockServerClient:
    settings: MockServerSettings = ctx.obj["settings"]
    return MockServerClient.from_settings(settings, reporter=LoggingReporter())


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--config", "-c", type=click.Path(exists=True), help="Path to config file")
@click.option("--address", "-a", help="MockServer host:port (overrides config)")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config: str | None, address: str | None) -> None:
    """mockserver-client - manage MockServer expectations."""
    ctx.ensure_object(dict)

    try:
        settings = load_settings(config)
        if address:
            settings = MockServerSettings(**{**settings.model_dump(), "address": address})
    except ValueError as e:
        raise click.BadParameter(str(e)) from e

    ctx.obj["settings"] = settings
    setup_logging(verbose or settings.verbose)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def expect(ctx: click.Context, file: str) -> None:
    """Create every expectation listed in FILE."""
    try:
        interactions = load_interactions(file)
    except MockServerClientError as e:
        console.print(f"[red]✗[/red] {e}")
        sys.exit(1)

    if not interactions.expectations:
        console.print(f"[yellow]No expectations found in {file}[/yellow]")
        return

    failures = 0
    with _client(ctx) as client:
        for expectation in interactions.expectations:
            result = client.expect(expectation)
            label = expectation.request.describe()
            if result.accepted:
                console.print(f"[green]✓[/green] {label}")
            else:
                failures += 1
                console.print(f"[red]✗[/red] {label}: {result.message}")

    sys.exit(1 if failures else 0)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--attempts", "-n", type=click.IntRange(min=1), help="Verify attempts per entry")
@click.pass_context
def verify(ctx: click.Context, file: str, attempts: int | None) -> None:
    """Verify every verification listed in FILE."""
    settings: MockServerSettings = ctx.obj["settings"]
    max_attempts = attempts or settings.verify_attempts
    if max_attempts is None:
        raise click.UsageError(
            "No attempt budget: pass --attempts or set MOCKSERVER_VERIFY_ATTEMPTS"
        )

    try:
        interactions = load_interactions(file)
    except MockServerClientError as e:
        console.print(f"[red]✗[/red] {e}")
        sys.exit(1)

    if not interactions.verifications:
        console.print(f"[yellow]No verifications found in {file}[/yellow]")
        return

    failures = 0
    with _client(ctx) as client:
        for verification in interactions.verifications:
            result = client.verify(verification, max_attempts)
            label = verification.describe()
            if result.satisfied:
                console.print(f"[green]✓[/green] {label} ({result.attempts} attempt(s))")
            else:
                failures += 1
                console.print(f"[red]✗[/red] {label}: {result.message}")

    sys.exit(1 if failures else 0)


@cli.command()
@click.pass_context
def reset(ctx: click.Context) -> None:
    """Clear all expectations and recorded requests."""
    with _client(ctx) as client:
        result = client.reset()

    if result.ok:
        console.print("[green]✓[/green] Expectations have been reset")
        sys.exit(0)
    console.print(f"[red]✗[/red] {result.message}")
    sys.exit(1)


def main() -> None:
    """Main entry point for the mockserver-client CLI."""
    cli()
