"""CLI interface for staticgate.

Command-line tool for serving static assets locally, inspecting how a path
resolves, and checking a deployment's responses.
"""

import asyncio
import logging
import sys
from pathlib import Path

import click

from staticgate.config import Config
from staticgate.core.outcome import Forbidden, Found, NotFound
from staticgate.errors import AssetReadError


def _load_config(config_path: Path | None) -> Config:
    try:
        return Config.load(config_path)
    except (FileNotFoundError, ValueError) as e:
        raise click.ClickException(str(e)) from e


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover staticgate.toml)",
)

verbose_option = click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output (debug logging)",
)


@click.group()
def cli() -> None:
    """staticgate - static assets behind API Gateway and Lambda."""


@cli.command()
@config_option
@click.option(
    "--root",
    "-r",
    type=click.Path(exists=True, path_type=Path, file_okay=False),
    default=None,
    help="Serve this directory under / (overrides configured mounts)",
)
@click.option(
    "--host",
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
@verbose_option
def serve(
    config_path: Path | None,
    root: Path | None,
    host: str | None,
    port: int | None,
    verbose: bool,
) -> None:
    """Start a local server for the configured assets."""
    from staticgate.server import run_server

    _configure_logging(verbose)
    config = _load_config(config_path).with_overrides(host=host, port=port, root=root)

    click.echo(f"Starting server on {config.server.host}:{config.server.port}")
    for mount in config.assets.effective_mounts():
        click.echo(f"Mount: {mount.prefix} -> {mount.directory}")

    try:
        run_server(config)
    except ValueError as e:
        raise click.ClickException(str(e)) from e


@cli.command()
@click.argument("path")
@config_option
@verbose_option
def resolve(path: str, config_path: Path | None, verbose: bool) -> None:
    """Show how PATH resolves: 200, 403 or 404."""
    _configure_logging(verbose)
    config = _load_config(config_path)

    try:
        resolver = config.build_resolver()
        outcome = resolver.resolve(path)
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    except AssetReadError as e:
        click.echo(f"500 Internal Server Error: {e}", err=True)
        sys.exit(2)

    match outcome:
        case Found():
            click.echo(f"200 {outcome.content_type} {outcome.size} bytes")
            click.echo(f"Source: {outcome.source_path}")
        case Forbidden():
            click.echo(f"403 Forbidden: {outcome.reason}")
            sys.exit(1)
        case NotFound():
            click.echo(f"404 Not Found: {outcome.reason}")
            sys.exit(1)


@cli.command()
@click.argument("base_url")
@config_option
@click.option(
    "--timeout",
    type=float,
    default=10.0,
    show_default=True,
    help="Per-request timeout in seconds",
)
@verbose_option
def check(base_url: str, config_path: Path | None, timeout: float, verbose: bool) -> None:
    """Check that BASE_URL returns the expected status for each path."""
    from staticgate.checks import run_checks

    _configure_logging(verbose)
    config = _load_config(config_path)

    results = asyncio.run(run_checks(base_url, config.checks, timeout=timeout))

    failures = 0
    for result in results:
        expected = result.expectation.status
        actual = result.actual if result.actual is not None else "-"
        line = f"{result.expectation.path} expected={expected} actual={actual}"
        if result.ok:
            click.echo(f"PASS {line}")
        else:
            failures += 1
            suffix = f" ({result.error})" if result.error else ""
            click.echo(f"FAIL {line}{suffix}")

    click.echo(f"{len(results) - failures}/{len(results)} checks passed")
    if failures:
        sys.exit(1)


if __name__ == "__main__":
    cli()
