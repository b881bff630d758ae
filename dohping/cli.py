"""
Command-line interface for dohping.

Resolves a hostname through several DoH resolvers, pings every
returned address and prints a comparison table.
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from . import __version__
from .errors import ConfigurationError, ResolveError
from .logging_setup import setup_logging
from .models import ProbeConfig
from .output import CSVOutput, JSONOutput, RichConsoleOutput, sort_rows
from .privileges import default_privileged_mode
from .prober import ICMPProber
from .resolvers import (
    DEFAULT_RESOLVERS,
    RESOLVERS,
    as_endpoint_map,
    get_resolver,
    list_resolvers,
    parse_custom_resolver,
)
from .runner import LookupRunner, suggested_deadline


logger = logging.getLogger(__name__)


def create_progress_callback(console: Console):
    """Create a progress callback showing a transient spinner."""
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    )
    task_id = progress.add_task("Resolving and probing...", total=None)

    def callback(message: str, current: int, total: int):
        progress.update(task_id, description=f"{message} ({current}/{total})")

    return progress, callback


def report_error(tag: str, error: ResolveError) -> None:
    """Print a resolver failure to stderr."""
    click.echo(f"{tag} error: {error}", err=True)


@click.group(context_settings={"auto_envvar_prefix": "DOHPING"})
@click.version_option(__version__)
def main():
    """
    dohping - Compare DoH resolvers by the latency of the addresses they return.

    Every option can also be set through a DOHPING_<COMMAND>_<OPTION>
    environment variable.
    """
    pass


@main.command()
@click.option(
    "--host",
    required=True,
    help="Hostname to resolve",
)
@click.option(
    "--resolver", "-r",
    multiple=True,
    help="Built-in resolver to use (can specify multiple). Options: " + ", ".join(list_resolvers()),
)
@click.option(
    "--custom-resolver", "-c",
    multiple=True,
    help="Custom resolver as TAG=URL (can specify multiple)",
)
@click.option(
    "--count",
    type=int,
    default=10,
    show_default=True,
    help="Echo requests per address",
)
@click.option(
    "--interval",
    type=float,
    default=1.0,
    show_default=True,
    help="Seconds between echo requests",
)
@click.option(
    "--timeout",
    type=float,
    default=1.0,
    show_default=True,
    help="Seconds to wait for each echo reply",
)
@click.option(
    "--http-timeout",
    type=float,
    default=10.0,
    show_default=True,
    help="DoH request timeout in seconds",
)
@click.option(
    "--deadline",
    type=float,
    default=None,
    help="Give up on a resolver after this many seconds",
)
@click.option(
    "--auto-deadline",
    type=click.IntRange(min=1),
    default=None,
    metavar="ADDRESSES",
    help="Derive --deadline from the probe settings for this many addresses per resolver",
)
@click.option(
    "--privileged/--unprivileged",
    default=None,
    help="Use raw ICMP sockets (default: only when running as root/Administrator)",
)
@click.option(
    "--sort",
    is_flag=True,
    help="Sort rows by resolver tag and address",
)
@click.option(
    "--json",
    is_flag=True,
    help="Output results as JSON to stdout",
)
@click.option(
    "--output", "-o",
    type=click.Path(),
    help="Output file path (JSON or CSV based on extension)",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Log skipped answers and lost probes",
)
@click.option(
    "--quiet", "-q",
    is_flag=True,
    help="Suppress progress output and warnings",
)
def query(
    host: str,
    resolver: tuple,
    custom_resolver: tuple,
    count: int,
    interval: float,
    timeout: float,
    http_timeout: float,
    deadline: Optional[float],
    auto_deadline: Optional[int],
    privileged: Optional[bool],
    sort: bool,
    json: bool,
    output: Optional[str],
    verbose: bool,
    quiet: bool,
):
    """
    Resolve HOST through each resolver and ping every returned address.

    Examples:

    \b
      # Default resolvers
      dohping query --host example.com

    \b
      # Pick resolvers and add a custom one
      dohping query --host example.com -r google -c mine=https://doh.example/dns-query

    \b
      # Faster, less precise probing
      dohping query --host example.com --count 4 --interval 0.2
    """
    setup_logging(verbose=verbose, quiet=quiet)

    if privileged is None:
        privileged = default_privileged_mode()

    # Build configuration before anything touches the network
    try:
        resolvers_list = [get_resolver(tag) for tag in resolver]
        resolvers_list.extend(parse_custom_resolver(spec) for spec in custom_resolver)
        if not resolvers_list:
            resolvers_list = [get_resolver(tag) for tag in DEFAULT_RESOLVERS]

        probe_config = ProbeConfig(
            count=count,
            interval=interval,
            timeout=timeout,
            privileged=privileged,
        )
        if deadline is None and auto_deadline is not None:
            deadline = suggested_deadline(probe_config, auto_deadline, http_timeout)
            logger.debug("using a %.1fs deadline per resolver", deadline)
        runner = LookupRunner(
            as_endpoint_map(resolvers_list),
            http_timeout=http_timeout,
            deadline=deadline,
            prober=ICMPProber(probe_config),
        )
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)

    logger.debug(
        "probing with %d requests, %.1fs interval, %s sockets",
        probe_config.count,
        probe_config.interval,
        "raw" if privileged else "datagram",
    )

    show_progress = not quiet and not json
    progress_ctx, progress_callback = None, None
    if show_progress:
        progress_ctx, progress_callback = create_progress_callback(Console(stderr=True))

    async def run_lookup():
        try:
            return await runner.run(
                host,
                error_callback=report_error,
                progress_callback=progress_callback,
            )
        finally:
            await runner.close()

    # Run with progress
    if progress_ctx:
        with progress_ctx:
            rows = asyncio.run(run_lookup())
    else:
        rows = asyncio.run(run_lookup())

    if sort:
        rows = sort_rows(rows)

    if json:
        click.echo(JSONOutput.format(rows, hostname=host))
    else:
        RichConsoleOutput.print(rows)

    if output:
        path = Path(output)
        if path.suffix.lower() == ".csv":
            CSVOutput.save(rows, path)
        else:
            if path.suffix.lower() != ".json":
                path = path.with_suffix(".json")
            JSONOutput.save(rows, path, hostname=host)
        if not quiet:
            click.echo(f"Results saved to {path}", err=True)


@main.command()
def list_available():
    """List all built-in DoH resolvers."""
    RichConsoleOutput.print_resolvers(RESOLVERS, DEFAULT_RESOLVERS)


if __name__ == "__main__":
    main()
