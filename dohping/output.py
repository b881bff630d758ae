"""
Output formatting for lookup results.

Provides multiple output formats:
- JSON: Machine-readable rows
- CSV: Spreadsheet-compatible rows
- Human-readable: Rich terminal table
"""

import csv
import ipaddress
import json
from io import StringIO
from pathlib import Path
from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table

from .models import ProbeStatistics, ResolverConfig, ResultRow


# Shown in place of the mean latency when no probe was answered
NO_LATENCY = "/"

# Row style for addresses that never answered
UNREACHABLE_STYLE = "dim"


def format_latency(stats: ProbeStatistics) -> str:
    """Render mean latency as "12ms", or "/" when undefined."""
    if stats.mean_latency_ms is None:
        return NO_LATENCY
    return f"{stats.mean_latency_ms}ms"


def format_loss(stats: ProbeStatistics) -> str:
    """Render loss ratio as a percentage, e.g. "20%"."""
    return f"{stats.loss_ratio * 100:g}%"


def sort_rows(rows: list[ResultRow]) -> list[ResultRow]:
    """Order rows by resolver tag, then numerically by address."""
    return sorted(
        rows,
        key=lambda r: (r.resolver_tag, int(ipaddress.IPv4Address(r.record.address))),
    )


def _row_dict(row: ResultRow) -> dict:
    stats = row.stats
    return {
        "resolver": row.resolver_tag,
        "name": row.record.name,
        "type": row.record.record_type,
        "ttl": row.record.ttl,
        "address": row.record.address,
        "sent": stats.sent,
        "received": stats.received,
        "mean_latency_ms": stats.mean_latency_ms,
        "min_latency_ms": stats.min_latency_ms,
        "max_latency_ms": stats.max_latency_ms,
        "jitter_ms": stats.jitter_ms,
        "loss_ratio": stats.loss_ratio,
    }


class JSONOutput:
    """JSON output formatter."""

    @staticmethod
    def format(rows: list[ResultRow], hostname: Optional[str] = None, indent: int = 2) -> str:
        """
        Format result rows as JSON.

        Undefined mean latency is written as null.

        Args:
            rows: Result rows to format
            hostname: Queried hostname, recorded in the output if given
            indent: JSON indentation level

        Returns:
            JSON string
        """
        data = {
            "hostname": hostname,
            "rows": [_row_dict(row) for row in rows],
        }
        return json.dumps(data, indent=indent)

    @staticmethod
    def save(rows: list[ResultRow], path: Path, hostname: Optional[str] = None) -> None:
        """Save result rows to a JSON file."""
        with open(path, "w") as f:
            f.write(JSONOutput.format(rows, hostname=hostname))


class CSVOutput:
    """CSV output formatter."""

    FIELDS = [
        "resolver",
        "name",
        "type",
        "ttl",
        "address",
        "sent",
        "received",
        "mean_latency_ms",
        "min_latency_ms",
        "max_latency_ms",
        "jitter_ms",
        "loss_ratio",
    ]

    @staticmethod
    def format(rows: list[ResultRow]) -> str:
        """Format result rows as CSV; undefined values are left empty."""
        output = StringIO()
        writer = csv.DictWriter(output, fieldnames=CSVOutput.FIELDS)
        writer.writeheader()

        for row in rows:
            writer.writerow({k: ("" if v is None else v) for k, v in _row_dict(row).items()})

        return output.getvalue()

    @staticmethod
    def save(rows: list[ResultRow], path: Path) -> None:
        """Save result rows to a CSV file."""
        with open(path, "w", newline="") as f:
            f.write(CSVOutput.format(rows))


class RichConsoleOutput:
    """Rich library console output with tables."""

    @staticmethod
    def build_table(rows: list[ResultRow]) -> Table:
        """Build the comparison table."""
        table = Table(box=box.ROUNDED, header_style="bold magenta")

        table.add_column("DoH", style="cyan", justify="center")
        table.add_column("Name")
        table.add_column("Type", justify="center")
        table.add_column("TTL", justify="right")
        table.add_column("Address", style="green")
        table.add_column("Avg", justify="right", style="yellow")
        table.add_column("Lost", justify="right", style="red")

        for row in rows:
            table.add_row(
                row.resolver_tag,
                row.record.name,
                str(row.record.record_type),
                str(row.record.ttl),
                row.record.address,
                format_latency(row.stats),
                format_loss(row.stats),
                style=None if row.stats.is_reachable else UNREACHABLE_STYLE,
            )

        return table

    @staticmethod
    def print(rows: list[ResultRow], console: Optional[Console] = None) -> None:
        """Print result rows as a table."""
        console = console or Console()
        console.print(RichConsoleOutput.build_table(rows))

    @staticmethod
    def print_resolvers(
        resolvers: dict[str, ResolverConfig],
        defaults: list[str],
        console: Optional[Console] = None,
    ) -> None:
        """Print the built-in resolver table."""
        console = console or Console()
        table = Table(
            title="Available DoH Resolvers",
            box=box.ROUNDED,
            header_style="bold cyan",
        )

        table.add_column("Tag", style="green")
        table.add_column("Endpoint", style="magenta")
        table.add_column("Default", justify="center")
        table.add_column("Description")

        for tag, resolver in sorted(resolvers.items()):
            table.add_row(
                tag,
                resolver.doh_url,
                "✓" if tag in defaults else "",
                resolver.description or "",
            )

        console.print(table)
