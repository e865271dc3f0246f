"""Terminal view of one scrape using Rich: a table of samples plus scrape counters."""

from __future__ import annotations

import logging
from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from wls_exporter.collector.exposition import format_value
from wls_exporter.metrics import ScrapeResult

log = logging.getLogger(__name__)


def _format_labels(labels) -> str:
    return ", ".join(f"{k}={v}" for k, v in labels.items())


def build_table(result: ScrapeResult, source_name: str) -> Table:
    counters = result.counters
    table = Table(
        title=f"{source_name}",
        caption=(
            f"{len(result.samples)} samples from {counters.mbeans} MBeans "
            f"in {counters.duration_seconds * 1000:.1f} ms"
        ),
        show_header=True,
        header_style="bold",
    )
    table.add_column("Metric", style="cyan")
    table.add_column("Labels")
    table.add_column("Value", justify="right")

    for sample in result.samples:
        # floats in yellow so 71.0 vs 71 stays visible
        style = "yellow" if isinstance(sample.value, float) else "green"
        table.add_row(sample.name, _format_labels(sample.labels), Text(format_value(sample.value), style=style))

    return table


def show_result(result: Optional[ScrapeResult], source_name: str, console: Optional[Console] = None):
    console = console or Console()

    if result is None:
        console.print("[dim]No queries configured.[/dim]")
        return

    for comment in result.comments:
        console.print(f"[bold red]{comment}[/bold red]")

    if not result.samples:
        console.print("[dim]Scrape returned no samples.[/dim]")
        log.debug("Empty scrape from %s", source_name)
        return

    console.print(build_table(result, source_name))
