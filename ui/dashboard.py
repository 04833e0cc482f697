"""
Rich-based terminal output for benchmark results.

All formatting helpers live in ``distbench.stats`` -- this module only does
presentation via the ``rich`` library.
"""
from __future__ import annotations

from typing import List

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from distbench.results import BenchmarkResult, BenchmarkSuccess
from distbench.stats import BenchmarkSummary, format_bytes, format_mbps, format_ms

console = Console()


# ---------------------------------------------------------------------------
# Print helpers
# ---------------------------------------------------------------------------

def print_header(num_urls: int, size: int, runs: int) -> None:
    console.print()
    console.print(
        Panel.fit(
            "[bold cyan]Distributor Benchmark[/bold cyan]\n"
            f"[dim]{num_urls} URL(s), {format_bytes(size)} per run, "
            f"{runs} run(s) each[/dim]",
            border_style="cyan",
        )
    )
    console.print()


def print_result(result: BenchmarkResult) -> None:
    """Print one aggregated result as a table, or an error line."""
    if not isinstance(result, BenchmarkSuccess):
        console.print(f"[red]{result.url}[/red]\n  [red]Error: {result.error}[/red]")
        return

    table = Table(title=result.url, box=box.ROUNDED, title_justify="left")
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Download speed", f"[bold green]{format_mbps(result.download_speed_bps)}[/bold green]")
    table.add_row("TTFB", format_ms(result.ttfb))
    table.add_row("Total request time", format_ms(result.total_request_time))
    table.add_row("Download time", format_ms(result.download_time))
    table.add_row("Downloaded", format_bytes(result.download_size))
    if result.dns_lookup_time is not None:
        table.add_row("DNS lookup", format_ms(result.dns_lookup_time))
    if result.ssl_time is not None:
        table.add_row("TLS handshake", format_ms(result.ssl_time))
    if result.processing_time is not None:
        table.add_row("Server processing", format_ms(result.processing_time))
    table.add_row("Cache", result.cache_status)
    console.print(table)


def print_summary(summary: BenchmarkSummary) -> None:
    if summary.succeeded == 0:
        console.print(f"\n[bold red]All {summary.count} URL(s) failed[/bold red]")
        return

    console.print()
    console.print(
        Panel.fit(
            f"[bold white]Average TTFB:[/bold white]  [bold yellow]{format_ms(summary.avg_ttfb)}[/bold yellow]\n"
            f"[bold white]Average download speed:[/bold white]  "
            f"[bold green]{format_mbps(summary.avg_download_speed_bps)}[/bold green]\n"
            f"[bold white]Best download speed:[/bold white]  {format_mbps(summary.best_download_speed_bps)}\n"
            f"[bold white]Worst download speed:[/bold white]  {format_mbps(summary.worst_download_speed_bps)}\n"
            f"[dim]{summary.succeeded} succeeded, {summary.failed} failed[/dim]",
            title="[bold]Summary[/bold]",
            border_style="cyan",
        )
    )
    console.print()


def format_simple(result: BenchmarkResult) -> List[str]:
    """Plain-text lines for ``--simple`` mode."""
    if not isinstance(result, BenchmarkSuccess):
        return [f"URL: {result.url}", f"Benchmark failed: {result.error}"]
    return [
        f"URL: {result.url}",
        f"Download speed: {format_mbps(result.download_speed_bps)}",
        f"TTFB: {format_ms(result.ttfb)}",
        f"Downloaded: {result.download_size / 1e6:.2f} MB",
        f"Cache: {result.cache_status}",
    ]


# ---------------------------------------------------------------------------
# Progress display
# ---------------------------------------------------------------------------

class ProgressDisplay:
    """Manages a ``rich`` progress bar counting benchmarked URLs."""

    def __init__(self) -> None:
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold]{task.description}"),
            BarColumn(bar_width=40),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=console,
        )
        self._task_id = None

    def start(self, description: str, total: int) -> None:
        self.progress.start()
        self._task_id = self.progress.add_task(description, total=total)

    def advance(self) -> None:
        if self._task_id is None:
            return
        self.progress.advance(self._task_id)

    def stop(self) -> None:
        self.progress.stop()
