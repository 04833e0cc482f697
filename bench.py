#!/usr/bin/env python3
"""
Distributor benchmark CLI -- measure download performance of asset URLs.

Usage::

    python bench.py URL                       # rich output
    python bench.py URL1 URL2 URL3            # benchmark each, then summarise
    python bench.py URL --simple              # plain text
    python bench.py URL --size 50000000       # bytes per run
    python bench.py URL --runs 5              # runs per URL
    python bench.py URL --read-duration 5000  # read budget per run (ms)
    python bench.py URL -v                    # debug logging
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from rich.logging import RichHandler

from distbench.config import config_path, load_config
from distbench.constants import (
    MAX_DOWNLOAD_SIZE,
    MAX_READ_DURATION_MS,
    MAX_RUNS,
    MIN_DOWNLOAD_SIZE,
    MIN_READ_DURATION_MS,
    MIN_RUNS,
)
from distbench.probe import SingleRunProbe
from distbench.results import BenchmarkResult, is_success
from distbench.runner import BenchmarkRunner
from distbench.stats import summarize_results
from distbench.transport import AiohttpTransport
from ui.dashboard import (
    ProgressDisplay,
    console,
    format_simple,
    print_header,
    print_result,
    print_summary,
)


# ---------------------------------------------------------------------------
# Parameter validation
# ---------------------------------------------------------------------------

def _validate(size: int, runs: int, read_duration_ms: float) -> None:
    """Raise ``ValueError`` if any parameter is out of range."""
    if not MIN_DOWNLOAD_SIZE <= size <= MAX_DOWNLOAD_SIZE:
        raise ValueError(f"Size must be between {MIN_DOWNLOAD_SIZE} and {MAX_DOWNLOAD_SIZE} bytes")
    if not MIN_RUNS <= runs <= MAX_RUNS:
        raise ValueError(f"Runs must be between {MIN_RUNS} and {MAX_RUNS}")
    if not MIN_READ_DURATION_MS <= read_duration_ms <= MAX_READ_DURATION_MS:
        raise ValueError(
            f"Read duration must be between {MIN_READ_DURATION_MS} and {MAX_READ_DURATION_MS} ms"
        )


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


# ---------------------------------------------------------------------------
# Core benchmark runner
# ---------------------------------------------------------------------------

async def run_benchmarks(
    urls: List[str],
    *,
    size: int,
    runs: int,
    read_duration_ms: float,
    simple: bool = False,
) -> List[BenchmarkResult]:
    """Benchmark every URL in turn, print results, and return them."""
    show_ui = not simple
    progress: Optional[ProgressDisplay] = None

    if show_ui:
        print_header(len(urls), size, runs)
        progress = ProgressDisplay()
        progress.start("Running tests", total=len(urls))

    def _on_result(idx: int, total: int, result: BenchmarkResult) -> None:
        if show_ui:
            print_result(result)
            progress.advance()
        else:
            if idx > 0:
                print()
            print("\n".join(format_simple(result)))

    async with AiohttpTransport() as transport:
        runner = BenchmarkRunner(SingleRunProbe(transport), read_duration_ms=read_duration_ms)
        try:
            results = await runner.run_many(urls, size, runs, on_result=_on_result)
        finally:
            if progress:
                progress.stop()

    if len(urls) > 1:
        summary = summarize_results(results)
        if show_ui:
            print_summary(summary)
        else:
            print()
            print(f"Succeeded: {summary.succeeded}/{summary.count}")

    return results


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def main() -> None:
    config = load_config()

    parser = argparse.ArgumentParser(
        description="Distributor benchmark -- download performance of asset URLs",
        epilog=f"Defaults can be set in {config_path()}",
    )
    parser.add_argument("urls", nargs="+", metavar="URL", help="URL(s) to benchmark")
    parser.add_argument("--size", type=int, default=config["size"], metavar="BYTES", help=f"Bytes to download per run (default: {config['size']})")
    parser.add_argument("--runs", "-n", type=int, default=config["runs"], metavar="N", help=f"Runs per URL (default: {config['runs']})")
    parser.add_argument("--read-duration", type=float, default=config["read_duration_ms"], metavar="MS", help=f"Read budget per run in ms (default: {config['read_duration_ms']})")
    parser.add_argument("--simple", "-s", action="store_true", help="Simple output mode (plain text)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    args = parser.parse_args()
    _setup_logging(args.verbose)

    try:
        _validate(size=args.size, runs=args.runs, read_duration_ms=args.read_duration)
    except ValueError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        sys.exit(1)

    try:
        results = asyncio.run(
            run_benchmarks(
                args.urls,
                size=args.size,
                runs=args.runs,
                read_duration_ms=args.read_duration,
                simple=args.simple,
            )
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]Benchmark cancelled by user[/yellow]")
        sys.exit(1)
    except Exception as exc:
        console.print(f"\n[red]Error: {exc}[/red]")
        sys.exit(1)

    if not any(is_success(r) for r in results):
        sys.exit(1)


if __name__ == "__main__":
    main()
