"""
Run-set aggregation and summary statistics.

Pure functions and lightweight dataclasses -- no I/O, no side effects.
Everything here is deterministic and easy to unit-test.
"""
from __future__ import annotations

import logging
import statistics
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .constants import CACHE_HIT
from .results import BenchmarkResult, BenchmarkSuccess

logger = logging.getLogger(__name__)

_AVERAGED_FIELDS = (
    "ttfb",
    "total_request_time",
    "download_time",
    "download_size",
    "download_speed_bps",
)
_OPTIONAL_FIELDS = ("dns_lookup_time", "ssl_time", "processing_time")


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

def select_representative(successes: Sequence[BenchmarkSuccess]) -> List[BenchmarkSuccess]:
    """Cache-hit results when there are any, otherwise every success."""
    hits = [r for r in successes if r.cache_status == CACHE_HIT]
    return hits or list(successes)


def _mean_optional(selected: Sequence[BenchmarkSuccess], name: str) -> Optional[float]:
    values = [getattr(r, name) for r in selected]
    if all(v is None for v in values):
        return None
    return statistics.mean(v if v is not None else 0.0 for v in values)


def aggregate_results(results: Sequence[BenchmarkResult]) -> BenchmarkResult:
    """
    Collapse a run set into one representative result.

    With no successes the first result is returned as-is.  Otherwise every
    numeric field is the arithmetic mean over the selected successes (see
    ``select_representative``); ``url`` and ``cache_status`` come from the
    first selected result.
    """
    if not results:
        raise ValueError("Cannot aggregate an empty run set")

    successes = [r for r in results if isinstance(r, BenchmarkSuccess)]
    if not successes:
        return results[0]

    selected = select_representative(successes)
    logger.debug(
        "Averaging %d of %d runs (%d successful, cache status %s)",
        len(selected), len(results), len(successes), selected[0].cache_status,
    )

    first = selected[0]
    averaged = {name: statistics.mean(getattr(r, name) for r in selected) for name in _AVERAGED_FIELDS}
    optional = {name: _mean_optional(selected, name) for name in _OPTIONAL_FIELDS}

    return BenchmarkSuccess(
        url=first.url,
        cache_status=first.cache_status,
        **averaged,
        **optional,
    )


# ---------------------------------------------------------------------------
# Multi-URL summary
# ---------------------------------------------------------------------------

@dataclass
class BenchmarkSummary:
    """Headline numbers across several benchmarked URLs."""

    count: int = 0
    succeeded: int = 0
    failed: int = 0
    avg_ttfb: float = 0.0
    avg_download_speed_bps: float = 0.0
    best_download_speed_bps: float = 0.0
    worst_download_speed_bps: float = 0.0


def summarize_results(results: Sequence[BenchmarkResult]) -> BenchmarkSummary:
    """Average TTFB and speed plus best / worst speed, over successes only."""
    successes = [r for r in results if isinstance(r, BenchmarkSuccess)]
    summary = BenchmarkSummary(
        count=len(results),
        succeeded=len(successes),
        failed=len(results) - len(successes),
    )
    if not successes:
        return summary

    speeds = [r.download_speed_bps for r in successes]
    summary.avg_ttfb = statistics.mean(r.ttfb for r in successes)
    summary.avg_download_speed_bps = statistics.mean(speeds)
    summary.best_download_speed_bps = max(speeds)
    summary.worst_download_speed_bps = min(speeds)
    return summary


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def format_mbps(speed_bps: float) -> str:
    """Bits per second as megabits, two decimals."""
    return f"{speed_bps / 1e6:.2f} Mbps"


def format_ms(value_ms: float) -> str:
    return f"{value_ms:.2f} ms"


def format_bytes(size: float) -> str:
    """Human-readable byte count (decimal units)."""
    if size >= 1e9:
        return f"{size / 1e9:.2f} GB"
    if size >= 1e6:
        return f"{size / 1e6:.2f} MB"
    if size >= 1e3:
        return f"{size / 1e3:.2f} kB"
    return f"{size:.0f} B"
