"""Distributor benchmark library -- download probing, timing, and aggregation."""

from .probe import SingleRunProbe, calculate_speed_bps
from .results import BenchmarkError, BenchmarkResult, BenchmarkSuccess, is_success
from .runner import BenchmarkRunner, run_benchmark
from .stats import (
    BenchmarkSummary,
    aggregate_results,
    format_bytes,
    format_mbps,
    format_ms,
    select_representative,
    summarize_results,
)
from .transport import AiohttpTransport, PhaseTimings, Transport, TransportResponse

__all__ = [
    "AiohttpTransport",
    "BenchmarkError",
    "BenchmarkResult",
    "BenchmarkRunner",
    "BenchmarkSuccess",
    "BenchmarkSummary",
    "PhaseTimings",
    "SingleRunProbe",
    "Transport",
    "TransportResponse",
    "aggregate_results",
    "calculate_speed_bps",
    "format_bytes",
    "format_mbps",
    "format_ms",
    "is_success",
    "run_benchmark",
    "select_representative",
    "summarize_results",
]
