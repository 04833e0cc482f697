"""
Repeated-run benchmark driver.

``BenchmarkRunner`` runs a ``SingleRunProbe`` against one URL several
times, strictly one after another with a short pause in between, and
collapses the run set into one result via ``aggregate_results``.  Each run
sits behind a watchdog slightly longer than the probe's own timeouts, so a
probe that somehow hangs turns into an "unexpected timeout" error instead
of blocking the benchmark.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional, Sequence

from .constants import (
    DEFAULT_READ_DURATION_MS,
    RUN_INTERVAL_MS,
    WATCHDOG_GRACE_MS,
)
from .probe import SingleRunProbe
from .results import BenchmarkError, BenchmarkResult
from .stats import aggregate_results
from .transport import AiohttpTransport

logger = logging.getLogger(__name__)

# Signature: (url_index, total_urls, aggregated_result)
ResultCallback = Callable[[int, int, BenchmarkResult], None]


class BenchmarkRunner:
    """Sequential multi-run benchmark against a single URL."""

    def __init__(
        self,
        probe: SingleRunProbe,
        read_duration_ms: float = DEFAULT_READ_DURATION_MS,
        interval_ms: float = RUN_INTERVAL_MS,
        watchdog_grace_ms: float = WATCHDOG_GRACE_MS,
    ) -> None:
        self.probe = probe
        self.read_duration_ms = read_duration_ms
        self.interval_ms = interval_ms
        self.watchdog_grace_ms = watchdog_grace_ms

    @property
    def watchdog_ms(self) -> float:
        return self.probe.connect_timeout_ms + self.read_duration_ms + self.watchdog_grace_ms

    # -- Single URL ---------------------------------------------------------

    async def run(self, url: str, max_download_bytes: int, num_runs: int) -> BenchmarkResult:
        if num_runs < 1:
            raise ValueError(f"num_runs must be >= 1, got {num_runs}")

        results: List[BenchmarkResult] = []
        for run_idx in range(num_runs):
            if run_idx > 0:
                await asyncio.sleep(self.interval_ms / 1000)
            results.append(await self._guarded_probe(url, max_download_bytes))

        return aggregate_results(results)

    async def _guarded_probe(self, url: str, max_download_bytes: int) -> BenchmarkResult:
        try:
            return await asyncio.wait_for(
                self.probe.probe(url, max_download_bytes, self.read_duration_ms),
                timeout=self.watchdog_ms / 1000,
            )
        except asyncio.TimeoutError:
            logger.warning("Watchdog fired after %.0f ms for %s", self.watchdog_ms, url)
            return BenchmarkError(url=url, error="unexpected timeout")

    # -- Multiple URLs ------------------------------------------------------

    async def run_many(
        self,
        urls: Sequence[str],
        max_download_bytes: int,
        num_runs: int,
        on_result: Optional[ResultCallback] = None,
    ) -> List[BenchmarkResult]:
        """Benchmark *urls* one after another; results keep input order."""
        results: List[BenchmarkResult] = []
        for idx, url in enumerate(urls):
            result = await self.run(url, max_download_bytes, num_runs)
            results.append(result)
            if on_result:
                on_result(idx, len(urls), result)
        return results


async def run_benchmark(
    url: str,
    max_download_bytes: int,
    num_runs: int,
    *,
    max_read_duration_ms: float = DEFAULT_READ_DURATION_MS,
) -> BenchmarkResult:
    """Benchmark *url* over a fresh aiohttp transport."""
    async with AiohttpTransport() as transport:
        runner = BenchmarkRunner(SingleRunProbe(transport), read_duration_ms=max_read_duration_ms)
        return await runner.run(url, max_download_bytes, num_runs)
