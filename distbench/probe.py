"""
Single-run download probe.

One probe issues one ranged GET against a URL, streams at most
``max_download_bytes`` of the body within a read budget, and turns what it
saw into a ``BenchmarkResult``.  Timing comes from two sources:

* coarse wall-clock stamps taken by the probe itself (always present), and
* optional per-phase timings reported by the transport.

The transport's ttfb is preferred when present; any negative duration is
replaced by its coarse counterpart.  Every failure is returned as a
``BenchmarkError`` -- nothing raised by the transport reaches the caller.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional

from .constants import (
    CACHE_STATUS_HEADER,
    CHUNK_SIZE,
    CONNECT_TIMEOUT_MS,
    DEFAULT_READ_DURATION_MS,
    MAX_PLAUSIBLE_SPEED_BPS,
    MIN_DOWNLOAD_TIME_MS,
    MIN_REQUEST_TIME_MS,
    NO_CACHE_HEADERS,
    UNKNOWN_CACHE_STATUS,
)
from .results import BenchmarkError, BenchmarkResult, BenchmarkSuccess
from .transport import PhaseTimings, Transport, TransportResponse

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def calculate_speed_bps(received_bytes: float, download_time_ms: float) -> float:
    """Bits per second, with the duration floored at 1 ms."""
    return received_bytes * 8 / max(download_time_ms, MIN_DOWNLOAD_TIME_MS) * 1000


def _corrected(value: float, coarse: float, name: str) -> float:
    if value >= 0:
        return value
    logger.debug("Negative %s (%.3f ms); using wall-clock value %.3f ms", name, value, coarse)
    return max(coarse, 0.0)


def _phase(value: Optional[float]) -> Optional[float]:
    # A negative phase is unusable and is dropped rather than guessed.
    if value is None or value < 0:
        return None
    return value


def _describe(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


# ---------------------------------------------------------------------------
# Probe
# ---------------------------------------------------------------------------

class SingleRunProbe:
    """
    Executes exactly one bounded download.

    *clock* returns seconds from a monotonic source; it is injectable so the
    timing arithmetic can be exercised deterministically.
    """

    def __init__(
        self,
        transport: Transport,
        connect_timeout_ms: float = CONNECT_TIMEOUT_MS,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.transport = transport
        self.connect_timeout_ms = connect_timeout_ms
        self._clock = clock

    def _now(self) -> float:
        return self._clock() * 1000

    async def probe(
        self,
        url: str,
        max_download_bytes: int,
        max_read_duration_ms: float = DEFAULT_READ_DURATION_MS,
    ) -> BenchmarkResult:
        logger.info("Running test for %s", url)
        try:
            result = await self._probe(url, max_download_bytes, max_read_duration_ms)
        except Exception as exc:
            logger.debug("Probe of %s failed", url, exc_info=True)
            return BenchmarkError(url=url, error=_describe(exc))

        if isinstance(result, BenchmarkError):
            logger.warning("Test for %s failed: %s", url, result.error)
        return result

    # -- Internals ----------------------------------------------------------

    async def _probe(
        self,
        url: str,
        max_download_bytes: int,
        max_read_duration_ms: float,
    ) -> BenchmarkResult:
        headers = {**NO_CACHE_HEADERS, "Range": f"bytes=0-{max_download_bytes - 1}"}

        start = self._now()
        try:
            response = await asyncio.wait_for(
                self.transport.fetch(url, headers),
                timeout=self.connect_timeout_ms / 1000,
            )
        except asyncio.TimeoutError:
            return BenchmarkError(
                url=url,
                error=f"Request timed out after {self.connect_timeout_ms:.0f} ms",
            )
        headers_at = self._now()

        try:
            if not response.ok:
                return BenchmarkError(
                    url=url,
                    error=f"Failed with status {response.status} {response.reason}".rstrip(),
                )
            if response.stream is None:
                return BenchmarkError(url=url, error="Couldn't read response body")

            read_start = self._now()
            received = await self._read_body(response, max_download_bytes, max_read_duration_ms)
            end = self._now()

            cache_status = response.headers.get(CACHE_STATUS_HEADER) or UNKNOWN_CACHE_STATUS
            timings = response.timings() if self.transport.supports_phase_timings else None
        finally:
            response.close()

        return self._build_result(
            url=url,
            received=received,
            cache_status=cache_status,
            timings=timings,
            coarse_ttfb=headers_at - start,
            coarse_total=end - start,
            coarse_download=end - read_start,
        )

    async def _read_body(
        self,
        response: TransportResponse,
        max_bytes: int,
        max_read_duration_ms: float,
    ) -> int:
        """Read until end of body, *max_bytes*, or the read budget runs out."""
        received = 0

        async def _drain() -> None:
            nonlocal received
            while received < max_bytes:
                remaining = max_bytes - received
                chunk = await response.stream.read(min(CHUNK_SIZE, remaining))
                if not chunk:
                    return
                received += min(len(chunk), remaining)
            # Cap reached before the body ended.
            response.abort()

        try:
            await asyncio.wait_for(_drain(), timeout=max_read_duration_ms / 1000)
        except asyncio.TimeoutError:
            logger.debug(
                "Read budget of %.0f ms exhausted after %d bytes", max_read_duration_ms, received
            )
            response.abort()

        return received

    def _build_result(
        self,
        *,
        url: str,
        received: int,
        cache_status: str,
        timings: Optional[PhaseTimings],
        coarse_ttfb: float,
        coarse_total: float,
        coarse_download: float,
    ) -> BenchmarkResult:
        ttfb = coarse_ttfb
        dns_lookup_time = ssl_time = processing_time = None
        if timings is not None:
            if timings.ttfb_ms is not None:
                ttfb = timings.ttfb_ms
            dns_lookup_time = _phase(timings.dns_lookup_ms)
            ssl_time = _phase(timings.ssl_ms)
            processing_time = _phase(timings.processing_ms)

        ttfb = _corrected(ttfb, coarse_ttfb, "ttfb")
        total_request_time = _corrected(coarse_total, coarse_total, "total request time")
        download_time = _corrected(coarse_download, coarse_download, "download time")
        if received > 0:
            download_time = max(download_time, MIN_DOWNLOAD_TIME_MS)

        if total_request_time < MIN_REQUEST_TIME_MS:
            return BenchmarkError(url=url, error="request time below 30ms")

        speed_bps = calculate_speed_bps(received, download_time)
        if speed_bps > MAX_PLAUSIBLE_SPEED_BPS:
            return BenchmarkError(url=url, error="download speed above 1Gbps")

        return BenchmarkSuccess(
            ttfb=ttfb,
            total_request_time=total_request_time,
            download_time=download_time,
            download_size=received,
            download_speed_bps=speed_bps,
            url=url,
            cache_status=cache_status,
            dns_lookup_time=dns_lookup_time,
            ssl_time=ssl_time,
            processing_time=processing_time,
        )
