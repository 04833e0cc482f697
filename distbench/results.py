"""
Benchmark result types.

A single attempt produces exactly one of two variants, distinguished by
their ``status`` field:

* ``BenchmarkSuccess`` -- timing breakdown and throughput of a download.
* ``BenchmarkError``   -- the URL and a human-readable message.

Both are frozen: once a probe hands one back it never changes.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union


@dataclass(frozen=True)
class BenchmarkSuccess:
    """A completed, plausible download measurement.

    Durations are in milliseconds, ``download_size`` in bytes and
    ``download_speed_bps`` in bits per second.  The sub-phase timings are
    ``None`` when the transport could not measure them.
    """

    ttfb: float
    total_request_time: float
    download_time: float
    download_size: float
    download_speed_bps: float
    url: str
    cache_status: str
    dns_lookup_time: Optional[float] = None
    ssl_time: Optional[float] = None
    processing_time: Optional[float] = None

    status = "success"

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "status": self.status,
            "url": self.url,
            "ttfb": round(self.ttfb, 3),
            "total_request_time": round(self.total_request_time, 3),
            "download_time": round(self.download_time, 3),
            "download_size": self.download_size,
            "download_speed_bps": round(self.download_speed_bps, 2),
            "cache_status": self.cache_status,
        }
        for key in ("dns_lookup_time", "ssl_time", "processing_time"):
            value = getattr(self, key)
            if value is not None:
                result[key] = round(value, 3)
        return result


@dataclass(frozen=True)
class BenchmarkError:
    """A failed attempt."""

    url: str
    error: str

    status = "error"

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "url": self.url, "error": self.error}


BenchmarkResult = Union[BenchmarkSuccess, BenchmarkError]


def is_success(result: BenchmarkResult) -> bool:
    return isinstance(result, BenchmarkSuccess)
