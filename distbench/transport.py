"""
HTTP transport used by the probe.

The probe only needs a small surface: issue a GET with extra headers, look
at status and headers, read the body in bounded chunks, abort mid-stream,
and -- when the client can provide them -- per-phase timings.  ``Transport``
and ``TransportResponse`` describe that surface; ``AiohttpTransport`` is the
real implementation.  All HTTP work goes through a single
``aiohttp.ClientSession`` managed via async-context-manager protocol
(``async with AiohttpTransport() as transport: ...``).

Phase timings come from ``aiohttp.TraceConfig`` hooks.  aiohttp opens TCP
and TLS in a single step, so a separate TLS span is never reported by it.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import aiohttp

from .constants import COMMON_HEADERS, CONNECT_TIMEOUT_MS


# ---------------------------------------------------------------------------
# Timing data
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PhaseTimings:
    """Fine-grained request phases in milliseconds; ``None`` = not measured."""

    dns_lookup_ms: Optional[float] = None
    connect_ms: Optional[float] = None
    ssl_ms: Optional[float] = None
    processing_ms: Optional[float] = None
    ttfb_ms: Optional[float] = None


_LAST_WINS = frozenset({"request_end"})


class PhaseRecorder:
    """Collects trace marks (in ms) for one request."""

    def __init__(self) -> None:
        self.marks: Dict[str, float] = {}

    def mark(self, name: str) -> None:
        now = time.perf_counter() * 1000
        # Redirects repeat events: the final response ends the request,
        # every other phase keeps its first occurrence.
        if name in _LAST_WINS:
            self.marks[name] = now
        else:
            self.marks.setdefault(name, now)

    def _span(self, start: str, end: str) -> Optional[float]:
        if start in self.marks and end in self.marks:
            return self.marks[end] - self.marks[start]
        return None

    def timings(self) -> Optional[PhaseTimings]:
        if "request_start" not in self.marks:
            return None
        return PhaseTimings(
            dns_lookup_ms=self._span("dns_start", "dns_end"),
            connect_ms=self._span("connect_start", "connect_end"),
            processing_ms=self._span("headers_sent", "request_end"),
            ttfb_ms=self._span("request_start", "request_end"),
        )


# ---------------------------------------------------------------------------
# Abstract surface
# ---------------------------------------------------------------------------

class TransportResponse:
    """
    An in-flight response whose headers have arrived.

    ``stream`` exposes ``async read(n) -> bytes`` returning at most *n*
    bytes and ``b""`` at end of body, or is ``None`` when there is no
    readable body.
    """

    status: int = 0
    reason: str = ""
    headers: Mapping[str, str] = {}
    stream: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def timings(self) -> Optional[PhaseTimings]:
        return None

    def abort(self) -> None:
        """Tear the connection down without waiting for the rest of the body."""

    def close(self) -> None:
        """Release the response once the probe is done with it."""


class Transport:
    """A streaming HTTP client."""

    supports_phase_timings = False

    async def fetch(self, url: str, headers: Mapping[str, str]) -> TransportResponse:
        raise NotImplementedError


# ---------------------------------------------------------------------------
# aiohttp implementation
# ---------------------------------------------------------------------------

def _marker(name: str):
    async def _on_event(session, trace_config_ctx, params) -> None:  # noqa: ANN001
        recorder = trace_config_ctx.trace_request_ctx
        if isinstance(recorder, PhaseRecorder):
            recorder.mark(name)
    return _on_event


def build_trace_config() -> aiohttp.TraceConfig:
    """TraceConfig that stamps each phase boundary into a ``PhaseRecorder``."""
    trace = aiohttp.TraceConfig()
    trace.on_request_start.append(_marker("request_start"))
    trace.on_dns_resolvehost_start.append(_marker("dns_start"))
    trace.on_dns_resolvehost_end.append(_marker("dns_end"))
    trace.on_connection_create_start.append(_marker("connect_start"))
    trace.on_connection_create_end.append(_marker("connect_end"))
    trace.on_request_headers_sent.append(_marker("headers_sent"))
    trace.on_request_end.append(_marker("request_end"))
    return trace


class AiohttpResponse(TransportResponse):
    def __init__(self, response: aiohttp.ClientResponse, recorder: PhaseRecorder) -> None:
        self._response = response
        self._recorder = recorder
        self.status = response.status
        self.reason = response.reason or ""
        self.headers = response.headers
        self.stream = response.content

    def timings(self) -> Optional[PhaseTimings]:
        return self._recorder.timings()

    def abort(self) -> None:
        self._response.close()

    def close(self) -> None:
        self._response.close()


class AiohttpTransport(Transport):
    """Async context-manager wrapping an ``aiohttp.ClientSession``."""

    supports_phase_timings = True

    def __init__(self) -> None:
        self._session: Optional[aiohttp.ClientSession] = None

    # -- Context manager ----------------------------------------------------

    async def __aenter__(self) -> AiohttpTransport:
        # No DNS cache and no keep-alive: every run resolves and connects anew.
        connector = aiohttp.TCPConnector(
            ssl=True,
            force_close=True,
            use_dns_cache=False,
            enable_cleanup_closed=True,
        )
        timeout = aiohttp.ClientTimeout(total=None, connect=CONNECT_TIMEOUT_MS / 1000)
        self._session = aiohttp.ClientSession(
            headers=COMMON_HEADERS,
            connector=connector,
            timeout=timeout,
            trace_configs=[build_trace_config()],
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._session:
            await self._session.close()
            self._session = None

    # -- Internal helpers ---------------------------------------------------

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            raise RuntimeError(
                "AiohttpTransport must be used as an async context manager "
                "(async with AiohttpTransport() as transport: ...)"
            )
        return self._session

    # -- Public methods -----------------------------------------------------

    async def fetch(self, url: str, headers: Mapping[str, str]) -> AiohttpResponse:
        session = self._ensure_session()
        recorder = PhaseRecorder()
        response = await session.get(url, headers=dict(headers), trace_request_ctx=recorder)
        return AiohttpResponse(response, recorder)
