"""
Shared constants used across all distbench modules.

Centralises magic numbers, default headers, and tunables so they live in
exactly one place.
"""

# ---------------------------------------------------------------------------
# HTTP headers
# ---------------------------------------------------------------------------

USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/144.0.0.0 Safari/537.36"
)

COMMON_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "*/*",
    "Accept-Language": "en-US,en;q=0.9",
    # Compressed bodies would distort the byte count.
    "Accept-Encoding": "identity",
}

# Sent with every probe so no intermediary hands back a stored copy.
NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}

CACHE_STATUS_HEADER = "X-Cache"
UNKNOWN_CACHE_STATUS = "unknown"
CACHE_HIT = "HIT"

# ---------------------------------------------------------------------------
# Timing (milliseconds)
# ---------------------------------------------------------------------------

CONNECT_TIMEOUT_MS = 5000         # response headers must arrive within this
DEFAULT_READ_DURATION_MS = 10_000 # body read budget per run
WATCHDOG_GRACE_MS = 2000          # slack on top of the probe's own timeouts
RUN_INTERVAL_MS = 200             # pause between consecutive runs

# ---------------------------------------------------------------------------
# Plausibility gate
# ---------------------------------------------------------------------------

MIN_REQUEST_TIME_MS = 30.0
MAX_PLAUSIBLE_SPEED_BPS = 1e9     # 1 Gbps
MIN_DOWNLOAD_TIME_MS = 1.0        # floor for the speed division

# ---------------------------------------------------------------------------
# Data transfer
# ---------------------------------------------------------------------------

CHUNK_SIZE = 256 * 1024           # 256 KB per read

# ---------------------------------------------------------------------------
# Parameter limits
# ---------------------------------------------------------------------------

DEFAULT_DOWNLOAD_SIZE = 20_000_000  # 20 MB
MIN_DOWNLOAD_SIZE = 1
MAX_DOWNLOAD_SIZE = 1_000_000_000

DEFAULT_RUNS = 3
MIN_RUNS = 1
MAX_RUNS = 50

MIN_READ_DURATION_MS = 100
MAX_READ_DURATION_MS = 300_000
