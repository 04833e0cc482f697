"""
User configuration file support.

Reads ``~/.distbench/config.json``.  Only the command line consults it;
the benchmark core takes all of its inputs as arguments.

Supported keys::

    size = 20000000           # bytes to download per run
    runs = 3                  # runs per URL
    read_duration_ms = 10000  # body read budget per run
"""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

from .constants import DEFAULT_DOWNLOAD_SIZE, DEFAULT_READ_DURATION_MS, DEFAULT_RUNS

logger = logging.getLogger(__name__)

_CONFIG_DIR = os.path.join(Path.home(), ".distbench")
_CONFIG_FILE = "config.json"


def _config_path() -> str:
    return os.path.join(_CONFIG_DIR, _CONFIG_FILE)


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULTS: Dict[str, Any] = {
    "size": DEFAULT_DOWNLOAD_SIZE,
    "runs": DEFAULT_RUNS,
    "read_duration_ms": DEFAULT_READ_DURATION_MS,
}


# ---------------------------------------------------------------------------
# Read
# ---------------------------------------------------------------------------

def load_config() -> Dict[str, Any]:
    """Load config from disk, returning defaults for missing keys."""
    path = _config_path()
    config = dict(DEFAULTS)

    if not os.path.isfile(path):
        return config

    try:
        with open(path, encoding="utf-8") as fh:
            user = json.load(fh)
    except (json.JSONDecodeError, IOError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", path, exc)
        return config

    if isinstance(user, dict):
        config.update({k: v for k, v in user.items() if k in DEFAULTS})
    return config


def config_path() -> str:
    """Return the config file path (for display purposes)."""
    return _config_path()
