"""UI layer -- Rich console output for benchmark results."""

from .dashboard import (
    ProgressDisplay,
    console,
    format_simple,
    print_header,
    print_result,
    print_summary,
)

__all__ = [
    "ProgressDisplay",
    "console",
    "format_simple",
    "print_header",
    "print_result",
    "print_summary",
]
