"""Debug utility for trackmv.

Provides a single debug() function that can be toggled via the
TRACKMV_DEBUG environment variable, and configure_logging() which routes
structlog output to stderr at a level matching the same toggle.

Usage:
    from trackmv.utils.debug import debug

    debug(f"Acquired lock {lock_path}")

Environment:
    TRACKMV_DEBUG: Set to '1', 'true', 'yes' (case-insensitive) to enable
                   debug output. Any other value or unset disables it.
"""

import logging
import os
import sys
from typing import Any

import structlog

from trackmv.core.constants import DEBUG_ENV


def debug_enabled() -> bool:
    """Return True when TRACKMV_DEBUG asks for debug output."""
    return os.environ.get(DEBUG_ENV, "").lower() in ("1", "true", "yes")


# Determine if debug mode is enabled at module import time
_DEBUG_ENABLED = debug_enabled()


def debug(msg: Any) -> None:
    """Print debug message to stderr if TRACKMV_DEBUG is enabled.

    Args:
        msg: Message to print. Will be converted to string.

    Note:
        The environment variable is read at module import time. Changing it
        after import will not affect behavior unless the module is reloaded.
    """
    if _DEBUG_ENABLED:
        print(f"[DEBUG] {msg}", file=sys.stderr)


def configure_logging(verbose: bool | None = None) -> None:
    """Configure structlog to write key/value events to stderr.

    Args:
        verbose: Force DEBUG level on or off; defaults to TRACKMV_DEBUG.
    """
    enabled = debug_enabled() if verbose is None else verbose
    level = logging.DEBUG if enabled else logging.WARNING

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
