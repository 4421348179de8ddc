"""
LogWriter Utilities
Diagnostics logging, entry echo, I/O error classification and flush timing.
"""

import errno
import sys
import time
from concurrent.futures import ThreadPoolExecutor

import orjson
import structlog


def _orjson_dumps(obj, **kwargs) -> str:
    return orjson.dumps(obj, **kwargs).decode("utf-8")


_PROCESSORS = [
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.stdlib.add_log_level,
    structlog.processors.JSONRenderer(serializer=_orjson_dumps)
]


def get_logger():
    """
    Return a diagnostics logger writing JSON lines to stderr.

    Wrapped privately, so the host application's structlog configuration is
    neither used nor replaced.
    """
    return structlog.wrap_logger(
        structlog.PrintLogger(sys.stderr),
        processors=_PROCESSORS,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        cache_logger_on_first_use=True,
    )


logger = get_logger()

# One worker keeps echoed entries roughly in call order.
_echo_pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="logwriter-echo")


def _emit_entry(line: str) -> None:
    try:
        logger.debug("log_entry", entry=line)
    except Exception:
        # Echo is best effort only
        pass


def echo_entry(line: str) -> None:
    """Hand a rendered entry to the diagnostics stream without waiting for it."""
    try:
        _echo_pool.submit(_emit_entry, line)
    except Exception:
        # Pool is gone during interpreter shutdown
        pass


_DISK_FULL_ERRNOS = tuple(
    code for code in (errno.ENOSPC, getattr(errno, "EDQUOT", None)) if code is not None
)


def classify_io_error(exception: OSError) -> str:
    """
    Classify an OS-level failure for diagnostics events.

    Args:
        exception: The error raised while opening or writing the log file

    Returns:
        Short reason string, e.g. "permission_denied" or "disk_full"
    """
    if isinstance(exception, PermissionError):
        return "permission_denied"
    elif isinstance(exception, FileNotFoundError):
        return "not_found"
    elif isinstance(exception, IsADirectoryError):
        return "is_directory"
    elif exception.errno is not None and exception.errno in _DISK_FULL_ERRNOS:
        return "disk_full"
    else:
        return "io_error"


class LatencyTracker:
    """Track flush latency."""

    def __init__(self):
        self.start_time = None

    def start(self):
        """Start timing."""
        self.start_time = time.perf_counter()

    def elapsed_ms(self) -> float:
        """Get elapsed time in milliseconds."""
        if self.start_time is None:
            return 0.0
        return (time.perf_counter() - self.start_time) * 1000
