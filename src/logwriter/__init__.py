"""
logwriter
---------

Thread-safe buffered writer for the process log file.
"""

from .errors import (
    LogWriterError,
    IOFailure,
    FormatFailure,
    InvalidState,
)

from .formatting import (
    Severity,
)

from .log_writer import (
    LogWriter,
    get_instance,
    shutdown,
)

__all__ = [
    # Errors
    "LogWriterError",
    "IOFailure",
    "FormatFailure",
    "InvalidState",
    # Formatting
    "Severity",
    # Writer
    "LogWriter",
    "get_instance",
    "shutdown",
]
