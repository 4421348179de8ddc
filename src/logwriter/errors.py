"""
LogWriter Errors
"""


class LogWriterError(Exception):
    """Base class for all LogWriter failures."""


class IOFailure(LogWriterError, OSError):
    """The log file could not be opened or written."""


class FormatFailure(LogWriterError, ValueError):
    """A message template and its arguments are incompatible."""


class InvalidState(LogWriterError, RuntimeError):
    """Operation on a closed writer, or shutdown without a live instance."""
