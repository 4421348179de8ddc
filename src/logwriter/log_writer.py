"""
LogWriter
Thread-safe buffered writer for the process log file.

Entries are rendered on the calling thread, queued under a lock and written
to the file in batches once the queue reaches the flush threshold, or when
the writer is flushed or closed.
"""

from collections import deque
from contextlib import contextmanager
from pathlib import Path
from threading import RLock
from typing import Any, Deque, Optional, Union

from logwriter.errors import FormatFailure, InvalidState, IOFailure, LogWriterError
from logwriter.formatting import Severity, exception_message, interpolate, render_entry
from logwriter.settings import Settings, resolve_log_path
from logwriter.utils import LatencyTracker, classify_io_error, echo_entry, get_logger

logger = get_logger()

DEFAULT_FLUSH_THRESHOLD = 100

__all__ = [
    "FormatFailure",
    "IOFailure",
    "InvalidState",
    "LogWriter",
    "LogWriterError",
    "Severity",
    "debug",
    "error",
    "exception",
    "get_instance",
    "info",
    "log",
    "shutdown",
    "verbose",
    "warn",
]


class LogWriter:
    """Append-only log file writer with an in-memory pending queue."""

    def __init__(
        self,
        path: Union[str, Path],
        flush_threshold: int = DEFAULT_FLUSH_THRESHOLD,
        echo: bool = True
    ):
        if flush_threshold < 1:
            raise ValueError("flush_threshold must be at least 1")

        self._path = Path(path)
        self.flush_threshold = flush_threshold
        self.echo = echo
        self._lock = RLock()
        self._queue: Deque[str] = deque()
        self._closed = False

        try:
            self._stream = open(self._path, "a", encoding="utf-8")
        except OSError as e:
            logger.error(
                "log_writer_open_failed",
                path=str(self._path),
                failure_reason=classify_io_error(e),
                error=str(e)
            )
            raise IOFailure(f"Cannot open log file {self._path}: {e}") from e

        logger.info("log_writer_opened", path=str(self._path), flush_threshold=flush_threshold)

    def __enter__(self) -> "LogWriter":
        return self

    def __exit__(self, exc_type, exc, tb):
        with self._lock:
            if not self._closed:
                self.close()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending_count(self) -> int:
        """Number of queued entries not yet written to the file."""
        with self._lock:
            return len(self._queue)

    def log(self, severity: Severity, message: str, *args: Any) -> None:
        """
        Render and queue one entry.

        Verbose entries are dropped before any work is done. With ``args`` the
        message is treated as a ``{0}``-style template.

        Raises:
            FormatFailure: template and args do not match; nothing is queued.
            InvalidState: the writer is closed.
            IOFailure: the threshold flush failed.
        """
        if severity == Severity.VERBOSE:
            return

        severity = Severity(severity)
        line = render_entry(severity, interpolate(message, args))

        with self._lock:
            self._ensure_open()
            self._queue.append(line)
            if len(self._queue) >= self.flush_threshold:
                with self._guard_io("flush"):
                    self._flush_locked()

        if self.echo:
            echo_entry(line)

    def verbose(self, message: str, *args: Any) -> None:
        self.log(Severity.VERBOSE, message, *args)

    def debug(self, message: str, *args: Any) -> None:
        self.log(Severity.DEBUG, message, *args)

    def info(self, message: str, *args: Any) -> None:
        self.log(Severity.INFO, message, *args)

    def warn(self, message: str, *args: Any) -> None:
        self.log(Severity.WARN, message, *args)

    def error(self, message: str, *args: Any) -> None:
        self.log(Severity.ERROR, message, *args)

    def exception(self, error: BaseException, message: Optional[str] = None) -> None:
        """Log ``error`` with its traceback at Error severity, optionally after ``message``."""
        self.log(Severity.ERROR, exception_message(message, error))

    def flush(self) -> None:
        """Write all pending entries to the file."""
        with self._lock:
            self._ensure_open()
            with self._guard_io("flush"):
                self._flush_locked()

    def close(self) -> None:
        """
        Flush pending entries, terminate the file with a blank line and close it.

        A closed writer cannot be reopened; construct a new one instead.
        """
        with self._lock:
            self._ensure_open()
            self._closed = True
            with self._guard_io("close"):
                try:
                    self._flush_locked()
                    self._stream.write("\n")
                finally:
                    self._stream.close()

        logger.info("log_writer_closed", path=str(self._path))

    def _ensure_open(self):
        if self._closed:
            raise InvalidState(f"LogWriter for {self._path} is closed")

    def _flush_locked(self):
        """Drain the queue in FIFO order (requires lock already held)."""
        if not self._queue:
            return

        tracker = LatencyTracker()
        tracker.start()

        count = 0
        while self._queue:
            entry = self._queue.popleft()
            self._stream.write(entry + "\n")
            count += 1
        self._stream.flush()

        logger.debug("log_flush", entries=count, latency_ms=round(tracker.elapsed_ms(), 2))

    @contextmanager
    def _guard_io(self, action: str):
        try:
            yield
        except OSError as e:
            logger.error(
                "log_writer_write_failed",
                path=str(self._path),
                action=action,
                failure_reason=classify_io_error(e),
                error=str(e)
            )
            raise IOFailure(f"Failed to {action} log file {self._path}: {e}") from e


# Process-wide default instance
_instance: Optional[LogWriter] = None
_instance_lock = RLock()


def get_instance() -> LogWriter:
    """
    Return the process-wide writer, creating it on first use.

    The log path, flush threshold and echo flag are read from ``Settings`` at
    creation time.

    Raises:
        IOFailure: the log file cannot be opened.
    """
    global _instance

    instance = _instance
    if instance is not None:
        return instance

    with _instance_lock:
        if _instance is None:
            settings = Settings()
            _instance = LogWriter(
                resolve_log_path(settings),
                flush_threshold=settings.logwriter_flush_threshold,
                echo=settings.logwriter_diagnostic_echo
            )
        return _instance


def shutdown() -> None:
    """
    Close the process-wide writer and clear it.

    The next ``get_instance()`` reopens the log file in append mode.

    Raises:
        InvalidState: there is no live instance.
    """
    global _instance

    with _instance_lock:
        if _instance is None:
            raise InvalidState("No live LogWriter to shut down")
        instance, _instance = _instance, None
        instance.close()


def log(severity: Severity, message: str, *args: Any) -> None:
    get_instance().log(severity, message, *args)


def verbose(message: str, *args: Any) -> None:
    get_instance().verbose(message, *args)


def debug(message: str, *args: Any) -> None:
    get_instance().debug(message, *args)


def info(message: str, *args: Any) -> None:
    get_instance().info(message, *args)


def warn(message: str, *args: Any) -> None:
    get_instance().warn(message, *args)


def error(message: str, *args: Any) -> None:
    get_instance().error(message, *args)


def exception(error: BaseException, message: Optional[str] = None) -> None:
    get_instance().exception(error, message)
