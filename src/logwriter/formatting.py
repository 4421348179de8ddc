"""
Log Entry Formatting
Severity levels, entry rendering and template interpolation.
"""

import string
import traceback
from datetime import datetime
from enum import IntEnum
from typing import Any, Optional, Sequence

from logwriter.errors import FormatFailure

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
SEVERITY_WIDTH = 7

_formatter = string.Formatter()


class Severity(IntEnum):
    """Log severities, lowest to highest importance."""

    VERBOSE = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4

    @property
    def label(self) -> str:
        return self.name.capitalize()


def interpolate(template: str, args: Sequence[Any]) -> str:
    """
    Interpolate positional arguments into a ``{0}``-style template.

    Plain messages (no args) are returned verbatim so literal braces survive.
    The locale-aware ``n`` presentation type is refused so numbers render the
    same on every host.

    Raises:
        FormatFailure: if a placeholder has no matching argument, uses the
            ``n`` type, or the template is malformed.
    """
    if not args:
        return template

    try:
        for _, field, spec, _ in _formatter.parse(template):
            if field is not None and spec.endswith("n"):
                raise FormatFailure(f"Locale-dependent format spec {spec!r} in {template!r}")
        return template.format(*args)
    except FormatFailure:
        raise
    except (IndexError, KeyError, ValueError, TypeError, AttributeError) as e:
        raise FormatFailure(f"Cannot format {template!r} with {len(args)} argument(s): {e}") from e


def render_entry(severity: Severity, message: str, now: Optional[datetime] = None) -> str:
    """Render ``<timestamp> <severity> | <message>``."""
    timestamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
    return f"{timestamp} {severity.label:<{SEVERITY_WIDTH}} | {message}"


def describe_exception(error: BaseException) -> str:
    """Full description of an exception, chained causes and traceback included."""
    lines = traceback.format_exception(type(error), error, error.__traceback__)
    return "".join(lines).rstrip("\n")


def exception_message(message: Optional[str], error: BaseException) -> str:
    if message is None:
        return describe_exception(error)
    return f"{message}\n{describe_exception(error)}"
