"""
LogWriter Settings
Configuration provider for the log file location and buffering.
"""

import os
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings

APP_DIR_NAME = "logwriter"
DEFAULT_LOG_NAME = "logwriter.log"


class Settings(BaseSettings):
    """Application settings from environment."""
    logwriter_log_path: Optional[Path] = None
    logwriter_flush_threshold: int = Field(default=100, ge=1)

    logwriter_diagnostic_echo: bool = True

    class Config:
        env_file = "config/.env"
        env_file_encoding = "utf-8"


def get_data_dir() -> Path:
    """Return the per-user data directory (~/.local/share/logwriter)."""
    if os.name == "nt":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
    else:
        base = Path(os.environ.get("XDG_DATA_HOME") or Path.home() / ".local" / "share")
    return base / APP_DIR_NAME


def resolve_log_path(settings: Settings) -> Path:
    """
    Resolve the log file path and make sure its directory exists.

    Args:
        settings: Loaded settings; ``logwriter_log_path`` wins when set.

    Returns:
        Path of the log file (not opened).
    """
    target = settings.logwriter_log_path or get_data_dir() / DEFAULT_LOG_NAME
    target.parent.mkdir(parents=True, exist_ok=True)
    return target
