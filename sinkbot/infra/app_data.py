"""Sinkbot app-data paths."""

from __future__ import annotations

import os
import sys
from pathlib import Path

APP_DATA_DIR_ENV = "SINKBOT_APP_DATA_DIR"
LOG_DIR_ENV = "SINKBOT_LOG_DIR"


def resolve_project_root() -> Path:
    """Directory holding the source checkout, or the frozen executable's folder."""
    if getattr(sys, "frozen", False) and sys.executable:
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[2]


def resolve_app_data_root() -> Path:
    """Root for run logs and local config; relative overrides hang off the project root."""
    project_root = resolve_project_root()
    return _configured_dir(APP_DATA_DIR_ENV, project_root) or project_root / "appdata"


def resolve_logs_dir() -> Path:
    """Run-log directory; relative overrides hang off the app-data root."""
    root = resolve_app_data_root()
    return _configured_dir(LOG_DIR_ENV, root) or root / "logs"


def resolve_config_dir() -> Path:
    return resolve_app_data_root() / "config"


def _configured_dir(variable: str, base: Path) -> Path | None:
    raw = os.getenv(variable, "").strip()
    if not raw:
        return None
    path = Path(raw).expanduser()
    return path if path.is_absolute() else base / path
