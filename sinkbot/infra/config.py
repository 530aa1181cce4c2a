"""Application configuration and env loading."""

from __future__ import annotations

import os
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from sinkbot.core.errors import InvalidConfigurationError
from sinkbot.infra.app_data import resolve_config_dir, resolve_project_root

DEFAULT_API_BASE_URL = "https://europe-west1-ca-2023-dev.cloudfunctions.net/battleshipsApi"
DEFAULT_MAP_COUNT = 200

_TRUE_VALUES = {"1", "true", "yes", "on"}


def load_env_file(path: str = ".env", *, override_existing: bool = True) -> int:
    """Apply KEY=VALUE pairs from an env file to the process environment.

    Returns how many variables were set. Blank lines, comments and lines
    without `=` are skipped; a missing file is a no-op.
    """
    env_path = _resolve_env_path(path)
    if not env_path.is_file():
        return 0

    applied = 0
    for raw_line in env_path.read_text(encoding="utf-8").splitlines():
        entry = _parse_env_line(raw_line)
        if entry is None:
            continue
        key, value = entry
        if override_existing or key not in os.environ:
            os.environ[key] = value
            applied += 1
    return applied


def load_default_env_files(
    *, override_existing: bool = True, paths: Sequence[str] | None = None
) -> None:
    """Load env files with optional local overrides, later files winning.

    Default order: <app-data>/config/.env, <app-data>/config/.env.local, .env, .env.local.
    """
    if paths is None:
        config_dir = resolve_config_dir()
        paths = (str(config_dir / ".env"), str(config_dir / ".env.local"), ".env", ".env.local")
    for path in paths:
        load_env_file(path, override_existing=override_existing)


@dataclass(frozen=True, slots=True)
class SinkbotSettings:
    """Runtime settings resolved from the process environment."""

    strategy: str = "probability"
    seed: int | None = None
    map_count: int = DEFAULT_MAP_COUNT
    api_base_url: str = DEFAULT_API_BASE_URL
    api_token: str = ""
    test_mode: bool = False

    @classmethod
    def from_env(cls) -> SinkbotSettings:
        seed_raw = os.getenv("SINKBOT_SEED", "").strip()
        return cls(
            strategy=os.getenv("SINKBOT_STRATEGY", "probability").strip() or "probability",
            seed=_parse_int("SINKBOT_SEED", seed_raw) if seed_raw else None,
            map_count=_parse_int("SINKBOT_MAP_COUNT", os.getenv("SINKBOT_MAP_COUNT", str(DEFAULT_MAP_COUNT))),
            api_base_url=os.getenv("SINKBOT_API_BASE_URL", DEFAULT_API_BASE_URL).strip(),
            api_token=os.getenv("SINKBOT_API_TOKEN", "").strip(),
            test_mode=os.getenv("SINKBOT_TEST_MODE", "").strip().lower() in _TRUE_VALUES,
        )


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise InvalidConfigurationError(f"{name} must be an integer, got {raw!r}.") from exc


def _resolve_env_path(path: str) -> Path:
    """Resolve env path from cwd, then project root."""
    candidate = Path(path)
    if candidate.exists():
        return candidate
    # Fallback for IDE run configs with different working directory.
    return resolve_project_root() / path


def _parse_env_line(raw_line: str) -> tuple[str, str] | None:
    line = raw_line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    key, _, value = (part.strip() for part in line.partition("="))
    if not key:
        return None
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
        value = value[1:-1]
    return key, value
