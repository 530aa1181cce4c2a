from __future__ import annotations

import os

import pytest

from sinkbot.core.errors import InvalidConfigurationError
from sinkbot.infra.config import (
    DEFAULT_API_BASE_URL,
    DEFAULT_MAP_COUNT,
    SinkbotSettings,
    load_default_env_files,
    load_env_file,
)

_SETTINGS_VARS = (
    "SINKBOT_STRATEGY",
    "SINKBOT_SEED",
    "SINKBOT_MAP_COUNT",
    "SINKBOT_API_BASE_URL",
    "SINKBOT_API_TOKEN",
    "SINKBOT_TEST_MODE",
)


def test_load_env_file_sets_values_with_overwrite_by_default(tmp_path, monkeypatch) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "A=1\nB='two'\n#comment\nINVALID\nC=three\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("C", "already")
    for name in ("A", "B"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    assert load_env_file(str(env_file)) == 3
    assert os.environ.get("A") == "1"
    assert os.environ.get("B") == "two"
    assert os.environ.get("C") == "three"


def test_load_env_file_can_preserve_existing_values(tmp_path, monkeypatch) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("C=three\n", encoding="utf-8")
    monkeypatch.setenv("C", "already")
    assert load_env_file(str(env_file), override_existing=False) == 0
    assert os.environ.get("C") == "already"


def test_load_default_env_files_later_files_win(tmp_path, monkeypatch) -> None:
    shared = tmp_path / ".env"
    local = tmp_path / ".env.local"
    shared.write_text("SINKBOT_STRATEGY=parity\nSINKBOT_SEED=4\n", encoding="utf-8")
    local.write_text("SINKBOT_SEED=9\n", encoding="utf-8")
    for name in ("SINKBOT_STRATEGY", "SINKBOT_SEED"):
        # Registered first so the values loaded below are undone after the test.
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)

    load_default_env_files(paths=(str(shared), str(local), str(tmp_path / ".env.missing")))

    assert os.environ.get("SINKBOT_STRATEGY") == "parity"
    assert os.environ.get("SINKBOT_SEED") == "9"


def test_settings_defaults(monkeypatch) -> None:
    for name in _SETTINGS_VARS:
        monkeypatch.delenv(name, raising=False)
    settings = SinkbotSettings.from_env()
    assert settings == SinkbotSettings()
    assert settings.map_count == DEFAULT_MAP_COUNT
    assert settings.api_base_url == DEFAULT_API_BASE_URL
    assert settings.seed is None


def test_settings_from_env(monkeypatch) -> None:
    monkeypatch.setenv("SINKBOT_STRATEGY", "sequential")
    monkeypatch.setenv("SINKBOT_SEED", " 12 ")
    monkeypatch.setenv("SINKBOT_MAP_COUNT", "5")
    monkeypatch.setenv("SINKBOT_API_TOKEN", "token ")
    monkeypatch.setenv("SINKBOT_TEST_MODE", "Yes")
    settings = SinkbotSettings.from_env()
    assert settings.strategy == "sequential"
    assert settings.seed == 12
    assert settings.map_count == 5
    assert settings.api_token == "token"
    assert settings.test_mode


def test_settings_reject_non_integer_values(monkeypatch) -> None:
    monkeypatch.setenv("SINKBOT_MAP_COUNT", "many")
    with pytest.raises(InvalidConfigurationError, match="SINKBOT_MAP_COUNT"):
        SinkbotSettings.from_env()
