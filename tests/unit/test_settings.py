"""
Unit tests for settings.
It asserts expected behavior and guards against regressions in the corresponding component.
These tests are executed by `pytest` locally and in CI and should remain deterministic.
"""

import logging
from pathlib import Path

import pytest

from apm.common import settings as settings_module


def test_load_settings_success() -> None:
    settings_module.get_settings.cache_clear()
    settings = settings_module.get_settings()
    assert settings.PROJECT_NAME
    assert isinstance(settings.RANDOM_SEED, int)


def test_load_settings_missing_required(monkeypatch: pytest.MonkeyPatch) -> None:
    settings_module.get_settings.cache_clear()
    monkeypatch.delenv("PROJECT_NAME", raising=False)
    with pytest.raises(RuntimeError, match="Missing required environment variables"):
        settings_module.load_settings(load_env=False)


def test_load_settings_invalid_seed(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RANDOM_SEED", "not-a-number")
    with pytest.raises(RuntimeError, match="Invalid environment configuration"):
        settings_module.load_settings(load_env=False)


def test_load_settings_normalizes_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", " debug ")
    settings = settings_module.load_settings(load_env=False)
    assert settings.LOG_LEVEL == "DEBUG"
    assert settings.log_level == logging.DEBUG


def test_load_settings_rejects_unknown_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "LOUD")
    with pytest.raises(RuntimeError, match="LOG_LEVEL must be one of"):
        settings_module.load_settings(load_env=False)


def test_load_settings_parses_reports_dir_and_bounds_seed(monkeypatch: pytest.MonkeyPatch) -> None:
    settings = settings_module.load_settings(load_env=False)
    assert settings.REPORTS_DIR == Path("reports")

    monkeypatch.setenv("RANDOM_SEED", "-1")
    with pytest.raises(RuntimeError, match="Invalid environment configuration"):
        settings_module.load_settings(load_env=False)
