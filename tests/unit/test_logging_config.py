"""
Unit tests for logging configuration.
It asserts expected behavior and guards against regressions in the corresponding component.
These tests are executed by `pytest` locally and in CI and should remain deterministic.
"""

from __future__ import annotations

import logging

import pytest

from apm.common import logging as logging_module
from apm.common import settings as settings_module


@pytest.fixture
def basic_config_calls(monkeypatch: pytest.MonkeyPatch) -> list[dict[str, object]]:
    calls: list[dict[str, object]] = []
    settings_module.get_settings.cache_clear()
    monkeypatch.setattr(logging_module, "_LOGGING_CONFIGURED", False)
    monkeypatch.setattr(logging_module.logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    for name in logging_module.NOISY_LOGGERS:
        logger = logging.getLogger(name)
        monkeypatch.setattr(logger, "level", logger.level)
    return calls


def test_configure_logging_is_idempotent(basic_config_calls: list[dict[str, object]]) -> None:
    logging_module.configure_logging()
    logging_module.configure_logging()

    assert len(basic_config_calls) == 1
    assert basic_config_calls[0]["level"] == logging.INFO
    assert basic_config_calls[0]["format"] == logging_module.LOG_FORMAT


def test_configure_logging_override_and_quiet_libraries(basic_config_calls: list[dict[str, object]]) -> None:
    logging_module.configure_logging("debug")

    assert basic_config_calls[0]["level"] == logging.DEBUG
    assert logging.getLogger("mlflow").level == logging.WARNING
    assert logging.getLogger("matplotlib").level == logging.WARNING


def test_configure_logging_rejects_unknown_level(basic_config_calls: list[dict[str, object]]) -> None:
    with pytest.raises(ValueError, match="unknown log level"):
        logging_module.configure_logging("chatty")
    assert basic_config_calls == []
