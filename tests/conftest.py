"""
Shared test configuration.
It asserts expected behavior and guards against regressions in the corresponding component.
These tests are executed by `pytest` locally and in CI and should remain deterministic.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

os.environ.setdefault("MPLBACKEND", "Agg")

from apm.chapters.chapter_config import ChapterContext  # noqa: E402


@pytest.fixture(autouse=True)
def base_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure required environment variables are present during tests."""

    defaults = {
        "PROJECT_NAME": "test-project",
        "ENV": "test",
        "LOG_LEVEL": "INFO",
        "MLFLOW_TRACKING_URI": "file:./mlruns",
        "REPORTS_DIR": "reports",
        "RANDOM_SEED": "100",
    }

    for key, value in defaults.items():
        if os.getenv(key) is None:
            monkeypatch.setenv(key, value)


@pytest.fixture
def chapter_context(tmp_path: Path) -> ChapterContext:
    return ChapterContext(
        run_id="test-run",
        experiment_name="test-experiment",
        output_dir=tmp_path,
        random_seed=7,
        quick_mode=True,
        tracking_enabled=False,
    )
