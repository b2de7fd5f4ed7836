"""
Tests for mlflow logging.
It asserts expected behavior and guards against regressions in the corresponding component.
These tests are executed by `pytest` locally and in CI and should remain deterministic.
"""

from __future__ import annotations

from pathlib import Path

from apm.chapters.chapter_config import ChapterContext
from apm.chapters.mlflow_tracking import build_run_name, log_chapter_run


class StubRun:
    def __init__(self) -> None:
        self.info = type("Info", (), {"run_id": "stub-run-id"})()

    def __enter__(self) -> StubRun:
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        return False


def _context(tmp_path: Path) -> ChapterContext:
    return ChapterContext(
        run_id="abc123-def",
        experiment_name="exp",
        output_dir=tmp_path,
        random_seed=100,
        quick_mode=True,
        tracking_enabled=True,
    )


def test_build_run_name(tmp_path: Path) -> None:
    name = build_run_name(context=_context(tmp_path), chapter="over_fitting")
    assert name == "chapter.over_fitting | seed=100 quick | run=abc123"


def test_mlflow_logging_completeness(monkeypatch, tmp_path: Path) -> None:
    logged = {"params": None, "metrics": None, "tags": None, "artifacts": [], "texts": []}

    def start_run(run_name, tags):
        logged["tags"] = tags
        return StubRun()

    monkeypatch.setattr("apm.chapters.mlflow_tracking.configure_mlflow", lambda experiment_name: None)
    monkeypatch.setattr("apm.chapters.mlflow_tracking._git_commit", lambda: None)
    monkeypatch.setattr("apm.chapters.mlflow_tracking.mlflow.start_run", start_run)
    monkeypatch.setattr("apm.chapters.mlflow_tracking.mlflow.log_params", lambda p: logged.__setitem__("params", p))
    monkeypatch.setattr("apm.chapters.mlflow_tracking.mlflow.log_metrics", lambda m: logged.__setitem__("metrics", m))
    monkeypatch.setattr(
        "apm.chapters.mlflow_tracking.mlflow.log_artifact",
        lambda path, artifact_path=None: logged["artifacts"].append((path, artifact_path)),
    )
    monkeypatch.setattr(
        "apm.chapters.mlflow_tracking.mlflow.log_text",
        lambda text, artifact_file: logged["texts"].append(artifact_file),
    )

    artifact = tmp_path / "notes.md"
    artifact.write_text("# notes", encoding="utf-8")

    run_id = log_chapter_run(
        context=_context(tmp_path),
        chapter="linear_regression",
        params={"dataset": "diabetes"},
        metrics={"best_test_rmse": 55.0, "undefined": float("nan")},
        artifacts={"notes": artifact, "missing": tmp_path / "absent.csv"},
        tags={"stage": "unit"},
    )

    assert run_id == "stub-run-id"
    assert logged["params"] == {"dataset": "diabetes"}
    assert logged["metrics"] == {"best_test_rmse": 55.0}
    assert logged["artifacts"] == [(str(artifact), "notes")]
    assert logged["texts"] == ["run_summary.json"]
    assert logged["tags"]["chapter"] == "linear_regression"
    assert logged["tags"]["stage"] == "unit"
    assert "git_commit" not in logged["tags"]
