"""
Tests for chapter orchestration.
It asserts expected behavior and guards against regressions in the corresponding component.
These tests are executed by `pytest` locally and in CI and should remain deterministic.
"""

from __future__ import annotations

import dataclasses
from pathlib import Path
from typing import Any

import pytest

from apm.chapters import chapter_orchestrator, chapter_registry
from apm.chapters.chapter_config import ChapterContext
from apm.chapters.chapter_orchestrator import ChapterRunError, parse_args, run_chapters
from apm.chapters.chapter_registry import resolve_chapters, run_chapter


def _fake_chapter(context: ChapterContext, config: dict[str, Any]) -> dict[str, Any]:
    run_dir = context.output_dir / context.run_id / "fake"
    run_dir.mkdir(parents=True, exist_ok=True)
    notes_path = run_dir / "notes.md"
    notes_path.write_text("# Fake\n", encoding="utf-8")
    return {"chapter": "fake", "notes_path": notes_path, "artifacts": {}, "params": {}, "metrics": {"score": 0.5}}


def _broken_chapter(context: ChapterContext, config: dict[str, Any]) -> dict[str, Any]:
    raise ValueError("boom")


def test_resolve_chapters() -> None:
    assert resolve_chapters("all") == list(chapter_registry.CHAPTERS)
    assert resolve_chapters(" python_vs_r , over_fitting") == ["python_vs_r", "over_fitting"]
    with pytest.raises(ValueError, match="unknown chapter"):
        resolve_chapters("python_vs_r,deep_learning")
    with pytest.raises(ValueError, match="unknown chapter"):
        run_chapter("deep_learning", None, {})  # type: ignore[arg-type]


def test_run_chapters_writes_index(monkeypatch: pytest.MonkeyPatch, chapter_context: ChapterContext) -> None:
    monkeypatch.setitem(chapter_registry.CHAPTERS, "fake", _fake_chapter)

    result = run_chapters(["fake"], chapter_context, {})

    index = Path(result["index_path"])
    assert index.exists()
    text = index.read_text(encoding="utf-8")
    assert "[fake](fake/notes.md)" in text
    assert "score: 0.5000" in text
    assert result["chapters"][0]["mlflow_run_id"] is None


def test_run_chapters_wraps_failures(monkeypatch: pytest.MonkeyPatch, chapter_context: ChapterContext) -> None:
    monkeypatch.setitem(chapter_registry.CHAPTERS, "broken", _broken_chapter)

    with pytest.raises(ChapterRunError) as excinfo:
        run_chapters(["broken"], chapter_context, {})
    assert excinfo.value.chapter == "broken"
    assert isinstance(excinfo.value.__cause__, ValueError)


def test_tracking_failure_does_not_fail_the_run(monkeypatch: pytest.MonkeyPatch, chapter_context: ChapterContext) -> None:
    def failing_log(**kwargs: Any) -> str:
        raise ConnectionError("tracking server unavailable")

    monkeypatch.setitem(chapter_registry.CHAPTERS, "fake", _fake_chapter)
    monkeypatch.setattr(chapter_orchestrator, "log_chapter_run", failing_log)
    context = dataclasses.replace(chapter_context, tracking_enabled=True)

    result = run_chapters(["fake"], context, {})
    assert result["chapters"][0]["mlflow_run_id"] is None


def test_tracking_records_run_id(monkeypatch: pytest.MonkeyPatch, chapter_context: ChapterContext) -> None:
    calls: list[dict[str, Any]] = []

    def fake_log(**kwargs: Any) -> str:
        calls.append(kwargs)
        return "mlflow-1"

    monkeypatch.setitem(chapter_registry.CHAPTERS, "fake", _fake_chapter)
    monkeypatch.setattr(chapter_orchestrator, "log_chapter_run", fake_log)
    context = dataclasses.replace(chapter_context, tracking_enabled=True)

    result = run_chapters(["fake"], context, {})
    assert result["chapters"][0]["mlflow_run_id"] == "mlflow-1"
    assert "notes" in calls[0]["artifacts"]
    assert calls[0]["tags"] == {"stage": "chapter"}


def test_parse_args_defaults() -> None:
    args = parse_args([])
    assert args.chapter == "all"
    assert args.no_tracking is False
    assert args.full is False
    assert args.log_level is None
    args = parse_args(["--chapter", "python_vs_r", "--no-tracking", "--full", "--run-id", "r1"])
    assert (args.chapter, args.no_tracking, args.full, args.run_id) == ("python_vs_r", True, True, "r1")
