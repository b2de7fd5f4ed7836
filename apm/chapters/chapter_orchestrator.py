"""
Chapter orchestration entrypoint.
Runs one, several, or all chapters of the notes and writes an `index.md` linking their reports.
Runs log to MLflow when tracking is enabled and write artifacts under `reports/<run_id>/<chapter>/`.
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
from pathlib import Path
from typing import Any

from apm.chapters.chapter_config import ChapterContext, ensure_run_dir, load_chapter_bundle
from apm.chapters.chapter_registry import resolve_chapters, run_chapter
from apm.chapters.mlflow_tracking import log_chapter_run
from apm.chapters.report import NotesWriter
from apm.common.logging import configure_logging

LOGGER = logging.getLogger("chapters")


class ChapterRunError(RuntimeError):
    def __init__(self, message: str, *, chapter: str) -> None:
        super().__init__(message)
        self.chapter = chapter


def _track(context: ChapterContext, result: dict[str, Any]) -> str | None:
    try:
        return log_chapter_run(
            context=context,
            chapter=str(result["chapter"]),
            params=dict(result.get("params", {})),
            metrics=dict(result.get("metrics", {})),
            artifacts={**dict(result.get("artifacts", {})), "notes": Path(result["notes_path"])},
            tags={"stage": "chapter"},
        )
    except Exception as exc:  # noqa: BLE001
        LOGGER.warning("MLflow logging failed for chapter=%s: %s", result.get("chapter"), exc)
        return None


def write_index(context: ChapterContext, summaries: list[dict[str, Any]]) -> Path:
    run_dir = ensure_run_dir(context)
    index = NotesWriter("Applied Predictive Modeling Notes")
    index.bullets(
        [
            f"run_id: {context.run_id}",
            f"random_seed: {context.random_seed}",
            f"mode: {'quick' if context.quick_mode else 'full'}",
        ]
    )
    for summary in summaries:
        notes_path = Path(summary["notes_path"])
        index.heading(f"[{summary['chapter']}]({notes_path.parent.name}/{notes_path.name})")
        index.bullets([f"{key}: {value:.4f}" for key, value in sorted(summary["metrics"].items())] or ["no metrics"])
    return index.write(run_dir / "index.md")


def run_chapters(names: list[str], context: ChapterContext, config: dict[str, Any]) -> dict[str, Any]:
    summaries: list[dict[str, Any]] = []
    for name in names:
        LOGGER.info("running chapter=%s run_id=%s", name, context.run_id)
        try:
            result = run_chapter(name, context, config)
        except Exception as exc:
            LOGGER.exception("chapter=%s failed", name)
            raise ChapterRunError(f"chapter {name} failed: {exc}", chapter=name) from exc

        mlflow_run_id = _track(context, result) if context.tracking_enabled else None
        summaries.append(
            {
                "chapter": name,
                "notes_path": str(result["notes_path"]),
                "metrics": dict(result.get("metrics", {})),
                "mlflow_run_id": mlflow_run_id,
            }
        )

    index_path = write_index(context, summaries)
    return {
        "run_id": context.run_id,
        "output_dir": str(ensure_run_dir(context)),
        "index_path": str(index_path),
        "chapters": summaries,
    }


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the applied predictive modeling chapters")
    parser.add_argument("--chapter", default="all", help="'all' or a comma-separated list of chapter names")
    parser.add_argument("--run-id", default=None)
    parser.add_argument("--config", default="configs/chapters.yaml")
    parser.add_argument("--output-dir", default=None)
    parser.add_argument("--no-tracking", action="store_true")
    parser.add_argument("--full", action="store_true", help="disable quick mode resampling caps")
    parser.add_argument("--log-level", default=None, help="override LOG_LEVEL for this run")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    configure_logging(args.log_level)
    names = resolve_chapters(args.chapter)
    context, config = load_chapter_bundle(
        config_path=args.config,
        run_id=args.run_id,
        output_dir=args.output_dir,
        tracking_enabled=False if args.no_tracking else None,
    )
    if args.full:
        context = dataclasses.replace(context, quick_mode=False)
    result = run_chapters(names, context, config)
    print(json.dumps(result, indent=2, default=str))


if __name__ == "__main__":
    main()
