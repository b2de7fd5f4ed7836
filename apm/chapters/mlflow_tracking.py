"""MLflow logging utilities for chapter runs."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from typing import Any

import mlflow

from apm.chapters.chapter_config import ChapterContext
from apm.common.settings import get_settings


def _git_commit() -> str | None:
    try:
        result = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            check=True,
            capture_output=True,
            text=True,
        )
        return result.stdout.strip()
    except Exception:  # noqa: BLE001
        return None


def configure_mlflow(experiment_name: str) -> None:
    settings = get_settings()
    mlflow.set_tracking_uri(settings.MLFLOW_TRACKING_URI)
    client = mlflow.tracking.MlflowClient()
    exp = client.get_experiment_by_name(experiment_name)
    if exp is None:
        client.create_experiment(experiment_name)
    elif str(exp.lifecycle_stage).lower() == "deleted":
        client.restore_experiment(exp.experiment_id)
    mlflow.set_experiment(experiment_name)


def build_run_name(*, context: ChapterContext, chapter: str) -> str:
    run_id_short = str(context.run_id).split("-", maxsplit=1)[0]
    mode = "quick" if context.quick_mode else "full"
    return f"chapter.{chapter} | seed={context.random_seed} {mode} | run={run_id_short}"


def log_chapter_run(
    *,
    context: ChapterContext,
    chapter: str,
    params: dict[str, Any],
    metrics: dict[str, float],
    artifacts: dict[str, Path],
    tags: dict[str, str] | None = None,
) -> str:
    configure_mlflow(context.experiment_name)

    run_tags = {
        "run_id": context.run_id,
        "chapter": chapter,
        "random_seed": str(context.random_seed),
        "quick_mode": str(bool(context.quick_mode)).lower(),
        **(tags or {}),
    }
    commit = _git_commit()
    if commit:
        run_tags["git_commit"] = commit

    with mlflow.start_run(run_name=build_run_name(context=context, chapter=chapter), tags=run_tags) as active_run:
        mlflow.log_params(params)
        finite = {key: float(value) for key, value in metrics.items() if value is not None and value == value}
        mlflow.log_metrics(finite)

        for artifact_name, artifact_path in artifacts.items():
            if artifact_path.exists():
                mlflow.log_artifact(str(artifact_path), artifact_path=artifact_name)

        mlflow.log_text(json.dumps({"params": params, "metrics": finite}, indent=2, default=str), "run_summary.json")
        return str(active_run.info.run_id)
