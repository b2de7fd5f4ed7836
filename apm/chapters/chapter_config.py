"""Configuration loading for the runnable chapters."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from apm.common.settings import get_settings

PROJECT_ROOT = Path(__file__).resolve().parents[2]


@dataclass(frozen=True)
class ChapterContext:
    run_id: str
    experiment_name: str
    output_dir: Path
    random_seed: int
    quick_mode: bool
    tracking_enabled: bool


def load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        return dict(yaml.safe_load(handle) or {})


def _resolve_dir(value: str | Path) -> Path:
    path = Path(value)
    return path if path.is_absolute() else PROJECT_ROOT / path


def load_chapter_bundle(
    *,
    config_path: str = "configs/chapters.yaml",
    run_id: str | None = None,
    output_dir: str | Path | None = None,
    tracking_enabled: bool | None = None,
) -> tuple[ChapterContext, dict[str, Any]]:
    settings = get_settings()
    config = load_yaml(_resolve_dir(config_path))

    runtime_cfg = dict(config.get("runtime", {}) or {})
    tracking_cfg = dict(config.get("tracking", {}) or {})
    seed = runtime_cfg.get("random_seed")

    context = ChapterContext(
        run_id=run_id or str(uuid.uuid4()),
        experiment_name=str(tracking_cfg.get("experiment_name", settings.PROJECT_NAME)),
        output_dir=_resolve_dir(output_dir or runtime_cfg.get("reports_dir") or settings.REPORTS_DIR),
        random_seed=int(seed if seed is not None else settings.RANDOM_SEED),
        quick_mode=bool(runtime_cfg.get("quick_mode", True)),
        tracking_enabled=bool(tracking_cfg.get("enabled", True)) if tracking_enabled is None else tracking_enabled,
    )
    return context, config


def chapter_settings(config: dict[str, Any], chapter: str) -> dict[str, Any]:
    return dict(dict(config.get("chapters", {}) or {}).get(chapter, {}) or {})


def ensure_run_dir(context: ChapterContext, chapter: str | None = None) -> Path:
    run_dir = context.output_dir / context.run_id
    if chapter:
        run_dir = run_dir / chapter
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_dir


def resampling_budget(context: ChapterContext, cfg: dict[str, Any]) -> dict[str, int]:
    """Resampling sizes for a chapter; quick mode caps them so a full run stays short."""

    budget = {
        "folds": int(cfg.get("folds", 10)),
        "repeats": int(cfg.get("repeats", 3)),
        "boot_resamples": int(cfg.get("boot_resamples", 25)),
        "lgocv_resamples": int(cfg.get("lgocv_resamples", 25)),
    }
    if context.quick_mode:
        budget["folds"] = min(budget["folds"], 5)
        budget["repeats"] = min(budget["repeats"], 2)
        budget["boot_resamples"] = min(budget["boot_resamples"], 10)
        budget["lgocv_resamples"] = min(budget["lgocv_resamples"], 10)
    return budget
