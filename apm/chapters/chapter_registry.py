"""Ordered registry of runnable chapters."""

from __future__ import annotations

from typing import Any, Callable

from apm.chapters import (
    data_preprocessing,
    linear_regression,
    nonlinear_regression,
    over_fitting,
    python_vs_r,
    regression_trees,
)
from apm.chapters.chapter_config import ChapterContext

ChapterFn = Callable[[ChapterContext, dict[str, Any]], dict[str, Any]]

CHAPTERS: dict[str, ChapterFn] = {
    data_preprocessing.CHAPTER: data_preprocessing.run,
    over_fitting.CHAPTER: over_fitting.run,
    linear_regression.CHAPTER: linear_regression.run,
    nonlinear_regression.CHAPTER: nonlinear_regression.run,
    regression_trees.CHAPTER: regression_trees.run,
    python_vs_r.CHAPTER: python_vs_r.run,
}


def resolve_chapters(selection: str) -> list[str]:
    if selection == "all":
        return list(CHAPTERS)
    names = [token.strip() for token in selection.split(",") if token.strip()]
    unknown = [name for name in names if name not in CHAPTERS]
    if unknown or not names:
        raise ValueError(f"unknown chapter(s): {unknown or selection!r}; expected 'all' or any of {list(CHAPTERS)}")
    return names


def run_chapter(name: str, context: ChapterContext, config: dict[str, Any]) -> dict[str, Any]:
    if name not in CHAPTERS:
        raise ValueError(f"unknown chapter: {name!r}; expected one of {list(CHAPTERS)}")
    return CHAPTERS[name](context, config)
