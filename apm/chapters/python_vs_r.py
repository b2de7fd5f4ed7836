"""Chapter: Python versus R, side by side on the iris data."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pandas as pd

from apm.chapters.chapter_config import ChapterContext, chapter_settings, ensure_run_dir
from apm.chapters.report import NotesWriter, save_table
from apm.data.datasets import load_dataset
from apm.primer.r_equivalents import (
    crosswalk_frame,
    r_cut,
    r_paste,
    r_rep,
    r_scale,
    r_seq,
    r_summary,
    r_table,
    r_which,
)

CHAPTER = "python_vs_r"
LOGGER = logging.getLogger("chapters")


def run(context: ChapterContext, config: dict[str, Any]) -> dict[str, Any]:
    cfg = chapter_settings(config, CHAPTER)
    run_dir = ensure_run_dir(context, CHAPTER)
    bundle = load_dataset(str(cfg.get("dataset", "iris")))
    frame = bundle.frame
    numeric = bundle.features.select_dtypes(include="number")
    first = str(numeric.columns[0])
    artifacts: dict[str, Path] = {}

    notes = NotesWriter("Python versus R")
    notes.paragraph(
        "R is vectorized by default, indexes from 1, and its `seq` includes both endpoints; Python's ranges "
        "are half-open and index from 0. pandas brings data frames and most of R's vector idioms to Python."
    )

    crosswalk = crosswalk_frame()
    artifacts["crosswalk"] = save_table(crosswalk, run_dir / "crosswalk.csv")
    notes.heading("Syntax crosswalk").table(crosswalk)

    summary = r_summary(frame[first]).rename("value").reset_index(names="statistic")
    notes.heading(f"summary({first})")
    notes.table(summary)

    counts = r_table(frame[bundle.target]).rename("count").reset_index(names="level")
    notes.heading(f"table({bundle.target})")
    notes.table(counts)

    cuts = r_cut(frame[first], list(cfg.get("breaks", [4, 5, 6, 7, 8])))
    notes.heading(f"table(cut({first}, breaks))")
    notes.table(r_table(cuts.astype(str)).rename("count").reset_index(names="interval"))

    scaled = r_scale(numeric)
    notes.heading("scale()")
    notes.paragraph("R's `scale` divides by the n - 1 standard deviation, unlike scikit-learn's StandardScaler.")
    notes.table(scaled.agg(["mean", "std"]).T.reset_index(names="predictor"))

    examples = pd.DataFrame(
        [
            {"r": "seq(1, 10, by = 3)", "python": "r_seq(1, 10, by=3)", "result": str(r_seq(1, 10, by=3).tolist())},
            {"r": "seq(0, 1, length.out = 5)", "python": "r_seq(0, 1, length_out=5)", "result": str(r_seq(0, 1, length_out=5).tolist())},
            {"r": "rep(1:2, times = 2, each = 2)", "python": "r_rep([1, 2], times=2, each=2)", "result": str(r_rep([1, 2], times=2, each=2).tolist())},
            {"r": "which(c(F, T, T))", "python": "r_which([False, True, True])", "result": str(r_which([False, True, True]).tolist())},
            {"r": 'paste("x", 1:3, sep = "_")', "python": 'r_paste("x", [1, 2, 3], sep="_")', "result": str(r_paste("x", [1, 2, 3], sep="_"))},
        ]
    )
    artifacts["vector_examples"] = save_table(examples, run_dir / "vector_examples.csv")
    notes.heading("Vector helpers").table(examples)

    grouped = frame.groupby(bundle.target, observed=True)[first].mean().rename("mean").reset_index()
    notes.heading(f"aggregate({first} ~ {bundle.target}, data, mean)")
    notes.table(grouped)

    notes_path = notes.write(run_dir / "notes.md")
    LOGGER.info("chapter=%s idioms=%d", CHAPTER, len(crosswalk))
    return {
        "chapter": CHAPTER,
        "notes_path": notes_path,
        "artifacts": artifacts,
        "params": {"dataset": bundle.name},
        "metrics": {"idioms": float(len(crosswalk)), "examples": float(len(examples))},
    }
