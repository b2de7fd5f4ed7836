"""
Chapter: regression trees and rule-based ensembles.
Single trees are interpretable but unstable; bagging, random forests and boosting trade
interpretability for lower variance and better predictions.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pandas as pd

from apm.chapters.chapter_config import ChapterContext, chapter_settings, ensure_run_dir, resampling_budget
from apm.chapters.comparison import compare_models
from apm.chapters.plots import plot_bar, plot_line
from apm.chapters.report import NotesWriter, save_table
from apm.data.datasets import load_dataset
from apm.models.trees import ensemble_size_profile, tree_structure, variable_importance
from apm.resampling.resample import build_folds
from apm.resampling.splits import stratified_split

CHAPTER = "regression_trees"
LOGGER = logging.getLogger("chapters")

DEFAULT_MODELS = ["cart", "bagged_tree", "rf", "gbm"]


def run(context: ChapterContext, config: dict[str, Any]) -> dict[str, Any]:
    cfg = chapter_settings(config, CHAPTER)
    budget = resampling_budget(context, cfg)
    run_dir = ensure_run_dir(context, CHAPTER)
    seed = context.random_seed
    bundle = load_dataset(
        str(cfg.get("dataset", "friedman1")),
        n_samples=int(cfg.get("n_samples", 300)),
        noise=float(cfg.get("noise", 1.0)),
        random_state=seed,
    )
    X = bundle.features
    y = bundle.target_values
    feature_names = [str(column) for column in X.columns]
    artifacts: dict[str, Path] = {}

    train_index, test_index = stratified_split(y, train_fraction=float(cfg.get("train_fraction", 0.8)), random_state=seed)
    X_train, X_test = X.iloc[train_index], X.iloc[test_index]
    y_train, y_test = y.iloc[train_index], y.iloc[test_index]
    folds = build_folds(len(train_index), "cv", number=budget["folds"], random_state=seed)

    grids = dict(cfg.get("grids", {}) or {})
    if context.quick_mode:
        grids.setdefault("rf", {"max_features": [0.33, 0.66, 1.0], "n_estimators": [50]})

    notes = NotesWriter("Regression Trees and Rule-Based Models")
    notes.paragraph(f"Dataset: **{bundle.name}**. {bundle.description}")

    model_names = list(cfg.get("models", DEFAULT_MODELS))
    comparison, fitted = compare_models(model_names, X_train, y_train, X_test, y_test, folds, seed, grids)
    artifacts["model_comparison"] = save_table(comparison, run_dir / "model_comparison.csv")
    notes.heading("Tuned models")
    notes.table(comparison)

    if "cart" in fitted:
        structure = tree_structure(fitted["cart"])
        notes.heading("Single tree")
        notes.paragraph(
            "CART splits the data recursively on the predictor and cut point that most reduce the squared "
            "error; depth is the complexity parameter."
        )
        notes.bullets([f"{key}: {value}" for key, value in structure.items()])

    importance_model = next((name for name in ("rf", "gbm", "bagged_tree", "cart") if name in fitted), None)
    if importance_model is not None:
        importance = variable_importance(fitted[importance_model], feature_names)
        artifacts["variable_importance"] = save_table(importance, run_dir / "variable_importance.csv")
        importance_path = plot_bar(
            importance["predictor"].tolist(),
            importance["importance"].tolist(),
            run_dir / "variable_importance.png",
            f"Variable importance: {importance_model}",
            "importance (max = 100)",
        )
        artifacts["variable_importance_plot"] = importance_path
        notes.heading("Variable importance")
        notes.paragraph(
            "X1 to X5 drive the outcome and X6 to X10 are noise, so a good ensemble ranks the first five on top."
        )
        notes.table(importance).image(importance_path, "Variable importance")

    sizes = [int(size) for size in cfg.get("ensemble_sizes", [5, 10, 25, 50, 100])]
    if context.quick_mode:
        sizes = sizes[:3]
    profiles = pd.concat(
        [
            ensemble_size_profile(X_train, y_train, sizes, folds, kind=kind, random_state=seed)
            for kind in cfg.get("ensemble_kinds", ["bagging", "rf", "gbm"])
        ],
        ignore_index=True,
    )
    artifacts["ensemble_size"] = save_table(profiles, run_dir / "ensemble_size.csv")
    profile_path = plot_line(profiles, "trees", "rmse", run_dir / "ensemble_size.png", "Resampled RMSE by ensemble size", group="kind")
    artifacts["ensemble_size_plot"] = profile_path
    notes.heading("Ensemble size")
    notes.paragraph(
        "Bagging and random forests do not over-fit as trees are added; improvement levels off. Boosting "
        "keeps fitting residuals and can over-fit with too many iterations unless the learning rate is small."
    )
    notes.table(profiles).image(profile_path, "Ensemble size profile")
    LOGGER.info("chapter=%s winner=%s", CHAPTER, comparison.iloc[0]["model"])

    notes_path = notes.write(run_dir / "notes.md")
    return {
        "chapter": CHAPTER,
        "notes_path": notes_path,
        "artifacts": artifacts,
        "params": {"dataset": bundle.name, "models": ",".join(model_names), "ensemble_sizes": ",".join(map(str, sizes))},
        "metrics": {
            "best_resampled_rmse": float(comparison.iloc[0]["resampled_rmse"]),
            "best_test_rmse": float(comparison.iloc[0]["test_rmse"]),
        },
    }
