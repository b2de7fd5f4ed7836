"""
Chapter: nonlinear regression models.
Neural networks, support vector machines and K-nearest neighbors on the simulated Friedman
benchmark, where the true relationship is known to be nonlinear.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from apm.chapters.chapter_config import ChapterContext, chapter_settings, ensure_run_dir, resampling_budget
from apm.chapters.comparison import compare_models
from apm.chapters.plots import plot_observed_predicted
from apm.chapters.report import NotesWriter, save_table
from apm.data.datasets import load_dataset
from apm.resampling.resample import build_folds
from apm.resampling.splits import stratified_split

CHAPTER = "nonlinear_regression"
LOGGER = logging.getLogger("chapters")

DEFAULT_MODELS = ["lm", "knn", "svm_radial", "nnet"]


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
    artifacts: dict[str, Path] = {}

    train_index, test_index = stratified_split(y, train_fraction=float(cfg.get("train_fraction", 0.8)), random_state=seed)
    X_train, X_test = X.iloc[train_index], X.iloc[test_index]
    y_train, y_test = y.iloc[train_index], y.iloc[test_index]
    folds = build_folds(len(train_index), "cv", number=budget["folds"], random_state=seed)

    notes = NotesWriter("Nonlinear Regression Models")
    notes.paragraph(f"Dataset: **{bundle.name}**. {bundle.description}")
    notes.bullets(
        [
            "Neural networks: hidden units are nonlinear functions of linear combinations of the predictors; "
            "weight decay penalizes large weights to curb over-fitting.",
            "Support vector machines: only residuals larger than epsilon influence the fit, which makes them "
            "robust to outliers; the cost parameter C controls model complexity.",
            "K-nearest neighbors: predicts the mean outcome of the K closest training samples, so predictors "
            "must be on a common scale and small K over-fits.",
        ]
    )

    model_names = list(cfg.get("models", DEFAULT_MODELS))
    comparison, fitted = compare_models(model_names, X_train, y_train, X_test, y_test, folds, seed, cfg.get("grids"))
    artifacts["model_comparison"] = save_table(comparison, run_dir / "model_comparison.csv")
    notes.heading("Tuned models")
    notes.paragraph(
        "All models were tuned on the same cross-validation folds; `lm` is included as a linear reference "
        "point that cannot represent the sin and quadratic terms."
    )
    notes.table(comparison)

    winner = str(comparison.iloc[0]["model"])
    scatter_path = plot_observed_predicted(
        y_test.to_numpy(dtype=float),
        fitted[winner].predict(X_test),
        run_dir / "observed_predicted.png",
        f"Test set: {winner}",
    )
    artifacts["observed_predicted"] = scatter_path
    notes.image(scatter_path, "Observed versus predicted and residuals")
    LOGGER.info("chapter=%s winner=%s", CHAPTER, winner)

    notes_path = notes.write(run_dir / "notes.md")
    return {
        "chapter": CHAPTER,
        "notes_path": notes_path,
        "artifacts": artifacts,
        "params": {"dataset": bundle.name, "models": ",".join(model_names), "n_samples": len(y)},
        "metrics": {
            "best_resampled_rmse": float(comparison.iloc[0]["resampled_rmse"]),
            "best_test_rmse": float(comparison.iloc[0]["test_rmse"]),
        },
    }
