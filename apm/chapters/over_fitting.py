"""
Chapter: over-fitting and model tuning.
Splits the data, compares resampling schemes for the same tuning problem, and contrasts
picking the numerically best candidate with the one-standard-error and tolerance rules.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd
from scipy.spatial.distance import cdist

from apm.chapters.chapter_config import ChapterContext, chapter_settings, ensure_run_dir, resampling_budget
from apm.chapters.plots import plot_line
from apm.chapters.report import NotesWriter, save_table
from apm.data.datasets import load_dataset
from apm.evaluation.metrics import regression_summary
from apm.models.registry import get_model_spec
from apm.preprocessing.transforms import center_scale
from apm.resampling.resample import build_folds
from apm.resampling.splits import max_dissimilarity_sample, stratified_split
from apm.resampling.tuning import tune_model

CHAPTER = "over_fitting"
LOGGER = logging.getLogger("chapters")


def _mean_nearest_distance(values: np.ndarray, chosen: list[int]) -> float:
    subset = values[chosen]
    distances = cdist(subset, subset)
    np.fill_diagonal(distances, np.inf)
    return float(distances.min(axis=1).mean())


def dissimilarity_comparison(frame: pd.DataFrame, n: int, seed: int) -> pd.DataFrame:
    scaled, _, _ = center_scale(frame)
    values = scaled.to_numpy(dtype=float)
    chosen = max_dissimilarity_sample(scaled, n, random_state=seed)
    random_rows = np.random.default_rng(seed).choice(values.shape[0], size=n, replace=False).tolist()
    return pd.DataFrame(
        [
            {"sampling": "max_dissimilarity", "rows": n, "mean_nearest_distance": _mean_nearest_distance(values, chosen)},
            {"sampling": "random", "rows": n, "mean_nearest_distance": _mean_nearest_distance(values, random_rows)},
        ]
    )


def run(context: ChapterContext, config: dict[str, Any]) -> dict[str, Any]:
    cfg = chapter_settings(config, CHAPTER)
    budget = resampling_budget(context, cfg)
    run_dir = ensure_run_dir(context, CHAPTER)
    bundle = load_dataset(str(cfg.get("dataset", "diabetes")))
    X = bundle.features
    y = bundle.target_values
    artifacts: dict[str, Path] = {}
    seed = context.random_seed

    notes = NotesWriter("Over-Fitting and Model Tuning")
    notes.paragraph(
        "A model that fits the training data too closely learns its noise and predicts new samples poorly. "
        "Honest estimates of performance therefore come from data the model did not see: a test set, "
        "resampling within the training set, or both."
    )

    train_index, test_index = stratified_split(y, train_fraction=float(cfg.get("train_fraction", 0.8)), random_state=seed)
    X_train, X_test = X.iloc[train_index], X.iloc[test_index]
    y_train, y_test = y.iloc[train_index], y.iloc[test_index]
    quantiles = pd.DataFrame(
        {
            "set": ["training", "test"],
            "rows": [len(train_index), len(test_index)],
            "q25": [float(y_train.quantile(0.25)), float(y_test.quantile(0.25))],
            "median": [float(y_train.median()), float(y_test.median())],
            "q75": [float(y_train.quantile(0.75)), float(y_test.quantile(0.75))],
        }
    )
    notes.heading("Data splitting")
    notes.paragraph(
        "The split is stratified on quantile groups of the outcome, so training and test outcomes "
        "have similar distributions."
    )
    notes.table(quantiles)

    n_dissimilar = int(cfg.get("dissimilar_rows", 10))
    dissimilar = dissimilarity_comparison(X_train, n_dissimilar, seed)
    notes.paragraph(
        "Maximum dissimilarity sampling picks rows that are spread across predictor space: each new row "
        "maximizes its distance to the closest row already chosen."
    )
    notes.table(dissimilar)

    model_name = str(cfg.get("model", "knn"))
    spec = get_model_spec(model_name, "regression")
    grid = spec.default_grid(cfg.get("grid"))
    n_train = len(train_index)
    schemes = [
        ("cv", {"number": budget["folds"]}),
        ("repeatedcv", {"number": budget["folds"], "repeats": budget["repeats"]}),
        ("boot", {"number": budget["boot_resamples"]}),
        ("lgocv", {"number": budget["lgocv_resamples"], "p": float(cfg.get("lgocv_p", 0.8))}),
    ]
    if bool(cfg.get("include_loocv", not context.quick_mode)):
        schemes.append(("loocv", {}))

    rows: list[dict[str, Any]] = []
    tuned: dict[str, Any] = {}
    for method, options in schemes:
        folds = build_folds(n_train, method, y=y_train.to_numpy(), random_state=seed, **options)
        result = tune_model(
            spec.factory(seed),
            grid,
            X_train,
            y_train,
            folds,
            metric="rmse",
            complexity_key=spec.complexity_key,
        )
        tuned[method] = result
        test_metrics = regression_summary(y_test, result.final_model.predict(X_test))
        selected = result.results.iloc[result.selected_index]
        rows.append(
            {
                "resampling": method,
                "resamples": len(folds),
                "selected": str(result.best_params),
                "resampled_rmse": float(selected["mean"]),
                "resampled_rmse_se": float(selected["se"]),
                "test_rmse": test_metrics["rmse"],
            }
        )
        LOGGER.info("chapter=%s resampling=%s selected=%s", CHAPTER, method, result.best_params)

    comparison = pd.DataFrame(rows)
    artifacts["resampling_comparison"] = save_table(comparison, run_dir / "resampling_comparison.csv")
    notes.heading("Resampling schemes")
    notes.paragraph(
        f"The same `{model_name}` grid was tuned with each scheme. k-fold CV has little bias but more variance; "
        "repeating it reduces the variance. The bootstrap has low variance but is pessimistically biased for "
        "small training sets. Leave-group-out CV sits in between."
    )
    notes.table(comparison)

    reference = tuned["repeatedcv"]
    profile = reference.results.copy()
    param_name = next((column for column in profile.columns if column not in {"mean", "sd", "se", "resamples", "selected"}), None)
    if param_name is not None:
        profile_path = plot_line(
            profile,
            param_name,
            "mean",
            run_dir / "tuning_profile.png",
            f"Repeated CV profile: {model_name}",
            error="se",
        )
        artifacts["tuning_profile"] = profile_path
        notes.image(profile_path, "Resampled RMSE across the tuning grid")

    rules: list[dict[str, Any]] = []
    folds = build_folds(n_train, "repeatedcv", number=budget["folds"], repeats=budget["repeats"], random_state=seed)
    for rule in ("best", "one_se", "tolerance"):
        result = tune_model(
            spec.factory(seed),
            grid,
            X_train,
            y_train,
            folds,
            metric="rmse",
            selection=rule,
            complexity_key=spec.complexity_key,
            tolerance=float(cfg.get("tolerance", 2.0)),
        )
        rules.append(
            {
                "rule": rule,
                "selected": str(result.best_params),
                "resampled_rmse": float(result.results["mean"].iloc[result.selected_index]),
                "test_rmse": regression_summary(y_test, result.final_model.predict(X_test))["rmse"],
            }
        )
    rules_frame = pd.DataFrame(rules)
    artifacts["selection_rules"] = save_table(rules_frame, run_dir / "selection_rules.csv")
    notes.heading("Choosing the final tuning parameters")
    notes.paragraph(
        "The one-standard-error rule takes the simplest model whose resampled RMSE is within one standard "
        "error of the best; the tolerance rule takes the simplest model within a percentage of the best."
    )
    notes.table(rules_frame)

    notes_path = notes.write(run_dir / "notes.md")
    best_row = comparison.loc[comparison["resampling"] == "repeatedcv"].iloc[0]
    return {
        "chapter": CHAPTER,
        "notes_path": notes_path,
        "artifacts": artifacts,
        "params": {"dataset": bundle.name, "model": model_name, "folds": budget["folds"], "repeats": budget["repeats"]},
        "metrics": {
            "repeatedcv_rmse": float(best_row["resampled_rmse"]),
            "repeatedcv_test_rmse": float(best_row["test_rmse"]),
            "schemes": float(len(schemes)),
        },
    }
