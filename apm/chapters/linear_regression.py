"""
Chapter: linear regression and its cousins.
Ordinary least squares with inference, collinearity diagnostics, partial least squares and
penalized models, all compared on the same resampling folds and test set.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from apm.chapters.chapter_config import ChapterContext, chapter_settings, ensure_run_dir, resampling_budget
from apm.chapters.comparison import compare_models
from apm.chapters.plots import plot_line, plot_observed_predicted
from apm.chapters.report import NotesWriter, save_table
from apm.data.datasets import load_dataset
from apm.models.linear import ols_summary, pls_component_profile, variance_inflation
from apm.resampling.resample import build_folds
from apm.resampling.splits import stratified_split

CHAPTER = "linear_regression"
LOGGER = logging.getLogger("chapters")

DEFAULT_MODELS = ["lm", "ridge", "lasso", "enet", "pls", "pcr"]


def run(context: ChapterContext, config: dict[str, Any]) -> dict[str, Any]:
    cfg = chapter_settings(config, CHAPTER)
    budget = resampling_budget(context, cfg)
    run_dir = ensure_run_dir(context, CHAPTER)
    bundle = load_dataset(str(cfg.get("dataset", "diabetes")))
    X = bundle.features
    y = bundle.target_values
    seed = context.random_seed
    artifacts: dict[str, Path] = {}

    train_index, test_index = stratified_split(y, train_fraction=float(cfg.get("train_fraction", 0.8)), random_state=seed)
    X_train, X_test = X.iloc[train_index], X.iloc[test_index]
    y_train, y_test = y.iloc[train_index], y.iloc[test_index]
    folds = build_folds(len(train_index), "cv", number=budget["folds"], random_state=seed)

    notes = NotesWriter("Linear Regression and Its Cousins")
    notes.paragraph(
        f"Dataset: **{bundle.name}**. {bundle.description} Linear models are interpretable and their "
        "coefficients come with standard errors, but they cannot capture nonlinear structure on their own."
    )

    ols = ols_summary(X_train, y_train)
    coefficients = ols["coefficients"]
    artifacts["ols_coefficients"] = save_table(coefficients, run_dir / "ols_coefficients.csv")
    notes.heading("Ordinary least squares")
    notes.bullets(
        [
            f"R^2: {ols['r_squared']:.4f} (adjusted {ols['adj_r_squared']:.4f})",
            f"residual standard error: {ols['residual_std_error']:.4f} on {ols['df_residual']} degrees of freedom",
        ]
    )
    notes.table(coefficients)

    vif = variance_inflation(X_train)
    artifacts["vif"] = save_table(vif, run_dir / "vif.csv")
    notes.heading("Collinearity")
    notes.paragraph(
        "A variance inflation factor above 5 to 10 says the coefficient of that predictor is poorly "
        "determined because other predictors nearly reproduce it."
    )
    notes.table(vif)

    max_components = int(cfg.get("max_pls_components", 8))
    profile = pls_component_profile(X_train, y_train, max_components, folds)
    artifacts["pls_profile"] = save_table(profile, run_dir / "pls_profile.csv")
    profile_path = plot_line(profile, "components", "rmse", run_dir / "pls_profile.png", "PLS: resampled RMSE", error="rmse_sd")
    artifacts["pls_profile_plot"] = profile_path
    notes.heading("Partial least squares")
    notes.paragraph(
        "PLS finds components that summarize the predictors *and* correlate with the outcome, so it usually "
        "needs fewer components than principal component regression."
    )
    notes.table(profile).image(profile_path, "PLS component profile")

    model_names = list(cfg.get("models", DEFAULT_MODELS))
    comparison, fitted = compare_models(model_names, X_train, y_train, X_test, y_test, folds, seed, cfg.get("grids"))
    artifacts["model_comparison"] = save_table(comparison, run_dir / "model_comparison.csv")
    notes.heading("Penalized and projection models")
    notes.paragraph(
        "Ridge shrinks every coefficient, the lasso shrinks some to exactly zero, and the elastic net mixes "
        "both penalties. All models were tuned on the same folds."
    )
    notes.table(comparison)

    winner = str(comparison.iloc[0]["model"])
    LOGGER.info("chapter=%s winner=%s", CHAPTER, winner)
    scatter_path = plot_observed_predicted(
        y_test.to_numpy(dtype=float),
        fitted[winner].predict(X_test),
        run_dir / "observed_predicted.png",
        f"Test set: {winner}",
    )
    artifacts["observed_predicted"] = scatter_path
    notes.image(scatter_path, "Observed versus predicted and residuals")

    notes_path = notes.write(run_dir / "notes.md")
    return {
        "chapter": CHAPTER,
        "notes_path": notes_path,
        "artifacts": artifacts,
        "params": {"dataset": bundle.name, "models": ",".join(model_names), "folds": budget["folds"]},
        "metrics": {
            "ols_r_squared": ols["r_squared"],
            "best_resampled_rmse": float(comparison.iloc[0]["resampled_rmse"]),
            "best_test_rmse": float(comparison.iloc[0]["test_rmse"]),
        },
    }
