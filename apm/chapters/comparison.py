"""Tune several catalog models on shared folds and score them on one test set."""

from __future__ import annotations

import logging
from typing import Any

import pandas as pd

from apm.evaluation.metrics import regression_summary
from apm.models.registry import get_model_spec
from apm.resampling.resample import ResampleFold
from apm.resampling.tuning import tune_model

LOGGER = logging.getLogger("chapters")


def compare_models(
    model_names: list[str],
    X_train: pd.DataFrame,
    y_train: pd.Series,
    X_test: pd.DataFrame,
    y_test: pd.Series,
    folds: list[ResampleFold],
    seed: int,
    grids: dict[str, Any] | None = None,
) -> tuple[pd.DataFrame, dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    fitted: dict[str, Any] = {}
    for name in model_names:
        spec = get_model_spec(name, "regression")
        result = tune_model(
            spec.factory(seed),
            spec.default_grid((grids or {}).get(name)),
            X_train,
            y_train,
            folds,
            metric="rmse",
            complexity_key=spec.complexity_key,
        )
        predictions = result.final_model.predict(X_test)
        test_metrics = regression_summary(y_test, predictions)
        fitted[name] = result.final_model
        rows.append(
            {
                "model": name,
                "selected": str(result.best_params),
                "resampled_rmse": float(result.results["mean"].iloc[result.selected_index]),
                "test_rmse": test_metrics["rmse"],
                "test_rsquared": test_metrics["rsquared"],
            }
        )
        LOGGER.info("model=%s selected=%s test_rmse=%.4f", name, result.best_params, test_metrics["rmse"])
    table = pd.DataFrame(rows).sort_values("resampled_rmse").reset_index(drop=True)
    return table, fitted
