"""Regression trees and rule-based ensembles: importance, structure and ensemble size."""

from __future__ import annotations

from typing import Any

import numpy as np
import pandas as pd
from sklearn.ensemble import BaggingRegressor, GradientBoostingRegressor, RandomForestRegressor
from sklearn.pipeline import Pipeline
from sklearn.tree import DecisionTreeRegressor

from apm.evaluation.metrics import rmse
from apm.resampling.resample import ResampleFold, resample_estimator

ENSEMBLE_KINDS = ("bagging", "rf", "gbm")


def _final_estimator(model: Any) -> Any:
    return model.steps[-1][1] if isinstance(model, Pipeline) else model


def variable_importance(model: Any, feature_names: list[str]) -> pd.DataFrame:
    """Importance scaled so the most important predictor scores 100."""

    estimator = _final_estimator(model)
    if isinstance(estimator, BaggingRegressor):
        raw = np.mean([tree.feature_importances_ for tree in estimator.estimators_], axis=0)
    elif hasattr(estimator, "feature_importances_"):
        raw = np.asarray(estimator.feature_importances_, dtype=float)
    else:
        raise TypeError(f"{type(estimator).__name__} does not expose feature importances")
    if raw.size != len(feature_names):
        raise ValueError("feature_names length does not match the fitted model")

    top = float(raw.max()) if raw.size else 0.0
    scaled = 100.0 * raw / top if top > 0 else np.zeros_like(raw)
    frame = pd.DataFrame({"predictor": list(feature_names), "importance": scaled})
    return frame.sort_values("importance", ascending=False).reset_index(drop=True)


def tree_structure(model: Any) -> dict[str, int]:
    estimator = _final_estimator(model)
    if not hasattr(estimator, "tree_"):
        raise TypeError("tree_structure expects a fitted single decision tree")
    return {
        "depth": int(estimator.get_depth()),
        "leaves": int(estimator.get_n_leaves()),
        "nodes": int(estimator.tree_.node_count),
    }


def _ensemble(kind: str, size: int, random_state: int | None) -> Any:
    if kind == "bagging":
        return BaggingRegressor(
            estimator=DecisionTreeRegressor(random_state=random_state),
            n_estimators=size,
            random_state=random_state,
        )
    if kind == "rf":
        return RandomForestRegressor(n_estimators=size, max_features=0.33, random_state=random_state)
    if kind == "gbm":
        return GradientBoostingRegressor(n_estimators=size, max_depth=2, subsample=0.5, random_state=random_state)
    raise ValueError(f"unknown ensemble kind: {kind!r}; expected one of {list(ENSEMBLE_KINDS)}")


def ensemble_size_profile(
    X: Any,
    y: Any,
    sizes: list[int],
    folds: list[ResampleFold],
    kind: str = "bagging",
    random_state: int | None = None,
) -> pd.DataFrame:
    if kind not in ENSEMBLE_KINDS:
        raise ValueError(f"unknown ensemble kind: {kind!r}; expected one of {list(ENSEMBLE_KINDS)}")
    if not sizes or any(size < 1 for size in sizes):
        raise ValueError("sizes must be a non-empty list of positive integers")

    rows: list[dict[str, Any]] = []
    for size in sorted(set(int(value) for value in sizes)):
        scores = resample_estimator(lambda: _ensemble(kind, size, random_state), X, y, folds, rmse)
        rows.append({"kind": kind, "trees": size, "rmse": float(scores["score"].mean())})
    return pd.DataFrame(rows)
