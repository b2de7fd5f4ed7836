"""
Performance measures for regression and classification models.
R^2 follows the squared-correlation definition used by most predictive modeling texts;
the traditional 1 - SSE/SST form is kept alongside for comparison since the two diverge for poor models.
"""

from __future__ import annotations

from typing import Any, Callable

import numpy as np
import pandas as pd
from sklearn.metrics import cohen_kappa_score


def rmse(y_true: Any, y_pred: Any) -> float:
    y_true = np.asarray(y_true, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float)
    return float(np.sqrt(np.mean(np.square(y_true - y_pred))))


def mae(y_true: Any, y_pred: Any) -> float:
    y_true = np.asarray(y_true, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float)
    return float(np.mean(np.abs(y_true - y_pred)))


def r_squared(y_true: Any, y_pred: Any) -> float:
    y_true = np.asarray(y_true, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float)
    if y_true.size < 2 or np.ptp(y_true) == 0 or np.ptp(y_pred) == 0:
        return float("nan")
    return float(np.corrcoef(y_true, y_pred)[0, 1] ** 2)


def r_squared_traditional(y_true: Any, y_pred: Any) -> float:
    y_true = np.asarray(y_true, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float)
    sst = float(np.sum(np.square(y_true - y_true.mean())))
    if sst == 0.0:
        return float("nan")
    return float(1.0 - np.sum(np.square(y_true - y_pred)) / sst)


def regression_summary(y_true: Any, y_pred: Any) -> dict[str, float]:
    return {
        "rmse": rmse(y_true, y_pred),
        "rsquared": r_squared(y_true, y_pred),
        "mae": mae(y_true, y_pred),
    }


def accuracy(y_true: Any, y_pred: Any) -> float:
    y_true = np.asarray(y_true, dtype=object)
    y_pred = np.asarray(y_pred, dtype=object)
    if y_true.size == 0:
        return float("nan")
    return float(np.mean(y_true == y_pred))


def kappa(y_true: Any, y_pred: Any) -> float:
    """Cohen's kappa: agreement corrected for the agreement expected by chance."""

    y_true = np.asarray(y_true, dtype=object).astype(str)
    y_pred = np.asarray(y_pred, dtype=object).astype(str)
    if np.unique(np.concatenate([y_true, y_pred])).size < 2:
        return float("nan")
    return float(cohen_kappa_score(y_true, y_pred))


def confusion_frame(y_true: Any, y_pred: Any) -> pd.DataFrame:
    return pd.crosstab(
        pd.Series(np.asarray(y_pred, dtype=object), name="predicted"),
        pd.Series(np.asarray(y_true, dtype=object), name="observed"),
    )


def classification_summary(y_true: Any, y_pred: Any) -> dict[str, float]:
    return {"accuracy": accuracy(y_true, y_pred), "kappa": kappa(y_true, y_pred)}


METRICS: dict[str, tuple[Callable[[Any, Any], float], bool]] = {
    "rmse": (rmse, False),
    "mae": (mae, False),
    "rsquared": (r_squared, True),
    "rsquared_traditional": (r_squared_traditional, True),
    "accuracy": (accuracy, True),
    "kappa": (kappa, True),
}


def resolve_metric(name: str) -> tuple[Callable[[Any, Any], float], bool]:
    try:
        return METRICS[name]
    except KeyError as exc:
        raise ValueError(f"unknown metric: {name!r}; expected one of {sorted(METRICS)}") from exc
