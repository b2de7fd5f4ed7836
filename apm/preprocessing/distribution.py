"""
Skewness diagnostics for individual predictors.
An un-skewed distribution is roughly symmetric; right skew has a long tail of large values.
A max/min ratio above 20 is a quick hint that a strictly positive predictor is skewed.
"""

from __future__ import annotations

from typing import Any

import numpy as np
import pandas as pd

SKEW_RATIO_HINT = 20.0


def _clean(values: Any) -> np.ndarray:
    array = np.asarray(values, dtype=float).ravel()
    return array[~np.isnan(array)]


def skewness(values: Any) -> float:
    """Sample skewness: sum((x - mean)^3) / ((n - 1) * v^(3/2)), v the sample variance."""

    x = _clean(values)
    n = x.size
    if n < 3:
        raise ValueError("skewness needs at least 3 non-missing values")
    deviations = x - x.mean()
    v = float(np.sum(deviations**2) / (n - 1))
    if v == 0.0:
        raise ValueError("skewness is undefined for a constant predictor")
    return float(np.sum(deviations**3) / ((n - 1) * v**1.5))


def max_min_ratio(values: Any) -> float:
    x = _clean(values)
    if x.size == 0:
        raise ValueError("max_min_ratio needs at least one non-missing value")
    if np.any(x <= 0):
        raise ValueError("max_min_ratio requires strictly positive values")
    return float(x.max() / x.min())


def skewness_table(frame: pd.DataFrame, threshold: float = 1.0) -> pd.DataFrame:
    rows: list[dict[str, Any]] = []
    for column in frame.select_dtypes(include="number").columns:
        series = frame[column]
        try:
            value = skewness(series)
        except ValueError:
            value = np.nan
        try:
            ratio = max_min_ratio(series)
        except ValueError:
            ratio = np.nan
        rows.append(
            {
                "predictor": str(column),
                "skewness": value,
                "max_min_ratio": ratio,
                "is_skewed": bool(abs(value) > threshold) if value == value else False,
            }
        )
    table = pd.DataFrame(rows, columns=["predictor", "skewness", "max_min_ratio", "is_skewed"])
    return table.sort_values("skewness", ascending=False, key=lambda s: s.abs()).reset_index(drop=True)
