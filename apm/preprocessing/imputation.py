"""Missing-value summaries and imputation."""

from __future__ import annotations

import pandas as pd
from sklearn.impute import KNNImputer


def missing_summary(frame: pd.DataFrame) -> pd.DataFrame:
    counts = frame.isna().sum()
    total = max(len(frame), 1)
    summary = pd.DataFrame(
        {
            "predictor": [str(column) for column in counts.index],
            "missing": counts.to_numpy(dtype=int),
            "percent_missing": 100.0 * counts.to_numpy(dtype=float) / total,
        }
    )
    return summary.sort_values("missing", ascending=False).reset_index(drop=True)


def empty_columns(frame: pd.DataFrame) -> list[str]:
    return [str(column) for column in frame.columns if frame[column].isna().all()]


def median_impute(frame: pd.DataFrame) -> pd.DataFrame:
    numeric = frame.select_dtypes(include="number")
    filled = frame.copy()
    filled[numeric.columns] = numeric.fillna(numeric.median())
    return filled


def knn_impute(frame: pd.DataFrame, k: int = 5) -> pd.DataFrame:
    """Fill each missing value with the mean of the `k` nearest rows on the observed predictors."""

    if k <= 0:
        raise ValueError("k must be > 0")
    numeric = frame.select_dtypes(include="number")
    if numeric.shape[1] != frame.shape[1]:
        raise ValueError("knn_impute requires an all-numeric frame; encode categorical predictors first")
    empty = empty_columns(numeric)
    if empty:
        raise ValueError(f"cannot impute predictors with no observed values: {empty}")
    imputer = KNNImputer(n_neighbors=k)
    values = imputer.fit_transform(numeric)
    return pd.DataFrame(values, columns=frame.columns, index=frame.index)
