"""
Adding and removing predictors: dummy variables and binning.
Linear models need a full-rank set of dummies; trees can use every level.
"""

from __future__ import annotations

from typing import Any

import pandas as pd


def dummy_variables(frame: pd.DataFrame, columns: list[str] | None = None, full_rank: bool = True) -> pd.DataFrame:
    if columns is None:
        columns = [
            str(column)
            for column in frame.columns
            if not pd.api.types.is_numeric_dtype(frame[column]) or pd.api.types.is_bool_dtype(frame[column])
        ]
    missing = sorted(set(columns).difference(frame.columns))
    if missing:
        raise ValueError(f"columns not in frame: {missing}")
    if not columns:
        return frame.copy()
    return pd.get_dummies(frame, columns=columns, drop_first=full_rank, dtype=float)


def bin_predictor(values: Any, bins: int) -> pd.Series:
    """Equal-width binning of a numeric predictor into `bins` ordered categories."""

    if bins < 2:
        raise ValueError("bins must be >= 2")
    series = pd.Series(values, dtype=float)
    return pd.cut(series, bins=bins, include_lowest=True)
