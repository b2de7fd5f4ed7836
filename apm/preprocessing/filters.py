"""
Predictor filters: near-zero variance and between-predictor correlation.
Both remove predictors before modeling rather than transforming them.
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np
import pandas as pd

LOGGER = logging.getLogger("preprocessing")

DEFAULT_FREQ_CUT = 95 / 5
DEFAULT_UNIQUE_CUT = 10.0


def _frequency_ratio(series: pd.Series) -> float:
    counts = series.value_counts(dropna=True)
    if counts.empty:
        return float("nan")
    if len(counts) == 1:
        return 0.0
    return float(counts.iloc[0] / counts.iloc[1])


def near_zero_variance(
    frame: pd.DataFrame,
    freq_cut: float = DEFAULT_FREQ_CUT,
    unique_cut: float = DEFAULT_UNIQUE_CUT,
) -> pd.DataFrame:
    """Flag predictors with (near) zero variance.

    A predictor is flagged when it has a single unique value, or when the most common
    value is `freq_cut` times more frequent than the second most common *and* the
    percentage of distinct values is at most `unique_cut`.
    """

    if freq_cut <= 1:
        raise ValueError("freq_cut must be > 1")
    if not 0 <= unique_cut <= 100:
        raise ValueError("unique_cut must be within [0, 100]")

    rows: list[dict[str, Any]] = []
    n_rows = max(len(frame), 1)
    for column in frame.columns:
        series = frame[column]
        unique = int(series.nunique(dropna=True))
        freq_ratio = _frequency_ratio(series)
        percent_unique = 100.0 * unique / n_rows
        zero_var = unique < 2
        nzv = zero_var or (freq_ratio > freq_cut and percent_unique <= unique_cut)
        rows.append(
            {
                "predictor": str(column),
                "freq_ratio": freq_ratio,
                "percent_unique": percent_unique,
                "zero_var": bool(zero_var),
                "nzv": bool(nzv),
            }
        )
    return pd.DataFrame(rows, columns=["predictor", "freq_ratio", "percent_unique", "zero_var", "nzv"])


def nzv_columns(frame: pd.DataFrame, **kwargs: Any) -> list[str]:
    table = near_zero_variance(frame, **kwargs)
    return table.loc[table["nzv"], "predictor"].tolist()


def find_correlation(frame: pd.DataFrame, cutoff: float = 0.9) -> list[str]:
    """Return predictors to drop so that no absolute pairwise correlation exceeds `cutoff`.

    Repeatedly takes the most correlated pair and drops the member with the larger
    mean absolute correlation to the remaining predictors.
    """

    if not 0 < cutoff <= 1:
        raise ValueError("cutoff must be within (0, 1]")

    numeric = frame.select_dtypes(include="number")
    corr = numeric.corr().abs().fillna(0.0)
    remaining = [str(column) for column in corr.columns]
    corr.index = remaining
    corr.columns = remaining

    dropped: list[str] = []
    while len(remaining) > 1:
        sub = corr.loc[remaining, remaining].to_numpy(dtype=float, copy=True)
        np.fill_diagonal(sub, np.nan)
        largest = float(np.nanmax(sub))
        if largest <= cutoff:
            break
        first, second = np.unravel_index(int(np.nanargmax(sub)), sub.shape)
        first, second = sorted((int(first), int(second)))
        mean_first = float(np.nanmean(sub[first]))
        mean_second = float(np.nanmean(sub[second]))
        victim = remaining[first] if mean_first >= mean_second else remaining[second]
        LOGGER.debug("dropping %s (|r|=%.3f)", victim, largest)
        dropped.append(victim)
        remaining.remove(victim)

    return dropped
