"""
Data splitting for a single training/test partition.
Random splits are stratified on the outcome so both sets share its distribution; for numeric
outcomes the strata are quantile groups. Maximum dissimilarity sampling is the predictor-space
alternative that spreads the test set across the range of the data.
"""

from __future__ import annotations

import math
from typing import Any

import numpy as np
import pandas as pd
from scipy.spatial.distance import cdist


def is_categorical(y: Any) -> bool:
    series = pd.Series(y)
    return not pd.api.types.is_numeric_dtype(series) or pd.api.types.is_bool_dtype(series)


def outcome_strata(y: Any, groups: int = 5) -> np.ndarray:
    """Stratum label per row: the class for categorical outcomes, a quantile group for numeric ones."""

    series = pd.Series(y).reset_index(drop=True)
    if is_categorical(series):
        return series.astype(str).to_numpy()
    if groups < 2 or series.nunique() < 2:
        return np.zeros(len(series), dtype=int)
    codes = pd.qcut(series.rank(method="first"), q=min(groups, len(series)), labels=False, duplicates="drop")
    return codes.to_numpy(dtype=int)


def stratified_split(
    y: Any,
    train_fraction: float = 0.8,
    groups: int = 5,
    random_state: int | None = None,
) -> tuple[np.ndarray, np.ndarray]:
    if not 0 < train_fraction < 1:
        raise ValueError("train_fraction must be within (0, 1)")
    strata = outcome_strata(y, groups)
    if strata.size < 2:
        raise ValueError("need at least two rows to split")

    rng = np.random.default_rng(random_state)
    train: list[int] = []
    for label in pd.unique(strata):
        members = np.flatnonzero(strata == label)
        rng.shuffle(members)
        take = math.ceil(members.size * train_fraction)
        train.extend(members[:take].tolist())

    train_index = np.sort(np.asarray(train, dtype=int))
    test_index = np.setdiff1d(np.arange(strata.size), train_index)
    return train_index, test_index


def max_dissimilarity_sample(
    frame: pd.DataFrame,
    n: int,
    start: list[int] | None = None,
    random_state: int | None = None,
) -> list[int]:
    """Select `n` row positions, each new one maximizing its minimum distance to those already chosen.

    Distances are Euclidean on the values given, so scale the predictors beforehand.
    """

    values = frame.to_numpy(dtype=float)
    total = values.shape[0]
    if not 1 <= n <= total:
        raise ValueError(f"n must be within [1, {total}]")

    if start:
        selected = [int(position) for position in start]
        if any(not 0 <= position < total for position in selected):
            raise ValueError("start positions out of range")
    else:
        rng = np.random.default_rng(random_state)
        selected = [int(rng.integers(0, total))]

    available = np.ones(total, dtype=bool)
    available[selected] = False
    min_dist = cdist(values, values[selected]).min(axis=1)

    while len(selected) < n:
        candidates = np.where(available, min_dist, -np.inf)
        chosen = int(np.argmax(candidates))
        selected.append(chosen)
        available[chosen] = False
        min_dist = np.minimum(min_dist, cdist(values, values[[chosen]]).ravel())

    return selected[:n]
