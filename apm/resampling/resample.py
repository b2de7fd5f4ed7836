"""
Resampling schemes for estimating model performance.
k-fold CV, its repeated form, leave-one-out, leave-group-out (Monte Carlo) CV and the bootstrap
all produce a list of `ResampleFold` objects; the holdout rows of a bootstrap resample are the out-of-bag rows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

import numpy as np
import pandas as pd
from sklearn.model_selection import KFold, LeaveOneOut, ShuffleSplit, StratifiedKFold, StratifiedShuffleSplit

from apm.resampling.splits import is_categorical

LOGGER = logging.getLogger("resampling")

RESAMPLING_METHODS = ("cv", "repeatedcv", "loocv", "lgocv", "boot")
DEFAULT_NUMBER = {"cv": 10, "repeatedcv": 10, "lgocv": 25, "boot": 25}


@dataclass(frozen=True)
class ResampleFold:
    fold_id: str
    train_index: np.ndarray
    holdout_index: np.ndarray


def _kfold_splits(n_rows: int, number: int, y: Any | None, seed: int | None) -> list[tuple[np.ndarray, np.ndarray]]:
    placeholder = np.zeros(n_rows)
    if y is not None and is_categorical(y):
        splitter = StratifiedKFold(n_splits=number, shuffle=True, random_state=seed)
        return list(splitter.split(placeholder, pd.Series(y).astype(str).to_numpy()))
    splitter = KFold(n_splits=number, shuffle=True, random_state=seed)
    return list(splitter.split(placeholder))


def build_folds(
    n_rows: int,
    method: str = "cv",
    *,
    number: int | None = None,
    repeats: int = 1,
    p: float = 0.75,
    y: Any | None = None,
    random_state: int | None = None,
) -> list[ResampleFold]:
    if method not in RESAMPLING_METHODS:
        raise ValueError(f"unknown resampling method: {method!r}; expected one of {list(RESAMPLING_METHODS)}")
    if n_rows < 2:
        raise ValueError("resampling needs at least two rows")
    if y is not None and len(y) != n_rows:
        raise ValueError("y must have n_rows entries")
    number = int(number or DEFAULT_NUMBER.get(method, 10))

    if method == "loocv":
        placeholder = np.zeros(n_rows)
        return [
            ResampleFold(f"Fold{index + 1:0{len(str(n_rows))}d}", train, holdout)
            for index, (train, holdout) in enumerate(LeaveOneOut().split(placeholder))
        ]

    if method in {"cv", "repeatedcv"}:
        if not 2 <= number <= n_rows:
            raise ValueError(f"number of folds must be within [2, {n_rows}]")
        rounds = repeats if method == "repeatedcv" else 1
        if rounds < 1:
            raise ValueError("repeats must be >= 1")
        folds: list[ResampleFold] = []
        for rep in range(rounds):
            seed = None if random_state is None else random_state + rep
            for index, (train, holdout) in enumerate(_kfold_splits(n_rows, number, y, seed)):
                fold_id = f"Fold{index + 1:02d}"
                if method == "repeatedcv":
                    fold_id = f"{fold_id}.Rep{rep + 1:02d}"
                folds.append(ResampleFold(fold_id, np.sort(train), np.sort(holdout)))
        return folds

    if method == "lgocv":
        if not 0 < p < 1:
            raise ValueError("p must be within (0, 1)")
        placeholder = np.zeros(n_rows)
        if y is not None and is_categorical(y):
            splitter: Any = StratifiedShuffleSplit(n_splits=number, train_size=p, random_state=random_state)
            pairs = splitter.split(placeholder, pd.Series(y).astype(str).to_numpy())
        else:
            splitter = ShuffleSplit(n_splits=number, train_size=p, random_state=random_state)
            pairs = splitter.split(placeholder)
        return [
            ResampleFold(f"Resample{index + 1:02d}", np.sort(train), np.sort(holdout))
            for index, (train, holdout) in enumerate(pairs)
        ]

    rng = np.random.default_rng(random_state)
    folds = []
    for index in range(number):
        train = rng.integers(0, n_rows, size=n_rows)
        holdout = np.setdiff1d(np.arange(n_rows), train)
        if holdout.size == 0:
            LOGGER.warning("bootstrap resample %d has no out-of-bag rows", index + 1)
        folds.append(ResampleFold(f"Resample{index + 1:02d}", np.sort(train), holdout))
    return folds


def take_rows(data: Any, index: np.ndarray) -> Any:
    if hasattr(data, "iloc"):
        return data.iloc[index]
    return np.asarray(data)[index]


def resample_estimator(
    factory: Callable[[], Any],
    X: Any,
    y: Any,
    folds: list[ResampleFold],
    metric_fn: Callable[[Any, Any], float],
) -> pd.DataFrame:
    """Fit a fresh estimator per fold and score it on that fold's holdout rows."""

    rows: list[dict[str, Any]] = []
    for fold in folds:
        if fold.holdout_index.size == 0:
            continue
        model = factory()
        model.fit(take_rows(X, fold.train_index), take_rows(y, fold.train_index))
        predicted = model.predict(take_rows(X, fold.holdout_index))
        observed = take_rows(y, fold.holdout_index)
        rows.append({"fold_id": fold.fold_id, "score": float(metric_fn(observed, predicted))})
    return pd.DataFrame(rows, columns=["fold_id", "score"])
