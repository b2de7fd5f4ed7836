"""
Grid search over tuning parameters with resampled performance estimates.
Besides picking the numerically best candidate, the one-standard-error and tolerance rules
pick the simplest candidate whose performance is close to the best, trading a little
apparent performance for a less complex model.
"""

from __future__ import annotations

import itertools
import logging
import math
from dataclasses import dataclass
from typing import Any, Callable

import numpy as np
import pandas as pd

from apm.evaluation.metrics import resolve_metric
from apm.resampling.resample import ResampleFold, take_rows

LOGGER = logging.getLogger("resampling")

SELECTION_RULES = ("best", "one_se", "tolerance")


@dataclass(frozen=True)
class TuneResult:
    metric: str
    maximize: bool
    selection: str
    results: pd.DataFrame
    resamples: pd.DataFrame
    best_index: int
    selected_index: int
    best_params: dict[str, Any]
    final_model: Any | None


def expand_grid(space: dict[str, Any]) -> list[dict[str, Any]]:
    keys = sorted(space.keys())
    values = [list(space[key]) for key in keys]
    return [dict(zip(keys, combo, strict=True)) for combo in itertools.product(*values)]


def _complexity_order(grid: list[dict[str, Any]], complexity_key: str | Callable[[dict[str, Any]], Any] | None) -> list[int]:
    if complexity_key is None:
        return list(range(len(grid)))
    if isinstance(complexity_key, str):
        key_fn: Callable[[dict[str, Any]], Any] = lambda params: params[complexity_key]  # noqa: E731
    else:
        key_fn = complexity_key
    return sorted(range(len(grid)), key=lambda index: (key_fn(grid[index]), index))


def select_candidate(
    summary: pd.DataFrame,
    order: list[int],
    *,
    maximize: bool,
    selection: str,
    tolerance: float,
) -> tuple[int, int]:
    """Return (best_index, selected_index) for the given summary of mean/se per candidate."""

    means = summary["mean"].to_numpy(dtype=float)
    valid = ~np.isnan(means)
    if not valid.any():
        raise RuntimeError("every tuning candidate failed to produce a performance estimate")
    masked = np.where(valid, means, -np.inf if maximize else np.inf)
    best_index = int(np.argmax(masked) if maximize else np.argmin(masked))
    best_mean = float(means[best_index])

    if selection == "best":
        return best_index, best_index

    if selection == "one_se":
        best_se = float(summary["se"].iloc[best_index])
        if maximize:
            close = means >= best_mean - best_se
        else:
            close = means <= best_mean + best_se
    else:
        if best_mean == 0.0:
            close = means == best_mean
        else:
            if maximize:
                loss = (best_mean - means) / abs(best_mean) * 100.0
            else:
                loss = (means - best_mean) / abs(best_mean) * 100.0
            close = loss <= tolerance

    close = close & valid
    for index in order:
        if close[index]:
            return best_index, int(index)
    return best_index, best_index


def tune_model(
    factory: Callable[[dict[str, Any]], Any],
    grid: list[dict[str, Any]],
    X: Any,
    y: Any,
    folds: list[ResampleFold],
    *,
    metric: str = "rmse",
    maximize: bool | None = None,
    selection: str = "best",
    complexity_key: str | Callable[[dict[str, Any]], Any] | None = None,
    tolerance: float = 1.5,
    refit: bool = True,
) -> TuneResult:
    """Resample every candidate in `grid` and choose one with the requested selection rule.

    `complexity_key` orders candidates from simplest to most complex; without it the
    grid order is taken as the complexity order.
    """

    if not grid:
        raise ValueError("tuning grid is empty")
    if not folds:
        raise ValueError("no resampling folds supplied")
    if selection not in SELECTION_RULES:
        raise ValueError(f"unknown selection rule: {selection!r}; expected one of {list(SELECTION_RULES)}")

    metric_fn, default_maximize = resolve_metric(metric)
    maximize = default_maximize if maximize is None else maximize

    resample_rows: list[dict[str, Any]] = []
    summary_rows: list[dict[str, Any]] = []
    for candidate, params in enumerate(grid):
        scores: list[float] = []
        candidate_rows: list[dict[str, Any]] = []
        try:
            for fold in folds:
                if fold.holdout_index.size == 0:
                    continue
                model = factory(dict(params))
                model.fit(take_rows(X, fold.train_index), take_rows(y, fold.train_index))
                predicted = model.predict(take_rows(X, fold.holdout_index))
                score = float(metric_fn(take_rows(y, fold.holdout_index), predicted))
                scores.append(score)
                candidate_rows.append({"candidate": candidate, "fold_id": fold.fold_id, metric: score, **params})
        except Exception as exc:  # noqa: BLE001
            LOGGER.warning("candidate %s failed during resampling: %s", params, exc)
            scores = []
            candidate_rows = []
        resample_rows.extend(candidate_rows)

        finite = np.asarray([value for value in scores if not math.isnan(value)], dtype=float)
        mean = float(finite.mean()) if finite.size else float("nan")
        sd = float(finite.std(ddof=1)) if finite.size > 1 else 0.0
        se = sd / math.sqrt(finite.size) if finite.size else float("nan")
        summary_rows.append({**params, "mean": mean, "sd": sd, "se": se, "resamples": int(finite.size)})

    summary = pd.DataFrame(summary_rows)
    order = _complexity_order(grid, complexity_key)
    best_index, selected_index = select_candidate(
        summary,
        order,
        maximize=maximize,
        selection=selection,
        tolerance=tolerance,
    )
    summary["selected"] = False
    summary.loc[selected_index, "selected"] = True
    selected_params = dict(grid[selected_index])
    LOGGER.info(
        "tuning selected %s (rule=%s, %s=%.4f)",
        selected_params,
        selection,
        metric,
        float(summary["mean"].iloc[selected_index]),
    )

    final_model = None
    if refit:
        final_model = factory(dict(selected_params))
        final_model.fit(X, y)

    return TuneResult(
        metric=metric,
        maximize=maximize,
        selection=selection,
        results=summary,
        resamples=pd.DataFrame(resample_rows),
        best_index=best_index,
        selected_index=selected_index,
        best_params=selected_params,
        final_model=final_model,
    )
