"""
Python versus R primer.
Small pandas/numpy renditions of the base R functions the notes lean on, written to return
what R returns so outputs can be compared side by side. Where R and Python conventions
differ (1-based indexing, inclusive sequences, n - 1 standard deviations) the R convention wins.
"""

from __future__ import annotations

import math
from typing import Any

import numpy as np
import pandas as pd

SUMMARY_LABELS = ("Min.", "1st Qu.", "Median", "Mean", "3rd Qu.", "Max.")

SYNTAX_CROSSWALK: list[dict[str, str]] = [
    {"task": "read a csv", "r": "read.csv('f.csv')", "python": "pd.read_csv('f.csv')"},
    {"task": "first rows", "r": "head(df, 6)", "python": "df.head(6)"},
    {"task": "structure", "r": "str(df)", "python": "df.info()"},
    {"task": "five-number summary", "r": "summary(x)", "python": "r_summary(x)"},
    {"task": "frequency table", "r": "table(x)", "python": "x.value_counts().sort_index()"},
    {"task": "sequence", "r": "seq(1, 10, by = 2)", "python": "np.arange(1, 11, 2)"},
    {"task": "repeat", "r": "rep(c(1, 2), times = 3)", "python": "np.tile([1, 2], 3)"},
    {"task": "positions of TRUE", "r": "which(x > 0)", "python": "np.flatnonzero(x > 0) + 1"},
    {"task": "subset rows", "r": "df[df$a > 1, ]", "python": "df[df['a'] > 1]"},
    {"task": "select column", "r": "df$a", "python": "df['a']"},
    {"task": "apply over columns", "r": "apply(m, 2, mean)", "python": "df.apply(np.mean, axis=0)"},
    {"task": "group summary", "r": "aggregate(y ~ g, df, mean)", "python": "df.groupby('g')['y'].mean()"},
    {"task": "center and scale", "r": "scale(m)", "python": "(df - df.mean()) / df.std()"},
    {"task": "missing values", "r": "is.na(x)", "python": "x.isna()"},
    {"task": "string concatenation", "r": "paste('a', 1:3)", "python": "r_paste('a', [1, 2, 3])"},
    {"task": "linear model", "r": "lm(y ~ ., data = df)", "python": "sm.OLS(y, sm.add_constant(X)).fit()"},
    {"task": "set random seed", "r": "set.seed(1)", "python": "rng = np.random.default_rng(1)"},
]


def _format_number(value: float) -> str:
    return f"{value:.4g}"


def _r_string(value: Any) -> str:
    """Render one element the way R's as.character does."""

    if isinstance(value, (bool, np.bool_)):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (float, np.floating)):
        if math.isnan(value):
            return "NA"
        if math.isinf(value):
            return "Inf" if value > 0 else "-Inf"
        if float(value).is_integer():
            return str(int(value))
        return f"{float(value):.15g}"
    return str(value)


def r_summary(values: Any) -> pd.Series:
    """R `summary()` for a numeric vector: quartiles use R's default (type 7) quantiles."""

    series = pd.Series(values, dtype=float)
    observed = series.dropna()
    if observed.empty:
        raise ValueError("summary of an empty or all-missing vector")
    q1, median, q3 = np.quantile(observed.to_numpy(), [0.25, 0.5, 0.75])
    stats = [observed.min(), q1, median, observed.mean(), q3, observed.max()]
    result = pd.Series([float(value) for value in stats], index=list(SUMMARY_LABELS))
    missing = int(series.isna().sum())
    if missing:
        result["NA's"] = float(missing)
    return result


def r_table(values: Any) -> pd.Series:
    series = pd.Series(values)
    counts = series.value_counts(dropna=True).sort_index()
    counts.index.name = None
    counts.name = None
    return counts.astype(int)


def r_seq(
    start: float,
    stop: float | None = None,
    by: float | None = None,
    length_out: int | None = None,
) -> np.ndarray:
    """R `seq()`: both endpoints inclusive when reachable."""

    if by is not None and length_out is not None:
        raise ValueError("specify at most one of by and length_out")
    if length_out is not None and length_out < 0:
        raise ValueError("length_out must be non-negative")
    if stop is None:
        if length_out is not None:
            # seq(from, length.out = n) counts up from `from` in steps of 1
            result = start + np.arange(int(length_out))
            return result.astype(int) if float(start).is_integer() else result
        if by is None:
            stop, start = start, 1
        else:
            stop = 1
    if length_out is not None:
        return np.linspace(start, stop, int(length_out))
    if by is None:
        by = 1 if stop >= start else -1
    if by == 0:
        raise ValueError("by must be non-zero")
    if (stop - start) * by < 0:
        raise ValueError("wrong sign in 'by' argument")
    count = int(math.floor((stop - start) / by + 1e-10)) + 1
    result = start + by * np.arange(count)
    if all(float(value).is_integer() for value in (start, by)):
        return result.astype(int)
    return result


def r_rep(values: Any, times: int = 1, each: int = 1) -> np.ndarray:
    if times < 0 or each < 0:
        raise ValueError("times and each must be non-negative")
    array = np.atleast_1d(np.asarray(values))
    return np.tile(np.repeat(array, each), times)


def r_which(mask: Any) -> np.ndarray:
    """1-based positions of the TRUE entries, missing values treated as FALSE like R."""

    series = pd.Series(mask).fillna(False).astype(bool)
    return np.flatnonzero(series.to_numpy()) + 1


def r_scale(frame: pd.DataFrame) -> pd.DataFrame:
    numeric = frame.select_dtypes(include="number")
    return (numeric - numeric.mean()) / numeric.std(ddof=1)


def r_cut(values: Any, breaks: list[float]) -> pd.Series:
    """R `cut()` with explicit breaks: right-closed intervals labelled like `(a,b]`."""

    if len(breaks) < 2:
        raise ValueError("breaks needs at least two values")
    ordered = sorted(float(value) for value in breaks)
    labels = [f"({_format_number(low)},{_format_number(high)}]" for low, high in zip(ordered[:-1], ordered[1:], strict=True)]
    return pd.cut(pd.Series(values, dtype=float), bins=ordered, right=True, labels=labels)


def r_paste(*parts: Any, sep: str = " ") -> list[str]:
    """R `paste()`: vectorized over its arguments, recycling shorter ones."""

    if not parts:
        return []
    vectors = [list(np.atleast_1d(np.asarray(part, dtype=object))) for part in parts]
    if any(len(vector) == 0 for vector in vectors):
        return []
    length = max(len(vector) for vector in vectors)
    return [sep.join(_r_string(vector[index % len(vector)]) for vector in vectors) for index in range(length)]


def crosswalk_frame() -> pd.DataFrame:
    return pd.DataFrame(SYNTAX_CROSSWALK, columns=["task", "r", "python"])
