"""
Loaders for the sample datasets used throughout the notes.
Everything here ships with scikit-learn, so the chapters run offline and reproducibly.
Each loader returns a `DatasetBundle` holding one tidy frame with the outcome as a named column.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

import numpy as np
import pandas as pd
from sklearn import datasets as sk_datasets


@dataclass(frozen=True)
class DatasetBundle:
    name: str
    frame: pd.DataFrame
    target: str
    task: str
    description: str

    @property
    def features(self) -> pd.DataFrame:
        return self.frame.drop(columns=[self.target])

    @property
    def target_values(self) -> pd.Series:
        return self.frame[self.target]


def _from_sklearn(loader: Callable[..., Any], name: str, target: str, task: str, description: str) -> DatasetBundle:
    bunch = loader(as_frame=True)
    frame = bunch.frame.copy()
    frame = frame.rename(columns={"target": target})
    if task == "classification":
        names = list(getattr(bunch, "target_names", []))
        if names:
            frame[target] = pd.Categorical.from_codes(frame[target].astype(int), categories=names)
    return DatasetBundle(name=name, frame=frame, target=target, task=task, description=description)


def _friedman1(n_samples: int, noise: float, random_state: int | None) -> DatasetBundle:
    x, y = sk_datasets.make_friedman1(n_samples=n_samples, n_features=10, noise=noise, random_state=random_state)
    frame = pd.DataFrame(x, columns=[f"X{index + 1}" for index in range(x.shape[1])])
    frame["y"] = y
    return DatasetBundle(
        name="friedman1",
        frame=frame,
        target="y",
        task="regression",
        description=(
            "Simulated benchmark: y = 10 sin(pi X1 X2) + 20 (X3 - 0.5)^2 + 10 X4 + 5 X5 + noise. "
            "X6-X10 are pure noise predictors."
        ),
    )


_BUILTIN: dict[str, tuple[Callable[..., Any], str, str, str]] = {
    "diabetes": (
        sk_datasets.load_diabetes,
        "progression",
        "regression",
        "Disease progression one year after baseline for 442 diabetes patients (10 centered/scaled predictors).",
    ),
    "breast_cancer": (
        sk_datasets.load_breast_cancer,
        "diagnosis",
        "classification",
        "Wisconsin diagnostic breast cancer: 30 cell nucleus measurements, malignant vs benign.",
    ),
    "iris": (
        sk_datasets.load_iris,
        "species",
        "classification",
        "Fisher's iris: four flower measurements, three species.",
    ),
    "wine": (
        sk_datasets.load_wine,
        "cultivar",
        "classification",
        "Chemical analysis of wines from three cultivars; several predictors are strongly skewed.",
    ),
}


def available_datasets() -> list[str]:
    return sorted([*_BUILTIN.keys(), "friedman1"])


def load_dataset(
    name: str,
    *,
    n_samples: int = 200,
    noise: float = 1.0,
    random_state: int | None = None,
) -> DatasetBundle:
    """Load one of the bundled datasets by name.

    `n_samples`, `noise` and `random_state` only apply to the simulated `friedman1` data.
    """

    key = name.strip().lower()
    if key == "friedman1":
        if n_samples <= 0:
            raise ValueError("n_samples must be > 0")
        return _friedman1(n_samples, noise, random_state)
    if key not in _BUILTIN:
        raise ValueError(f"unknown dataset: {name!r}; expected one of {available_datasets()}")
    loader, target, task, description = _BUILTIN[key]
    return _from_sklearn(loader, key, target, task, description)


def describe_frame(frame: pd.DataFrame) -> pd.DataFrame:
    rows: list[dict[str, Any]] = []
    for column in frame.columns:
        series = frame[column]
        numeric = pd.api.types.is_numeric_dtype(series) and not pd.api.types.is_bool_dtype(series)
        rows.append(
            {
                "column": str(column),
                "dtype": str(series.dtype),
                "missing": int(series.isna().sum()),
                "unique": int(series.nunique(dropna=True)),
                "mean": float(series.mean()) if numeric else np.nan,
                "std": float(series.std(ddof=1)) if numeric else np.nan,
                "min": float(series.min()) if numeric else np.nan,
                "max": float(series.max()) if numeric else np.nan,
            }
        )
    return pd.DataFrame(rows)
