"""
Principal component analysis for feature extraction.
PCA seeks linear combinations of the predictors that capture the most variance, so
predictors should be centered and scaled first or the largest-scale predictors dominate.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd
from sklearn.decomposition import PCA
from sklearn.preprocessing import StandardScaler


@dataclass(frozen=True)
class PCAResult:
    components: int
    loadings: pd.DataFrame
    explained_variance_ratio: np.ndarray
    cumulative_variance: np.ndarray
    scores: pd.DataFrame


def components_for_threshold(cumulative: np.ndarray, threshold: float) -> int:
    if not 0 < threshold <= 1:
        raise ValueError("threshold must be within (0, 1]")
    # guard against float round-off leaving the last cumulative value at 0.9999999
    hits = np.nonzero(cumulative >= threshold - 1e-12)[0]
    return int(hits[0] + 1) if hits.size else int(cumulative.size)


def fit_pca(
    frame: pd.DataFrame,
    threshold: float = 0.95,
    n_components: int | None = None,
    scale: bool = True,
) -> PCAResult:
    numeric = frame.select_dtypes(include="number")
    if numeric.shape[1] < 2:
        raise ValueError("PCA needs at least two numeric predictors")
    if numeric.isna().any().any():
        raise ValueError("PCA input contains missing values; impute first")

    values = numeric.to_numpy(dtype=float)
    if scale:
        values = StandardScaler().fit_transform(values)
    else:
        values = values - values.mean(axis=0)

    full = PCA().fit(values)
    ratio = np.asarray(full.explained_variance_ratio_, dtype=float)
    cumulative = np.cumsum(ratio)
    if n_components is None:
        keep = components_for_threshold(cumulative, threshold)
    else:
        if not 1 <= n_components <= ratio.size:
            raise ValueError(f"n_components must be within [1, {ratio.size}]")
        keep = int(n_components)

    names = [f"PC{index + 1}" for index in range(keep)]
    loadings = pd.DataFrame(full.components_[:keep].T, index=[str(c) for c in numeric.columns], columns=names)
    scores = pd.DataFrame(full.transform(values)[:, :keep], index=frame.index, columns=names)
    return PCAResult(
        components=keep,
        loadings=loadings,
        explained_variance_ratio=ratio,
        cumulative_variance=cumulative,
        scores=scores,
    )


def scree_frame(result: PCAResult) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "component": np.arange(1, result.explained_variance_ratio.size + 1),
            "percent_variance": 100.0 * result.explained_variance_ratio,
            "cumulative_percent": 100.0 * result.cumulative_variance,
            "retained": np.arange(1, result.explained_variance_ratio.size + 1) <= result.components,
        }
    )
