"""
Transformations of individual predictors and a fit/transform pre-processing recipe.
Centering, scaling and Box-Cox act on one predictor at a time; spatial sign acts on whole rows.
`Preprocessor` estimates every transformation on training data only and replays it on new data.
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np
import pandas as pd
from scipy import stats
from sklearn.decomposition import PCA
from sklearn.impute import KNNImputer

from apm.preprocessing.filters import DEFAULT_FREQ_CUT, DEFAULT_UNIQUE_CUT, find_correlation, nzv_columns
from apm.preprocessing.imputation import empty_columns
from apm.preprocessing.pca import components_for_threshold

LOGGER = logging.getLogger("preprocessing")

METHOD_ORDER: tuple[str, ...] = (
    "nzv",
    "corr",
    "knnImpute",
    "medianImpute",
    "BoxCox",
    "center",
    "scale",
    "pca",
    "spatialSign",
)


def estimate_boxcox_lambda(values: Any, fudge: float = 0.2) -> float:
    """Maximum likelihood Box-Cox lambda, snapped to 0 (log) or 1 (identity) within `fudge`."""

    x = np.asarray(values, dtype=float).ravel()
    x = x[~np.isnan(x)]
    if x.size < 2:
        raise ValueError("Box-Cox estimation needs at least two non-missing values")
    if np.any(x <= 0):
        raise ValueError("Box-Cox requires strictly positive values")
    if np.ptp(x) == 0:
        raise ValueError("Box-Cox is undefined for a constant predictor")

    _, lam = stats.boxcox(x)
    lam = float(lam)
    if abs(lam) < fudge:
        return 0.0
    if abs(lam - 1.0) < fudge:
        return 1.0
    return lam


def boxcox_transform(values: Any, lam: float) -> np.ndarray:
    x = np.asarray(values, dtype=float)
    if np.any(x[~np.isnan(x)] <= 0):
        raise ValueError("Box-Cox requires strictly positive values")
    if lam == 0.0:
        return np.log(x)
    return (np.power(x, lam) - 1.0) / lam


def center_scale(frame: pd.DataFrame) -> tuple[pd.DataFrame, pd.Series, pd.Series]:
    numeric = frame.select_dtypes(include="number")
    means = numeric.mean()
    sds = numeric.std(ddof=1)
    constant = sds[(sds == 0) | sds.isna()].index.tolist()
    if constant:
        raise ValueError(f"cannot scale constant predictors: {sorted(map(str, constant))}")
    return (numeric - means) / sds, means, sds


def spatial_sign(frame: pd.DataFrame) -> pd.DataFrame:
    """Project each row onto the unit sphere; expects centered and scaled predictors."""

    values = frame.to_numpy(dtype=float)
    norms = np.sqrt(np.sum(values**2, axis=1, keepdims=True))
    safe = np.where(norms == 0.0, 1.0, norms)
    return pd.DataFrame(values / safe, index=frame.index, columns=frame.columns)


class Preprocessor:
    """Pre-processing recipe applied in a fixed order regardless of how methods are listed."""

    def __init__(
        self,
        methods: list[str],
        *,
        pca_threshold: float = 0.95,
        pca_components: int | None = None,
        corr_cutoff: float = 0.9,
        knn_k: int = 5,
        freq_cut: float = DEFAULT_FREQ_CUT,
        unique_cut: float = DEFAULT_UNIQUE_CUT,
        fudge: float = 0.2,
    ) -> None:
        unknown = sorted(set(methods).difference(METHOD_ORDER))
        if unknown:
            raise ValueError(f"unknown pre-processing methods: {unknown}; expected any of {list(METHOD_ORDER)}")
        requested = set(methods)
        if {"knnImpute", "medianImpute"}.issubset(requested):
            raise ValueError("choose one of knnImpute or medianImpute")
        if requested.intersection({"pca", "spatialSign"}):
            requested.update({"center", "scale"})

        self.methods = [method for method in METHOD_ORDER if method in requested]
        self.pca_threshold = pca_threshold
        self.pca_components = pca_components
        self.corr_cutoff = corr_cutoff
        self.knn_k = knn_k
        self.freq_cut = freq_cut
        self.unique_cut = unique_cut
        self.fudge = fudge

        self._fitted = False
        self.input_columns: list[str] = []
        self.removed_nzv: list[str] = []
        self.removed_corr: list[str] = []
        self.medians: pd.Series | None = None
        self.imputer: KNNImputer | None = None
        self.lambdas: dict[str, float] = {}
        self.means: pd.Series | None = None
        self.sds: pd.Series | None = None
        self.pca: PCA | None = None

    def _check_numeric(self, frame: pd.DataFrame) -> None:
        non_numeric = [str(c) for c in frame.columns if not pd.api.types.is_numeric_dtype(frame[c])]
        if non_numeric:
            raise ValueError(f"pre-processing expects numeric predictors; found {non_numeric}")

    def fit(self, frame: pd.DataFrame) -> Preprocessor:
        self._check_numeric(frame)
        self.input_columns = [str(column) for column in frame.columns]
        work = frame.copy()
        work.columns = self.input_columns

        if "nzv" in self.methods:
            self.removed_nzv = nzv_columns(work, freq_cut=self.freq_cut, unique_cut=self.unique_cut)
            work = work.drop(columns=self.removed_nzv)
        if "corr" in self.methods:
            self.removed_corr = find_correlation(work, cutoff=self.corr_cutoff)
            work = work.drop(columns=self.removed_corr)
        if "medianImpute" in self.methods:
            self.medians = work.median()
            work = work.fillna(self.medians)
        if "knnImpute" in self.methods:
            empty = empty_columns(work)
            if empty:
                raise ValueError(f"cannot impute predictors with no observed values: {empty}; drop them first")
            self.imputer = KNNImputer(n_neighbors=self.knn_k).fit(work)
            work = pd.DataFrame(self.imputer.transform(work), index=work.index, columns=work.columns)
        if "BoxCox" in self.methods:
            self.lambdas = {}
            for column in work.columns:
                series = work[column].dropna()
                if series.empty or (series <= 0).any() or series.nunique() < 2:
                    continue
                lam = estimate_boxcox_lambda(series, fudge=self.fudge)
                if lam != 1.0:
                    self.lambdas[column] = lam
            for column, lam in self.lambdas.items():
                work[column] = boxcox_transform(work[column], lam)
        if "center" in self.methods:
            self.means = work.mean()
            work = work - self.means
        if "scale" in self.methods:
            self.sds = work.std(ddof=1)
            constant = self.sds[(self.sds == 0) | self.sds.isna()].index.tolist()
            if constant:
                raise ValueError(f"cannot scale constant predictors: {sorted(constant)}; add 'nzv' to the recipe")
            work = work / self.sds
        if "pca" in self.methods:
            if work.isna().any().any():
                raise ValueError("PCA input contains missing values; add an imputation method")
            full = PCA().fit(work.to_numpy(dtype=float))
            cumulative = np.cumsum(full.explained_variance_ratio_)
            keep = self.pca_components or components_for_threshold(cumulative, self.pca_threshold)
            self.pca = PCA(n_components=keep).fit(work.to_numpy(dtype=float))

        self._fitted = True
        LOGGER.info("fitted pre-processing recipe methods=%s", ",".join(self.methods))
        return self

    def transform(self, frame: pd.DataFrame) -> pd.DataFrame:
        """Replay the fitted steps on new data.

        Cells that are non-positive in a Box-Cox column come back as NaN, as do any
        missing cells no imputation step filled.
        """

        if not self._fitted:
            raise RuntimeError("Preprocessor must be fit before transform")
        self._check_numeric(frame)
        work = frame.copy()
        work.columns = [str(column) for column in work.columns]
        missing = sorted(set(self.input_columns).difference(work.columns))
        if missing:
            raise ValueError(f"new data is missing predictors seen during fit: {missing}")
        work = work[self.input_columns]

        work = work.drop(columns=self.removed_nzv + self.removed_corr)
        if self.medians is not None:
            work = work.fillna(self.medians)
        if self.imputer is not None:
            work = pd.DataFrame(self.imputer.transform(work), index=work.index, columns=work.columns)
        for column, lam in self.lambdas.items():
            values = work[column].astype(float)
            invalid = values <= 0
            if invalid.any():
                # no Box-Cox value exists for non-positive input
                LOGGER.warning("Box-Cox column %s has %d non-positive values; set to NaN", column, int(invalid.sum()))
                values = values.mask(invalid)
            work[column] = boxcox_transform(values, lam)
        if self.means is not None:
            work = work - self.means
        if self.sds is not None:
            work = work / self.sds
        if self.pca is not None:
            if work.isna().any().any():
                raise ValueError("PCA input contains missing values; impute or filter the new rows first")
            scores = self.pca.transform(work.to_numpy(dtype=float))
            work = pd.DataFrame(
                scores,
                index=work.index,
                columns=[f"PC{index + 1}" for index in range(scores.shape[1])],
            )
        if "spatialSign" in self.methods:
            work = spatial_sign(work)
        return work

    def fit_transform(self, frame: pd.DataFrame) -> pd.DataFrame:
        return self.fit(frame).transform(frame)

    def summary(self) -> dict[str, Any]:
        if not self._fitted:
            raise RuntimeError("Preprocessor must be fit before summary")
        return {
            "methods": list(self.methods),
            "input_predictors": len(self.input_columns),
            "removed_nzv": list(self.removed_nzv),
            "removed_corr": list(self.removed_corr),
            "boxcox_lambdas": {column: round(lam, 4) for column, lam in self.lambdas.items()},
            "pca_components": int(self.pca.n_components_) if self.pca is not None else None,
        }
