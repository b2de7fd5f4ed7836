"""
Linear regression helpers: ordinary least squares inference, collinearity diagnostics and PLS.
OLS estimates are unbiased but become unstable when predictors are highly correlated, which
is what the variance inflation factors measure and what PLS and penalized models address.
"""

from __future__ import annotations

from typing import Any

import numpy as np
import pandas as pd
import statsmodels.api as sm
from statsmodels.stats.outliers_influence import variance_inflation_factor

from apm.evaluation.metrics import rmse
from apm.models.registry import FlatPLSRegression
from apm.resampling.resample import ResampleFold, resample_estimator


def ols_summary(X: pd.DataFrame, y: Any) -> dict[str, Any]:
    """Fit OLS with an intercept and return the coefficient table and fit statistics."""

    if X.shape[0] <= X.shape[1] + 1:
        raise ValueError("OLS needs more rows than predictors plus intercept")
    design = sm.add_constant(X.astype(float), has_constant="add")
    fitted = sm.OLS(np.asarray(y, dtype=float), design).fit()
    coefficients = pd.DataFrame(
        {
            "term": [str(name) for name in design.columns],
            "estimate": np.asarray(fitted.params, dtype=float),
            "std_error": np.asarray(fitted.bse, dtype=float),
            "t_value": np.asarray(fitted.tvalues, dtype=float),
            "p_value": np.asarray(fitted.pvalues, dtype=float),
        }
    )
    return {
        "coefficients": coefficients,
        "r_squared": float(fitted.rsquared),
        "adj_r_squared": float(fitted.rsquared_adj),
        "residual_std_error": float(np.sqrt(fitted.scale)),
        "df_residual": int(fitted.df_resid),
        "f_statistic": float(fitted.fvalue) if fitted.fvalue is not None else float("nan"),
    }


def variance_inflation(frame: pd.DataFrame) -> pd.DataFrame:
    numeric = frame.select_dtypes(include="number").astype(float)
    if numeric.shape[1] < 2:
        raise ValueError("VIF needs at least two numeric predictors")
    design = sm.add_constant(numeric, has_constant="add").to_numpy()
    rows = [
        {"predictor": str(column), "vif": float(variance_inflation_factor(design, index + 1))}
        for index, column in enumerate(numeric.columns)
    ]
    return pd.DataFrame(rows).sort_values("vif", ascending=False).reset_index(drop=True)


def pls_component_profile(
    X: pd.DataFrame,
    y: Any,
    max_components: int,
    folds: list[ResampleFold],
) -> pd.DataFrame:
    """Resampled RMSE for 1..max_components PLS components."""

    limit = min(int(max_components), X.shape[1])
    if limit < 1:
        raise ValueError("max_components must be >= 1")
    rows: list[dict[str, Any]] = []
    for components in range(1, limit + 1):
        scores = resample_estimator(
            lambda: FlatPLSRegression(n_components=components, scale=True),
            X,
            y,
            folds,
            rmse,
        )
        rows.append(
            {
                "components": components,
                "rmse": float(scores["score"].mean()),
                "rmse_sd": float(scores["score"].std(ddof=1)) if len(scores) > 1 else 0.0,
            }
        )
    return pd.DataFrame(rows)
