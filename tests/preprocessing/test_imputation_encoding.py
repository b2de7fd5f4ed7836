from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from apm.preprocessing.encoding import bin_predictor, dummy_variables
from apm.preprocessing.imputation import empty_columns, knn_impute, median_impute, missing_summary


def test_missing_summary_sorted_by_missing_count() -> None:
    frame = pd.DataFrame({"a": [1.0, np.nan, 3.0, 4.0], "b": [np.nan, np.nan, 1.0, 2.0], "c": [1, 2, 3, 4]})
    summary = missing_summary(frame)
    assert summary["predictor"].tolist() == ["b", "a", "c"]
    assert summary["percent_missing"].tolist() == [50.0, 25.0, 0.0]


def test_median_impute_fills_numeric_columns() -> None:
    frame = pd.DataFrame({"a": [1.0, np.nan, 3.0, 10.0], "label": ["x", "y", None, "x"]})
    filled = median_impute(frame)
    assert filled.loc[1, "a"] == 3.0
    assert filled["label"].isna().sum() == 1


def test_knn_impute_uses_nearest_rows() -> None:
    frame = pd.DataFrame({"a": [1.0, 1.1, 10.0, 1.05], "b": [2.0, 2.2, 50.0, np.nan]})
    filled = knn_impute(frame, k=2)
    assert filled.loc[3, "b"] == pytest.approx(2.1)
    assert list(filled.index) == list(frame.index)


def test_knn_impute_rejects_bad_input() -> None:
    with pytest.raises(ValueError, match="k must be"):
        knn_impute(pd.DataFrame({"a": [1.0]}), k=0)
    with pytest.raises(ValueError, match="all-numeric"):
        knn_impute(pd.DataFrame({"a": [1.0, np.nan], "b": ["x", "y"]}))


def test_dummy_variables_full_rank_drops_a_level() -> None:
    frame = pd.DataFrame({"color": ["red", "green", "blue", "red"], "size": [1.0, 2.0, 3.0, 4.0]})
    full_rank = dummy_variables(frame)
    all_levels = dummy_variables(frame, full_rank=False)
    assert "size" in full_rank.columns
    assert len([c for c in full_rank.columns if c.startswith("color_")]) == 2
    assert len([c for c in all_levels.columns if c.startswith("color_")]) == 3
    with pytest.raises(ValueError, match="not in frame"):
        dummy_variables(frame, columns=["shape"])


def test_bin_predictor() -> None:
    binned = bin_predictor([0.0, 1.0, 2.0, 3.0, 4.0, 5.0], bins=3)
    assert binned.nunique() == 3
    assert not binned.isna().any()
    with pytest.raises(ValueError):
        bin_predictor([1.0, 2.0], bins=1)


def test_knn_impute_names_all_missing_predictors() -> None:
    frame = pd.DataFrame({"a": [1.0, 2.0, np.nan, 4.0], "b": [np.nan] * 4, "c": [0.5, 0.1, 0.3, 0.2]})
    with pytest.raises(ValueError, match=r"no observed values: \['b'\]"):
        knn_impute(frame, k=2)
    assert empty_columns(frame) == ["b"]
