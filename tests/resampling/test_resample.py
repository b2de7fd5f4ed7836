"""
Tests for resampling schemes.
It asserts expected behavior and guards against regressions in the corresponding component.
These tests are executed by `pytest` locally and in CI and should remain deterministic.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest
from sklearn.linear_model import LinearRegression

from apm.evaluation.metrics import rmse
from apm.resampling.resample import build_folds, resample_estimator, take_rows


def test_cv_holdouts_partition_the_rows() -> None:
    folds = build_folds(23, "cv", number=5, random_state=0)
    assert [fold.fold_id for fold in folds] == ["Fold01", "Fold02", "Fold03", "Fold04", "Fold05"]
    holdouts = np.concatenate([fold.holdout_index for fold in folds])
    assert sorted(holdouts.tolist()) == list(range(23))
    for fold in folds:
        assert np.intersect1d(fold.train_index, fold.holdout_index).size == 0
        assert fold.train_index.size + fold.holdout_index.size == 23


def test_repeatedcv_ids_and_count() -> None:
    folds = build_folds(30, "repeatedcv", number=3, repeats=2, random_state=0)
    assert len(folds) == 6
    assert folds[0].fold_id == "Fold01.Rep01"
    assert folds[-1].fold_id == "Fold03.Rep02"
    assert not np.array_equal(folds[0].holdout_index, folds[3].holdout_index)


def test_loocv_holds_out_one_row_each() -> None:
    folds = build_folds(12, "loocv")
    assert len(folds) == 12
    assert folds[0].fold_id == "Fold01"
    assert all(fold.holdout_index.size == 1 for fold in folds)


def test_lgocv_train_fraction() -> None:
    folds = build_folds(20, "lgocv", number=4, p=0.75, random_state=1)
    assert [fold.fold_id for fold in folds] == ["Resample01", "Resample02", "Resample03", "Resample04"]
    assert all(fold.train_index.size == 15 for fold in folds)
    assert all(fold.holdout_index.size == 5 for fold in folds)


def test_bootstrap_holdout_is_out_of_bag() -> None:
    folds = build_folds(40, "boot", number=5, random_state=2)
    assert len(folds) == 5
    for fold in folds:
        assert fold.train_index.size == 40
        assert np.intersect1d(fold.train_index, fold.holdout_index).size == 0
        assert np.union1d(fold.train_index, fold.holdout_index).tolist() == list(range(40))


def test_stratified_cv_for_categorical_outcome() -> None:
    y = np.array(["a"] * 20 + ["b"] * 10)
    folds = build_folds(30, "cv", number=5, y=y, random_state=0)
    for fold in folds:
        labels = y[fold.holdout_index]
        assert (labels == "a").sum() == 4
        assert (labels == "b").sum() == 2


def test_build_folds_validates_arguments() -> None:
    with pytest.raises(ValueError, match="unknown resampling method"):
        build_folds(10, "jackknife")
    with pytest.raises(ValueError, match="at least two rows"):
        build_folds(1, "cv")
    with pytest.raises(ValueError, match="number of folds"):
        build_folds(5, "cv", number=6)
    with pytest.raises(ValueError, match="n_rows"):
        build_folds(5, "cv", number=2, y=[1, 2, 3])


def test_take_rows_handles_frames_and_arrays() -> None:
    index = np.array([2, 0])
    frame = pd.DataFrame({"a": [10, 11, 12]}, index=[5, 6, 7])
    assert take_rows(frame, index)["a"].tolist() == [12, 10]
    assert take_rows([10, 11, 12], index).tolist() == [12, 10]


def test_resample_estimator_scores_every_fold() -> None:
    rng = np.random.default_rng(0)
    X = pd.DataFrame(rng.normal(size=(50, 2)), columns=["a", "b"])
    y = 1.0 + 2.0 * X["a"] - X["b"]
    folds = build_folds(50, "cv", number=5, random_state=0)
    scores = resample_estimator(LinearRegression, X, y, folds, rmse)
    assert scores["fold_id"].tolist() == [fold.fold_id for fold in folds]
    assert scores["score"].max() < 1e-8
