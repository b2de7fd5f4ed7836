"""
Tests for data splitting.
It asserts expected behavior and guards against regressions in the corresponding component.
These tests are executed by `pytest` locally and in CI and should remain deterministic.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from apm.resampling.splits import is_categorical, max_dissimilarity_sample, outcome_strata, stratified_split


def test_is_categorical() -> None:
    assert is_categorical(["a", "b"])
    assert is_categorical(pd.Series(["a", "b"], dtype="category"))
    assert is_categorical([True, False])
    assert not is_categorical([1.0, 2.5])


def test_outcome_strata_uses_quantile_groups_for_numeric_outcomes() -> None:
    strata = outcome_strata(np.arange(100, dtype=float), groups=5)
    assert sorted(np.unique(strata).tolist()) == [0, 1, 2, 3, 4]
    assert np.bincount(strata).tolist() == [20, 20, 20, 20, 20]


def test_stratified_split_numeric_outcome_is_a_partition() -> None:
    y = np.random.default_rng(0).normal(size=101)
    train, test = stratified_split(y, train_fraction=0.8, random_state=1)
    assert np.intersect1d(train, test).size == 0
    assert np.union1d(train, test).tolist() == list(range(101))
    assert 80 <= train.size <= 85
    assert np.all(np.diff(train) > 0)


def test_stratified_split_keeps_class_proportions() -> None:
    y = pd.Series(["a"] * 80 + ["b"] * 20)
    train, test = stratified_split(y, train_fraction=0.75, random_state=3)
    counts = y.iloc[train].value_counts()
    assert counts["a"] == 60
    assert counts["b"] == 15
    assert test.size == 25


def test_stratified_split_is_reproducible_and_validates_fraction() -> None:
    y = np.arange(50, dtype=float)
    first = stratified_split(y, random_state=9)
    second = stratified_split(y, random_state=9)
    np.testing.assert_array_equal(first[0], second[0])
    with pytest.raises(ValueError, match="train_fraction"):
        stratified_split(y, train_fraction=1.0)


def test_max_dissimilarity_sample_spreads_points() -> None:
    frame = pd.DataFrame({"x": np.arange(11, dtype=float)})
    chosen = max_dissimilarity_sample(frame, 3, start=[0])
    assert chosen == [0, 10, 5]


def test_max_dissimilarity_sample_validates_n() -> None:
    frame = pd.DataFrame({"x": [0.0, 1.0, 2.0]})
    assert len(max_dissimilarity_sample(frame, 3, random_state=0)) == 3
    with pytest.raises(ValueError):
        max_dissimilarity_sample(frame, 4)
    with pytest.raises(ValueError):
        max_dissimilarity_sample(frame, 0)
