"""
Tests for the near-zero variance and correlation filters.
It asserts expected behavior and guards against regressions in the corresponding component.
These tests are executed by `pytest` locally and in CI and should remain deterministic.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from apm.preprocessing.filters import find_correlation, near_zero_variance, nzv_columns


def _nzv_frame() -> pd.DataFrame:
    rng = np.random.default_rng(1)
    rare = np.zeros(100)
    rare[0] = 1.0
    return pd.DataFrame(
        {
            "constant": np.ones(100),
            "rare": rare,
            "continuous": rng.normal(size=100),
            "balanced": np.tile([0.0, 1.0], 50),
        }
    )


def test_near_zero_variance_metrics() -> None:
    table = near_zero_variance(_nzv_frame()).set_index("predictor")

    assert table.loc["constant", "freq_ratio"] == 0.0
    assert table.loc["constant", "zero_var"]
    assert table.loc["rare", "freq_ratio"] == pytest.approx(99.0)
    assert table.loc["rare", "percent_unique"] == pytest.approx(2.0)
    assert table.loc["balanced", "freq_ratio"] == pytest.approx(1.0)


def test_nzv_columns_flags_constant_and_rare_predictors() -> None:
    assert nzv_columns(_nzv_frame()) == ["constant", "rare"]


def test_near_zero_variance_rejects_bad_freq_cut() -> None:
    with pytest.raises(ValueError, match="freq_cut"):
        near_zero_variance(_nzv_frame(), freq_cut=1.0)


def test_find_correlation_removes_one_of_a_redundant_pair() -> None:
    rng = np.random.default_rng(2)
    a = rng.normal(size=200)
    frame = pd.DataFrame(
        {
            "a": a,
            "b": a + rng.normal(scale=0.01, size=200),
            "c": rng.normal(size=200),
        }
    )
    dropped = find_correlation(frame, cutoff=0.9)
    assert len(dropped) == 1
    assert dropped[0] in {"a", "b"}


def test_find_correlation_leaves_no_pair_above_cutoff() -> None:
    rng = np.random.default_rng(3)
    base = rng.normal(size=(300, 1))
    frame = pd.DataFrame(
        base + rng.normal(scale=[0.1, 0.3, 0.5, 2.0, 3.0], size=(300, 5)),
        columns=["p1", "p2", "p3", "p4", "p5"],
    )
    cutoff = 0.75
    dropped = find_correlation(frame, cutoff=cutoff)
    kept = frame.drop(columns=dropped).corr().abs().to_numpy()
    np.fill_diagonal(kept, 0.0)
    assert dropped
    assert kept.max() <= cutoff


def test_find_correlation_rejects_bad_cutoff() -> None:
    with pytest.raises(ValueError, match="cutoff"):
        find_correlation(pd.DataFrame({"a": [1.0, 2.0], "b": [2.0, 1.0]}), cutoff=0.0)
