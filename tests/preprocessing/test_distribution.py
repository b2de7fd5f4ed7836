"""
Tests for skewness diagnostics.
It asserts expected behavior and guards against regressions in the corresponding component.
These tests are executed by `pytest` locally and in CI and should remain deterministic.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from apm.preprocessing.distribution import max_min_ratio, skewness, skewness_table


def test_skewness_matches_textbook_formula() -> None:
    values = [1.0, 2.0, 3.0, 10.0]
    expected = 180.0 / (3 * (50.0 / 3) ** 1.5)
    assert skewness(values) == pytest.approx(expected)


def test_skewness_of_symmetric_data_is_zero() -> None:
    assert skewness([1, 2, 3, 4, 5]) == pytest.approx(0.0)
    assert skewness([1.0, 1.0, 1.0, 2.0, 10.0]) > 0


def test_skewness_ignores_missing_values() -> None:
    assert skewness([1.0, np.nan, 2.0, 3.0, 10.0]) == pytest.approx(skewness([1.0, 2.0, 3.0, 10.0]))


def test_skewness_rejects_short_or_constant_input() -> None:
    with pytest.raises(ValueError, match="at least 3"):
        skewness([1.0, 2.0])
    with pytest.raises(ValueError, match="constant"):
        skewness([4.0, 4.0, 4.0])


def test_max_min_ratio() -> None:
    assert max_min_ratio([2.0, 10.0, 40.0]) == pytest.approx(20.0)
    with pytest.raises(ValueError, match="strictly positive"):
        max_min_ratio([0.0, 1.0])


def test_skewness_table_flags_and_orders_predictors() -> None:
    rng = np.random.default_rng(0)
    frame = pd.DataFrame(
        {
            "symmetric": rng.normal(0.0, 1.0, 500),
            "skewed": rng.lognormal(0.0, 1.0, 500),
            "label": ["a"] * 500,
        }
    )
    table = skewness_table(frame, threshold=1.0)
    assert table["predictor"].tolist() == ["skewed", "symmetric"]
    assert table.loc[0, "is_skewed"]
    assert not table.loc[1, "is_skewed"]
    assert table.loc[0, "max_min_ratio"] > 20
    assert np.isnan(table.loc[1, "max_min_ratio"])
