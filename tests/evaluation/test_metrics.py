"""
Tests for performance measures.
It asserts expected behavior and guards against regressions in the corresponding component.
These tests are executed by `pytest` locally and in CI and should remain deterministic.
"""

from __future__ import annotations

import math

import pytest

from apm.evaluation.metrics import (
    accuracy,
    classification_summary,
    confusion_frame,
    kappa,
    mae,
    r_squared,
    r_squared_traditional,
    regression_summary,
    resolve_metric,
    rmse,
)


def test_regression_measures() -> None:
    observed = [1.0, 2.0, 3.0, 4.0]
    predicted = [1.5, 2.0, 2.5, 4.0]
    assert rmse(observed, predicted) == pytest.approx(math.sqrt(0.125))
    assert mae(observed, predicted) == pytest.approx(0.25)
    summary = regression_summary(observed, predicted)
    assert set(summary) == {"rmse", "rsquared", "mae"}


def test_r_squared_is_squared_correlation() -> None:
    observed = [1.0, 2.0, 3.0, 4.0]
    shifted = [11.0, 12.0, 13.0, 14.0]
    assert r_squared(observed, shifted) == pytest.approx(1.0)
    assert r_squared_traditional(observed, shifted) < 0


def test_r_squared_undefined_for_constant_values() -> None:
    assert math.isnan(r_squared([1.0, 2.0, 3.0], [2.0, 2.0, 2.0]))
    assert math.isnan(r_squared([1.0], [1.0]))
    assert math.isnan(r_squared_traditional([2.0, 2.0], [1.0, 3.0]))


def test_classification_measures() -> None:
    observed = ["a", "a", "b", "b"]
    predicted = ["a", "b", "b", "b"]
    assert accuracy(observed, predicted) == pytest.approx(0.75)
    assert kappa(observed, observed) == pytest.approx(1.0)
    assert kappa(observed, predicted) == pytest.approx(0.5)
    assert math.isnan(kappa(["a", "a"], ["a", "a"]))
    assert classification_summary(observed, predicted)["accuracy"] == pytest.approx(0.75)


def test_confusion_frame_rows_are_predictions() -> None:
    table = confusion_frame(["a", "a", "b"], ["a", "b", "b"])
    assert table.index.name == "predicted"
    assert table.columns.name == "observed"
    assert table.loc["b", "a"] == 1
    assert int(table.to_numpy().sum()) == 3


def test_resolve_metric() -> None:
    fn, maximize = resolve_metric("rmse")
    assert fn is rmse
    assert maximize is False
    assert resolve_metric("kappa")[1] is True
    with pytest.raises(ValueError, match="unknown metric"):
        resolve_metric("auc")
