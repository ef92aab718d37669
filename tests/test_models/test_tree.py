"""
Tests for ts_forecaster.models.tree.

What we test
------------
1. Fewer than 11 observations raise ValueError.
2. Predictions are finite and stay inside the training target range.
3. save() / load() round-trip reproduces predictions.
4. The random-forest variant averages bagged trees: bounded, seeded and
   restored by load() with its own hyperparameters.
5. save() before train() raises NotTrainedError; load() of a missing file
   raises FileNotFoundError.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from ts_forecaster.exceptions import NotTrainedError
from ts_forecaster.models.tree import LagForestModel, LagTreeModel


def test_tree_needs_enough_rows() -> None:
    with pytest.raises(ValueError):
        LagTreeModel(lags=2).train(np.arange(10.0))


def test_tree_predictions_bounded(ar_series: np.ndarray) -> None:
    model = LagTreeModel(lags=3, n_estimators=20)
    model.train(ar_series)
    pred = model.predict(ar_series.size - 1, ar_series)
    assert np.isfinite(pred)
    assert ar_series[1:].min() <= pred <= ar_series[1:].max()
    assert model.name == "tree(3)"
    assert model.parameter_vector().size == 3


def test_tree_save_load_roundtrip(ar_series: np.ndarray, tmp_path: Path) -> None:
    model = LagTreeModel(lags=2, n_estimators=10)
    model.train(ar_series)
    path = tmp_path / "models" / "tree.pkl"
    model.save(path)

    loaded = LagTreeModel.load(path)
    assert loaded.lags == 2
    assert loaded.is_trained
    t = ar_series.size - 1
    assert loaded.predict(t, ar_series) == pytest.approx(model.predict(t, ar_series))


def test_tree_save_untrained(tmp_path: Path) -> None:
    with pytest.raises(NotTrainedError):
        LagTreeModel().save(tmp_path / "tree.pkl")


def test_tree_load_missing(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        LagTreeModel.load(tmp_path / "nope.pkl")


# ── LagForestModel ────────────────────────────────────────────────────────────

def test_forest_predictions_bounded_and_seeded(ar_series: np.ndarray) -> None:
    first = LagForestModel(lags=3, n_estimators=20, seed=5)
    second = LagForestModel(lags=3, n_estimators=20, seed=5)
    first.train(ar_series)
    second.train(ar_series)
    t = ar_series.size - 1
    pred = first.predict(t, ar_series)
    assert ar_series[1:].min() <= pred <= ar_series[1:].max()
    assert pred == pytest.approx(second.predict(t, ar_series))
    assert first.name == "forest(3)"


def test_forest_save_load_roundtrip(ar_series: np.ndarray, tmp_path: Path) -> None:
    model = LagForestModel(lags=2, n_estimators=10, bagging_fraction=0.6)
    model.train(ar_series)
    path = tmp_path / "forest.pkl"
    model.save(path)

    loaded = LagForestModel.load(path)
    assert isinstance(loaded, LagForestModel)
    assert loaded._hyperparams["bagging_fraction"] == pytest.approx(0.6)
    t = ar_series.size - 1
    assert loaded.predict(t, ar_series) == pytest.approx(model.predict(t, ar_series))


@pytest.mark.parametrize("fraction", [0.0, 1.0, 1.5])
def test_forest_rejects_bad_bagging_fraction(fraction: float) -> None:
    with pytest.raises(ValueError):
        LagForestModel(bagging_fraction=fraction)
