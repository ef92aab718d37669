"""
Tests for ts_forecaster.models.baselines.

What we test
------------
1. NullModel predicts the training mean.
2. SMA averages the last q values, and fewer near the start.
3. WMA applies linear weights; falls back to a plain mean near the start.
4. SES: alpha = 1 tracks the last value; optimization stays in [0, 1].
5. TrendModel fits the line over the full-series time index and continues
   it over every horizon.
6. Every baseline raises NotTrainedError before train().
"""

from __future__ import annotations

import numpy as np
import pytest

from ts_forecaster.engine.recursive import RecursiveForecaster
from ts_forecaster.engine.series import BackcastSeries
from ts_forecaster.exceptions import NotTrainedError
from ts_forecaster.models.baselines import (
    NullModel,
    RandomWalk,
    SimpleExpSmoothing,
    SimpleMovingAverage,
    TrendModel,
    WeightedMovingAverage,
)

Y = np.array([2.0, 4.0, 6.0, 8.0, 10.0])


# ── NullModel ─────────────────────────────────────────────────────────────────

def test_null_predicts_mean() -> None:
    model = NullModel()
    model.train(Y)
    assert model.predict(3, Y) == pytest.approx(6.0)
    assert model.parameter_vector().tolist() == [6.0]


# ── SimpleMovingAverage ───────────────────────────────────────────────────────

def test_sma_last_q_values() -> None:
    model = SimpleMovingAverage(3)
    model.train(Y)
    assert model.predict(4, Y) == pytest.approx(8.0)


def test_sma_partial_window_at_start() -> None:
    model = SimpleMovingAverage(3)
    model.train(Y)
    assert model.predict(1, Y) == pytest.approx(3.0)
    assert model.predict(0, Y) == pytest.approx(2.0)


def test_sma_uses_backcast_slot() -> None:
    model = SimpleMovingAverage(2)
    model.train(Y)
    assert model.predict(-1, BackcastSeries(Y, 1.0)) == pytest.approx(1.0)
    assert model.predict(0, BackcastSeries(Y, 1.0)) == pytest.approx(1.5)


def test_sma_rejects_bad_q() -> None:
    with pytest.raises(ValueError):
        SimpleMovingAverage(0)


# ── WeightedMovingAverage ─────────────────────────────────────────────────────

def test_wma_linear_weights() -> None:
    model = WeightedMovingAverage(2, u=1.0)
    model.train(Y)
    # weights 1/3, 2/3 on (8, 10)
    assert model.predict(4, Y) == pytest.approx(8.0 / 3.0 + 20.0 / 3.0)


def test_wma_flat_weights_equal_sma() -> None:
    wma = WeightedMovingAverage(3, u=0.0)
    sma = SimpleMovingAverage(3)
    wma.train(Y)
    sma.train(Y)
    assert wma.predict(4, Y) == pytest.approx(sma.predict(4, Y))


def test_wma_short_history_falls_back_to_mean() -> None:
    model = WeightedMovingAverage(3)
    model.train(Y)
    assert model.predict(1, Y) == pytest.approx(3.0)


# ── SimpleExpSmoothing ────────────────────────────────────────────────────────

def test_ses_alpha_one_is_random_walk() -> None:
    model = SimpleExpSmoothing(alpha=1.0, optimize=False)
    model.train(Y)
    assert model.predict(3, Y) == pytest.approx(8.0)


def test_ses_alpha_zero_keeps_first_level() -> None:
    model = SimpleExpSmoothing(alpha=0.0, optimize=False)
    model.train(Y)
    assert model.predict(4, Y) == pytest.approx(2.0)


def test_ses_optimized_alpha_in_unit_interval(ar_series: np.ndarray) -> None:
    model = SimpleExpSmoothing(alpha=0.5, optimize=True)
    model.train(ar_series)
    assert 0.0 <= model.alpha <= 1.0
    assert model.parameter_vector().tolist() == [model.alpha]


def test_ses_trending_series_prefers_high_alpha() -> None:
    model = SimpleExpSmoothing(alpha=0.2, optimize=True)
    model.train(np.arange(1.0, 40.0))
    assert model.alpha > 0.9


# ── TrendModel ───────────────────────────────────────────────────────────────

def test_trend_fits_ramp(ramp: np.ndarray) -> None:
    model = TrendModel()
    model.train(ramp)
    assert model.parameter_vector().tolist() == pytest.approx([1.0, 1.0])
    assert model.predict(28, ramp) == pytest.approx(30.0)


def test_trend_window_offset_keeps_global_time(ramp: np.ndarray) -> None:
    model = TrendModel()
    model.train(ramp[10:], start=10)
    assert model.predict(28, ramp) == pytest.approx(30.0)


def test_trend_multi_step_continues_line(ramp: np.ndarray) -> None:
    forecaster = RecursiveForecaster(TrendModel())
    forecaster.train(ramp)
    matrix = forecaster.forecast_all(ramp, 3)
    m = ramp.size
    assert [matrix.values[m - 1 + k, k] for k in (1, 2, 3)] == pytest.approx([30.0, 31.0, 32.0])


# ── Preconditions ─────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "model",
    [
        NullModel(),
        RandomWalk(),
        SimpleMovingAverage(2),
        WeightedMovingAverage(2),
        SimpleExpSmoothing(),
        TrendModel(),
    ],
)
def test_predict_before_train_raises(model) -> None:
    with pytest.raises(NotTrainedError):
        model.predict(0, Y)


def test_train_rejects_nan() -> None:
    with pytest.raises(ValueError):
        NullModel().train([1.0, float("nan")])
