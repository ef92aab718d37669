"""
Tests for ts_forecaster.engine.series.

What we test
------------
1. ClampedSeries: negative indices read y[0]; reading past the end raises.
2. BackcastSeries: index -1 (and below) reads the backcast value.
3. Shocks: zero for s < 0, for unfilled slots and beyond the origin.
4. DiagonalSeries: actuals up to the origin, earlier forecasts after it.
5. DifferencedSeries: first and seasonal differences of a base view.
6. weighted_backcast / wma_weights: known values and short-series fallback.
"""

from __future__ import annotations

import numpy as np
import pytest

from ts_forecaster.engine.matrix import ForecastMatrix
from ts_forecaster.engine.series import (
    BackcastSeries,
    ClampedSeries,
    DiagonalSeries,
    DifferencedSeries,
    as_series,
    difference_polynomial,
    to_array,
    weighted_backcast,
    wma_weights,
)


# ── to_array ──────────────────────────────────────────────────────────────────

def test_to_array_rejects_empty() -> None:
    with pytest.raises(ValueError):
        to_array([])


def test_to_array_rejects_2d() -> None:
    with pytest.raises(ValueError):
        to_array([[1.0, 2.0]])


# ── ClampedSeries ─────────────────────────────────────────────────────────────

def test_clamped_negative_index_reads_first_value() -> None:
    """Any index below 0 reads y[0]."""
    s = ClampedSeries([5.0, 6.0, 7.0])
    assert s[-1] == 5.0
    assert s[-10] == 5.0
    assert s[2] == 7.0


def test_clamped_read_past_end_raises() -> None:
    s = ClampedSeries([5.0, 6.0, 7.0])
    with pytest.raises(IndexError):
        s[3]


def test_clamped_bounds() -> None:
    s = ClampedSeries([1.0, 2.0, 3.0, 4.0])
    assert s.start == 0
    assert s.origin == 3
    assert s.end == 3
    assert len(s) == 4


# ── BackcastSeries ────────────────────────────────────────────────────────────

def test_backcast_slot_reads_backcast() -> None:
    s = BackcastSeries([1.0, 2.0], backcast=0.5)
    assert s.start == -1
    assert s[-1] == 0.5
    assert s[-3] == 0.5
    assert s[0] == 1.0


# ── Shocks ────────────────────────────────────────────────────────────────────

def test_shock_reads_residual_layout() -> None:
    """Slot s + 1 of the residual vector holds the shock of y[s]."""
    e = np.array([0.0, 0.1, 0.2, 0.3])
    s = ClampedSeries([1.0, 2.0, 3.0], e)
    assert s.shock(0) == pytest.approx(0.1)
    assert s.shock(2) == pytest.approx(0.3)


def test_shock_zero_for_negative_and_missing() -> None:
    s = ClampedSeries([1.0, 2.0, 3.0], np.array([9.0, 0.1]))
    assert s.shock(-1) == 0.0
    assert s.shock(1) == 0.0  # slot 2 does not exist
    assert ClampedSeries([1.0]).shock(0) == 0.0


def test_shock_zero_beyond_origin() -> None:
    """Future shocks are unknown: zero past the forecast origin."""
    y = [1.0, 2.0, 3.0, 4.0]
    m = ForecastMatrix(y, 2)
    e = np.array([0.0, 0.5, 0.5, 0.5, 0.5])
    view = DiagonalSeries(m, row=3, horizon=2, residuals=e)
    assert view.origin == 1
    assert view.shock(1) == pytest.approx(0.5)
    assert view.shock(2) == 0.0


# ── DiagonalSeries ────────────────────────────────────────────────────────────

def test_diagonal_reads_actuals_then_forecasts() -> None:
    y = [10.0, 20.0, 30.0, 40.0]
    m = ForecastMatrix(y, 3)
    m.values[2, 1] = 99.0   # one-step forecast of y[2], origin 1
    m.values[3, 2] = 77.0   # two-step forecast of y[3], origin 1
    view = DiagonalSeries(m, row=4, horizon=3)
    assert view.origin == 1
    assert view[0] == 10.0
    assert view[1] == 20.0
    assert view[2] == 99.0
    assert view[3] == 77.0


def test_diagonal_cannot_read_its_own_row() -> None:
    m = ForecastMatrix([1.0, 2.0, 3.0], 2)
    view = DiagonalSeries(m, row=3, horizon=2)
    with pytest.raises(IndexError):
        view[3]


# ── DifferencedSeries ─────────────────────────────────────────────────────────

def test_difference_polynomial_regular_and_seasonal() -> None:
    assert difference_polynomial(1).tolist() == [1.0, -1.0]
    assert difference_polynomial(2).tolist() == [1.0, -2.0, 1.0]
    assert difference_polynomial(0, 1, 3).tolist() == [1.0, 0.0, 0.0, -1.0]


def test_differenced_first_difference() -> None:
    base = ClampedSeries([1.0, 4.0, 9.0, 16.0])
    d = DifferencedSeries(base, d=1)
    assert d.lag == 1
    assert d.end == 2
    assert [d[j] for j in range(3)] == [3.0, 5.0, 7.0]


def test_differenced_seasonal() -> None:
    base = ClampedSeries([1.0, 2.0, 3.0, 11.0, 12.0, 13.0])
    d = DifferencedSeries(base, d=0, seasonal_order=1, period=3)
    assert [d[j] for j in range(3)] == [10.0, 10.0, 10.0]


def test_as_series_wraps_raw_arrays() -> None:
    view = as_series([1.0, 2.0])
    assert isinstance(view, ClampedSeries)
    assert as_series(view) is view


# ── Backcast and weights ──────────────────────────────────────────────────────

def test_wma_weights_linear_and_flat() -> None:
    assert wma_weights(2, 1.0) == pytest.approx([1.0 / 3.0, 2.0 / 3.0])
    assert wma_weights(4, 0.0) == pytest.approx([0.25] * 4)
    assert wma_weights(3, 0.5).sum() == pytest.approx(1.0)


def test_weighted_backcast_known_value() -> None:
    """q = 2, u = 1: backcast = y1 / 3 + 2 y0 / 3."""
    assert weighted_backcast([3.0, 6.0, 100.0]) == pytest.approx(6.0 / 3.0 + 2.0 * 3.0 / 3.0)


def test_weighted_backcast_short_series_falls_back() -> None:
    assert weighted_backcast([4.0, 5.0]) == 4.0
