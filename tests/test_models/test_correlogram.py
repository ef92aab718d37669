"""
Tests for ts_forecaster.models.correlogram.

What we test
------------
1. ACF at lag 0 is 1 and the lag count is capped at n/2 - 1.
2. An AR(1) sample has a significant first PACF value and a suggested
   order of at least 1.
3. Constant series raise NumericalDegeneracyError; bad lags raise ValueError.
4. table() rows carry lag, acf and pacf.
"""

from __future__ import annotations

import numpy as np
import pytest

from ts_forecaster.exceptions import NumericalDegeneracyError
from ts_forecaster.models.correlogram import Correlogram


def test_acf_lag_zero_is_one(ar_series: np.ndarray) -> None:
    values = Correlogram().acf(ar_series, 5)
    assert values.size == 6
    assert values[0] == pytest.approx(1.0)


def test_lag_capped_by_length() -> None:
    values = Correlogram().acf(np.arange(10.0), 20)
    assert values.size == 5  # lags 0..4


def test_pacf_first_lag_significant(ar_series: np.ndarray) -> None:
    corr = Correlogram()
    values = corr.pacf(ar_series, 5)
    assert abs(values[1]) > corr.bound(ar_series.size)
    assert corr.suggest_order(ar_series, 5) >= 1


def test_bound() -> None:
    assert Correlogram().bound(100) == pytest.approx(0.196)


def test_constant_series() -> None:
    with pytest.raises(NumericalDegeneracyError):
        Correlogram().acf(np.full(20, 2.0), 3)


def test_bad_lag_and_short_series() -> None:
    with pytest.raises(ValueError):
        Correlogram().acf(np.arange(10.0), 0)
    with pytest.raises(ValueError):
        Correlogram().acf([1.0, 2.0, 4.0], 2)


def test_table_rows(ar_series: np.ndarray) -> None:
    rows = Correlogram().table(ar_series, 4)
    assert [r["lag"] for r in rows] == [1, 2, 3, 4]
    assert set(rows[0]) == {"lag", "acf", "pacf"}
