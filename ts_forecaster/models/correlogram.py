"""
Sample autocorrelation (ACF) and partial autocorrelation (PACF).

``Correlogram`` is the ``AutocorrelationAware`` capability: models compose
one (AR uses it to pick its order when none is given) and the CLI uses it
to print a correlogram table.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np
from statsmodels.tsa.stattools import acf, pacf

from ts_forecaster.engine.series import to_array
from ts_forecaster.exceptions import NumericalDegeneracyError


class Correlogram:
    """ACF / PACF via statsmodels, with a simple significance cutoff."""

    def _usable_lag(self, arr: np.ndarray, max_lag: int) -> int:
        if max_lag < 1:
            raise ValueError(f"max_lag must be >= 1, got {max_lag}.")
        if float(np.var(arr)) == 0.0:
            raise NumericalDegeneracyError("Autocorrelation is undefined for a constant series.")
        usable = min(max_lag, arr.size // 2 - 1)
        if usable < 1:
            raise ValueError(f"Series of {arr.size} points is too short for a correlogram.")
        return usable

    def acf(self, y: Sequence[float] | np.ndarray, max_lag: int) -> np.ndarray:
        """Autocorrelations for lags 0..max_lag (capped at n/2 - 1)."""
        arr = to_array(y)
        return np.asarray(acf(arr, nlags=self._usable_lag(arr, max_lag), fft=False))

    def pacf(self, y: Sequence[float] | np.ndarray, max_lag: int) -> np.ndarray:
        """Partial autocorrelations for lags 0..max_lag (capped at n/2 - 1)."""
        arr = to_array(y)
        return np.asarray(pacf(arr, nlags=self._usable_lag(arr, max_lag), method="yw"))

    def bound(self, n: int) -> float:
        """Approximate 95% significance bound ``1.96 / sqrt(n)``."""
        return 1.96 / math.sqrt(n)

    def suggest_order(self, y: Sequence[float] | np.ndarray, max_lag: int = 10) -> int:
        """Largest lag whose PACF is outside the significance bound (at least 1)."""
        arr = to_array(y)
        values = self.pacf(arr, max_lag)
        bound = self.bound(arr.size)
        significant = [k for k in range(1, values.size) if abs(values[k]) > bound]
        return max(significant) if significant else 1

    def table(self, y: Sequence[float] | np.ndarray, max_lag: int) -> list[dict]:
        """Rows ``{lag, acf, pacf}`` for lags 1..max_lag."""
        arr = to_array(y)
        a = self.acf(arr, max_lag)
        p = self.pacf(arr, max_lag)
        return [
            {"lag": k, "acf": float(a[k]), "pacf": float(p[k])}
            for k in range(1, min(a.size, p.size))
        ]
