"""
Series views: the objects a model's ``predict(t, series)`` reads from.

Index policy
------------
Models look back with ``series[t - j]`` and ``series.shock(t - j)`` and
never worry about where the data comes from or what happens at the start
of history.  The view decides:

  ClampedSeries     Raw observations.  Any index below 0 reads ``y[0]``:
                    the start of history repeats backward.

  BackcastSeries    Observations plus one synthetic value at index -1 so
                    that predicting ``y[0]`` has a defined look-back.
                    Indices below -1 also read the backcast.

  DiagonalSeries    One cell of the forecast matrix seen from its forecast
                    origin.  Index ``s`` reads ``M[max(s, 0), max(h - (r - s), 0)]``:
                    actual values up to the origin ``r - h``, and the
                    already-forecasted diagonal (columns 1..h-1) after it.

  DifferencedSeries Regular and/or seasonal difference of another view,
                    for ARIMA-family models that forecast the differenced
                    series.

Every view carries two bounds:

  origin  last index holding real (observed) data
  end     last index that may be read at all (``end > origin`` only for
          DiagonalSeries, where forecasts stand in for the future)

Reading past ``end`` raises ``IndexError``: that would be lookahead.

Shocks
------
``shock(s)`` returns the one-step residual recorded for time ``s``.  It is
0.0 for the backcast slot, for slots not yet filled, and for any ``s``
beyond ``origin``; future shocks are unknown and their expectation is zero.

Residual vectors handed to views use the engine layout: length ``m + 1``,
slot 0 is the sentinel for ``t = -1``, slot ``s + 1`` holds the residual of
``y[s]``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

import numpy as np

if TYPE_CHECKING:
    from ts_forecaster.engine.matrix import ForecastMatrix


def to_array(values: Sequence[float] | np.ndarray, name: str = "y") -> np.ndarray:
    """Return ``values`` as a 1-D float64 array, rejecting empty input."""
    arr = np.asarray(values, dtype=np.float64)
    if arr.ndim != 1:
        raise ValueError(f"{name} must be one-dimensional, got shape {arr.shape}.")
    if arr.size == 0:
        raise ValueError(f"{name} must contain at least one observation.")
    return arr


def _shock(residuals: np.ndarray | None, s: int, origin: int) -> float:
    if residuals is None or s < 0 or s > origin or s + 1 >= residuals.size:
        return 0.0
    return float(residuals[s + 1])


class ClampedSeries:
    """Observed values with negative indices clamped to ``y[0]``."""

    start = 0

    def __init__(
        self,
        values: Sequence[float] | np.ndarray,
        residuals: np.ndarray | None = None,
    ) -> None:
        self._y = to_array(values)
        self._e = residuals

    @property
    def origin(self) -> int:
        return self._y.size - 1

    @property
    def end(self) -> int:
        return self._y.size - 1

    @property
    def values(self) -> np.ndarray:
        return self._y

    def __len__(self) -> int:
        return self._y.size

    def __getitem__(self, s: int) -> float:
        if s > self.end:
            raise IndexError(f"Index {s} is past the last observation ({self.end}).")
        return float(self._y[max(s, 0)])

    def shock(self, s: int) -> float:
        return _shock(self._e, s, self.origin)


class BackcastSeries:
    """Observed values with a synthetic backcast at index -1."""

    start = -1

    def __init__(
        self,
        values: Sequence[float] | np.ndarray,
        backcast: float,
        residuals: np.ndarray | None = None,
    ) -> None:
        self._y = to_array(values)
        self.backcast = float(backcast)
        self._e = residuals

    @property
    def origin(self) -> int:
        return self._y.size - 1

    @property
    def end(self) -> int:
        return self._y.size - 1

    @property
    def values(self) -> np.ndarray:
        return self._y

    def __len__(self) -> int:
        return self._y.size

    def __getitem__(self, s: int) -> float:
        if s > self.end:
            raise IndexError(f"Index {s} is past the last observation ({self.end}).")
        if s < 0:
            return self.backcast
        return float(self._y[s])

    def shock(self, s: int) -> float:
        return _shock(self._e, s, self.origin)


class DiagonalSeries:
    """The series as seen when forecasting matrix cell ``(row, horizon)``.

    The forecast origin is ``row - horizon``.  Values at or before the origin
    come from column 0 (actuals); values after it come from the diagonal of
    earlier forecasts, which must already be written.
    """

    start = 0

    def __init__(
        self,
        matrix: "ForecastMatrix",
        row: int,
        horizon: int,
        residuals: np.ndarray | None = None,
    ) -> None:
        self._m = matrix.values
        self.row = row
        self.horizon = horizon
        self._e = residuals

    @property
    def origin(self) -> int:
        return self.row - self.horizon

    @property
    def end(self) -> int:
        return self.row - 1

    def __getitem__(self, s: int) -> float:
        if s > self.end:
            raise IndexError(
                f"Index {s} would read row {self.row} or later while forecasting it."
            )
        col = max(self.horizon - (self.row - s), 0)
        return float(self._m[max(s, 0), col])

    def shock(self, s: int) -> float:
        return _shock(self._e, s, self.origin)


def difference_polynomial(d: int = 1, seasonal_order: int = 0, period: int = 1) -> np.ndarray:
    """Coefficients ``c[0..K]`` of ``(1 - B)^d (1 - B^period)^seasonal_order``.

    ``c[0]`` is always 1; the differenced value is ``sum(c[k] * y[t - k])``.
    """
    if d < 0 or seasonal_order < 0 or period < 1:
        raise ValueError(
            f"Invalid differencing d={d}, seasonal_order={seasonal_order}, period={period}."
        )
    poly = np.array([1.0])
    for _ in range(d):
        poly = np.convolve(poly, [1.0, -1.0])
    seasonal = np.zeros(period + 1)
    seasonal[0], seasonal[period] = 1.0, -1.0
    for _ in range(seasonal_order):
        poly = np.convolve(poly, seasonal)
    return poly


class DifferencedSeries:
    """Differenced view of another series view.

    With ``c = difference_polynomial(d, seasonal_order, period)`` and
    ``K = len(c) - 1``, index ``j`` reads ``sum(c[k] * base[j + K - k])``,
    so ``d = 1`` gives ``base[j + 1] - base[j]``.
    """

    def __init__(self, base: Any, d: int = 1, seasonal_order: int = 0, period: int = 1) -> None:
        self.base = base
        self.coefs = difference_polynomial(d, seasonal_order, period)
        self.lag = self.coefs.size - 1

    @property
    def start(self) -> int:
        return self.base.start

    @property
    def origin(self) -> int:
        return self.base.origin - self.lag

    @property
    def end(self) -> int:
        return self.base.end - self.lag

    def __getitem__(self, s: int) -> float:
        if s > self.end:
            raise IndexError(f"Index {s} is past the last difference ({self.end}).")
        top = s + self.lag
        return float(sum(c * self.base[top - k] for k, c in enumerate(self.coefs) if c != 0.0))

    def shock(self, s: int) -> float:
        return self.base.shock(s + self.lag)


def as_series(series: Any) -> Any:
    """Wrap a raw array/list in a ``ClampedSeries``; pass views through."""
    if hasattr(series, "shock") and hasattr(series, "end"):
        return series
    return ClampedSeries(series)


def wma_weights(q: int, u: float = 1.0) -> np.ndarray:
    """Weights for a q-term weighted moving average, oldest first.

    ``u = 0`` gives flat weights, ``u = 1`` linear weights ``1..q``
    normalized to sum to one; values in between blend the two.
    """
    if q < 1:
        raise ValueError(f"q must be >= 1, got {q}.")
    ramp = np.arange(1, q + 1, dtype=np.float64)
    linear = ramp / ramp.sum()
    flat = np.full(q, 1.0 / q)
    return linear * u + flat * (1.0 - u)


def weighted_backcast(y: Sequence[float] | np.ndarray, q: int = 2, u: float = 1.0) -> float:
    """Estimate the unobserved value just before ``y[0]``.

    Runs a weighted moving average backward in time over the first ``q``
    observations, so ``y[0]`` carries the largest weight.  Series shorter
    than ``q + 1`` fall back to ``y[0]``.
    """
    arr = to_array(y)
    if arr.size < q + 1:
        return float(arr[0])
    backward = arr[: q + 1][::-1]
    return float(np.dot(backward[1 : q + 1], wma_weights(q, u)))
