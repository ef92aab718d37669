"""
Differencing transforms for ARIMA-family models.

Regular differencing (order d = 0, 1, 2)::

    d = 1   v[t] = y[t+1] - y[t]
    d = 2   v[t] = y[t+2] - 2 y[t+1] + y[t]

Seasonal differencing with period s (order D = 0..3) applies the binomial
coefficients of ``(1 - B^s)^D``.

Back transforms:

  undiff(v, y0)                   exact inverse of first differencing
  backform(vp, y, d)              one-step predictions of the differenced
                                  series -> predictions of ``y`` (each step
                                  anchored on the *actual* previous values)
  integrate_forecast(vh, y, d, t) h-step forecasts of the differenced series
                                  from origin t -> forecasts of ``y``
                                  (anchored on actuals up to t, then on the
                                  forecasts themselves)
  seasonal_backform(xp, x, D, s)  undo seasonal differencing of fitted values
"""

from __future__ import annotations

from math import comb
from typing import Sequence

import numpy as np

from ts_forecaster.engine.series import to_array

MAX_D = 2
MAX_SEASONAL_D = 3


def _check_order(d: int, maximum: int, what: str) -> None:
    if not 0 <= d <= maximum:
        raise ValueError(f"{what} order must be in 0..{maximum}, got {d}.")


def diff(y: Sequence[float] | np.ndarray, d: int = 1) -> np.ndarray:
    """Return the d-th difference of ``y`` (length ``len(y) - d``)."""
    _check_order(d, MAX_D, "Differencing")
    arr = to_array(y)
    if arr.size <= d:
        raise ValueError(f"Need more than {d} observations to difference, got {arr.size}.")
    return np.diff(arr, n=d) if d > 0 else arr.copy()


def undiff(v: Sequence[float] | np.ndarray, y0: float) -> np.ndarray:
    """Invert first differencing: ``y[0] = y0``, ``y[t] = y[t-1] + v[t-1]``."""
    vv = np.asarray(v, dtype=np.float64)
    out = np.empty(vv.size + 1, dtype=np.float64)
    out[0] = y0
    out[1:] = y0 + np.cumsum(vv)
    return out


def backform(
    vp: Sequence[float] | np.ndarray,
    y: Sequence[float] | np.ndarray,
    d: int = 1,
) -> np.ndarray:
    """Map one-step predictions of the differenced series back to ``y``'s scale.

    The first ``d`` entries copy the actuals (nothing to predict them from).
    """
    _check_order(d, MAX_D, "Differencing")
    pred = np.asarray(vp, dtype=np.float64)
    arr = to_array(y)
    if d == 0:
        return pred.copy()
    n = arr.size - d
    if pred.size < n:
        raise ValueError(f"Need {n} differenced predictions, got {pred.size}.")
    yp = np.empty(arr.size, dtype=np.float64)
    yp[:d] = arr[:d]
    if d == 1:
        yp[1:] = pred[:n] + arr[:-1]
    else:
        yp[2:] = pred[:n] + 2.0 * arr[1:-1] - arr[:-2]
    return yp


def integrate_forecast(
    vh: Sequence[float] | np.ndarray,
    y: Sequence[float] | np.ndarray,
    d: int,
    t: int,
) -> np.ndarray:
    """Turn differenced forecasts for ``t+1..t+h`` into forecasts of ``y``."""
    _check_order(d, MAX_D, "Differencing")
    vv = np.asarray(vh, dtype=np.float64)
    arr = to_array(y)
    if d == 0:
        return vv.copy()
    if t - d + 1 < 0 or t >= arr.size:
        raise ValueError(f"Origin t={t} needs {d} known values before it (m={arr.size}).")
    hist = list(arr[t - d + 1 : t + 1])
    out = np.empty(vv.size, dtype=np.float64)
    for k, step in enumerate(vv):
        nxt = step + hist[-1] if d == 1 else step + 2.0 * hist[-1] - hist[-2]
        out[k] = nxt
        hist.append(nxt)
    return out


def seasonal_diff(y: Sequence[float] | np.ndarray, period: int, order: int = 1) -> np.ndarray:
    """Apply ``(1 - B^period)^order`` to ``y``."""
    _check_order(order, MAX_SEASONAL_D, "Seasonal differencing")
    if period < 1:
        raise ValueError(f"period must be >= 1, got {period}.")
    arr = to_array(y)
    lag = period * order
    if arr.size <= lag:
        raise ValueError(f"Need more than {lag} observations, got {arr.size}.")
    out = np.zeros(arr.size - lag, dtype=np.float64)
    for k in range(order + 1):
        coef = (-1) ** k * comb(order, k)
        start = lag - k * period
        out += coef * arr[start : start + out.size]
    return out


def seasonal_backform(
    xp: Sequence[float] | np.ndarray,
    x: Sequence[float] | np.ndarray,
    order: int,
    period: int,
) -> np.ndarray:
    """Undo seasonal differencing of fitted values, anchored on actuals ``x``.

    The first ``order * period`` entries copy ``x``.
    """
    _check_order(order, MAX_SEASONAL_D, "Seasonal differencing")
    pred = np.asarray(xp, dtype=np.float64)
    xx = to_array(x, name="x")
    if order == 0:
        return pred.copy()
    lag = order * period
    n = xx.size - lag
    out = np.empty(pred.size + lag, dtype=np.float64)
    out[:lag] = xx[:lag]
    body = pred[:n].copy()
    for k in range(1, order + 1):
        coef = (-1) ** (k + 1) * comb(order, k)
        start = lag - k * period
        body += coef * xx[start : start + n]
    out[lag : lag + n] = body
    if pred.size > n:
        out[lag + n :] = pred[n:]
    return out


def difference(
    y: Sequence[float] | np.ndarray,
    d: int,
    seasonal_order: int = 0,
    period: int = 1,
) -> tuple[np.ndarray, np.ndarray]:
    """Regular then seasonal differencing.

    Returns:
        ``(fully_differenced, regular_only)``; the second is needed to
        transform seasonal fits back.
    """
    x = diff(y, d)
    if seasonal_order == 0:
        return x, x
    return seasonal_diff(x, period, seasonal_order), x


def transform_back(
    xp: Sequence[float] | np.ndarray,
    x: Sequence[float] | np.ndarray,
    y: Sequence[float] | np.ndarray,
    d: int,
    seasonal_order: int = 0,
    period: int = 1,
) -> np.ndarray:
    """Fitted values of the fully differenced series -> fitted values of ``y``."""
    xs = seasonal_backform(xp, x, seasonal_order, period)
    return backform(xs, y, d)
