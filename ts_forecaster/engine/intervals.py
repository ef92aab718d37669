"""
Prediction intervals around point forecasts.

NormalIntervalEstimator
-----------------------
For a given horizon, the residuals ``actual - forecast`` are summarized by
their standard deviation ``sigma`` and the interval half-width is::

    width = z * sigma,    z = norm.ppf(1 - (1 - confidence) / 2)

Assumption: residuals at each horizon are i.i.d. Normal.  This is a
simplifying assumption, not a guarantee.  h-step residuals are usually
autocorrelated and fat-tailed, so the nominal coverage is optimistic for
longer horizons.  Use ``EmpiricalIntervalEstimator`` (residual quantiles)
or any other object with the same ``interval()`` signature when a
distribution-free band is needed.

Interval quality
----------------
``interval_metrics`` scores a band against the actuals it was meant to
cover:

  picp    fraction of actuals inside the band (coverage probability)
  pinc    nominal coverage (the requested confidence)
  ace     picp - pinc (average coverage error; negative = under-covering)
  pinaw   mean band width / range of actuals
  pinad   mean distance outside the band / range of actuals
  iscore  interval score: width plus 2/alpha times every miss
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Protocol, Sequence

import numpy as np
from scipy.stats import norm

from ts_forecaster.exceptions import AlignmentError, HorizonError, NumericalDegeneracyError

DEFAULT_CONFIDENCE = 0.9


def _check_inputs(
    actual: Sequence[float] | np.ndarray,
    forecast: Sequence[float] | np.ndarray,
    horizon: int,
    confidence: float,
) -> tuple[np.ndarray, np.ndarray]:
    if horizon < 1:
        raise HorizonError(horizon)
    if not 0.0 < confidence < 1.0:
        raise ValueError(f"confidence must be in (0.0, 1.0), got {confidence}.")
    yy = np.asarray(actual, dtype=np.float64)
    yf = np.asarray(forecast, dtype=np.float64)
    if yy.size != yf.size:
        raise AlignmentError(yy.size, yf.size, context=f"interval for horizon {horizon}")
    if yy.size < 2:
        raise NumericalDegeneracyError(
            f"Need at least 2 residuals to estimate an interval, got {yy.size}."
        )
    return yy, yf


class IntervalEstimator(Protocol):
    """Anything that turns aligned actual/forecast vectors into bounds."""

    def interval(
        self,
        actual: Sequence[float] | np.ndarray,
        forecast: Sequence[float] | np.ndarray,
        horizon: int,
        confidence: float = DEFAULT_CONFIDENCE,
    ) -> tuple[np.ndarray, np.ndarray]: ...


class NormalIntervalEstimator:
    """Symmetric z * sigma bands under an i.i.d. Normal residual assumption."""

    name = "normal"

    def half_width(
        self,
        actual: Sequence[float] | np.ndarray,
        forecast: Sequence[float] | np.ndarray,
        horizon: int,
        confidence: float = DEFAULT_CONFIDENCE,
    ) -> float:
        yy, yf = _check_inputs(actual, forecast, horizon, confidence)
        sigma = float(np.std(yy - yf))
        if not math.isfinite(sigma):
            raise NumericalDegeneracyError(
                f"Residual standard deviation is {sigma} at horizon {horizon}."
            )
        return float(norm.ppf(1.0 - (1.0 - confidence) / 2.0)) * sigma

    def interval(
        self,
        actual: Sequence[float] | np.ndarray,
        forecast: Sequence[float] | np.ndarray,
        horizon: int,
        confidence: float = DEFAULT_CONFIDENCE,
    ) -> tuple[np.ndarray, np.ndarray]:
        """Return ``(lower, upper)`` around each forecast point."""
        width = self.half_width(actual, forecast, horizon, confidence)
        yf = np.asarray(forecast, dtype=np.float64)
        return yf - width, yf + width


class EmpiricalIntervalEstimator:
    """Bands from the empirical quantiles of the residuals."""

    name = "empirical"

    def interval(
        self,
        actual: Sequence[float] | np.ndarray,
        forecast: Sequence[float] | np.ndarray,
        horizon: int,
        confidence: float = DEFAULT_CONFIDENCE,
    ) -> tuple[np.ndarray, np.ndarray]:
        yy, yf = _check_inputs(actual, forecast, horizon, confidence)
        e = yy - yf
        tail = (1.0 - confidence) / 2.0
        lo, hi = np.quantile(e, [tail, 1.0 - tail])
        if not (math.isfinite(lo) and math.isfinite(hi)):
            raise NumericalDegeneracyError(f"Residual quantiles are not finite at horizon {horizon}.")
        return yf + lo, yf + hi


def build_estimator(method: str) -> IntervalEstimator:
    """Return the estimator registered under ``method``."""
    if method == "normal":
        return NormalIntervalEstimator()
    if method == "empirical":
        return EmpiricalIntervalEstimator()
    raise ValueError(f"Unknown interval method '{method}'; expected 'normal' or 'empirical'.")


@dataclass(frozen=True)
class IntervalMetrics:
    """Quality of a prediction band (see module docstring)."""

    picp: float
    pinc: float
    ace: float
    pinaw: float
    pinad: float
    iscore: float

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


def interval_metrics(
    actual: Sequence[float] | np.ndarray,
    lower: Sequence[float] | np.ndarray,
    upper: Sequence[float] | np.ndarray,
    confidence: float = DEFAULT_CONFIDENCE,
) -> IntervalMetrics:
    """Score the band ``[lower, upper]`` against ``actual``."""
    yy = np.asarray(actual, dtype=np.float64)
    low = np.asarray(lower, dtype=np.float64)
    up = np.asarray(upper, dtype=np.float64)
    if not yy.size == low.size == up.size:
        raise AlignmentError(yy.size, low.size, context="interval_metrics")
    if yy.size == 0:
        raise ValueError("interval_metrics needs at least one observation.")

    y_range = float(yy.max() - yy.min())
    below = np.clip(low - yy, 0.0, None)
    above = np.clip(yy - up, 0.0, None)
    alpha = 1.0 - confidence

    picp = float(np.mean((yy > low) & (yy < up)))
    width = float(np.mean(up - low))
    miss = float(np.mean(below + above))
    return IntervalMetrics(
        picp=picp,
        pinc=confidence,
        ace=picp - confidence,
        pinaw=width / y_range if y_range > 0 else 0.0,
        pinad=miss / y_range if y_range > 0 else 0.0,
        iscore=width + (2.0 / alpha) * miss,
    )
