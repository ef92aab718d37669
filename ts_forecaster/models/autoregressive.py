"""
Autoregressive model family: AR, ARMA, ARIMA, SARIMA.

AR(p)
  ``y[t+1] = delta + phi_1 y[t] + ... + phi_p y[t-p+1]``.  Coefficients come
  from Yule-Walker (statsmodels) with ``delta = mu (1 - sum(phi))``, or from
  ordinary least squares on the lag matrix (``method="ols"``).  When ``p``
  is None the order is read off the PACF.

ARMA(p, q)
  ``y[t+1] = mu + sum phi_j (y[t-j+1] - mu) + sum theta_k e[t-k+1]``.
  Parameters ``[mu, phi..., theta...]`` minimize the conditional sum of
  squared one-step errors through a pluggable ``Optimizer``.  At predict
  time the shocks ``e`` come from ``series.shock(s)``, which is zero beyond
  the forecast origin.

ARIMA(p, d, q) / SARIMA
  ARMA on ``(1 - B)^d (1 - B^s)^D y``.  A prediction of the differenced
  series is integrated back with the differencing polynomial and the
  actual (or, past the origin, forecasted) values of the view.
"""

from __future__ import annotations

import logging
import math
from typing import Any

import numpy as np
from statsmodels.regression.linear_model import yule_walker

from ts_forecaster.engine.differencing import difference
from ts_forecaster.engine.protocols import Optimizer
from ts_forecaster.engine.series import DifferencedSeries, as_series
from ts_forecaster.exceptions import NumericalDegeneracyError
from ts_forecaster.models.common import require_trained, training_window
from ts_forecaster.models.correlogram import Correlogram
from ts_forecaster.models.optimizer import ScipyOptimizer

logger = logging.getLogger(__name__)

_HUGE = 1e300


def _yule_walker(y: np.ndarray, p: int) -> np.ndarray:
    if float(np.var(y)) == 0.0:
        raise NumericalDegeneracyError("Yule-Walker is undefined for a constant series.")
    rho, _sigma = yule_walker(y, order=p, method="mle", result_object=False)
    phi = np.atleast_1d(np.asarray(rho, dtype=np.float64))
    if not np.all(np.isfinite(phi)):
        raise NumericalDegeneracyError(f"Yule-Walker produced non-finite coefficients {phi}.")
    return phi


class AR:
    """AR(p) with Yule-Walker or least-squares coefficients.

    Attributes:
        p:      Order (None until trained when chosen from the PACF).
        method: ``"yule_walker"`` or ``"ols"``.
        delta:  Intercept.
        phi:    Lag coefficients, ``phi[0]`` multiplies ``y[t]``.
    """

    def __init__(
        self,
        p: int | None = 1,
        method: str = "yule_walker",
        correlogram: Correlogram | None = None,
    ) -> None:
        if p is not None and p < 1:
            raise ValueError(f"p must be >= 1, got {p}.")
        if method not in ("yule_walker", "ols"):
            raise ValueError(f"Unknown AR method '{method}'.")
        self.p = p
        self.method = method
        self.correlogram = correlogram or Correlogram()
        self.delta = 0.0
        self.phi: np.ndarray | None = None

    @property
    def name(self) -> str:
        return f"ar({self.p})" if self.p is not None else "ar(auto)"

    @property
    def is_trained(self) -> bool:
        return self.phi is not None

    def train(self, y: Any, start: int = 0) -> None:
        arr = training_window(y, 3, "AR")
        if self.p is None:
            self.p = self.correlogram.suggest_order(arr)
            logger.debug("AR order chosen from PACF | p=%d", self.p)
        if arr.size < self.p + 2:
            raise ValueError(f"AR({self.p}).train() needs >= {self.p + 2} observations; got {arr.size}.")

        if self.method == "yule_walker":
            self.phi = _yule_walker(arr, self.p)
            self.delta = float(arr.mean() * (1.0 - self.phi.sum()))
        else:
            rows = [
                [1.0] + [arr[max(t - j, 0)] for j in range(self.p)]
                for t in range(arr.size - 1)
            ]
            x = np.array(rows)
            coef, _res, rank, _sv = np.linalg.lstsq(x, arr[1:], rcond=None)
            if rank < x.shape[1] or not np.all(np.isfinite(coef)):
                raise NumericalDegeneracyError(
                    f"AR({self.p}) lag matrix is rank deficient (rank {rank} < {x.shape[1]})."
                )
            self.delta = float(coef[0])
            self.phi = coef[1:].copy()

    def predict(self, t: int, series: Any) -> float:
        require_trained(self)
        view = as_series(series)
        return self.delta + sum(float(c) * view[t - j] for j, c in enumerate(self.phi))

    def parameter_vector(self) -> np.ndarray:
        if self.phi is None:
            return np.zeros(0)
        return np.concatenate([[self.delta], self.phi])


class ARMA:
    """ARMA(p, q) fitted by conditional sum of squares.

    Attributes:
        params: ``[mu, phi_1..phi_p, theta_1..theta_q]`` once trained.
    """

    def __init__(self, p: int = 1, q: int = 1, optimizer: Optimizer | None = None) -> None:
        if p < 0 or q < 0:
            raise ValueError(f"Orders must be >= 0, got p={p}, q={q}.")
        self.p = p
        self.q = q
        self._optimizer = optimizer or ScipyOptimizer()
        self.params: np.ndarray | None = None

    @property
    def name(self) -> str:
        return f"arma({self.p},{self.q})"

    @property
    def is_trained(self) -> bool:
        return self.params is not None

    @property
    def min_train(self) -> int:
        return max(self.p, self.q) + 3

    def _split(self, params: np.ndarray) -> tuple[float, np.ndarray, np.ndarray]:
        return float(params[0]), params[1 : 1 + self.p], params[1 + self.p :]

    def css(self, params: np.ndarray, y: np.ndarray) -> float:
        """Sum of squared one-step errors, conditional on the first p values."""
        mu, phi, theta = self._split(params)
        n = y.size
        e = np.zeros(n, dtype=np.float64)
        for t in range(n):
            pred = mu
            for j in range(self.p):
                pred += phi[j] * (y[max(t - 1 - j, 0)] - mu)
            for k in range(self.q):
                s = t - 1 - k
                if s >= 0:
                    pred += theta[k] * e[s]
            e[t] = y[t] - pred
        with np.errstate(over="ignore", invalid="ignore"):
            sse = float(np.sum(e[self.p :] ** 2))
        return sse if math.isfinite(sse) else _HUGE

    def train(self, y: Any, start: int = 0) -> None:
        arr = training_window(y, self.min_train, self.name.upper())
        mu = float(arr.mean())
        phi0 = np.zeros(self.p)
        if self.p > 0 and float(np.var(arr)) > 0.0:
            phi0 = _yule_walker(arr, self.p)
        x0 = np.concatenate([[mu], phi0, np.zeros(self.q)])
        self.params = self._optimizer.minimize(lambda x: self.css(x, arr), x0)
        logger.debug("Trained %s | params=%s", self.name, np.array2string(self.params, precision=4))

    def predict(self, t: int, series: Any) -> float:
        require_trained(self)
        view = as_series(series)
        mu, phi, theta = self._split(self.params)
        pred = mu
        for j in range(self.p):
            pred += float(phi[j]) * (view[t - j] - mu)
        for k in range(self.q):
            pred += float(theta[k]) * view.shock(t - k)
        return pred

    def parameter_vector(self) -> np.ndarray:
        return self.params.copy() if self.params is not None else np.zeros(0)


class ARIMA:
    """ARIMA(p, d, q), optionally with seasonal differencing.

    Prediction of ``y[t+1]``::

        x_hat = arma.predict(t - K, DifferencedSeries(y))
        y[t+1] = x_hat - sum_{k=1..K} c[k] * y[t+1-k]

    where ``c`` is the differencing polynomial and ``K`` its degree.
    """

    def __init__(
        self,
        p: int = 1,
        d: int = 1,
        q: int = 1,
        seasonal_order: int = 0,
        period: int = 1,
        optimizer: Optimizer | None = None,
    ) -> None:
        if not 0 <= d <= 2:
            raise ValueError(f"d must be in 0..2, got {d}.")
        if not 0 <= seasonal_order <= 3:
            raise ValueError(f"seasonal_order must be in 0..3, got {seasonal_order}.")
        self.d = d
        self.seasonal_order = seasonal_order
        self.period = period
        self.arma = ARMA(p, q, optimizer)

    @property
    def name(self) -> str:
        return f"arima({self.arma.p},{self.d},{self.arma.q})"

    @property
    def is_trained(self) -> bool:
        return self.arma.is_trained

    def _view(self, series: Any) -> DifferencedSeries:
        return DifferencedSeries(as_series(series), self.d, self.seasonal_order, self.period)

    def train(self, y: Any, start: int = 0) -> None:
        lag = self.d + self.seasonal_order * self.period
        arr = training_window(y, lag + self.arma.min_train, self.name.upper())
        x, _ = difference(arr, self.d, self.seasonal_order, self.period)
        self.arma.train(x)

    def predict(self, t: int, series: Any) -> float:
        require_trained(self)
        view = as_series(series)
        dview = self._view(view)
        x_hat = self.arma.predict(t - dview.lag, dview)
        return x_hat - sum(
            float(c) * view[t + 1 - k] for k, c in enumerate(dview.coefs) if k > 0 and c != 0.0
        )

    def parameter_vector(self) -> np.ndarray:
        return self.arma.parameter_vector()


class SARIMA(ARIMA):
    """Seasonal ARIMA: regular order ``d`` and seasonal order ``D`` at ``period``."""

    def __init__(
        self,
        p: int = 1,
        d: int = 1,
        q: int = 1,
        seasonal_order: int = 1,
        period: int = 12,
        optimizer: Optimizer | None = None,
    ) -> None:
        if period < 2:
            raise ValueError(f"Seasonal period must be >= 2, got {period}.")
        super().__init__(p, d, q, seasonal_order, period, optimizer)

    @property
    def name(self) -> str:
        return (
            f"sarima({self.arma.p},{self.d},{self.arma.q})"
            f"x({self.seasonal_order},{self.period})"
        )
