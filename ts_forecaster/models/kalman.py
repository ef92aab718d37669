"""
Scalar local-level Kalman filter.

State-space form::

    level[t+1] = level[t] + w,   w ~ N(0, process_var)
    y[t]       = level[t] + v,   v ~ N(0, obs_var)

``predict(t, series)`` runs the filter from the first value of the view up
to ``t`` and returns the filtered level, which is the forecast for every
horizon.  With ``estimate=True`` both variances are fitted by maximizing
the Gaussian innovation likelihood over their logarithms.
"""

from __future__ import annotations

import logging
import math
from typing import Any

import numpy as np

from ts_forecaster.engine.protocols import Optimizer
from ts_forecaster.engine.series import as_series
from ts_forecaster.models.common import require_trained, training_window
from ts_forecaster.models.optimizer import ScipyOptimizer

logger = logging.getLogger(__name__)

_LOG_VAR_FLOOR = -20.0
_LOG_VAR_CEIL = 20.0


def _filter(values: list[float], q: float, r: float) -> tuple[float, float]:
    """Run the filter over ``values``; return ``(level, negative log-likelihood)``."""
    level = values[0]
    p = r
    nll = 0.0
    for obs in values[1:]:
        p += q
        f = p + r
        innovation = obs - level
        nll += 0.5 * (math.log(2.0 * math.pi * f) + innovation * innovation / f)
        gain = p / f
        level += gain * innovation
        p *= 1.0 - gain
    return level, nll


class LocalLevelKalman:
    """Random walk plus noise, filtered one observation at a time.

    Attributes:
        process_var: Variance of the level innovations.
        obs_var:     Variance of the observation noise.
        estimate:    Fit both variances on the training window when True.
    """

    name = "kalman"

    def __init__(
        self,
        process_var: float = 1.0,
        obs_var: float = 1.0,
        estimate: bool = True,
        optimizer: Optimizer | None = None,
    ) -> None:
        if process_var <= 0.0 or obs_var <= 0.0:
            raise ValueError(
                f"Variances must be > 0, got process_var={process_var}, obs_var={obs_var}."
            )
        self.process_var = process_var
        self.obs_var = obs_var
        self.estimate = estimate
        self._optimizer = optimizer or ScipyOptimizer(
            bounds=[(_LOG_VAR_FLOOR, _LOG_VAR_CEIL)] * 2
        )
        self._trained = False

    @property
    def is_trained(self) -> bool:
        return self._trained

    def train(self, y: Any, start: int = 0) -> None:
        arr = training_window(y, 3, "LocalLevelKalman")
        if self.estimate:
            values = arr.tolist()
            x0 = np.log([self.process_var, self.obs_var])
            best = self._optimizer.minimize(
                lambda x: _filter(values, math.exp(x[0]), math.exp(x[1]))[1], x0
            )
            self.process_var, self.obs_var = (float(v) for v in np.exp(best))
            logger.debug(
                "Kalman variances estimated | process=%.4g obs=%.4g",
                self.process_var, self.obs_var,
            )
        self._trained = True

    def predict(self, t: int, series: Any) -> float:
        require_trained(self)
        view = as_series(series)
        values = [view[s] for s in range(view.start, max(t, view.start) + 1)]
        level, _ = _filter(values, self.process_var, self.obs_var)
        return float(level)

    def parameter_vector(self) -> np.ndarray:
        return np.array([self.process_var, self.obs_var])
