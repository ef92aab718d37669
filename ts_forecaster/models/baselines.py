"""
Baseline one-step models.

Each baseline tests a specific hypothesis before anything heavier is worth
fitting:

  NullModel              → "There is no dynamics; the best guess is the
                            training mean."

  RandomWalk             → "The series is a random walk; tomorrow equals
                            today."  Multi-step forecasts are flat.

  SimpleMovingAverage    → "Recent values matter equally; noise averages
                            out over q steps."

  WeightedMovingAverage  → "Recent values matter more than older ones."
                            Weights blend flat (u = 0) and linear (u = 1).

  SimpleExpSmoothing     → "The level drifts; discount old values
                            geometrically."  alpha is fitted by minimizing
                            the one-step sum of squared errors.

  TrendModel             → "The series follows a straight line in time."
                            Multi-step forecasts continue the line.

If a structured model cannot beat ALL of these, it is not ready for use.

Interface contract
------------------
All models implement the ``OneStepModel`` protocol:

  train(y, start=0) → None
    Fit on the training window ``y``.  ``start`` is the window's offset in
    the full series (only models with exogenous inputs need it).

  predict(t, series) → float
    Forecast ``series[t + 1]`` reading only ``series[s]`` and
    ``series.shock(s)`` for ``s <= t``.  ``series`` may be a raw array
    or any series view.

  parameter_vector() → ndarray
"""

from __future__ import annotations

from typing import Any

import numpy as np

from ts_forecaster.engine.protocols import Optimizer
from ts_forecaster.engine.series import as_series, wma_weights
from ts_forecaster.models.common import require_trained, training_window
from ts_forecaster.models.optimizer import ScipyOptimizer


class NullModel:
    """Predict the training mean everywhere."""

    name = "null"

    def __init__(self) -> None:
        self._mean: float | None = None

    @property
    def is_trained(self) -> bool:
        return self._mean is not None

    def train(self, y: Any, start: int = 0) -> None:
        self._mean = float(np.mean(training_window(y, 1, "NullModel")))

    def predict(self, t: int, series: Any) -> float:
        require_trained(self)
        return self._mean

    def parameter_vector(self) -> np.ndarray:
        return np.array([self._mean if self._mean is not None else 0.0])


class RandomWalk:
    """Naive baseline: ``predict(t, y) = y[t]``.

    Nothing to fit; ``train`` only marks the model ready.
    """

    name = "random_walk"

    def __init__(self) -> None:
        self._trained = False

    @property
    def is_trained(self) -> bool:
        return self._trained

    def train(self, y: Any, start: int = 0) -> None:
        training_window(y, 1, "RandomWalk")
        self._trained = True

    def predict(self, t: int, series: Any) -> float:
        require_trained(self)
        return as_series(series)[t]

    def parameter_vector(self) -> np.ndarray:
        return np.zeros(0)


class SimpleMovingAverage:
    """Mean of the last ``q`` values.

    Near the start of the view fewer than ``q`` values exist; the mean is
    taken over those that do.
    """

    def __init__(self, q: int = 3) -> None:
        if q < 1:
            raise ValueError(f"q must be >= 1, got {q}.")
        self.q = q
        self.name = f"sma({q})"
        self._trained = False

    @property
    def is_trained(self) -> bool:
        return self._trained

    def train(self, y: Any, start: int = 0) -> None:
        training_window(y, 1, "SimpleMovingAverage")
        self._trained = True

    def predict(self, t: int, series: Any) -> float:
        require_trained(self)
        view = as_series(series)
        first = max(t - self.q + 1, view.start)
        if first > t:
            return view[t]
        return float(np.mean([view[s] for s in range(first, t + 1)]))

    def parameter_vector(self) -> np.ndarray:
        return np.array([float(self.q)])


class WeightedMovingAverage:
    """Weighted average of the last ``q`` values, heaviest on the newest."""

    def __init__(self, q: int = 3, u: float = 1.0) -> None:
        if not 0.0 <= u <= 1.0:
            raise ValueError(f"u must be in [0.0, 1.0], got {u}.")
        self.q = q
        self.u = u
        self.weights = wma_weights(q, u)
        self.name = f"wma({q})"
        self._trained = False

    @property
    def is_trained(self) -> bool:
        return self._trained

    def train(self, y: Any, start: int = 0) -> None:
        training_window(y, 1, "WeightedMovingAverage")
        self._trained = True

    def predict(self, t: int, series: Any) -> float:
        require_trained(self)
        view = as_series(series)
        first = t - self.q + 1
        if first < view.start:
            lo = min(view.start, t)
            return float(np.mean([view[s] for s in range(lo, t + 1)]))
        window = np.array([view[s] for s in range(first, t + 1)])
        return float(np.dot(window, self.weights))

    def parameter_vector(self) -> np.ndarray:
        return self.weights.copy()


class SimpleExpSmoothing:
    """Simple exponential smoothing: ``level = alpha * y + (1 - alpha) * level``.

    The level starts at the first value of the view and is folded forward to
    ``t``; the forecast for every horizon is the current level.

    Attributes:
        alpha:    Smoothing parameter in [0, 1].
        optimize: Fit ``alpha`` on the training window when True.
    """

    def __init__(
        self,
        alpha: float = 0.5,
        optimize: bool = True,
        optimizer: Optimizer | None = None,
    ) -> None:
        if not 0.0 <= alpha <= 1.0:
            raise ValueError(f"alpha must be in [0.0, 1.0], got {alpha}.")
        self.alpha = alpha
        self.optimize = optimize
        self._optimizer = optimizer or ScipyOptimizer(bounds=[(0.0, 1.0)])
        self.name = "ses"
        self._trained = False

    @property
    def is_trained(self) -> bool:
        return self._trained

    @staticmethod
    def _sse(alpha: float, y: np.ndarray) -> float:
        level = y[0]
        sse = 0.0
        for value in y[1:]:
            sse += (value - level) ** 2
            level = alpha * value + (1.0 - alpha) * level
        return sse

    def train(self, y: Any, start: int = 0) -> None:
        arr = training_window(y, 2, "SimpleExpSmoothing")
        if self.optimize:
            best = self._optimizer.minimize(lambda x: self._sse(float(x[0]), arr), np.array([self.alpha]))
            self.alpha = float(np.clip(best[0], 0.0, 1.0))
        self._trained = True

    def predict(self, t: int, series: Any) -> float:
        require_trained(self)
        view = as_series(series)
        level = view[view.start]
        for s in range(view.start + 1, t + 1):
            level = self.alpha * view[s] + (1.0 - self.alpha) * level
        return float(level)

    def parameter_vector(self) -> np.ndarray:
        return np.array([self.alpha])


class TrendModel:
    """Least-squares line ``b0 + b1 * t`` over the time index.

    Time is the index in the full series: a window trained with
    ``start = lo`` regresses ``y[i]`` on ``lo + i``, so every origin reads
    the same line.

    Attributes:
        coef: ``[b0, b1]`` once trained.
    """

    name = "trend"

    def __init__(self) -> None:
        self.coef: np.ndarray | None = None

    @property
    def is_trained(self) -> bool:
        return self.coef is not None

    def train(self, y: Any, start: int = 0) -> None:
        arr = training_window(y, 2, "TrendModel")
        t = np.arange(start, start + arr.size, dtype=np.float64)
        x = np.column_stack([np.ones(arr.size), t])
        coef, _res, _rank, _sv = np.linalg.lstsq(x, arr, rcond=None)
        self.coef = coef

    def predict(self, t: int, series: Any) -> float:
        require_trained(self)
        return float(self.coef[0] + self.coef[1] * (t + 1))

    def parameter_vector(self) -> np.ndarray:
        return self.coef.copy() if self.coef is not None else np.zeros(0)
