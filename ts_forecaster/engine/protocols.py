"""
Interfaces between the forecasting engine and the models it drives.

The engine composes a model; it never subclasses one.  A model only needs
to satisfy ``OneStepModel``:

  name                      Short identifier used in logs and reports.
  is_trained                True once ``train()`` has succeeded.
  train(y, start=0)         Fit parameters on a training window whose
                            first value sits at index ``start`` of the
                            full series.
  predict(t, series)        Forecast ``y[t + 1]`` reading only
                            ``series[s]`` / ``series.shock(s)`` for s <= t.
  parameter_vector()        Fitted parameters (its length drives the
                            degrees-of-freedom bookkeeping).

Optional capabilities are separate protocols so a model opts into each one
independently instead of inheriting a stack of mixins.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class Trainable(Protocol):
    """Anything that can be fitted to a training window."""

    @property
    def is_trained(self) -> bool: ...

    def train(self, y: np.ndarray, start: int = 0) -> None: ...


@runtime_checkable
class OneStepModel(Trainable, Protocol):
    """A trained model that forecasts one step ahead from any series view."""

    name: str

    def predict(self, t: int, series: Any) -> float: ...

    def parameter_vector(self) -> np.ndarray: ...


@runtime_checkable
class Diagnosable(Protocol):
    """Anything that turns aligned (actual, forecast) pairs into QoF."""

    def reset_df(self, dfm: float, df: float) -> None: ...

    def diagnose(self, actual: np.ndarray, forecast: np.ndarray) -> Any: ...


@runtime_checkable
class AutocorrelationAware(Protocol):
    """Anything that can report sample ACF / PACF of a series."""

    def acf(self, y: np.ndarray, max_lag: int) -> np.ndarray: ...

    def pacf(self, y: np.ndarray, max_lag: int) -> np.ndarray: ...


@runtime_checkable
class Optimizer(Protocol):
    """Minimize ``objective(x)`` starting from ``x0``; return the optimum."""

    def minimize(
        self, objective: Callable[[np.ndarray], float], x0: np.ndarray
    ) -> np.ndarray: ...


def parameter_count(model: OneStepModel) -> int:
    """Number of fitted parameters, at least 1."""
    return max(1, int(np.asarray(model.parameter_vector()).size))
