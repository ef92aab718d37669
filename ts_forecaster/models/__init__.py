"""
One-step forecasting models.

Every model satisfies ``engine.protocols.OneStepModel`` and is driven across
horizons by ``RecursiveForecaster``; none of them know about the forecast
matrix.

  models/baselines.py      Null, random walk, SMA, WMA, simple exp. smoothing.
  models/autoregressive.py AR, ARMA, ARIMA, SARIMA.
  models/exogenous.py      ARX (lags plus lagged exogenous columns).
  models/tree.py           LightGBM on a lag matrix.
  models/kalman.py         Scalar local-level Kalman filter.
  models/correlogram.py    ACF / PACF and order suggestion.
  models/optimizer.py      scipy-backed Optimizer.
  models/registry.py       build_model() by family name.
"""

from ts_forecaster.models.autoregressive import AR, ARIMA, ARMA, SARIMA
from ts_forecaster.models.baselines import (
    NullModel,
    RandomWalk,
    SimpleExpSmoothing,
    SimpleMovingAverage,
    WeightedMovingAverage,
)
from ts_forecaster.models.exogenous import ARX
from ts_forecaster.models.kalman import LocalLevelKalman
from ts_forecaster.models.registry import MODEL_NAMES, build_model
from ts_forecaster.models.tree import LagTreeModel

__all__ = [
    "AR",
    "ARIMA",
    "ARMA",
    "ARX",
    "LagTreeModel",
    "LocalLevelKalman",
    "MODEL_NAMES",
    "NullModel",
    "RandomWalk",
    "SARIMA",
    "SimpleExpSmoothing",
    "SimpleMovingAverage",
    "WeightedMovingAverage",
    "build_model",
]
