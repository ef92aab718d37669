"""
Name → model construction.

``build_model(name, config)`` is the single place the CLI (and tests) turn a
model family name into a configured, untrained instance.  Orders and
hyperparameters come from ``ModelsConfig``.
"""

from __future__ import annotations

from typing import Any, Callable

from ts_forecaster.config import ModelsConfig
from ts_forecaster.engine.protocols import OneStepModel
from ts_forecaster.models.autoregressive import AR, ARIMA, ARMA, SARIMA
from ts_forecaster.models.baselines import (
    NullModel,
    RandomWalk,
    SimpleExpSmoothing,
    SimpleMovingAverage,
    TrendModel,
    WeightedMovingAverage,
)
from ts_forecaster.models.exogenous import ARX
from ts_forecaster.models.kalman import LocalLevelKalman
from ts_forecaster.models.tree import LagForestModel, LagTreeModel

_Builder = Callable[[ModelsConfig, Any], OneStepModel]

_BUILDERS: dict[str, _Builder] = {
    "null":        lambda c, exo: NullModel(),
    "random_walk": lambda c, exo: RandomWalk(),
    "sma":         lambda c, exo: SimpleMovingAverage(c.sma_q),
    "wma":         lambda c, exo: WeightedMovingAverage(c.wma_q, c.wma_u),
    "ses":         lambda c, exo: SimpleExpSmoothing(c.ses_alpha, c.ses_optimize),
    "trend":       lambda c, exo: TrendModel(),
    "ar":          lambda c, exo: AR(c.ar_p, c.ar_method),
    "arma":        lambda c, exo: ARMA(c.arma_p, c.arma_q),
    "arima":       lambda c, exo: ARIMA(c.arma_p, c.arima_d, c.arma_q),
    "sarima":      lambda c, exo: SARIMA(
        c.arma_p, c.arima_d, c.arma_q, c.sarima_seasonal_d, c.sarima_period
    ),
    "arx":         lambda c, exo: ARX(c.ar_p, exo),
    "tree":        lambda c, exo: LagTreeModel(
        c.tree_lags, n_estimators=c.tree_estimators, learning_rate=c.tree_learning_rate
    ),
    "forest":      lambda c, exo: LagForestModel(
        c.tree_lags, n_estimators=c.tree_estimators, bagging_fraction=c.forest_bagging_fraction
    ),
    "kalman":      lambda c, exo: LocalLevelKalman(
        c.kalman_process_var, c.kalman_obs_var, c.kalman_estimate
    ),
}

MODEL_NAMES: tuple[str, ...] = tuple(_BUILDERS)


def build_model(
    name: str,
    config: ModelsConfig | None = None,
    exo: Any = None,
) -> OneStepModel:
    """Construct an untrained model by family name.

    Args:
        name:   One of ``MODEL_NAMES``.
        config: Model defaults; ``ModelsConfig()`` if None.
        exo:    Exogenous matrix, required for ``"arx"`` only.

    Raises:
        ValueError: Unknown name, or ``"arx"`` without ``exo``.
    """
    key = name.strip().lower()
    if key not in _BUILDERS:
        raise ValueError(f"Unknown model '{name}'. Choose from: {', '.join(MODEL_NAMES)}.")
    return _BUILDERS[key](config or ModelsConfig(), exo)
