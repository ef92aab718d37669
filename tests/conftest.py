"""
Shared pytest fixtures for the ts-forecaster test suite.

Provides:
  - Small deterministic series used across engine, backtest and model tests.
  - ``trained_rw``: a RecursiveForecaster around a trained random walk.
  - ``ar_series``: a seeded AR(1) sample long enough for every model family.
"""

from __future__ import annotations

import numpy as np
import pytest

from ts_forecaster.engine.recursive import RecursiveForecaster
from ts_forecaster.models.baselines import RandomWalk


# ── Series fixtures ───────────────────────────────────────────────────────────

@pytest.fixture
def zigzag() -> np.ndarray:
    """The ten-point series used by the random-walk scenario."""
    return np.array([1.0, 3.0, 4.0, 2.0, 5.0, 7.0, 9.0, 8.0, 6.0, 3.0])


@pytest.fixture
def ramp() -> np.ndarray:
    """Linear ramp 1..29."""
    return np.arange(1.0, 30.0)


@pytest.fixture
def ar_series() -> np.ndarray:
    """80 points of a stationary AR(1) with phi = 0.6 around 10."""
    rng = np.random.default_rng(42)
    y = np.empty(80)
    y[0] = 10.0
    for t in range(1, y.size):
        y[t] = 10.0 + 0.6 * (y[t - 1] - 10.0) + rng.normal(0.0, 1.0)
    return y


@pytest.fixture
def noisy20() -> np.ndarray:
    """20 points of a seeded random walk."""
    rng = np.random.default_rng(7)
    return 50.0 + np.cumsum(rng.normal(0.0, 1.0, size=20))


# ── Forecaster fixtures ───────────────────────────────────────────────────────

@pytest.fixture
def trained_rw(zigzag: np.ndarray) -> RecursiveForecaster:
    """Random-walk forecaster trained on ``zigzag``."""
    forecaster = RecursiveForecaster(RandomWalk())
    forecaster.train(zigzag)
    return forecaster
