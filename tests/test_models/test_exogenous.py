"""
Tests for ts_forecaster.models.exogenous.

What we test
------------
1. ARX recovers the coefficients of a noise-free generating process.
2. A window with an offset reads the matching exogenous rows.
3. Exogenous rows after the forecast origin are held at the origin row.
4. Collinear inputs raise NumericalDegeneracyError.
5. Windows running past the exogenous matrix raise ValueError.
"""

from __future__ import annotations

import numpy as np
import pytest

from ts_forecaster.engine.series import ClampedSeries
from ts_forecaster.exceptions import NumericalDegeneracyError
from ts_forecaster.models.exogenous import ARX


# ── Helpers ───────────────────────────────────────────────────────────────────

def _generate(n: int = 40, seed: int = 3) -> tuple[np.ndarray, np.ndarray]:
    """y[t+1] = 2 + 0.5 y[t] + 3 x[t], no noise."""
    rng = np.random.default_rng(seed)
    x = rng.normal(size=(n, 1))
    y = np.empty(n)
    y[0] = 1.0
    for t in range(n - 1):
        y[t + 1] = 2.0 + 0.5 * y[t] + 3.0 * x[t, 0]
    return y, x


# ── Fit ───────────────────────────────────────────────────────────────────────

def test_arx_recovers_coefficients() -> None:
    y, x = _generate()
    model = ARX(1, x)
    model.train(y)
    np.testing.assert_allclose(model.coef, [2.0, 0.5, 3.0], atol=1e-8)
    assert model.name == "arx(1,1)"


def test_arx_window_offset() -> None:
    y, x = _generate()
    model = ARX(1, x)
    model.train(y[10:], start=10)
    np.testing.assert_allclose(model.coef, [2.0, 0.5, 3.0], atol=1e-8)


def test_arx_one_dimensional_exo_is_a_column() -> None:
    y, x = _generate()
    model = ARX(1, x[:, 0])
    assert model.exo.shape == (x.shape[0], 1)


# ── Prediction ────────────────────────────────────────────────────────────────

def test_arx_predict_in_sample() -> None:
    y, x = _generate()
    model = ARX(1, x)
    model.train(y)
    assert model.predict(5, ClampedSeries(y)) == pytest.approx(y[6])


def test_arx_holds_exo_at_origin() -> None:
    y, x = _generate()
    model = ARX(1, x)
    model.train(y)
    np.testing.assert_array_equal(model._exo_row(12, origin=4), x[4])
    np.testing.assert_array_equal(model._exo_row(-1, origin=4), x[0])
    np.testing.assert_array_equal(model._exo_row(100, origin=100), x[-1])


# ── Failures ──────────────────────────────────────────────────────────────────

def test_arx_collinear_exo_raises() -> None:
    y, _x = _generate()
    constant = np.ones((y.size, 1))
    with pytest.raises(NumericalDegeneracyError):
        ARX(1, constant).train(y)


def test_arx_window_past_exo_raises() -> None:
    y, x = _generate()
    with pytest.raises(ValueError, match="runs past"):
        ARX(1, x[:10]).train(y[:12])


def test_arx_requires_exo() -> None:
    with pytest.raises(ValueError):
        ARX(1, None)
    with pytest.raises(ValueError):
        ARX(0, np.ones((5, 1)))
