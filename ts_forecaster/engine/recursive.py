"""
Multi-horizon recursive forecasting engine.

``RecursiveForecaster`` composes a trained ``OneStepModel`` and turns its
one-step ``predict(t, series)`` into forecasts for every time point and
every horizon 1..h_max, stored in a ``ForecastMatrix``.

Diagonal recursion
------------------
Cell ``M[r, h]`` is the h-step forecast of ``y[r]`` made at origin
``r - h``.  It is computed as::

    M[r, h] = model.predict(r - 1, DiagonalSeries(M, r, h))

The diagonal view hands the model actual values up to the origin and the
already-forecasted cells ``M[r-h+1, 1], M[r-h+2, 2], ..., M[r-1, h-1]``
after it.  Column h therefore depends on column h-1 being complete, so
horizons are filled strictly in increasing order.

Horizon 1 has a direct path (``predict_all``) that prepends a backcast so
``y[0]`` has a defined look-back.  It is the canonical one-step operation
the rest of the engine trusts: ``M[t, 1]`` always equals the model's
direct one-step prediction.

Residuals
---------
The forecaster owns the one-step residual vector (length ``m + 1``, slot 0
is the sentinel for the backcast slot).  It is reset by ``train()`` and
filled by ``predict_all()``.  Moving-average models read it through
``series.shock(s)``.

Staleness
---------
``train()`` bumps ``generation``.  Matrices remember the generation they
were built at and ``forecast_at`` / ``test_f`` refuse stale ones.  The
rolling primitive ``forecast()`` re-stamps the matrix it writes to.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Sequence

import numpy as np

from ts_forecaster.backtest.metrics import QoF, QoFAggregator
from ts_forecaster.engine.matrix import ForecastMatrix
from ts_forecaster.engine.protocols import OneStepModel, parameter_count
from ts_forecaster.engine.series import (
    BackcastSeries,
    ClampedSeries,
    DiagonalSeries,
    to_array,
    weighted_backcast,
)
from ts_forecaster.exceptions import (
    AlignmentError,
    HorizonError,
    NotTrainedError,
    NumericalDegeneracyError,
    StaleForecastMatrixError,
)

if TYPE_CHECKING:
    from ts_forecaster.config import ForecastConfig

logger = logging.getLogger(__name__)


class RecursiveForecaster:
    """Drive a one-step model across horizons via the forecast matrix.

    Attributes:
        model:         The composed one-step model.
        backcast_lags: Number of leading observations used for the backcast.
    """

    def __init__(
        self,
        model: OneStepModel,
        config: "ForecastConfig | None" = None,
    ) -> None:
        self.model = model
        self.backcast_lags = config.backcast_lags if config is not None else 2
        self._generation = 0
        self._residuals = np.zeros(1, dtype=np.float64)

    # ── Properties ────────────────────────────────────────────────────────────

    @property
    def generation(self) -> int:
        """Incremented by every ``train()``."""
        return self._generation

    @property
    def parameter_count(self) -> int:
        return parameter_count(self.model)

    def residuals(self) -> np.ndarray:
        """One-step residuals ``y[t] - yp[t]`` (sentinel slot dropped)."""
        return self._residuals[1:].copy()

    def history(self, y: Sequence[float] | np.ndarray, t: int) -> ClampedSeries:
        """View of ``y[0..t]`` carrying the current residuals as shocks."""
        return ClampedSeries(to_array(y)[: t + 1], self._residuals)

    # ── Training ──────────────────────────────────────────────────────────────

    def train(self, y: Sequence[float] | np.ndarray, start: int = 0) -> None:
        """Train the model on ``y`` and invalidate residuals and matrices.

        ``start`` is the offset of ``y`` within the full series.
        """
        arr = to_array(y)
        self.model.train(arr, start=start)
        self._generation += 1
        self._residuals = np.zeros(arr.size + 1, dtype=np.float64)
        logger.debug(
            "Trained %s | n=%d generation=%d", self.model.name, arr.size, self._generation
        )

    def refresh_residuals(self, y: Sequence[float] | np.ndarray, upto: int | None = None) -> None:
        """Recompute one-step residuals for ``y[:upto]`` with the current fit."""
        self._require_trained()
        arr = to_array(y)
        n = arr.size if upto is None else upto
        self._residuals = np.zeros(arr.size + 1, dtype=np.float64)
        view = BackcastSeries(arr, weighted_backcast(arr, self.backcast_lags), self._residuals)
        for t in range(n):
            self._residuals[t + 1] = arr[t] - self._predict(t - 1, view, row=t, h=1)

    # ── Horizon 1 ─────────────────────────────────────────────────────────────

    def predict_all(
        self,
        y: Sequence[float] | np.ndarray,
        matrix: ForecastMatrix | None = None,
    ) -> tuple[np.ndarray, ForecastMatrix]:
        """Fill column 1 with one-step predictions for every row 0..m.

        Row 0 is predicted from the backcast.  Row ``m`` is the one-step
        forecast past the end of history.

        Args:
            y:      The observed series.
            matrix: Matrix to fill; a fresh ``h_max = 1`` matrix if None.

        Returns:
            ``(yp, matrix)`` where ``yp`` has the same length as ``y``.
        """
        self._require_trained()
        arr = to_array(y)
        m = arr.size
        if matrix is None:
            matrix = ForecastMatrix(arr, 1, generation=self._generation)
        elif matrix.m != m:
            raise AlignmentError(m, matrix.m, context="predict_all")

        self._residuals = np.zeros(m + 1, dtype=np.float64)
        view = BackcastSeries(arr, weighted_backcast(arr, self.backcast_lags), self._residuals)
        col = matrix.values[:, 1]
        for t in range(m + 1):
            col[t] = self._predict(t - 1, view, row=t, h=1)
            if t < m:
                self._residuals[t + 1] = arr[t] - col[t]

        return col[:m].copy(), matrix

    # ── Horizons >= 2 ─────────────────────────────────────────────────────────

    def forecast_at(
        self,
        matrix: ForecastMatrix,
        y: Sequence[float] | np.ndarray,
        h: int,
    ) -> np.ndarray:
        """Fill column ``h`` (h >= 2) by diagonal recursion.

        Requires column ``h - 1`` to be complete.

        Returns:
            The reachable part of column ``h``: rows ``h-1 .. m-1+h``.
        """
        if h < 2:
            raise HorizonError(h, minimum=2)
        matrix.check_horizon(h, minimum=2)
        self._require_trained()
        self._check_fresh(matrix)
        arr = to_array(y)
        if arr.size != matrix.m:
            raise AlignmentError(arr.size, matrix.m, context="forecast_at")

        for r in matrix.reachable_rows(h):
            view = DiagonalSeries(matrix, r, h, self._residuals)
            matrix.values[r, h] = self._predict(r - 1, view, row=r, h=h)

        logger.debug("Filled horizon %d | rows=%d..%d", h, h - 1, matrix.m - 1 + h)
        return matrix.values[h - 1 : matrix.m + h, h].copy()

    def forecast_all(self, y: Sequence[float] | np.ndarray, h_max: int) -> ForecastMatrix:
        """Build the complete forecast matrix for horizons 1..h_max."""
        if h_max < 1:
            raise HorizonError(h_max)
        self._require_trained()
        arr = to_array(y)
        matrix = ForecastMatrix(arr, h_max, generation=self._generation)
        self.predict_all(arr, matrix)
        for h in range(2, h_max + 1):
            self.forecast_at(matrix, arr, h)
        logger.info(
            "Forecast matrix built | model=%s m=%d h_max=%d",
            self.model.name, matrix.m, h_max,
        )
        return matrix

    def forecast(
        self,
        t: int,
        matrix: ForecastMatrix,
        y: Sequence[float] | np.ndarray,
        h: int,
    ) -> np.ndarray:
        """Forecast horizons 1..h from origin ``t`` and write them down the diagonal.

        Writes ``M[t+k, k]`` for ``k = 1..h``.  Values up to the origin are read
        from the matrix actual column, so only ``y[0..t]`` is visible to the model.

        Returns:
            ``yd`` of length ``h`` with ``yd[k-1] = M[t+k, k]``.
        """
        if h < 1:
            raise HorizonError(h)
        matrix.check_horizon(h)
        self._require_trained()
        arr = to_array(y)
        if not 0 <= t < arr.size:
            raise ValueError(f"Forecast origin t={t} is outside the series (m={arr.size}).")

        matrix.generation = self._generation
        yd = np.zeros(h, dtype=np.float64)
        for k in range(1, h + 1):
            r = t + k
            view = DiagonalSeries(matrix, r, k, self._residuals)
            yd[k - 1] = matrix.values[r, k] = self._predict(r - 1, view, row=r, h=k)
        return yd

    # ── Testing ───────────────────────────────────────────────────────────────

    def test(self, y: Sequence[float] | np.ndarray) -> tuple[np.ndarray, QoF]:
        """In-sample one-step predictions and their QoF."""
        arr = to_array(y)
        yp, _ = self.predict_all(arr)
        qof = _diagnose(arr, yp, self.parameter_count)
        return yp, qof

    def test_f(
        self,
        matrix: ForecastMatrix,
        h: int,
        y: Sequence[float] | np.ndarray | None = None,
    ) -> tuple[np.ndarray, np.ndarray, QoF]:
        """QoF of the h-step forecasts in ``matrix``.

        Aligns ``y[h-1:]`` with ``M[h-1:m, h]``.  The actuals come from the
        matrix column 0 unless ``y`` is given.

        Returns:
            ``(actual, forecast, qof)``.

        Raises:
            AlignmentError: ``y[h-1:]`` and the forecast column differ in length.
        """
        matrix.check_horizon(h)
        self._check_fresh(matrix)
        yy, yfh = matrix.aligned(h)
        if y is not None:
            yy = to_array(y)[h - 1 :].copy()
            if yy.size != yfh.size:
                raise AlignmentError(yy.size, yfh.size, context=f"test_f horizon {h}")
        qof = _diagnose(yy, yfh, self.parameter_count)
        return yy, yfh, qof

    # ── Internals ─────────────────────────────────────────────────────────────

    def _require_trained(self) -> None:
        if not self.model.is_trained:
            raise NotTrainedError(self.model.name)

    def _check_fresh(self, matrix: ForecastMatrix) -> None:
        if matrix.generation != self._generation:
            raise StaleForecastMatrixError(matrix.generation, self._generation)

    def _predict(self, t: int, series, row: int, h: int) -> float:
        value = float(self.model.predict(t, series))
        if not math.isfinite(value):
            raise NumericalDegeneracyError(
                f"Model '{self.model.name}' produced {value} for row {row}, horizon {h}."
            )
        return value


def _diagnose(actual: np.ndarray, forecast: np.ndarray, n_params: int) -> QoF:
    agg = QoFAggregator()
    agg.reset_df(n_params, max(1, actual.size - n_params))
    return agg.diagnose(actual, forecast)
