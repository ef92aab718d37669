"""
Rolling (walk-forward) validation.

Procedure
---------
1. Split the series into ``train_size`` + ``test_size`` (see ``splits``).
2. Build the in-sample forecast matrix over the whole series with
   ``forecast_all``.  The loop below overwrites it going forward.
3. For every out-of-sample step ``i``, with ``t = train_size + i``:
     - every ``retrain_cycle`` steps, retrain on the fixed-size window
       ``y[i:t]`` and recompute residuals over ``y[:t]``;
     - one-step prediction ``yp[i] = model.predict(t - 1, y)``;
     - ``forecast(t - 1, ...)`` writes horizons 1..h down the diagonal
       starting at row ``t``;
     - ``yp[i]`` must equal the diagonal's first entry.
4. Reset the degrees of freedom from the parameter count and compute one
   QoF record per horizon over the test rows.

There is no partial result: any exception in a retrain or forecast step
aborts the run, because later steps depend on the matrix written by the
earlier ones.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from ts_forecaster.backtest.metrics import QoF, QoFAggregator, qof_table
from ts_forecaster.backtest.splits import DEFAULT_TE_RATIO, RollingSplit, rolling_split
from ts_forecaster.engine.intervals import IntervalEstimator, interval_metrics
from ts_forecaster.engine.matrix import ForecastMatrix
from ts_forecaster.engine.recursive import RecursiveForecaster
from ts_forecaster.engine.series import to_array
from ts_forecaster.exceptions import AlignmentError, HorizonError

log = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 1e-6


@dataclass(frozen=True)
class RollingResult:
    """Outcome of one ``roll_validate`` run.

    Attributes:
        model_name:    Name of the validated model.
        split:         Train/test sizes used.
        retrain_cycle: Steps between retrains.
        retrain_count: Number of retrains performed in the loop.
        max_horizon:   Largest horizon evaluated.
        predictions:   One-step out-of-sample predictions (length test_size).
        actual:        ``y[train_size:]``.
        matrix:        Forecast matrix after the loop.
        qofs:          One ``QoF`` per horizon 1..max_horizon.
    """

    model_name: str
    split: RollingSplit
    retrain_cycle: int
    retrain_count: int
    max_horizon: int
    predictions: np.ndarray
    actual: np.ndarray
    matrix: ForecastMatrix
    qofs: tuple[QoF, ...]

    @property
    def qof_table(self) -> list[dict]:
        return qof_table(self.qofs)

    def forecasts(self, h: int) -> np.ndarray:
        """Test-window forecasts for horizon ``h``."""
        self.matrix.check_horizon(h)
        return self.matrix.values[self.split.train_size : self.split.m, h].copy()

    def aligned_rows(self, h: int) -> list[dict]:
        """``(time, actual, forecast)`` rows for horizon ``h`` over the test window."""
        times = self.matrix.time_index[self.split.train_size : self.split.m]
        return [
            {"t": int(t), "actual": float(a), "forecast": float(f)}
            for t, a, f in zip(times, self.actual, self.forecasts(h))
        ]


def roll_validate(
    forecaster: RecursiveForecaster,
    y: Sequence[float] | np.ndarray,
    retrain_cycle: int,
    max_horizon: int,
    test_size: int | None = None,
    te_ratio: float = DEFAULT_TE_RATIO,
    tolerance: float = DEFAULT_TOLERANCE,
    estimator: IntervalEstimator | None = None,
    confidence: float = 0.9,
) -> RollingResult:
    """Walk-forward validation of an already trained forecaster.

    Args:
        forecaster:    Forecaster wrapping a trained model.
        y:             The full series.
        retrain_cycle: Retrain every this many steps (``rc``).
        max_horizon:   Evaluate horizons 1..max_horizon.
        test_size:     Out-of-sample steps; defaults from ``te_ratio``.
        te_ratio:      Share of the series used for testing.
        tolerance:     Allowed gap between the direct one-step prediction
                       and the first diagonal forecast.
        estimator:     Optional interval estimator; when given, every
                       horizon's QoF carries interval metrics.
        confidence:    Nominal coverage for the interval estimator.

    Returns:
        ``RollingResult`` with exactly ``max_horizon`` QoF records.

    Raises:
        ValueError:      ``retrain_cycle < 1`` or an empty split.
        HorizonError:    ``max_horizon < 1``.
        NotTrainedError: The forecaster's model was never trained.
    """
    if retrain_cycle < 1:
        raise ValueError(f"retrain_cycle must be >= 1, got {retrain_cycle}.")
    if max_horizon < 1:
        raise HorizonError(max_horizon)

    arr = to_array(y)
    split = rolling_split(arr.size, test_size=test_size, te_ratio=te_ratio)
    tr_size, te_size = split.train_size, split.test_size
    log.debug(
        "Rolling validation | model=%s m=%d train=%d test=%d rc=%d h=%d",
        forecaster.model.name, arr.size, tr_size, te_size, retrain_cycle, max_horizon,
    )

    matrix = forecaster.forecast_all(arr, max_horizon)

    yp = np.zeros(te_size, dtype=np.float64)
    retrains = 0
    for i in range(te_size):
        t = tr_size + i
        if i % retrain_cycle == 0:
            lo, hi = split.window(i)
            forecaster.train(arr[lo:hi], start=lo)
            retrains += 1
        # Shocks through y[t-1] under the current fit.
        forecaster.refresh_residuals(arr, upto=t)
        yp[i] = forecaster.model.predict(t - 1, forecaster.history(arr, t - 1))
        yd = forecaster.forecast(t - 1, matrix, arr, max_horizon)
        if not math.isclose(yp[i], yd[0], rel_tol=tolerance, abs_tol=tolerance):
            raise AssertionError(
                f"One-step prediction {yp[i]!r} disagrees with diagonal forecast "
                f"{yd[0]!r} at t={t}."
            )
        log.debug("Step %d | t=%d yp=%.6g yd=%s", i, t, yp[i], np.array2string(yd, precision=4))

    actual = arr[tr_size:].copy()
    df = max(1, forecaster.parameter_count - 1)
    agg = QoFAggregator()
    agg.reset_df(df, te_size - df)

    qofs: list[QoF] = []
    for k in range(1, max_horizon + 1):
        yfh = matrix.values[tr_size : arr.size, k]
        if yfh.size != actual.size:
            raise AlignmentError(actual.size, yfh.size, context=f"rolling horizon {k}")
        bands = None
        if estimator is not None:
            lower, upper = estimator.interval(actual, yfh, k, confidence)
            bands = interval_metrics(actual, lower, upper, confidence)
        qofs.append(agg.diagnose(actual, yfh, interval=bands))

    log.info(
        "Rolling validation complete | model=%s steps=%d retrains=%d h=%d",
        forecaster.model.name, te_size, retrains, max_horizon,
    )
    return RollingResult(
        model_name=forecaster.model.name,
        split=split,
        retrain_cycle=retrain_cycle,
        retrain_count=retrains,
        max_horizon=max_horizon,
        predictions=yp,
        actual=actual,
        matrix=matrix,
        qofs=tuple(qofs),
    )
