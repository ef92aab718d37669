"""
Quality-of-fit (QoF) statistics for aligned (actual, forecast) vectors.

Degrees of freedom
------------------
Every statistic that adjusts for model size needs the current degrees of
freedom: ``dfm`` (model) and ``df`` (residual).  They change with the
retrain window and the lag order, so ``QoFAggregator.reset_df(dfm, df)``
must be called before every ``diagnose()``; calling ``diagnose()`` first
is an error.

Statistics
----------
With ``e = y - yp`` over ``m`` aligned points:

  sse      sum(e^2)
  sst      sum((y - mean(y))^2)
  rsq      1 - sse / sst                    (0 when sst = 0)
  rsq_bar  1 - (1 - rsq) * r_df,  r_df = (dfm + df) / df  (df > 1)
                                        = dfm + 1         (otherwise)
  sde      sample standard deviation of e
  mse0     sse / m
  rmse     sqrt(mse0)
  mae      mean |e|
  smape    100 * mean(2|e| / (|y| + |yp|))
  f_stat   (ssr / dfm) / (sse / df)
  aic      -2 ll + 2 (dfm + 1)  with the Gaussian log-likelihood ll
  bic      aic + (dfm + 1)(ln m - 2)
  mape     100 * mean(|e| / |y|) over non-zero y  (None if all y are 0)
  mase     mae / mae of the naive one-step forecast on y
  smape_ic smape + 2 (dfm + 1) / m

The ``+ 1`` on ``dfm`` in the information criteria counts the residual
variance as an estimated parameter.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Sequence

import numpy as np

from ts_forecaster.engine.intervals import IntervalMetrics
from ts_forecaster.exceptions import AlignmentError

SMAPE_IC_PENALTY = 2.0

# Column order for horizon x statistic tables.
QOF_FIELDS: tuple[str, ...] = (
    "rsq", "rsq_bar", "sst", "sse", "sde", "mse0", "rmse", "mae", "smape",
    "m", "dfm", "df", "f_stat", "aic", "bic", "mape", "mase", "smape_ic",
)


@dataclass(frozen=True)
class QoF:
    """Quality-of-fit record for one (actual, forecast) comparison.

    Attributes are described in the module docstring.  ``interval`` is set
    only when bounds were supplied to ``diagnose()``.
    """

    rsq: float
    rsq_bar: float
    sst: float
    sse: float
    sde: float
    mse0: float
    rmse: float
    mae: float
    smape: float
    m: int
    dfm: float
    df: float
    f_stat: float
    aic: float
    bic: float
    mape: float | None
    mase: float
    smape_ic: float
    interval: IntervalMetrics | None = field(default=None)

    def to_dict(self) -> dict[str, float | int | None]:
        """Flat dict of every statistic (interval metrics inlined)."""
        row = {name: getattr(self, name) for name in QOF_FIELDS}
        if self.interval is not None:
            row.update(self.interval.to_dict())
        return row


class QoFAggregator:
    """Computes ``QoF`` records under explicitly set degrees of freedom."""

    def __init__(self) -> None:
        self._dfm: float | None = None
        self._df: float | None = None

    @property
    def dfm(self) -> float | None:
        return self._dfm

    @property
    def df(self) -> float | None:
        return self._df

    def reset_df(self, dfm: float, df: float) -> None:
        """Set model and residual degrees of freedom for the next ``diagnose``."""
        if dfm < 0:
            raise ValueError(f"Model degrees of freedom must be >= 0, got {dfm}.")
        if df < 1:
            raise ValueError(
                f"Residual degrees of freedom must be >= 1, got {df}; "
                "the evaluation window is too short for this model."
            )
        self._dfm = float(dfm)
        self._df = float(df)

    def diagnose(
        self,
        actual: Sequence[float] | np.ndarray,
        forecast: Sequence[float] | np.ndarray,
        interval: IntervalMetrics | None = None,
    ) -> QoF:
        """Compute a fresh ``QoF`` for aligned ``actual`` / ``forecast``."""
        if self._dfm is None or self._df is None:
            raise RuntimeError("reset_df() must be called before diagnose().")
        y = np.asarray(actual, dtype=np.float64)
        yp = np.asarray(forecast, dtype=np.float64)
        if y.size != yp.size:
            raise AlignmentError(y.size, yp.size, context="diagnose")
        if y.size < 2:
            raise ValueError(f"diagnose needs at least 2 points, got {y.size}.")

        dfm, df = self._dfm, self._df
        m = y.size
        e = y - yp
        sse = float(np.dot(e, e))
        sst = float(np.sum((y - y.mean()) ** 2))
        ssr = sst - sse
        mse0 = sse / m
        mae = float(np.mean(np.abs(e)))

        rsq = 1.0 - sse / sst if sst > 0 else 0.0
        r_df = (dfm + df) / df if df > 1 else dfm + 1.0
        mse = sse / df
        msr = ssr / dfm if dfm > 0 else 0.0
        if mse > 0:
            f_stat = msr / mse
        else:
            f_stat = math.inf if msr > 0 else 0.0

        s2 = float(np.var(e))
        if s2 > 0:
            ll = -m / 2.0 * (math.log(2.0 * math.pi) + math.log(s2) + mse0 / s2)
            aic = -2.0 * ll + 2.0 * (dfm + 1.0)
        else:
            aic = -math.inf
        bic = aic + (dfm + 1.0) * (math.log(m) - 2.0)

        nz = y != 0
        mape = float(100.0 * np.mean(np.abs(e[nz]) / np.abs(y[nz]))) if nz.any() else None

        denom = np.abs(y) + np.abs(yp)
        ratio = np.divide(2.0 * np.abs(e), denom, out=np.zeros_like(e), where=denom > 0)
        smape = float(100.0 * np.mean(ratio))

        naive = float(np.mean(np.abs(np.diff(y))))
        if naive > 0:
            mase = mae / naive
        else:
            mase = math.inf if mae > 0 else 0.0

        return QoF(
            rsq=rsq,
            rsq_bar=1.0 - (1.0 - rsq) * r_df,
            sst=sst,
            sse=sse,
            sde=float(np.std(e, ddof=1)),
            mse0=mse0,
            rmse=math.sqrt(mse0),
            mae=mae,
            smape=smape,
            m=m,
            dfm=dfm,
            df=df,
            f_stat=f_stat,
            aic=aic,
            bic=bic,
            mape=mape,
            mase=mase,
            smape_ic=smape + SMAPE_IC_PENALTY * (dfm + 1.0) / m,
            interval=interval,
        )


def qof_table(qofs: Sequence[QoF], start_horizon: int = 1) -> list[dict]:
    """Horizon x statistic table: one row dict per QoF, keyed by ``horizon``."""
    return [
        {"horizon": start_horizon + i, **q.to_dict()}
        for i, q in enumerate(qofs)
    ]
