"""
ARX: autoregression with lagged exogenous inputs.

    y[t+1] = b0 + sum_j phi_j y[t-j] + sum_k beta_k x[t, k]

``exo`` is an ``(n, k)`` matrix aligned to the FULL series, row ``i`` being
the inputs observed at time ``i``.  Training windows carry their offset
(``start``) so window position ``i`` reads exogenous row ``start + i``.

At predict time the exogenous row is clamped to ``min(origin, n - 1)``:
inputs after the forecast origin are not known yet, so multi-step
forecasts hold the last known inputs flat.
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np

from ts_forecaster.engine.series import as_series
from ts_forecaster.exceptions import NumericalDegeneracyError
from ts_forecaster.models.common import require_trained, training_window

logger = logging.getLogger(__name__)


class ARX:
    """Least-squares ARX(p) over ``y`` lags and lagged exogenous columns.

    Attributes:
        p:    Autoregressive order.
        exo:  Exogenous matrix, one row per time point of the full series.
        coef: ``[b0, phi_1..phi_p, beta_1..beta_k]`` once trained.
    """

    def __init__(self, p: int = 1, exo: Any = None) -> None:
        if p < 1:
            raise ValueError(f"p must be >= 1, got {p}.")
        if exo is None:
            raise ValueError("ARX requires an exogenous matrix.")
        x = np.asarray(exo, dtype=np.float64)
        if x.ndim == 1:
            x = x.reshape(-1, 1)
        if x.ndim != 2 or x.shape[0] == 0:
            raise ValueError(f"exo must be a non-empty (n, k) matrix, got shape {x.shape}.")
        self.p = p
        self.exo = x
        self.coef: np.ndarray | None = None

    @property
    def name(self) -> str:
        return f"arx({self.p},{self.exo.shape[1]})"

    @property
    def is_trained(self) -> bool:
        return self.coef is not None

    def _exo_row(self, i: int, origin: int) -> np.ndarray:
        return self.exo[min(max(i, 0), max(min(origin, self.exo.shape[0] - 1), 0))]

    def train(self, y: Any, start: int = 0) -> None:
        n_cols = 1 + self.p + self.exo.shape[1]
        arr = training_window(y, max(self.p + 2, n_cols + 1), "ARX")
        if start + arr.size > self.exo.shape[0]:
            raise ValueError(
                f"exo has {self.exo.shape[0]} rows; window [{start}, {start + arr.size}) "
                "runs past it."
            )
        rows = []
        for t in range(arr.size - 1):
            lags = [arr[max(t - j, 0)] for j in range(self.p)]
            rows.append(np.concatenate([[1.0], lags, self.exo[start + t]]))
        design = np.vstack(rows)
        if not np.all(np.isfinite(design)):
            raise NumericalDegeneracyError("ARX design matrix contains NaN or infinite values.")
        coef, _res, rank, _sv = np.linalg.lstsq(design, arr[1:], rcond=None)
        if rank < design.shape[1] or not np.all(np.isfinite(coef)):
            raise NumericalDegeneracyError(
                f"ARX design matrix is rank deficient (rank {rank} < {design.shape[1]})."
            )
        self.coef = coef
        logger.debug("Trained %s | start=%d coef=%s", self.name, start, np.array2string(coef, precision=4))

    def predict(self, t: int, series: Any) -> float:
        require_trained(self)
        view = as_series(series)
        b0, phi, beta = self.coef[0], self.coef[1 : 1 + self.p], self.coef[1 + self.p :]
        pred = float(b0) + sum(float(c) * view[t - j] for j, c in enumerate(phi))
        return pred + float(np.dot(beta, self._exo_row(t, view.origin)))

    def parameter_vector(self) -> np.ndarray:
        return self.coef.copy() if self.coef is not None else np.zeros(0)
