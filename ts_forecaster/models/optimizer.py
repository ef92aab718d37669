"""
Pluggable numerical optimizer for models fitted by minimizing an objective.

Models that need one (ARMA-family conditional sum of squares, exponential
smoothing, the Kalman variance estimate) take any object with
``minimize(objective, x0) -> ndarray``.  ``ScipyOptimizer`` is the default
implementation: quasi-Newton BFGS, switching to L-BFGS-B when bounds are
given.
"""

from __future__ import annotations

import logging
from typing import Callable, Sequence

import numpy as np
from scipy.optimize import minimize

from ts_forecaster.exceptions import NumericalDegeneracyError

logger = logging.getLogger(__name__)


class ScipyOptimizer:
    """``scipy.optimize.minimize`` behind the ``Optimizer`` interface."""

    def __init__(
        self,
        bounds: Sequence[tuple[float | None, float | None]] | None = None,
        tol: float = 1e-8,
        max_iter: int = 500,
    ) -> None:
        self.bounds = list(bounds) if bounds is not None else None
        self.tol = tol
        self.max_iter = max_iter

    @property
    def method(self) -> str:
        return "L-BFGS-B" if self.bounds is not None else "BFGS"

    def minimize(
        self, objective: Callable[[np.ndarray], float], x0: np.ndarray
    ) -> np.ndarray:
        """Return the minimizing vector.

        Raises:
            NumericalDegeneracyError: The optimum contains NaN or inf.
        """
        res = minimize(
            objective,
            np.asarray(x0, dtype=np.float64),
            method=self.method,
            bounds=self.bounds,
            tol=self.tol,
            options={"maxiter": self.max_iter},
        )
        if not res.success:
            logger.debug("Optimizer did not converge | method=%s msg=%s", self.method, res.message)
        x = np.asarray(res.x, dtype=np.float64)
        if not np.all(np.isfinite(x)):
            raise NumericalDegeneracyError(f"Optimizer returned non-finite parameters {x}.")
        return x
