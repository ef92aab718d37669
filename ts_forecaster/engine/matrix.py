"""
The forecast matrix: one row per time step, one column per horizon.

Layout for a series of length ``m`` and maximum horizon ``h_max``::

    rows    m + h_max           (room for forecasts past the end of history)
    col 0   actual y[t]         (0 for t >= m)
    col k   k-step forecast of y[t], made at origin t - k     (1 <= k <= h_max)
    col -1  time index t

Reachable cells in column k are rows ``k - 1 .. m - 1 + k``.  Row ``k - 1``
is the first forecastable row (its origin is the backcast slot t = -1).
Everything above it (the top-right triangle) and below ``m - 1 + k`` (the
bottom-left triangle) is not forecastable and stays 0.

Each matrix is stamped with the ``generation`` of the forecaster that built
it.  Retraining bumps the forecaster's generation so stale matrices can be
detected.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from ts_forecaster.engine.series import to_array
from ts_forecaster.exceptions import HorizonError


class ForecastMatrix:
    """Dense ``(m + h_max) x (h_max + 2)`` table of actuals and forecasts.

    Attributes:
        values:     The underlying float64 array (writable).
        m:          Length of the observed series.
        h_max:      Largest horizon the matrix holds.
        generation: Forecaster generation this matrix was built for.
    """

    def __init__(
        self,
        y: Sequence[float] | np.ndarray,
        h_max: int,
        generation: int = 0,
    ) -> None:
        if h_max < 1:
            raise HorizonError(h_max)
        arr = to_array(y)
        self.m = arr.size
        self.h_max = h_max
        self.generation = generation
        self.values = np.zeros((self.m + h_max, h_max + 2), dtype=np.float64)
        self.values[: self.m, 0] = arr
        self.values[:, -1] = np.arange(self.m + h_max, dtype=np.float64)

    @property
    def shape(self) -> tuple[int, int]:
        return self.values.shape

    @property
    def actual(self) -> np.ndarray:
        return self.values[: self.m, 0]

    @property
    def time_index(self) -> np.ndarray:
        return self.values[:, -1]

    def check_horizon(self, h: int, minimum: int = 1) -> None:
        """Raise ``HorizonError`` unless ``minimum <= h <= h_max``."""
        if h < minimum or h > self.h_max:
            raise HorizonError(h, minimum=minimum, maximum=self.h_max)

    def column(self, h: int) -> np.ndarray:
        """Return a view of horizon column ``h``."""
        self.check_horizon(h)
        return self.values[:, h]

    def reachable_rows(self, h: int) -> range:
        """Rows of column ``h`` that hold a forecast."""
        self.check_horizon(h)
        return range(h - 1, self.m + h)

    def unreachable_mask(self) -> np.ndarray:
        """Boolean mask of the cells that must stay at the 0 sentinel."""
        rows = np.arange(self.values.shape[0])[:, None]
        cols = np.arange(1, self.h_max + 1)[None, :]
        mask = np.zeros(self.values.shape, dtype=bool)
        mask[:, 1 : self.h_max + 1] = (rows < cols - 1) | (rows > self.m - 1 + cols)
        return mask

    def aligned(self, h: int) -> tuple[np.ndarray, np.ndarray]:
        """Return ``(actual, forecast)`` over the rows where both exist.

        ``actual = y[h-1:]`` and ``forecast = M[h-1:m, h]``.
        """
        self.check_horizon(h)
        return self.values[h - 1 : self.m, 0].copy(), self.values[h - 1 : self.m, h].copy()

    def copy(self) -> "ForecastMatrix":
        clone = ForecastMatrix.__new__(ForecastMatrix)
        clone.m = self.m
        clone.h_max = self.h_max
        clone.generation = self.generation
        clone.values = self.values.copy()
        return clone

    def __repr__(self) -> str:
        return (
            f"ForecastMatrix(m={self.m}, h_max={self.h_max}, "
            f"generation={self.generation})"
        )
