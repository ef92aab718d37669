"""
Train/test boundary arithmetic for walk-forward validation.

Split structure (fixed-size sliding window)
-------------------------------------------
Given a series of length ``m``::

  test_size  = floor(m * te_ratio + 0.5 + 0.5)   (round half up of the share + 0.5)
  train_size = m - test_size

Out-of-sample step ``i`` (0 <= i < test_size) forecasts from origin
``t - 1`` where ``t = train_size + i``.  When the model is retrained at
step ``i`` it sees exactly ``y[i : t]``: the window slides forward and
keeps its length ``train_size``.

Why a fixed window instead of an expanding one?
-----------------------------------------------
An expanding window lets early history dominate every refit.  The fixed
window favours recency and adapts to regime change, at the price of more
variance in the fitted parameters.  It is kept as an explicit contract
because changing it silently changes the accuracy figures.

Leakage prevention
------------------
Every training window ends at ``t - 1``, the forecast origin, so no value
at or after the forecast target is ever seen during training.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

DEFAULT_TE_RATIO = 0.2
TE_RATIO_MIN = 0.05
TE_RATIO_MAX = 0.95


@dataclass(frozen=True)
class RollingSplit:
    """Sizes of the in-sample and out-of-sample parts of a series.

    Attributes:
        m:          Total series length.
        train_size: Length of every training window.
        test_size:  Number of out-of-sample steps.
    """

    m: int
    train_size: int
    test_size: int

    def window(self, i: int) -> tuple[int, int]:
        """Half-open training window ``[i, train_size + i)`` for step ``i``."""
        if not 0 <= i < self.test_size:
            raise IndexError(f"Step {i} outside 0..{self.test_size - 1}.")
        return i, self.train_size + i

    def origin(self, i: int) -> int:
        """Forecast origin (last visible index) for step ``i``."""
        return self.train_size + i - 1


def default_test_size(m: int, te_ratio: float = DEFAULT_TE_RATIO) -> int:
    """Test-window length for a series of ``m`` points, rounded up."""
    # m * te_ratio + 0.5, rounded half up
    return math.floor(m * te_ratio + 1.0)


def rolling_split(m: int, test_size: int | None = None, te_ratio: float = DEFAULT_TE_RATIO) -> RollingSplit:
    """Compute the rolling split for a series of length ``m``.

    Raises:
        ValueError: If ``te_ratio`` is outside the open interval
            ``(TE_RATIO_MIN, TE_RATIO_MAX)`` or either side of the split
            would be empty.
    """
    if not TE_RATIO_MIN < te_ratio < TE_RATIO_MAX:
        raise ValueError(
            f"te_ratio must be in ({TE_RATIO_MIN}, {TE_RATIO_MAX}), got {te_ratio}."
        )
    size = default_test_size(m, te_ratio) if test_size is None else test_size
    if size < 1:
        raise ValueError(f"test_size must be >= 1, got {size}.")
    if m - size < 1:
        raise ValueError(f"test_size={size} leaves no training data in a series of {m} points.")
    return RollingSplit(m=m, train_size=m - size, test_size=size)
