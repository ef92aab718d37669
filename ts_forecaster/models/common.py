"""Small helpers shared by the model implementations."""

from __future__ import annotations

from typing import Any

import numpy as np

from ts_forecaster.engine.series import to_array
from ts_forecaster.exceptions import NotTrainedError


def require_trained(model: Any) -> None:
    """Raise ``NotTrainedError`` unless ``model.is_trained``."""
    if not model.is_trained:
        raise NotTrainedError(model.name)


def training_window(y: Any, minimum: int, model_name: str) -> np.ndarray:
    """Validate a training window and return it as a float array.

    Raises:
        ValueError: Fewer than ``minimum`` observations, or non-finite values.
    """
    arr = to_array(y)
    if arr.size < minimum:
        raise ValueError(
            f"{model_name}.train() needs >= {minimum} observations; got {arr.size}."
        )
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{model_name}.train() received NaN or infinite values.")
    return arr
