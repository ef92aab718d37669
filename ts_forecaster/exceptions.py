"""
Exception types raised by the forecasting engine and models.

Every class subclasses a built-in so callers can catch either the precise
type or the broad family (``ValueError``, ``RuntimeError``, ...).

Taxonomy
--------
Precondition violations
  ``HorizonError`` (bad horizon), ``NotTrainedError`` (predict before
  train), ``StaleForecastMatrixError`` (matrix built before a retrain).
  These are raised immediately; nothing is clamped or defaulted.

Numerical degeneracy
  ``NumericalDegeneracyError`` is raised instead of letting NaN or inf
  propagate into downstream statistics.

Alignment mismatch
  ``AlignmentError`` is an ``AssertionError``: a length disagreement after
  trimming means the diagonal indexing is wrong.  Never catch it.

None of these are retried.
"""

from __future__ import annotations


class HorizonError(ValueError):
    """Raised when a forecasting horizon is outside the valid range.

    Attributes:
        horizon: The rejected horizon.
        minimum: The smallest horizon accepted by the operation.
    """

    def __init__(self, horizon: int, minimum: int = 1, maximum: int | None = None) -> None:
        self.horizon = horizon
        self.minimum = minimum
        self.maximum = maximum
        if maximum is not None and horizon > maximum:
            msg = f"Horizon h={horizon} exceeds the matrix maximum h_max={maximum}."
        else:
            msg = f"Horizon h={horizon} is invalid; must be >= {minimum}."
        super().__init__(msg)


class NotTrainedError(RuntimeError):
    """Raised when a model is asked to predict before ``train()`` was called.

    Attributes:
        model_name: Name of the untrained model.
    """

    def __init__(self, model_name: str) -> None:
        self.model_name = model_name
        super().__init__(
            f"Model '{model_name}' has not been trained.  "
            "Call train() before predicting or forecasting."
        )


class StaleForecastMatrixError(RuntimeError):
    """Raised when a forecast matrix predates the model's latest ``train()``.

    Attributes:
        matrix_generation:     Generation stamped on the matrix.
        forecaster_generation: Current generation of the forecaster.
    """

    def __init__(self, matrix_generation: int, forecaster_generation: int) -> None:
        self.matrix_generation = matrix_generation
        self.forecaster_generation = forecaster_generation
        super().__init__(
            f"Forecast matrix is stale (built at generation {matrix_generation}, "
            f"model is at generation {forecaster_generation}).  "
            "Rebuild it with forecast_all() after retraining."
        )


class AlignmentError(AssertionError):
    """Raised when actual and forecast vectors disagree in length."""

    def __init__(self, actual_len: int, forecast_len: int, context: str = "") -> None:
        self.actual_len = actual_len
        self.forecast_len = forecast_len
        where = f" in {context}" if context else ""
        super().__init__(
            f"Alignment mismatch{where}: actual has {actual_len} values, "
            f"forecast has {forecast_len}."
        )


class NumericalDegeneracyError(ArithmeticError):
    """Raised for NaN/inf results or rank-deficient inputs."""
