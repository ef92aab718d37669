"""
Gradient-boosted and random-forest regression trees on a lag matrix.

Feature row for predicting ``y[t+1]``::

    [y[t], y[t-1], ..., y[t-lags+1]]

Indices below the start of the view clamp to the first value, as in every
other model, so the matrix has one row per training transition.

Trees cannot extrapolate: forecasts stay inside the range of the training
targets.  That makes this model a useful counterweight to the linear
family on series with regime shifts, and a poor one on trending series.
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Any

import numpy as np

from ts_forecaster.engine.series import as_series
from ts_forecaster.models.common import require_trained, training_window

logger = logging.getLogger(__name__)

MIN_TRAIN_ROWS = 10


class LagTreeModel:
    """LightGBM regressor over the last ``lags`` values.

    Attributes:
        lags:          Number of lagged values per feature row.
        MODEL_VERSION: Version string embedded in saved artifacts.
    """

    MODEL_VERSION = "v1.0.0"

    def __init__(
        self,
        lags: int = 3,
        n_estimators: int = 100,
        learning_rate: float = 0.1,
        num_leaves: int = 15,
        min_data_in_leaf: int = 2,
    ) -> None:
        if lags < 1:
            raise ValueError(f"lags must be >= 1, got {lags}.")
        self.lags = lags
        self._hyperparams: dict[str, Any] = {
            "n_estimators":     n_estimators,
            "learning_rate":    learning_rate,
            "num_leaves":       num_leaves,
            "min_data_in_leaf": min_data_in_leaf,
        }
        self._booster = None       # lgb.Booster; None until train()
        self._training_rows: int = 0
        self._trained_at: str = ""

    # ── Properties ────────────────────────────────────────────────────────────

    @property
    def name(self) -> str:
        return f"tree({self.lags})"

    @property
    def is_trained(self) -> bool:
        return self._booster is not None

    # ── Training ──────────────────────────────────────────────────────────────

    def _features(self, t: int, series: Any) -> list[float]:
        return [series[t - j] for j in range(self.lags)]

    def _lgb_params(self) -> dict[str, Any]:
        return {
            "objective":        "regression",
            "learning_rate":    self._hyperparams["learning_rate"],
            "num_leaves":       self._hyperparams["num_leaves"],
            "min_data_in_leaf": self._hyperparams["min_data_in_leaf"],
            "min_data_in_bin":  1,
            "verbose":          -1,
            "deterministic":    True,
            "num_threads":      1,
        }

    def train(self, y: Any, start: int = 0) -> None:
        """Fit the booster on every ``(lags, next value)`` pair in ``y``.

        Raises:
            ValueError: Fewer than 10 training rows.
        """
        import lightgbm as lgb

        arr = training_window(y, MIN_TRAIN_ROWS + 1, type(self).__name__)
        view = as_series(arr)
        x = np.array([self._features(t, view) for t in range(arr.size - 1)], dtype=np.float64)
        target = arr[1:]

        dtrain = lgb.Dataset(x, label=target, params={"min_data_in_bin": 1, "verbose": -1})
        self._booster = lgb.train(
            self._lgb_params(),
            dtrain,
            num_boost_round=self._hyperparams["n_estimators"],
        )
        self._training_rows = int(target.size)
        self._trained_at = date.today().isoformat()
        logger.debug("Trained %s | rows=%d", self.name, self._training_rows)

    # ── Inference ─────────────────────────────────────────────────────────────

    def predict(self, t: int, series: Any) -> float:
        require_trained(self)
        view = as_series(series)
        row = np.array([self._features(t, view)], dtype=np.float64)
        return float(self._booster.predict(row)[0])

    def parameter_vector(self) -> np.ndarray:
        """One entry per lag feature (the tree structure is not a vector)."""
        return np.zeros(self.lags)

    # ── Persistence ───────────────────────────────────────────────────────────

    def save(self, artifact_path: Path) -> None:
        """Serialize the booster to a joblib pickle file.

        Args:
            artifact_path: Target .pkl path. Parent directories are created.

        Raises:
            NotTrainedError: If the model has not been trained.
        """
        require_trained(self)

        import joblib

        artifact_path = Path(artifact_path)
        artifact_path.parent.mkdir(parents=True, exist_ok=True)
        joblib.dump(
            {
                "booster":       self._booster,
                "lags":          self.lags,
                "hyperparams":   self._hyperparams,
                "training_rows": self._training_rows,
                "model_version": self.MODEL_VERSION,
                "trained_at":    self._trained_at,
            },
            artifact_path,
        )
        logger.info("Model artifact saved: %s", artifact_path)

    @classmethod
    def load(cls, artifact_path: Path) -> "LagTreeModel":
        """Load a trained LagTreeModel written by ``save()``.

        Raises:
            FileNotFoundError: If artifact_path does not exist.
        """
        import joblib

        artifact_path = Path(artifact_path)
        if not artifact_path.exists():
            raise FileNotFoundError(f"Model artifact not found: {artifact_path}")

        state = joblib.load(artifact_path)
        inst = cls(lags=state["lags"], **state.get("hyperparams", {}))
        inst._booster       = state["booster"]
        inst._training_rows = state.get("training_rows", 0)
        inst._trained_at    = state.get("trained_at", "")
        logger.info(
            "Model artifact loaded: %s (lags=%d, trained=%s)",
            artifact_path, inst.lags, inst._trained_at,
        )
        return inst


class LagForestModel(LagTreeModel):
    """Random forest over the last ``lags`` values.

    Uses LightGBM's ``rf`` boosting: every tree is fit on a bootstrap-style
    row sample and the forecast is the average of the trees.

    Attributes:
        lags: Number of lagged values per feature row.
    """

    def __init__(
        self,
        lags: int = 3,
        n_estimators: int = 100,
        num_leaves: int = 15,
        min_data_in_leaf: int = 2,
        bagging_fraction: float = 0.8,
        seed: int = 0,
    ) -> None:
        if not 0.0 < bagging_fraction < 1.0:
            raise ValueError(f"bagging_fraction must be in (0.0, 1.0), got {bagging_fraction}.")
        super().__init__(
            lags,
            n_estimators=n_estimators,
            num_leaves=num_leaves,
            min_data_in_leaf=min_data_in_leaf,
        )
        # keys mirror __init__ so load() can rebuild the instance
        self._hyperparams = {
            "n_estimators":     n_estimators,
            "num_leaves":       num_leaves,
            "min_data_in_leaf": min_data_in_leaf,
            "bagging_fraction": bagging_fraction,
            "seed":             seed,
        }

    @property
    def name(self) -> str:
        return f"forest({self.lags})"

    def _lgb_params(self) -> dict[str, Any]:
        return {
            "objective":        "regression",
            "boosting":         "rf",
            "bagging_fraction": self._hyperparams["bagging_fraction"],
            "bagging_freq":     1,
            "num_leaves":       self._hyperparams["num_leaves"],
            "min_data_in_leaf": self._hyperparams["min_data_in_leaf"],
            "min_data_in_bin":  1,
            "seed":             self._hyperparams["seed"],
            "verbose":          -1,
            "deterministic":    True,
            "num_threads":      1,
        }
