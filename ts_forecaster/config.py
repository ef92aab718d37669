"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``     : committed static defaults
  2. ``config/local.toml``       : optional local overrides (gitignored)
  3. ``.env``                    : local env overrides (gitignored)
  4. Environment variables       : ``TS_FORECASTER_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

Models, the forecaster and the rolling validator receive the relevant
sub-config in their constructors; nothing reads a shared mutable table of
hyper-parameters at run time.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Callable, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

from ts_forecaster.backtest.splits import TE_RATIO_MAX, TE_RATIO_MIN

# ── Sub-config models ─────────────────────────────────────────────────────────


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = ""
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class ForecastConfig(BaseModel):
    """Recursive forecasting settings."""

    model_config = ConfigDict(frozen=True)

    max_horizon: int = 3
    backcast_lags: int = 2

    @field_validator("max_horizon", "backcast_lags")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"must be >= 1, got {v}.")
        return v


class RollingConfig(BaseModel):
    """Walk-forward validation parameters."""

    model_config = ConfigDict(frozen=True)

    te_ratio: float = 0.2
    retrain_cycle: int = 1
    tolerance: float = 1e-6

    @field_validator("te_ratio")
    @classmethod
    def validate_te_ratio(cls, v: float) -> float:
        if not TE_RATIO_MIN < v < TE_RATIO_MAX:
            raise ValueError(f"te_ratio must be in ({TE_RATIO_MIN}, {TE_RATIO_MAX}), got {v}.")
        return v

    @field_validator("retrain_cycle")
    @classmethod
    def validate_retrain_cycle(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"retrain_cycle must be >= 1, got {v}.")
        return v

    @field_validator("tolerance")
    @classmethod
    def validate_tolerance(cls, v: float) -> float:
        if v <= 0.0:
            raise ValueError(f"tolerance must be > 0, got {v}.")
        return v


class IntervalConfig(BaseModel):
    """Prediction interval settings."""

    model_config = ConfigDict(frozen=True)

    confidence: float = 0.9
    method: str = "normal"

    @field_validator("confidence")
    @classmethod
    def validate_confidence(cls, v: float) -> float:
        if not 0.0 < v < 1.0:
            raise ValueError(f"confidence must be in (0.0, 1.0), got {v}.")
        return v

    @field_validator("method")
    @classmethod
    def validate_method(cls, v: str) -> str:
        if v not in {"normal", "empirical"}:
            raise ValueError(f"method must be 'normal' or 'empirical', got '{v}'.")
        return v


class ModelsConfig(BaseModel):
    """Per-family model defaults.

    Orders and window sizes are immutable here; pass a different
    ``ModelsConfig`` to build a differently shaped model.
    """

    model_config = ConfigDict(frozen=True)

    sma_q: int = 3
    wma_q: int = 3
    wma_u: float = 1.0
    ses_alpha: float = 0.5
    ses_optimize: bool = True
    ar_p: int = 1
    ar_method: str = "yule_walker"
    arma_p: int = 1
    arma_q: int = 1
    arima_d: int = 1
    sarima_period: int = 12
    sarima_seasonal_d: int = 1
    tree_lags: int = 4
    tree_estimators: int = 100
    tree_learning_rate: float = 0.1
    forest_bagging_fraction: float = 0.8
    kalman_process_var: float = 1.0
    kalman_obs_var: float = 1.0
    kalman_estimate: bool = True

    @field_validator("sma_q", "wma_q", "ar_p", "tree_lags", "tree_estimators", "sarima_period")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"must be >= 1, got {v}.")
        return v

    @field_validator("forest_bagging_fraction")
    @classmethod
    def validate_bagging_fraction(cls, v: float) -> float:
        if not 0.0 < v < 1.0:
            raise ValueError(f"must be in (0.0, 1.0), got {v}.")
        return v

    @field_validator("arma_p", "arma_q")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"must be >= 0, got {v}.")
        return v

    @field_validator("arima_d")
    @classmethod
    def validate_d(cls, v: int) -> int:
        if not 0 <= v <= 2:
            raise ValueError(f"arima_d must be in 0..2, got {v}.")
        return v

    @field_validator("sarima_seasonal_d")
    @classmethod
    def validate_seasonal_d(cls, v: int) -> int:
        if not 0 <= v <= 3:
            raise ValueError(f"sarima_seasonal_d must be in 0..3, got {v}.")
        return v

    @field_validator("wma_u", "ses_alpha")
    @classmethod
    def validate_unit(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"must be in [0.0, 1.0], got {v}.")
        return v

    @field_validator("ar_method")
    @classmethod
    def validate_ar_method(cls, v: str) -> str:
        if v not in {"yule_walker", "ols"}:
            raise ValueError(f"ar_method must be 'yule_walker' or 'ols', got '{v}'.")
        return v

    @field_validator("kalman_process_var", "kalman_obs_var")
    @classmethod
    def validate_variance(cls, v: float) -> float:
        if v <= 0.0:
            raise ValueError(f"variance must be > 0, got {v}.")
        return v


class AppConfig(BaseModel):
    """Complete application configuration.

    Constructed by ``load_config()`` which merges TOML + .env.
    """

    model_config = ConfigDict(frozen=True)

    logging: LoggingConfig = LoggingConfig()
    forecast: ForecastConfig = ForecastConfig()
    rolling: RollingConfig = RollingConfig()
    intervals: IntervalConfig = IntervalConfig()
    models: ModelsConfig = ModelsConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

# (env var, TOML section or None for top level, key, parser)
_ENV_OVERRIDES: tuple[tuple[str, Optional[str], str, Callable[[str], Any]], ...] = (
    ("TS_FORECASTER_LOG_LEVEL", "logging", "level", str),
    ("TS_FORECASTER_MAX_HORIZON", "forecast", "max_horizon", int),
    ("TS_FORECASTER_DEBUG", None, "debug", lambda s: s.lower() in ("1", "true", "yes")),
)

_SECTIONS: dict[str, type[BaseModel]] = {
    "logging": LoggingConfig,
    "forecast": ForecastConfig,
    "rolling": RollingConfig,
    "intervals": IntervalConfig,
    "models": ModelsConfig,
}


def _find_project_root() -> Path:
    """Nearest ancestor of this package holding ``pyproject.toml``."""
    here = Path(__file__).resolve().parent
    for candidate in (here, *here.parents[:4]):
        if (candidate / "pyproject.toml").exists():
            return candidate
    return here.parent


def _read_toml(path: Path) -> dict[str, Any]:
    with path.open("rb") as f:
        return tomllib.load(f)


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: TOML file to load.  ``config/default.toml`` under the
            project root when None.  A ``local.toml`` next to it is merged
            on top.

    Raises:
        FileNotFoundError: ``config_path`` does not exist.
        pydantic.ValidationError: A merged value fails validation.
    """
    root = _find_project_root()
    load_dotenv(dotenv_path=root / ".env", override=False)

    path = Path(config_path) if config_path is not None else root / "config" / "default.toml"
    if not path.exists():
        raise FileNotFoundError(
            f"Config file not found: {path}\n"
            "Create config/default.toml or pass --config."
        )

    raw = _read_toml(path)
    local = path.parent / "local.toml"
    if local.exists():
        raw = _deep_merge(raw, _read_toml(local))

    return _build_app_config(_apply_env_overrides(raw))


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = dict(base)
    for key, val in override.items():
        if isinstance(val, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], val)
        else:
            merged[key] = val
    return merged


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply the ``TS_FORECASTER_*`` variables listed in ``_ENV_OVERRIDES``."""
    for var, section, key, parse in _ENV_OVERRIDES:
        value = os.environ.get(var)
        if not value:
            continue
        target = raw if section is None else raw.setdefault(section, {})
        target[key] = parse(value)
    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Validate each TOML section into its sub-config."""
    project = raw.get("project", {})
    sections = {name: model(**raw.get(name, {})) for name, model in _SECTIONS.items()}
    return AppConfig(**sections, debug=raw.get("debug", project.get("debug", False)))
