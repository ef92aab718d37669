"""
Tests for ts_forecaster.config.

What we test
------------
1. The committed default.toml loads and validates.
2. An explicit TOML file and a sibling local.toml are merged.
3. TS_FORECASTER_* environment variables override TOML values.
4. Invalid values raise pydantic.ValidationError; a missing file raises
   FileNotFoundError.
5. Config objects are immutable.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from ts_forecaster.config import AppConfig, ModelsConfig, RollingConfig, load_config


# ── Fixtures ──────────────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("TS_FORECASTER_LOG_LEVEL", "TS_FORECASTER_MAX_HORIZON", "TS_FORECASTER_DEBUG"):
        monkeypatch.delenv(var, raising=False)


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


# ── Loading ───────────────────────────────────────────────────────────────────

def test_default_config_loads() -> None:
    config = load_config()
    assert isinstance(config, AppConfig)
    assert config.forecast.max_horizon == 3
    assert config.rolling.te_ratio == pytest.approx(0.2)
    assert config.models.ar_method == "yule_walker"


def test_explicit_file_and_local_override(tmp_path: Path) -> None:
    cfg = _write(tmp_path / "app.toml", "[forecast]\nmax_horizon = 5\n[rolling]\nretrain_cycle = 4\n")
    _write(tmp_path / "local.toml", "[rolling]\nretrain_cycle = 2\n")
    config = load_config(cfg)
    assert config.forecast.max_horizon == 5
    assert config.rolling.retrain_cycle == 2


def test_env_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    cfg = _write(tmp_path / "app.toml", "[logging]\nlevel = \"INFO\"\n")
    monkeypatch.setenv("TS_FORECASTER_MAX_HORIZON", "7")
    monkeypatch.setenv("TS_FORECASTER_LOG_LEVEL", "debug")
    monkeypatch.setenv("TS_FORECASTER_DEBUG", "true")
    config = load_config(cfg)
    assert config.forecast.max_horizon == 7
    assert config.logging.level == "DEBUG"
    assert config.debug is True


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.toml")


# ── Validation ────────────────────────────────────────────────────────────────

def test_invalid_te_ratio(tmp_path: Path) -> None:
    cfg = _write(tmp_path / "bad.toml", "[rolling]\nte_ratio = 1.5\n")
    with pytest.raises(ValidationError):
        load_config(cfg)


def test_invalid_values_rejected() -> None:
    with pytest.raises(ValidationError):
        RollingConfig(retrain_cycle=0)
    with pytest.raises(ValidationError):
        ModelsConfig(arima_d=3)
    with pytest.raises(ValidationError):
        ModelsConfig(ar_method="burg")


def test_config_is_frozen() -> None:
    config = ModelsConfig()
    with pytest.raises(ValidationError):
        config.ar_p = 4
