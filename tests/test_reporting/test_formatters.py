"""Tests for ts_forecaster.reporting.formatters."""

from __future__ import annotations

import numpy as np

from ts_forecaster.backtest.rolling import roll_validate
from ts_forecaster.engine.matrix import ForecastMatrix
from ts_forecaster.engine.recursive import RecursiveForecaster
from ts_forecaster.models.baselines import RandomWalk
from ts_forecaster.reporting.formatters import (
    format_correlogram,
    format_forecast_matrix,
    format_qof_table,
    format_rolling_summary,
)


# ── format_qof_table ──────────────────────────────────────────────────────────


def test_qof_table_header_and_rows() -> None:
    """One line per horizon under the title."""
    rows = [
        {"horizon": 1, "rsq": 0.5, "rmse": 1.25},
        {"horizon": 2, "rsq": 0.25, "rmse": 2.0},
    ]
    out = format_qof_table(rows, fields=("rsq", "rmse"), title="Fit")
    assert "=== Fit ===" in out
    assert "rsq" in out and "rmse" in out
    assert "1.25" in out


def test_qof_table_missing_and_infinite_values() -> None:
    """None prints as n/a; -inf prints literally."""
    rows = [{"horizon": 1, "mape": None, "aic": float("-inf")}]
    out = format_qof_table(rows, fields=("mape", "aic"))
    assert "n/a" in out
    assert "-inf" in out


def test_qof_table_interval_columns() -> None:
    """Interval columns are appended only when the rows carry them."""
    rows = [{"horizon": 1, "rsq": 0.9, "picp": 0.8, "pinaw": 0.3, "iscore": 1.2}]
    out = format_qof_table(rows, fields=("rsq",))
    assert "picp" in out and "pinaw" in out and "iscore" in out
    assert "picp" not in format_qof_table([{"horizon": 1, "rsq": 0.9}], fields=("rsq",))


def test_qof_table_empty() -> None:
    """Empty input prints a placeholder instead of a header."""
    assert "(no horizons evaluated)" in format_qof_table([])


# ── format_forecast_matrix ────────────────────────────────────────────────────


def test_forecast_matrix_marks_unreachable_cells() -> None:
    """Cells outside the reachable band print as '.'."""
    matrix = ForecastMatrix([1.0, 2.0, 3.0], 2)
    out = format_forecast_matrix(matrix)
    assert "=== Forecast Matrix ===" in out
    assert "h=1" in out and "h=2" in out
    lines = out.splitlines()
    first_row = next(line for line in lines if line.strip().startswith("0 "))
    assert first_row.rstrip().endswith(".")


def test_forecast_matrix_row_limit() -> None:
    """Only the last max_rows rows are printed."""
    matrix = ForecastMatrix(np.arange(10.0), 3)
    out = format_forecast_matrix(matrix, max_rows=4)
    assert "rows 9..12" in out


# ── format_rolling_summary ────────────────────────────────────────────────────


def test_rolling_summary(noisy20: np.ndarray) -> None:
    """Header block names the model and split, followed by the QoF table."""
    forecaster = RecursiveForecaster(RandomWalk())
    forecaster.train(noisy20)
    result = roll_validate(forecaster, noisy20, retrain_cycle=1, max_horizon=2, test_size=5)
    out = format_rolling_summary(result)
    assert "=== Rolling Validation ===" in out
    assert "random_walk" in out
    assert "15 / 5" in out
    assert "Out-of-sample QoF by Horizon" in out


# ── format_correlogram ────────────────────────────────────────────────────────


def test_correlogram_marks_significant_values() -> None:
    """Values beyond the bound carry a '*'."""
    rows = [{"lag": 1, "acf": 0.5, "pacf": 0.1}]
    out = format_correlogram(rows, 0.3)
    assert "=== Correlogram ===" in out
    assert "0.5000*" in out
    assert "0.1000*" not in out
    assert "+/-0.3000" in out
