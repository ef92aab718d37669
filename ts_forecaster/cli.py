"""
ts-forecaster: CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Load the input series and validate options.
  4. Train / forecast / validate.
  5. Report result to stdout (and optionally export).

Install and run::

    pip install -e .
    ts-forecaster --help
    ts-forecaster validate-config
    ts-forecaster list-models
    ts-forecaster forecast --input data/series.csv --model ar --horizon 3
    ts-forecaster roll-validate --input data/series.csv --model arma --retrain-cycle 5
    ts-forecaster correlogram --input data/series.csv --max-lag 12
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="ts-forecaster",
    help="Multi-horizon time-series forecasting and walk-forward validation.",
    add_completion=False,
)

# Errors reported as [ERROR] with exit code 1.  AlignmentError is an
# AssertionError and is included so a broken run never prints a traceback.
_RUN_ERRORS = (ValueError, ArithmeticError, RuntimeError, AssertionError, FileNotFoundError)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from pydantic import ValidationError

    from ts_forecaster.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except (ValidationError, ValueError) as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from ts_forecaster.utils.logging import configure_logging
    configure_logging(config.logging, debug=config.debug)


def _load_series_or_exit(input_file: str, column: Optional[str], exo: Optional[str] = None):
    from ts_forecaster.ingestion.series_file import load_series

    exo_columns = [c.strip() for c in exo.split(",") if c.strip()] if exo else None
    try:
        return load_series(Path(input_file), column=column, exo_columns=exo_columns)
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)


def _fail(exc: Exception) -> None:
    typer.echo(f"[ERROR] {type(exc).__name__}: {exc}", err=True)
    raise typer.Exit(code=1)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Max horizon:      {config.forecast.max_horizon}")
    typer.echo(f"  Backcast lags:    {config.forecast.backcast_lags}")
    typer.echo(f"  Test ratio:       {config.rolling.te_ratio}")
    typer.echo(f"  Retrain cycle:    {config.rolling.retrain_cycle}")
    typer.echo(f"  Intervals:        {config.intervals.method} @ {config.intervals.confidence}")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("list-models")
def list_models() -> None:
    """List the model families accepted by --model."""
    from ts_forecaster.models.registry import MODEL_NAMES

    typer.echo("Available models:")
    for name in MODEL_NAMES:
        typer.echo(f"  {name}")


@app.command("forecast")
def forecast(
    input_file: str = typer.Option(..., "--input", "-i", help="Series file (.csv or .json)."),
    model_name: str = typer.Option(..., "--model", "-m", help="Model family (see list-models)."),
    column: Optional[str] = typer.Option(None, "--column", help="CSV column holding the series."),
    exo: Optional[str] = typer.Option(None, "--exo", help="Comma-separated CSV exogenous columns."),
    horizon: Optional[int] = typer.Option(
        None, "--horizon", help="Max horizon. Uses config default if omitted."
    ),
    rows: int = typer.Option(20, "--rows", help="Matrix rows to print."),
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="Export the matrix (.csv) or matrix + QoF (.json)."
    ),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Train on the whole series and build the in-sample forecast matrix.

    Prints the last rows of the matrix and the QoF of every horizon.
    """
    from ts_forecaster.backtest.metrics import qof_table
    from ts_forecaster.engine.recursive import RecursiveForecaster
    from ts_forecaster.models.registry import build_model
    from ts_forecaster.reporting.export import export_to_csv, export_to_json, matrix_to_records
    from ts_forecaster.reporting.formatters import format_forecast_matrix, format_qof_table

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    data = _load_series_or_exit(input_file, column, exo)
    h_max = config.forecast.max_horizon if horizon is None else horizon

    try:
        model = build_model(model_name, config.models, exo=data.exo)
        forecaster = RecursiveForecaster(model, config.forecast)
        forecaster.train(data.y)
        matrix = forecaster.forecast_all(data.y, h_max)
        qofs = [forecaster.test_f(matrix, h)[2] for h in range(1, h_max + 1)]
    except _RUN_ERRORS as exc:
        _fail(exc)

    table = qof_table(qofs)
    typer.echo(f"Model: {model.name}  |  m={matrix.m}  |  h_max={h_max}")
    typer.echo(format_forecast_matrix(matrix, max_rows=rows))
    typer.echo(format_qof_table(table))

    if output:
        out = Path(output)
        if out.suffix.lower() == ".json":
            export_to_json(
                {"model": model.name, "qof": table, "matrix": matrix_to_records(matrix)}, out
            )
        else:
            export_to_csv(matrix_to_records(matrix), out)
        typer.echo(f"  Exported: {out}")

    typer.echo("")
    typer.echo("[OK] Forecast complete.")


@app.command("roll-validate")
def roll_validate_cmd(
    input_file: str = typer.Option(..., "--input", "-i", help="Series file (.csv or .json)."),
    model_name: str = typer.Option(..., "--model", "-m", help="Model family (see list-models)."),
    column: Optional[str] = typer.Option(None, "--column", help="CSV column holding the series."),
    exo: Optional[str] = typer.Option(None, "--exo", help="Comma-separated CSV exogenous columns."),
    horizon: Optional[int] = typer.Option(
        None, "--horizon", help="Max horizon. Uses config default if omitted."
    ),
    retrain_cycle: Optional[int] = typer.Option(
        None, "--retrain-cycle", help="Retrain every N steps. Uses config default if omitted."
    ),
    test_size: Optional[int] = typer.Option(
        None, "--test-size", help="Out-of-sample steps. Derived from te_ratio if omitted."
    ),
    intervals: bool = typer.Option(
        False, "--intervals", help="Add prediction-interval metrics to every horizon."
    ),
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="Export the QoF table (.csv or .json)."
    ),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Walk-forward validation: retrain on a sliding window and score every horizon."""
    from ts_forecaster.backtest.rolling import roll_validate
    from ts_forecaster.engine.intervals import build_estimator
    from ts_forecaster.engine.recursive import RecursiveForecaster
    from ts_forecaster.models.registry import build_model
    from ts_forecaster.reporting.export import export_to_csv, export_to_json
    from ts_forecaster.reporting.formatters import format_rolling_summary

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    data = _load_series_or_exit(input_file, column, exo)

    try:
        model = build_model(model_name, config.models, exo=data.exo)
        forecaster = RecursiveForecaster(model, config.forecast)
        forecaster.train(data.y)
        result = roll_validate(
            forecaster,
            data.y,
            retrain_cycle=config.rolling.retrain_cycle if retrain_cycle is None else retrain_cycle,
            max_horizon=config.forecast.max_horizon if horizon is None else horizon,
            test_size=test_size,
            te_ratio=config.rolling.te_ratio,
            tolerance=config.rolling.tolerance,
            estimator=build_estimator(config.intervals.method) if intervals else None,
            confidence=config.intervals.confidence,
        )
    except _RUN_ERRORS as exc:
        _fail(exc)

    typer.echo(format_rolling_summary(result))

    if output:
        out = Path(output)
        if out.suffix.lower() == ".json":
            export_to_json({"model": result.model_name, "qof": result.qof_table}, out)
        else:
            export_to_csv(result.qof_table, out)
        typer.echo(f"  Exported: {out}")

    typer.echo("")
    typer.echo("[OK] Rolling validation complete.")


@app.command("correlogram")
def correlogram(
    input_file: str = typer.Option(..., "--input", "-i", help="Series file (.csv or .json)."),
    column: Optional[str] = typer.Option(None, "--column", help="CSV column holding the series."),
    max_lag: int = typer.Option(10, "--max-lag", help="Largest lag to report."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Print sample ACF and PACF with the approximate 95% significance bound."""
    from ts_forecaster.models.correlogram import Correlogram
    from ts_forecaster.reporting.formatters import format_correlogram

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    data = _load_series_or_exit(input_file, column)

    corr = Correlogram()
    try:
        rows = corr.table(data.y, max_lag)
        suggested = corr.suggest_order(data.y, max_lag)
    except _RUN_ERRORS as exc:
        _fail(exc)

    typer.echo(format_correlogram(rows, corr.bound(data.y.size)))
    typer.echo(f"  Suggested AR order: {suggested}")


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()
