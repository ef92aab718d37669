"""
ts_forecaster.reporting: terminal formatting and flat-file export.

Modules:
  formatters : ASCII tables for Typer CLI commands (QoF, matrix, rolling, ACF).
  export     : CSV/JSON export helpers and the forecast-matrix row adapter.
"""
