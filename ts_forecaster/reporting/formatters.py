"""
ASCII terminal formatters for CLI commands.

All formatters accept plain rows / result objects and return multi-line
strings suitable for ``typer.echo()``.

No third-party dependencies (no ``rich``, no ``colorama``).

Unreachable cells
-----------------
``format_forecast_matrix()`` prints ``.`` for cells outside the reachable
band of each horizon column, so a zero forecast is never confused with a
cell that was never computed.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ts_forecaster.backtest.rolling import RollingResult
    from ts_forecaster.engine.matrix import ForecastMatrix

# Statistics shown in the compact QoF table (all fields go to exports).
SUMMARY_FIELDS: tuple[str, ...] = (
    "rsq", "rmse", "mae", "smape", "mape", "mase", "aic", "bic",
)


def _fmt(value: object, width: int = 10) -> str:
    if value is None:
        return f"{'n/a':>{width}}"
    if isinstance(value, float):
        if math.isinf(value):
            return f"{('-inf' if value < 0 else 'inf'):>{width}}"
        return f"{value:>{width}.4g}"
    return f"{value!s:>{width}}"


# ── QoF ───────────────────────────────────────────────────────────────────────


def format_qof_table(
    rows: list[dict],
    fields: tuple[str, ...] = SUMMARY_FIELDS,
    title: str = "Quality of Fit by Horizon",
) -> str:
    """Format a horizon x statistic table.

    Args:
        rows:   Output of ``qof_table()``: one dict per horizon with a
                ``horizon`` key plus statistic keys.
        fields: Statistic columns to show, in order.
        title:  Header line.

    Returns:
        Multi-line string.
    """
    lines: list[str] = ["", f"=== {title} ==="]
    if not rows:
        lines.append("  (no horizons evaluated)")
        return "\n".join(lines)

    # Interval columns appear only when the rows carry them.
    extra = [k for k in ("picp", "pinaw", "iscore") if k in rows[0]]
    cols = list(fields) + extra
    header = f"  {'h':>3}" + "".join(f"{c:>10}" for c in cols)
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))
    for row in rows:
        lines.append(
            f"  {row.get('horizon', ''):>3}" + "".join(_fmt(row.get(c)) for c in cols)
        )
    return "\n".join(lines)


# ── Forecast matrix ───────────────────────────────────────────────────────────


def format_forecast_matrix(matrix: "ForecastMatrix", max_rows: int = 20) -> str:
    """Format the last ``max_rows`` rows of a forecast matrix.

    Columns: time index, actual (blank past the end of history), then one
    column per horizon.
    """
    values = matrix.values
    mask = matrix.unreachable_mask()
    n_rows = values.shape[0]
    first = max(0, n_rows - max_rows)

    lines: list[str] = ["", "=== Forecast Matrix ==="]
    lines.append(f"  m={matrix.m}  h_max={matrix.h_max}  rows {first}..{n_rows - 1}")
    header = f"  {'t':>5}  {'actual':>10}" + "".join(
        f"{'h=' + str(k):>10}" for k in range(1, matrix.h_max + 1)
    )
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))
    for r in range(first, n_rows):
        actual = _fmt(float(values[r, 0])) if r < matrix.m else f"{'':>10}"
        cells = "".join(
            f"{'.':>10}" if mask[r, k] else _fmt(float(values[r, k]))
            for k in range(1, matrix.h_max + 1)
        )
        lines.append(f"  {int(values[r, -1]):>5}  {actual}{cells}")
    return "\n".join(lines)


# ── Rolling validation ────────────────────────────────────────────────────────


def format_rolling_summary(result: "RollingResult") -> str:
    """Header block plus the per-horizon QoF table of a rolling run."""
    split = result.split
    lines: list[str] = ["", "=== Rolling Validation ==="]
    lines.append(f"  Model:          {result.model_name}")
    lines.append(f"  Series length:  {split.m}")
    lines.append(f"  Train / test:   {split.train_size} / {split.test_size}")
    lines.append(f"  Retrain cycle:  {result.retrain_cycle} ({result.retrain_count} retrains)")
    lines.append(f"  Max horizon:    {result.max_horizon}")
    lines.append(format_qof_table(result.qof_table, title="Out-of-sample QoF by Horizon"))
    return "\n".join(lines)


# ── Correlogram ───────────────────────────────────────────────────────────────


def format_correlogram(rows: list[dict], bound: float) -> str:
    """Lag / ACF / PACF table; ``*`` marks values beyond ``bound``."""
    lines: list[str] = ["", "=== Correlogram ==="]
    lines.append(f"  Significance bound: +/-{bound:.4f}")
    header = f"  {'lag':>4}  {'acf':>9}   {'pacf':>9}"
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))
    for row in rows:
        a, p = row["acf"], row["pacf"]
        lines.append(
            f"  {row['lag']:>4}  {a:>9.4f}{'*' if abs(a) > bound else ' '}"
            f"  {p:>9.4f}{'*' if abs(p) > bound else ' '}"
        )
    return "\n".join(lines)
