"""
Loader for series input files used by the CLI.

Two formats, detected by extension:

  .csv   Header row required.  The series is one numeric column, chosen by
         name (default: the first column).  ``exo_columns`` names further
         columns that form the exogenous matrix for ``arx``.

  .json  Either a bare list of numbers, or an object::

             {"y": [1.0, 2.0, ...], "exo": [[0.1, 3.0], [0.2, 2.9], ...]}

         ``exo`` is optional and must have one row per value of ``y``.

Every row is validated before anything is returned; a bad value raises
``ValueError`` naming the first offending row.
"""

from __future__ import annotations

import csv
import json
import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeriesData:
    """A loaded series and its optional exogenous matrix."""

    y: np.ndarray
    exo: np.ndarray | None = None
    name: str = "y"


def _to_float(raw: str, row: int, column: str) -> float:
    try:
        return float(raw)
    except (TypeError, ValueError):
        raise ValueError(f"Row {row}: column '{column}' is not numeric: {raw!r}") from None


def parse_series_csv(
    path: Path,
    column: str | None = None,
    exo_columns: list[str] | None = None,
) -> SeriesData:
    """Read one numeric column (and optional exogenous columns) from a CSV.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: Missing columns, non-numeric cells, or no data rows.
    """
    if not path.exists():
        raise FileNotFoundError(f"Series file not found: {path}")

    with open(path, encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        if not reader.fieldnames:
            raise ValueError(f"CSV file is empty or has no header row: {path}")

        target = column or reader.fieldnames[0]
        wanted = [target] + list(exo_columns or [])
        missing = [c for c in wanted if c not in reader.fieldnames]
        if missing:
            raise ValueError(
                f"CSV missing columns: {missing}\nFound columns: {list(reader.fieldnames)}"
            )

        values: list[float] = []
        exo_rows: list[list[float]] = []
        for row_num, row in enumerate(reader, start=2):
            values.append(_to_float(row[target], row_num, target))
            if exo_columns:
                exo_rows.append([_to_float(row[c], row_num, c) for c in exo_columns])

    if not values:
        raise ValueError(f"CSV file has no data rows: {path}")

    logger.debug("Loaded %d values from %s (column=%s)", len(values), path, target)
    exo = np.array(exo_rows, dtype=np.float64) if exo_columns else None
    return SeriesData(y=np.array(values, dtype=np.float64), exo=exo, name=target)


def parse_series_json(path: Path) -> SeriesData:
    """Read a series (and optional ``exo`` matrix) from a JSON file."""
    if not path.exists():
        raise FileNotFoundError(f"Series file not found: {path}")

    raw = json.loads(path.read_text(encoding="utf-8"))
    exo_raw = None
    if isinstance(raw, dict):
        if "y" not in raw:
            raise ValueError(f"JSON object must have a 'y' list: {path}")
        values, exo_raw = raw["y"], raw.get("exo")
    else:
        values = raw
    if not isinstance(values, list) or not values:
        raise ValueError(f"JSON series must be a non-empty list of numbers: {path}")

    y = np.array([_to_float(v, i, "y") for i, v in enumerate(values)], dtype=np.float64)
    exo = None
    if exo_raw is not None:
        exo = np.asarray(exo_raw, dtype=np.float64)
        if exo.ndim == 1:
            exo = exo.reshape(-1, 1)
        if exo.shape[0] != y.size:
            raise ValueError(
                f"'exo' has {exo.shape[0]} rows but 'y' has {y.size} values: {path}"
            )
    logger.debug("Loaded %d values from %s", y.size, path)
    return SeriesData(y=y, exo=exo)


def load_series(
    path: Path,
    column: str | None = None,
    exo_columns: list[str] | None = None,
) -> SeriesData:
    """Dispatch on the file extension (``.csv`` or ``.json``)."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return parse_series_csv(path, column, exo_columns)
    if suffix == ".json":
        return parse_series_json(path)
    raise ValueError(f"Unsupported input format '{suffix}'. Use .csv or .json.")
