"""
Export helpers for forecast matrices and QoF tables.

All functions write to disk and return the written ``Path``.  They accept
generic ``list[dict]`` data to stay decoupled from specific result shapes.

CSV exports are flat (no nested dicts) so they load directly in Excel or
pandas without any pre-processing step.

``matrix_to_records()`` is the main adapter: one row per time step with
``actual`` and ``h1..hN`` columns, unreachable cells left empty.
"""

from __future__ import annotations

import csv
import json
import math
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ts_forecaster.engine.matrix import ForecastMatrix


def export_to_csv(
    records: list[dict],
    path: Path,
    fieldnames: list[str] | None = None,
) -> Path:
    """Write ``records`` to a UTF-8 CSV file.

    Args:
        records:    List of row dicts.
        path:       Destination file path (parent dirs created if missing).
        fieldnames: Column order.  If None, uses the keys of the first record.

    Returns:
        ``path`` as written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if not records:
        path.write_text("", encoding="utf-8")
        return path
    cols = fieldnames or list(records[0].keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=cols, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(records)
    return path


def _json_safe(value: object) -> object:
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_json_safe(v) for v in value]
    return value


def export_to_json(
    data: dict | list,
    path: Path,
) -> Path:
    """Write ``data`` to a pretty-printed JSON file.

    Non-finite floats (an ``aic`` of ``-inf`` on a perfect fit) are written
    as ``null`` so the output stays strict JSON.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(_json_safe(data), indent=2, default=str), encoding="utf-8")
    return path


def matrix_to_records(matrix: "ForecastMatrix") -> list[dict]:
    """Flatten a forecast matrix into one row per time step.

    Each row has ``t``, ``actual`` (None past the end of history) and
    ``h1``..``h{h_max}`` (None for unreachable cells).
    """
    mask = matrix.unreachable_mask()
    rows: list[dict] = []
    for r in range(matrix.values.shape[0]):
        row: dict = {
            "t": int(matrix.values[r, -1]),
            "actual": float(matrix.values[r, 0]) if r < matrix.m else None,
        }
        for k in range(1, matrix.h_max + 1):
            row[f"h{k}"] = None if mask[r, k] else float(matrix.values[r, k])
        rows.append(row)
    return rows
