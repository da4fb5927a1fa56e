"""Tabular views of calculation results.

``results_to_csv`` writes the flat CSV used by the export button and the sweep
download: header from the first record's keys, values as plain numbers,
strings quoted by the ``csv`` module only where needed, ``\\n`` line
terminator.  Nested values (the year ledger) have no flat representation and
are left out of the header.

``ledger_frame`` / ``results_frame`` hand the same data to pandas for charting
and analysis.
"""

from __future__ import annotations

import csv
import io
import math
from enum import Enum
from typing import Any, Iterable, List, Mapping

import pandas as pd


def _is_nested(value: Any) -> bool:
    return isinstance(value, (list, tuple, dict))


def _format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer() and abs(value) < 1e16:
            return str(int(value))
        return repr(value)
    return str(value)


def _as_records(results: Mapping[str, Any] | Iterable[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    if isinstance(results, Mapping):
        return [results]
    return list(results)


def results_to_csv(results: Mapping[str, Any] | Iterable[Mapping[str, Any]]) -> str:
    """Render one result bundle or a list of sweep records as CSV text.

    Returns an empty string for an empty list.
    """
    records = _as_records(results)
    if not records:
        return ""

    headers = [key for key, value in records[0].items() if not _is_nested(value)]
    buf = io.StringIO()
    w = csv.DictWriter(buf, fieldnames=headers, extrasaction="ignore", lineterminator="\n")
    w.writeheader()
    for record in records:
        w.writerow({h: _format_value(record.get(h)) for h in headers})
    return buf.getvalue()


def ledger_frame(result: Mapping[str, Any] | Iterable[Mapping[str, Any]]) -> pd.DataFrame:
    """Year ledger as a DataFrame (one row per year, ``year`` column first)."""
    if isinstance(result, Mapping):
        rows = result.get("YearlyBreakdown") or []
    else:
        rows = list(result)
    return pd.DataFrame(list(rows))


def results_frame(records: Iterable[Mapping[str, Any]]) -> pd.DataFrame:
    """Sweep records (or result bundles) as a DataFrame without nested columns."""
    flat = [{k: v for k, v in rec.items() if not _is_nested(v)} for rec in records]
    return pd.DataFrame(flat)
