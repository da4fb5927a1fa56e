"""Negative-equity scan over the year ledger.

Owner equity is ``propertyValueEndOfYear - endingBalance``.  With a falling
property price it can drop below zero while the engine still assumes the owner
keeps the property and pays the mortgage; the CLI reports such years on stderr.
"""
from __future__ import annotations

from typing import Any, Iterable, Mapping

import pandas as pd

EQUITY_COLUMN = "homeownerEquityEndOfYear"


def _to_frame(ledger: pd.DataFrame | Mapping[str, Any] | Iterable[Mapping[str, Any]] | None) -> pd.DataFrame:
    if ledger is None:
        return pd.DataFrame()
    if isinstance(ledger, pd.DataFrame):
        return ledger
    if isinstance(ledger, Mapping):
        return pd.DataFrame(list(ledger.get("YearlyBreakdown") or []))
    return pd.DataFrame(list(ledger))


def _equity_series(df: pd.DataFrame) -> pd.Series | None:
    if EQUITY_COLUMN in df.columns:
        return pd.to_numeric(df[EQUITY_COLUMN], errors="coerce")
    if {"propertyValueEndOfYear", "endingBalance"} <= set(df.columns):
        value = pd.to_numeric(df["propertyValueEndOfYear"], errors="coerce")
        return value - pd.to_numeric(df["endingBalance"], errors="coerce")
    return None


def detect_negative_equity(ledger) -> dict[str, Any]:
    """Scan a year ledger for years where the mortgage exceeds the property value.

    ``ledger`` may be a result bundle (its ``YearlyBreakdown`` is used), a list
    of ledger rows or a DataFrame.  Equity is read from
    ``homeownerEquityEndOfYear`` or, failing that, recomputed from
    ``propertyValueEndOfYear`` and ``endingBalance``.  Rows are numbered by
    their ``year`` column when present, else 1-based.

    Returns:
        ``has_negative_equity``, ``first_underwater_year`` (None if never),
        ``underwater_years`` (list of years), ``years_underwater``,
        ``pct_years_underwater``, ``max_negative_equity`` (most negative
        equity, 0.0 if never underwater), ``equity_at_horizon`` and
        ``underwater_at_horizon``.
    """
    df = _to_frame(ledger)
    equity = None if df.empty else _equity_series(df)
    if equity is None:
        return {
            "has_negative_equity": False,
            "first_underwater_year": None,
            "underwater_years": [],
            "years_underwater": 0,
            "pct_years_underwater": 0.0,
            "max_negative_equity": 0.0,
            "equity_at_horizon": None,
            "underwater_at_horizon": False,
        }

    if "year" in df.columns:
        years = pd.to_numeric(df["year"], errors="coerce")
    else:
        years = pd.Series(range(1, len(df) + 1), index=df.index)

    mask = equity < 0
    underwater = [int(y) for y in years[mask]]
    horizon = float(equity.iloc[-1])
    return {
        "has_negative_equity": bool(underwater),
        "first_underwater_year": underwater[0] if underwater else None,
        "underwater_years": underwater,
        "years_underwater": len(underwater),
        "pct_years_underwater": len(underwater) / len(df),
        "max_negative_equity": float(equity[mask].min()) if underwater else 0.0,
        "equity_at_horizon": horizon,
        "underwater_at_horizon": horizon < 0,
    }


def format_underwater_warning(analysis: Mapping[str, Any]) -> str | None:
    """One-line warning for an underwater owner, or None."""
    if not analysis.get("has_negative_equity"):
        return None

    msg = (
        f"The mortgage exceeds the property value for {analysis['years_underwater']} year(s). "
        f"First occurring in year {analysis['first_underwater_year']}, "
        f"with a maximum deficit of CHF {abs(analysis['max_negative_equity']):,.0f}."
    )
    if analysis["underwater_at_horizon"]:
        msg += " The owner is still underwater at the end of the relevant time frame."
    return msg
