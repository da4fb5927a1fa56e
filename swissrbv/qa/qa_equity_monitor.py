#!/usr/bin/env python3
"""Negative-equity checks on engine ledgers.

Runs a few property-price paths through ``calculate`` and compares the
underwater years reported by ``detect_negative_equity`` against values worked
out by hand.

Run:
  python -m swissrbv.qa.qa_equity_monitor
"""
from __future__ import annotations

import sys
from pathlib import Path

_REPO_ROOT = Path(__file__).resolve().parents[2]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from typing import Any, Dict, List

from swissrbv.core.engine import calculate
from swissrbv.core.equity_monitor import EQUITY_COLUMN, detect_negative_equity, format_underwater_warning
from swissrbv.core.export import ledger_frame

# name -> (engine inputs, expected underwater years, still underwater at horizon)
CASES: Dict[str, tuple] = {
    "rising price": (
        {"purchasePrice": 2_000_000, "downPayment": 400_000, "propertyAppreciationRate": 0.01},
        [],
        False,
    ),
    # Interest-only with 10 % down: 5 % yearly losses eat the equity in year 3.
    "falling price, no amortization": (
        {
            "purchasePrice": 1_000_000,
            "downPayment": 100_000,
            "amortizationYears": 0,
            "annualAmortization": 0,
            "propertyAppreciationRate": -0.05,
            "termYears": 5,
        },
        [3, 4, 5],
        True,
    ),
    # Amortization overtakes the shrinking losses in year 5.
    "falling price, recovered": (
        {
            "purchasePrice": 1_000_000,
            "downPayment": 10_000,
            "propertyAppreciationRate": -0.10,
            "amortizationYears": 10,
            "annualAmortization": 80_000,
            "termYears": 10,
        },
        [1, 2, 3, 4],
        False,
    ),
}


def _check_case(name: str, params: Dict[str, Any], expected_years: List[int], at_horizon: bool) -> List[str]:
    failures: List[str] = []
    result = calculate(params)
    analysis = detect_negative_equity(result)

    if analysis["underwater_years"] != expected_years:
        failures.append(f"{name}: underwater years {analysis['underwater_years']} != {expected_years}")
    if analysis["underwater_at_horizon"] is not at_horizon:
        failures.append(f"{name}: underwater_at_horizon={analysis['underwater_at_horizon']}")
    if analysis["equity_at_horizon"] != result["YearlyBreakdown"][-1][EQUITY_COLUMN]:
        failures.append(f"{name}: equity_at_horizon does not match the final ledger row")

    # Same answer when equity has to be rebuilt from value and balance.
    rebuilt = detect_negative_equity(ledger_frame(result).drop(columns=[EQUITY_COLUMN]))
    if rebuilt["underwater_years"] != analysis["underwater_years"]:
        failures.append(f"{name}: rebuilt equity gives {rebuilt['underwater_years']}")

    msg = format_underwater_warning(analysis)
    if (msg is None) == bool(expected_years):
        failures.append(f"{name}: warning {msg!r} does not match the scan")
    elif msg is not None and ("still underwater" in msg) is not at_horizon:
        failures.append(f"{name}: horizon sentence wrong in {msg!r}")
    return failures


def main(argv: list[str] | None = None) -> None:
    failures: List[str] = []
    for name, (params, years, at_horizon) in CASES.items():
        failures.extend(_check_case(name, params, years, at_horizon))

    deepest = detect_negative_equity(calculate(CASES["falling price, no amortization"][0]))["max_negative_equity"]
    if abs(deepest - (1_000_000 * 0.95 ** 5 - 900_000)) > 1e-6:
        failures.append(f"falling price: max_negative_equity {deepest}")

    empty = detect_negative_equity([])
    if empty["has_negative_equity"] or empty["equity_at_horizon"] is not None:
        failures.append(f"empty ledger: {empty}")

    if failures:
        print("\n[EQUITY MONITOR FAILED]")
        for f in failures:
            print(f" - {f}")
        raise SystemExit(1)

    print(f"[EQUITY MONITOR OK] {len(CASES)} price path(s)")


if __name__ == "__main__":
    main()
