#!/usr/bin/env python3
"""Ledger / totals consistency checks over a deterministic scenario grid.

For every combination of scenario mode, tax regime, amortization schedule,
yield, appreciation and horizon, assert that:

- the ledger has one row per year and balances chain from row to row
- balances never go negative and interest stops once the loan is repaid
- per-year columns sum to the scalar totals
- ResultValue == TotalRentalCost - TotalPurchaseCost, and the final row's
  to-date columns equal the totals exactly
- the reformed tax regime zeroes every owner tax component
- re-running on the echoed inputs reproduces the totals and verdict

Run:
  python -m swissrbv.qa.qa_invariants
"""

from __future__ import annotations

import itertools
import math
import sys
from pathlib import Path
from typing import Any, Dict, Iterator, List

# Ensure repo root is on sys.path regardless of where this script is invoked from.
_REPO_ROOT = Path(__file__).resolve().parents[2]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

SUM_TOL = 1e-6

_BASE: Dict[str, Any] = {
    "purchasePrice": 1_500_000.0,
    "downPayment": 300_000.0,
    "mortgageRate": 0.015,
    "annualMaintenanceCosts": 18_000.0,
    "totalRenovations": 50_000.0,
    "additionalPurchaseCosts": 30_000.0,
    "imputedRentalValue": 33_000.0,
    "propertyTaxDeductions": 9_000.0,
    "marginalTaxRate": 0.28,
    "monthlyRent": 4_200.0,
    "annualRentalCosts": 3_600.0,
}


def scenario_grid() -> Iterator[Dict[str, Any]]:
    modes = ("EQUAL_CONSUMPTION", "EQUAL_SAVINGS", "CASHFLOW_PARITY")
    reforms = (False, True)
    schedules = ((15, 24_000.0), (10, 150_000.0), (0, 0.0))
    yields = (0.03, -0.02)
    apprecs = (0.01, -0.03)
    terms = (1, 10, 25)
    for mode, reform, (ay, amort), y, g, n in itertools.product(modes, reforms, schedules, yields, apprecs, terms):
        yield {
            **_BASE,
            "scenarioMode": mode,
            "postReform": reform,
            "amortizationYears": ay,
            "annualAmortization": amort,
            "investmentYieldRate": y,
            "propertyAppreciationRate": g,
            "termYears": n,
        }


def _close(a: float, b: float, tol: float = SUM_TOL) -> bool:
    return math.isclose(a, b, rel_tol=1e-9, abs_tol=tol)


def check_result(params: Dict[str, Any], result: Dict[str, Any]) -> List[str]:
    """Return a list of invariant violations for one calculation."""
    from swissrbv.core.engine import calculate, echoed_params

    errs: List[str] = []
    rows = result["YearlyBreakdown"]
    n = int(params["termYears"])

    if len(rows) != n:
        errs.append(f"ledger length {len(rows)} != termYears {n}")
        return errs

    mortgage = params["purchasePrice"] - params["downPayment"]
    if rows[0]["startingBalance"] != mortgage:
        errs.append("row 1 startingBalance != mortgage amount")
    for prev, row in zip(rows, rows[1:]):
        if row["startingBalance"] != prev["endingBalance"]:
            errs.append(f"year {row['year']}: startingBalance does not chain")

    repaid = False
    for row in rows:
        if row["endingBalance"] < 0.0:
            errs.append(f"year {row['year']}: negative endingBalance")
        if repaid and (row["annualInterest"] != 0.0 or row["endingBalance"] != 0.0):
            errs.append(f"year {row['year']}: interest after full repayment")
        if row["endingBalance"] == 0.0:
            repaid = True
        if params["postReform"] and (row["taxImputedRent"] or row["taxSavingsInterest"] or row["taxSavingsPropertyExpenses"]):
            errs.append(f"year {row['year']}: owner tax components under post-reform regime")

    sums = {
        "InterestCosts": sum(r["annualInterest"] for r in rows),
        "AmortizationCosts": sum(r["annualAmortization"] for r in rows),
        "SupplementalMaintenanceCosts": sum(r["annualMaintenance"] for r in rows),
        "GeneralCostOfRental": sum(r["annualRent"] + r["annualRentalCosts"] for r in rows),
    }
    for key, total in sums.items():
        if not _close(total, result[key]):
            errs.append(f"sum of ledger {key} {total:,.6f} != {result[key]:,.6f}")

    if result["ResultValue"] != result["TotalRentalCost"] - result["TotalPurchaseCost"]:
        errs.append("ResultValue != TotalRentalCost - TotalPurchaseCost")
    last = rows[-1]
    if last["totalPurchaseCostToDate"] != result["TotalPurchaseCost"]:
        errs.append("final totalPurchaseCostToDate != TotalPurchaseCost")
    if last["totalRentalCostToDate"] != result["TotalRentalCost"]:
        errs.append("final totalRentalCostToDate != TotalRentalCost")
    if last["cumulativeAdvantage"] != result["ResultValue"]:
        errs.append("final cumulativeAdvantage != ResultValue")

    again = calculate(echoed_params(result))
    for key in ("TotalPurchaseCost", "TotalRentalCost", "ResultValue"):
        if not _close(again[key], result[key]):
            errs.append(f"echoed re-run changed {key}: {result[key]:,.6f} -> {again[key]:,.6f}")
    if again["Decision"] != result["Decision"]:
        errs.append("echoed re-run changed Decision")

    return errs


def main(argv: list[str] | None = None) -> None:
    from swissrbv.core.engine import calculate

    checked = 0
    failures: List[str] = []
    for params in scenario_grid():
        result = calculate(params)
        checked += 1
        for err in check_result(params, result):
            label = f"{params['scenarioMode']}/reform={params['postReform']}/n={params['termYears']}/amort={params['annualAmortization']:g}"
            failures.append(f"{label}: {err}")

    if failures:
        print(f"\n[INVARIANTS FAILED] {len(failures)} violation(s)")
        for f in failures[:50]:
            print(f" - {f}")
        raise SystemExit(1)

    print(f"[INVARIANTS OK] {checked} scenario(s) checked")


if __name__ == "__main__":
    main()
