#!/usr/bin/env python3
"""Golden regression snapshots for the Swiss rent-vs-buy engine.

Purpose
- Catch unintended model/output drift via a small set of canonical scenarios.
- These are not unit tests for every formula; they are end-to-end sanity anchors.

Run
  python -m swissrbv.qa.qa_golden

Notes
- Totals are asserted within a one-centime tolerance.
- If you intentionally change core math/assumptions, re-baseline by running:
      python -m swissrbv.qa.qa_golden --print-baseline
  and then copy the printed dict into _EXPECTED.
"""

from __future__ import annotations

import argparse
import pprint
import sys
from pathlib import Path
from typing import Any, Dict

# Ensure repo root is on sys.path regardless of where this script is invoked from.
_REPO_ROOT = Path(__file__).resolve().parents[2]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

TOL = 0.01

BASELINE: Dict[str, Any] = {
    "purchasePrice": 2_000_000,
    "downPayment": 400_000,
    "mortgageRate": 0.012,
    "termYears": 10,
    "amortizationYears": 10,
    "annualAmortization": 32_000,
    "annualMaintenanceCosts": 20_000,
    "totalRenovations": 0,
    "additionalPurchaseCosts": 0,
    "imputedRentalValue": 42_900,
    "propertyTaxDeductions": 13_000,
    "marginalTaxRate": 0.25,
    "propertyAppreciationRate": 0.01,
    "monthlyRent": 5_500,
    "annualRentalCosts": 2_000,
    "investmentYieldRate": 0.03,
    "scenarioMode": "EQUAL_CONSUMPTION",
    "postReform": False,
}

SCENARIOS: Dict[str, Dict[str, Any]] = {
    "baseline": dict(BASELINE),
    "fully_amortised_mid_term": {**BASELINE, "annualAmortization": 200_000},
    "post_reform": {**BASELINE, "postReform": True},
    "equal_savings": {**BASELINE, "scenarioMode": "EQUAL_SAVINGS"},
}

_METRICS = ("ResultValue", "TotalPurchaseCost", "TotalRentalCost", "InterestCosts", "AmortizationCosts")

# === Golden expected totals ===
_EXPECTED: Dict[str, Dict[str, Any]] = {
    "baseline": {
        "AmortizationCosts": 320_000.0,
        "Decision": "BUY",
        "InterestCosts": 174_720.0,
        "ResultValue": 380_279.3370191712,
        "TotalPurchaseCost": -237_845.88875682,
        "TotalRentalCost": 142_433.4482623512,
    },
    "fully_amortised_mid_term": {
        "AmortizationCosts": 1_600_000.0,
        "Decision": "BUY",
        "InterestCosts": 86_400.0,
        "ResultValue": 446_519.3370191724,
        "TotalPurchaseCost": -304_085.8887568212,
        "TotalRentalCost": 142_433.4482623512,
    },
    "post_reform": {
        "AmortizationCosts": 320_000.0,
        "Decision": "BUY",
        "InterestCosts": 174_720.0,
        "ResultValue": 411_349.3370191712,
        "TotalPurchaseCost": -268_915.88875682,
        "TotalRentalCost": 142_433.4482623512,
    },
    "equal_savings": {
        "AmortizationCosts": 320_000.0,
        "Decision": "BUY",
        "InterestCosts": 174_720.0,
        "ResultValue": 25_146.2335438752,
        "TotalPurchaseCost": -249_556.923248587,
        "TotalRentalCost": -224_410.6897047118,
    },
}


def _run_case(params: Dict[str, Any]) -> Dict[str, Any]:
    from swissrbv.core.engine import calculate

    result = calculate(params)
    out: Dict[str, Any] = {k: float(result[k]) for k in _METRICS}
    out["Decision"] = result["Decision"]
    return out


def main(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser(description="Golden regression snapshots.")
    ap.add_argument("--print-baseline", action="store_true", help="Print current metrics instead of asserting.")
    args = ap.parse_args(argv)

    actual = {name: _run_case(params) for name, params in SCENARIOS.items()}

    if args.print_baseline:
        pprint.pprint(actual, width=100)
        return

    failures: list[str] = []
    for name, expected in _EXPECTED.items():
        got = actual[name]
        for key, want in expected.items():
            have = got.get(key)
            if isinstance(want, str):
                if have != want:
                    failures.append(f"{name}.{key}: expected {want!r}, got {have!r}")
            elif abs(float(have) - float(want)) > TOL:
                failures.append(f"{name}.{key}: expected {want:,.4f}, got {float(have):,.4f}")

    if failures:
        print("\n[GOLDEN FAILED]")
        for f in failures:
            print(f" - {f}")
        raise SystemExit(1)

    print(f"[GOLDEN OK] {len(_EXPECTED)} scenario(s) within CHF {TOL}")


if __name__ == "__main__":
    main()
