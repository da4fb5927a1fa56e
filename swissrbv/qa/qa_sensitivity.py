#!/usr/bin/env python3
"""Sensitivity / dependency checks for the Swiss rent-vs-buy engine.

Goal:
- Perturb each input up and down around a baseline
- Assert that ResultValue moves, and in the expected direction where the
  direction is unambiguous (non-negative yields)
- Flag "dead inputs" (accepted by the engine but not affecting the result)

Run:
  python -m swissrbv.qa.qa_sensitivity

Notes:
- This is a wiring + regression test, not a full economic proof.
- Directional checks run in every scenario mode.
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure repo root is on sys.path regardless of where this script is invoked from.
_REPO_ROOT = Path(__file__).resolve().parents[2]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

import math
from typing import Any, Dict, List, Tuple

MONEY_EPS = 1.0          # CHF 1 threshold for "changed"

MODES = ("EQUAL_CONSUMPTION", "CASHFLOW_PARITY", "EQUAL_SAVINGS")

# (field, delta, expected sign of d(ResultValue)/d(field); 0 = must change, any direction)
CHECKS: List[Tuple[str, float, int]] = [
    ("propertyAppreciationRate", 0.005, +1),
    ("monthlyRent", 250.0, +1),
    ("annualRentalCosts", 500.0, +1),
    ("mortgageRate", 0.0025, -1),
    ("annualMaintenanceCosts", 2_000.0, -1),
    ("totalRenovations", 25_000.0, -1),
    ("additionalPurchaseCosts", 10_000.0, -1),
    ("investmentYieldRate", 0.005, -1),
    ("imputedRentalValue", 5_000.0, -1),
    ("propertyTaxDeductions", 2_000.0, +1),
    ("annualAmortization", 5_000.0, 0),
    ("marginalTaxRate", 0.05, 0),
    ("downPayment", 50_000.0, 0),
    ("purchasePrice", 100_000.0, 0),
    ("termYears", 5, 0),
]


def _baseline() -> Dict[str, Any]:
    from swissrbv.qa.qa_golden import BASELINE

    # Non-zero renovations/extra costs so those inputs are exercised too.
    return {**BASELINE, "totalRenovations": 50_000, "additionalPurchaseCosts": 20_000}


def _result_value(params: Dict[str, Any]) -> float:
    from swissrbv.core.engine import calculate

    return float(calculate(params)["ResultValue"])


def _check_one(base: Dict[str, Any], field: str, delta: float, sign: int) -> List[str]:
    errs: List[str] = []
    mode = base["scenarioMode"]
    lo_params = dict(base)
    hi_params = dict(base)
    hi_params[field] = base[field] + delta
    lo_params[field] = base[field] - delta if base[field] - delta >= 0 else base[field]

    mid = _result_value(base)
    hi = _result_value(hi_params)
    lo = _result_value(lo_params)

    if not all(math.isfinite(v) for v in (mid, hi, lo)):
        return [f"{mode}/{field}: non-finite ResultValue"]

    if abs(hi - mid) <= MONEY_EPS:
        errs.append(f"{mode}/{field}: dead input (ResultValue {mid:,.2f} -> {hi:,.2f})")
        return errs

    if sign > 0 and not (lo <= mid < hi):
        errs.append(f"{mode}/{field}: expected increasing, got {lo:,.2f} / {mid:,.2f} / {hi:,.2f}")
    elif sign < 0 and not (lo >= mid > hi):
        errs.append(f"{mode}/{field}: expected decreasing, got {lo:,.2f} / {mid:,.2f} / {hi:,.2f}")
    return errs


def _check_post_reform(base: Dict[str, Any]) -> List[str]:
    from swissrbv.core.engine import calculate

    pre = calculate({**base, "postReform": False})
    post = calculate({**base, "postReform": True})
    # Removing the owner's net tax shifts ResultValue by exactly that amount.
    shift = post["ResultValue"] - pre["ResultValue"]
    if abs(shift - pre["TotalOwnerNetTax"]) > 1e-6:
        return [f"{base['scenarioMode']}/postReform: shift {shift:,.2f} != owner net tax {pre['TotalOwnerNetTax']:,.2f}"]
    return []


def main(argv: list[str] | None = None) -> None:
    failures: List[str] = []
    checked = 0
    for mode in MODES:
        base = {**_baseline(), "scenarioMode": mode}
        for field, delta, sign in CHECKS:
            failures.extend(_check_one(base, field, delta, sign))
            checked += 1
        failures.extend(_check_post_reform(base))
        checked += 1

    if failures:
        print("\n[SENSITIVITY FAILED]")
        for f in failures:
            print(f" - {f}")
        raise SystemExit(1)

    print(f"[SENSITIVITY OK] {checked} check(s) across {len(MODES)} scenario mode(s)")


if __name__ == "__main__":
    main()
