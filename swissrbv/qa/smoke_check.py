#!/usr/bin/env python3
"""Quick smoke checks for the swissrbv package.

Run:
  python -m swissrbv.qa.smoke_check
"""

from __future__ import annotations
import sys
from pathlib import Path

# Ensure repo root is on sys.path regardless of where this script is invoked from.
_REPO_ROOT = Path(__file__).resolve().parents[2]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

import compileall
import math


def die(msg: str, code: int = 1) -> None:
    print(f"\n[SMOKE CHECK FAILED] {msg}\n")
    raise SystemExit(code)


def main(argv: list[str] | None = None) -> None:
    pkg_dir = _REPO_ROOT / "swissrbv"
    if not pkg_dir.is_dir():
        die("swissrbv/ not found (run from the repo root).")

    if not compileall.compile_dir(str(pkg_dir), quiet=1):
        die("swissrbv/ package failed to compile.")

    try:
        from swissrbv.core.breakeven import find_breakeven_price
        from swissrbv.core.engine import calculate
        from swissrbv.core.export import results_to_csv
        from swissrbv.core.sweep import parameter_sweep
    except Exception as e:
        die(f"Import failure: {e}")

    # Rates are unit fractions (0.012 for 1.2%).
    params = {
        "purchasePrice": 2_000_000,
        "downPayment": 400_000,
        "mortgageRate": 0.012,
        "termYears": 10,
        "amortizationYears": 10,
        "annualAmortization": 32_000,
        "annualMaintenanceCosts": 20_000,
        "imputedRentalValue": 42_900,
        "propertyTaxDeductions": 13_000,
        "marginalTaxRate": 0.25,
        "propertyAppreciationRate": 0.01,
        "monthlyRent": 5_500,
        "annualRentalCosts": 2_000,
        "investmentYieldRate": 0.03,
    }

    try:
        result = calculate(params)
    except Exception as e:
        die(f"calculate failed: {e}")

    if len(result["YearlyBreakdown"]) != 10:
        die("calculate returned the wrong number of ledger rows.")
    if not math.isfinite(result["ResultValue"]):
        die("ResultValue is not finite.")

    try:
        records = parameter_sweep(params, {"investmentYieldRate": {"min": 0.02, "max": 0.04, "step": 0.01}})
        csv_text = results_to_csv(records)
    except Exception as e:
        die(f"Sweep failed: {e}")

    if len(records) != 3 or len(csv_text.splitlines()) != 4:
        die("Sweep returned an unexpected number of records.")

    try:
        report = find_breakeven_price(
            {**params, "monthlyRent": 4_000},
            min_price=500_000,
            max_price=5_000_000,
            derive=True,
        )
    except Exception as e:
        die(f"Break-even search failed: {e}")

    print("\n[SMOKE CHECK OK]")
    print(f"Decision: {result['Decision']} (ResultValue {result['ResultValue']:,.2f})")
    print(f"Sweep records: {len(records)}")
    print(f"Break-even: {report['message']}\n")


if __name__ == "__main__":
    main()
