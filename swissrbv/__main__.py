"""CLI / headless entry point for the Swiss rent-vs-buy calculator.

Usage
-----
Run with a JSON scenario file:
    python -m swissrbv --config scenario.json --output ledger.csv

Dump an example scenario file:
    python -m swissrbv --example

Override individual parameters on the command line:
    python -m swissrbv --config scenario.json --set termYears=15 --set mortgageRate=0.015

Find the break-even (maximum bid) price, or run the scenario's sweep:
    python -m swissrbv --config scenario.json --breakeven
    python -m swissrbv --config scenario.json --sweep --output sweep.csv

The scenario's ``params`` section maps directly to the engine's input record.
See --example for all supported keys and their default values.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from swissrbv.core.params import DEFAULT_PARAMS

_DEFAULT_BREAKEVEN: dict = {
    "min_price": 500_000.0,
    "max_price": 5_000_000.0,
    "tolerance": 1_000.0,
    "max_iterations": 200,
    "derive": False,
    "mortgage_mode": "auto",
}

_DEFAULT_SWEEP: dict = {
    "propertyAppreciationRate": {"min": 0.0, "max": 0.02, "step": 0.01},
    "investmentYieldRate": {"min": 0.02, "max": 0.04, "step": 0.01},
    "postReform": {"min": 0, "max": 1, "step": 1},
}


def _build_example() -> dict:
    """Return a complete example scenario dict (params + analysis options)."""
    return {
        "_comment": (
            "Swiss rent-vs-buy scenario file. 'params' keys feed the engine directly "
            "(rates as fractions, e.g. 0.012 = 1.2%); 'breakeven' and 'sweep' configure "
            "the --breakeven and --sweep analyses."
        ),
        "params": dict(DEFAULT_PARAMS),
        "breakeven": dict(_DEFAULT_BREAKEVEN),
        "sweep": {k: dict(v) for k, v in _DEFAULT_SWEEP.items()},
    }


def _apply_overrides(d: dict, overrides: list[str]) -> dict:
    """Apply --set key=value overrides, with basic type coercion."""
    for kv in overrides or []:
        if "=" not in kv:
            print(f"Warning: ignoring malformed --set argument (expected key=value): {kv!r}", file=sys.stderr)
            continue
        key, _, raw = kv.partition("=")
        key = key.strip()
        raw = raw.strip()
        # Coerce type: try bool → int → float → str
        coerced: bool | int | float | str
        if raw.lower() in ("true", "false"):
            coerced = raw.lower() == "true"
        else:
            try:
                coerced = int(raw)
            except ValueError:
                try:
                    coerced = float(raw)
                except ValueError:
                    coerced = raw
        d[key] = coerced
    return d


def _write(text: str, output: str) -> None:
    if output == "-":
        print(text, end="" if text.endswith("\n") else "\n")
    else:
        out_path = Path(output)
        out_path.write_text(text if text.endswith("\n") else text + "\n")
        print(f"Results written to {out_path}", file=sys.stderr)


def _summary(result: dict) -> dict:
    keys = (
        "Decision",
        "ResultValue",
        "CompareText",
        "TotalPurchaseCost",
        "TotalRentalCost",
        "InterestCosts",
        "AmortizationCosts",
        "TaxDifferenceToRental",
        "MortgageAtEndOfRelevantTimePeriod",
        "MortgageAmount",
        "TotalMonthlyExpenses",
        "TotalMonthlyRentingExpenses",
        "ScenarioMode",
        "PostReform",
        "TermYears",
    )
    out = {}
    for key in keys:
        value = result.get(key)
        out[key] = round(value, 2) if isinstance(value, float) else value
    return out


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="python -m swissrbv",
        description="Swiss Rent vs Buy Calculator (headless/CLI mode).",
    )
    parser.add_argument(
        "--config", "-c",
        metavar="FILE",
        help="Path to a JSON scenario file. Use --example to generate a template.",
    )
    parser.add_argument(
        "--output", "-o",
        metavar="FILE",
        default="-",
        help="Output file path. Use '-' (default) to print to stdout.",
    )
    parser.add_argument(
        "--set", "-s",
        dest="overrides",
        metavar="key=value",
        action="append",
        help="Override an input parameter. Repeat for multiple overrides.",
    )
    parser.add_argument(
        "--example",
        action="store_true",
        help="Print an example JSON scenario file and exit.",
    )
    parser.add_argument(
        "--derive",
        action="store_true",
        help="Re-derive down payment, maintenance, amortization and imputed rent from the price.",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--json",
        action="store_true",
        help="Output a summary as JSON instead of the yearly ledger CSV.",
    )
    mode.add_argument(
        "--breakeven",
        action="store_true",
        help="Search for the break-even purchase price and print it as JSON.",
    )
    mode.add_argument(
        "--sweep",
        action="store_true",
        help="Run the scenario's parameter sweep and output CSV.",
    )

    args = parser.parse_args(argv)

    if args.example:
        print(json.dumps(_build_example(), indent=2))
        return 0

    # Build scenario from config file (or pure defaults)
    scenario = _build_example()
    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            print(f"Error: config file not found: {config_path}", file=sys.stderr)
            return 1
        with config_path.open() as fh:
            user_scenario = json.load(fh)
        scenario["params"].update(user_scenario.get("params", {}))
        scenario["breakeven"].update(user_scenario.get("breakeven", {}))
        if "sweep" in user_scenario:
            scenario["sweep"] = user_scenario["sweep"]

    params = _apply_overrides(scenario["params"], args.overrides or [])

    from swissrbv.core.breakeven import find_breakeven_price
    from swissrbv.core.derivations import derive_auto_params
    from swissrbv.core.engine import calculate
    from swissrbv.core.equity_monitor import detect_negative_equity, format_underwater_warning
    from swissrbv.core.export import ledger_frame, results_to_csv
    from swissrbv.core.params import ValidationError
    from swissrbv.core.sweep import parameter_sweep
    from swissrbv.core.validation import get_validation_warnings

    if args.derive:
        params = derive_auto_params(params)

    for msg in get_validation_warnings(params):
        print(f"Warning: {msg}", file=sys.stderr)

    try:
        if args.breakeven:
            opts = dict(scenario["breakeven"])
            report = find_breakeven_price(
                params,
                min_price=float(opts["min_price"]),
                max_price=float(opts["max_price"]),
                tolerance=float(opts["tolerance"]),
                max_iterations=int(opts["max_iterations"]),
                mortgage_amount=opts.get("mortgage_amount"),
                derive=bool(opts.get("derive", False)),
                mortgage_mode=str(opts.get("mortgage_mode", "auto")),
            )
            print(report["message"], file=sys.stderr)
            _write(json.dumps(report, indent=2), args.output)
            return 0

        if args.sweep:
            records = parameter_sweep(params, scenario["sweep"])
            print(f"Sweep complete: {len(records)} combination(s).", file=sys.stderr)
            _write(results_to_csv(records), args.output)
            return 0

        result = calculate(params)
    except ValidationError as exc:
        print(f"Config error: {exc}", file=sys.stderr)
        return 1

    print(result["CompareText"], file=sys.stderr)
    underwater = format_underwater_warning(detect_negative_equity(result))
    if underwater:
        print(f"Warning: {underwater}", file=sys.stderr)

    if args.json:
        _write(json.dumps(_summary(result), indent=2), args.output)
        return 0

    # Default: yearly ledger CSV
    _write(ledger_frame(result).to_csv(index=False), args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
