"""Break-even (maximum bid) price search.

Binary search on the purchase price for the point where buying and renting
cost the same over the horizon.  Every candidate price re-runs the pure engine
with the base record and only the price-dependent fields changed, so the search
has no state of its own beyond the best candidate seen so far.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Mapping

from .derivations import derive_auto_params
from .engine import calculate
from .params import DEFAULT_PARAMS

DEFAULT_MIN_PRICE = 100_000.0
DEFAULT_MAX_PRICE = 10_000_000.0
DEFAULT_TOLERANCE = 1_000.0
DEFAULT_MAX_ITERATIONS = 200


def _midpoint(low: float, high: float) -> float:
    return float(math.floor((low + high) / 2.0 + 0.5))


def _candidate_params(
    base: Mapping[str, Any],
    price: float,
    mortgage_amount: float | None,
    derive: bool,
    mortgage_mode: str,
) -> Dict[str, Any]:
    if derive:
        candidate = derive_auto_params(base, price, mortgage_mode=mortgage_mode)
    else:
        candidate = dict(base)
        candidate["purchasePrice"] = price
    if mortgage_amount:
        candidate["downPayment"] = price - mortgage_amount
    return candidate


def _down_payment_exceeds_price(candidate: Mapping[str, Any], price: float) -> bool:
    down = candidate.get("downPayment")
    if down is None:
        down = DEFAULT_PARAMS["downPayment"]
    try:
        return float(down) > price
    except (TypeError, ValueError):
        # Left for the normaliser to reject with a field-specific error.
        return False


def find_breakeven_price(
    base_params: Mapping[str, Any],
    *,
    min_price: float = DEFAULT_MIN_PRICE,
    max_price: float = DEFAULT_MAX_PRICE,
    tolerance: float = DEFAULT_TOLERANCE,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    mortgage_amount: float | None = None,
    derive: bool = False,
    mortgage_mode: str = "auto",
) -> Dict[str, Any]:
    """Search ``[min_price, max_price]`` for the price where ``ResultValue`` is ~0.

    Args:
        base_params: Input record used for every candidate (never mutated).
        tolerance: A candidate with ``|ResultValue| <= tolerance`` ends the search.
        max_iterations: Upper bound on non-terminal candidates.
        mortgage_amount: Hold the mortgage fixed and set
            ``downPayment = price - mortgage_amount`` at each candidate.  Falls back
            to a ``mortgageAmount`` key in ``base_params``.
        derive: Re-derive down payment, maintenance, amortization and imputed
            rent from each candidate price (see ``derivations``).

    Returns:
        Dict with ``breakevenFound``, ``breakevenPrice``, ``downPayment``,
        ``ltvPercent``, ``resultValue``, ``decision``, ``difference``,
        ``iterations`` and ``message``.  When no root lies within tolerance the
        closest candidate is reported with ``breakevenFound=False``; ties on
        ``|ResultValue|`` keep the earlier candidate.

    A candidate price below the down payment cannot be bought at all; it is
    treated as "too low" and never reported.  With a fixed mortgage the search
    starts no lower than the mortgage amount.

    Raises:
        ValidationError: if a candidate's input record is otherwise invalid.
    """
    if mortgage_amount is None:
        mortgage_amount = base_params.get("mortgageAmount")
    low = float(min_price)
    high = float(max_price)
    if mortgage_amount:
        mortgage_amount = float(mortgage_amount)
        low = max(low, mortgage_amount)

    iterations = 0
    best: Dict[str, Any] | None = None

    while low <= high and iterations < max_iterations:
        price = _midpoint(low, high)
        candidate = _candidate_params(base_params, price, mortgage_amount, derive, mortgage_mode)
        if _down_payment_exceeds_price(candidate, price):
            low = price + 1.0
            iterations += 1
            continue

        result = calculate(candidate)
        value = result["ResultValue"]
        difference = abs(value)

        if best is None or difference < best["difference"]:
            down = result["DownPayment"]
            best = {
                "breakevenFound": difference <= tolerance,
                "breakevenPrice": price,
                "downPayment": down,
                "ltvPercent": (price - down) / price * 100.0 if price > 0 else 0.0,
                "resultValue": value,
                "decision": result["Decision"],
                "difference": difference,
            }

        if difference <= tolerance:
            break

        # Buying cheaper at this price: a higher bid is still affordable.
        if value > 0:
            low = price + 1.0
        else:
            high = price - 1.0
        iterations += 1

    if best is None:
        return {
            "breakevenFound": False,
            "breakevenPrice": None,
            "downPayment": None,
            "ltvPercent": None,
            "resultValue": None,
            "decision": None,
            "difference": None,
            "iterations": iterations,
            "message": f"No break-even found in range {min_price:,.0f}-{max_price:,.0f} CHF",
        }

    if best["breakevenFound"]:
        message = f"Break-even found at {best['breakevenPrice']:,.0f} CHF"
    else:
        message = (
            f"Closest match found at {best['breakevenPrice']:,.0f} CHF "
            f"(difference: {best['difference']:,.2f} CHF)"
        )
    return {**best, "iterations": iterations, "message": message}
