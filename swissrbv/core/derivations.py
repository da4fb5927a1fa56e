"""Auto-calculated inputs derived from the purchase price.

The input form fills several fields from the purchase price unless the user
overrides them.  Headless callers (CLI, break-even search, sweeps) need the
same rules so that a candidate at a different price keeps the household's
financing structure instead of silently holding the old down payment.

Rules (Swiss market conventions used by the form):

  - down payment: 20 % of price (``auto``), or the remainder after a capped
    mortgage (``cap80`` = 80 % of price, ``cap66`` = two thirds of price, each
    optionally limited further by ``mortgage_limit``)
  - maintenance + running costs: 1.25 % of price per year
  - amortization: mortgage spread evenly over ``amortizationYears``
  - imputed rental value: 65 % of the annual rent
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Mapping

from .params import DEFAULT_PARAMS, ValidationError

DOWN_PAYMENT_SHARE = 0.20
MAINTENANCE_RATE = 0.0125
IMPUTED_RENT_SHARE = 0.65

MORTGAGE_MODES = ("auto", "cap80", "cap66")


def _f(x, default: float = 0.0) -> float:
    try:
        return float(x)
    except (TypeError, ValueError):
        return float(default)


def _round(x: float) -> float:
    # Half-up, matching the form's rounding of derived amounts.
    return float(math.floor(x + 0.5))


@dataclass(frozen=True)
class DerivedInputs:
    """Derived purchase-time fields."""

    down_payment: float
    mortgage: float
    annual_maintenance_costs: float
    annual_amortization: float
    imputed_rental_value: float
    ltv: float


def derive_inputs(
    purchase_price: float,
    monthly_rent: float,
    amortization_years: int,
    *,
    mortgage_mode: str = "auto",
    mortgage_limit: float | None = None,
) -> DerivedInputs:
    """Derive down payment, maintenance, amortization and imputed rent for a price."""
    price = max(0.0, _f(purchase_price))
    mode = str(mortgage_mode or "auto").strip().lower()
    if mode not in MORTGAGE_MODES:
        raise ValidationError("mortgageMode", "unknown_mode", repr(mortgage_mode))

    if mode == "auto":
        down = _round(price * DOWN_PAYMENT_SHARE)
        mortgage = price - down
    else:
        cap = _round(price * 0.80) if mode == "cap80" else _round(price * 2.0 / 3.0)
        if mortgage_limit is not None:
            cap = min(cap, max(0.0, _f(mortgage_limit)))
        mortgage = cap
        down = price - mortgage

    years = int(amortization_years or 0)
    amortization = _round(mortgage / years) if years > 0 else 0.0

    return DerivedInputs(
        down_payment=down,
        mortgage=mortgage,
        annual_maintenance_costs=_round(price * MAINTENANCE_RATE),
        annual_amortization=amortization,
        imputed_rental_value=_round(12.0 * max(0.0, _f(monthly_rent)) * IMPUTED_RENT_SHARE),
        ltv=(mortgage / price) if price > 0.0 else 0.0,
    )


def derive_auto_params(
    base: Mapping[str, Any] | None,
    purchase_price: float | None = None,
    *,
    mortgage_mode: str = "auto",
    mortgage_limit: float | None = None,
) -> Dict[str, Any]:
    """Return a copy of ``base`` with the price-dependent fields re-derived.

    Never mutates the caller's mapping.  ``purchase_price`` defaults to the
    record's own price.
    """
    out = dict(base or {})
    price = _f(out.get("purchasePrice", DEFAULT_PARAMS["purchasePrice"]))
    if purchase_price is not None:
        price = _f(purchase_price, price)

    d = derive_inputs(
        price,
        out.get("monthlyRent", DEFAULT_PARAMS["monthlyRent"]),
        out.get("amortizationYears", DEFAULT_PARAMS["amortizationYears"]),
        mortgage_mode=mortgage_mode,
        mortgage_limit=mortgage_limit,
    )
    out.update(
        {
            "purchasePrice": price,
            "downPayment": d.down_payment,
            "annualMaintenanceCosts": d.annual_maintenance_costs,
            "annualAmortization": d.annual_amortization,
            "imputedRentalValue": d.imputed_rental_value,
        }
    )
    return out
