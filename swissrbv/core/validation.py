"""Advisory validation helpers for the rent-vs-buy engine.

These checks never raise.  They look at a raw input record and return
human-readable warnings the form (or the CLI) can show before running a
calculation.  Hard domain errors are the normaliser's job
(``params.normalise`` raises ``ValidationError``).

Implemented checks:

* **Loan-to-value above 80 %** – Swiss lenders generally finance at most
  80 % of the purchase price.
* **Percent-shaped rates** – rates are unit fractions; ``1.2`` almost always
  means 1.2 % and would be read as 120 %.
* **High marginal tax rate** – a marginal rate of 50 % or more is outside any
  Swiss canton's range and usually a unit mistake.
* **Amortization beyond the mortgage** – the schedule repays more than is owed;
  the engine stops amortizing at zero, but the monthly figures still show the
  scheduled payment.
"""

from __future__ import annotations

from typing import Any, List, Mapping

from .params import DEFAULT_PARAMS

MAX_LTV = 0.80
_RATE_KEYS = ("mortgageRate", "propertyAppreciationRate", "investmentYieldRate", "marginalTaxRate")


def _f(x, default: float = 0.0) -> float:
    try:
        return float(x)
    except (TypeError, ValueError):
        return float(default)


def get_validation_warnings(params: Mapping[str, Any] | None) -> List[str]:
    """Return a list of warnings for an input record (empty when nothing stands out).

    The record is merged over ``DEFAULT_PARAMS`` the same way ``calculate`` does.
    The input is not mutated.
    """
    cfg = {**DEFAULT_PARAMS, **{k: v for k, v in (params or {}).items() if v is not None}}
    warnings: List[str] = []

    price = max(0.0, _f(cfg.get("purchasePrice")))
    down = max(0.0, _f(cfg.get("downPayment")))
    loan = max(0.0, price - down)
    ltv = (loan / price) if price > 0.0 else 0.0
    if ltv > MAX_LTV + 1e-12:
        warnings.append(
            f"Loan-to-value of {ltv * 100:.1f}% exceeds the usual Swiss maximum of {MAX_LTV * 100:.0f}% "
            f"(down payment CHF {down:,.0f} on a CHF {price:,.0f} property)."
        )

    for key in _RATE_KEYS:
        rate = _f(cfg.get(key))
        if rate > 1.0:
            warnings.append(
                f"{key}={rate:g} looks like a percentage; enter rates as fractions (e.g. 0.012 for 1.2%)."
            )

    tax = _f(cfg.get("marginalTaxRate"))
    if 0.5 <= tax <= 1.0:
        warnings.append(f"Marginal tax rate of {tax * 100:.0f}% is unusually high.")

    years = int(_f(cfg.get("amortizationYears")))
    amort = max(0.0, _f(cfg.get("annualAmortization")))
    scheduled = amort * max(0, min(years, int(_f(cfg.get("termYears"), 1))))
    if loan > 0.0 and scheduled > loan + 1e-9:
        warnings.append(
            f"Scheduled amortization of CHF {scheduled:,.0f} exceeds the mortgage of CHF {loan:,.0f}; "
            "the loan is fully repaid before the amortization period ends."
        )

    return warnings
