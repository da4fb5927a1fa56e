"""Parameter normalisation for the Swiss rent-vs-buy engine.

Callers hand the engine a *partial* record keyed by the public input names
(``purchasePrice``, ``mortgageRate``, ...).  This module fills the documented
defaults, checks every field against its allowed range and derives the few
auxiliary scalars the year loop needs (mortgage amount, contribution window,
renter's initial capital).

Rates are expected as unit fractions (``0.012`` for 1.2 %).  Nothing is
converted here: a value that *looks* like a percentage only triggers a
``warnings.warn`` so UI layers can surface it.  No rounding happens here
either; display rounding is the result assembler's job.
"""

from __future__ import annotations

import math
import warnings as _warnings
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping

EVEN_BAND_DEFAULT = 5_000.0


class ScenarioMode(str, Enum):
    """How the renter's savings stream is modelled."""

    EQUAL_CONSUMPTION = "EQUAL_CONSUMPTION"
    CASHFLOW_PARITY = "CASHFLOW_PARITY"
    EQUAL_SAVINGS = "EQUAL_SAVINGS"

    @property
    def invests_contributions(self) -> bool:
        """True when the renter's contributed principal is credited back at the horizon."""
        return self is not ScenarioMode.EQUAL_CONSUMPTION


_MODE_ALIASES = {
    "equalconsumption": ScenarioMode.EQUAL_CONSUMPTION,
    "equal_consumption": ScenarioMode.EQUAL_CONSUMPTION,
    "cashflowparity": ScenarioMode.CASHFLOW_PARITY,
    "cashflow_parity": ScenarioMode.CASHFLOW_PARITY,
    "equalsavings": ScenarioMode.EQUAL_SAVINGS,
    "equal_savings": ScenarioMode.EQUAL_SAVINGS,
}


# Typical Swiss market values; every field of the input record has a default.
DEFAULT_PARAMS: Dict[str, Any] = {
    "purchasePrice": 2_000_000.0,
    "downPayment": 347_000.0,
    "mortgageRate": 0.009,
    "termYears": 10,
    "amortizationYears": 10,
    "annualAmortization": 22_199.0,
    "annualMaintenanceCosts": 20_000.0,   # upkeep + running costs, merged
    "totalRenovations": 0.0,
    "additionalPurchaseCosts": 0.0,       # notary, land registry, fees
    "imputedRentalValue": 42_900.0,
    "propertyTaxDeductions": 13_000.0,
    "marginalTaxRate": 0.30,
    "propertyAppreciationRate": 0.0,
    "monthlyRent": 5_500.0,
    "annualRentalCosts": 20_000.0,
    "investmentYieldRate": 0.0,
    "scenarioMode": ScenarioMode.EQUAL_CONSUMPTION.value,
    "postReform": False,
    "evenBand": EVEN_BAND_DEFAULT,
}

MONEY_FIELDS = (
    "purchasePrice",
    "downPayment",
    "annualAmortization",
    "annualMaintenanceCosts",
    "totalRenovations",
    "additionalPurchaseCosts",
    "imputedRentalValue",
    "propertyTaxDeductions",
    "monthlyRent",
    "annualRentalCosts",
    "evenBand",
)

# Signed growth rates; anything below -100 % is meaningless.
SIGNED_RATE_FIELDS = ("propertyAppreciationRate", "investmentYieldRate")

INTEGER_FIELDS = ("termYears", "amortizationYears")

BOOLEAN_FIELDS = ("postReform",)

_RATE_FIELDS = ("mortgageRate", "marginalTaxRate") + SIGNED_RATE_FIELDS


class ValidationError(ValueError):
    """Raised when an input field is outside the modelled domain.

    ``field`` names the offending input, ``reason`` is a short machine-readable
    code (``negative``, ``out_of_range``, ``unknown_mode`` ...).
    """

    def __init__(self, field: str, reason: str, detail: str | None = None):
        self.field = field
        self.reason = reason
        msg = f"{field}: {reason}"
        if detail:
            msg = f"{msg} ({detail})"
        super().__init__(msg)


@dataclass(frozen=True)
class NormalisedParams:
    """Validated, defaulted input record plus derived scalars."""

    purchase_price: float
    down_payment: float
    mortgage_rate: float
    term_years: int
    amortization_years: int
    annual_amortization: float
    annual_maintenance_costs: float
    total_renovations: float
    additional_purchase_costs: float
    imputed_rental_value: float
    property_tax_deductions: float
    marginal_tax_rate: float
    property_appreciation_rate: float
    monthly_rent: float
    annual_rental_costs: float
    investment_yield_rate: float
    scenario_mode: ScenarioMode
    post_reform: bool
    even_band: float

    # Derived
    mortgage_amount: float
    contribution_years: int
    investable_initial: float

    def as_input_dict(self) -> Dict[str, Any]:
        """Return the record in the public (camelCase) input shape."""
        return {
            "purchasePrice": self.purchase_price,
            "downPayment": self.down_payment,
            "mortgageRate": self.mortgage_rate,
            "termYears": self.term_years,
            "amortizationYears": self.amortization_years,
            "annualAmortization": self.annual_amortization,
            "annualMaintenanceCosts": self.annual_maintenance_costs,
            "totalRenovations": self.total_renovations,
            "additionalPurchaseCosts": self.additional_purchase_costs,
            "imputedRentalValue": self.imputed_rental_value,
            "propertyTaxDeductions": self.property_tax_deductions,
            "marginalTaxRate": self.marginal_tax_rate,
            "propertyAppreciationRate": self.property_appreciation_rate,
            "monthlyRent": self.monthly_rent,
            "annualRentalCosts": self.annual_rental_costs,
            "investmentYieldRate": self.investment_yield_rate,
            "scenarioMode": self.scenario_mode.value,
            "postReform": self.post_reform,
            "evenBand": self.even_band,
        }


def _num(value: Any, field: str) -> float:
    try:
        x = float(value)
    except (TypeError, ValueError):
        raise ValidationError(field, "not_a_number", repr(value)) from None
    if not math.isfinite(x):
        raise ValidationError(field, "not_a_number", repr(value))
    return x


def _int(value: Any, field: str) -> int:
    x = _num(value, field)
    if x != int(x):
        raise ValidationError(field, "not_integer", repr(value))
    return int(x)


def _bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    return bool(value)


def parse_scenario_mode(value: Any) -> ScenarioMode:
    """Accept enum members, enum names or the camelCase aliases."""
    if isinstance(value, ScenarioMode):
        return value
    s = str(value or "").strip()
    try:
        return ScenarioMode(s.upper())
    except ValueError:
        pass
    mode = _MODE_ALIASES.get(s.lower())
    if mode is None:
        raise ValidationError("scenarioMode", "unknown_mode", repr(value))
    return mode


def _warn_if_percent_shaped(field: str, value: float) -> None:
    if value > 1.0:
        _warnings.warn(
            f"{field}={value:g} looks like a percentage; rates are unit fractions "
            f"(e.g. 0.012 for 1.2%)."
        )


def normalise(raw: Mapping[str, Any] | None = None) -> NormalisedParams:
    """Fill defaults, validate ranges and derive auxiliary scalars.

    Unknown keys are ignored so that sweep records and break-even options can
    be passed straight through.

    Raises:
        ValidationError: for negative money, rates below -1, a tax rate outside
            [0, 1), ``termYears < 1``, ``amortizationYears < 0``, an unknown
            scenario mode, or a down payment above the purchase price.
    """
    merged: Dict[str, Any] = dict(DEFAULT_PARAMS)
    for key, value in (raw or {}).items():
        if key in DEFAULT_PARAMS and value is not None:
            merged[key] = value

    money = {}
    for field in MONEY_FIELDS:
        x = _num(merged[field], field)
        if x < 0.0:
            raise ValidationError(field, "negative", f"{x:g}")
        money[field] = x

    rates = {field: _num(merged[field], field) for field in _RATE_FIELDS}
    if rates["mortgageRate"] < 0.0:
        raise ValidationError("mortgageRate", "negative", f"{rates['mortgageRate']:g}")
    tax = rates["marginalTaxRate"]
    if not (0.0 <= tax < 1.0):
        raise ValidationError("marginalTaxRate", "out_of_range", f"{tax:g} not in [0, 1)")
    for field in SIGNED_RATE_FIELDS:
        if rates[field] < -1.0:
            raise ValidationError(field, "below_minus_one", f"{rates[field]:g}")
    for field in ("mortgageRate",) + SIGNED_RATE_FIELDS:
        _warn_if_percent_shaped(field, rates[field])

    term_years = _int(merged["termYears"], "termYears")
    if term_years < 1:
        raise ValidationError("termYears", "out_of_range", f"{term_years} < 1")
    amortization_years = _int(merged["amortizationYears"], "amortizationYears")
    if amortization_years < 0:
        raise ValidationError("amortizationYears", "negative", str(amortization_years))

    mode = parse_scenario_mode(merged["scenarioMode"])
    post_reform = _bool(merged["postReform"])

    price = money["purchasePrice"]
    down = money["downPayment"]
    mortgage_amount = price - down
    if mortgage_amount < 0.0:
        raise ValidationError(
            "downPayment", "down_payment_exceeds_price", f"{down:,.2f} > {price:,.2f}"
        )

    # Renovations are day-0 cash the renter keeps only when matching cash flows.
    investable_initial = down + money["additionalPurchaseCosts"]
    if mode is ScenarioMode.CASHFLOW_PARITY:
        investable_initial += money["totalRenovations"]

    return NormalisedParams(
        purchase_price=price,
        down_payment=down,
        mortgage_rate=rates["mortgageRate"],
        term_years=term_years,
        amortization_years=amortization_years,
        annual_amortization=money["annualAmortization"],
        annual_maintenance_costs=money["annualMaintenanceCosts"],
        total_renovations=money["totalRenovations"],
        additional_purchase_costs=money["additionalPurchaseCosts"],
        imputed_rental_value=money["imputedRentalValue"],
        property_tax_deductions=money["propertyTaxDeductions"],
        marginal_tax_rate=tax,
        property_appreciation_rate=rates["propertyAppreciationRate"],
        monthly_rent=money["monthlyRent"],
        annual_rental_costs=money["annualRentalCosts"],
        investment_yield_rate=rates["investmentYieldRate"],
        scenario_mode=mode,
        post_reform=post_reform,
        even_band=money["evenBand"],
        mortgage_amount=mortgage_amount,
        contribution_years=min(amortization_years, term_years),
        investable_initial=investable_initial,
    )
