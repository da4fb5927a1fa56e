"""Turn year-loop accumulators into horizon totals, a verdict and cumulative series.

Totals are derived from the same running sums the ledger uses, and the
per-year "to date" columns are built with the same helper functions, so the
final ledger row and the scalar totals agree by construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from .params import NormalisedParams
from .simulator import YearAccumulators, property_value_at

BUY = "BUY"
RENT = "RENT"
EVEN = "EVEN"


@dataclass(frozen=True)
class Totals:
    interest_costs: float
    amortization_costs: float
    supplemental_maintenance_costs: float
    purchase_costs_within_period: float
    total_owner_net_tax: float
    total_renter_investment_tax: float
    tax_difference_to_rental: float
    property_value_end: float
    mortgage_at_end: float
    total_purchase_cost: float
    general_cost_of_rental: float
    yields_on_assets: float
    savings_contributions: float
    total_rental_cost: float
    result_value: float
    decision: str
    compare_text: str


def _costs_within_period(p: NormalisedParams, interest: float, maintenance: float, amortization: float) -> float:
    return p.additional_purchase_costs + p.total_renovations + interest + maintenance + amortization


def _purchase_cost(
    costs_within: float,
    owner_tax: float,
    renter_tax: float,
    property_value: float,
    balance: float,
) -> float:
    # The owner ends up holding the property but still owes ``balance`` on it.
    return costs_within + (owner_tax - renter_tax) - property_value + balance


def _rental_cost(p: NormalisedParams, rental_costs: float, gains: float, contributions: float) -> float:
    cost = rental_costs - gains - p.down_payment
    if p.scenario_mode.invests_contributions:
        cost -= contributions
    return cost


def format_chf(amount: float, decimals: int = 2) -> str:
    """Render an amount with thousands separators (``1,234.50``)."""
    return f"{amount:,.{decimals}f}"


def decide(result_value: float, band: float) -> str:
    if abs(result_value) < band:
        return EVEN
    return BUY if result_value > 0 else RENT


def compare_text(decision: str, result_value: float, band: float) -> str:
    """Human-readable verdict. The wording is part of the public interface."""
    if decision == EVEN:
        band_str = format_chf(band, 0) if float(band).is_integer() else f"{band:,}"
        return (
            f"Buying and renting are effectively even (within CHF {band_str}) "
            "over the relevant time frame."
        )
    amount = format_chf(abs(result_value))
    if decision == BUY:
        return f"Buying your home will work out CHF {amount} cheaper than renting over the relevant time frame."
    return f"Renting is CHF {amount} cheaper than buying over the relevant time frame."


def compute_totals(p: NormalisedParams, acc: YearAccumulators) -> Totals:
    """Final horizon totals and verdict from the year-loop accumulators."""
    costs_within = _costs_within_period(p, acc.interest_costs, acc.maintenance_costs, acc.amortization_costs)
    property_value_end = property_value_at(p, p.term_years)
    # Final ledger balance: max(0, mortgageAmount - amortizationCosts) by construction.
    mortgage_at_end = acc.remaining_balance

    total_purchase_cost = _purchase_cost(
        costs_within,
        acc.total_owner_net_tax,
        acc.cumulative_renter_investment_tax,
        property_value_end,
        mortgage_at_end,
    )
    total_rental_cost = _rental_cost(
        p,
        acc.cumulative_rental_costs,
        acc.cumulative_investment_gains,
        acc.cumulative_contrib_principal,
    )
    result_value = total_rental_cost - total_purchase_cost
    decision = decide(result_value, p.even_band)

    return Totals(
        interest_costs=acc.interest_costs,
        amortization_costs=acc.amortization_costs,
        supplemental_maintenance_costs=acc.maintenance_costs,
        purchase_costs_within_period=costs_within,
        total_owner_net_tax=acc.total_owner_net_tax,
        total_renter_investment_tax=acc.cumulative_renter_investment_tax,
        tax_difference_to_rental=acc.total_owner_net_tax - acc.cumulative_renter_investment_tax,
        property_value_end=property_value_end,
        mortgage_at_end=mortgage_at_end,
        total_purchase_cost=total_purchase_cost,
        general_cost_of_rental=acc.cumulative_rental_costs,
        yields_on_assets=acc.cumulative_investment_gains,
        savings_contributions=acc.cumulative_contrib_principal,
        total_rental_cost=total_rental_cost,
        result_value=result_value,
        decision=decision,
        compare_text=compare_text(decision, result_value, p.even_band),
    )


def apply_cumulative_series(p: NormalisedParams, rows: List[Dict[str, Any]]) -> None:
    """Add the to-date cost columns and cumulative advantage to each ledger row (in place)."""
    cum_interest = 0.0
    cum_amort = 0.0
    cum_maint = 0.0
    cum_owner_net = 0.0
    cum_rental = 0.0
    cum_gains = 0.0
    cum_renter_tax = 0.0
    cum_contrib = 0.0
    prior_advantage = None

    for row in rows:
        cum_interest += row["annualInterest"]
        cum_amort += row["annualAmortization"]
        cum_maint += row["annualMaintenance"]
        cum_owner_net += row["annualTaxDifference"]
        cum_rental += row["annualRent"] + row["annualRentalCosts"]
        cum_gains += row["investmentGainsThisYear"]
        cum_renter_tax += row["investmentIncomeTaxThisYear"]
        cum_contrib += row["renterContribution"]

        purchase_to_date = _purchase_cost(
            _costs_within_period(p, cum_interest, cum_maint, cum_amort),
            cum_owner_net,
            cum_renter_tax,
            property_value_at(p, row["year"]),
            row["endingBalance"],
        )
        rental_to_date = _rental_cost(p, cum_rental, cum_gains, cum_contrib)
        advantage = rental_to_date - purchase_to_date

        row["totalPurchaseCostToDate"] = purchase_to_date
        row["totalRentalCostToDate"] = rental_to_date
        row["cumulativeAdvantage"] = advantage
        row["advantageDeltaFromPriorYear"] = 0.0 if prior_advantage is None else advantage - prior_advantage
        prior_advantage = advantage
