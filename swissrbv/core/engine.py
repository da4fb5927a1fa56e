"""Pure calculation engine. No UI, no I/O, no module-level state.

``calculate(params)`` normalises the input record, runs the single-pass year
simulator, derives totals and cumulative series, and flattens everything into
the result bundle with stable field names (consumed directly by charts, CSV
export and the CLI).
"""

from __future__ import annotations

import math
from typing import Any, Dict, Mapping

from .aggregate import Totals, apply_cumulative_series, compute_totals
from .params import NormalisedParams, ScenarioMode, normalise
from .simulator import simulate_years


def _round_half_up(x: float) -> int:
    """Round to the nearest integer with halves going up (display only)."""
    return int(math.floor(x + 0.5))


def monthly_summary(p: NormalisedParams) -> Dict[str, int]:
    """Rounded monthly figures for the buy and rent side (display only)."""
    interest = _round_half_up(p.mortgage_amount * p.mortgage_rate / 12.0)
    amortization = _round_half_up(p.annual_amortization / 12.0)
    maintenance = _round_half_up(p.annual_maintenance_costs / 12.0)
    rent = _round_half_up(p.monthly_rent)
    rental_costs = _round_half_up(p.annual_rental_costs / 12.0)

    if p.scenario_mode is ScenarioMode.EQUAL_SAVINGS and p.amortization_years > 0:
        savings = amortization
    elif p.scenario_mode is ScenarioMode.CASHFLOW_PARITY:
        savings = (interest + amortization + maintenance) - (rent + rental_costs)
    else:
        savings = 0

    return {
        "MonthlyInterestPayment": interest,
        "MonthlyAmortizationPayment": amortization,
        "MonthlyMaintenanceCosts": maintenance,
        "TotalMonthlyExpenses": interest + amortization + maintenance,
        "MonthlyRentPayment": rent,
        "MonthlyRentalCosts": rental_costs,
        "MonthlySavingsContribution": savings,
        "TotalMonthlyRentingExpenses": rent + rental_costs + savings,
    }


def _echoed_inputs(p: NormalisedParams) -> Dict[str, Any]:
    return {
        "PurchasePrice": p.purchase_price,
        "PurchasePriceM": _round_half_up(p.purchase_price / 100_000.0) / 10.0,
        "DownPayment": p.down_payment,
        "MortgageInterestRatePercent": p.mortgage_rate * 100.0,
        "AnnualSupplementalMaintenanceCosts": p.annual_maintenance_costs,
        "AmortizationPeriodYears": p.amortization_years,
        "AnnualAmortizationAmount": p.annual_amortization,
        "TotalRenovations": p.total_renovations,
        "AdditionalPurchaseExpenses": p.additional_purchase_costs,
        "ImputedRentalValue": p.imputed_rental_value,
        "PropertyExpenseTaxDeductions": p.property_tax_deductions,
        "MarginalTaxRatePercent": p.marginal_tax_rate * 100.0,
        "AnnualPropertyValueIncreasePercent": p.property_appreciation_rate * 100.0,
        "MonthlyRentDue": p.monthly_rent,
        "AnnualSupplementalCostsRent": p.annual_rental_costs,
        "InvestmentYieldRatePercent": p.investment_yield_rate * 100.0,
        "TermYears": p.term_years,
    }


def _purchase_breakdown(p: NormalisedParams, t: Totals) -> Dict[str, Any]:
    return {
        "InterestCosts": t.interest_costs,
        "SupplementalMaintenanceCosts": t.supplemental_maintenance_costs,
        "AmortizationCosts": t.amortization_costs,
        "RenovationExpenses": p.total_renovations,
        "AdditionalPurchaseExpensesOutput": p.additional_purchase_costs,
        "GeneralCostOfPurchase": t.purchase_costs_within_period,
        "TaxDifferenceToRental": t.tax_difference_to_rental,
        "MinusPropertyValue": -t.property_value_end,
        "MortgageAtEndOfRelevantTimePeriod": t.mortgage_at_end,
        "TotalPurchaseCost": t.total_purchase_cost,
    }


def _rental_breakdown(p: NormalisedParams, t: Totals) -> Dict[str, Any]:
    invests = p.scenario_mode.invests_contributions
    return {
        "GeneralCostOfRental": t.general_cost_of_rental,
        "ExcludingYieldsOnAssets": -t.yields_on_assets if invests else 0.0,
        "ExcludingDownPayment": -p.down_payment,
        "ExcludingSavingsContributions": -t.savings_contributions if invests else 0.0,
        "TotalRentalCost": t.total_rental_cost,
    }


def calculate(params: Mapping[str, Any] | None = None) -> Dict[str, Any]:
    """Compare buying against renting over ``termYears`` for one input record.

    Args:
        params: Partial input record keyed by the public input names
            (``purchasePrice``, ``downPayment``, ``mortgageRate`` ...). Missing
            fields take the values in ``DEFAULT_PARAMS``.  The mapping is
            never mutated.

    Returns:
        The result bundle: echoed inputs, purchase and rental breakdowns,
        ``ResultValue`` (positive means buying is cheaper), ``Decision``
        (``BUY``/``RENT``/``EVEN``), ``CompareText``, a rounded monthly summary
        and ``YearlyBreakdown`` (one row per year).

    Raises:
        ValidationError: if the input record is outside the modelled domain.
    """
    p = normalise(params)
    rows, acc = simulate_years(p)
    totals = compute_totals(p, acc)
    apply_cumulative_series(p, rows)

    result: Dict[str, Any] = {}
    result.update(_echoed_inputs(p))
    result.update(
        {
            "CompareText": totals.compare_text,
            "ResultValue": totals.result_value,
            "Decision": totals.decision,
        }
    )
    result.update(_purchase_breakdown(p, totals))
    result.update(monthly_summary(p))
    result.update(_rental_breakdown(p, totals))
    result.update(
        {
            "PurchaseCostsWithinObservationPeriod": totals.purchase_costs_within_period,
            "RentalCostsWithinObservationPeriod": totals.general_cost_of_rental,
            "TotalOwnerNetTax": totals.total_owner_net_tax,
            "TotalRenterInvestmentTax": totals.total_renter_investment_tax,
            "YieldsOnAssets": totals.yields_on_assets,
            "PropertyValueEndOfTerm": totals.property_value_end,
            "RenterInitialCapital": p.investable_initial,
            "EvenBand": p.even_band,
            "MortgageAmount": p.mortgage_amount,
            "YearlyBreakdown": rows,
            "ScenarioMode": p.scenario_mode.value,
            "PostReform": p.post_reform,
            "ErrorMsg": None,
        }
    )
    return result


def echoed_params(result: Mapping[str, Any]) -> Dict[str, Any]:
    """Rebuild an input record from a result bundle's echoed fields."""
    return {
        "purchasePrice": result["PurchasePrice"],
        "downPayment": result["DownPayment"],
        "mortgageRate": result["MortgageInterestRatePercent"] / 100.0,
        "termYears": result["TermYears"],
        "amortizationYears": result["AmortizationPeriodYears"],
        "annualAmortization": result["AnnualAmortizationAmount"],
        "annualMaintenanceCosts": result["AnnualSupplementalMaintenanceCosts"],
        "totalRenovations": result["TotalRenovations"],
        "additionalPurchaseCosts": result["AdditionalPurchaseExpenses"],
        "imputedRentalValue": result["ImputedRentalValue"],
        "propertyTaxDeductions": result["PropertyExpenseTaxDeductions"],
        "marginalTaxRate": result["MarginalTaxRatePercent"] / 100.0,
        "propertyAppreciationRate": result["AnnualPropertyValueIncreasePercent"] / 100.0,
        "monthlyRent": result["MonthlyRentDue"],
        "annualRentalCosts": result["AnnualSupplementalCostsRent"],
        "investmentYieldRate": result["InvestmentYieldRatePercent"] / 100.0,
        "scenarioMode": result["ScenarioMode"],
        "postReform": result["PostReform"],
        "evenBand": result["EvenBand"],
    }
