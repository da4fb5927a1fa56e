"""Single forward pass over the horizon (buyer and renter in one loop).

Each year is processed in a fixed order: mortgage, owner tax, renter
contribution, renter portfolio, rent, property snapshot.  One ledger row is
written per year and never touched again by this module; the aggregator later
adds the cumulative cost columns.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from .params import NormalisedParams, ScenarioMode


@dataclass
class YearAccumulators:
    """Running totals carried across years and handed to the aggregator."""

    remaining_balance: float = 0.0
    interest_costs: float = 0.0
    amortization_costs: float = 0.0
    maintenance_costs: float = 0.0
    total_owner_net_tax: float = 0.0
    portfolio: float = 0.0
    cumulative_investment_gains: float = 0.0
    cumulative_renter_investment_tax: float = 0.0
    cumulative_contrib_principal: float = 0.0
    cumulative_rental_costs: float = 0.0


def property_value_at(p: NormalisedParams, year: int) -> float:
    """Market value of the property at the end of ``year`` (compound appreciation)."""
    return p.purchase_price * (1.0 + p.property_appreciation_rate) ** year


def owner_tax_components(p: NormalisedParams, interest: float) -> Tuple[float, float, float]:
    """Return (tax on imputed rent, interest deduction saving, expense deduction saving).

    Under the reformed regime the imputed rental value and its counterpart
    deductions no longer exist for the primary residence.
    """
    if p.post_reform:
        return 0.0, 0.0, 0.0
    t = p.marginal_tax_rate
    return p.imputed_rental_value * t, interest * t, p.property_tax_deductions * t


def renter_contribution(p: NormalisedParams, year: int, interest: float, amort: float) -> float:
    """Amount the renter adds to (or, if negative, withdraws from) the portfolio."""
    mode = p.scenario_mode
    if mode is ScenarioMode.EQUAL_SAVINGS:
        return p.annual_amortization if year <= p.contribution_years else 0.0
    if mode is ScenarioMode.CASHFLOW_PARITY:
        buyer_cash = interest + amort + p.annual_maintenance_costs
        renter_cash = 12.0 * p.monthly_rent + p.annual_rental_costs
        return buyer_cash - renter_cash
    return 0.0


def simulate_years(p: NormalisedParams) -> Tuple[List[Dict[str, Any]], YearAccumulators]:
    """Run the year loop and return ``(ledger_rows, accumulators)``.

    Total over the validated domain: no exceptions, exactly ``term_years`` rows.
    """
    acc = YearAccumulators(remaining_balance=p.mortgage_amount, portfolio=p.investable_initial)
    rows: List[Dict[str, Any]] = []
    annual_rent = 12.0 * p.monthly_rent

    for year in range(1, p.term_years + 1):
        starting_balance = acc.remaining_balance

        # Mortgage: declining balance; principal payment never exceeds what is owed.
        interest = starting_balance * p.mortgage_rate if starting_balance > 0.0 else 0.0
        scheduled = p.annual_amortization if year <= p.amortization_years else 0.0
        amort = min(scheduled, starting_balance)
        acc.interest_costs += interest
        acc.amortization_costs += amort
        acc.maintenance_costs += p.annual_maintenance_costs
        acc.remaining_balance = max(0.0, starting_balance - amort)

        tax_imputed, tax_saving_interest, tax_saving_expenses = owner_tax_components(p, interest)
        owner_net_tax = tax_imputed - tax_saving_interest - tax_saving_expenses
        acc.total_owner_net_tax += owner_net_tax

        contrib = renter_contribution(p, year, interest, amort)

        # Gains accrue on the start-of-year balance; the contribution lands at year end.
        # Tax on gains is tracked, not withdrawn from the portfolio.
        gains = acc.portfolio * p.investment_yield_rate
        renter_tax = gains * p.marginal_tax_rate
        acc.cumulative_investment_gains += gains
        acc.cumulative_renter_investment_tax += renter_tax
        acc.portfolio = acc.portfolio + gains + contrib
        acc.cumulative_contrib_principal += contrib

        acc.cumulative_rental_costs += annual_rent + p.annual_rental_costs

        property_value = property_value_at(p, year)
        ending_balance = acc.remaining_balance
        ltv_percent = ending_balance / property_value * 100.0 if property_value > 0.0 else 0.0

        buy_outlay = interest + p.annual_maintenance_costs + owner_net_tax
        rent_outlay = annual_rent + p.annual_rental_costs + renter_tax

        rows.append(
            {
                "year": year,
                "startingBalance": starting_balance,
                "endingBalance": ending_balance,
                "annualInterest": interest,
                "annualAmortization": amort,
                "annualMaintenance": p.annual_maintenance_costs,
                "annualRent": annual_rent,
                "annualRentalCosts": p.annual_rental_costs,
                "annualTaxDifference": owner_net_tax,
                "taxImputedRent": tax_imputed,
                "taxSavingsInterest": tax_saving_interest,
                "taxSavingsPropertyExpenses": tax_saving_expenses,
                "renterContribution": contrib,
                "cumulativeRenterPrincipal": acc.cumulative_contrib_principal,
                "investmentGainsThisYear": gains,
                "investmentIncomeTaxThisYear": renter_tax,
                "cumulativeInvestmentGains": acc.cumulative_investment_gains,
                "portfolioValueEndOfYear": acc.portfolio,
                "cumulativeAmortizationToDate": acc.amortization_costs,
                "propertyValueEndOfYear": property_value,
                "homeownerEquityEndOfYear": property_value - ending_balance,
                "ltvPercentEndOfYear": ltv_percent,
                "buyAnnualCashOutlay": buy_outlay,
                "rentAnnualCashOutlay": rent_outlay,
                "netMonthlyDiffThisYear": (buy_outlay - rent_outlay) / 12.0,
            }
        )

    return rows, acc
