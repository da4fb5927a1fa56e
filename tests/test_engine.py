"""End-to-end tests for calculate(): ledger, totals, verdict and monthly summary."""

from __future__ import annotations

import pytest

from swissrbv.core.engine import calculate, echoed_params

BASELINE = {
    "purchasePrice": 2_000_000,
    "downPayment": 400_000,
    "mortgageRate": 0.012,
    "termYears": 10,
    "amortizationYears": 10,
    "annualAmortization": 32_000,
    "annualMaintenanceCosts": 20_000,
    "totalRenovations": 0,
    "additionalPurchaseCosts": 0,
    "imputedRentalValue": 42_900,
    "propertyTaxDeductions": 13_000,
    "marginalTaxRate": 0.25,
    "propertyAppreciationRate": 0.01,
    "monthlyRent": 5_500,
    "annualRentalCosts": 2_000,
    "investmentYieldRate": 0.03,
    "scenarioMode": "EQUAL_CONSUMPTION",
    "postReform": False,
}

# 1.03**10 - 1 applied to the 400k the renter never tied up.
BASELINE_GAINS = 400_000 * (1.03 ** 10 - 1)
BASELINE_PROPERTY_END = 2_000_000 * 1.01 ** 10


class TestBaseline:
    def test_mortgage_schedule(self) -> None:
        rows = calculate(BASELINE)["YearlyBreakdown"]
        assert len(rows) == 10
        assert rows[0]["year"] == 1
        assert rows[0]["startingBalance"] == 1_600_000
        assert rows[0]["annualInterest"] == pytest.approx(19_200)
        assert rows[0]["endingBalance"] == 1_568_000
        assert rows[-1]["endingBalance"] == 1_280_000

    def test_totals(self) -> None:
        r = calculate(BASELINE)
        assert r["InterestCosts"] == pytest.approx(174_720)
        assert r["AmortizationCosts"] == pytest.approx(320_000)
        assert r["SupplementalMaintenanceCosts"] == pytest.approx(200_000)
        assert r["GeneralCostOfPurchase"] == pytest.approx(694_720)
        assert r["TotalOwnerNetTax"] == pytest.approx(31_070)
        assert r["TotalRenterInvestmentTax"] == pytest.approx(0.25 * BASELINE_GAINS)
        assert r["MinusPropertyValue"] == pytest.approx(-BASELINE_PROPERTY_END)
        assert r["MortgageAtEndOfRelevantTimePeriod"] == 1_280_000
        assert r["TotalPurchaseCost"] == pytest.approx(-237_845.88875682)
        assert r["GeneralCostOfRental"] == pytest.approx(680_000)
        assert r["TotalRentalCost"] == pytest.approx(142_433.4482623512)
        assert r["ResultValue"] == pytest.approx(380_279.3370191712)

    def test_verdict(self) -> None:
        r = calculate(BASELINE)
        assert r["Decision"] == "BUY"
        assert r["CompareText"] == (
            "Buying your home will work out CHF 380,279.34 cheaper than renting over the relevant time frame."
        )
        assert r["ErrorMsg"] is None

    def test_equal_consumption_rental_breakdown(self) -> None:
        r = calculate(BASELINE)
        assert r["ExcludingYieldsOnAssets"] == 0.0
        assert r["ExcludingSavingsContributions"] == 0.0
        assert r["ExcludingDownPayment"] == -400_000
        assert r["YieldsOnAssets"] == pytest.approx(BASELINE_GAINS)

    def test_monthly_summary(self) -> None:
        r = calculate(BASELINE)
        assert r["MonthlyInterestPayment"] == 1_600
        assert r["MonthlyAmortizationPayment"] == 2_667
        assert r["MonthlyMaintenanceCosts"] == 1_667
        assert r["TotalMonthlyExpenses"] == 5_934
        assert r["MonthlyRentPayment"] == 5_500
        assert r["MonthlyRentalCosts"] == 167
        assert r["MonthlySavingsContribution"] == 0
        assert r["TotalMonthlyRentingExpenses"] == 5_667

    def test_echoed_inputs(self) -> None:
        r = calculate(BASELINE)
        assert r["PurchasePrice"] == 2_000_000
        assert r["PurchasePriceM"] == 2.0
        assert r["MortgageInterestRatePercent"] == pytest.approx(1.2)
        assert r["MarginalTaxRatePercent"] == pytest.approx(25.0)
        assert r["TermYears"] == 10
        assert r["MortgageAmount"] == 1_600_000
        assert r["RenterInitialCapital"] == 400_000
        assert r["ScenarioMode"] == "EQUAL_CONSUMPTION"
        assert r["PostReform"] is False
        assert r["EvenBand"] == 5_000

    def test_price_in_millions_rounds_half_up(self) -> None:
        r = calculate({**BASELINE, "purchasePrice": 2_250_000})
        assert r["PurchasePriceM"] == pytest.approx(2.3)

    def test_input_not_mutated(self) -> None:
        params = dict(BASELINE)
        calculate(params)
        assert params == BASELINE


class TestLedgerInvariants:
    @pytest.mark.parametrize("mode", ["EQUAL_CONSUMPTION", "EQUAL_SAVINGS", "CASHFLOW_PARITY"])
    def test_final_row_matches_totals_exactly(self, mode: str) -> None:
        r = calculate({**BASELINE, "scenarioMode": mode, "totalRenovations": 30_000})
        last = r["YearlyBreakdown"][-1]
        assert r["ResultValue"] == r["TotalRentalCost"] - r["TotalPurchaseCost"]
        assert last["totalPurchaseCostToDate"] == r["TotalPurchaseCost"]
        assert last["totalRentalCostToDate"] == r["TotalRentalCost"]
        assert last["cumulativeAdvantage"] == r["ResultValue"]

    def test_column_sums_match_totals(self) -> None:
        r = calculate(BASELINE)
        rows = r["YearlyBreakdown"]
        assert sum(x["annualInterest"] for x in rows) == pytest.approx(r["InterestCosts"])
        assert sum(x["annualAmortization"] for x in rows) == pytest.approx(r["AmortizationCosts"])
        assert sum(x["annualMaintenance"] for x in rows) == pytest.approx(r["SupplementalMaintenanceCosts"])
        assert sum(x["annualRent"] + x["annualRentalCosts"] for x in rows) == pytest.approx(r["GeneralCostOfRental"])

    def test_balances_chain(self) -> None:
        rows = calculate(BASELINE)["YearlyBreakdown"]
        for prev, row in zip(rows, rows[1:]):
            assert row["startingBalance"] == prev["endingBalance"]

    def test_advantage_delta(self) -> None:
        rows = calculate(BASELINE)["YearlyBreakdown"]
        assert rows[0]["advantageDeltaFromPriorYear"] == 0.0
        for prev, row in zip(rows, rows[1:]):
            assert row["advantageDeltaFromPriorYear"] == pytest.approx(
                row["cumulativeAdvantage"] - prev["cumulativeAdvantage"]
            )

    def test_equity_and_ltv_columns(self) -> None:
        row = calculate(BASELINE)["YearlyBreakdown"][0]
        assert row["propertyValueEndOfYear"] == pytest.approx(2_020_000)
        assert row["homeownerEquityEndOfYear"] == pytest.approx(2_020_000 - 1_568_000)
        assert row["ltvPercentEndOfYear"] == pytest.approx(1_568_000 / 2_020_000 * 100)

    def test_cash_outlay_columns(self) -> None:
        row = calculate(BASELINE)["YearlyBreakdown"][0]
        # 19 200 interest + 20 000 maintenance + (10 725 - 4 800 - 3 250) net tax
        assert row["buyAnnualCashOutlay"] == pytest.approx(41_875)
        assert row["rentAnnualCashOutlay"] == pytest.approx(68_000 + 0.25 * 12_000)
        assert row["netMonthlyDiffThisYear"] == pytest.approx((41_875 - 71_000) / 12)

    def test_echoed_params_reproduce_result(self) -> None:
        params = {**BASELINE, "scenarioMode": "CASHFLOW_PARITY", "totalRenovations": 10_000}
        first = calculate(params)
        second = calculate(echoed_params(first))
        assert second["ResultValue"] == pytest.approx(first["ResultValue"])
        assert second["TotalPurchaseCost"] == pytest.approx(first["TotalPurchaseCost"])
        assert second["TotalRentalCost"] == pytest.approx(first["TotalRentalCost"])
        assert second["Decision"] == first["Decision"]

    def test_single_year_horizon(self) -> None:
        r = calculate({**BASELINE, "termYears": 1})
        assert len(r["YearlyBreakdown"]) == 1
        assert r["AmortizationCosts"] == 32_000


class TestFullyAmortisedMidTerm:
    def test_amortization_is_clamped(self) -> None:
        r = calculate({**BASELINE, "annualAmortization": 200_000})
        rows = r["YearlyBreakdown"]
        assert rows[7]["endingBalance"] == 0
        assert rows[8]["annualInterest"] == 0
        assert rows[9]["annualInterest"] == 0
        assert rows[8]["annualAmortization"] == 0
        assert r["AmortizationCosts"] == 1_600_000
        assert r["InterestCosts"] == pytest.approx(86_400)
        assert r["MortgageAtEndOfRelevantTimePeriod"] == 0
        assert all(row["endingBalance"] >= 0 for row in rows)

    def test_totals(self) -> None:
        r = calculate({**BASELINE, "annualAmortization": 200_000})
        assert r["TotalPurchaseCost"] == pytest.approx(-304_085.8887568212)
        assert r["ResultValue"] == pytest.approx(446_519.3370191724)

    def test_partial_final_payment(self) -> None:
        rows = calculate({**BASELINE, "annualAmortization": 300_000})["YearlyBreakdown"]
        # 5 x 300k repays 1.5M; year 6 only owes the remaining 100k.
        assert rows[5]["annualAmortization"] == 100_000
        assert rows[5]["endingBalance"] == 0


class TestPostReform:
    def test_owner_tax_columns_are_zero(self) -> None:
        rows = calculate({**BASELINE, "postReform": True})["YearlyBreakdown"]
        for row in rows:
            assert row["taxImputedRent"] == 0
            assert row["taxSavingsInterest"] == 0
            assert row["taxSavingsPropertyExpenses"] == 0
            assert row["annualTaxDifference"] == 0

    def test_shift_equals_owner_net_tax(self) -> None:
        pre = calculate(BASELINE)
        post = calculate({**BASELINE, "postReform": True})
        assert post["ResultValue"] - pre["ResultValue"] == pytest.approx(pre["TotalOwnerNetTax"])
        assert post["ResultValue"] == pytest.approx(411_349.3370191712)
        # Renter-side tax is unaffected by the reform.
        assert post["TotalRenterInvestmentTax"] == pytest.approx(pre["TotalRenterInvestmentTax"])
        assert post["PostReform"] is True


class TestEqualSavings:
    def test_contributions(self) -> None:
        r = calculate({**BASELINE, "scenarioMode": "EQUAL_SAVINGS"})
        rows = r["YearlyBreakdown"]
        assert all(row["renterContribution"] == 32_000 for row in rows)
        assert rows[-1]["cumulativeRenterPrincipal"] == 320_000
        assert r["ExcludingSavingsContributions"] == -320_000
        assert r["MonthlySavingsContribution"] == 2_667
        assert r["TotalMonthlyRentingExpenses"] == 5_667 + 2_667

    def test_rental_cost_drop(self) -> None:
        base = calculate(BASELINE)
        boosted = calculate({**BASELINE, "scenarioMode": "EQUAL_SAVINGS"})
        contrib_gains = 32_000 * sum(1.03 ** k for k in range(10)) - 320_000
        assert base["TotalRentalCost"] - boosted["TotalRentalCost"] == pytest.approx(320_000 + contrib_gains)
        assert boosted["TotalPurchaseCost"] == pytest.approx(base["TotalPurchaseCost"] - 0.25 * contrib_gains)
        assert boosted["TotalRentalCost"] == pytest.approx(-224_410.6897047118)
        assert boosted["ResultValue"] == pytest.approx(25_146.2335438752)

    def test_contributions_stop_after_amortization_period(self) -> None:
        rows = calculate({**BASELINE, "scenarioMode": "EQUAL_SAVINGS", "amortizationYears": 4})["YearlyBreakdown"]
        assert [row["renterContribution"] for row in rows[:5]] == [32_000] * 4 + [0]

    def test_no_monthly_savings_without_amortization(self) -> None:
        r = calculate({**BASELINE, "scenarioMode": "EQUAL_SAVINGS", "amortizationYears": 0})
        assert r["MonthlySavingsContribution"] == 0


CASHFLOW_CASE = {
    "purchasePrice": 1_200_000,
    "downPayment": 240_000,
    "mortgageRate": 0.02,
    "annualAmortization": 24_000,
    "annualMaintenanceCosts": 12_000,
    "monthlyRent": 3_500,
    "annualRentalCosts": 6_000,
    "termYears": 5,
    "investmentYieldRate": 0.04,
    "scenarioMode": "CASHFLOW_PARITY",
}


class TestCashflowParity:
    def test_contribution_formula(self) -> None:
        row = calculate(CASHFLOW_CASE)["YearlyBreakdown"][0]
        assert row["annualInterest"] == pytest.approx(19_200)
        assert row["renterContribution"] == pytest.approx((19_200 + 24_000 + 12_000) - (42_000 + 6_000))

    def test_withdrawal(self) -> None:
        r = calculate({**CASHFLOW_CASE, "monthlyRent": 4_500})
        contributions = [row["renterContribution"] for row in r["YearlyBreakdown"]]
        assert contributions == pytest.approx([-4_800, -5_280, -5_760, -6_240, -6_720])
        assert r["YearlyBreakdown"][-1]["cumulativeRenterPrincipal"] == pytest.approx(-28_800)
        assert r["ExcludingSavingsContributions"] == pytest.approx(28_800)

    def test_gains_accrue_on_start_of_year_balance(self) -> None:
        r = calculate({**CASHFLOW_CASE, "monthlyRent": 4_500})
        rows = r["YearlyBreakdown"]
        assert rows[0]["investmentGainsThisYear"] == pytest.approx(240_000 * 0.04)
        assert rows[0]["portfolioValueEndOfYear"] == pytest.approx(240_000 * 1.04 - 4_800)
        assert rows[1]["investmentGainsThisYear"] == pytest.approx(rows[0]["portfolioValueEndOfYear"] * 0.04)

    def test_renovations_seed_renter_portfolio(self) -> None:
        r = calculate({**CASHFLOW_CASE, "totalRenovations": 60_000})
        assert r["RenterInitialCapital"] == 300_000
        assert calculate({**CASHFLOW_CASE, "scenarioMode": "EQUAL_CONSUMPTION", "totalRenovations": 60_000})[
            "RenterInitialCapital"
        ] == 240_000

    def test_monthly_savings_is_cashflow_gap(self) -> None:
        r = calculate({**BASELINE, "scenarioMode": "CASHFLOW_PARITY"})
        assert r["MonthlySavingsContribution"] == 5_934 - 5_667
        assert r["TotalMonthlyRentingExpenses"] == r["TotalMonthlyExpenses"]


class TestDecision:
    def test_rent_verdict(self) -> None:
        r = calculate({**BASELINE, "monthlyRent": 2_000})
        assert r["Decision"] == "RENT"
        assert r["ResultValue"] == pytest.approx(380_279.3370191712 - 420_000)
        assert r["CompareText"] == "Renting is CHF 39,720.66 cheaper than buying over the relevant time frame."

    def test_even_band(self) -> None:
        r = calculate({**BASELINE, "evenBand": 500_000})
        assert r["Decision"] == "EVEN"
        assert r["CompareText"] == (
            "Buying and renting are effectively even (within CHF 500,000) over the relevant time frame."
        )

    def test_zero_band_never_even(self) -> None:
        assert calculate({**BASELINE, "evenBand": 0})["Decision"] == "BUY"
