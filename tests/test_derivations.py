"""Tests for inputs derived from the purchase price."""

from __future__ import annotations

import pytest

from swissrbv.core.derivations import derive_auto_params, derive_inputs
from swissrbv.core.params import ValidationError


class TestDeriveInputs:
    def test_auto_mode(self) -> None:
        d = derive_inputs(1_000_000, 3_000, 10)
        assert d.down_payment == 200_000
        assert d.mortgage == 800_000
        assert d.annual_maintenance_costs == 12_500
        assert d.annual_amortization == 80_000
        assert d.imputed_rental_value == 23_400
        assert d.ltv == pytest.approx(0.8)

    def test_cap66_rounds_mortgage(self) -> None:
        d = derive_inputs(1_000_000, 3_000, 10, mortgage_mode="cap66")
        assert d.mortgage == 666_667
        assert d.down_payment == 333_333

    def test_cap80_with_lender_limit(self) -> None:
        d = derive_inputs(1_000_000, 3_000, 10, mortgage_mode="cap80", mortgage_limit=700_000)
        assert d.mortgage == 700_000
        assert d.down_payment == 300_000

    def test_no_amortization_period(self) -> None:
        assert derive_inputs(1_000_000, 3_000, 0).annual_amortization == 0

    def test_unknown_mortgage_mode(self) -> None:
        with pytest.raises(ValidationError) as exc:
            derive_inputs(1_000_000, 3_000, 10, mortgage_mode="cap90")
        assert exc.value.field == "mortgageMode"

    def test_amounts_are_whole_francs(self) -> None:
        d = derive_inputs(1_234_567, 3_333, 7)
        for value in (d.down_payment, d.annual_maintenance_costs, d.annual_amortization, d.imputed_rental_value):
            assert value == int(value)


class TestDeriveAutoParams:
    def test_uses_record_price(self) -> None:
        base = {"purchasePrice": 1_500_000, "monthlyRent": 4_000, "amortizationYears": 15, "termYears": 12}
        out = derive_auto_params(base)
        assert out["downPayment"] == 300_000
        assert out["annualMaintenanceCosts"] == 18_750
        assert out["annualAmortization"] == 80_000
        assert out["imputedRentalValue"] == 31_200
        assert out["termYears"] == 12

    def test_price_override_does_not_mutate(self) -> None:
        base = {"purchasePrice": 1_500_000, "monthlyRent": 4_000}
        out = derive_auto_params(base, 2_000_000)
        assert out["purchasePrice"] == 2_000_000
        assert out["downPayment"] == 400_000
        assert base == {"purchasePrice": 1_500_000, "monthlyRent": 4_000}

    def test_defaults_fill_missing_fields(self) -> None:
        out = derive_auto_params({})
        # 2M default price, 5 500 default rent, 10 default amortization years
        assert out["downPayment"] == 400_000
        assert out["annualAmortization"] == 160_000
        assert out["imputedRentalValue"] == 42_900
