"""Pytest wrappers for the QA gates (golden, invariants, sensitivity) and the runner."""

from __future__ import annotations

import pytest

import run_all_qa
from swissrbv.qa.qa_golden import main as _golden_main
from swissrbv.qa.qa_invariants import check_result, scenario_grid
from swissrbv.qa.qa_invariants import main as _invariants_main
from swissrbv.qa.qa_sensitivity import main as _sensitivity_main


def test_golden() -> None:
    """Pinned scenarios stay within one centime."""
    _golden_main([])


def test_golden_print_baseline(capsys) -> None:
    _golden_main(["--print-baseline"])
    assert "fully_amortised_mid_term" in capsys.readouterr().out


def test_invariants() -> None:
    _invariants_main([])


def test_invariant_checker_flags_tampering() -> None:
    from swissrbv.core.engine import calculate

    params = next(iter(scenario_grid()))
    result = calculate(params)
    assert check_result(params, result) == []

    result["ResultValue"] += 1.0
    errs = check_result(params, result)
    assert any("ResultValue" in e for e in errs)


def test_sensitivity() -> None:
    _sensitivity_main([])


class TestRunAllQa:
    def test_list(self, capsys) -> None:
        assert run_all_qa.main(["--list"]) == 0
        out = capsys.readouterr().out
        for name in ("smoke", "golden", "invariants", "sensitivity", "equity_monitor"):
            assert name in out

    def test_unknown_suite(self) -> None:
        assert run_all_qa.main(["--only", "nope"]) == 1

    @pytest.mark.parametrize("suite", ["golden", "equity_monitor"])
    def test_single_suite(self, suite: str) -> None:
        assert run_all_qa.main(["--only", suite]) == 0
