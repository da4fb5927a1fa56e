import json

import pytest

from swissrbv import __main__ as cli
from swissrbv.qa.qa_golden import BASELINE


def _write_config(tmp_path, **sections):
    path = tmp_path / "scenario.json"
    path.write_text(json.dumps(sections))
    return str(path)


def test_cli_example_is_valid_json(capsys):
    rc = cli.main(["--example"])
    assert rc == 0

    data = json.loads(capsys.readouterr().out)
    assert set(data) >= {"params", "breakeven", "sweep"}
    assert data["params"]["scenarioMode"] == "EQUAL_CONSUMPTION"
    assert data["breakeven"]["min_price"] == 500_000


def test_cli_json_summary_from_config(tmp_path, capsys):
    cfg = _write_config(tmp_path, params=BASELINE)
    rc = cli.main(["--config", cfg, "--json"])
    assert rc == 0

    captured = capsys.readouterr()
    data = json.loads(captured.out)
    assert data["Decision"] == "BUY"
    assert data["ResultValue"] == pytest.approx(380_279.34)
    assert data["MortgageAtEndOfRelevantTimePeriod"] == 1_280_000
    assert "cheaper than renting" in captured.err


def test_cli_defaults_warn_about_ltv(capsys):
    """Default inputs finance more than 80 % of the price; the CLI says so on stderr."""
    rc = cli.main(["--json"])
    assert rc == 0
    assert "Loan-to-value" in capsys.readouterr().err


def test_cli_ledger_csv_with_override(tmp_path, capsys):
    cfg = _write_config(tmp_path, params=BASELINE)
    rc = cli.main(["--config", cfg, "--set", "termYears=5"])
    assert rc == 0

    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[0].startswith("year,startingBalance,endingBalance")
    assert len(lines) == 6


def test_cli_malformed_override_is_ignored(capsys):
    rc = cli.main(["--json", "--set", "termYears"])
    assert rc == 0
    assert "malformed --set" in capsys.readouterr().err


def test_cli_invalid_params_exit_1(tmp_path, capsys):
    cfg = _write_config(tmp_path, params=BASELINE)
    rc = cli.main(["--config", cfg, "--set", "marginalTaxRate=1.5"])
    assert rc == 1
    err = capsys.readouterr().err
    assert "Config error: marginalTaxRate: out_of_range" in err


def test_cli_missing_config(tmp_path, capsys):
    rc = cli.main(["--config", str(tmp_path / "nope.json")])
    assert rc == 1
    assert "config file not found" in capsys.readouterr().err


def test_cli_breakeven(tmp_path, capsys):
    cfg = _write_config(
        tmp_path,
        params={**BASELINE, "monthlyRent": 4_000},
        breakeven={"derive": True},
    )
    rc = cli.main(["--config", cfg, "--breakeven"])
    assert rc == 0

    captured = capsys.readouterr()
    report = json.loads(captured.out)
    assert report["breakevenFound"] is True
    assert abs(report["resultValue"]) <= 1_000
    assert "Break-even found at" in captured.err


def test_cli_sweep_to_file(tmp_path, capsys):
    cfg = _write_config(
        tmp_path,
        params=BASELINE,
        sweep={"postReform": {"min": 0, "max": 1, "step": 1}},
    )
    out = tmp_path / "sweep.csv"
    rc = cli.main(["--config", cfg, "--sweep", "--output", str(out)])
    assert rc == 0

    lines = out.read_text().strip().splitlines()
    assert len(lines) == 3
    assert "postReform" in lines[0].split(",")
    assert "2 combination(s)" in capsys.readouterr().err


def test_cli_sweep_bad_step_exit_1(tmp_path, capsys):
    cfg = _write_config(tmp_path, params=BASELINE, sweep={"mortgageRate": {"min": 0.01, "max": 0.02, "step": 0}})
    rc = cli.main(["--config", cfg, "--sweep"])
    assert rc == 1
    assert "non_positive_step" in capsys.readouterr().err


def test_cli_derive_recomputes_financing(tmp_path, capsys):
    cfg = _write_config(tmp_path, params={**BASELINE, "purchasePrice": 1_500_000})
    rc = cli.main(["--config", cfg, "--derive", "--json"])
    assert rc == 0

    data = json.loads(capsys.readouterr().out)
    assert data["MortgageAmount"] == 1_200_000


def test_cli_modes_are_exclusive(capsys):
    with pytest.raises(SystemExit):
        cli.main(["--json", "--sweep"])


def test_cli_warns_when_owner_is_underwater(tmp_path, capsys):
    cfg = _write_config(
        tmp_path,
        params={
            "purchasePrice": 1_000_000,
            "downPayment": 100_000,
            "amortizationYears": 0,
            "annualAmortization": 0,
            "propertyAppreciationRate": -0.05,
            "termYears": 5,
        },
    )
    rc = cli.main(["--config", cfg, "--json"])
    assert rc == 0

    err = capsys.readouterr().err
    assert "Warning: The mortgage exceeds the property value for 3 year(s)." in err
    assert "First occurring in year 3" in err
    assert "still underwater" in err


def test_cli_baseline_has_no_underwater_warning(tmp_path, capsys):
    cfg = _write_config(tmp_path, params=BASELINE)
    assert cli.main(["--config", cfg, "--json"]) == 0
    assert "exceeds the property value" not in capsys.readouterr().err
