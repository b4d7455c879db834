import json

import pytest

from rma import __main__ as cli

_COMMANDS = [
    "amortize",
    "regulation",
    "acquisition-tax",
    "capital-gains",
    "property-tax",
    "scenario",
    "loan-costs",
    "invest",
]


@pytest.mark.parametrize("command", _COMMANDS)
def test_cli_json_runs_with_defaults(command, capsys):
    rc = cli.main([command, "--json"])
    assert rc == 0

    data = json.loads(capsys.readouterr().out)
    assert data["command"] == command
    assert data["result"]
    assert len(data["inputs_hash"]) == 64


def test_cli_acquisition_defaults_match_worked_example(capsys):
    assert cli.main(["acquisition-tax"]) == 0
    result = json.loads(capsys.readouterr().out)["result"]
    assert result["total_tax"] == pytest.approx(3_150)
    assert result["applied_marginal_rate_percent"] == pytest.approx(3.0)


def test_cli_regulation_flags_excess_dsr(capsys):
    assert cli.main(["regulation"]) == 0
    result = json.loads(capsys.readouterr().out)["result"]
    assert result["dsr_percent"] > 40.0
    assert result["is_within_limits"] is False
    assert result["approved_max_loan"] == pytest.approx(result["max_loan_by_dsr"], rel=1e-9)


def test_cli_amortize_defaults_to_csv(capsys):
    assert cli.main(["amortize"]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[0] == "period,payment,principal,interest,balance"
    # annual subsample of a 30-year loan: 12 monthly rows + 29 further year ends
    assert len(lines) == 1 + 12 + 29


def test_cli_scenario_csv(capsys):
    assert cli.main(["scenario"]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[0] == "year,index,yearly_change_pct,cumulative_change_pct"
    assert len(lines) == 6


def test_cli_example_prints_defaults(capsys):
    assert cli.main(["capital-gains", "--example"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["acquisition_price"] == 60_000.0
    assert data["holding_years"] == 5


def test_cli_set_overrides_with_coercion(capsys):
    rc = cli.main(
        [
            "amortize",
            "--json",
            "--set", "principal=120000000",
            "--set", "annual_rate_percent=6",
            "--set", "term_years=10",
            "--set", "repayment_scheme=equal_principal",
            "--set", "subsample=all",
        ]
    )
    assert rc == 0
    data = json.loads(capsys.readouterr().out)
    assert data["inputs"]["principal"] == 120_000_000
    assert len(data["result"]["entries"]) == 120
    assert data["result"]["first_payment"] == pytest.approx(1_600_000)


def test_cli_set_bool(capsys):
    rc = cli.main(["acquisition-tax", "--set", "ownership_count_after_purchase=2", "--set", "is_regulated_zone=true"])
    assert rc == 0
    result = json.loads(capsys.readouterr().out)["result"]
    assert result["applied_marginal_rate_percent"] == pytest.approx(8.0)


def test_cli_unknown_override_is_ignored(capsys):
    assert cli.main(["loan-costs", "--set", "nonsense=1"]) == 0
    captured = capsys.readouterr()
    assert "unknown input" in captured.err
    assert json.loads(captured.out)["result"]["total"] == pytest.approx(1_950_000)


def test_cli_config_file(tmp_path, capsys):
    cfg = tmp_path / "inputs.json"
    cfg.write_text(json.dumps({"tax_base_krw": 100_000_000}))
    assert cli.main(["property-tax", "--config", str(cfg)]) == 0
    result = json.loads(capsys.readouterr().out)["result"]
    assert result["property_tax"] == pytest.approx(120_000)


def test_cli_missing_config(tmp_path, capsys):
    rc = cli.main(["property-tax", "--config", str(tmp_path / "missing.json")])
    assert rc == 1
    assert "config file not found" in capsys.readouterr().err


def test_cli_invalid_input_exits_1(capsys):
    rc = cli.main(["capital-gains", "--set", "residency_years=9"])
    assert rc == 1
    err = capsys.readouterr().err
    assert "Input error" in err
    assert "residency_years" in err


def test_cli_output_file(tmp_path, capsys):
    out = tmp_path / "schedule.csv"
    assert cli.main(["amortize", "--output", str(out)]) == 0
    assert out.read_text().startswith("period,")
    assert "Results written to" in capsys.readouterr().err


def test_cli_invest_csv(capsys):
    assert cli.main(["invest", "--set", "holding_years=3"]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[0] == "year,property_value,equity,cumulative_cashflow,remaining_loan"
    assert len(lines) == 1 + 4


def test_cli_invest_json_jeonse(capsys):
    assert cli.main(["invest", "--json", "--set", "investment_type=jeonse"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["inputs"]["investment_type"] == "jeonse"
    assert len(data["result"]["path"]) == 11
    assert data["result"]["equity_amount"] == pytest.approx(30_000)


def test_cli_invest_rejects_fractional_holding(capsys):
    assert cli.main(["invest", "--set", "holding_years=2.5"]) == 1
    assert "holding_years" in capsys.readouterr().err
