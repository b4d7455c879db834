"""Pytest wrappers for the QA scripts and maintenance tooling."""

from __future__ import annotations

import datetime as dt
import importlib.util
from pathlib import Path

import pytest

import run_all_qa
from rma import __main__ as cli
from rma.core.tax_tables import TAX_RULES_LAST_REVIEWED
from rma.qa import qa_truth_tables, smoke_check

_ROOT = Path(__file__).resolve().parents[1]


def _load_freshness_checker():
    path = _ROOT / "tools" / "maintenance" / "check_policy_freshness.py"
    mod_spec = importlib.util.spec_from_file_location("check_policy_freshness", path)
    mod = importlib.util.module_from_spec(mod_spec)
    mod_spec.loader.exec_module(mod)
    return mod


def test_truth_tables(capsys) -> None:
    qa_truth_tables.main([])
    assert "[TRUTH TABLES OK]" in capsys.readouterr().out


def test_smoke_check(capsys) -> None:
    smoke_check.main([])
    assert "[SMOKE CHECK OK]" in capsys.readouterr().out


def test_run_all_qa(capsys) -> None:
    # freshness depends on the wall clock; it has its own tests below
    assert run_all_qa.main(["--skip", "policy_freshness"]) == 0
    out = capsys.readouterr().out
    assert "=== RUN_ALL_QA PASS (3 suites) ===" in out


def test_run_all_qa_cli_gate_covers_every_command(capsys) -> None:
    assert run_all_qa.main(["--only", "cli"]) == 0
    out = capsys.readouterr().out
    for command in cli._COMMANDS:
        assert f"  ok  {command}" in out


def test_run_all_qa_list(capsys) -> None:
    assert run_all_qa.main(["--list"]) == 0
    assert capsys.readouterr().out.split() == ["smoke", "truth_tables", "cli", "policy_freshness"]


@pytest.mark.parametrize("flag", ["--only", "--skip"])
def test_run_all_qa_rejects_unknown_suite(flag: str) -> None:
    assert run_all_qa.main([flag, "golden"]) == 1


def test_policy_freshness_ok_right_after_review() -> None:
    checker = _load_freshness_checker()
    failed, lines = checker.check(TAX_RULES_LAST_REVIEWED + dt.timedelta(days=10))
    assert failed is False
    assert lines[0].startswith("OK: rma.core.tax_tables.TAX_RULES_LAST_REVIEWED")


def test_policy_freshness_warns_then_fails() -> None:
    checker = _load_freshness_checker()
    failed, lines = checker.check(TAX_RULES_LAST_REVIEWED + dt.timedelta(days=340))
    assert failed is False
    assert lines[0].startswith("::warning::")

    failed, lines = checker.check(TAX_RULES_LAST_REVIEWED + dt.timedelta(days=400))
    assert failed is True
    assert lines[0].startswith("::error::")
