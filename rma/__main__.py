"""CLI / headless entry point for the RMA financial engines.

Usage
-----
Run an engine with its built-in defaults:
    python -m rma amortize
    python -m rma capital-gains --json

Run from a JSON inputs file:
    python -m rma regulation --config loan.json

Dump the default inputs for a command:
    python -m rma acquisition-tax --example

Override individual inputs on the command line:
    python -m rma amortize --set principal=300000000 --set repayment_scheme=equal_principal

Tabular engines (``amortize``, ``scenario``, ``invest``) print CSV unless
``--json`` is given; all others print JSON.  Prices for the tax and ``invest``
commands are in 만원; loan and regulation amounts are in KRW.

Coverage
--------
``property-tax`` reports the comprehensive real-estate tax (종부세) on the same
base alongside the property tax; there is no separate command for it.  The
statistics engine (correlation, regression, cycle and bubble scoring), the
jeonse loan and the simple rental/gap return metrics take series or
one-off figures and are used as a library only, from ``rma.core.statistics``,
``rma.core.regulation`` and ``rma.core.investment``.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Callable

from rma.core.amortization import LoanTerms, schedule
from rma.core.errors import InvalidInput
from rma.core.investment import InvestmentCase, investment_simulation
from rma.core.loan_costs import loan_costs
from rma.core.regulation import RatioCeilings, RegulatoryInputs, evaluate
from rma.core.scenario import ScenarioInputs, path_to_frame, project
from rma.core.serialization import deterministic_hash, to_jsonable
from rma.core.taxes import (
    AcquisitionTaxCase,
    CapitalGainsCase,
    acquisition_tax,
    capital_gains_tax,
    comprehensive_real_estate_tax,
    property_tax,
)

# ---------------------------------------------------------------------------
# Default inputs per command
# ---------------------------------------------------------------------------
_DEFAULT_INPUTS: dict[str, dict[str, Any]] = {
    "amortize": {
        "principal": 500_000_000.0,    # KRW
        "annual_rate_percent": 4.5,
        "term_years": 30,
        "repayment_scheme": "equal_installment",
        "subsample": "annual",         # "annual" or "all"
    },
    "regulation": {
        "property_value": 900_000_000.0,
        "annual_income": 60_000_000.0,
        "existing_annual_debt_service": 0.0,
        "principal": 500_000_000.0,
        "annual_rate_percent": 4.5,
        "term_years": 30,
        "repayment_scheme": "equal_installment",
        "dsr_max_percent": 40.0,
        "ltv_max_percent": 70.0,
        "dti_max_percent": 50.0,
    },
    "acquisition-tax": {
        "price": 90_000.0,             # 만원 (9억)
        "ownership_count_after_purchase": 1,
        "is_regulated_zone": True,
        "property_type": "apartment",
        "is_first_time_buyer": False,
    },
    "capital-gains": {
        "acquisition_price": 60_000.0,  # 만원
        "disposal_price": 90_000.0,
        "holding_years": 5,
        "residency_years": 3,
        "ownership_count": 1,
        "is_regulated_zone": True,
        "acquisition_costs": 500.0,
        "disposal_costs": 300.0,
    },
    "property-tax": {
        "tax_base_krw": 300_000_000.0,
    },
    "scenario": {
        "base_index_value": 100.0,
        "rate_delta_percent_points": -1.0,
        "money_supply_growth_delta_percent": 2.0,
        "gdp_growth_delta_percent": 0.5,
        "horizon_years": 5,
    },
    "loan-costs": {
        "loan_amount_krw": 500_000_000.0,
    },
    "invest": {
        "purchase_price": 100_000.0,   # 만원
        "equity_percent": 30.0,
        "loan_rate_percent": 4.5,
        "loan_term_years": 30,
        "monthly_rent": 150.0,
        "deposit": 10_000.0,
        "monthly_maintenance": 20.0,
        "property_tax_rate_percent": 0.3,
        "appreciation_percent": 3.0,
        "holding_years": 10,
        "vacancy_rate_percent": 5.0,
        "investment_type": "rent",     # "rent", "gap" or "jeonse"
    },
}


def _loan_terms(p: dict) -> LoanTerms:
    return LoanTerms(
        principal=p["principal"],
        annual_rate_percent=p["annual_rate_percent"],
        term_years=p["term_years"],
        repayment_scheme=p["repayment_scheme"],
    )


def _run_amortize(p: dict):
    sub = str(p.get("subsample") or "all").strip().lower()
    result = schedule(_loan_terms(p), subsample=None if sub == "all" else sub)
    return result, result.to_frame()


def _run_regulation(p: dict):
    inputs = RegulatoryInputs(
        property_value=p["property_value"],
        annual_income=p["annual_income"],
        existing_annual_debt_service=p["existing_annual_debt_service"],
        proposed_loan=_loan_terms(p),
        ratio_ceilings=RatioCeilings(
            dsr_max_percent=p["dsr_max_percent"],
            ltv_max_percent=p["ltv_max_percent"],
            dti_max_percent=p["dti_max_percent"],
        ),
    )
    return evaluate(inputs), None


def _run_acquisition(p: dict):
    case = AcquisitionTaxCase(
        price=p["price"],
        ownership_count_after_purchase=p["ownership_count_after_purchase"],
        is_regulated_zone=p["is_regulated_zone"],
        property_type=p["property_type"],
        is_first_time_buyer=p["is_first_time_buyer"],
    )
    return acquisition_tax(case), None


def _run_capital_gains(p: dict):
    case = CapitalGainsCase(
        acquisition_price=p["acquisition_price"],
        disposal_price=p["disposal_price"],
        holding_years=p["holding_years"],
        residency_years=p["residency_years"],
        ownership_count=p["ownership_count"],
        is_regulated_zone=p["is_regulated_zone"],
        acquisition_costs=p["acquisition_costs"],
        disposal_costs=p["disposal_costs"],
    )
    return capital_gains_tax(case), None


def _run_property_tax(p: dict):
    base = p["tax_base_krw"]
    return {
        "property_tax": property_tax(base),
        "comprehensive_real_estate_tax": comprehensive_real_estate_tax(base),
    }, None


def _run_scenario(p: dict):
    path = project(
        ScenarioInputs(
            base_index_value=p["base_index_value"],
            rate_delta_percent_points=p["rate_delta_percent_points"],
            money_supply_growth_delta_percent=p["money_supply_growth_delta_percent"],
            gdp_growth_delta_percent=p["gdp_growth_delta_percent"],
            horizon_years=p["horizon_years"],
        )
    )
    return path, path_to_frame(path)


def _run_loan_costs(p: dict):
    return loan_costs(p["loan_amount_krw"]), None


def _run_invest(p: dict):
    result = investment_simulation(InvestmentCase(**p))
    return result, result.to_frame()


_COMMANDS: dict[str, Callable[[dict], tuple]] = {
    "amortize": _run_amortize,
    "regulation": _run_regulation,
    "acquisition-tax": _run_acquisition,
    "capital-gains": _run_capital_gains,
    "property-tax": _run_property_tax,
    "scenario": _run_scenario,
    "loan-costs": _run_loan_costs,
    "invest": _run_invest,
}


def _coerce(raw: str) -> bool | int | float | str:
    """Coerce a --set value: bool -> int -> float -> str."""
    if raw.lower() in ("true", "false"):
        return raw.lower() == "true"
    try:
        return int(raw)
    except ValueError:
        try:
            return float(raw)
        except ValueError:
            return raw


def _apply_overrides(d: dict, overrides: list[str]) -> dict:
    """Apply --set key=value overrides, with basic type coercion."""
    for kv in overrides or []:
        if "=" not in kv:
            print(f"Warning: ignoring malformed --set argument (expected key=value): {kv!r}", file=sys.stderr)
            continue
        key, _, raw = kv.partition("=")
        key = key.strip()
        if key not in d:
            print(f"Warning: ignoring unknown input {key!r}", file=sys.stderr)
            continue
        d[key] = _coerce(raw.strip())
    return d


def _emit(text: str, output: str) -> None:
    if output == "-":
        print(text, end="" if text.endswith("\n") else "\n")
    else:
        Path(output).write_text(text if text.endswith("\n") else text + "\n")
        print(f"Results written to {output}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="python -m rma",
        description="Real-estate market analytics: loan, regulation, tax and scenario engines.",
    )
    parser.add_argument("command", choices=sorted(_COMMANDS), help="Engine to run.")
    parser.add_argument(
        "--config", "-c",
        metavar="FILE",
        help="Path to a JSON object of inputs. Use --example to generate a template.",
    )
    parser.add_argument(
        "--output", "-o",
        metavar="FILE",
        default="-",
        help="Output file path. Use '-' (default) to print to stdout.",
    )
    parser.add_argument(
        "--set", "-s",
        dest="overrides",
        metavar="key=value",
        action="append",
        help="Override an input. Repeat for multiple overrides.",
    )
    parser.add_argument(
        "--example",
        action="store_true",
        help="Print the default inputs for the command as JSON and exit.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output JSON even for tabular commands.",
    )

    args = parser.parse_args(argv)
    params = dict(_DEFAULT_INPUTS[args.command])

    if args.example:
        print(json.dumps(params, indent=2))
        return 0

    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            print(f"Error: config file not found: {config_path}", file=sys.stderr)
            return 1
        with config_path.open() as fh:
            user_inputs = json.load(fh)
        if not isinstance(user_inputs, dict):
            print("Error: config file must contain a JSON object", file=sys.stderr)
            return 1
        unknown = sorted(set(user_inputs) - set(params))
        if unknown:
            print(f"Warning: ignoring unknown inputs: {unknown}", file=sys.stderr)
        params.update({k: v for k, v in user_inputs.items() if k in params})

    _apply_overrides(params, args.overrides or [])

    try:
        result, frame = _COMMANDS[args.command](params)
    except InvalidInput as exc:
        print(f"Input error: {exc}", file=sys.stderr)
        return 1

    print(f"Complete: {args.command} (inputs {deterministic_hash(params)[:12]})", file=sys.stderr)

    if frame is not None and not args.json:
        _emit(frame.to_csv(index=False), args.output)
        return 0

    payload = {
        "command": args.command,
        "inputs": to_jsonable(params),
        "inputs_hash": deterministic_hash(params),
        "result": to_jsonable(result),
    }
    _emit(json.dumps(payload, indent=2), args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
