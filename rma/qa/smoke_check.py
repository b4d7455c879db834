#!/usr/bin/env python3
"""Quick smoke checks for the rma package.

Compiles every module, then runs each engine once on realistic inputs and
checks that the results are finite.

Run:
  python -m rma.qa.smoke_check
"""

from __future__ import annotations
import sys
from pathlib import Path

# Ensure repo root is on sys.path regardless of where this script is invoked from.
_REPO_ROOT = Path(__file__).resolve().parents[2]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

import compileall
import math
import os
import warnings


def die(msg: str, code: int = 1) -> None:
    print(f"\n[SMOKE CHECK FAILED] {msg}\n")
    raise SystemExit(code)


def main(argv: list[str] | None = None) -> None:
    root = str(Path(__file__).resolve().parents[2])
    pkg_dir = os.path.join(root, "rma")

    if not compileall.compile_dir(pkg_dir, quiet=1):
        die("rma/ package failed to compile.")

    try:
        from rma.core.amortization import LoanTerms, schedule
        from rma.core.investment import InvestmentCase, investment_simulation
        from rma.core.loan_costs import loan_costs
        from rma.core.regulation import RegulatoryInputs, evaluate
        from rma.core.scenario import ScenarioInputs, project
        from rma.core.statistics import bubble_score, classify_cycle_from_series, lagged_correlation
        from rma.core.taxes import AcquisitionTaxCase, CapitalGainsCase, acquisition_tax, capital_gains_tax
    except ImportError as e:
        die(f"Import failure: {e}")

    loan = LoanTerms(500_000_000.0, 4.5, 30)
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        amort = schedule(loan)
        reg = evaluate(RegulatoryInputs(property_value=900_000_000.0, annual_income=60_000_000.0, proposed_loan=loan))
    acq = acquisition_tax(AcquisitionTaxCase(price=90_000.0, is_regulated_zone=True))
    cgt = capital_gains_tax(CapitalGainsCase(60_000.0, 90_000.0, holding_years=5, residency_years=3))
    path = project(ScenarioInputs(base_index_value=100.0, rate_delta_percent_points=-1.0))
    costs = loan_costs(500_000_000.0)
    invest = investment_simulation(InvestmentCase(purchase_price=100_000.0))

    series = [100.0 + 0.5 * i for i in range(60)]
    lags = lagged_correlation(series, series[::-1], max_lag=6)
    cycle = classify_cycle_from_series(series)
    bubble = bubble_score([10.0, 11.0, 12.0], [0.7, 0.65, 0.6])

    checks = {
        "amortization total interest": amort.total_interest,
        "regulation DSR": reg.dsr_percent,
        "regulation approved max loan": reg.approved_max_loan,
        "acquisition tax": acq.total_tax,
        "capital gains tax": cgt.total_tax,
        "scenario final index": path[-1].projected_index_value,
        "loan costs": costs.total,
        "investment annualized ROI": invest.annualized_roi_percent,
        "cycle momentum": cycle.momentum_percent,
        "bubble composite": bubble.composite_index,
    }
    for name, value in checks.items():
        if not math.isfinite(float(value)):
            die(f"{name} is not finite: {value!r}")

    if len(amort.entries) != loan.n_months:
        die(f"Schedule has {len(amort.entries)} rows, expected {loan.n_months}.")
    if len(invest.path) != 11:
        die(f"Investment path has {len(invest.path)} rows, expected 11.")
    if len(lags) != 13:
        die(f"Lagged correlation returned {len(lags)} entries, expected 13.")

    print("\n[SMOKE CHECK OK]")
    print(f"Schedule rows: {len(amort.entries)}")
    print(f"DSR: {reg.dsr_percent:.1f}%  approved max loan: {reg.approved_max_loan:,.0f}")
    print(f"Acquisition tax: {acq.total_tax:,.1f}  capital gains tax: {cgt.total_tax:,.1f} (만원)")
    print(f"Cycle phase: {cycle.phase.value}  bubble risk: {bubble.risk_level.value}\n")


if __name__ == "__main__":
    main()
