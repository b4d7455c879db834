#!/usr/bin/env python3
"""Truth-table QA: small, exact, model-level invariants.

These checks are intentionally numeric and explicit. They exist to prove that:
- Level-payment amortization matches the closed-form annuity and closes at zero.
- The inverse max-loan solve lands exactly on the DSR ceiling.
- Acquisition and capital-gains taxes reproduce the worked examples.
- Progressive bracket tables are continuous at every boundary.

Run:
  python -m rma.qa.qa_truth_tables
"""

from __future__ import annotations

import math
import sys
import warnings
from pathlib import Path


# Ensure repo root is on sys.path regardless of where this script is invoked from.
_REPO_ROOT = Path(__file__).resolve().parents[2]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))


def _die(msg: str, code: int = 1) -> None:
    print(f"\n[TRUTH TABLES FAILED] {msg}\n")
    raise SystemExit(code)


def _assert_close(name: str, got: float, exp: float, *, atol: float = 1e-9, rtol: float = 0.0) -> None:
    try:
        g = float(got)
        e = float(exp)
    except (TypeError, ValueError):
        _die(f"{name}: non-numeric (got={got}, exp={exp})")
    if not (math.isfinite(g) and math.isfinite(e)):
        _die(f"{name}: non-finite (got={g}, exp={e})")
    if abs(g - e) > (atol + rtol * abs(e)):
        _die(f"{name}: got {g:.12g} expected {e:.12g} (atol={atol}, rtol={rtol})")


def _pmt(principal: float, mr: float, n: int) -> float:
    if mr <= 0:
        return principal / float(n)
    return principal * (mr * (1.0 + mr) ** n) / ((1.0 + mr) ** n - 1.0)


def _tt_level_payment() -> None:
    from rma.core.amortization import LoanTerms, schedule

    p, rate, years = 300_000_000.0, 4.5, 30
    res = schedule(LoanTerms(p, rate, years))
    exp = _pmt(p, rate / 100.0 / 12.0, years * 12)

    _assert_close("TT-A1 first payment", res.first_payment, exp, atol=1e-6)
    _assert_close("TT-A1 last balance", res.entries[-1].remaining_balance, 0.0, atol=0.0)
    _assert_close("TT-A1 principal sum", sum(e.principal_portion for e in res.entries), p, atol=1e-3)
    _assert_close("TT-A1 total interest", res.total_interest, exp * years * 12 - p, atol=1e-2)

    first = res.entries[0]
    _assert_close("TT-A1 interest m1", first.interest_portion, p * rate / 100.0 / 12.0, atol=1e-6)


def _tt_equal_principal() -> None:
    from rma.core.amortization import LoanTerms, schedule

    p, rate, years = 120_000_000.0, 6.0, 10
    res = schedule(LoanTerms(p, rate, years, "equal_principal"))
    n = years * 12
    _assert_close("TT-A2 payment m1", res.entries[0].payment_amount, p / n + p * 0.005, atol=1e-9)
    _assert_close("TT-A2 max payment", res.max_payment, res.first_payment, atol=0.0)
    for e in res.entries[:-1]:
        _assert_close(f"TT-A2 principal m{e.period_index}", e.principal_portion, p / n, atol=1e-6)
    _assert_close("TT-A2 last balance", res.entries[-1].remaining_balance, 0.0, atol=0.0)


def _tt_zero_rate_sanity() -> None:
    from rma.core.amortization import LoanTerms, schedule

    res = schedule(LoanTerms(1_200_000.0, 0.0, 10))
    for e in (res.entries[0], res.entries[59], res.entries[-1]):
        _assert_close(f"TT-Z1 payment m{e.period_index}", e.payment_amount, 10_000.0, atol=1e-9)
        _assert_close(f"TT-Z1 interest m{e.period_index}", e.interest_portion, 0.0, atol=0.0)
    _assert_close("TT-Z1 total interest", res.total_interest, 0.0, atol=0.0)


def _tt_inverse_dsr() -> None:
    from rma.core.amortization import LoanTerms, RepaymentScheme, first_period_payment
    from rma.core.regulation import max_loan_for_dsr

    income, rate, years, dsr = 60_000_000.0, 4.0, 30, 40.0
    loan = max_loan_for_dsr(income, 0.0, rate, years, dsr)
    pmt = first_period_payment(LoanTerms(loan, rate, years))
    _assert_close("TT-R1 payment at DSR ceiling", pmt * 12.0, income * dsr / 100.0, atol=1e-4)

    ep_loan = max_loan_for_dsr(income, 0.0, rate, years, dsr, RepaymentScheme.EQUAL_PRINCIPAL)
    ep_pmt = first_period_payment(LoanTerms(ep_loan, rate, years, RepaymentScheme.EQUAL_PRINCIPAL))
    _assert_close("TT-R1 equal-principal payment at DSR ceiling", ep_pmt * 12.0, income * dsr / 100.0, atol=1e-4)

    _assert_close("TT-R2 no headroom", max_loan_for_dsr(income, 30_000_000.0, rate, years, dsr), 0.0, atol=0.0)


def _tt_acquisition_example() -> None:
    from rma.core.taxes import AcquisitionTaxCase, acquisition_tax

    res = acquisition_tax(AcquisitionTaxCase(price=90_000.0))
    _assert_close("TT-T1 rate", res.applied_marginal_rate_percent, 3.0, atol=1e-9)
    _assert_close("TT-T1 base tax", res.base_tax, 2_700.0, atol=1e-9)
    _assert_close("TT-T1 education", res.local_surtax, 270.0, atol=1e-9)
    _assert_close("TT-T1 agricultural", res.agricultural_surtax, 180.0, atol=1e-9)
    _assert_close("TT-T1 total", res.total_tax, 3_150.0, atol=1e-9)
    _assert_close("TT-T1 effective", res.effective_rate_percent, 3.5, atol=1e-9)

    mid = acquisition_tax(AcquisitionTaxCase(price=75_000.0))
    _assert_close("TT-T2 interpolated rate", mid.applied_marginal_rate_percent, 2.0, atol=1e-9)


def _tt_capital_gains_example() -> None:
    from rma.core.taxes import CapitalGainsCase, capital_gains_tax

    res = capital_gains_tax(
        CapitalGainsCase(acquisition_price=60_000.0, disposal_price=90_000.0, holding_years=5, residency_years=3)
    )
    _assert_close("TT-T3 gain", res.taxable_gain, 30_000.0, atol=0.0)
    _assert_close("TT-T3 deduction", res.deduction_rate_percent, 32.0, atol=1e-9)
    _assert_close("TT-T3 tax base", res.tax_base, 20_400.0, atol=1e-9)
    _assert_close("TT-T3 marginal", res.applied_marginal_rate_percent, 38.0, atol=1e-9)
    _assert_close("TT-T3 base tax", res.base_tax, 5_758.0, atol=1e-6)
    _assert_close("TT-T3 local", res.local_surtax, 575.8, atol=1e-6)
    _assert_close("TT-T3 total", res.total_tax, 6_333.8, atol=1e-6)


def _tt_bracket_continuity() -> None:
    from rma.core import tax_tables as T
    from rma.core.taxes import bracket_tax

    for name, table in (
        ("property", T.PROPERTY_TAX_BRACKETS),
        ("comprehensive", T.COMPREHENSIVE_TAX_BRACKETS_GENERAL),
        ("income", T.BASIC_INCOME_TAX_BRACKETS),
    ):
        for lower, upper in zip(table, table[1:]):
            edge = lower.upper_bound
            below, _ = bracket_tax(edge, table)
            above = edge * upper.marginal_rate - upper.cumulative_deduction
            _assert_close(f"TT-B1 {name} @ {edge:,.0f}", below, above, atol=1e-6)

    _assert_close("TT-B2 property 1억", bracket_tax(100_000_000, T.PROPERTY_TAX_BRACKETS)[0], 120_000.0, atol=1e-6)


def main(argv: list[str] | None = None) -> None:
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")

        # Amortization invariants
        _tt_level_payment()
        _tt_equal_principal()
        _tt_zero_rate_sanity()

        # Regulation
        _tt_inverse_dsr()

        # Taxes
        _tt_acquisition_example()
        _tt_capital_gains_example()
        _tt_bracket_continuity()

    print("\n[TRUTH TABLES OK]\n")


if __name__ == "__main__":
    main()
