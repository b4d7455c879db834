"""Regulatory debt-capacity ratios (DSR / LTV / DTI) and the inverse max-loan solve.

Conventions
-----------
- **DSR** (총부채원리금상환비율): annual debt service on *all* loans divided by
  annual income. The new loan's annual service is its period-1 payment x 12,
  the figure quoted at origination.
- **LTV** (주택담보대출비율): loan principal over collateral value.
- **DTI** (총부채상환비율): the cruder ratio; the new loan's principal is spread
  straight-line over the term and added to existing debt service.

All ratios are returned in percent.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from .amortization import LoanTerms, RepaymentScheme, first_period_payment, monthly_rate, principal_for_payment
from .validation import require_non_negative, require_positive, warn_if_unusual


@dataclass(frozen=True)
class RatioCeilings:
    """Regulatory ceilings, in percent."""

    dsr_max_percent: float = 40.0
    ltv_max_percent: float = 70.0
    dti_max_percent: float = 50.0


DEFAULT_CEILINGS = RatioCeilings()


@dataclass(frozen=True)
class RegulatoryInputs:
    property_value: float
    annual_income: float
    proposed_loan: LoanTerms
    existing_annual_debt_service: float = 0.0
    ratio_ceilings: RatioCeilings = field(default_factory=RatioCeilings)

    def with_(self, **changes) -> "RegulatoryInputs":
        return replace(self, **changes)


@dataclass(frozen=True)
class RegulatoryResult:
    dsr_percent: float
    ltv_percent: float
    dti_percent: float
    max_loan_by_dsr: float
    max_loan_by_ltv: float
    approved_max_loan: float
    is_within_limits: bool
    first_monthly_payment: float
    annual_debt_service: float
    remaining_capacity: float


def annual_payment_of(loan: LoanTerms) -> float:
    """Annualized debt service of a proposed loan: period-1 payment x 12.

    Equal-principal loans are also quoted on their first (largest) payment, which
    overstates their average burden; this matches how lenders screen at origination.
    """
    return first_period_payment(loan) * 12.0


def max_loan_for_dsr(
    annual_income: float,
    existing_annual_debt_service: float,
    annual_rate_percent: float,
    term_years: int,
    dsr_max_percent: float,
    repayment_scheme: RepaymentScheme = RepaymentScheme.EQUAL_INSTALLMENT,
) -> float:
    """Largest principal whose DSR stays at ``dsr_max_percent``.

    Inverts the same period-1 payment that :func:`evaluate` prices DSR on:
    the level-payment formula for equal-installment loans, and
    ``P/n + P*r`` for equal-principal loans. Negative headroom clamps to 0.
    """
    target_annual = float(annual_income) * float(dsr_max_percent) / 100.0 - float(existing_annual_debt_service)
    if target_annual <= 0.0:
        return 0.0
    n = int(term_years) * 12
    mr = monthly_rate(annual_rate_percent)
    target_monthly = target_annual / 12.0
    if RepaymentScheme.parse(repayment_scheme) is RepaymentScheme.EQUAL_PRINCIPAL:
        return max(0.0, target_monthly / (1.0 / n + mr))
    return max(0.0, principal_for_payment(target_monthly, mr, n))


def evaluate(inputs: RegulatoryInputs) -> RegulatoryResult:
    """Compute DSR/LTV/DTI for ``inputs.proposed_loan`` and the maximum loans allowed.

    Raises:
        InvalidInput: if income or property value is not positive, existing debt
            service is negative, or the proposed loan itself is invalid.
    """
    income = require_positive(inputs.annual_income, "annual_income")
    value = require_positive(inputs.property_value, "property_value")
    existing = require_non_negative(inputs.existing_annual_debt_service, "existing_annual_debt_service")
    loan = inputs.proposed_loan
    ceilings = inputs.ratio_ceilings

    first_payment = first_period_payment(loan)
    new_annual = first_payment * 12.0
    total_service = new_annual + existing

    principal = float(loan.principal)
    dsr = total_service / income * 100.0
    ltv = principal / value * 100.0
    dti = (principal / float(loan.n_months) * 12.0 + existing) / income * 100.0

    warn_if_unusual(
        term_years=loan.term_years,
        annual_rate_percent=loan.annual_rate_percent,
        ltv_percent=ltv,
        dsr_max_percent=ceilings.dsr_max_percent,
    )

    by_dsr = max_loan_for_dsr(
        income,
        existing,
        loan.annual_rate_percent,
        loan.term_years,
        ceilings.dsr_max_percent,
        loan.repayment_scheme,
    )
    by_ltv = value * float(ceilings.ltv_max_percent) / 100.0

    return RegulatoryResult(
        dsr_percent=dsr,
        ltv_percent=ltv,
        dti_percent=dti,
        max_loan_by_dsr=by_dsr,
        max_loan_by_ltv=by_ltv,
        approved_max_loan=min(by_dsr, by_ltv),
        is_within_limits=(dsr <= ceilings.dsr_max_percent and ltv <= ceilings.ltv_max_percent),
        first_monthly_payment=first_payment,
        annual_debt_service=total_service,
        remaining_capacity=max(0.0, income * ceilings.dsr_max_percent / 100.0 - total_service),
    )


@dataclass(frozen=True)
class JeonseLoan:
    max_loan: float
    monthly_interest: float


def jeonse_loan(deposit: float, annual_rate_percent: float, *, ratio: float = 0.8) -> JeonseLoan:
    """Lease-deposit (전세) loan: up to ``ratio`` of the deposit, interest-only."""
    deposit = require_positive(deposit, "deposit")
    rate = require_non_negative(annual_rate_percent, "annual_rate_percent")
    max_loan = deposit * float(ratio)
    return JeonseLoan(max_loan=max_loan, monthly_interest=max_loan * rate / 100.0 / 12.0)
