"""Loan amortization under the two Korean repayment schemes.

- **Equal installment** (원리금균등): a level monthly payment; the interest share
  shrinks and the principal share grows over time.
- **Equal principal** (원금균등): a fixed principal share of ``P / n`` each month
  plus interest on the outstanding balance, so payments decline over time.

Rates are quoted as annual nominal percentages compounded monthly
(``r = rate_pct / 100 / 12``). All math is double precision; the final period
absorbs any rounding residue so the schedule always ends at exactly zero.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, replace
from typing import Callable, Iterable, Tuple, Union

import pandas as pd

from .errors import InvalidInput
from .validation import require_non_negative, require_positive, require_positive_int, warn_if_unusual


class RepaymentScheme(enum.Enum):
    EQUAL_INSTALLMENT = "equal_installment"
    EQUAL_PRINCIPAL = "equal_principal"

    @classmethod
    def parse(cls, value: Union["RepaymentScheme", str]) -> "RepaymentScheme":
        """Accept an enum member, its value, or a common alias."""
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower().replace("-", "_").replace(" ", "_")
        aliases = {
            "equal_installment": cls.EQUAL_INSTALLMENT,
            "equalinstallment": cls.EQUAL_INSTALLMENT,
            "annuity": cls.EQUAL_INSTALLMENT,
            "level": cls.EQUAL_INSTALLMENT,
            "equal_principal": cls.EQUAL_PRINCIPAL,
            "equalprincipal": cls.EQUAL_PRINCIPAL,
            "decreasing": cls.EQUAL_PRINCIPAL,
        }
        try:
            return aliases[key]
        except KeyError:
            raise InvalidInput("repayment_scheme", f"unknown repayment scheme {value!r}") from None


# ---------------------------------------------------------------------------
# Payment formulas
# ---------------------------------------------------------------------------
# level_payment and principal_for_payment are algebraic inverses; the
# regulatory max-loan solve depends on both staying in sync.


def monthly_rate(annual_rate_percent: float) -> float:
    """Annual nominal percent -> monthly decimal rate."""
    return float(annual_rate_percent) / 100.0 / 12.0


def level_payment(principal: float, mr: float, n: int) -> float:
    """Fixed monthly payment for a loan.

    The formula is:

        payment = P * (r * (1 + r)^n) / ((1 + r)^n - 1)

    where ``P`` is the principal, ``r`` the monthly rate and ``n`` the number
    of payments.  When the rate is zero the payment simplifies to ``P / n``.
    """
    principal = float(principal)
    n = int(n)
    if n <= 0:
        raise InvalidInput("n", "number of payments must be positive")
    if mr == 0:
        return principal / float(n)
    factor = (1.0 + mr) ** n
    return principal * (mr * factor) / (factor - 1.0)


def principal_for_payment(payment: float, mr: float, n: int) -> float:
    """Largest principal that a fixed monthly ``payment`` can amortize over ``n`` months.

    Inverse of :func:`level_payment`:

        P = payment * ((1 + r)^n - 1) / (r * (1 + r)^n)
    """
    payment = float(payment)
    n = int(n)
    if n <= 0:
        raise InvalidInput("n", "number of payments must be positive")
    if mr == 0:
        return payment * float(n)
    factor = (1.0 + mr) ** n
    return payment * (factor - 1.0) / (mr * factor)


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LoanTerms:
    """Immutable loan description fed to :func:`schedule`."""

    principal: float
    annual_rate_percent: float
    term_years: int
    repayment_scheme: RepaymentScheme = RepaymentScheme.EQUAL_INSTALLMENT

    def __post_init__(self) -> None:
        object.__setattr__(self, "repayment_scheme", RepaymentScheme.parse(self.repayment_scheme))

    @property
    def n_months(self) -> int:
        return int(self.term_years) * 12

    def with_(self, **changes) -> "LoanTerms":
        return replace(self, **changes)


@dataclass(frozen=True)
class AmortizationEntry:
    period_index: int
    payment_amount: float
    principal_portion: float
    interest_portion: float
    remaining_balance: float


@dataclass(frozen=True)
class AmortizationResult:
    """Schedule entries plus aggregates over the *full* schedule."""

    entries: Tuple[AmortizationEntry, ...]
    total_payment: float
    total_interest: float
    first_payment: float
    max_payment: float

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "period": [e.period_index for e in self.entries],
                "payment": [e.payment_amount for e in self.entries],
                "principal": [e.principal_portion for e in self.entries],
                "interest": [e.interest_portion for e in self.entries],
                "balance": [e.remaining_balance for e in self.entries],
            }
        )


Subsample = Union[str, Callable[[int], bool], None]


def _annual_subsample(period_index: int) -> bool:
    # First year month-by-month, then one row per year end.
    return period_index <= 12 or period_index % 12 == 0


def _resolve_subsample(subsample: Subsample) -> Callable[[int], bool] | None:
    if subsample is None:
        return None
    if callable(subsample):
        return subsample
    if str(subsample).strip().lower() == "annual":
        return _annual_subsample
    raise InvalidInput("subsample", f"expected a callable or 'annual', got {subsample!r}")


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


def _iter_entries(terms: LoanTerms) -> Iterable[AmortizationEntry]:
    principal = float(terms.principal)
    n = terms.n_months
    mr = monthly_rate(terms.annual_rate_percent)
    equal_installment = terms.repayment_scheme is RepaymentScheme.EQUAL_INSTALLMENT

    installment = level_payment(principal, mr, n) if equal_installment else 0.0
    fixed_principal = principal / float(n)

    balance = principal
    for k in range(1, n + 1):
        interest = balance * mr
        if k == n:
            # Absorb floating residue so the loan closes at exactly zero.
            principal_part = balance
        elif equal_installment:
            principal_part = min(installment - interest, balance)
        else:
            principal_part = min(fixed_principal, balance)

        balance = 0.0 if k == n else max(0.0, balance - principal_part)
        yield AmortizationEntry(
            period_index=k,
            payment_amount=principal_part + interest,
            principal_portion=principal_part,
            interest_portion=interest,
            remaining_balance=balance,
        )


def schedule(terms: LoanTerms, *, subsample: Subsample = None) -> AmortizationResult:
    """Compute the month-by-month repayment schedule for ``terms``.

    Parameters
    ----------
    terms: LoanTerms
        Principal, annual rate (percent), term (years) and repayment scheme.
    subsample:
        ``None`` keeps every month.  ``"annual"`` keeps the first twelve
        months and every year end.  A callable receives the 1-based period
        index and returns whether to keep the row.  Aggregates always cover
        the full schedule.

    Raises
    ------
    InvalidInput
        If ``principal <= 0``, ``term_years <= 0`` or ``annual_rate_percent < 0``.
    """
    require_positive(terms.principal, "principal")
    require_positive_int(terms.term_years, "term_years")
    require_non_negative(terms.annual_rate_percent, "annual_rate_percent")
    keep = _resolve_subsample(subsample)
    warn_if_unusual(term_years=terms.term_years, annual_rate_percent=terms.annual_rate_percent)

    full = tuple(_iter_entries(terms))
    payments = [e.payment_amount for e in full]
    total_payment = math.fsum(payments)
    total_interest = math.fsum(e.interest_portion for e in full)

    entries = full if keep is None else tuple(e for e in full if keep(e.period_index))
    return AmortizationResult(
        entries=entries,
        total_payment=total_payment,
        total_interest=total_interest,
        first_payment=payments[0],
        max_payment=max(payments),
    )


def first_period_payment(terms: LoanTerms) -> float:
    """Period-1 payment without building the full schedule."""
    principal = require_positive(terms.principal, "principal")
    n = require_positive_int(terms.term_years, "term_years") * 12
    mr = monthly_rate(require_non_negative(terms.annual_rate_percent, "annual_rate_percent"))
    if terms.repayment_scheme is RepaymentScheme.EQUAL_INSTALLMENT:
        return level_payment(principal, mr, n)
    return principal / float(n) + principal * mr
