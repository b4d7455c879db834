"""Up-front costs of taking out a mortgage (KRW).

- 인지세 (stamp duty), split with the lender; the borrower's share is modeled:
  none up to 50M, 70,000 up to 100M, 150,000 up to 1B, 350,000 above.
- 근저당 설정비 (mortgage registration): 0.2% of the loan.
- 감정평가비 (appraisal): flat 300,000.
- 취급수수료 (handling fee): 0.1% of the loan.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from .validation import require_positive

STAMP_DUTY_SCHEDULE = (
    (50_000_000, 0.0),
    (100_000_000, 70_000.0),
    (1_000_000_000, 150_000.0),
)
STAMP_DUTY_TOP = 350_000.0
MORTGAGE_REGISTRATION_RATE = 0.002
APPRAISAL_FEE = 300_000.0
HANDLING_FEE_RATE = 0.001


@dataclass(frozen=True)
class LoanCosts:
    stamp_duty: float
    mortgage_registration_fee: float
    appraisal_fee: float
    handling_fee: float
    total: float


def _round_half_up(x: float) -> float:
    # fees are quoted to the won; .5 rounds up, not to even
    return float(math.floor(x + 0.5))


def stamp_duty(loan_amount_krw: float) -> float:
    for limit, duty in STAMP_DUTY_SCHEDULE:
        if loan_amount_krw <= limit:
            return duty
    return STAMP_DUTY_TOP


def loan_costs(loan_amount_krw: float) -> LoanCosts:
    amount = require_positive(loan_amount_krw, "loan_amount_krw")
    duty = stamp_duty(amount)
    registration = _round_half_up(amount * MORTGAGE_REGISTRATION_RATE)
    handling = _round_half_up(amount * HANDLING_FEE_RATE)
    return LoanCosts(
        stamp_duty=duty,
        mortgage_registration_fee=registration,
        appraisal_fee=APPRAISAL_FEE,
        handling_fee=handling,
        total=duty + registration + APPRAISAL_FEE + handling,
    )
