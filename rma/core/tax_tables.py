"""Korean real-estate tax tables (2025-2026 schedules).

Bracket tables are reproduced verbatim in KRW and use the cumulative-deduction
form: for a base ``x`` falling in bracket ``b`` (the first bracket whose upper
bound is >= x), ``tax(x) = x * rate[b] - deduction[b]``.

Acquisition-tax thresholds are expressed in 만원 (10,000 KRW), the unit prices
are entered in.
"""

from __future__ import annotations

import datetime
import math
from dataclasses import dataclass
from typing import Tuple

# Policy freshness marker (checked by tools/maintenance/check_policy_freshness.py)
TAX_RULES_LAST_REVIEWED = datetime.date(2026, 9, 30)

MANWON = 10_000


@dataclass(frozen=True)
class TaxBracket:
    upper_bound: float
    marginal_rate: float
    cumulative_deduction: float


BracketTable = Tuple[TaxBracket, ...]


def _table(*rows: tuple) -> BracketTable:
    table = tuple(TaxBracket(float(limit), float(rate), float(deduction)) for limit, rate, deduction in rows)
    bounds = [b.upper_bound for b in table]
    if any(lo >= hi for lo, hi in zip(bounds, bounds[1:])):
        raise ValueError(f"bracket bounds must be strictly increasing: {bounds}")
    if not math.isinf(bounds[-1]):
        raise ValueError("last bracket must be unbounded")
    return table


# 재산세 (annual property tax) on the assessed tax base.
PROPERTY_TAX_BRACKETS: BracketTable = _table(
    (60_000_000, 0.001, 0),
    (150_000_000, 0.0015, 30_000),
    (300_000_000, 0.0025, 180_000),
    (math.inf, 0.004, 630_000),
)

# 종합부동산세 (comprehensive real-estate holding tax), general rates.
COMPREHENSIVE_TAX_BRACKETS_GENERAL: BracketTable = _table(
    (300_000_000, 0.005, 0),
    (600_000_000, 0.007, 600_000),
    (1_200_000_000, 0.01, 2_400_000),
    (2_500_000_000, 0.013, 6_000_000),
    (5_000_000_000, 0.015, 11_000_000),
    (9_400_000_000, 0.02, 36_000_000),
    (math.inf, 0.027, 101_800_000),
)

# 양도소득세 기본세율 (basic income-tax rates applied to capital gains).
BASIC_INCOME_TAX_BRACKETS: BracketTable = _table(
    (14_000_000, 0.06, 0),
    (50_000_000, 0.15, 1_260_000),
    (88_000_000, 0.24, 5_760_000),
    (150_000_000, 0.35, 15_440_000),
    (300_000_000, 0.38, 19_940_000),
    (500_000_000, 0.40, 25_940_000),
    (1_000_000_000, 0.42, 35_940_000),
    (math.inf, 0.45, 65_940_000),
)


# ---------------------------------------------------------------------------
# 취득세 (acquisition tax)
# ---------------------------------------------------------------------------
# Single-home tiers: 1% up to 6억, linear 1%..3% between 6억 and 9억, 3% above.
ACQ_TIER_LOW_MANWON = 60_000
ACQ_TIER_HIGH_MANWON = 90_000
ACQ_RATE_LOW = 0.01
ACQ_RATE_HIGH = 0.03

ACQ_RATE_TWO_HOMES_REGULATED = 0.08
ACQ_RATE_THREE_PLUS_REGULATED = 0.12
ACQ_RATE_LAND = 0.04

# First-time buyer relief: up to 1.5pp off, only up to 12억.
FIRST_TIME_DISCOUNT = 0.015
FIRST_TIME_PRICE_CEILING_MANWON = 120_000

LOCAL_EDUCATION_SURTAX_RATE = 0.10
AGRICULTURAL_SURTAX_RATE = 0.002
AGRICULTURAL_SURTAX_THRESHOLD_MANWON = 60_000


# ---------------------------------------------------------------------------
# 양도소득세 (capital gains)
# ---------------------------------------------------------------------------
SINGLE_HOME_HOLDING_RATE_PER_YEAR = 0.04
SINGLE_HOME_HOLDING_CAP = 0.40
SINGLE_HOME_RESIDENCY_RATE_PER_YEAR = 0.04
SINGLE_HOME_RESIDENCY_CAP = 0.40
SINGLE_HOME_DEDUCTION_CAP = 0.80

MULTI_HOME_MIN_HOLDING_YEARS = 3
MULTI_HOME_RATE_PER_YEAR = 0.02
MULTI_HOME_DEDUCTION_CAP = 0.30

SURCHARGE_TWO_HOMES_REGULATED = 0.20
SURCHARGE_THREE_PLUS_REGULATED = 0.30

LOCAL_INCOME_SURTAX_RATE = 0.10
