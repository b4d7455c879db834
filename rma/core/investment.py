"""Return metrics for rental, gap (갭투자) and leveraged rental investments.

Amounts are in any consistent unit (the dashboard uses 만원). For
:func:`rental_return` and :func:`gap_investment` the annual ROI is the simple
average (total / years), not compounded. :func:`investment_simulation` reports
a compound annualized ROI.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import Tuple, Union

import pandas as pd

from .amortization import level_payment, monthly_rate
from .errors import InvalidInput
from .validation import require_non_negative, require_positive, require_positive_int


@dataclass(frozen=True)
class RentalReturn:
    capital_gain: float
    total_rent: float
    net_income: float
    total_roi_percent: float
    annual_roi_percent: float
    rental_yield_percent: float


def rental_return(
    purchase_price: float,
    current_price: float,
    monthly_rent: float,
    annual_expenses: float,
    holding_years: float,
) -> RentalReturn:
    """Return on a let property held for ``holding_years``.

    Expenses are an annual figure; the rental yield is gross (rent / purchase price).
    """
    purchase = require_positive(purchase_price, "purchase_price")
    current = require_non_negative(current_price, "current_price")
    rent = require_non_negative(monthly_rent, "monthly_rent")
    expenses = require_non_negative(annual_expenses, "annual_expenses")
    years = require_positive(holding_years, "holding_years")

    gain = current - purchase
    total_rent = rent * 12.0 * years
    net = gain + total_rent - expenses * years
    total_roi = net / purchase * 100.0
    return RentalReturn(
        capital_gain=gain,
        total_rent=total_rent,
        net_income=net,
        total_roi_percent=total_roi,
        annual_roi_percent=total_roi / years,
        rental_yield_percent=rent * 12.0 / purchase * 100.0,
    )


@dataclass(frozen=True)
class GapInvestment:
    gap_amount: float
    future_price: float
    expected_gain: float
    roi_percent: float
    annual_roi_percent: float
    leverage: float


def gap_investment(
    sale_price: float,
    jeonse_price: float,
    expected_growth_percent: float,
    holding_years: float,
) -> GapInvestment:
    """Buy with a sitting jeonse tenant; equity is the gap between price and deposit.

    Raises:
        InvalidInput: if the deposit is not below the sale price.
    """
    price = require_positive(sale_price, "sale_price")
    deposit = require_non_negative(jeonse_price, "jeonse_price")
    years = require_positive(holding_years, "holding_years")
    if deposit >= price:
        raise InvalidInput("jeonse_price", "must be below the sale price to leave a positive gap")

    gap = price - deposit
    future = price * (1.0 + float(expected_growth_percent) / 100.0) ** years
    gain = future - price
    roi = gain / gap * 100.0
    return GapInvestment(
        gap_amount=gap,
        future_price=future,
        expected_gain=gain,
        roi_percent=roi,
        annual_roi_percent=roi / years,
        leverage=price / gap,
    )


# ---------------------------------------------------------------------------
# Leveraged rental simulation
# ---------------------------------------------------------------------------

DEPOSIT_YIELD = 0.03
DEDUCTIBLE_EXPENSE_SHARE = 0.15

# (minimum holding years, flat rate on the taxable gain), longest first
SIMPLIFIED_GAINS_RATES = (
    (2, 0.24),
    (1, 0.40),
    (0, 0.50),
)


class InvestmentType(enum.Enum):
    RENT = "rent"
    GAP = "gap"
    JEONSE = "jeonse"

    @classmethod
    def parse(cls, value: Union["InvestmentType", str]) -> "InvestmentType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            raise InvalidInput("investment_type", f"unknown investment type {value!r}") from None


@dataclass(frozen=True)
class InvestmentCase:
    """Inputs of a leveraged buy-to-let purchase.

    ``deposit`` is the tenant's security deposit (보증금), which the owner holds
    and invests at :data:`DEPOSIT_YIELD`. A ``JEONSE`` investment earns no rent.
    """

    purchase_price: float
    equity_percent: float = 30.0
    loan_rate_percent: float = 4.5
    loan_term_years: int = 30
    monthly_rent: float = 150.0
    deposit: float = 10_000.0
    monthly_maintenance: float = 20.0
    property_tax_rate_percent: float = 0.3
    appreciation_percent: float = 3.0
    holding_years: int = 10
    vacancy_rate_percent: float = 5.0
    investment_type: InvestmentType = InvestmentType.RENT

    def __post_init__(self) -> None:
        object.__setattr__(self, "investment_type", InvestmentType.parse(self.investment_type))

    def with_(self, **changes) -> "InvestmentCase":
        return replace(self, **changes)


@dataclass(frozen=True)
class YearlyPosition:
    year: int
    property_value: float
    equity: float
    cumulative_cashflow: float
    remaining_loan: float


@dataclass(frozen=True)
class InvestmentSimulation:
    equity_amount: float
    loan_amount: float
    monthly_payment: float
    annual_net_income: float
    monthly_net_income: float
    cash_yield_percent: float
    path: Tuple[YearlyPosition, ...]
    final_value: float
    total_appreciation: float
    capital_gains_tax: float
    total_profit: float
    total_roi_percent: float
    annualized_roi_percent: float

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "year": [p.year for p in self.path],
                "property_value": [p.property_value for p in self.path],
                "equity": [p.equity for p in self.path],
                "cumulative_cashflow": [p.cumulative_cashflow for p in self.path],
                "remaining_loan": [p.remaining_loan for p in self.path],
            }
        )


def simplified_gains_tax(gain: float, holding_years: int) -> float:
    """Flat-rate disposal tax used for quick investment screening.

    15% of the gain is treated as deductible expenses; the rest is taxed at
    24% after two years, 40% after one and 50% below that. Losses owe nothing.
    See :func:`rma.core.taxes.capital_gains_tax` for the progressive rules.
    """
    if gain <= 0.0:
        return 0.0
    taxable = gain * (1.0 - DEDUCTIBLE_EXPENSE_SHARE)
    for min_years, rate in SIMPLIFIED_GAINS_RATES:
        if holding_years >= min_years:
            return taxable * rate
    return 0.0


def _require_years(value: int, name: str) -> int:
    years = require_non_negative(value, name)
    if years != int(years):
        raise InvalidInput(name, "must be a whole number of years")
    return int(years)


def investment_simulation(case: InvestmentCase) -> InvestmentSimulation:
    """Project a leveraged rental purchase year by year over its holding period.

    The loan is the non-equity share of the price, serviced with a level
    monthly payment. For the balance path, principal is retired straight-line
    (loan / term per year) and the net income of year 1 repeats every year.

    Raises:
        InvalidInput: on a non-positive price or term, an equity or vacancy
            share outside 0-100%, or negative amounts.
    """
    price = require_positive(case.purchase_price, "purchase_price")
    equity_pct = require_non_negative(case.equity_percent, "equity_percent")
    if equity_pct > 100.0:
        raise InvalidInput("equity_percent", "must not exceed 100")
    rate = require_non_negative(case.loan_rate_percent, "loan_rate_percent")
    term = require_positive_int(case.loan_term_years, "loan_term_years")
    rent = require_non_negative(case.monthly_rent, "monthly_rent")
    deposit = require_non_negative(case.deposit, "deposit")
    maintenance = require_non_negative(case.monthly_maintenance, "monthly_maintenance")
    tax_rate = require_non_negative(case.property_tax_rate_percent, "property_tax_rate_percent")
    vacancy = require_non_negative(case.vacancy_rate_percent, "vacancy_rate_percent")
    if vacancy > 100.0:
        raise InvalidInput("vacancy_rate_percent", "must not exceed 100")
    holding = _require_years(case.holding_years, "holding_years")
    growth = float(case.appreciation_percent) / 100.0

    equity = price * equity_pct / 100.0
    loan = price - equity
    payment = level_payment(loan, monthly_rate(rate), term * 12) if loan > 0.0 else 0.0

    income = deposit * DEPOSIT_YIELD
    if case.investment_type is not InvestmentType.JEONSE:
        income += rent * 12.0 * (1.0 - vacancy / 100.0)
    annual_net = income - maintenance * 12.0 - price * tax_rate / 100.0 - payment * 12.0

    path = []
    value = price
    remaining = loan
    cashflow = -equity
    for year in range(holding + 1):
        if year > 0:
            value *= 1.0 + growth
            remaining = max(0.0, remaining - loan / term)
            cashflow += annual_net
        path.append(
            YearlyPosition(
                year=year,
                property_value=value,
                equity=value - remaining,
                cumulative_cashflow=cashflow,
                remaining_loan=remaining,
            )
        )

    final = path[-1]
    appreciation = final.property_value - price
    gains_tax = simplified_gains_tax(appreciation, holding)
    profit = final.equity - equity + annual_net * holding - gains_tax
    roi = profit / equity * 100.0 if equity > 0.0 else 0.0
    if holding == 0:
        annualized = 0.0
    elif roi <= -100.0:
        # whole stake lost; no real compound rate
        annualized = -100.0
    else:
        annualized = ((1.0 + roi / 100.0) ** (1.0 / holding) - 1.0) * 100.0

    return InvestmentSimulation(
        equity_amount=equity,
        loan_amount=loan,
        monthly_payment=payment,
        annual_net_income=annual_net,
        monthly_net_income=annual_net / 12.0,
        cash_yield_percent=annual_net / equity * 100.0 if equity > 0.0 else 0.0,
        path=tuple(path),
        final_value=final.property_value,
        total_appreciation=appreciation,
        capital_gains_tax=gains_tax,
        total_profit=profit,
        total_roi_percent=roi,
        annualized_roi_percent=annualized,
    )
