"""Korean real-estate tax engine: acquisition, capital gains, property and holding taxes.

Case records take prices in 만원 (10,000 KRW) and results come back in 만원.
Bracket tables are stored in KRW (see :mod:`rma.core.tax_tables`), so the
capital-gains engine converts the tax base to KRW before evaluating them.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import Tuple

from . import tax_tables as T
from .errors import InvalidInput
from .validation import require_non_negative, require_positive


class PropertyType(enum.Enum):
    APARTMENT = "apartment"
    HOUSE = "house"
    LAND = "land"

    @classmethod
    def parse(cls, value) -> "PropertyType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            raise InvalidInput("property_type", f"unknown property type {value!r}") from None


@dataclass(frozen=True)
class AcquisitionTaxCase:
    price: float
    ownership_count_after_purchase: int = 1
    is_regulated_zone: bool = False
    property_type: PropertyType = PropertyType.APARTMENT
    is_first_time_buyer: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "property_type", PropertyType.parse(self.property_type))

    def with_(self, **changes) -> "AcquisitionTaxCase":
        return replace(self, **changes)


@dataclass(frozen=True)
class CapitalGainsCase:
    acquisition_price: float
    disposal_price: float
    holding_years: float
    residency_years: float = 0.0
    ownership_count: int = 1
    is_regulated_zone: bool = False
    acquisition_costs: float = 0.0
    disposal_costs: float = 0.0

    def with_(self, **changes) -> "CapitalGainsCase":
        return replace(self, **changes)


@dataclass(frozen=True)
class TaxResult:
    taxable_gain: float
    tax_base: float
    applied_marginal_rate_percent: float
    base_tax: float
    surcharge: float
    local_surtax: float
    total_tax: float
    effective_rate_percent: float
    deduction_rate_percent: float = 0.0
    agricultural_surtax: float = 0.0
    net_proceeds: float = 0.0


# ---------------------------------------------------------------------------
# Bracket evaluation
# ---------------------------------------------------------------------------


def find_bracket(amount: float, brackets: T.BracketTable) -> T.TaxBracket:
    """Return the first bracket whose upper bound is >= ``amount``."""
    for bracket in brackets:
        if amount <= bracket.upper_bound:
            return bracket
    return brackets[-1]


def bracket_tax(amount: float, brackets: T.BracketTable) -> Tuple[float, T.TaxBracket]:
    """Progressive tax on ``amount`` using the closed cumulative-deduction form.

    Returns ``(tax, bracket)``; amounts <= 0 owe nothing and report the first bracket.
    """
    x = float(amount)
    if x <= 0.0:
        return 0.0, brackets[0]
    b = find_bracket(x, brackets)
    return max(0.0, x * b.marginal_rate - b.cumulative_deduction), b


def property_tax(tax_base_krw: float) -> float:
    """재산세 on an assessed tax base (KRW in, KRW out)."""
    tax, _ = bracket_tax(require_non_negative(tax_base_krw, "tax_base_krw"), T.PROPERTY_TAX_BRACKETS)
    return tax


def comprehensive_real_estate_tax(tax_base_krw: float) -> float:
    """종합부동산세 (general rates) on a tax base (KRW in, KRW out)."""
    tax, _ = bracket_tax(
        require_non_negative(tax_base_krw, "tax_base_krw"),
        T.COMPREHENSIVE_TAX_BRACKETS_GENERAL,
    )
    return tax


# ---------------------------------------------------------------------------
# Acquisition tax
# ---------------------------------------------------------------------------


def single_home_acquisition_rate(price_manwon: float) -> float:
    """Tiered single-home rate, interpolated linearly between 6억 and 9억."""
    p = float(price_manwon)
    if p <= T.ACQ_TIER_LOW_MANWON:
        return T.ACQ_RATE_LOW
    if p <= T.ACQ_TIER_HIGH_MANWON:
        span = T.ACQ_TIER_HIGH_MANWON - T.ACQ_TIER_LOW_MANWON
        return T.ACQ_RATE_LOW + (p - T.ACQ_TIER_LOW_MANWON) / span * (T.ACQ_RATE_HIGH - T.ACQ_RATE_LOW)
    return T.ACQ_RATE_HIGH


def acquisition_rate(case: AcquisitionTaxCase) -> float:
    """Base acquisition-tax rate (decimal) before surtaxes."""
    if case.property_type is PropertyType.LAND:
        return T.ACQ_RATE_LAND

    count = int(case.ownership_count_after_purchase)
    if count >= 3 and case.is_regulated_zone:
        return T.ACQ_RATE_THREE_PLUS_REGULATED
    if count == 2 and case.is_regulated_zone:
        return T.ACQ_RATE_TWO_HOMES_REGULATED

    rate = single_home_acquisition_rate(case.price)
    if count == 1 and case.is_first_time_buyer and case.price <= T.FIRST_TIME_PRICE_CEILING_MANWON:
        rate = max(0.0, rate - T.FIRST_TIME_DISCOUNT)
    return rate


def acquisition_tax(case: AcquisitionTaxCase) -> TaxResult:
    """취득세 with local education and agricultural surtaxes.

    Raises:
        InvalidInput: if the price is not positive or the ownership count is below 1.
    """
    price = require_positive(case.price, "price")
    if int(case.ownership_count_after_purchase) < 1:
        raise InvalidInput("ownership_count_after_purchase", "must be at least 1")

    rate = acquisition_rate(case)
    base_tax = price * rate
    education = base_tax * T.LOCAL_EDUCATION_SURTAX_RATE
    agricultural = price * T.AGRICULTURAL_SURTAX_RATE if price > T.AGRICULTURAL_SURTAX_THRESHOLD_MANWON else 0.0
    total = base_tax + education + agricultural

    return TaxResult(
        taxable_gain=0.0,
        tax_base=price,
        applied_marginal_rate_percent=rate * 100.0,
        base_tax=base_tax,
        surcharge=0.0,
        local_surtax=education,
        total_tax=total,
        effective_rate_percent=total / price * 100.0,
        agricultural_surtax=agricultural,
    )


# ---------------------------------------------------------------------------
# Capital gains tax
# ---------------------------------------------------------------------------


def long_term_holding_deduction_rate(holding_years: float, residency_years: float, ownership_count: int) -> float:
    """장기보유특별공제 rate (decimal)."""
    if int(ownership_count) <= 1:
        holding = min(holding_years * T.SINGLE_HOME_HOLDING_RATE_PER_YEAR, T.SINGLE_HOME_HOLDING_CAP)
        residency = min(residency_years * T.SINGLE_HOME_RESIDENCY_RATE_PER_YEAR, T.SINGLE_HOME_RESIDENCY_CAP)
        return min(holding + residency, T.SINGLE_HOME_DEDUCTION_CAP)
    if holding_years >= T.MULTI_HOME_MIN_HOLDING_YEARS:
        return min((holding_years - 2) * T.MULTI_HOME_RATE_PER_YEAR, T.MULTI_HOME_DEDUCTION_CAP)
    return 0.0


def multi_home_surcharge_rate(ownership_count: int, is_regulated_zone: bool) -> float:
    count = int(ownership_count)
    if not is_regulated_zone or count < 2:
        return 0.0
    if count == 2:
        return T.SURCHARGE_TWO_HOMES_REGULATED
    return T.SURCHARGE_THREE_PLUS_REGULATED


def _zero_gains_result(gain: float) -> TaxResult:
    return TaxResult(
        taxable_gain=0.0,
        tax_base=0.0,
        applied_marginal_rate_percent=0.0,
        base_tax=0.0,
        surcharge=0.0,
        local_surtax=0.0,
        total_tax=0.0,
        effective_rate_percent=0.0,
        net_proceeds=gain,
    )


def capital_gains_tax(case: CapitalGainsCase) -> TaxResult:
    """양도소득세 on a disposal, with holding deduction and multi-home surcharge.

    The surcharge is levied on the post-deduction tax base and added on top of
    the progressive tax; it does not replace the marginal rate.

    Raises:
        InvalidInput: for non-positive prices, negative costs or years, or a
            residency period longer than the holding period.
    """
    acquisition = require_positive(case.acquisition_price, "acquisition_price")
    disposal = require_positive(case.disposal_price, "disposal_price")
    acq_costs = require_non_negative(case.acquisition_costs, "acquisition_costs")
    disp_costs = require_non_negative(case.disposal_costs, "disposal_costs")
    holding = require_non_negative(case.holding_years, "holding_years")
    residency = require_non_negative(case.residency_years, "residency_years")
    if residency > holding:
        raise InvalidInput("residency_years", f"{residency:g} exceeds holding period of {holding:g} years")
    if int(case.ownership_count) < 1:
        raise InvalidInput("ownership_count", "must be at least 1")

    gain = disposal - acquisition - acq_costs - disp_costs
    if gain <= 0.0:
        return _zero_gains_result(gain)

    deduction = long_term_holding_deduction_rate(holding, residency, case.ownership_count)
    tax_base = gain * (1.0 - deduction)

    base_tax_krw, bracket = bracket_tax(tax_base * T.MANWON, T.BASIC_INCOME_TAX_BRACKETS)
    base_tax = base_tax_krw / T.MANWON
    surcharge = tax_base * multi_home_surcharge_rate(case.ownership_count, case.is_regulated_zone)
    local = (base_tax + surcharge) * T.LOCAL_INCOME_SURTAX_RATE
    total = base_tax + surcharge + local

    return TaxResult(
        taxable_gain=gain,
        tax_base=tax_base,
        applied_marginal_rate_percent=bracket.marginal_rate * 100.0,
        base_tax=base_tax,
        surcharge=surcharge,
        local_surtax=local,
        total_tax=total,
        effective_rate_percent=total / gain * 100.0,
        deduction_rate_percent=deduction * 100.0,
        net_proceeds=gain - total,
    )
