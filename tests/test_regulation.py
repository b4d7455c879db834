"""DSR / LTV / DTI evaluation, the inverse max-loan solve and jeonse loans."""

from __future__ import annotations

import warnings

import pytest

from rma.core.amortization import LoanTerms, RepaymentScheme, first_period_payment, level_payment, monthly_rate
from rma.core.errors import InvalidInput
from rma.core.regulation import (
    DEFAULT_CEILINGS,
    RatioCeilings,
    RegulatoryInputs,
    annual_payment_of,
    evaluate,
    jeonse_loan,
    max_loan_for_dsr,
)

_LOAN = LoanTerms(500_000_000, 4.5, 30)
_INPUTS = RegulatoryInputs(property_value=900_000_000, annual_income=60_000_000, proposed_loan=_LOAN)


def _evaluate(inputs: RegulatoryInputs):
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        return evaluate(inputs)


class TestRatios:
    def test_dsr_uses_first_payment(self) -> None:
        res = _evaluate(_INPUTS)
        pmt = level_payment(500_000_000, monthly_rate(4.5), 360)
        assert res.first_monthly_payment == pytest.approx(pmt)
        assert res.annual_debt_service == pytest.approx(pmt * 12)
        assert res.dsr_percent == pytest.approx(pmt * 12 / 60_000_000 * 100)

    def test_ltv(self) -> None:
        assert _evaluate(_INPUTS).ltv_percent == pytest.approx(500 / 900 * 100)

    def test_dti_spreads_principal_straight_line(self) -> None:
        res = _evaluate(_INPUTS.with_(existing_annual_debt_service=3_000_000))
        expected = (500_000_000 / 360 * 12 + 3_000_000) / 60_000_000 * 100
        assert res.dti_percent == pytest.approx(expected)

    def test_existing_debt_adds_to_dsr(self) -> None:
        base = _evaluate(_INPUTS)
        loaded = _evaluate(_INPUTS.with_(existing_annual_debt_service=6_000_000))
        assert loaded.dsr_percent == pytest.approx(base.dsr_percent + 10.0)

    def test_equal_principal_quotes_first_period(self) -> None:
        ep = LoanTerms(500_000_000, 4.5, 30, RepaymentScheme.EQUAL_PRINCIPAL)
        res = _evaluate(_INPUTS.with_(proposed_loan=ep))
        assert res.first_monthly_payment == pytest.approx(500_000_000 / 360 + 500_000_000 * monthly_rate(4.5))
        assert annual_payment_of(ep) == pytest.approx(res.first_monthly_payment * 12)


class TestLimits:
    def test_over_dsr_is_not_within_limits(self) -> None:
        res = _evaluate(_INPUTS)
        assert res.dsr_percent > 40.0
        assert res.is_within_limits is False
        assert res.remaining_capacity == 0.0

    def test_small_loan_is_within_limits(self) -> None:
        res = _evaluate(_INPUTS.with_(proposed_loan=_LOAN.with_(principal=200_000_000)))
        assert res.is_within_limits is True
        assert res.remaining_capacity == pytest.approx(24_000_000 - res.annual_debt_service)

    def test_ltv_breach_alone_fails(self) -> None:
        res = _evaluate(
            _INPUTS.with_(
                annual_income=500_000_000,
                proposed_loan=_LOAN.with_(principal=700_000_000),
            )
        )
        assert res.dsr_percent < 40.0
        assert res.ltv_percent > 70.0
        assert res.is_within_limits is False

    def test_approved_is_min_of_both(self) -> None:
        res = _evaluate(_INPUTS)
        assert res.max_loan_by_ltv == pytest.approx(630_000_000)
        assert res.approved_max_loan == pytest.approx(min(res.max_loan_by_dsr, res.max_loan_by_ltv))
        assert res.approved_max_loan == pytest.approx(res.max_loan_by_dsr)

    def test_custom_ceilings(self) -> None:
        loose = _evaluate(_INPUTS.with_(ratio_ceilings=RatioCeilings(dsr_max_percent=60.0, ltv_max_percent=80.0)))
        assert loose.is_within_limits is True
        assert loose.max_loan_by_ltv == pytest.approx(720_000_000)

    def test_default_ceilings(self) -> None:
        assert DEFAULT_CEILINGS == RatioCeilings(40.0, 70.0, 50.0)


class TestMaxLoanForDsr:
    def test_max_loan_hits_ceiling_exactly(self) -> None:
        loan = max_loan_for_dsr(60_000_000, 0.0, 4.5, 30, 40.0)
        pmt = first_period_payment(LoanTerms(loan, 4.5, 30))
        assert pmt * 12 == pytest.approx(24_000_000, rel=1e-12)

    @pytest.mark.parametrize("scheme", list(RepaymentScheme))
    def test_max_loan_fed_back_lands_on_ceiling(self, scheme: RepaymentScheme) -> None:
        inputs = _INPUTS.with_(proposed_loan=_LOAN.with_(repayment_scheme=scheme))
        max_loan = _evaluate(inputs).max_loan_by_dsr
        res = _evaluate(inputs.with_(proposed_loan=inputs.proposed_loan.with_(principal=max_loan)))
        assert res.dsr_percent == pytest.approx(40.0, rel=1e-9)
        assert res.max_loan_by_dsr == pytest.approx(max_loan, rel=1e-12)

    def test_equal_principal_capacity_is_smaller(self) -> None:
        ei = max_loan_for_dsr(60_000_000, 0.0, 4.5, 30, 40.0)
        ep = max_loan_for_dsr(60_000_000, 0.0, 4.5, 30, 40.0, RepaymentScheme.EQUAL_PRINCIPAL)
        assert ep == pytest.approx(2_000_000 / (1 / 360 + 0.045 / 12))
        assert ep < ei

    def test_zero_rate(self) -> None:
        assert max_loan_for_dsr(60_000_000, 0.0, 0.0, 10, 40.0) == pytest.approx(24_000_000 * 10)
        assert max_loan_for_dsr(60_000_000, 0.0, 0.0, 10, 40.0, "equal_principal") == pytest.approx(24_000_000 * 10)

    def test_existing_debt_reduces_headroom(self) -> None:
        full = max_loan_for_dsr(60_000_000, 0.0, 4.5, 30, 40.0)
        half = max_loan_for_dsr(60_000_000, 12_000_000, 4.5, 30, 40.0)
        assert half == pytest.approx(full / 2)

    @pytest.mark.parametrize("existing", [24_000_000, 30_000_000])
    def test_no_headroom_clamps_to_zero(self, existing: float) -> None:
        assert max_loan_for_dsr(60_000_000, existing, 4.5, 30, 40.0) == 0.0


class TestValidation:
    @pytest.mark.parametrize(
        "changes, field",
        [
            ({"annual_income": 0}, "annual_income"),
            ({"property_value": -1}, "property_value"),
            ({"existing_annual_debt_service": -5}, "existing_annual_debt_service"),
            ({"proposed_loan": LoanTerms(0, 4.5, 30)}, "principal"),
        ],
    )
    def test_rejects(self, changes: dict, field: str) -> None:
        with pytest.raises(InvalidInput) as exc:
            _evaluate(_INPUTS.with_(**changes))
        assert exc.value.field == field

    def test_loose_dsr_ceiling_warns(self) -> None:
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            evaluate(_INPUTS.with_(ratio_ceilings=RatioCeilings(dsr_max_percent=70.0)))
        assert any("DSR ceiling" in str(w.message) for w in caught)

    def test_ltv_over_100_warns(self) -> None:
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            evaluate(_INPUTS.with_(property_value=400_000_000))
        assert any("LTV of" in str(w.message) for w in caught)


class TestJeonseLoan:
    def test_default_ratio(self) -> None:
        res = jeonse_loan(300_000_000, 3.6)
        assert res.max_loan == pytest.approx(240_000_000)
        assert res.monthly_interest == pytest.approx(720_000)

    def test_custom_ratio(self) -> None:
        assert jeonse_loan(100_000_000, 4.0, ratio=0.5).max_loan == pytest.approx(50_000_000)

    def test_rejects_zero_deposit(self) -> None:
        with pytest.raises(InvalidInput):
            jeonse_loan(0, 3.0)
