"""Tests for rma.core.validation: hard checks and advisory warnings."""

from __future__ import annotations

import math
import warnings

import pytest

from rma.core.errors import InvalidInput
from rma.core.validation import (
    get_validation_warnings,
    require_non_negative,
    require_positive,
    require_positive_int,
    warn_if_unusual,
)


class TestHardChecks:
    def test_require_positive(self) -> None:
        assert require_positive("2.5", "x") == 2.5
        with pytest.raises(InvalidInput, match="x: must be positive"):
            require_positive(0, "x")

    def test_require_non_negative(self) -> None:
        assert require_non_negative(0, "x") == 0.0
        with pytest.raises(InvalidInput):
            require_non_negative(-0.01, "x")

    @pytest.mark.parametrize("bad", [math.nan, math.inf, "abc", None])
    def test_non_finite_or_non_numeric(self, bad) -> None:
        with pytest.raises(InvalidInput) as exc:
            require_positive(bad, "rate")
        assert exc.value.field == "rate"

    def test_require_positive_int(self) -> None:
        assert require_positive_int(30, "term_years") == 30
        assert require_positive_int(30.0, "term_years") == 30
        with pytest.raises(InvalidInput, match="whole number"):
            require_positive_int(2.5, "term_years")
        with pytest.raises(InvalidInput):
            require_positive_int(0, "term_years")

    def test_message_format(self) -> None:
        err = InvalidInput("price", "must be positive")
        assert str(err) == "price: must be positive"
        assert err.field == "price"
        assert err.message == "must be positive"
        assert isinstance(err, ValueError)


class TestAdvisoryWarnings:
    def test_clean_inputs(self) -> None:
        assert get_validation_warnings(term_years=30, annual_rate_percent=4.5, ltv_percent=70, dsr_max_percent=40) == []

    def test_no_arguments(self) -> None:
        assert get_validation_warnings() == []

    def test_each_check(self) -> None:
        msgs = get_validation_warnings(term_years=60, annual_rate_percent=30, ltv_percent=120, dsr_max_percent=60)
        assert len(msgs) == 4
        assert any("Loan term of 60 years" in m for m in msgs)
        assert any("Annual rate of 30.00%" in m for m in msgs)
        assert any("LTV of 120.0%" in m for m in msgs)
        assert any("DSR ceiling of 60.0%" in m for m in msgs)

    def test_warn_if_unusual_emits(self) -> None:
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            msgs = warn_if_unusual(term_years=55)
        assert len(msgs) == 1
        assert [str(w.message) for w in caught] == msgs
