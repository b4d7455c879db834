"""Canonical JSON conversion and input hashing."""

from __future__ import annotations

import json
import math

import numpy as np
import pandas as pd
import pytest

from rma.core.amortization import LoanTerms, RepaymentScheme
from rma.core.serialization import canonical_json, deterministic_hash, to_jsonable


def test_dataclass_with_enum() -> None:
    out = to_jsonable(LoanTerms(100_000_000.0, 4.5, 30, RepaymentScheme.EQUAL_PRINCIPAL))
    assert out == {
        "principal": 100_000_000,
        "annual_rate_percent": 4.5,
        "term_years": 30,
        "repayment_scheme": "equal_principal",
    }


@pytest.mark.parametrize(
    "value, expected",
    [(-0.0, 0), (2.0, 2), (math.nan, None), (math.inf, None), (0.1 + 0.2, 0.3), (np.float64(1.5), 1.5), (np.int64(7), 7)],
)
def test_float_normalization(value, expected) -> None:
    assert to_jsonable(value) == expected


def test_containers() -> None:
    assert to_jsonable((1, [2.0, "a"], {"b": True, "a": None})) == [1, [2, "a"], {"a": None, "b": True}]
    assert to_jsonable(np.array([1.0, 2.5])) == [1, 2.5]


def test_dataframe_records() -> None:
    df = pd.DataFrame({"year": [1, 2], "index": [101.0, 102.5]})
    assert to_jsonable(df) == [{"index": 101, "year": 1}, {"index": 102.5, "year": 2}]


def test_unsupported_type() -> None:
    with pytest.raises(TypeError):
        to_jsonable(object())


def test_hash_ignores_key_order() -> None:
    a = {"principal": 1.0, "term_years": 30}
    b = {"term_years": 30, "principal": 1.0}
    assert canonical_json(a) == canonical_json(b)
    assert deterministic_hash(a) == deterministic_hash(b)
    assert len(deterministic_hash(a)) == 64


def test_hash_sensitive_to_values() -> None:
    assert deterministic_hash({"x": 1.0}) != deterministic_hash({"x": 1.5})


def test_canonical_json_is_valid_json() -> None:
    assert json.loads(canonical_json({"k": [1.25, None]})) == {"k": [1.25, None]}
