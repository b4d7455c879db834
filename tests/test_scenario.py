"""Macro scenario projector."""

from __future__ import annotations

import pytest

from rma.core.errors import InvalidInput
from rma.core.scenario import (
    ScenarioInputs,
    SensitivityCoefficients,
    path_to_frame,
    project,
    total_effect_percent,
)

_BASE = ScenarioInputs(
    base_index_value=100.0,
    rate_delta_percent_points=-1.0,
    money_supply_growth_delta_percent=2.0,
    gdp_growth_delta_percent=0.5,
    horizon_years=5,
)


def test_total_effect() -> None:
    # +3.5 from the rate cut, +1.6 from M2, +0.6 from GDP
    assert total_effect_percent(_BASE) == pytest.approx(5.7)


def test_rate_hike_lowers_index() -> None:
    path = project(ScenarioInputs(base_index_value=100.0, rate_delta_percent_points=1.0, horizon_years=3))
    assert path[-1].projected_index_value < 100.0


def test_path_compounds_evenly() -> None:
    path = project(_BASE)
    assert [p.year for p in path] == [1, 2, 3, 4, 5]
    for p in path:
        assert p.yearly_change_percent == pytest.approx(1.14)
    assert path[0].projected_index_value == pytest.approx(101.14)
    assert path[-1].projected_index_value == pytest.approx(100.0 * 1.0114 ** 5)
    assert path[-1].cumulative_change_percent == pytest.approx((1.0114 ** 5 - 1.0) * 100.0)


def test_no_deltas_is_flat() -> None:
    path = project(ScenarioInputs(base_index_value=250.0, horizon_years=4))
    assert all(p.projected_index_value == pytest.approx(250.0) for p in path)
    assert all(p.cumulative_change_percent == pytest.approx(0.0) for p in path)


def test_custom_coefficients() -> None:
    inputs = _BASE.with_(coefficients=SensitivityCoefficients(rate=-5.0, money_supply=0.0, gdp=0.0))
    assert total_effect_percent(inputs) == pytest.approx(5.0)


@pytest.mark.parametrize(
    "changes, field",
    [
        ({"base_index_value": 0.0}, "base_index_value"),
        ({"horizon_years": 0}, "horizon_years"),
        ({"horizon_years": 2.5}, "horizon_years"),
    ],
)
def test_rejects(changes: dict, field: str) -> None:
    with pytest.raises(InvalidInput) as exc:
        project(_BASE.with_(**changes))
    assert exc.value.field == field


def test_path_to_frame() -> None:
    df = path_to_frame(project(_BASE))
    assert list(df.columns) == ["year", "index", "yearly_change_pct", "cumulative_change_pct"]
    assert len(df) == 5
    assert df["index"].is_monotonic_increasing
