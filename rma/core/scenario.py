"""Macro scenario projection for a house-price index.

A linear effect model: each macro delta moves the index by a fixed sensitivity,
the total effect is spread evenly across the horizon, and yearly changes compound.

Sensitivities (index % change per unit of each driver):

- policy rate, per +1 percentage point: -3.5
- money supply (M2) growth, per +1%: +0.8
- GDP growth, per +1%: +1.2
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, Tuple

import pandas as pd

from .validation import require_positive, require_positive_int

RATE_SENSITIVITY = -3.5
MONEY_SUPPLY_SENSITIVITY = 0.8
GDP_SENSITIVITY = 1.2


@dataclass(frozen=True)
class SensitivityCoefficients:
    rate: float = RATE_SENSITIVITY
    money_supply: float = MONEY_SUPPLY_SENSITIVITY
    gdp: float = GDP_SENSITIVITY


@dataclass(frozen=True)
class ScenarioInputs:
    base_index_value: float
    rate_delta_percent_points: float = 0.0
    money_supply_growth_delta_percent: float = 0.0
    gdp_growth_delta_percent: float = 0.0
    horizon_years: int = 5
    coefficients: SensitivityCoefficients = field(default_factory=SensitivityCoefficients)

    def with_(self, **changes) -> "ScenarioInputs":
        return replace(self, **changes)


@dataclass(frozen=True)
class ScenarioPoint:
    year: int
    projected_index_value: float
    yearly_change_percent: float
    cumulative_change_percent: float


def total_effect_percent(inputs: ScenarioInputs) -> float:
    c = inputs.coefficients
    return (
        float(inputs.rate_delta_percent_points) * c.rate
        + float(inputs.money_supply_growth_delta_percent) * c.money_supply
        + float(inputs.gdp_growth_delta_percent) * c.gdp
    )


def project(inputs: ScenarioInputs) -> Tuple[ScenarioPoint, ...]:
    """Project the index forward one point per year over ``horizon_years``.

    Raises:
        InvalidInput: if the base value or horizon is not positive.
    """
    base = require_positive(inputs.base_index_value, "base_index_value")
    horizon = require_positive_int(inputs.horizon_years, "horizon_years")

    yearly = total_effect_percent(inputs) / float(horizon)
    value = base
    path = []
    for year in range(1, horizon + 1):
        value = value * (1.0 + yearly / 100.0)
        path.append(
            ScenarioPoint(
                year=year,
                projected_index_value=value,
                yearly_change_percent=yearly,
                cumulative_change_percent=(value / base - 1.0) * 100.0,
            )
        )
    return tuple(path)


def path_to_frame(path: Iterable[ScenarioPoint]) -> pd.DataFrame:
    rows = list(path)
    return pd.DataFrame(
        {
            "year": [p.year for p in rows],
            "index": [p.projected_index_value for p in rows],
            "yearly_change_pct": [p.yearly_change_percent for p in rows],
            "cumulative_change_pct": [p.cumulative_change_percent for p in rows],
        }
    )
