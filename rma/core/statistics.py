"""Statistical helpers for market analysis.

Pearson and lagged correlation, OLS regression, market-cycle classification
from price momentum, and a composite bubble-risk score built from PIR and
jeonse-ratio history.

Degenerate inputs (empty or constant series) are a legitimate "no relationship"
signal rather than an error: correlations come back as 0 and an undefined
R-squared as NaN. Series containing NaN or infinity are rejected with
``InvalidInput``.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple

import numpy as np

from .errors import InvalidInput


def _as_array(values: Iterable[float], name: str = "values") -> np.ndarray:
    arr = np.asarray(list(values) if not isinstance(values, np.ndarray) else values, dtype=np.float64)
    if not np.all(np.isfinite(arr)):
        raise InvalidInput(name, "must contain only finite numbers")
    return arr


def _aligned(x: Iterable[float], y: Iterable[float]) -> Tuple[np.ndarray, np.ndarray]:
    xa = _as_array(x, "x")
    ya = _as_array(y, "y")
    n = min(len(xa), len(ya))
    return xa[:n], ya[:n]


def _is_constant(arr: np.ndarray) -> bool:
    # Exact check; a float mean of equal values can leave a nonzero residue.
    return len(arr) == 0 or bool(np.all(arr == arr[0]))


# ---------------------------------------------------------------------------
# Correlation
# ---------------------------------------------------------------------------


def pearson_correlation(x: Iterable[float], y: Iterable[float]) -> float:
    """Pearson r over the overlapping prefix of ``x`` and ``y``.

    Returns 0.0 when there is no overlap or either series has zero variance.
    """
    xa, ya = _aligned(x, y)
    if len(xa) == 0 or _is_constant(xa) or _is_constant(ya):
        return 0.0
    dx = xa - xa.mean()
    dy = ya - ya.mean()
    denom = math.sqrt(float(np.dot(dx, dx)) * float(np.dot(dy, dy)))
    if denom == 0.0:
        return 0.0
    r = float(np.dot(dx, dy)) / denom
    # Guard against tiny float excursions outside [-1, 1].
    return max(-1.0, min(1.0, r))


@dataclass(frozen=True)
class LagCorrelation:
    lag: int
    r: float


def lagged_correlation(x: Sequence[float], y: Sequence[float], max_lag: int = 12) -> Tuple[LagCorrelation, ...]:
    """Correlation of ``x`` against ``y`` shifted by each lag in ``[-max_lag, max_lag]``.

    A positive lag pairs ``x[t]`` with ``y[t + lag]`` (x leads y); a negative lag
    pairs ``x[t - lag]`` with ``y[t]`` (y leads x).  Both series are shortened to
    the overlapping window for each lag.
    """
    max_lag = int(max_lag)
    if max_lag < 0:
        raise InvalidInput("max_lag", "must not be negative")
    xa = _as_array(x, "x")
    ya = _as_array(y, "y")

    out = []
    for lag in range(-max_lag, max_lag + 1):
        if lag >= 0:
            xs = xa[: max(0, len(xa) - lag)]
            ys = ya[lag:]
        else:
            xs = xa[-lag:]
            ys = ya[: max(0, len(ya) + lag)]
        out.append(LagCorrelation(lag=lag, r=pearson_correlation(xs, ys)))
    return tuple(out)


def best_lag(results: Iterable[LagCorrelation]) -> LagCorrelation:
    """Entry with the largest |r|; ties keep the earliest lag."""
    items = list(results)
    if not items:
        raise InvalidInput("results", "no lag correlations to choose from")
    return max(items, key=lambda item: abs(item.r))


def describe_correlation(r: float) -> Tuple[str, str]:
    """Return ``(strength, direction)`` labels for a correlation coefficient."""
    a = abs(float(r))
    if a >= 0.8:
        strength = "very strong"
    elif a >= 0.6:
        strength = "strong"
    elif a >= 0.4:
        strength = "moderate"
    elif a >= 0.2:
        strength = "weak"
    else:
        strength = "very weak"

    if r > 0.1:
        direction = "positive"
    elif r < -0.1:
        direction = "negative"
    else:
        direction = "none"
    return strength, direction


# ---------------------------------------------------------------------------
# Regression
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RegressionResult:
    slope: float
    intercept: float
    r_squared: float

    def predict(self, x: float) -> float:
        return self.slope * float(x) + self.intercept


def linear_regression(x: Iterable[float], y: Iterable[float]) -> RegressionResult:
    """Ordinary least squares fit ``y = slope * x + intercept``.

    ``r_squared`` is NaN when ``y`` is constant (SStot == 0).

    Raises:
        InvalidInput: with fewer than two aligned points, or constant ``x``
            (the slope is undefined).
    """
    xa, ya = _aligned(x, y)
    if len(xa) < 2:
        raise InvalidInput("x", "linear regression needs at least two points")
    if _is_constant(xa):
        raise InvalidInput("x", "has zero variance; slope is undefined")
    dx = xa - xa.mean()
    sxx = float(np.dot(dx, dx))

    slope = float(np.dot(dx, ya - ya.mean())) / sxx
    intercept = float(ya.mean()) - slope * float(xa.mean())

    residuals = ya - (slope * xa + intercept)
    ss_res = float(np.dot(residuals, residuals))
    dy = ya - ya.mean()
    ss_tot = float(np.dot(dy, dy))
    r_squared = float("nan") if _is_constant(ya) else 1.0 - ss_res / ss_tot
    return RegressionResult(slope=slope, intercept=intercept, r_squared=r_squared)


# ---------------------------------------------------------------------------
# Market cycle
# ---------------------------------------------------------------------------


class CyclePhase(enum.Enum):
    EXPANSION = "Expansion"
    RECOVERY = "Recovery"
    CORRECTION = "Correction"
    DECLINE = "Decline"


_PHASE_TEXT = {
    CyclePhase.EXPANSION: (
        "Prices continue to rise.",
        "Monitor for a turn into overheating.",
    ),
    CyclePhase.RECOVERY: (
        "The market has bottomed out and is recovering.",
        "Signs of an upswing.",
    ),
    CyclePhase.CORRECTION: (
        "Prices are flat or slightly lower.",
        "Look for buying opportunities at lower prices.",
    ),
    CyclePhase.DECLINE: (
        "Prices are falling.",
        "Wait for a confirmed bottom before entering.",
    ),
}


@dataclass(frozen=True)
class CycleDiagnosis:
    momentum_percent: float
    volatility: float
    phase: CyclePhase
    outlook_text: str
    description: str
    recent_trend: str


def population_std(values: Iterable[float]) -> float:
    arr = _as_array(values)
    if len(arr) == 0:
        raise InvalidInput("values", "must not be empty")
    return float(np.std(arr, ddof=0))


def phase_for_momentum(momentum_percent: float) -> CyclePhase:
    if momentum_percent > 5.0:
        return CyclePhase.EXPANSION
    if momentum_percent > 0.0:
        return CyclePhase.RECOVERY
    if momentum_percent > -5.0:
        return CyclePhase.CORRECTION
    return CyclePhase.DECLINE


def classify_cycle(recent_window: Iterable[float], prior_window: Iterable[float]) -> CycleDiagnosis:
    """Classify the market phase from the change in mean level between two windows.

    Raises:
        InvalidInput: if either window is empty or the prior mean is zero.
    """
    recent = _as_array(recent_window, "recent_window")
    prior = _as_array(prior_window, "prior_window")
    if len(recent) == 0:
        raise InvalidInput("recent_window", "must not be empty")
    if len(prior) == 0:
        raise InvalidInput("prior_window", "must not be empty")
    prior_mean = float(prior.mean())
    if prior_mean == 0.0:
        raise InvalidInput("prior_window", "mean is zero; momentum is undefined")

    momentum = (float(recent.mean()) - prior_mean) / prior_mean * 100.0
    phase = phase_for_momentum(momentum)
    description, outlook = _PHASE_TEXT[phase]
    return CycleDiagnosis(
        momentum_percent=momentum,
        volatility=population_std(recent),
        phase=phase,
        outlook_text=outlook,
        description=description,
        recent_trend="up" if recent[-1] > recent[0] else "down",
    )


def classify_cycle_from_series(series: Sequence[float], window: int = 24) -> CycleDiagnosis:
    """Split the tail of ``series`` into prior and recent windows of ``window`` points each."""
    arr = _as_array(series, "series")
    window = int(window)
    if window <= 0:
        raise InvalidInput("window", "must be positive")
    if len(arr) <= window:
        raise InvalidInput("series", f"needs more than {window} points to form two windows")
    recent = arr[-window:]
    prior = arr[max(0, len(arr) - 2 * window): len(arr) - window]
    return classify_cycle(recent, prior)


# ---------------------------------------------------------------------------
# Bubble risk
# ---------------------------------------------------------------------------

PIR_WEIGHT = 0.6
JEONSE_WEIGHT = 0.4


class RiskLevel(enum.Enum):
    LOW = "Low"
    MODERATE = "Moderate"
    CAUTION = "Caution"
    HIGH = "High"


_RISK_TEXT = {
    RiskLevel.LOW: "The market is undervalued or within the normal range.",
    RiskLevel.MODERATE: "The market is at a fair level.",
    RiskLevel.CAUTION: "There are signs of overheating.",
    RiskLevel.HIGH: "A bubble is likely.",
}


@dataclass(frozen=True)
class BubbleScore:
    pir_sub_score: float
    jeonse_sub_score: float
    composite_index: float
    risk_level: RiskLevel
    description: str


def _clamp_score(x: float) -> float:
    return min(100.0, max(0.0, float(x)))


def risk_level_for(composite: float) -> RiskLevel:
    if composite < 30.0:
        return RiskLevel.LOW
    if composite < 50.0:
        return RiskLevel.MODERATE
    if composite < 70.0:
        return RiskLevel.CAUTION
    return RiskLevel.HIGH


def bubble_score(pir_series: Iterable[float], jeonse_series: Iterable[float]) -> BubbleScore:
    """Composite bubble index from the latest PIR and jeonse ratio against their history.

    A PIR above its mean and a jeonse ratio below its mean both push the score up.

    Raises:
        InvalidInput: if either series is empty or has a zero mean.
    """
    pir = _as_array(pir_series, "pir_series")
    jeonse = _as_array(jeonse_series, "jeonse_series")
    for name, arr in (("pir_series", pir), ("jeonse_series", jeonse)):
        if len(arr) == 0:
            raise InvalidInput(name, "must not be empty")
        if float(arr.mean()) == 0.0:
            raise InvalidInput(name, "mean is zero")

    pir_score = _clamp_score((float(pir[-1]) / float(pir.mean()) - 0.8) * 250.0)
    jeonse_score = _clamp_score((1.0 - float(jeonse[-1]) / float(jeonse.mean())) * 200.0 + 50.0)
    composite = pir_score * PIR_WEIGHT + jeonse_score * JEONSE_WEIGHT
    level = risk_level_for(composite)
    return BubbleScore(
        pir_sub_score=pir_score,
        jeonse_sub_score=jeonse_score,
        composite_index=composite,
        risk_level=level,
        description=_RISK_TEXT[level],
    )
