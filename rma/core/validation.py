"""Validation helpers for the financial engines.

Two layers live here:

* **Hard checks** (``require_*``) raise :class:`~rma.core.errors.InvalidInput`
  for values outside an engine's mathematical domain: non-positive principal,
  income or price, negative rates, and so on.  Engines call these first so a
  bad input never reaches the formulas.

* **Advisory checks** (:func:`get_validation_warnings`) never raise.  They
  accumulate human-readable warnings for inputs that are legal but unusual
  for the Korean market the defaults model (very long terms, double-digit
  mortgage rates, LTV above 100%, a DSR ceiling looser than the 40% bank
  norm).  UI layers show them next to the result; :func:`warn_if_unusual`
  re-emits them through :mod:`warnings` for headless callers.
"""

from __future__ import annotations

import math
import warnings as _warnings
from typing import List

from .errors import InvalidInput

# Thresholds for the advisory checks.
MAX_TYPICAL_TERM_YEARS = 50
MAX_TYPICAL_RATE_PCT = 25.0
BANK_DSR_NORM_PCT = 40.0


def _finite(value: float, name: str) -> float:
    try:
        x = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidInput(name, f"expected a number, got {value!r}") from exc
    if not math.isfinite(x):
        raise InvalidInput(name, f"must be finite, got {x!r}")
    return x


def require_positive(value: float, name: str) -> float:
    """Return ``value`` as a float, raising ``InvalidInput`` unless it is > 0."""
    x = _finite(value, name)
    if x <= 0.0:
        raise InvalidInput(name, f"must be positive, got {x:g}")
    return x


def require_non_negative(value: float, name: str) -> float:
    """Return ``value`` as a float, raising ``InvalidInput`` if it is < 0."""
    x = _finite(value, name)
    if x < 0.0:
        raise InvalidInput(name, f"must not be negative, got {x:g}")
    return x


def require_positive_int(value: int, name: str) -> int:
    """Return ``value`` as an int, raising ``InvalidInput`` unless it is a whole number > 0."""
    x = _finite(value, name)
    if x != int(x):
        raise InvalidInput(name, f"must be a whole number, got {x:g}")
    if x <= 0:
        raise InvalidInput(name, f"must be positive, got {int(x)}")
    return int(x)


def get_validation_warnings(
    *,
    term_years: float | None = None,
    annual_rate_percent: float | None = None,
    ltv_percent: float | None = None,
    dsr_max_percent: float | None = None,
) -> List[str]:
    """Return a list of advisory warnings for a loan/regulatory configuration.

    Every argument is optional; checks for missing values are skipped.

    Returns:
        A list of warning strings.  The list is empty when nothing looks unusual.
    """
    warnings: List[str] = []

    if term_years is not None and term_years > MAX_TYPICAL_TERM_YEARS:
        warnings.append(
            f"Loan term of {term_years:g} years exceeds the {MAX_TYPICAL_TERM_YEARS}-year maximum offered by lenders."
        )

    if annual_rate_percent is not None and annual_rate_percent > MAX_TYPICAL_RATE_PCT:
        warnings.append(
            f"Annual rate of {annual_rate_percent:.2f}% is above {MAX_TYPICAL_RATE_PCT:.0f}%; check that the rate is entered in percent."
        )

    if ltv_percent is not None and ltv_percent > 100.0:
        warnings.append(f"LTV of {ltv_percent:.1f}% means the loan exceeds the property value.")

    if dsr_max_percent is not None and dsr_max_percent > BANK_DSR_NORM_PCT:
        warnings.append(
            f"DSR ceiling of {dsr_max_percent:.1f}% is looser than the {BANK_DSR_NORM_PCT:.0f}% bank-sector norm."
        )

    return warnings


def warn_if_unusual(**kwargs) -> List[str]:
    """Emit each advisory warning through :mod:`warnings` and return the list."""
    messages = get_validation_warnings(**kwargs)
    for msg in messages:
        _warnings.warn(msg, stacklevel=2)
    return messages
