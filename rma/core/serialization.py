"""JSON-safe conversion of engine records.

Used by the CLI to print results and by QA scripts to fingerprint inputs.
Dataclass records become dicts, enums their values, tuples lists; floats are
normalized (signed zero collapsed, 12 significant digits, NaN/inf -> None) so
hashes stay stable across platforms.
"""

from __future__ import annotations

import dataclasses
import enum
import hashlib
import json
import math
from typing import Any

import numpy as np
import pandas as pd


def _normalize_float(x: float) -> int | float | None:
    v = float(x)
    if not math.isfinite(v):
        return None
    if abs(v) < 1e-15:
        v = 0.0
    v = float(f"{v:.12g}")
    if abs(v - round(v)) <= 1e-12:
        return int(round(v))
    return v


def to_jsonable(value: Any) -> Any:
    """Return a JSON-safe, deterministically ordered representation of ``value``."""
    if isinstance(value, np.generic):
        value = value.item()

    if value is None or isinstance(value, (str, bool)):
        return value

    if isinstance(value, enum.Enum):
        return value.value

    if isinstance(value, int):
        return int(value)

    if isinstance(value, float):
        return _normalize_float(value)

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}

    if isinstance(value, pd.DataFrame):
        return [to_jsonable(row) for row in value.to_dict(orient="records")]

    if isinstance(value, dict):
        return {str(k): to_jsonable(value[k]) for k in sorted(value.keys(), key=str)}

    if isinstance(value, (list, tuple, np.ndarray)):
        return [to_jsonable(v) for v in value]

    raise TypeError(f"cannot serialize {type(value).__name__}")


def canonical_json(value: Any) -> str:
    return json.dumps(to_jsonable(value), sort_keys=True, separators=(",", ":"), ensure_ascii=True)


def deterministic_hash(value: Any) -> str:
    """SHA-256 of the canonical JSON form of ``value``."""
    return hashlib.sha256(canonical_json(value).encode("utf-8")).hexdigest()
