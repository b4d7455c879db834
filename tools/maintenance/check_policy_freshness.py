"""Tax-table freshness checker.

Purpose:
- Korean tax schedules (acquisition tiers, progressive brackets, holding deductions) are revised
  most years. The tables carry an explicit *last reviewed* marker and CI uses it as a reminder.

Behavior:
- Exits non-zero if any marker is older than MAX_DAYS (default: 365).
- Emits GitHub Actions warnings as the deadline approaches.

Usage:
  python tools/maintenance/check_policy_freshness.py [MAX_DAYS] [WARN_DAYS]
"""

from __future__ import annotations

import datetime as dt
import importlib
import sys
from pathlib import Path

# Ensure repo root is on sys.path so `import rma.*` works when run as a script.
ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from typing import Iterable, Sequence, Tuple

MARKERS: Iterable[Tuple[str, str]] = [
    ("rma.core.tax_tables", "TAX_RULES_LAST_REVIEWED"),
]


def _get_marker(mod_name: str, attr: str) -> dt.date | None:
    try:
        m = importlib.import_module(mod_name)
    except ImportError:
        return None
    v = getattr(m, attr, None)
    if isinstance(v, dt.datetime):
        return v.date()
    if isinstance(v, dt.date):
        return v
    return None


def check(today: dt.date, max_days: int = 365, warn_days: int = 330) -> Tuple[bool, list[str]]:
    """Return ``(failed, lines)`` for every marker, as of ``today``."""
    failed = False
    lines: list[str] = []
    for mod_name, attr in MARKERS:
        d = _get_marker(mod_name, attr)
        if d is None:
            lines.append(f"::warning::Missing policy marker {mod_name}.{attr} (cannot verify freshness)")
            continue

        age = (today - d).days
        if age >= max_days:
            lines.append(f"::error::{mod_name}.{attr} is {age} days old (last reviewed {d.isoformat()}). Update required.")
            failed = True
        elif age >= warn_days:
            lines.append(
                f"::warning::{mod_name}.{attr} is {age} days old (last reviewed {d.isoformat()}). Plan an annual tax-table review."
            )
        else:
            lines.append(f"OK: {mod_name}.{attr} last reviewed {d.isoformat()} ({age} days ago)")
    return failed, lines


def main(argv: Sequence[str] | None = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    max_days = int(args[0]) if len(args) > 0 else 365
    warn_days = int(args[1]) if len(args) > 1 else 330

    failed, lines = check(dt.date.today(), max_days, warn_days)
    for line in lines:
        print(line)
    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
