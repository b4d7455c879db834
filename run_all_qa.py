#!/usr/bin/env python3
"""Release gates for the rma engines.

Suites:
  smoke             compile the package, run every engine once
  truth_tables      exact numeric invariants and worked tax/loan examples
  cli               every ``python -m rma`` command emits valid ``--json`` on its defaults
  policy_freshness  tax tables reviewed within the last year

Usage:
  python run_all_qa.py
  python run_all_qa.py --only cli,truth_tables
  python run_all_qa.py --skip policy_freshness
  python run_all_qa.py --list

Exit code is 1 when any selected suite fails.
"""

from __future__ import annotations

import argparse
import contextlib
import importlib.util
import io
import json
import sys
from pathlib import Path
from typing import Callable

REPO_ROOT = Path(__file__).resolve().parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


def _exit_code(fn: Callable[[list[str]], object]) -> int:
    """Call a script-style ``main([])`` and turn ``SystemExit`` into a return code."""
    try:
        rc = fn([])
    except SystemExit as e:
        rc = e.code
    if rc is None:
        return 0
    return rc if isinstance(rc, int) else 1


def _suite_smoke() -> int:
    from rma.qa.smoke_check import main as smoke_main

    return _exit_code(smoke_main)


def _suite_truth_tables() -> int:
    from rma.qa.qa_truth_tables import main as truth_main

    return _exit_code(truth_main)


def _suite_cli() -> int:
    from rma import __main__ as cli

    bad = []
    for command in sorted(cli._COMMANDS):
        out, err = io.StringIO(), io.StringIO()
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            rc = cli.main([command, "--json"])
        if rc != 0:
            bad.append(f"{command}: exit {rc}: {err.getvalue().strip()}")
            continue
        try:
            payload = json.loads(out.getvalue())
        except json.JSONDecodeError as e:
            bad.append(f"{command}: output is not JSON ({e})")
            continue
        if payload.get("command") != command or not payload.get("result"):
            bad.append(f"{command}: payload missing command or result")
        elif len(payload.get("inputs_hash", "")) != 64:
            bad.append(f"{command}: inputs_hash is not a sha256 hex digest")
        else:
            print(f"  ok  {command}")

    for line in bad:
        print(f"  FAIL {line}")
    return 1 if bad else 0


def _suite_policy_freshness() -> int:
    path = REPO_ROOT / "tools" / "maintenance" / "check_policy_freshness.py"
    mod_spec = importlib.util.spec_from_file_location("check_policy_freshness", path)
    checker = importlib.util.module_from_spec(mod_spec)
    mod_spec.loader.exec_module(checker)
    return checker.main([])


SUITES: dict[str, Callable[[], int]] = {
    "smoke": _suite_smoke,
    "truth_tables": _suite_truth_tables,
    "cli": _suite_cli,
    "policy_freshness": _suite_policy_freshness,
}


def _names(raw: str) -> set[str]:
    return {x.strip() for x in raw.split(",") if x.strip()}


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Run the rma release gates.")
    ap.add_argument("--list", action="store_true", help="List available suites and exit.")
    ap.add_argument("--only", default="", help="Comma-separated suites to run.")
    ap.add_argument("--skip", default="", help="Comma-separated suites to skip.")
    args = ap.parse_args(argv)

    if args.list:
        print("\n".join(SUITES))
        return 0

    only, skip = _names(args.only), _names(args.skip)
    unknown = sorted((only | skip) - set(SUITES))
    if unknown:
        print(f"[RUN_ALL_QA] Unknown suite(s): {unknown}")
        return 1
    selected = [name for name in SUITES if (not only or name in only) and name not in skip]

    failed = []
    for name in selected:
        print(f"--- {name} ---")
        code = SUITES[name]()
        status = "passed" if code == 0 else f"FAILED (exit {code})"
        print(f"[RUN_ALL_QA] {name} {status}\n")
        if code != 0:
            failed.append(name)

    if failed:
        print(f"=== RUN_ALL_QA FAILED: {', '.join(failed)} ===")
        return 1
    print(f"=== RUN_ALL_QA PASS ({len(selected)} suites) ===")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
