#!/usr/bin/env python3
"""
Validate request fixtures against the batch request contract.

Usage:
    python scripts/check_fixtures.py [fixture_root]

fixture_root defaults to tracker/kernel/tests/fixtures and must contain
ok/ (fixtures that must pass) and bad/ (fixtures that must fail).
"""

import os
import sys
from pathlib import Path

from tracker.kernel.contract_check import FIXTURE_ROOT, check_fixtures
from tracker.kernel.schema_gate import SchemaGate


def _rel(p: Path) -> str:
    return os.path.relpath(p, Path.cwd())


def main() -> int:
    root = Path(sys.argv[1]) if len(sys.argv) > 1 else FIXTURE_ROOT
    report = check_fixtures(SchemaGate(), root)

    for r in report.results:
        label = "OK" if r.expect_valid else "BAD"
        if r.error is not None:
            print(f"Unreadable fixture: {_rel(r.path)}: {r.error}", file=sys.stderr)
        elif r.passed:
            verb = "passed" if r.expect_valid else "failed"
            print(f"{label} fixture {verb}: {_rel(r.path)}")
        elif r.expect_valid:
            print(f"OK fixture failed: {_rel(r.path)}!", file=sys.stderr)
            for issue in r.issues:
                print(f" - at {issue.instance_path or '/'}: {issue.message}", file=sys.stderr)
        else:
            print(f"BAD fixture passed: {_rel(r.path)}!", file=sys.stderr)

    if report.failures:
        print(
            f"\nSummary: {report.ok_passed} OK passed, {report.ok_failed} OK failed; "
            f"{report.bad_rejected} BAD rejected, {report.bad_passed} BAD passed (should fail)."
        )
        return 1

    print(f"\nSummary: ALL PASSED ({report.ok_passed} OK, {report.bad_rejected} BAD).")
    return 0


if __name__ == "__main__":
    sys.exit(main())
