"""
Tracker Kernel - Contract Checks

Offline checks run by scripts/check_schemas.py and scripts/check_fixtures.py:
every contract must itself be a valid schema, every fixture under ok/ must
pass the request contract, and every fixture under bad/ must fail it.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from tracker.kernel.schema_gate import SchemaGate, list_schema_files
from tracker.kernel.types import ValidationIssue

FIXTURE_ROOT = Path(__file__).parent / "tests" / "fixtures"


@dataclass
class FixtureResult:
    path: Path
    expect_valid: bool
    issues: list[ValidationIssue] = field(default_factory=list)
    error: str | None = None  # unreadable fixture

    @property
    def passed(self) -> bool:
        """True when the fixture behaved as its directory says it should."""
        if self.error is not None:
            return False
        return (not self.issues) == self.expect_valid


@dataclass
class FixtureReport:
    results: list[FixtureResult] = field(default_factory=list)

    @property
    def ok_passed(self) -> int:
        return sum(1 for r in self.results if r.expect_valid and r.passed)

    @property
    def ok_failed(self) -> int:
        return sum(1 for r in self.results if r.expect_valid and not r.passed)

    @property
    def bad_rejected(self) -> int:
        return sum(1 for r in self.results if not r.expect_valid and r.passed)

    @property
    def bad_passed(self) -> int:
        return sum(1 for r in self.results if not r.expect_valid and not r.passed)

    @property
    def failures(self) -> int:
        return self.ok_failed + self.bad_passed


def check_schemas(gate: SchemaGate) -> dict[str, str | None]:
    """{relative path: None if valid else error message} for every contract."""
    return gate.check_all()


def check_fixtures(gate: SchemaGate, root: Path = FIXTURE_ROOT) -> FixtureReport:
    """Validate root/ok/**.json (must pass) and root/bad/**.json (must fail)."""
    report = FixtureReport()
    for sub, expect_valid in (("ok", True), ("bad", False)):
        directory = root / sub
        if not directory.is_dir():
            continue
        for path in list_schema_files(directory):
            report.results.append(_check_one(gate, path, expect_valid))
    return report


def _check_one(gate: SchemaGate, path: Path, expect_valid: bool) -> FixtureResult:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        return FixtureResult(path=path, expect_valid=expect_valid, error=str(exc))
    return FixtureResult(path=path, expect_valid=expect_valid, issues=gate.validate_request(data))
