"""
Tracker kernel test configuration.

Shared fixtures: one compiled schema gate for the whole session, and a fresh
store + ingestor per test with a fixed clock so timestamps are predictable.
"""

import pytest

from tracker.kernel.ingestor import BatchIngestor
from tracker.kernel.read_service import ReadService
from tracker.kernel.schema_gate import SchemaGate
from tracker.kernel.store import MaterializedStore

FIXED_NOW = "2026-03-01T12:00:00.000Z"


@pytest.fixture(scope="session")
def gate():
    return SchemaGate()


@pytest.fixture
def store():
    return MaterializedStore()


@pytest.fixture
def ingestor(store, gate):
    return BatchIngestor(store, gate, clock=lambda: FIXED_NOW)


@pytest.fixture
def reader(store):
    return ReadService(store)
