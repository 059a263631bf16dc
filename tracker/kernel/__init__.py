"""
Tracker Kernel - idempotent ingestion and materialized projections.

Components:
  schema_gate   - structural validation of batch requests and responses
  store         - the in-memory indices (bindings, placements, transactions)
  projector     - (store view, event) -> writes + verdict  (pure, deterministic)
  ingestor      - one batch: dedupe, project, commit, assemble, self-check
  read_service  - point lookups by tag, object, transaction
"""

from tracker.kernel.ingestor import BatchIngestor, BatchRejected, ContractBreach, TrackerError
from tracker.kernel.projector import commit, project
from tracker.kernel.read_service import ReadService
from tracker.kernel.schema_gate import SchemaGate
from tracker.kernel.store import MaterializedStore

__all__ = [
    "SchemaGate",
    "MaterializedStore",
    "project",
    "commit",
    "BatchIngestor",
    "BatchRejected",
    "ContractBreach",
    "TrackerError",
    "ReadService",
]
