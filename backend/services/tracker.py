"""Process-wide tracker kernel: one store, one gate, one ingestor, one reader."""

from __future__ import annotations

from pathlib import Path

from backend.config import settings
from tracker.kernel import BatchIngestor, MaterializedStore, ReadService, SchemaGate


class TrackerService:
    """
    Holds the shared kernel objects for the HTTP layer.

    The store lives for the process lifetime; `reset()` swaps in a fresh one
    (tests only).
    """

    def __init__(self, schema_root: str | None = None) -> None:
        root = schema_root if schema_root is not None else settings.SCHEMA_ROOT
        self.gate = SchemaGate(Path(root) if root else None)
        self.reset()

    def reset(self) -> None:
        self.store = MaterializedStore()
        self.ingestor = BatchIngestor(self.store, self.gate)
        self.reader = ReadService(self.store)


# Singleton instance
tracker_service = TrackerService()
