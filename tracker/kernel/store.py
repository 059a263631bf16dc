"""
Tracker Kernel - Materialized Store

Owns the four coupled indices and the seen-event-key set. Exposes atomic
single-key reads and writes and nothing else: it knows no event semantics.

  bindings        tag uid   -> Binding
  placements      ObjectKey -> Placement
  transactions    tx id     -> Transaction
  open_tx         ObjectKey -> tx id   (present iff that tx is OPEN)
  seen_keys       accepted event keys, process lifetime

Locking: one reentrant lock guards everything. The ingestor holds it for a
whole batch via `exclusive()`; readers take it per lookup. Individual methods
also take it, so a caller outside a batch still gets single-key atomicity.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from tracker.kernel.types import Binding, ObjectKey, Placement, Transaction


class StoreView:
    """
    Read-only face of the store handed to the projector.
    """

    def __init__(self, store: MaterializedStore) -> None:
        self._store = store

    def get_binding(self, tag_uid: str) -> Binding | None:
        return self._store.get_binding(tag_uid)

    def get_placement(self, key: ObjectKey) -> Placement | None:
        return self._store.get_placement(key)

    def get_transaction(self, tx_id: str) -> Transaction | None:
        return self._store.get_transaction(tx_id)

    def get_open_transaction(self, key: ObjectKey) -> str | None:
        return self._store.get_open_transaction(key)


class MaterializedStore:
    """In-memory projections. Lives for the process lifetime."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._bindings: dict[str, Binding] = {}
        self._placements: dict[ObjectKey, Placement] = {}
        self._transactions: dict[str, Transaction] = {}
        self._open_tx: dict[ObjectKey, str] = {}
        self._seen_keys: set[str] = set()

    @contextmanager
    def exclusive(self) -> Iterator[MaterializedStore]:
        """Hold the store lock across several operations (one batch)."""
        with self._lock:
            yield self

    def view(self) -> StoreView:
        return StoreView(self)

    # -- bindings --

    def get_binding(self, tag_uid: str) -> Binding | None:
        with self._lock:
            return self._bindings.get(tag_uid)

    def put_binding(self, tag_uid: str, binding: Binding) -> None:
        with self._lock:
            self._bindings[tag_uid] = binding

    def delete_binding(self, tag_uid: str) -> bool:
        """Remove a binding. Returns False if there was none."""
        with self._lock:
            return self._bindings.pop(tag_uid, None) is not None

    # -- placements --

    def get_placement(self, key: ObjectKey) -> Placement | None:
        with self._lock:
            return self._placements.get(key)

    def put_placement(self, key: ObjectKey, placement: Placement) -> None:
        with self._lock:
            self._placements[key] = placement

    # -- transactions --

    def get_transaction(self, tx_id: str) -> Transaction | None:
        with self._lock:
            return self._transactions.get(tx_id)

    def put_transaction(self, tx_id: str, tx: Transaction) -> None:
        with self._lock:
            self._transactions[tx_id] = tx

    # -- open-transaction index --

    def get_open_transaction(self, key: ObjectKey) -> str | None:
        with self._lock:
            return self._open_tx.get(key)

    def open_transaction(self, key: ObjectKey, tx_id: str) -> None:
        with self._lock:
            self._open_tx[key] = tx_id

    def close_open_transaction(self, key: ObjectKey, tx_id: str) -> bool:
        """
        Drop the index entry for `key`, but only if it still points at `tx_id`.
        Returns True if an entry was removed.
        """
        with self._lock:
            if self._open_tx.get(key) != tx_id:
                return False
            del self._open_tx[key]
            return True

    # -- seen event keys --

    def has_seen(self, event_key: str) -> bool:
        with self._lock:
            return event_key in self._seen_keys

    def mark_seen(self, event_key: str) -> None:
        with self._lock:
            self._seen_keys.add(event_key)

    # -- diagnostics --

    def counts(self) -> dict[str, int]:
        with self._lock:
            return {
                "bindings": len(self._bindings),
                "placements": len(self._placements),
                "transactions": len(self._transactions),
                "openTransactions": len(self._open_tx),
                "seenEventKeys": len(self._seen_keys),
            }
