"""
Tracker Kernel - Event Construction

Factory functions for well-formed events and batch envelopes.
Used by the ingestor to lift wire dicts into Events, and by tests and
scripts to build events concisely.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from tracker.kernel.types import Event, now_iso


def make_event(
    seq: int,
    kind: str,
    payload: dict[str, Any],
    *,
    event_id: str | None = None,
    event_key: str | None = None,
    produced_at: str | None = None,
) -> dict[str, Any]:
    """
    Build a wire-shaped event dict from minimal inputs.

    seq determines the default event id and key; pass event_key explicitly
    to exercise deduplication.
    """
    d: dict[str, Any] = {
        "eventId": event_id or f"evt_{seq:04d}",
        "eventKey": event_key or f"key_{seq:04d}",
        "kind": kind,
        "payload": payload,
    }
    if produced_at is not None:
        d["producedAt"] = produced_at
    return d


def make_batch(events: list[dict[str, Any]], *, seq_start: int | None = None) -> dict[str, Any]:
    """Wrap wire events in a batch envelope."""
    batch: dict[str, Any] = {"events": events}
    if seq_start is not None:
        batch["seqStart"] = seq_start
    return batch


def lift_event(raw: dict[str, Any], *, clock: Callable[[], str] = now_iso) -> Event:
    """
    Lift one gate-validated wire event into an Event.
    The clock is read only when the producer left out producedAt.
    """
    return Event.from_dict(raw, clock=clock)
