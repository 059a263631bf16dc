"""
Tracker Kernel - Projector

Pure function: (store view, event) -> Projection
No side effects. No IO. Deterministic given the view and the event.

The projector never writes to the store itself. It returns the list of
single-key writes the event implies; the ingestor commits them with
`commit()` under the store lock. That keeps the projector testable against
any object exposing the StoreView read methods.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Any, Protocol

from tracker.kernel.store import MaterializedStore
from tracker.kernel.types import (
    CODE_SCHEMA_INVALID,
    Binding,
    ContainerPlacement,
    Event,
    EventKind,
    ObjectBinding,
    ObjectKey,
    Placement,
    Transaction,
    TxStatus,
    ZoneBinding,
    ZonePlacement,
)


class ReadableStore(Protocol):
    def get_binding(self, tag_uid: str) -> Binding | None: ...
    def get_placement(self, key: ObjectKey) -> Placement | None: ...
    def get_transaction(self, tx_id: str) -> Transaction | None: ...
    def get_open_transaction(self, key: ObjectKey) -> str | None: ...


# ---------------------------------------------------------------------------
# Store writes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PutBinding:
    tag_uid: str
    binding: Binding

    def apply_to(self, store: MaterializedStore) -> None:
        store.put_binding(self.tag_uid, self.binding)


@dataclass(frozen=True)
class DeleteBinding:
    tag_uid: str

    def apply_to(self, store: MaterializedStore) -> None:
        store.delete_binding(self.tag_uid)


@dataclass(frozen=True)
class PutPlacement:
    key: ObjectKey
    placement: Placement

    def apply_to(self, store: MaterializedStore) -> None:
        store.put_placement(self.key, self.placement)


@dataclass(frozen=True)
class PutTransaction:
    tx_id: str
    tx: Transaction

    def apply_to(self, store: MaterializedStore) -> None:
        store.put_transaction(self.tx_id, self.tx)


@dataclass(frozen=True)
class OpenTransaction:
    key: ObjectKey
    tx_id: str

    def apply_to(self, store: MaterializedStore) -> None:
        store.open_transaction(self.key, self.tx_id)


@dataclass(frozen=True)
class CloseTransaction:
    key: ObjectKey
    tx_id: str

    def apply_to(self, store: MaterializedStore) -> None:
        store.close_open_transaction(self.key, self.tx_id)


Write = PutBinding | DeleteBinding | PutPlacement | PutTransaction | OpenTransaction | CloseTransaction


@dataclass
class Projection:
    """
    Result of projecting one event.
    The projector never throws; it always returns one of these.
    """

    applied: bool
    writes: list[Write] = field(default_factory=list)
    code: str | None = None
    message: str | None = None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def project(view: ReadableStore, event: Event) -> Projection:
    """
    Compute the writes for one event against the current store state.
    An unrecognised kind is the one rejection path.
    """
    kind = EventKind.parse(event.kind)
    if kind is None:
        return _reject(CODE_SCHEMA_INVALID, f"Unknown kind: {event.kind}")
    return _HANDLERS[kind](view, event)


def commit(store: MaterializedStore, projection: Projection) -> None:
    """Apply an accepted projection's writes, in order."""
    for write in projection.writes:
        write.apply_to(store)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _reject(code: str, msg: str) -> Projection:
    return Projection(applied=False, code=code, message=msg)


def _ok(*writes: Write) -> Projection:
    return Projection(applied=True, writes=list(writes))


def _object_key(p: dict[str, Any]) -> ObjectKey:
    return ObjectKey(p["objectType"], p["objectId"])


def _location(p: dict[str, Any], zone_field: str, path_field: str, at: str) -> Placement | None:
    """Pick whichever location form the payload carries; zone wins if both slipped through."""
    if p.get(zone_field):
        return ZonePlacement(zone_id=p[zone_field], updated_at=at)
    if p.get(path_field):
        return ContainerPlacement(ctb_path=tuple(p[path_field]), updated_at=at)
    return None


# ---------------------------------------------------------------------------
# Per-kind handlers
# ---------------------------------------------------------------------------


def _handle_bind(view: ReadableStore, event: Event) -> Projection:
    p = event.payload
    if p.get("objectType") and p.get("objectId"):
        binding: Binding = ObjectBinding(object_type=p["objectType"], object_id=p["objectId"])
    elif p.get("zoneId"):
        binding = ZoneBinding(zone_id=p["zoneId"])
    else:
        return _ok()
    return _ok(PutBinding(p["tagUid"], binding))


def _handle_unbind(view: ReadableStore, event: Event) -> Projection:
    # Absent binding is fine
    return _ok(DeleteBinding(event.payload["tagUid"]))


def _handle_checkin(view: ReadableStore, event: Event) -> Projection:
    p = event.payload
    placement = _location(p, "zoneId", "ctbPath", event.event_time)
    if placement is None:
        return _ok()
    return _ok(PutPlacement(_object_key(p), placement))


def _handle_move(view: ReadableStore, event: Event) -> Projection:
    # Overwrite, not a delta: no prior placement required
    p = event.payload
    placement = _location(p, "toZoneId", "toCtbPath", event.event_time)
    if placement is None:
        return _ok()
    return _ok(PutPlacement(_object_key(p), placement))


def _handle_checkout(view: ReadableStore, event: Event) -> Projection:
    """
    Open a transaction keyed by the event's own id.

    An object that already has an OPEN transaction is not refused: the new
    one is created and the open index moves to it. The older transaction
    stays OPEN and remains reachable by its id.
    """
    p = event.payload
    key = _object_key(p)
    tx_id = event.event_id
    tx = Transaction(
        object_type=key.object_type,
        object_id=key.object_id,
        status=TxStatus.OPEN,
        checkout_at=event.event_time,
        expected_return_at=p.get("expectedReturnAt"),
    )
    return _ok(PutTransaction(tx_id, tx), OpenTransaction(key, tx_id))


def _handle_return(view: ReadableStore, event: Event) -> Projection:
    """
    Close a transaction addressed by id, or by object via the open index.
    Nothing to close is still accepted, so replays and late returns never fail.
    """
    p = event.payload
    tx_id = p.get("txId")
    if not tx_id and p.get("objectType") and p.get("objectId"):
        tx_id = view.get_open_transaction(_object_key(p))

    tx = view.get_transaction(tx_id) if tx_id else None
    if tx is None or tx.status != TxStatus.OPEN:
        return _ok()

    returned = replace(tx, status=TxStatus.RETURNED, returned_at=event.event_time)
    return _ok(PutTransaction(tx_id, returned), CloseTransaction(tx.object_key, tx_id))


# ---------------------------------------------------------------------------
# Handler dispatch table
# ---------------------------------------------------------------------------

_HANDLERS: dict[EventKind, Callable[[ReadableStore, Event], Projection]] = {
    EventKind.BIND: _handle_bind,
    EventKind.UNBIND: _handle_unbind,
    EventKind.CHECKIN: _handle_checkin,
    EventKind.MOVE: _handle_move,
    EventKind.CHECKOUT: _handle_checkout,
    EventKind.RETURN: _handle_return,
}

_missing = set(EventKind) - set(_HANDLERS)
if _missing:
    raise RuntimeError(f"No projector handler for: {sorted(_missing)}")
