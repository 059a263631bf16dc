"""
Tracker Kernel - Read Service

Point lookups into the materialized store by natural key. Each lookup
returns the wire-shaped record, or None when nothing is there. Absence is an
ordinary outcome, never an exception.
"""

from __future__ import annotations

from typing import Any

from tracker.kernel.store import MaterializedStore
from tracker.kernel.types import (
    ContainerPlacement,
    ObjectBinding,
    ObjectKey,
    ZoneBinding,
    ZonePlacement,
)


class ReadService:
    def __init__(self, store: MaterializedStore):
        self._store = store

    def binding_for_tag(self, tag_uid: str) -> dict[str, Any] | None:
        """Tag -> {tagUid, target, objectType?, objectId?, zoneId?}."""
        with self._store.exclusive() as store:
            binding = store.get_binding(tag_uid)
        if binding is None:
            return None

        out: dict[str, Any] = {"tagUid": tag_uid, "target": str(binding.target)}
        match binding:
            case ObjectBinding(object_type=object_type, object_id=object_id):
                out["objectType"] = object_type
                out["objectId"] = object_id
            case ZoneBinding(zone_id=zone_id):
                out["zoneId"] = zone_id
        return out

    def placement_for_object(self, object_type: str, object_id: str) -> dict[str, Any] | None:
        """Object -> {objectType, objectId, zoneId? | ctbPath?, updatedAt}."""
        with self._store.exclusive() as store:
            placement = store.get_placement(ObjectKey(object_type, object_id))
        if placement is None:
            return None

        out: dict[str, Any] = {"objectType": object_type, "objectId": object_id}
        match placement:
            case ZonePlacement(zone_id=zone_id):
                out["zoneId"] = zone_id
            case ContainerPlacement(ctb_path=ctb_path):
                out["ctbPath"] = list(ctb_path)
        out["updatedAt"] = placement.updated_at
        return out

    def transaction_by_id(self, tx_id: str) -> dict[str, Any] | None:
        with self._store.exclusive() as store:
            tx = store.get_transaction(tx_id)
        if tx is None:
            return None

        out: dict[str, Any] = {
            "txId": tx_id,
            "objectType": tx.object_type,
            "objectId": tx.object_id,
            "status": str(tx.status),
            "checkoutAt": tx.checkout_at,
        }
        if tx.expected_return_at is not None:
            out["expectedReturnAt"] = tx.expected_return_at
        if tx.returned_at is not None:
            out["returnedAt"] = tx.returned_at
        return out

    def open_transaction_for_object(self, object_type: str, object_id: str) -> dict[str, Any] | None:
        """The currently open transaction for an object, via the open index."""
        with self._store.exclusive() as store:
            tx_id = store.get_open_transaction(ObjectKey(object_type, object_id))
            if tx_id is None:
                return None
            return self.transaction_by_id(tx_id)
