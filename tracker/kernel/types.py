"""
Tracker Kernel - Shared Types

Data classes used across the schema gate, projector, store, ingestor and
read service. These are the contracts that bind the kernel together.

Binding and Placement values are tagged unions: each variant is its own
frozen dataclass, and consumers dispatch on the variant with `match`.
"""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, NamedTuple

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def now_iso() -> str:
    """Current UTC time as ISO 8601 string with millisecond precision."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class EventKind(enum.StrEnum):
    """Closed set of event kinds the projector knows how to apply."""

    BIND = "BIND"
    UNBIND = "UNBIND"
    CHECKIN = "CHECKIN"
    MOVE = "MOVE"
    CHECKOUT = "CHECKOUT"
    RETURN = "RETURN"

    @classmethod
    def parse(cls, value: str) -> EventKind | None:
        try:
            return cls(value)
        except ValueError:
            return None


class BindingTarget(enum.StrEnum):
    OBJECT = "OBJECT"
    ZONE = "ZONE"


class TxStatus(enum.StrEnum):
    OPEN = "OPEN"
    RETURNED = "RETURNED"


class Verdict(enum.StrEnum):
    """Per-event outcome reported back to the producer."""

    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    DUPLICATE = "DUPLICATE"


# Rejection codes carried on REJECTED verdicts
CODE_SCHEMA_INVALID = "SCHEMA_INVALID"


# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------


class ObjectKey(NamedTuple):
    """Natural key of a tracked physical object."""

    object_type: str
    object_id: str

    def __str__(self) -> str:
        return f"{self.object_type}:{self.object_id}"


# ---------------------------------------------------------------------------
# Bindings (tag -> object | zone)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ObjectBinding:
    object_type: str
    object_id: str

    @property
    def target(self) -> BindingTarget:
        return BindingTarget.OBJECT


@dataclass(frozen=True)
class ZoneBinding:
    zone_id: str

    @property
    def target(self) -> BindingTarget:
        return BindingTarget.ZONE


Binding = ObjectBinding | ZoneBinding


# ---------------------------------------------------------------------------
# Placements (object -> zone | container path)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ZonePlacement:
    zone_id: str
    updated_at: str  # ISO 8601 UTC


@dataclass(frozen=True)
class ContainerPlacement:
    """Object sits inside nested containers; ctb_path lists them outermost first."""

    ctb_path: tuple[str, ...]
    updated_at: str


Placement = ZonePlacement | ContainerPlacement


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Transaction:
    """Checkout/return lifecycle record for one object."""

    object_type: str
    object_id: str
    status: TxStatus
    checkout_at: str
    expected_return_at: str | None = None
    returned_at: str | None = None

    @property
    def object_key(self) -> ObjectKey:
        return ObjectKey(self.object_type, self.object_id)


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass
class Event:
    """
    One inbound domain event, as accepted past the schema gate.

    `kind` stays the raw string from the wire: an unknown kind is a per-event
    rejection, not a parse failure. `event_time` is the producer's timestamp
    when supplied, otherwise the clock reading taken at ingestion.
    """

    event_id: str
    event_key: str
    kind: str
    payload: dict[str, Any]
    event_time: str
    produced_at: str | None = None

    @classmethod
    def from_dict(cls, d: dict[str, Any], *, clock: Callable[[], str] = now_iso) -> Event:
        """The clock is read only when producedAt is absent."""
        produced_at = d.get("producedAt")
        return cls(
            event_id=d["eventId"],
            event_key=d["eventKey"],
            kind=d["kind"],
            payload=d.get("payload") or {},
            event_time=produced_at or clock(),
            produced_at=produced_at,
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "eventId": self.event_id,
            "eventKey": self.event_key,
            "kind": self.kind,
            "payload": self.payload,
        }
        if self.produced_at is not None:
            d["producedAt"] = self.produced_at
        return d


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass
class EventResult:
    """Verdict for one event, tagged with its index in the batch."""

    event_id: str
    event_key: str
    status: Verdict
    event_index: int
    code: str | None = None
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "eventId": self.event_id,
            "eventKey": self.event_key,
            "status": str(self.status),
            "eventIndex": self.event_index,
        }
        if self.code is not None:
            d["code"] = self.code
        if self.message is not None:
            d["message"] = self.message
        return d


@dataclass
class BatchSummary:
    accepted: int = 0
    rejected: int = 0
    duplicate: int = 0

    @property
    def total(self) -> int:
        return self.accepted + self.rejected + self.duplicate


@dataclass
class BatchOutcome:
    """What the ingestor hands back: the validated wire response plus counts."""

    response: dict[str, Any]
    summary: BatchSummary
    results: list[EventResult] = field(default_factory=list)


@dataclass(frozen=True)
class ValidationIssue:
    """One structural problem found by the schema gate."""

    instance_path: str
    schema_path: str
    keyword: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {
            "instancePath": self.instance_path,
            "schemaPath": self.schema_path,
            "keyword": self.keyword,
            "message": self.message,
        }
