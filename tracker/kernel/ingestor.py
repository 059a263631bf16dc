"""
Tracker Kernel - Batch Ingestor

Sits between the schema gate, the projector and the store. Coordinates the
lifecycle of one batch:

  gate(request) -> for each event in order: dedupe -> project -> commit
  -> assemble response -> gate(response)

Partial application: rejected and duplicate events are skipped, the rest
still apply. There is no rollback across a batch. The whole batch runs
inside the store's exclusive section, so readers never see half of it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from tracker.kernel.events import lift_event
from tracker.kernel.projector import commit, project
from tracker.kernel.schema_gate import SchemaGate
from tracker.kernel.store import MaterializedStore, StoreView
from tracker.kernel.types import (
    CODE_SCHEMA_INVALID,
    BatchOutcome,
    BatchSummary,
    EventResult,
    ValidationIssue,
    Verdict,
    now_iso,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class TrackerError(Exception):
    """Base for kernel errors surfaced to the transport layer."""
    pass


class BatchRejected(TrackerError):
    """The request envelope failed the schema gate. Nothing was applied."""

    def __init__(self, issues: list[ValidationIssue]):
        super().__init__(f"Batch failed schema validation ({len(issues)} issue(s))")
        self.issues = issues


class ContractBreach(TrackerError):
    """The assembled response failed the schema gate. This is a server bug."""

    def __init__(self, issues: list[ValidationIssue], response: dict[str, Any]):
        super().__init__(f"Response failed schema validation ({len(issues)} issue(s))")
        self.issues = issues
        self.response = response


# ---------------------------------------------------------------------------
# Ingestor
# ---------------------------------------------------------------------------


class BatchIngestor:
    def __init__(
        self,
        store: MaterializedStore,
        gate: SchemaGate,
        *,
        clock: Callable[[], str] = now_iso,
    ):
        self._store = store
        self._gate = gate
        self._clock = clock

    def ingest(self, envelope: Any) -> BatchOutcome:
        """
        Validate -> project -> commit, one event at a time in array order.

        Raises BatchRejected if the envelope is structurally invalid and
        ContractBreach if the response we built does not satisfy its contract.
        """
        issues = self._gate.validate_request(envelope)
        if issues:
            logger.info("ingest: batch rejected by schema gate (%d issues)", len(issues))
            raise BatchRejected(issues)

        raw_events: list[dict[str, Any]] = envelope["events"]
        seq_start = envelope.get("seqStart")

        summary = BatchSummary()
        results: list[EventResult] = []
        batch_seen: set[str] = set()

        with self._store.exclusive() as store:
            view = store.view()
            for index, raw in enumerate(raw_events):
                result = self._ingest_one(store, view, index, raw, batch_seen)
                results.append(result)
                if result.status == Verdict.ACCEPTED:
                    summary.accepted += 1
                elif result.status == Verdict.DUPLICATE:
                    summary.duplicate += 1
                else:
                    summary.rejected += 1

        response = self._assemble(results, summary, seq_start, len(raw_events))

        breach = self._gate.validate_response(response)
        if breach:
            logger.error(
                "ingest: assembled response violates contract: %s",
                "; ".join(f"{i.instance_path or '/'}: {i.message}" for i in breach),
            )
            raise ContractBreach(breach, response)

        logger.info(
            "ingest: %d events, accepted=%d rejected=%d duplicate=%d",
            len(raw_events),
            summary.accepted,
            summary.rejected,
            summary.duplicate,
        )
        return BatchOutcome(response=response, summary=summary, results=results)

    # -- internals --

    def _ingest_one(
        self,
        store: MaterializedStore,
        view: StoreView,
        index: int,
        raw: dict[str, Any],
        batch_seen: set[str],
    ) -> EventResult:
        event = lift_event(raw, clock=self._clock)

        if event.event_key in batch_seen or store.has_seen(event.event_key):
            return EventResult(
                event_id=event.event_id,
                event_key=event.event_key,
                status=Verdict.DUPLICATE,
                event_index=index,
            )

        projection = project(view, event)
        if not projection.applied:
            logger.info(
                "ingest: event %s (%s) rejected: %s",
                event.event_id,
                event.kind,
                projection.message,
            )
            # Key stays unseen so a corrected retry can succeed
            return EventResult(
                event_id=event.event_id,
                event_key=event.event_key,
                status=Verdict.REJECTED,
                event_index=index,
                code=projection.code or CODE_SCHEMA_INVALID,
                message=projection.message or "Rejected by projector",
            )

        commit(store, projection)
        batch_seen.add(event.event_key)
        store.mark_seen(event.event_key)
        return EventResult(
            event_id=event.event_id,
            event_key=event.event_key,
            status=Verdict.ACCEPTED,
            event_index=index,
        )

    def _assemble(
        self,
        results: list[EventResult],
        summary: BatchSummary,
        seq_start: Any,
        event_count: int,
    ) -> dict[str, Any]:
        response: dict[str, Any] = {"serverTime": self._clock()}
        # JSON 2.0 passes "type: integer"
        if isinstance(seq_start, (int, float)) and not isinstance(seq_start, bool):
            response["nextSeqExpected"] = int(seq_start) + event_count
        response["rejected"] = summary.rejected
        response["duplicate"] = summary.duplicate
        response["results"] = [r.to_dict() for r in results]
        return response
