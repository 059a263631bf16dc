"""Event ingestion routes."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from backend.middleware.body_limit import read_json_body
from backend.models.tracker import StatsResponse
from backend.services.tracker import tracker_service

router = APIRouter(prefix="/api/ops", tags=["ops"])


@router.post("/events", status_code=200)
async def ingest_events(body: Any = Depends(read_json_body)) -> dict[str, Any]:
    """
    Apply one batch of events.

    Structural failures raise BatchRejected (400) before anything is applied;
    a response that breaks its own contract raises ContractBreach (500).
    Both are mapped to error bodies in backend.main.
    """
    outcome = tracker_service.ingestor.ingest(body)
    return outcome.response


@router.get("/stats", status_code=200)
async def store_stats() -> StatsResponse:
    """Index sizes of the materialized store."""
    return StatsResponse(**tracker_service.store.counts())
