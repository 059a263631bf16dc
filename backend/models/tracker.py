"""Wire models for the read and health endpoints."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel


class BindingResponse(BaseModel):
    """What GET /api/read/binding/{tagUid} returns."""

    tagUid: str
    target: Literal["OBJECT", "ZONE"]
    objectType: str | None = None
    objectId: str | None = None
    zoneId: str | None = None


class PlacementResponse(BaseModel):
    """Current location of an object. Exactly one of zoneId / ctbPath is set."""

    objectType: str
    objectId: str
    zoneId: str | None = None
    ctbPath: list[str] | None = None
    updatedAt: str


class TransactionResponse(BaseModel):
    txId: str
    objectType: str
    objectId: str
    status: Literal["OPEN", "RETURNED"]
    checkoutAt: str
    expectedReturnAt: str | None = None
    returnedAt: str | None = None


class HealthResponse(BaseModel):
    ok: bool
    time: str


class StatsResponse(BaseModel):
    bindings: int
    placements: int
    transactions: int
    openTransactions: int
    seenEventKeys: int


class ErrorResponse(BaseModel):
    """Error body for every non-2xx reply."""

    error: str
    details: list[dict[str, Any]] | None = None
