"""Point-lookup routes over the materialized store."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from backend.models.tracker import BindingResponse, PlacementResponse, TransactionResponse
from backend.services.tracker import tracker_service

router = APIRouter(prefix="/api/read", tags=["read"])


def _not_found() -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": "NOT_FOUND"})


@router.get("/binding/{tag_uid}", response_model=BindingResponse, response_model_exclude_none=True)
async def get_binding(tag_uid: str):
    """What a tag is currently bound to."""
    record = tracker_service.reader.binding_for_tag(tag_uid)
    if record is None:
        return _not_found()
    return record


@router.get(
    "/placement/{object_type}/{object_id}",
    response_model=PlacementResponse,
    response_model_exclude_none=True,
)
async def get_placement(object_type: str, object_id: str):
    """Where an object is right now."""
    record = tracker_service.reader.placement_for_object(object_type, object_id)
    if record is None:
        return _not_found()
    return record


@router.get("/tx/{tx_id}", response_model=TransactionResponse, response_model_exclude_none=True)
async def get_transaction(tx_id: str):
    record = tracker_service.reader.transaction_by_id(tx_id)
    if record is None:
        return _not_found()
    return record


@router.get(
    "/object/{object_type}/{object_id}/open-tx",
    response_model=TransactionResponse,
    response_model_exclude_none=True,
)
async def get_open_transaction(object_type: str, object_id: str):
    """The transaction currently open for an object, if any."""
    record = tracker_service.reader.open_transaction_for_object(object_type, object_id)
    if record is None:
        return _not_found()
    return record
