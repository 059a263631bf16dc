"""
Transport gate for JSON request bodies.

Runs ahead of the schema gate: oversized or unparseable input never reaches
the kernel. Bodies are streamed and counted so an oversized upload is cut off
as soon as it crosses the ceiling.
"""

from __future__ import annotations

import json
from typing import Any

from fastapi import Request

from backend.config import settings


class TransportError(Exception):
    """Request body could not be accepted before validation."""

    def __init__(self, code: str):
        super().__init__(code)
        self.code = code


async def read_json_body(request: Request) -> Any:
    """
    FastAPI dependency: read, size-check and decode the request body.

    An empty body decodes to {} so it fails the schema gate, not the parser.
    """
    limit = settings.MAX_BODY_BYTES

    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > limit:
        raise TransportError("PAYLOAD_TOO_LARGE")

    chunks: list[bytes] = []
    size = 0
    async for chunk in request.stream():
        size += len(chunk)
        if size > limit:
            raise TransportError("PAYLOAD_TOO_LARGE")
        chunks.append(chunk)

    raw = b"".join(chunks)
    if not raw.strip():
        return {}
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise TransportError("INVALID_JSON") from exc
