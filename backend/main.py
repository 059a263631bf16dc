"""
Tracker FastAPI application.

Entry point for the API server.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.config import settings
from backend.middleware.access_log import AccessLogMiddleware
from backend.middleware.body_limit import TransportError
from backend.models.tracker import ErrorResponse, HealthResponse
from backend.routes import ops as ops_routes
from backend.routes import read as read_routes
from backend.services.tracker import tracker_service
from tracker.kernel import BatchRejected, ContractBreach
from tracker.kernel.types import now_iso

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI application.

    The kernel is built at import; startup only reports what was loaded.
    """
    logger.info(
        "Tracker starting (%s), %d schema contracts loaded from %s",
        settings.ENVIRONMENT,
        len(tracker_service.gate.schema_names),
        tracker_service.gate.root,
    )
    yield
    logger.info("Tracker stopped")


app = FastAPI(
    title="Asset Tracker",
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None,
    lifespan=lifespan,
)

app.add_middleware(AccessLogMiddleware)

# Register routes
app.include_router(ops_routes.router)
app.include_router(read_routes.router)


# ── error mapping ──────────────────────────────────────────────────────────


def _error(status_code: int, error: str, details: list | None = None) -> JSONResponse:
    body = ErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@app.exception_handler(TransportError)
async def transport_error_handler(request: Request, exc: TransportError):
    return _error(400, exc.code)


@app.exception_handler(BatchRejected)
async def batch_rejected_handler(request: Request, exc: BatchRejected):
    return _error(400, "SCHEMA_INVALID", [i.to_dict() for i in exc.issues])


@app.exception_handler(ContractBreach)
async def contract_breach_handler(request: Request, exc: ContractBreach):
    return _error(500, "SERVER_RESPONSE_INVALID", [i.to_dict() for i in exc.issues])


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return _error(404, "NOT_FOUND")
    if exc.status_code == 405:
        return _error(405, "METHOD_NOT_ALLOWED")
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(500, "INTERNAL_ERROR")


@app.get("/health")
async def health() -> HealthResponse:
    """Liveness probe. Never touches the store."""
    return HealthResponse(ok=True, time=now_iso())


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run("backend.main:app", host="0.0.0.0", port=settings.PORT, log_level=settings.LOG_LEVEL.lower())
