"""
InspectPilot API

Electrical inspection finding engine.

Endpoints:
    POST /findings/derive              - Derive findings from raw answers
    GET  /findings/{id}/profile        - Authored profile and classification
    POST /signals                      - Finding and property signals
    POST /reports/finding-pages        - Validated six-block finding pages
    POST /reports/inspection           - Full pipeline run
    GET  /api/inspectionPhoto          - Verify a signed photo link
    GET  /health                       - Liveness probe
"""

import json
import logging
import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routes import findings, photos, reports, signals
from api.schemas.responses import HealthResponse
from inspectpilot import __version__
from inspectpilot.config import Settings
from inspectpilot.exceptions import (
    FindingPagesValidationError,
    InspectPilotError,
    PackLoadError,
    PackValidationError,
    PhotoTokenError,
    ProfileNotFoundError,
    RenderValidationError,
)
from inspectpilot.packs import PackLoader, PackSnapshot

# =============================================================================
# Configuration
# =============================================================================

settings = Settings.from_env()


# =============================================================================
# Logging
# =============================================================================

class JSONFormatter(logging.Formatter):
    """Structured JSON log lines."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if hasattr(record, "request_id"):
            log_entry["request_id"] = record.request_id
        if hasattr(record, "path"):
            log_entry["path"] = record.path
        if hasattr(record, "status_code"):
            log_entry["status_code"] = record.status_code
        if hasattr(record, "duration_ms"):
            log_entry["duration_ms"] = record.duration_ms
        if hasattr(record, "error_code"):
            log_entry["error_code"] = record.error_code
        return json.dumps(log_entry)


logger = logging.getLogger("inspectpilot")
logger.setLevel(getattr(logging, settings.log_level, logging.INFO))
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)

api_logger = logging.getLogger("inspectpilot.api")

# Loaded snapshot, replaced on startup
snapshot = PackSnapshot()


# =============================================================================
# Lifespan
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load pack documents on startup and share them with the routes."""
    global snapshot

    api_logger.info("Loading packs from %s", settings.packs_dir)
    snapshot = PackLoader(strict=False).load_snapshot(
        settings.packs_dir,
        rules_file=settings.rules_file,
        profiles_file=settings.profiles_file,
        responses_file=settings.responses_file,
    )
    summary = snapshot.summary()
    api_logger.info(
        "Loaded %d rule(s), %d profile(s), %d response(s)",
        summary["rules"], summary["profiles"], summary["responses"],
    )

    findings.set_snapshot(snapshot, settings)
    signals.set_snapshot(snapshot, settings)
    reports.set_snapshot(snapshot, settings)
    photos.set_settings(settings)

    yield

    api_logger.info("Shutting down...")


# =============================================================================
# FastAPI App
# =============================================================================

app = FastAPI(
    title="InspectPilot API",
    description="""
**Electrical inspection finding engine.**

InspectPilot turns inspection answers into a prioritized finding set with
nine-axis risk dimensions, a property-level risk verdict, and six validated
narrative blocks per finding.

## Quick Start

1. `POST /findings/derive` - Derive findings from raw answers
2. `POST /signals` - Property risk verdict
3. `POST /reports/inspection` - Full report run
    """,
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.include_router(findings.router)
app.include_router(signals.router)
app.include_router(reports.router)
app.include_router(photos.router)


# =============================================================================
# Middleware
# =============================================================================

@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add request ID to all requests and log the outcome."""
    request_id = str(uuid.uuid4())[:8]
    request.state.request_id = request_id
    start_time = time.time()

    response = await call_next(request)

    response.headers["X-Request-ID"] = request_id
    api_logger.info(
        "%s %s", request.method, request.url.path,
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round((time.time() - start_time) * 1000, 2),
        },
    )
    return response


# =============================================================================
# Error Handling
# =============================================================================

ERROR_STATUS = {
    ProfileNotFoundError: 404,
    FindingPagesValidationError: 422,
    PhotoTokenError: 403,
    PackLoadError: 500,
    PackValidationError: 500,
    RenderValidationError: 500,
}


def status_for(error: InspectPilotError) -> int:
    for error_type, status in ERROR_STATUS.items():
        if isinstance(error, error_type):
            return status
    return 500


@app.exception_handler(InspectPilotError)
async def inspectpilot_error_handler(request: Request, exc: InspectPilotError):
    """Structured error body for every domain error."""
    request_id = getattr(request.state, "request_id", "unknown")
    status = status_for(exc)
    api_logger.warning(
        str(exc),
        extra={"request_id": request_id, "error_code": exc.code, "status_code": status},
    )
    content = exc.to_dict()
    content["request_id"] = request_id
    return JSONResponse(status_code=status, content=content)


# =============================================================================
# Health
# =============================================================================

@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Liveness probe with loaded pack counts."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=__version__,
        rules_loaded=len(snapshot.rules),
        rules_version=snapshot.rules.version,
        profiles_loaded=len(snapshot.profiles),
        responses_loaded=len(snapshot.responses),
        photo_signing_enabled=bool(settings.photo_signing_secret),
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
