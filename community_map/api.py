"""
FastAPI proxy in front of the Planning Center Groups API.

Keeps the Planning Center credentials server-side and hands the map a
trimmed, eligibility-filtered group list.

Endpoints:
  GET     /groups  - Eligible groups as `{groups, lastUpdated}`
  OPTIONS /groups  - CORS pre-flight
  GET     /health  - Liveness plus whether credentials are configured
Any other method on /groups is a 405.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request, Response
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from community_map.config import Settings, get_settings
from community_map.models import ErrorResponse, GroupsResponse, HealthResponse
from community_map.upstream import PlanningCenterClient

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
}


# ── Lifespan ──────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: report credential presence (never the values)."""
    pc = get_settings().planning_center
    logger.info("Starting groups proxy...")
    if not pc.has_credentials:
        logger.error("Planning Center credentials missing (CLIENT_ID: %s, SECRET: %s); "
                     "/groups will return 500", bool(pc.client_id), bool(pc.secret))
    yield
    logger.info("Groups proxy shut down.")


# ── App ───────────────────────────────────────────────────────────────

app = FastAPI(
    title="Community Map Groups Proxy",
    description="Planning Center groups for the DMV community map",
    version="1.0.0",
    lifespan=lifespan,
)

# ── Dependencies ──────────────────────────────────────────────────────

def get_upstream_client() -> PlanningCenterClient:
    return PlanningCenterClient()


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ── Error handling ────────────────────────────────────────────────────

@app.exception_handler(StarletteHTTPException)
async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException):
    """405s get the proxy's own error body; everything else keeps FastAPI's default."""
    if exc.status_code == 405:
        return JSONResponse(
            status_code=405,
            content=ErrorResponse(error="Method not allowed").model_dump(exclude_none=True),
            headers={**(exc.headers or {}), **CORS_HEADERS},
        )
    return await http_exception_handler(request, exc)


# ══════════════════════════════════════════════════════════════════════
# ENDPOINTS
# ══════════════════════════════════════════════════════════════════════

@app.api_route("/groups", methods=["GET", "OPTIONS"])
async def list_groups(request: Request, client: PlanningCenterClient = Depends(get_upstream_client)):
    """
    Eligible Planning Center groups.
    OPTIONS is the CORS pre-flight and always answers 200 with an empty body.
    Failures of any kind (missing credentials, upstream errors) become a 500
    with `{error, details}` so the map can fall back cleanly.
    """
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=CORS_HEADERS)

    try:
        groups = await client.fetch_groups()
    except Exception as e:
        logger.error("Planning Center API error: %s", e, exc_info=True)
        body = ErrorResponse(error="Failed to fetch data from Planning Center", details=str(e))
        return JSONResponse(status_code=500, content=body.model_dump(), headers=CORS_HEADERS)

    payload = GroupsResponse(groups=groups, last_updated=_utc_timestamp())
    return JSONResponse(
        status_code=200,
        content=payload.model_dump(by_alias=True, exclude_none=True),
        headers=CORS_HEADERS,
    )


@app.get("/health", response_model=HealthResponse)
async def health_check(response: Response, settings: Settings = Depends(get_settings)):
    response.headers.update(CORS_HEADERS)
    configured = settings.planning_center.has_credentials
    return HealthResponse(
        status="ok" if configured else "degraded",
        credentials_configured=configured,
    )
