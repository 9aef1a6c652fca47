"""
Devbook API — Health Check Route
=================================

What:  GET /health for load balancer and container probes. Public.
How:   `SELECT 1` on the application's engine, bounded by the same
       deadline as repository calls.

Status:
    - healthy:   database answered (HTTP 200)
    - unhealthy: database down or too slow (HTTP 503, stop routing traffic)
"""

import asyncio
import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from devbook import __version__
from devbook.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


async def _ping(engine: AsyncEngine) -> None:
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    responses={503: {"model": HealthResponse, "description": "Database unreachable"}},
)
async def health_check(request: Request):
    timeout = request.app.state.settings.persistence_timeout_seconds
    try:
        await asyncio.wait_for(_ping(request.app.state.engine), timeout=timeout)
        healthy = True
    except Exception as e:
        healthy = False
        logger.warning("Health check: database unreachable: %s", str(e) or type(e).__name__)

    body = HealthResponse(
        status="healthy" if healthy else "unhealthy",
        version=__version__,
        database="connected" if healthy else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    return JSONResponse(status_code=200 if healthy else 503, content=body.model_dump())
