"""Health route — filesystem and dispatch target probes."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from agent_desk.health import check_all

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request) -> JSONResponse:
    """Report per-dependency health; 503 when any required check fails."""
    checks = await check_all(request.app.state.settings)
    healthy = all(c["status"] != "unhealthy" for c in checks)
    return JSONResponse(
        {"status": "healthy" if healthy else "unhealthy", "checks": checks},
        status_code=200 if healthy else 503,
    )
