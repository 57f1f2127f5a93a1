"""Health checks for the business root and the revision dispatch target."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any

import httpx

if TYPE_CHECKING:
    from agent_desk.config import Settings

logger = logging.getLogger(__name__)


def check_business_root(settings: Settings) -> dict[str, Any]:
    root = settings.storage.business_root
    if not root.is_dir():
        return {"name": "business_root", "status": "unhealthy", "detail": f"{root} does not exist"}
    if not os.access(root, os.R_OK | os.W_OK):
        return {"name": "business_root", "status": "unhealthy", "detail": f"{root} is not writable"}
    return {"name": "business_root", "status": "healthy", "detail": str(root)}


async def check_gateway(settings: Settings, client: httpx.AsyncClient) -> dict[str, Any]:
    if settings.servicebus.connection_string:
        return {"name": "dispatch", "status": "healthy", "detail": "Service Bus events"}
    if not settings.gateway.token:
        return {
            "name": "dispatch",
            "status": "disabled",
            "detail": "AGENT_GATEWAY_TOKEN is not set — revision requests are not dispatched",
        }
    try:
        await client.get(settings.gateway.url.rstrip("/") + "/")
    except httpx.HTTPError as exc:
        logger.warning("Agent gateway unreachable — url=%s error=%s", settings.gateway.url, exc)
        return {"name": "dispatch", "status": "degraded", "detail": f"gateway unreachable: {exc}"}
    return {"name": "dispatch", "status": "healthy", "detail": settings.gateway.url}


async def check_all(
    settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None
) -> list[dict[str, Any]]:
    """Run every probe. Dispatch problems degrade but never fail the service."""
    async with httpx.AsyncClient(timeout=3, transport=transport) as client:
        return [check_business_root(settings), await check_gateway(settings, client)]
