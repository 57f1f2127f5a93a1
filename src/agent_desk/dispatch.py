"""Revision dispatch — hand requested changes to the agent that owns a deliverable."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import httpx
from pydantic import BaseModel

from agent_desk.events import RevisionRequested, ServiceBusPublisher

if TYPE_CHECKING:
    from agent_desk.config import GatewayConfig, Settings
    from agent_desk.events import EventPublisher

logger = logging.getLogger(__name__)

REVISION_EVENT = "revision-requested"


class DispatchResult(BaseModel):
    success: bool
    message: str


@runtime_checkable
class RevisionDispatcher(Protocol):
    """Anything that can forward a revision request to an agent runtime."""

    async def dispatch(self, request: RevisionRequested) -> DispatchResult: ...


def build_task_prompt(request: RevisionRequested) -> str:
    """Render the instructions an agent receives when changes are requested."""
    parts = [
        f"[AGENT: {request.agent_id}] Changes requested on your deliverable by {request.requested_by}.",
        "",
        f"Deliverable: {request.deliverable_id}",
        f"File: {request.path}",
        f"Open feedback threads: {len(request.threads)}",
    ]
    if request.threads:
        parts += ["", "Feedback summary:"]
        parts += [f"{i}. {summary}" for i, summary in enumerate(request.threads, start=1)]
    parts += [
        "",
        "Revise the file to address every open thread, reply on each thread with "
        "what you changed (use the thread id, not the comment id), then set the "
        "status back to needs review.",
    ]
    return "\n".join(parts)


class GatewayDispatcher:
    """Spawn an agent session through the gateway's ``/hooks/agent`` webhook."""

    def __init__(
        self,
        config: GatewayConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport

    async def dispatch(self, request: RevisionRequested) -> DispatchResult:
        if not self._config.token:
            return DispatchResult(
                success=False,
                message="AGENT_GATEWAY_TOKEN is not set — revision request not sent",
            )

        payload = {
            "message": build_task_prompt(request),
            "agentId": request.agent_id,
            "name": f"Feedback-{request.agent_id}",
            "sessionKey": f"hook:feedback:{request.agent_id}:{request.deliverable_id}",
            "wakeMode": "now",
            "deliver": False,
        }
        if self._config.model:
            payload["model"] = self._config.model

        endpoint = f"{self._config.url.rstrip('/')}/hooks/agent"
        try:
            async with httpx.AsyncClient(
                timeout=self._config.timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    endpoint,
                    json=payload,
                    headers={"Authorization": f"Bearer {self._config.token}"},
                )
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning(
                "Revision dispatch failed — agent=%s deliverable=%s error=%s",
                request.agent_id,
                request.deliverable_id,
                exc,
            )
            return DispatchResult(success=False, message=f"Failed to spawn {request.agent_id}: {exc}")

        logger.info(
            "Revision dispatched — agent=%s deliverable=%s threads=%d",
            request.agent_id,
            request.deliverable_id,
            len(request.threads),
        )
        return DispatchResult(
            success=True,
            message=f"Spawned {request.agent_id} to handle feedback on {request.deliverable_id}",
        )


class EventDispatcher:
    """Publish a ``revision-requested`` event for an external consumer to act on."""

    def __init__(self, publisher: EventPublisher) -> None:
        self._publisher = publisher

    async def dispatch(self, request: RevisionRequested) -> DispatchResult:
        sent = await self._publisher.publish(REVISION_EVENT, request.model_dump(mode="json"))
        if not sent:
            return DispatchResult(success=False, message="Revision event was not published")
        return DispatchResult(
            success=True,
            message=f"Revision requested from {request.agent_id} for {request.deliverable_id}",
        )


class NullDispatcher:
    """Used when no dispatch target is configured."""

    async def dispatch(self, request: RevisionRequested) -> DispatchResult:
        logger.info(
            "Revision dispatch not configured — deliverable=%s", request.deliverable_id
        )
        return DispatchResult(success=False, message="Revision dispatch is not configured")


def create_dispatcher(
    settings: Settings,
) -> tuple[RevisionDispatcher, ServiceBusPublisher | None]:
    """Pick Service Bus, then the agent gateway, then nothing.

    Returns the publisher too so the caller can close it on shutdown.
    """
    if settings.servicebus.connection_string:
        publisher = ServiceBusPublisher(settings.servicebus)
        return EventDispatcher(publisher), publisher
    if settings.gateway.token:
        return GatewayDispatcher(settings.gateway), None
    return NullDispatcher(), None
