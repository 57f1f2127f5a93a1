"""Event contracts and publishing interfaces for outbound workflow events."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from agent_desk.events.contracts import EventEnvelope, RevisionRequested
from agent_desk.events.servicebus import ServiceBusPublisher


@runtime_checkable
class EventPublisher(Protocol):
    """Protocol for publishing workflow events to connected consumers."""

    async def publish(self, event_type: str, data: dict[str, Any] | str) -> bool:
        """Broadcast an event; return whether it was accepted."""
        ...


__all__ = [
    "EventEnvelope",
    "EventPublisher",
    "RevisionRequested",
    "ServiceBusPublisher",
]
