"""Azure Service Bus transport for outbound deliverable events."""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import TYPE_CHECKING, Any

from azure.servicebus import ServiceBusMessage
from azure.servicebus.aio import ServiceBusClient, ServiceBusSender

from agent_desk.events.contracts import EventEnvelope

if TYPE_CHECKING:
    from agent_desk.config import ServiceBusConfig

logger = logging.getLogger(__name__)


def build_message(event_type: str, data: dict[str, Any] | str) -> ServiceBusMessage:
    """Wrap ``data`` in an envelope; the subject carries the event type for subscription filters."""
    return ServiceBusMessage(
        body=EventEnvelope(event=event_type, data=data).model_dump_json(),
        content_type="application/json",
        subject=event_type,
        message_id=uuid.uuid4().hex,
        application_properties={"event_type": event_type},
    )


class ServiceBusPublisher:
    """Send deliverable events to one topic over a lazily opened sender.

    Publishing never raises; a broker failure is logged and reported as False
    so a status change that triggered the event still stands.
    """

    def __init__(self, config: ServiceBusConfig) -> None:
        self._connection_string = config.connection_string
        self._topic = config.topic_name
        self._client: ServiceBusClient | None = None
        self._sender: ServiceBusSender | None = None
        self._open_lock = asyncio.Lock()
        if not self.enabled:
            logger.warning(
                "AZURE_SERVICEBUS_CONNECTION_STRING is not set — deliverable events are dropped"
            )

    @property
    def enabled(self) -> bool:
        return bool(self._connection_string)

    async def _sender_for_topic(self) -> ServiceBusSender:
        async with self._open_lock:
            if self._sender is None:
                self._client = ServiceBusClient.from_connection_string(self._connection_string)
                self._sender = self._client.get_topic_sender(topic_name=self._topic)
                logger.info("Service Bus sender opened — topic=%s", self._topic)
        return self._sender

    async def publish(self, event_type: str, data: dict[str, Any] | str) -> bool:
        """Send one event. Returns False when disabled or when the broker rejects it."""
        if not self.enabled:
            return False
        message = build_message(event_type, data)
        try:
            sender = await self._sender_for_topic()
            await sender.send_messages(message)
        except Exception:  # noqa: BLE001
            logger.warning(
                "Event not published — event=%s topic=%s", event_type, self._topic, exc_info=True
            )
            return False
        logger.info(
            "Event published — event=%s topic=%s message_id=%s",
            event_type,
            self._topic,
            message.message_id,
        )
        return True

    async def close(self) -> None:
        if self._sender is not None:
            await self._sender.close()
            self._sender = None
        if self._client is not None:
            await self._client.close()
            self._client = None
