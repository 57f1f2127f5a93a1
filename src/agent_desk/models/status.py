"""Editorial workflow statuses and the append-only status log."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import Field

from agent_desk.models.base import CamelModel, utcnow


class DeliverableStatus(StrEnum):
    DRAFT = "draft"
    NEEDS_REVIEW = "needs review"
    REQUESTED_CHANGES = "requested changes"
    APPROVED = "approved"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class StatusLogEntry(CamelModel):
    timestamp: datetime = Field(default_factory=utcnow)
    from_status: str = Field(alias="from")
    to_status: DeliverableStatus = Field(alias="to")
    by: str
    note: str = ""


class StatusLog(CamelModel):
    """Contents of ``<name>-status-log.json``."""

    logs: list[StatusLogEntry] = Field(default_factory=list)
