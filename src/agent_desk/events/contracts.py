"""Typed contracts for outbound deliverable events."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class EventEnvelope(BaseModel):
    """Canonical event envelope used on Service Bus."""

    event: str
    data: dict[str, Any] | str


class RevisionRequested(BaseModel):
    """A reviewer asked an agent to revise a deliverable."""

    deliverable_id: str
    agent_id: str
    path: str
    requested_by: str
    note: str | None = None
    threads: list[str] = Field(default_factory=list)
