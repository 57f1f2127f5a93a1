"""Resolved deliverable — a markdown document inside an agent workspace."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel

from agent_desk.models.status import DeliverableStatus


class Deliverable(BaseModel):
    id: str
    agent_id: str
    title: str
    relative_path: str
    file_path: Path
    status: DeliverableStatus = DeliverableStatus.DRAFT
