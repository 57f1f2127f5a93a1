"""Shared route dependencies — deliverable lookup and per-request service wiring."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from agent_desk.models.deliverable import Deliverable
from agent_desk.services.workflow import WorkflowController
from agent_desk.storage.repositories import (
    FeedbackRepository,
    StatusLogRepository,
    VersionRepository,
)


def resolve_deliverable(request: Request, deliverable_id: str) -> Deliverable:
    """Return the deliverable for the path id or raise HTTP 404."""
    deliverable = request.app.state.resolver.resolve(deliverable_id)
    if deliverable is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Deliverable not found",
        )
    return deliverable


DeliverableDep = Annotated[Deliverable, Depends(resolve_deliverable)]


def build_workflow(request: Request) -> WorkflowController:
    state = request.app.state
    return WorkflowController(
        state.settings,
        state.content,
        VersionRepository(state.sidecars),
        FeedbackRepository(state.sidecars),
        StatusLogRepository(state.sidecars),
        state.dispatcher,
    )
