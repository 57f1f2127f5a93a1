"""Workflow routes — status changes, status log, delete cascade."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request

from agent_desk.models.base import CamelModel
from agent_desk.routes.deps import DeliverableDep, build_workflow

router = APIRouter(prefix="/api/deliverables/{deliverable_id}", tags=["workflow"])

logger = logging.getLogger(__name__)


class ChangeStatusRequest(CamelModel):
    status: str = ""
    note: str | None = None
    updated_by: str | None = None


@router.post("/status")
async def change_status(
    request: Request, deliverable: DeliverableDep, body: ChangeStatusRequest
) -> dict:
    """Move the deliverable to a new status and run the transition's side effects."""
    workflow = build_workflow(request)
    result = await workflow.change_status(
        deliverable, body.status, by=body.updated_by, note=body.note
    )
    return result.to_json_dict()


@router.get("/status-log")
def status_log(request: Request, deliverable: DeliverableDep) -> dict:
    """Return the transition audit trail."""
    workflow = build_workflow(request)
    return workflow.status_log(deliverable.file_path).to_json_dict()


@router.delete("")
def delete_deliverable(request: Request, deliverable: DeliverableDep) -> dict:
    """Delete the document together with its versions, status log and feedback."""
    workflow = build_workflow(request)
    deleted = workflow.delete_deliverable(deliverable)
    logger.info("Delete requested — deliverable=%s removed=%d", deliverable.id, len(deleted))
    return {"deleted": deleted}
