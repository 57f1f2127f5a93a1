"""Version routes — list, snapshot, initialize, fetch and diff versions."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, Request, status

from agent_desk.models.base import CamelModel
from agent_desk.models.deliverable import Deliverable
from agent_desk.routes.deps import DeliverableDep
from agent_desk.services import diff as diff_svc
from agent_desk.services import versions as versions_svc
from agent_desk.storage.repositories import VersionRepository

router = APIRouter(prefix="/api/deliverables/{deliverable_id}", tags=["versions"])


class AddVersionRequest(CamelModel):
    content: str
    updated_by: str
    comment: str | None = None
    feedback_addressed: list[str] | None = None


class InitializeVersionsRequest(CamelModel):
    content: str
    agent_name: str


def _missing_version_detail(repo: VersionRepository, deliverable: Deliverable, version: int) -> str:
    history = repo.load(deliverable.file_path)
    if history.is_evicted(version):
        return (
            f"Version {version} was evicted by retention; "
            f"oldest available is {history.first_available_version}"
        )
    return f"Version {version} not found"


@router.get("/versions")
def list_versions(request: Request, deliverable: DeliverableDep) -> dict:
    """List version metadata without content."""
    repo = VersionRepository(request.app.state.sidecars)
    history = versions_svc.read_history(deliverable.file_path, repo)
    return {
        "versions": [entry.meta().to_json_dict() for entry in history.versions],
        "currentVersion": history.current_version,
        "firstAvailableVersion": history.first_available_version,
    }


@router.post("/versions", status_code=status.HTTP_201_CREATED)
def add_version(
    request: Request, deliverable: DeliverableDep, body: AddVersionRequest
) -> dict:
    """Append a new snapshot."""
    repo = VersionRepository(request.app.state.sidecars)
    entry = versions_svc.add_version(
        deliverable.file_path,
        body.content,
        body.updated_by,
        repo,
        comment=body.comment,
        feedback_addressed=body.feedback_addressed,
    )
    return entry.to_json_dict()


@router.put("/versions")
def initialize_versions(
    request: Request, deliverable: DeliverableDep, body: InitializeVersionsRequest
) -> dict:
    """Create v1 if the deliverable has no history yet."""
    repo = VersionRepository(request.app.state.sidecars)
    history = versions_svc.initialize_versions(
        deliverable.file_path, body.content, body.agent_name, repo
    )
    return {
        "currentVersion": history.current_version,
        "versionCount": len(history.versions),
    }


@router.get("/versions/{version}")
def get_version(request: Request, deliverable: DeliverableDep, version: int) -> dict:
    """Fetch one full snapshot."""
    repo = VersionRepository(request.app.state.sidecars)
    entry = versions_svc.get_version(deliverable.file_path, version, repo)
    if entry is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=_missing_version_detail(repo, deliverable, version),
        )
    return entry.to_json_dict()


@router.get("/diff")
def get_diff(
    request: Request,
    deliverable: DeliverableDep,
    from_version: Annotated[int, Query(alias="from")],
    to_version: Annotated[int, Query(alias="to")],
) -> dict:
    """Line diff between two stored versions."""
    repo = VersionRepository(request.app.state.sidecars)
    result = diff_svc.generate_diff(deliverable.file_path, from_version, to_version, repo)
    if result is None:
        missing = to_version if repo.load(deliverable.file_path).find(from_version) else from_version
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=_missing_version_detail(repo, deliverable, missing),
        )
    return result.to_json_dict()
