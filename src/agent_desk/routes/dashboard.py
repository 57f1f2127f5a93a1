"""Review page — line-numbered content with threads, versions, status log and an optional diff."""

from __future__ import annotations

from collections import defaultdict
from typing import Annotated

from fastapi import APIRouter, Query, Request
from fastapi.responses import HTMLResponse

from agent_desk.routes.deps import DeliverableDep
from agent_desk.services import diff as diff_svc
from agent_desk.services import feedback as feedback_svc
from agent_desk.storage.repositories import (
    FeedbackRepository,
    StatusLogRepository,
    VersionRepository,
)

router = APIRouter(tags=["dashboard"])


@router.get("/deliverables/{deliverable_id}", response_class=HTMLResponse)
def review_page(
    request: Request,
    deliverable: DeliverableDep,
    from_version: Annotated[int | None, Query(alias="from")] = None,
    to_version: Annotated[int | None, Query(alias="to")] = None,
):
    """Render the review page for one deliverable."""
    state = request.app.state
    path = deliverable.file_path
    versions_repo = VersionRepository(state.sidecars)
    history = versions_repo.load(path)
    feedback_repo = FeedbackRepository(state.sidecars)
    threads = feedback_svc.list_threads(path, feedback_repo, history)

    by_line: dict[int, list] = defaultdict(list)
    for thread in feedback_svc.inline_threads(threads):
        by_line[thread.start_line].append(thread)

    diff = None
    if from_version is not None and to_version is not None:
        diff = diff_svc.generate_diff(path, from_version, to_version, versions_repo)

    content = state.content.read(path) or ""
    return state.templates.TemplateResponse(
        request,
        "review.html",
        {
            "deliverable": deliverable,
            "lines": list(enumerate(diff_svc.split_lines(content), start=1)),
            "threads_by_line": by_line,
            "general_threads": feedback_svc.general_threads(threads),
            "open_count": feedback_svc.count_open(path, feedback_repo),
            "versions": history.versions,
            "current_version": history.current_version,
            "status_log": StatusLogRepository(state.sidecars).load(path).logs,
            "diff": diff,
            "diff_requested": from_version is not None and to_version is not None,
        },
    )
