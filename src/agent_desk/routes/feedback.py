"""Feedback routes — list threads, open threads, reply, resolve and reopen."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request, status

from agent_desk.models.base import CamelModel
from agent_desk.models.feedback import CommentAuthor, ThreadStatus
from agent_desk.routes.deps import DeliverableDep
from agent_desk.services import feedback as feedback_svc
from agent_desk.storage.repositories import FeedbackRepository, VersionRepository

router = APIRouter(prefix="/api/deliverables/{deliverable_id}/feedback", tags=["feedback"])


class CreateThreadRequest(CamelModel):
    start_line: int | None = None
    end_line: int | None = None
    content: str
    author: CommentAuthor = CommentAuthor.USER


class AddCommentRequest(CamelModel):
    content: str
    author: CommentAuthor = CommentAuthor.USER


class ThreadStatusRequest(CamelModel):
    status: ThreadStatus


def _thread_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Thread not found")


@router.get("")
def list_threads(request: Request, deliverable: DeliverableDep) -> dict:
    """All threads in creation order, each flagged if its anchor is outdated."""
    sidecars = request.app.state.sidecars
    repo = FeedbackRepository(sidecars)
    history = VersionRepository(sidecars).load(deliverable.file_path)
    threads = feedback_svc.list_threads(deliverable.file_path, repo, history)
    return {
        "threads": [t.to_json_dict() for t in threads],
        "openCount": feedback_svc.count_open(deliverable.file_path, repo),
    }


@router.post("", status_code=status.HTTP_201_CREATED)
def create_thread(
    request: Request, deliverable: DeliverableDep, body: CreateThreadRequest
) -> dict:
    """Open a general or line-anchored thread."""
    sidecars = request.app.state.sidecars
    history = VersionRepository(sidecars).load(deliverable.file_path)
    thread = feedback_svc.create_thread(
        deliverable.file_path,
        deliverable.id,
        deliverable.agent_id,
        body.start_line,
        body.end_line,
        body.content,
        FeedbackRepository(sidecars),
        author=body.author,
        version=history.current_version or None,
    )
    return thread.to_json_dict()


@router.post("/{thread_id}/comments", status_code=status.HTTP_201_CREATED)
def add_comment(
    request: Request, deliverable: DeliverableDep, thread_id: str, body: AddCommentRequest
) -> dict:
    """Reply on an existing thread."""
    comment = feedback_svc.add_comment(
        deliverable.file_path,
        thread_id,
        body.content,
        body.author,
        FeedbackRepository(request.app.state.sidecars),
    )
    if comment is None:
        raise _thread_not_found()
    return comment.to_json_dict()


@router.patch("/{thread_id}")
def set_thread_status(
    request: Request, deliverable: DeliverableDep, thread_id: str, body: ThreadStatusRequest
) -> dict:
    """Resolve or reopen a thread."""
    thread = feedback_svc.set_thread_status(
        deliverable.file_path,
        thread_id,
        body.status,
        FeedbackRepository(request.app.state.sidecars),
    )
    if thread is None:
        raise _thread_not_found()
    return thread.to_json_dict()
