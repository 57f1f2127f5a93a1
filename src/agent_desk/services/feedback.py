"""Feedback threads — create, reply, resolve/reopen, and outdated detection."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from agent_desk.exceptions import InvalidThreadError
from agent_desk.models.feedback import (
    CommentAuthor,
    FeedbackComment,
    FeedbackThread,
    ThreadStatus,
)
from agent_desk.services.diff import split_lines, touches_range

if TYPE_CHECKING:
    from pathlib import Path

    from agent_desk.models.version import VersionHistory
    from agent_desk.storage.repositories.feedback import FeedbackRepository

logger = logging.getLogger(__name__)

SUMMARY_LENGTH = 150


def _validate_anchor(start_line: int | None, end_line: int | None) -> None:
    if (start_line is None) != (end_line is None):
        raise InvalidThreadError("startLine and endLine must both be set or both be null")
    if start_line is None or end_line is None:
        return
    if start_line < 1:
        raise InvalidThreadError("startLine must be 1 or greater")
    if end_line < start_line:
        raise InvalidThreadError("endLine must not be before startLine")


def _validate_content(content: str) -> None:
    if not content or not content.strip():
        raise InvalidThreadError("content is required")


def create_thread(
    document: Path,
    deliverable_id: str,
    agent_id: str,
    start_line: int | None,
    end_line: int | None,
    content: str,
    repo: FeedbackRepository,
    *,
    author: CommentAuthor = CommentAuthor.USER,
    version: int | None = None,
) -> FeedbackThread:
    """Open a thread with its first comment. ``version`` is the snapshot the anchor refers to."""
    _validate_anchor(start_line, end_line)
    _validate_content(content)

    thread = FeedbackThread(
        deliverable_id=deliverable_id,
        agent_id=agent_id,
        start_line=start_line,
        end_line=end_line,
        version=version,
    )
    thread.comments.append(
        FeedbackComment(thread_id=thread.id, author=author, content=content)
    )
    with repo.transaction(document) as data:
        data.threads.append(thread)

    logger.info(
        "Feedback thread created — path=%s thread=%s lines=%s-%s author=%s",
        document,
        thread.id,
        start_line,
        end_line,
        author,
    )
    return thread


def add_comment(
    document: Path,
    thread_id: str,
    content: str,
    author: CommentAuthor,
    repo: FeedbackRepository,
) -> FeedbackComment | None:
    """Append a reply. Returns None if the thread does not exist."""
    _validate_content(content)
    with repo.transaction(document) as data:
        thread = next((t for t in data.threads if t.id == thread_id), None)
        if thread is None:
            return None
        comment = FeedbackComment(thread_id=thread_id, author=author, content=content)
        thread.comments.append(comment)
    logger.info("Comment added — thread=%s author=%s", thread_id, author)
    return comment


def set_thread_status(
    document: Path,
    thread_id: str,
    status: ThreadStatus,
    repo: FeedbackRepository,
) -> FeedbackThread | None:
    """Resolve or reopen a thread; setting the current status again is a no-op."""
    with repo.transaction(document) as data:
        thread = next((t for t in data.threads if t.id == thread_id), None)
        if thread is None:
            return None
        previous = thread.status
        thread.status = status
    if previous != status:
        logger.info("Thread status changed — thread=%s %s -> %s", thread_id, previous, status)
    return thread


def list_threads(
    document: Path,
    repo: FeedbackRepository,
    history: VersionHistory | None = None,
) -> list[FeedbackThread]:
    """All threads in creation order, annotated with ``outdated`` when a history is given."""
    threads = repo.load(document).threads
    if history is not None:
        for thread in threads:
            thread.outdated = is_outdated(thread, history)
    return threads


def count_open(document: Path, repo: FeedbackRepository) -> int:
    return sum(1 for t in repo.load(document).threads if t.status == ThreadStatus.OPEN)


def inline_threads(threads: list[FeedbackThread]) -> list[FeedbackThread]:
    return [t for t in threads if t.is_inline]


def general_threads(threads: list[FeedbackThread]) -> list[FeedbackThread]:
    return [t for t in threads if not t.is_inline]


def summarize(thread: FeedbackThread) -> str:
    first = thread.comments[0].content if thread.comments else "No content"
    if len(first) > SUMMARY_LENGTH:
        return first[:SUMMARY_LENGTH] + "..."
    return first


def open_thread_summaries(document: Path, repo: FeedbackRepository) -> list[str]:
    return [summarize(t) for t in repo.load(document).threads if t.status == ThreadStatus.OPEN]


def is_outdated(thread: FeedbackThread, history: VersionHistory) -> bool:
    """Whether the text under an inline thread's anchor changed since the thread was opened."""
    if not thread.is_inline or thread.start_line is None or thread.end_line is None:
        return False
    latest = history.latest()
    if latest is None:
        return False

    if thread.version is None:
        return thread.end_line > len(split_lines(latest.content))
    if thread.version >= latest.version:
        return False

    anchored = history.find(thread.version)
    if anchored is None:
        # evicted snapshot, cannot verify the anchor
        return True
    return touches_range(anchored.content, latest.content, thread.start_line, thread.end_line)
