"""Feedback thread records — line-anchored or general review conversations."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import StrEnum

from pydantic import Field

from agent_desk.models.base import CamelModel, utcnow


class ThreadStatus(StrEnum):
    OPEN = "open"
    RESOLVED = "resolved"


class CommentAuthor(StrEnum):
    USER = "user"
    AGENT = "agent"


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


class FeedbackComment(CamelModel):
    id: str = Field(default_factory=lambda: _new_id("comment"))
    thread_id: str
    author: CommentAuthor
    content: str
    created_at: datetime = Field(default_factory=utcnow)


class FeedbackThread(CamelModel):
    """A review thread; inline when both lines are set, general when both are null."""

    id: str = Field(default_factory=lambda: _new_id("thread"))
    deliverable_id: str
    agent_id: str
    start_line: int | None = None
    end_line: int | None = None
    status: ThreadStatus = ThreadStatus.OPEN
    created_at: datetime = Field(default_factory=utcnow)
    comments: list[FeedbackComment] = Field(default_factory=list)
    version: int | None = None
    outdated: bool = False

    @property
    def is_inline(self) -> bool:
        return self.start_line is not None and self.end_line is not None


class FeedbackData(CamelModel):
    """Contents of ``<name>-feedback.json``."""

    threads: list[FeedbackThread] = Field(default_factory=list)
