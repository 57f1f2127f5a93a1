"""Data models for deliverables and their JSON sidecar records."""

from agent_desk.models.deliverable import Deliverable
from agent_desk.models.diff import DiffHunk, DiffLine, DiffLineType, DiffResult, DiffStats
from agent_desk.models.feedback import (
    CommentAuthor,
    FeedbackComment,
    FeedbackData,
    FeedbackThread,
    ThreadStatus,
)
from agent_desk.models.status import DeliverableStatus, StatusLog, StatusLogEntry
from agent_desk.models.version import VersionEntry, VersionHistory, VersionMeta

__all__ = [
    "CommentAuthor",
    "Deliverable",
    "DeliverableStatus",
    "DiffHunk",
    "DiffLine",
    "DiffLineType",
    "DiffResult",
    "DiffStats",
    "FeedbackComment",
    "FeedbackData",
    "FeedbackThread",
    "StatusLog",
    "StatusLogEntry",
    "ThreadStatus",
    "VersionEntry",
    "VersionHistory",
    "VersionMeta",
]
