"""Repositories, one per sidecar file kind."""

from agent_desk.storage.repositories.feedback import FeedbackRepository
from agent_desk.storage.repositories.status_log import StatusLogRepository
from agent_desk.storage.repositories.versions import VersionRepository

__all__ = [
    "FeedbackRepository",
    "StatusLogRepository",
    "VersionRepository",
]
