"""Repository for ``<name>-status-log.json``."""

from __future__ import annotations

from typing import TYPE_CHECKING

from agent_desk.models.status import StatusLog, StatusLogEntry
from agent_desk.storage.repositories.base import BaseRepository

if TYPE_CHECKING:
    from pathlib import Path


class StatusLogRepository(BaseRepository[StatusLog]):
    suffix = "status-log"
    model_class = StatusLog

    def append(self, document: Path, entry: StatusLogEntry) -> StatusLog:
        """Append one transition to the log and return the updated log."""
        with self.transaction(document) as log:
            log.logs.append(entry)
        return log
