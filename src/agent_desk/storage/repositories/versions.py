"""Repository for ``<name>-versions.json``."""

from __future__ import annotations

from typing import Any

from agent_desk.models.version import VersionHistory
from agent_desk.storage.repositories.base import BaseRepository


class VersionRepository(BaseRepository[VersionHistory]):
    suffix = "versions"
    model_class = VersionHistory

    @property
    def max_versions(self) -> int:
        """Retention cap; 0 disables eviction."""
        return self._store.config.max_versions

    def _dump(self, model: VersionHistory) -> dict[str, Any]:
        return model.to_json_dict(exclude={"first_available_version"})
