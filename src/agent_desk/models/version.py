"""Version history records — immutable full-content snapshots of a deliverable."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, computed_field

from agent_desk.models.base import CamelModel, utcnow


class VersionMeta(CamelModel):
    """Version metadata without the content body, for lightweight listings."""

    version: int
    timestamp: datetime
    updated_by: str
    comment: str | None = None
    feedback_addressed: list[str] | None = None


class VersionEntry(VersionMeta):
    """A full snapshot of the document at one version."""

    timestamp: datetime = Field(default_factory=utcnow)
    content: str

    def meta(self) -> VersionMeta:
        return VersionMeta.model_validate(self.model_dump(exclude={"content"}))


class VersionHistory(CamelModel):
    """Append-only version log for one deliverable (``<name>-versions.json``)."""

    current_version: int = 0
    versions: list[VersionEntry] = Field(default_factory=list)

    @computed_field(alias="firstAvailableVersion")  # type: ignore[prop-decorator]
    @property
    def first_available_version(self) -> int | None:
        return self.versions[0].version if self.versions else None

    def find(self, version: int) -> VersionEntry | None:
        return next((v for v in self.versions if v.version == version), None)

    def latest(self) -> VersionEntry | None:
        return self.versions[-1] if self.versions else None

    def is_evicted(self, version: int) -> bool:
        """True when ``version`` was issued but has been dropped by retention."""
        first = self.first_available_version
        if first is None:
            return 1 <= version <= self.current_version
        return 1 <= version < first
