"""Derived diff records — computed on demand, never persisted."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import Field

from agent_desk.models.base import CamelModel


class DiffLineType(StrEnum):
    ADDED = "added"
    REMOVED = "removed"
    CONTEXT = "context"


class DiffLine(CamelModel):
    kind: DiffLineType = Field(alias="type")
    line_number: int
    content: str
    old_line_number: int | None = None
    new_line_number: int | None = None


class DiffHunk(CamelModel):
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: list[DiffLine] = Field(default_factory=list)


class DiffStats(CamelModel):
    additions: int = 0
    deletions: int = 0
    changes: int = 0


class DiffResult(CamelModel):
    from_version: int
    to_version: int
    from_timestamp: datetime | None = None
    to_timestamp: datetime | None = None
    hunks: list[DiffHunk] = Field(default_factory=list)
    stats: DiffStats = Field(default_factory=DiffStats)
