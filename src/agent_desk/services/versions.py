"""Version history operations — append-only snapshots with bounded retention."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from agent_desk.exceptions import InvalidVersionError
from agent_desk.models.version import VersionEntry, VersionHistory, VersionMeta

if TYPE_CHECKING:
    from pathlib import Path

    from agent_desk.storage.content import ContentStore
    from agent_desk.storage.repositories.versions import VersionRepository

logger = logging.getLogger(__name__)

INITIAL_COMMENT = "Initial version"
REVISION_COMMENT = "Revised based on feedback"


def _validate(content: str, author: str) -> None:
    if not content:
        raise InvalidVersionError("content is required")
    if not author or not author.strip():
        raise InvalidVersionError("updatedBy is required")


def read_history(document: Path, repo: VersionRepository) -> VersionHistory:
    return repo.load(document)


def has_versions(document: Path, repo: VersionRepository) -> bool:
    return bool(repo.load(document).versions)


def get_version(document: Path, version: int, repo: VersionRepository) -> VersionEntry | None:
    return repo.load(document).find(version)


def list_versions(document: Path, repo: VersionRepository) -> list[VersionMeta]:
    """Return version metadata (no content) in version order."""
    return [entry.meta() for entry in repo.load(document).versions]


def _append(
    history: VersionHistory,
    content: str,
    author: str,
    comment: str | None,
    feedback_addressed: list[str] | None,
    max_versions: int,
) -> VersionEntry:
    entry = VersionEntry(
        version=history.current_version + 1,
        content=content,
        updated_by=author,
        comment=comment,
        feedback_addressed=feedback_addressed,
    )
    history.versions.append(entry)
    history.current_version = entry.version
    if max_versions > 0 and len(history.versions) > max_versions:
        dropped = len(history.versions) - max_versions
        del history.versions[:dropped]
        logger.info(
            "Version retention applied — dropped=%d first_available=%s",
            dropped,
            history.first_available_version,
        )
    return entry


def add_version(
    document: Path,
    content: str,
    author: str,
    repo: VersionRepository,
    *,
    comment: str | None = None,
    feedback_addressed: list[str] | None = None,
) -> VersionEntry:
    """Append a new snapshot numbered ``currentVersion + 1``. Identical content is not deduplicated."""
    _validate(content, author)
    with repo.transaction(document) as history:
        entry = _append(
            history,
            content,
            author,
            comment,
            feedback_addressed,
            repo.max_versions,
        )
    logger.info(
        "Version added — path=%s version=%d by=%s", document, entry.version, author
    )
    return entry


def initialize_versions(
    document: Path, content: str, author: str, repo: VersionRepository
) -> VersionHistory:
    """Create v1 when the history is empty; otherwise leave it untouched."""
    _validate(content, author)
    with repo.transaction(document) as history:
        if not history.versions:
            _append(history, content, author, INITIAL_COMMENT, None, repo.max_versions)
            logger.info("Version history initialized — path=%s by=%s", document, author)
    return history


def snapshot_for_review(
    document: Path,
    author: str,
    repo: VersionRepository,
    content_store: ContentStore,
    *,
    note: str | None = None,
    max_bytes: int,
) -> VersionEntry | None:
    """Snapshot the document's current text when it is submitted for review.

    Missing files and content above ``max_bytes`` are skipped and return None.
    """
    content = content_store.read(document)
    if content is None:
        logger.info("Snapshot skipped, document missing — path=%s", document)
        return None
    size = len(content.encode("utf-8"))
    if size > max_bytes:
        logger.info(
            "Snapshot skipped, content too large — path=%s bytes=%d limit=%d",
            document,
            size,
            max_bytes,
        )
        return None

    with repo.transaction(document) as history:
        if history.versions:
            entry = _append(
                history, content, author, note or REVISION_COMMENT, None, repo.max_versions
            )
        else:
            entry = _append(history, content, author, INITIAL_COMMENT, None, repo.max_versions)
    logger.info(
        "Review snapshot taken — path=%s version=%d by=%s", document, entry.version, author
    )
    return entry
