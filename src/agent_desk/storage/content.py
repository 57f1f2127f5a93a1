"""Content store — the markdown body of a deliverable and its status marker."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

import frontmatter
import yaml

from agent_desk.models.status import DeliverableStatus
from agent_desk.storage.sidecars import atomic_write_text

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

_BOLD_STATUS = re.compile(r"\*\*Status:\*\*[ \t]*(.+)", re.IGNORECASE)
_STATUS_LINE = re.compile(r"^status:[ \t]*(.+)$", re.IGNORECASE | re.MULTILINE)
_FIRST_HEADING = re.compile(r"^#.+$", re.MULTILINE)
_FRONT_MATTER = re.compile(r"\A---[ \t]*\r?\n(.*?)^---[ \t]*$", re.DOTALL | re.MULTILINE)
_FRONT_MATTER_STATUS = re.compile(r"^status:[^\r\n]*", re.MULTILINE)
# Most advanced status wins when several bracket markers are present.
_MARKER_PRIORITY = (
    DeliverableStatus.ARCHIVED,
    DeliverableStatus.PUBLISHED,
    DeliverableStatus.APPROVED,
    DeliverableStatus.REQUESTED_CHANGES,
    DeliverableStatus.NEEDS_REVIEW,
)


def _coerce(value: str) -> DeliverableStatus | None:
    cleaned = value.strip().strip("\"'").strip().lower()
    try:
        return DeliverableStatus(cleaned)
    except ValueError:
        return None


def _load_post(text: str) -> frontmatter.Post | None:
    if not frontmatter.checks(text):
        return None
    try:
        return frontmatter.loads(text)
    except yaml.YAMLError:
        logger.warning("Front matter is not valid YAML — falling back to inline markers")
        return None


def read_status(text: str) -> DeliverableStatus:
    """Infer the editorial status recorded in a document's text."""
    post = _load_post(text)
    if post is not None and post.get("status"):
        status = _coerce(str(post["status"]))
        if status is not None:
            return status

    for pattern in (_BOLD_STATUS, _STATUS_LINE):
        match = pattern.search(text)
        if match:
            status = _coerce(match.group(1))
            if status is not None:
                return status

    lower = text.lower()
    for status in _MARKER_PRIORITY:
        if f"[{status.value}]" in lower:
            return status
    return DeliverableStatus.DRAFT


def _with_front_matter_status(text: str, block: re.Match[str], status: DeliverableStatus) -> str:
    # Only the status line changes; other keys, quoting and line positions stay put.
    start, end = block.span(1)
    header = text[start:end]
    line = f"status: {status.value}"
    if _FRONT_MATTER_STATUS.search(header):
        header = _FRONT_MATTER_STATUS.sub(line, header, count=1)
    else:
        header = f"{header}{line}\n"
    return text[:start] + header + text[end:]


def with_status(text: str, status: DeliverableStatus) -> str:
    """Return ``text`` with its status marker set to ``status``."""
    block = _FRONT_MATTER.match(text)
    if block is not None and _load_post(text) is not None:
        return _with_front_matter_status(text, block, status)

    if _BOLD_STATUS.search(text):
        return _BOLD_STATUS.sub(f"**Status:** {status.value}", text, count=1)
    if _STATUS_LINE.search(text):
        return _STATUS_LINE.sub(f"status: {status.value}", text, count=1)

    heading = _FIRST_HEADING.search(text)
    if heading:
        idx = heading.end()
        return f"{text[:idx]}\n\n**Status:** {status.value}{text[idx:]}"
    return f"**Status:** {status.value}\n\n{text}"


class ContentStore:
    """Reads and writes deliverable markdown files."""

    def read(self, path: Path) -> str | None:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def write(self, path: Path, text: str) -> None:
        atomic_write_text(path, text)

    def exists(self, path: Path) -> bool:
        return path.is_file()

    def delete(self, path: Path) -> bool:
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True

    def read_status(self, path: Path) -> DeliverableStatus:
        text = self.read(path)
        return read_status(text) if text is not None else DeliverableStatus.DRAFT

    def set_status(self, path: Path, status: DeliverableStatus) -> bool:
        """Rewrite the status marker in place. Returns False when the file is missing."""
        text = self.read(path)
        if text is None:
            return False
        self.write(path, with_status(text, status))
        logger.debug("Status marker written — path=%s status=%s", path, status)
        return True
