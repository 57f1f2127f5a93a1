"""Deliverable ids — base64url-encoded paths relative to the business root."""

from __future__ import annotations

import base64
import binascii
import logging
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from agent_desk.models.deliverable import Deliverable

if TYPE_CHECKING:
    from agent_desk.storage.content import ContentStore

logger = logging.getLogger(__name__)


def encode_id(relative_path: str) -> str:
    return base64.urlsafe_b64encode(relative_path.encode("utf-8")).decode("ascii").rstrip("=")


def decode_id(deliverable_id: str) -> str | None:
    padded = deliverable_id + "=" * (-len(deliverable_id) % 4)
    try:
        return base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8")
    except (binascii.Error, UnicodeError, ValueError):
        return None


def title_from_filename(filename: str) -> str:
    stem = filename.removesuffix(".md").replace("-", " ").replace("_", " ")
    return " ".join(word[:1].upper() + word[1:] for word in stem.split(" "))


class DeliverableResolver:
    """Turn deliverable ids into documents on disk, refusing anything outside the root."""

    def __init__(self, root: Path, workspaces: dict[str, str], content: ContentStore) -> None:
        self._root = root
        self._workspaces = workspaces
        self._content = content

    def id_for(self, path: Path) -> str:
        return encode_id(path.resolve().relative_to(self._root.resolve()).as_posix())

    def resolve(self, deliverable_id: str) -> Deliverable | None:
        relative = decode_id(deliverable_id)
        if not relative:
            return None
        pure = PurePosixPath(relative)
        if pure.is_absolute() or ".." in pure.parts or pure.suffix != ".md":
            return None

        root = self._root.resolve()
        file_path = (root / pure).resolve()
        if not file_path.is_relative_to(root) or not self._content.exists(file_path):
            return None

        return self._build(deliverable_id, pure, file_path)

    def from_path(self, path: Path) -> Deliverable | None:
        """Resolve a document given directly as a filesystem path (CLI use)."""
        try:
            return self.resolve(self.id_for(path))
        except ValueError:
            logger.warning("Path is outside the business root — path=%s root=%s", path, self._root)
            return None

    def _build(self, deliverable_id: str, relative: PurePosixPath, file_path: Path) -> Deliverable:
        workspace = relative.parts[0] if len(relative.parts) > 1 else ""
        return Deliverable(
            id=deliverable_id,
            agent_id=self._workspaces.get(workspace, workspace or "unknown"),
            title=title_from_filename(relative.name),
            relative_path=relative.as_posix(),
            file_path=file_path,
            status=self._content.read_status(file_path),
        )
