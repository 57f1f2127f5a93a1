"""JSON sidecar files — the on-disk store behind every repository."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterator

    from agent_desk.config import StorageConfig

logger = logging.getLogger(__name__)


def sidecar_path(document: Path, suffix: str) -> Path:
    """Return ``<dir>/<name>-<suffix>.json`` for a ``<dir>/<name>.md`` document."""
    name = document.name.removesuffix(".md")
    return document.with_name(f"{name}-{suffix}.json")


def atomic_write_text(path: Path, text: str) -> None:
    """Replace ``path`` with ``text`` in one rename, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class SidecarStore:
    """Reads, writes and locks the JSON sidecars that sit next to each deliverable.

    Locks are per sidecar path and in-process only. With ``locking`` off the
    read-modify-write cycle is unguarded and concurrent writers can lose updates.
    """

    def __init__(self, config: StorageConfig) -> None:
        self._config = config
        self._locks: dict[Path, threading.RLock] = {}
        self._registry_lock = threading.Lock()

    @property
    def config(self) -> StorageConfig:
        return self._config

    def read_json(self, path: Path) -> Any | None:
        """Return parsed JSON, or None when the file is absent or unparseable."""
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError:
            logger.warning("Sidecar unreadable — treating as empty path=%s", path, exc_info=True)
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Sidecar corrupted — treating as empty path=%s", path)
            return None

    def write_json(self, path: Path, data: Any) -> None:
        atomic_write_text(path, json.dumps(data, indent=2, ensure_ascii=False))

    def delete(self, path: Path) -> bool:
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True

    @contextmanager
    def lock(self, path: Path) -> Iterator[None]:
        """Hold the per-path lock for a read-modify-write cycle."""
        if not self._config.locking:
            yield
            return
        with self._registry_lock:
            lock = self._locks.setdefault(path.resolve(), threading.RLock())
        with lock:
            yield
