"""Base repository — one sidecar kind, one pydantic model."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar

from pydantic import ValidationError

from agent_desk.models.base import CamelModel
from agent_desk.storage.sidecars import sidecar_path

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from agent_desk.storage.sidecars import SidecarStore

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=CamelModel)


class BaseRepository(Generic[T]):
    """Load and save one sidecar model per deliverable.

    Absent and corrupted sidecars both load as an empty model.
    """

    suffix: ClassVar[str]
    model_class: ClassVar[type[CamelModel]]

    def __init__(self, store: SidecarStore) -> None:
        self._store = store

    def path_for(self, document: Path) -> Path:
        return sidecar_path(document, self.suffix)

    def exists(self, document: Path) -> bool:
        return self.path_for(document).exists()

    def load(self, document: Path) -> T:
        path = self.path_for(document)
        data = self._store.read_json(path)
        if data is None:
            return self._empty()
        try:
            return self.model_class.model_validate(data)  # type: ignore[return-value]
        except ValidationError:
            logger.warning(
                "Sidecar does not match schema — treating as empty path=%s model=%s",
                path,
                self.model_class.__name__,
            )
            return self._empty()

    def save(self, document: Path, model: T) -> None:
        self._store.write_json(self.path_for(document), self._dump(model))

    def delete(self, document: Path) -> bool:
        return self._store.delete(self.path_for(document))

    @contextmanager
    def transaction(self, document: Path) -> Iterator[T]:
        """Load under the path lock, yield for mutation, save on clean exit if changed."""
        with self._store.lock(self.path_for(document)):
            model = self.load(document)
            before = self._dump(model)
            yield model
            if self._dump(model) != before:
                self.save(document, model)

    def _empty(self) -> T:
        return self.model_class()  # type: ignore[return-value]

    def _dump(self, model: T) -> dict[str, Any]:
        return model.to_json_dict()
