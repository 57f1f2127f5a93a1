"""Shared base for records exchanged as JSON — camelCase outside, snake_case in Python."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    return datetime.now(UTC)


class CamelModel(BaseModel):
    """Base model for sidecar records and API payloads."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self, **kwargs: Any) -> dict[str, Any]:
        """Dump with camelCase keys in a JSON-compatible form."""
        return self.model_dump(mode="json", by_alias=True, **kwargs)
