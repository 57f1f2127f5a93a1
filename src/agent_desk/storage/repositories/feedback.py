"""Repository for ``<name>-feedback.json``."""

from __future__ import annotations

from typing import Any

from agent_desk.models.feedback import FeedbackData
from agent_desk.storage.repositories.base import BaseRepository


class FeedbackRepository(BaseRepository[FeedbackData]):
    suffix = "feedback"
    model_class = FeedbackData

    def _dump(self, model: FeedbackData) -> dict[str, Any]:
        # outdated is derived on read
        return model.to_json_dict(exclude={"threads": {"__all__": {"outdated"}}})
