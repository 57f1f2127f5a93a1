"""App fixture — the real app on a temporary business root with a mocked dispatcher."""

from __future__ import annotations

from collections.abc import Iterator
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from agent_desk.app import create_app
from agent_desk.dispatch import DispatchResult
from agent_desk.storage.deliverables import encode_id


@pytest.fixture
def client(settings) -> Iterator[TestClient]:
    with (
        patch("agent_desk.app.load_settings", return_value=settings),
        patch("agent_desk.app.configure_logging"),
    ):
        app = create_app()
        with TestClient(app) as test_client:
            dispatcher = AsyncMock()
            dispatcher.dispatch.return_value = DispatchResult(success=True, message="spawned")
            app.state.dispatcher = dispatcher
            yield test_client


@pytest.fixture
def deliverable_id(document) -> str:
    return encode_id("content/launch-plan.md")


@pytest.fixture
def base_url(deliverable_id) -> str:
    return f"/api/deliverables/{deliverable_id}"
