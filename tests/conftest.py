"""Shared fixtures — settings, stores and a deliverable on a temporary business root."""

from __future__ import annotations

from pathlib import Path

import pytest

from agent_desk.config import (
    AppConfig,
    GatewayConfig,
    ServiceBusConfig,
    Settings,
    StorageConfig,
    WorkflowConfig,
)
from agent_desk.storage import ContentStore, DeliverableResolver, SidecarStore
from agent_desk.storage.repositories import (
    FeedbackRepository,
    StatusLogRepository,
    VersionRepository,
)

WORKSPACES = {"content": "scribe", "engineering": "ralph"}

SAMPLE = "# Launch Plan\n\nIntro paragraph.\n\n## Goals\n\n- ship it\n"


def make_settings(root: Path, **storage_overrides) -> Settings:
    """Build settings for ``root`` without reading the process environment."""
    storage = {
        "business_root": root,
        "max_versions": 50,
        "max_snapshot_bytes": 5 * 1024 * 1024,
        "locking": True,
        "workspaces": dict(WORKSPACES),
    }
    storage.update(storage_overrides)
    return Settings(
        app=AppConfig(env="test", log_level="INFO", log_file="", slow_request_ms=800),
        storage=StorageConfig(**storage),
        workflow=WorkflowConfig(default_actor="reviewer", transitions=None),
        gateway=GatewayConfig(url="http://gateway.test", token="", model="", timeout=5.0),
        servicebus=ServiceBusConfig(connection_string="", topic_name="deliverable-events"),
    )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
def sidecars(settings: Settings) -> SidecarStore:
    return SidecarStore(settings.storage)


@pytest.fixture
def content() -> ContentStore:
    return ContentStore()


@pytest.fixture
def versions_repo(sidecars: SidecarStore) -> VersionRepository:
    return VersionRepository(sidecars)


@pytest.fixture
def feedback_repo(sidecars: SidecarStore) -> FeedbackRepository:
    return FeedbackRepository(sidecars)


@pytest.fixture
def status_log_repo(sidecars: SidecarStore) -> StatusLogRepository:
    return StatusLogRepository(sidecars)


@pytest.fixture
def resolver(settings: Settings, content: ContentStore) -> DeliverableResolver:
    return DeliverableResolver(settings.storage.business_root, settings.storage.workspaces, content)


@pytest.fixture
def document(tmp_path: Path) -> Path:
    """A markdown deliverable in the ``content`` workspace."""
    path = tmp_path / "content" / "launch-plan.md"
    path.parent.mkdir(parents=True)
    path.write_text(SAMPLE, encoding="utf-8")
    return path


@pytest.fixture
def settings_with(tmp_path: Path):
    """Factory for settings on the same root with storage overrides."""

    def _build(**storage_overrides) -> Settings:
        return make_settings(tmp_path, **storage_overrides)

    return _build
