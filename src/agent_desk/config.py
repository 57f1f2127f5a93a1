"""Application settings loaded from environment variables."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

_DEFAULT_WORKSPACES = {
    "market-research": "echo",
    "engineering": "ralph",
    "content": "scribe",
    "strategy": "oracle",
    "operations": "clerk",
    "coordination": "demerzel",
}


def _env(key: str, default: str = "") -> str:
    return os.environ.get(key, default)


def _env_bool(key: str, default: bool) -> bool:
    raw = _env(key)
    if not raw:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(key: str, default: int) -> int:
    raw = _env(key)
    return int(raw) if raw else default


def _workspaces() -> dict[str, str]:
    raw = _env("AGENT_WORKSPACES")
    if not raw:
        return dict(_DEFAULT_WORKSPACES)
    return {str(k): str(v) for k, v in json.loads(raw).items()}


def _transitions() -> dict[str, list[str]] | None:
    path = _env("WORKFLOW_TRANSITIONS_FILE")
    if not path:
        return None
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return {str(k): [str(v) for v in values] for k, values in data.items()}


@dataclass(frozen=True)
class AppConfig:
    env: str = field(default_factory=lambda: _env("APP_ENV", "development"))
    log_level: str = field(default_factory=lambda: _env("APP_LOG_LEVEL", "INFO"))
    log_file: str = field(default_factory=lambda: _env("APP_LOG_FILE"))
    slow_request_ms: int = field(default_factory=lambda: _env_int("APP_SLOW_REQUEST_MS", 800))

    @property
    def is_development(self) -> bool:
        return self.env == "development"


@dataclass(frozen=True)
class StorageConfig:
    business_root: Path = field(
        default_factory=lambda: Path(
            _env("AGENT_DESK_ROOT", str(Path.home() / "tenxsolo" / "business"))
        ).expanduser()
    )
    max_versions: int = field(default_factory=lambda: _env_int("MAX_VERSIONS", 50))
    max_snapshot_bytes: int = field(
        default_factory=lambda: _env_int("MAX_SNAPSHOT_BYTES", 5 * 1024 * 1024)
    )
    locking: bool = field(default_factory=lambda: _env_bool("SIDECAR_LOCKING", True))
    workspaces: dict[str, str] = field(default_factory=_workspaces)


@dataclass(frozen=True)
class WorkflowConfig:
    default_actor: str = field(default_factory=lambda: _env("DEFAULT_ACTOR", "reviewer"))
    transitions: dict[str, list[str]] | None = field(default_factory=_transitions)


@dataclass(frozen=True)
class GatewayConfig:
    url: str = field(default_factory=lambda: _env("AGENT_GATEWAY_URL", "http://127.0.0.1:18789"))
    token: str = field(default_factory=lambda: _env("AGENT_GATEWAY_TOKEN"))
    model: str = field(default_factory=lambda: _env("AGENT_GATEWAY_MODEL"))
    timeout: float = field(default_factory=lambda: float(_env("AGENT_GATEWAY_TIMEOUT", "10")))


@dataclass(frozen=True)
class ServiceBusConfig:
    connection_string: str = field(
        default_factory=lambda: _env("AZURE_SERVICEBUS_CONNECTION_STRING")
    )
    topic_name: str = field(
        default_factory=lambda: _env("AZURE_SERVICEBUS_TOPIC", "deliverable-events")
    )


@dataclass(frozen=True)
class Settings:
    app: AppConfig = field(default_factory=AppConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    workflow: WorkflowConfig = field(default_factory=WorkflowConfig)
    gateway: GatewayConfig = field(default_factory=GatewayConfig)
    servicebus: ServiceBusConfig = field(default_factory=ServiceBusConfig)


def load_settings() -> Settings:
    """Load ``.env`` (if present) and build settings from the environment."""
    load_dotenv()
    return Settings()
