"""Filesystem persistence — markdown documents and their JSON sidecars."""

from agent_desk.storage.content import ContentStore
from agent_desk.storage.deliverables import DeliverableResolver
from agent_desk.storage.sidecars import SidecarStore

__all__ = ["ContentStore", "DeliverableResolver", "SidecarStore"]
