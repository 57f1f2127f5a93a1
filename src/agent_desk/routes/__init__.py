"""HTTP routers."""

from agent_desk.routes import dashboard, feedback, health, versions, workflow

__all__ = ["dashboard", "feedback", "health", "versions", "workflow"]
