"""Agent desk — review, versioning and workflow for agent-produced deliverables."""
