"""Business logic for versions, diffs, feedback threads and the status workflow."""
