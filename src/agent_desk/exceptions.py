"""Errors raised for invalid input before any side effect happens."""

from __future__ import annotations


class DeskError(Exception):
    """Base class for request-level validation errors."""


class InvalidStatusError(DeskError):
    """Unknown workflow status or a transition the configured table forbids."""


class InvalidThreadError(DeskError):
    """Bad thread anchor (mismatched or reversed lines) or empty comment."""


class InvalidVersionError(DeskError):
    """Missing content or author for a version snapshot."""
