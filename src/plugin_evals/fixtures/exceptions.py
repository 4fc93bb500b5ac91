from __future__ import annotations


class FixtureError(Exception):
    """Base exception for the fixtures module."""


class TemplateNotFoundError(FixtureError):
    """Raised when a fixture's source template does not exist."""
