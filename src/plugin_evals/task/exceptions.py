from __future__ import annotations

from pathlib import Path


class TaskError(Exception):
    """Base exception for the task module."""


class MissingResourceError(TaskError):
    """Raised when a file a task depends on does not exist."""

    def __init__(self, message: str, path: Path) -> None:
        super().__init__(f"{message}: {path}")
        self.path = path


class FixtureNotFoundError(MissingResourceError):
    """Raised when a task references a fixture that does not exist."""
