from __future__ import annotations


class GraderError(Exception):
    """Base exception for the grader module."""


class GraderParseError(GraderError):
    """Raised when a judge response contains no valid grader JSON."""
