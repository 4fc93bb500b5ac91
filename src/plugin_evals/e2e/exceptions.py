from __future__ import annotations


class E2EAssertionError(AssertionError):
    """Raised when an end-to-end run does not show the expected behaviour."""
