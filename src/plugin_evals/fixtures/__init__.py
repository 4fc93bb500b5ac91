from __future__ import annotations

from .exceptions import FixtureError, TemplateNotFoundError
from .generator import (
    DEFAULT_TEMPLATES_DIR,
    FixtureGenerator,
    check_all,
    check_freshness,
)
from .model import FixtureDefinition, FreshnessResult, RegenerationSummary

__all__ = [
    "DEFAULT_TEMPLATES_DIR",
    "FixtureDefinition",
    "FixtureError",
    "FixtureGenerator",
    "FreshnessResult",
    "RegenerationSummary",
    "TemplateNotFoundError",
    "check_all",
    "check_freshness",
]
