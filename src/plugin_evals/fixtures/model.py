from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class FixtureDefinition(BaseModel):
    """A pre-generated document and the plugin template it is derived from."""

    model_config = ConfigDict(frozen=True)

    fixture: str
    """Fixture filename, relative to the fixtures directory."""

    template: str
    """Template name, `<templates_dir>/<template>.md`."""

    startup: str
    document_type: str
    context: str
    """Minimal startup context used when regenerating the fixture."""


class FreshnessResult(BaseModel):
    fixture: str
    is_stale: bool
    reason: str
    template_mtime: datetime | None = None
    fixture_mtime: datetime | None = None


class RegenerationSummary(BaseModel):
    checked: int = 0
    stale: int = 0
    regenerated: int = 0
    failed: list[str] = Field(default_factory=list)
