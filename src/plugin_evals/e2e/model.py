from __future__ import annotations

import shutil
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Self

from attrs import define, field, frozen
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field


class AgentEvent(BaseModel):
    """A subagent started by the runtime."""

    model_config = ConfigDict(frozen=True)

    agent_id: str
    agent_type: str
    """Fully qualified agent name, e.g. `my-plugin:business-writer`."""
    timestamp: float


class ToolEvent(BaseModel):
    """A completed tool call."""

    model_config = ConfigDict(frozen=True)

    tool_name: str
    tool_input: dict[str, Any] = Field(default_factory=dict)
    tool_response: Any = None
    timestamp: float


class InitInfo(BaseModel):
    """What the runtime registered at session start."""

    plugins: list[str] = Field(default_factory=list)
    slash_commands: list[str] = Field(default_factory=list)
    agents: list[str] = Field(default_factory=list)
    tools: list[str] = Field(default_factory=list)
    model: str | None = None

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> Self:
        plugins = [
            plugin["name"] if isinstance(plugin, Mapping) else str(plugin)
            for plugin in data.get("plugins") or []
        ]
        return cls(
            plugins=plugins,
            slash_commands=data.get("slash_commands") or [],
            agents=data.get("agents") or [],
            tools=data.get("tools") or [],
            model=data.get("model"),
        )


class RunSummary(BaseModel):
    subtype: str
    """`success`, or the error kind such as `error_max_turns`."""
    is_error: bool
    num_turns: int
    duration_ms: int
    total_cost_usd: float | None = None
    result: str | None = None


@define
class E2ERunResult:
    messages: list[Any] = field(factory=list)
    init: InitInfo | None = None
    summary: RunSummary | None = None
    agent_starts: list[AgentEvent] = field(factory=list)
    tool_uses: list[ToolEvent] = field(factory=list)
    errors: list[str] = field(factory=list)

    @property
    def total_cost_usd(self) -> float:
        if self.summary is None or self.summary.subtype != "success":
            return 0.0
        return self.summary.total_cost_usd or 0.0


@frozen
class Workspace:
    """Scratch project directory the runtime works in."""

    root_dir: Path
    internal_path: Path
    """`<root>/<startup>/internal`, where the plugin keeps its documents."""

    @classmethod
    def create(
        cls,
        root: Path,
        startup_name: str,
        pre_seeded: Mapping[str, str] | None = None,
        fixtures_dir: Path | None = None,
    ) -> Self:
        """
        Create the workspace and pre-seed input files.

        `pre_seeded` maps a target file name inside `internal_path` to a
        fixture name under `fixtures_dir`. Fixtures that do not exist are
        replaced by a placeholder line so the file is still present.
        """
        internal_path = root / startup_name / "internal"
        internal_path.mkdir(parents=True, exist_ok=True)

        for target, fixture in (pre_seeded or {}).items():
            source = fixtures_dir / fixture if fixtures_dir is not None else None
            dest = internal_path / target
            if source is not None and source.is_file():
                shutil.copyfile(source, dest)
            else:
                logger.warning("Fixture {} not found, seeding a placeholder", fixture)
                dest.write_text(f"# Fixture placeholder: {fixture}\n", encoding="utf-8")

        return cls(root_dir=root, internal_path=internal_path)

    def cleanup(self) -> None:
        shutil.rmtree(self.root_dir, ignore_errors=True)
