from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any

from attrs import field, frozen
from pydantic import BaseModel, ConfigDict, Field

from plugin_evals.usage import UsageStats


class ToolInvocation(BaseModel):
    """A tool call made by the model during an orchestration trial."""

    model_config = ConfigDict(frozen=True)

    name: str
    input: dict[str, Any]
    id: str
    order: int
    """0-based position of the call across the whole trial."""


type MockToolHandler = Callable[[Mapping[str, Any]], str]
type AssertionCheck = Callable[[Sequence[ToolInvocation]], bool]


@frozen
class OrchestratorAssertion:
    description: str
    check: AssertionCheck


class AssertionResult(BaseModel):
    description: str
    passed: bool


@frozen
class ContextFile:
    """Plugin file injected into the orchestrator system prompt."""

    relative_path: str
    """Path relative to the plugin root."""

    header: str
    """Section header the file content is placed under."""


@frozen
class OrchestratorTask:
    """
    Tool-use simulation scenario.

    The model is given the plugin documentation listed in `context_files` and
    a fixed tool set. Its tool calls are answered by mock handlers and the
    recorded invocation sequence is checked against `assertions`.
    """

    name: str
    description: str
    trials: int
    context_files: list[ContextFile]
    system_instructions: str
    """Extra instructions appended after the context files."""

    user_message: str
    assertions: list[OrchestratorAssertion]
    mock_overrides: dict[str, MockToolHandler] = field(factory=dict)
    """Handlers replacing the default mock for specific tools."""

    min_pass_rate: float | None = None
    """Fraction of trials that must pass. None falls back to the run default."""


class OrchestratorTrialResult(BaseModel):
    trial_number: int
    tool_invocations: list[ToolInvocation] = Field(default_factory=list)
    assertion_results: list[AssertionResult] = Field(default_factory=list)
    passed: bool = False
    duration_ms: int = 0
    usage: UsageStats = Field(default_factory=UsageStats)
    transcript: list[dict[str, Any]] = Field(default_factory=list)
    error: str | None = None

    @property
    def failed_assertions(self) -> list[str]:
        return [r.description for r in self.assertion_results if not r.passed]
