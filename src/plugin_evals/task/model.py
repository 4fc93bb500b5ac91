from __future__ import annotations

import re
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from plugin_evals.grader import GraderConfig, GraderResult
from plugin_evals.usage import UsageStats

type ExecutionMode = Literal["autonomous", "interactive", "challenger"]

_THRESHOLD_PATTERN = re.compile(r">=?\s*(\d*\.?\d+)")


class ConversationTurn(BaseModel):
    """A scripted user turn, sent only if `trigger` matches the last reply."""

    model_config = ConfigDict(frozen=True)

    user_message: str
    trigger: str | None = None
    """Case-insensitive regex searched in the previous assistant reply."""


class AutonomousInput(BaseModel):
    """Single-shot document generation by the writer agent."""

    model_config = ConfigDict(frozen=True)

    execution_mode: Literal["autonomous"] = "autonomous"
    startup_name: str
    context: str
    document_type: str
    context_fixture: str | None = None
    """Prior document given as context, relative to the fixtures directory."""


class InteractiveInput(BaseModel):
    """Multi-turn conversation driven by an inline skill."""

    model_config = ConfigDict(frozen=True)

    execution_mode: Literal["interactive"] = "interactive"
    startup_name: str
    context: str
    skill: str
    document_type: str | None = None
    references: list[str] = Field(default_factory=list)
    """Extra reference files, relative to the skill directory."""
    conversation: list[ConversationTurn]


class ChallengerInput(BaseModel):
    """Scrutiny session challenging the assumptions of an existing document."""

    model_config = ConfigDict(frozen=True)

    execution_mode: Literal["challenger"] = "challenger"
    startup_name: str
    context: str
    document_type: str
    fixture: str
    """Document under scrutiny, relative to the fixtures directory."""
    conversation: list[ConversationTurn] | None = None


TaskInput = Annotated[
    AutonomousInput | InteractiveInput | ChallengerInput,
    Field(discriminator="execution_mode"),
]


class SuccessCriteria(BaseModel):
    model_config = ConfigDict(frozen=True)

    all_code_graders_pass: bool = True
    model_grader_score: float | None = None
    """
    Minimum model grader score. Accepts a number, a numeric string or a
    comparison like ">= 0.7"; any other string is a validation error.
    """
    min_pass_rate: float | None = None
    """Fraction of trials that must pass. None falls back to the run default."""

    @field_validator("model_grader_score", mode="before")
    @classmethod
    def _parse_threshold(cls, value: object) -> object:
        if isinstance(value, str) and (
            match := _THRESHOLD_PATTERN.fullmatch(value.strip())
        ):
            return float(match.group(1))
        return value


class Task(BaseModel):
    """A content-quality evaluation scenario."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    trials: int = Field(ge=1)
    input: TaskInput
    graders: list[GraderConfig]
    success_criteria: SuccessCriteria = Field(default_factory=SuccessCriteria)
    reference_solution: str | None = None
    """Reference document for model graders, relative to the fixtures directory."""

    @property
    def execution_mode(self) -> ExecutionMode:
        return self.input.execution_mode

    @property
    def conversation(self) -> list[ConversationTurn]:
        match self.input:
            case InteractiveInput(conversation=turns):
                return turns
            case ChallengerInput(conversation=turns):
                return turns or []
            case AutonomousInput():
                return []


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class Trial(BaseModel):
    """One execution attempt of a task."""

    task_name: str
    trial_number: int
    transcript: list[ChatMessage] = Field(default_factory=list)
    output: str = ""
    grader_results: list[GraderResult] = Field(default_factory=list)
    passed: bool = False
    duration_ms: int = 0
    usage: UsageStats = Field(default_factory=UsageStats)
    error: str | None = None
