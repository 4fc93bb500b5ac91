from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictStr

from plugin_evals.usage import UsageStats


class CodeChecks(BaseModel):
    """Deterministic text checks. Unset checks are not run."""

    model_config = ConfigDict(frozen=True)

    sections_present: list[str] | None = None
    min_word_count: int | None = None
    no_placeholder_text: bool = False
    contains: list[str] | None = None
    not_contains: list[str] | None = None

    # conversation checks
    min_turns: int | None = None
    contains_questions: bool = False
    no_self_answering: bool = False


class CodeGraderConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["code"] = "code"
    checks: CodeChecks


class ModelGraderConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["model"] = "model"
    rubric: str
    threshold: float = 0.7


GraderConfig = Annotated[
    CodeGraderConfig | ModelGraderConfig, Field(discriminator="type")
]


class CheckResult(BaseModel):
    check: str
    passed: bool
    message: str | None = None


class ModelGraderDetails(BaseModel):
    """
    Judge response payload.

    `overall` and `feedback` are strictly typed, so `"overall": "high"` is
    rejected instead of being coerced.
    """

    scores: dict[str, Any]
    """Per-dimension scores. Only the object shape is checked."""
    overall: StrictFloat
    feedback: StrictStr


class CodeGraderResult(BaseModel):
    kind: Literal["code"] = "code"
    passed: bool
    details: list[CheckResult]
    usage: UsageStats = Field(default_factory=UsageStats)

    @property
    def score(self) -> float | None:
        return None

    @property
    def failures(self) -> list[CheckResult]:
        return [check for check in self.details if not check.passed]


class ModelGraderResult(BaseModel):
    kind: Literal["model"] = "model"
    passed: bool
    score: float
    details: ModelGraderDetails
    usage: UsageStats = Field(default_factory=UsageStats)


GraderResult = Annotated[
    CodeGraderResult | ModelGraderResult, Field(discriminator="kind")
]
