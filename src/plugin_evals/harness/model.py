from __future__ import annotations

from pydantic import BaseModel, Field, computed_field

from plugin_evals.orchestration import OrchestratorTrialResult
from plugin_evals.task import Trial
from plugin_evals.usage import UsageStats


class EvalResult[T: BaseModel](BaseModel):
    """Aggregate over the trials of one task."""

    task: str
    trials: int
    """Trials configured for the task."""

    trials_run: int
    """Trials actually run. Fewer than `trials` after an early exit."""

    passed: int
    required_passes: int
    trial_results: list[T] = Field(default_factory=list)
    total_usage: UsageStats = Field(default_factory=UsageStats)

    @computed_field
    @property
    def pass_rate(self) -> float:
        return self.passed / self.trials_run if self.trials_run else 0.0

    @property
    def pass_at_k(self) -> bool:
        return self.passed > 0

    @property
    def pass_k(self) -> bool:
        return self.passed == self.trials

    @computed_field
    @property
    def task_passed(self) -> bool:
        return self.passed >= self.required_passes

    @property
    def exited_early(self) -> bool:
        return self.trials_run < self.trials


class HarnessResult(BaseModel):
    tasks: list[EvalResult[Trial]] = Field(default_factory=list)
    orchestration: list[EvalResult[OrchestratorTrialResult]] = Field(
        default_factory=list
    )
    total_usage: UsageStats = Field(default_factory=UsageStats)

    @property
    def passed(self) -> bool:
        return all(r.task_passed for r in self.tasks) and all(
            r.task_passed for r in self.orchestration
        )
