from __future__ import annotations

from collections import Counter
from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol

import anyio
from anthropic import AsyncAnthropic
from attrs import define, field
from loguru import logger

from plugin_evals.config import Settings
from plugin_evals.grader import ModelGrader
from plugin_evals.orchestration import (
    AssertionResult,
    OrchestrationRunner,
    OrchestratorTask,
    OrchestratorTrialResult,
)
from plugin_evals.task import PluginContext, Task, Trial, TrialRunner
from plugin_evals.usage import total
from plugin_evals.utils.transcripts import TranscriptStore

from .model import EvalResult, HarnessResult
from .policy import PassPolicy


class TrialOutcome(Protocol):
    @property
    def passed(self) -> bool: ...


class TrialStartCallback(Protocol):
    def __call__(self, task_name: str, trial_number: int) -> None: ...


class TrialCompleteCallback(Protocol):
    def __call__(self, task_name: str, passed: bool) -> None: ...


async def run_trials[T: TrialOutcome](
    name: str,
    policy: PassPolicy,
    run_trial: Callable[[int], Awaitable[T]],
    on_error: Callable[[int, Exception], T],
    on_trial_start: TrialStartCallback | None = None,
    on_trial_complete: TrialCompleteCallback | None = None,
) -> list[T]:
    """
    Run trials sequentially until the task outcome is decided.

    Stops once `policy.required_passes` trials passed, or once more than
    `policy.max_allowed_failures` trials failed. An exception raised by a
    trial is logged and recorded through `on_error` as a failed trial; the
    remaining trials still run.
    """
    results: list[T] = []
    passed = failed = 0

    for trial_number in range(1, policy.trials + 1):
        log = logger.bind(task=name, trial=trial_number)
        if on_trial_start is not None:
            on_trial_start(name, trial_number)

        log.debug("Trial {}/{} started", trial_number, policy.trials)
        try:
            trial = await run_trial(trial_number)
        except Exception as exc:
            log.error("Trial {} errored: {}", trial_number, exc)
            trial = on_error(trial_number, exc)

        results.append(trial)
        if trial.passed:
            passed += 1
        else:
            failed += 1

        log.info(
            "Trial {}/{} {}", trial_number, policy.trials, "passed" if trial.passed else "failed"
        )
        if on_trial_complete is not None:
            on_trial_complete(name, trial.passed)

        if policy.should_stop(passed, failed):
            if trial_number < policy.trials:
                log.info(
                    "Early exit after {} trial(s): {} passed, {} required",
                    trial_number,
                    passed,
                    policy.required_passes,
                )
            break

    return results


@define
class Harness:
    """Evaluates content-quality and orchestration tasks against the Messages API."""

    client: AsyncAnthropic
    settings: Settings = field(factory=Settings.from_env)

    on_trial_start: TrialStartCallback | None = None
    on_trial_complete: TrialCompleteCallback | None = None

    _context: PluginContext = field(init=False)
    _transcripts: TranscriptStore = field(init=False)
    _trial_runner: TrialRunner = field(init=False)
    _orchestration_runner: OrchestrationRunner = field(init=False)

    def __attrs_post_init__(self) -> None:
        self._context = PluginContext(
            plugin_root=self.settings.plugin_root,
            fixtures_dir=self.settings.fixtures_dir,
        )
        self._transcripts = TranscriptStore(self.settings.transcripts_dir)
        self._trial_runner = TrialRunner(
            client=self.client,
            context=self._context,
            judge=ModelGrader(client=self.client, model=self.settings.grader_model),
            model=self.settings.generation_model,
            transcripts=self._transcripts,
        )
        self._orchestration_runner = OrchestrationRunner(
            client=self.client,
            context=self._context,
            model=self.settings.generation_model,
            transcripts=self._transcripts,
        )

    @property
    def context(self) -> PluginContext:
        return self._context

    def policy_for(self, trials: int, min_pass_rate: float | None) -> PassPolicy:
        rate = self.settings.min_pass_rate if min_pass_rate is None else min_pass_rate
        return PassPolicy.from_rate(trials, rate)

    async def evaluate(self, task: Task) -> EvalResult[Trial]:
        policy = self.policy_for(task.trials, task.success_criteria.min_pass_rate)

        def on_error(trial_number: int, exc: Exception) -> Trial:
            return Trial(task_name=task.name, trial_number=trial_number, error=str(exc))

        results = await run_trials(
            task.name,
            policy,
            lambda n: self._trial_runner.run(task, n),
            on_error,
            self.on_trial_start,
            self.on_trial_complete,
        )
        return EvalResult[Trial](
            task=task.name,
            trials=task.trials,
            trials_run=len(results),
            passed=sum(1 for r in results if r.passed),
            required_passes=policy.required_passes,
            trial_results=results,
            total_usage=total(r.usage for r in results),
        )

    async def evaluate_orchestration(
        self, task: OrchestratorTask
    ) -> EvalResult[OrchestratorTrialResult]:
        policy = self.policy_for(task.trials, task.min_pass_rate)

        def on_error(trial_number: int, exc: Exception) -> OrchestratorTrialResult:
            return OrchestratorTrialResult(
                trial_number=trial_number,
                assertion_results=[
                    AssertionResult(description=a.description, passed=False)
                    for a in task.assertions
                ],
                error=str(exc),
            )

        results = await run_trials(
            task.name,
            policy,
            lambda n: self._orchestration_runner.run(task, n),
            on_error,
            self.on_trial_start,
            self.on_trial_complete,
        )
        return EvalResult[OrchestratorTrialResult](
            task=task.name,
            trials=task.trials,
            trials_run=len(results),
            passed=sum(1 for r in results if r.passed),
            required_passes=policy.required_passes,
            trial_results=results,
            total_usage=total(r.usage for r in results),
        )

    async def run(
        self, tasks: Sequence[Task | OrchestratorTask], concurrency: int = 1
    ) -> HarnessResult:
        """
        Evaluate several tasks.

        Up to `concurrency` tasks run at once; trials within a task always run
        one after another so early exit stays meaningful.

        Task names key the results and the transcript files, so they must be
        unique; a repeated name raises `ValueError` before anything runs.
        """
        names = Counter(task.name for task in tasks)
        if duplicates := sorted(name for name, count in names.items() if count > 1):
            raise ValueError(f"Duplicate task names: {', '.join(duplicates)}")

        limiter = anyio.CapacityLimiter(concurrency)
        content: dict[str, EvalResult[Trial]] = {}
        orchestration: dict[str, EvalResult[OrchestratorTrialResult]] = {}

        async def evaluate_one(task: Task | OrchestratorTask) -> None:
            async with limiter:
                match task:
                    case Task():
                        content[task.name] = await self.evaluate(task)
                    case OrchestratorTask():
                        orchestration[task.name] = await self.evaluate_orchestration(task)

        async with anyio.create_task_group() as tg:
            for task in tasks:
                tg.start_soon(evaluate_one, task)

        content_results = [content[t.name] for t in tasks if isinstance(t, Task)]
        orchestration_results = [
            orchestration[t.name] for t in tasks if isinstance(t, OrchestratorTask)
        ]
        return HarnessResult(
            tasks=content_results,
            orchestration=orchestration_results,
            total_usage=total(
                r.total_usage for r in [*content_results, *orchestration_results]
            ),
        )
