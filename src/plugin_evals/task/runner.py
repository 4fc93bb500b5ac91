from __future__ import annotations

import re
import time
from collections.abc import Sequence
from typing import Final

from anthropic import AsyncAnthropic
from attrs import define
from loguru import logger

from plugin_evals.grader import (
    CodeGraderConfig,
    CodeGraderResult,
    GraderResult,
    ModelGrader,
    ModelGraderConfig,
    ModelGraderResult,
    run_code_grader,
)
from plugin_evals.usage import UsageStats, total
from plugin_evals.utils.transcripts import TranscriptStore

from .model import ChatMessage, ExecutionMode, SuccessCriteria, Task, Trial
from .prompt import PluginContext, compose_system_prompt, compose_user_message

TURN_SEPARATOR: Final = "\n\n---\n\n"
DEFAULT_MAX_TOKENS: Final = 16384


def render_output(mode: ExecutionMode, transcript: Sequence[ChatMessage]) -> str:
    """
    Text handed to graders.

    Interactive sessions are graded on the whole conversation so the judge can
    see how user answers were integrated; other modes only on assistant replies.
    """
    if mode == "interactive":
        return TURN_SEPARATOR.join(
            f"**{message.role.upper()}:**\n{message.content}" for message in transcript
        )
    return TURN_SEPARATOR.join(
        message.content for message in transcript if message.role == "assistant"
    )


def is_trial_passed(criteria: SuccessCriteria, results: Sequence[GraderResult]) -> bool:
    code_passed = all(r.passed for r in results if isinstance(r, CodeGraderResult))
    model_score = next(
        (r.score for r in results if isinstance(r, ModelGraderResult)), 1.0
    )
    threshold = criteria.model_grader_score

    return (not criteria.all_code_graders_pass or code_passed) and (
        threshold is None or model_score >= threshold
    )


@define
class TrialRunner:
    """Runs one content-quality trial: generate, replay the script, grade."""

    client: AsyncAnthropic
    context: PluginContext
    judge: ModelGrader
    model: str
    max_tokens: int = DEFAULT_MAX_TOKENS
    transcripts: TranscriptStore | None = None

    async def run(self, task: Task, trial_number: int) -> Trial:
        log = logger.bind(task=task.name, trial=trial_number)
        started = time.perf_counter()

        system = compose_system_prompt(task, self.context)
        transcript = [
            ChatMessage(role="user", content=compose_user_message(task, self.context))
        ]

        reply, usage = await self._generate(system, transcript)
        transcript.append(ChatMessage(role="assistant", content=reply))

        for turn in task.conversation:
            # a turn whose trigger does not match is dropped, never retried
            if turn.trigger and not re.search(turn.trigger, reply, re.IGNORECASE):
                log.debug("Skipping scripted turn, trigger {!r} not matched", turn.trigger)
                continue

            transcript.append(ChatMessage(role="user", content=turn.user_message))
            reply, turn_usage = await self._generate(system, transcript)
            transcript.append(ChatMessage(role="assistant", content=reply))
            usage += turn_usage

        output = render_output(task.execution_mode, transcript)
        grader_results = await self._grade(task, output)

        trial = Trial(
            task_name=task.name,
            trial_number=trial_number,
            transcript=transcript,
            output=output,
            grader_results=grader_results,
            passed=is_trial_passed(task.success_criteria, grader_results),
            duration_ms=int((time.perf_counter() - started) * 1000),
            usage=total([usage, *(result.usage for result in grader_results)]),
        )

        if self.transcripts is not None:
            path = await self.transcripts.write(task.name, trial_number, trial)
            log.debug("Transcript written to {}", path)

        return trial

    async def _generate(
        self, system: str, transcript: Sequence[ChatMessage]
    ) -> tuple[str, UsageStats]:
        response = await self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            system=system,
            messages=[message.model_dump() for message in transcript],
        )
        text = next(
            (block.text for block in response.content if block.type == "text"), ""
        )
        return text, UsageStats.from_response(response.usage, self.model)

    async def _grade(self, task: Task, output: str) -> list[GraderResult]:
        reference = (
            self.context.load_reference(task.reference_solution)
            if task.reference_solution
            else None
        )

        results: list[GraderResult] = []
        for config in task.graders:
            match config:
                case CodeGraderConfig(checks=checks):
                    results.append(run_code_grader(output, checks))
                case ModelGraderConfig(rubric=rubric, threshold=threshold):
                    results.append(
                        await self.judge.grade(output, rubric, threshold, reference)
                    )
        return results
