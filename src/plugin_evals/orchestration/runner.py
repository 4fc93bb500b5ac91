from __future__ import annotations

import time
from typing import Any, Final

from anthropic import AsyncAnthropic
from anthropic.types import ToolUseBlock
from attrs import define, field
from jinja2 import Environment, PackageLoader
from loguru import logger

from plugin_evals.task.prompt import SECTION_SEPARATOR, PluginContext
from plugin_evals.usage import UsageStats
from plugin_evals.utils.transcripts import TranscriptStore

from .model import (
    AssertionResult,
    MockToolHandler,
    OrchestratorTask,
    OrchestratorTrialResult,
    ToolInvocation,
)
from .tools import FALLBACK_RESULT, ORCHESTRATION_TOOLS, default_mock_handlers

env: Final = Environment(loader=PackageLoader("plugin_evals.orchestration", "templates"))
preamble_template: Final = env.get_template("orchestrator_preamble.md.j2")

MAX_TOOL_ITERATIONS: Final = 15
DEFAULT_MAX_TOKENS: Final = 4096


def compose_orchestrator_prompt(task: OrchestratorTask, ctx: PluginContext) -> str:
    sections = [
        preamble_template.render(tools=[tool["name"] for tool in ORCHESTRATION_TOOLS])
    ]

    for context_file in task.context_files:
        content = ctx.read(context_file.relative_path)
        if content is not None:
            sections.append(f"## {context_file.header}\n\n{content}")

    if task.system_instructions:
        sections.append(f"## Additional Instructions\n\n{task.system_instructions}")

    return SECTION_SEPARATOR.join(sections)


@define
class OrchestrationRunner:
    """
    Runs one tool-use simulation trial.

    The model is called in a bounded loop. Each `tool_use` block is recorded
    as a `ToolInvocation` and answered by a mock handler; the loop ends as soon
    as a response requests no tools.
    """

    client: AsyncAnthropic
    context: PluginContext
    model: str
    max_iterations: int = MAX_TOOL_ITERATIONS
    max_tokens: int = DEFAULT_MAX_TOKENS
    transcripts: TranscriptStore | None = None

    _default_handlers: dict[str, MockToolHandler] = field(init=False)

    def __attrs_post_init__(self) -> None:
        self._default_handlers = default_mock_handlers(self.context.plugin_root)

    async def run(self, task: OrchestratorTask, trial_number: int) -> OrchestratorTrialResult:
        log = logger.bind(task=task.name, trial=trial_number)
        started = time.perf_counter()

        system = compose_orchestrator_prompt(task, self.context)
        handlers = self._default_handlers | task.mock_overrides

        invocations: list[ToolInvocation] = []
        usage = UsageStats()
        transcript: list[dict[str, Any]] = [
            {"role": "user", "content": task.user_message}
        ]

        for iteration in range(self.max_iterations):
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=system,
                messages=transcript,  # ty: ignore[invalid-argument-type]
                tools=ORCHESTRATION_TOOLS,
            )
            usage += UsageStats.from_response(response.usage, self.model)

            tool_uses = [block for block in response.content if isinstance(block, ToolUseBlock)]
            for block in tool_uses:
                invocations.append(
                    ToolInvocation(
                        name=block.name,
                        input=block.input if isinstance(block.input, dict) else {},
                        id=block.id,
                        order=len(invocations),
                    )
                )

            transcript.append(
                {
                    "role": "assistant",
                    "content": [
                        block.model_dump(mode="json", exclude_none=True)
                        for block in response.content
                    ],
                }
            )

            if response.stop_reason != "tool_use" or not tool_uses:
                log.debug("Model finished after {} iteration(s)", iteration + 1)
                break

            transcript.append(
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "tool_result",
                            "tool_use_id": block.id,
                            "content": self._answer(handlers, invocation),
                        }
                        for block, invocation in zip(
                            tool_uses, invocations[-len(tool_uses) :], strict=True
                        )
                    ],
                }
            )
        else:
            log.warning("Tool loop hit the {} iteration limit", self.max_iterations)

        assertion_results = [
            AssertionResult(description=a.description, passed=a.check(invocations))
            for a in task.assertions
        ]

        result = OrchestratorTrialResult(
            trial_number=trial_number,
            tool_invocations=invocations,
            assertion_results=assertion_results,
            passed=all(r.passed for r in assertion_results),
            duration_ms=int((time.perf_counter() - started) * 1000),
            usage=usage,
            transcript=transcript,
        )

        if self.transcripts is not None:
            path = await self.transcripts.write(task.name, trial_number, result)
            log.debug("Transcript written to {}", path)

        return result

    @staticmethod
    def _answer(handlers: dict[str, MockToolHandler], invocation: ToolInvocation) -> str:
        handler = handlers.get(invocation.name)
        return handler(invocation.input) if handler else FALLBACK_RESULT
