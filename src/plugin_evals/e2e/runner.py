from __future__ import annotations

import time
from collections.abc import AsyncIterable, AsyncIterator, Callable, Sequence
from pathlib import Path
from typing import Any, Final

from attrs import define
from claude_agent_sdk import (
    ClaudeAgentOptions,
    ClaudeSDKError,
    HookContext,
    HookMatcher,
    Message,
    ResultMessage,
    SystemMessage,
    query,
)
from loguru import logger

from .model import AgentEvent, E2ERunResult, InitInfo, RunSummary, ToolEvent, Workspace

DEFAULT_MAX_TURNS: Final = 30
DEFAULT_MAX_BUDGET_USD: Final = 2.0

type QueryFunction = Callable[..., AsyncIterator[Message]]
type HookCallback = Callable[[dict[str, Any], str | None, HookContext], Any]


def skill_name(tool_input: dict[str, Any]) -> str:
    """Skill named by a Skill tool call, or an empty string."""
    name = tool_input.get("skill") or tool_input.get("skill_name")
    return name if isinstance(name, str) else ""


def _skill_blocker(blocked_skills: Sequence[str], internal_path: Path) -> HookCallback:
    async def hook(
        input_data: dict[str, Any], tool_use_id: str | None, context: HookContext
    ) -> dict[str, Any]:
        if input_data.get("hook_event_name") != "PreToolUse":
            return {}

        name = skill_name(input_data.get("tool_input") or {})
        if name and any(blocked in name for blocked in blocked_skills):
            return {
                "decision": "block",
                "reason": (
                    f'Test mode: Skill "{name}" blocked. '
                    f"Input files pre-seeded at {internal_path}."
                ),
            }
        return {}

    return hook


def _agent_tracker(events: list[AgentEvent]) -> HookCallback:
    async def hook(
        input_data: dict[str, Any], tool_use_id: str | None, context: HookContext
    ) -> dict[str, Any]:
        if input_data.get("hook_event_name") == "SubagentStart":
            events.append(
                AgentEvent(
                    agent_id=input_data.get("agent_id", ""),
                    agent_type=input_data.get("agent_type", ""),
                    timestamp=time.time(),
                )
            )
        return {}

    return hook


def _tool_tracker(events: list[ToolEvent]) -> HookCallback:
    async def hook(
        input_data: dict[str, Any], tool_use_id: str | None, context: HookContext
    ) -> dict[str, Any]:
        if input_data.get("hook_event_name") == "PostToolUse":
            events.append(
                ToolEvent(
                    tool_name=input_data.get("tool_name", ""),
                    tool_input=input_data.get("tool_input") or {},
                    tool_response=input_data.get("tool_response"),
                    timestamp=time.time(),
                )
            )
        return {}

    return hook


async def _user_message(prompt: str) -> AsyncIterable[dict[str, Any]]:
    yield {
        "type": "user",
        "message": {"role": "user", "content": prompt},
        "parent_tool_use_id": None,
        "session_id": "default",
    }


@define
class SdkHarness:
    """
    Runs prompts against the real plugin inside the Claude Code runtime.

    Unlike the orchestration simulation, tools really execute, so each run
    works in its own `Workspace`. Hook callbacks record which subagents were
    started and which tools completed; interactive skills can be blocked so
    that a flow proceeds from pre-seeded input files.
    """

    plugin_root: Path
    max_turns: int = DEFAULT_MAX_TURNS
    max_budget_usd: float = DEFAULT_MAX_BUDGET_USD
    query_fn: QueryFunction = query
    """Replaceable for replaying scripted message streams."""

    def options(
        self,
        workspace: Workspace,
        hooks: dict[str, list[HookMatcher]],
        max_turns: int | None = None,
        max_budget_usd: float | None = None,
    ) -> ClaudeAgentOptions:
        return ClaudeAgentOptions(
            plugins=[{"type": "local", "path": str(self.plugin_root)}],
            cwd=workspace.root_dir,
            permission_mode="bypassPermissions",
            system_prompt={"type": "preset", "preset": "claude_code"},
            max_turns=max_turns or self.max_turns,
            max_budget_usd=max_budget_usd or self.max_budget_usd,
            hooks=hooks,  # ty: ignore[invalid-argument-type]
        )

    async def run(
        self,
        prompt: str,
        workspace: Workspace,
        blocked_skills: Sequence[str] = (),
        max_turns: int | None = None,
        max_budget_usd: float | None = None,
    ) -> E2ERunResult:
        log = logger.bind(task=workspace.internal_path.parent.name, trial="sdk")
        result = E2ERunResult()

        hooks = {
            "PreToolUse": (
                [
                    HookMatcher(
                        matcher="Skill",
                        hooks=[_skill_blocker(blocked_skills, workspace.internal_path)],
                    )
                ]
                if blocked_skills
                else []
            ),
            "SubagentStart": [HookMatcher(hooks=[_agent_tracker(result.agent_starts)])],
            "PostToolUse": [HookMatcher(hooks=[_tool_tracker(result.tool_uses)])],
        }
        options = self.options(workspace, hooks, max_turns, max_budget_usd)

        try:
            async for message in self.query_fn(prompt=_user_message(prompt), options=options):
                result.messages.append(message)
                match message:
                    case SystemMessage(subtype="init", data=data):
                        result.init = InitInfo.from_data(data)
                        log.debug("Runtime loaded plugins: {}", result.init.plugins)
                    case ResultMessage():
                        result.summary = RunSummary(
                            subtype=message.subtype,
                            is_error=message.is_error,
                            num_turns=message.num_turns,
                            duration_ms=message.duration_ms,
                            total_cost_usd=message.total_cost_usd,
                            result=message.result,
                        )
                        if message.subtype != "success":
                            result.errors.append(f"{message.subtype}: {message.result or ''}")
        except ClaudeSDKError as exc:
            log.error("Agent SDK query failed: {}", exc)
            result.errors.append(str(exc))

        log.info(
            "Run finished: {} agent(s) started, {} tool call(s), cost ${:.4f}",
            len(result.agent_starts),
            len(result.tool_uses),
            result.total_cost_usd,
        )
        return result
