"""
Checks on an `E2ERunResult`.

Each helper raises `E2EAssertionError` with the values actually observed, so
a failing live test explains itself without rerunning.
"""

from __future__ import annotations

from collections.abc import Sequence

from .exceptions import E2EAssertionError
from .model import AgentEvent, InitInfo, RunSummary, ToolEvent
from .runner import skill_name


def _listing(values: Sequence[str]) -> str:
    return ", ".join(values) or "(none)"


def _require_init(init: InitInfo | None) -> InitInfo:
    if init is None:
        raise E2EAssertionError("No init message received from the runtime")
    return init


def assert_plugin_loaded(init: InitInfo | None, plugin_name: str) -> None:
    plugins = _require_init(init).plugins
    if plugin_name not in plugins:
        raise E2EAssertionError(
            f'Plugin "{plugin_name}" not found in loaded plugins: {_listing(plugins)}'
        )


def assert_command_available(init: InitInfo | None, command: str) -> None:
    commands = _require_init(init).slash_commands
    if command not in commands:
        raise E2EAssertionError(f'Command "{command}" not found. Available: {_listing(commands)}')


def assert_agent_available(init: InitInfo | None, agent: str) -> None:
    agents = _require_init(init).agents
    if agent not in agents:
        raise E2EAssertionError(f'Agent "{agent}" not found. Available: {_listing(agents)}')


def assert_result_success(summary: RunSummary | None) -> RunSummary:
    if summary is None:
        raise E2EAssertionError("No result message received from the runtime")
    if summary.subtype != "success":
        raise E2EAssertionError(f"Query ended with error: {summary.subtype}: {summary.result}")
    return summary


def assert_agent_spawned(events: Sequence[AgentEvent], agent_type: str) -> AgentEvent:
    for event in events:
        if event.agent_type == agent_type:
            return event

    actual = [event.agent_type for event in events]
    raise E2EAssertionError(
        f'Expected agent "{agent_type}" to be spawned. Actual agents: {_listing(actual)}'
    )


def assert_no_unprefixed_agent(events: Sequence[AgentEvent], name: str) -> None:
    """Fail if an agent was started by its bare name instead of `plugin:name`."""
    if any(event.agent_type == name for event in events):
        raise E2EAssertionError(
            f'Unprefixed agent "{name}" was spawned, expected the plugin-qualified name'
        )


def assert_file_written(events: Sequence[ToolEvent], pattern: str) -> ToolEvent:
    writes = [event for event in events if event.tool_name == "Write"]
    for event in writes:
        path = event.tool_input.get("file_path")
        if isinstance(path, str) and pattern in path:
            return event

    written = [str(event.tool_input.get("file_path")) for event in writes]
    raise E2EAssertionError(
        f'Expected file matching "{pattern}" to be written. Files written: {_listing(written)}'
    )


def assert_skill_invoked(events: Sequence[ToolEvent], skill: str) -> ToolEvent:
    invoked = []
    for event in events:
        name = skill_name(event.tool_input)
        if skill in name:
            return event
        if name:
            invoked.append(name)

    raise E2EAssertionError(
        f'Expected skill "{skill}" to be invoked. Skills invoked: {_listing(invoked)}'
    )


def assert_no_agent_not_found_errors(errors: Sequence[str]) -> None:
    agent_errors = [e for e in errors if "Agent type" in e and "not found" in e]
    if agent_errors:
        raise E2EAssertionError(
            "Agent resolution errors detected:\n" + "\n".join(agent_errors)
        )
