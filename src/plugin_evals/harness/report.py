from __future__ import annotations

from typing import Any, Final

from plugin_evals.grader import CodeGraderResult, ModelGraderResult
from plugin_evals.orchestration import OrchestratorTrialResult
from plugin_evals.task import Trial
from plugin_evals.usage import UsageStats, format_token_count

from .model import EvalResult

BOX_WIDTH: Final = 66
MAX_LISTED_FAILURES: Final = 3
LLM_PASS_MARK: Final = 0.7


def format_duration(ms: int) -> str:
    if ms < 1000:
        return f"{ms}ms"
    if ms < 60_000:
        return f"{ms / 1000:.1f}s"
    minutes, rest = divmod(ms, 60_000)
    return f"{minutes}m {rest // 1000}s"


def format_usage(usage: UsageStats) -> str:
    return (
        f"Cost: ${usage.estimated_cost_usd:.4f}  "
        f"Tokens: {format_token_count(usage.input_tokens)} in / "
        f"{format_token_count(usage.output_tokens)} out"
    )


def format_trial_details(trial: Trial) -> list[str]:
    icon = "✓" if trial.passed else "✗"
    lines = [f"    Trial {trial.trial_number}: {icon} ({format_duration(trial.duration_ms)})"]

    if trial.error:
        lines.append(f"      Error: {trial.error}")

    for result in trial.grader_results:
        match result:
            case CodeGraderResult(details=checks):
                passed = sum(1 for c in checks if c.passed)
                mark = "✓" if passed == len(checks) else "✗"
                lines.append(f"      Code: {mark} {passed}/{len(checks)}")
                failures = result.failures
                for failure in failures[:MAX_LISTED_FAILURES]:
                    lines.append(f"        - {failure.message or failure.check}")
                if len(failures) > MAX_LISTED_FAILURES:
                    lines.append(f"        ... +{len(failures) - MAX_LISTED_FAILURES} more")
            case ModelGraderResult(score=score):
                mark = "✓" if score >= LLM_PASS_MARK else "✗"
                lines.append(f"      LLM: {mark} {score * 100:.0f}%")

    return lines


def _box_line(text: str) -> str:
    return f"│ {text}".ljust(BOX_WIDTH + 1) + "│"


def format_task_summary(result: EvalResult[Trial]) -> str:
    icon = "✓" if result.task_passed else "✗"
    rate = f"{result.pass_rate * 100:.0f}%"
    trials = (
        f"{result.passed}/{result.trials_run} (early)"
        if result.exited_early
        else f"{result.passed}/{result.trials}"
    )

    lines = [
        "┌" + "─" * BOX_WIDTH + "┐",
        _box_line(f"{icon} {result.task:<40} {trials:<12} {rate:>4}"),
    ]

    if not result.task_passed:
        for trial in result.trial_results:
            lines.extend(_box_line(line) for line in format_trial_details(trial))

    if result.total_usage.api_calls > 0:
        lines.append(_box_line(format_usage(result.total_usage)))

    lines.append("└" + "─" * BOX_WIDTH + "┘")

    if not result.task_passed:
        lines.append("Task failed. Check the transcripts directory for details.")

    return "\n".join(lines)


def _describe_block(block: dict[str, Any]) -> str:
    match block:
        case {"type": "text", "text": text}:
            return text.strip()
        case {"type": "tool_use", "name": name, "input": args}:
            return f"[tool_use] {name} {args}"
        case {"type": "tool_result", "content": content}:
            return f"[tool_result] {content}"
        case _:
            return str(block)


def reconstruct_conversation(transcript: list[dict[str, Any]]) -> list[str]:
    """Render an orchestration transcript as readable `ROLE: ...` lines."""
    lines: list[str] = []
    for message in transcript:
        role = str(message.get("role", "?")).upper()
        content = message.get("content")
        if isinstance(content, str):
            lines.append(f"{role}: {content.strip()}")
            continue
        for block in content or []:
            lines.append(f"{role}: {_describe_block(block)}")
    return lines


def format_orchestration_summary(result: EvalResult[OrchestratorTrialResult]) -> str:
    verdict = "PASS" if result.task_passed else "FAIL"
    lines = [
        f"{verdict}: {result.task} - {result.passed}/{result.trials_run} trials "
        f"passed ({result.pass_rate * 100:.0f}%)"
    ]

    usage = result.total_usage
    if usage.api_calls > 0:
        lines.append(f"{format_usage(usage)}  API calls: {usage.api_calls}")

    if result.task_passed:
        return "\n".join(lines)

    for trial in result.trial_results:
        if trial.passed:
            continue

        lines.append(f"Trial {trial.trial_number} failures:")
        lines.extend(f"  - {description}" for description in trial.failed_assertions)
        if trial.error:
            lines.append(f"  Error: {trial.error}")

        task_calls = [inv for inv in trial.tool_invocations if inv.name == "Task"]
        if task_calls:
            lines.append("Task invocations:")
            lines.extend(
                f'  - subagent_type: "{inv.input.get("subagent_type")}"' for inv in task_calls
            )
        else:
            lines.append("No Task invocations found in trial")

        if trial.transcript:
            lines.append("Conversation:")
            lines.extend(f"  {line}" for line in reconstruct_conversation(trial.transcript))

    lines.append("Check the transcripts directory for full details.")
    return "\n".join(lines)


def format_usage_totals(usage: UsageStats, title: str = "Evaluation Summary") -> str:
    rule = "═" * 70
    return "\n".join(
        [
            rule,
            f"  {title}",
            "─" * 70,
            f"  Total Cost: ${usage.estimated_cost_usd:.4f}  |  API Calls: {usage.api_calls}",
            f"  Tokens: {format_token_count(usage.input_tokens)} in / "
            f"{format_token_count(usage.output_tokens)} out",
            rule,
        ]
    )
