from __future__ import annotations

from plugin_evals.grader import CheckResult, CodeGraderResult
from plugin_evals.harness import EvalResult
from plugin_evals.harness.report import (
    format_duration,
    format_orchestration_summary,
    format_task_summary,
    format_usage_totals,
    reconstruct_conversation,
)
from plugin_evals.orchestration import AssertionResult, OrchestratorTrialResult, ToolInvocation
from plugin_evals.task import Trial
from plugin_evals.usage import UsageStats


def test_format_duration():
    assert format_duration(250) == "250ms"
    assert format_duration(1500) == "1.5s"
    assert format_duration(125_000) == "2m 5s"


class TestTaskSummary:
    def test_passing_task_is_compact(self):
        result = EvalResult[Trial](
            task="market-analysis", trials=3, trials_run=2, passed=2, required_passes=2
        )
        summary = format_task_summary(result)

        assert "✓ market-analysis" in summary
        assert "2/2 (early)" in summary
        assert "Task failed" not in summary

    def test_failing_task_lists_check_failures(self):
        failures = [CheckResult(check=f"c{i}", passed=False, message=f"bad {i}") for i in range(5)]
        trial = Trial(
            task_name="market-analysis",
            trial_number=1,
            grader_results=[CodeGraderResult(passed=False, details=failures)],
        )
        result = EvalResult[Trial](
            task="market-analysis",
            trials=1,
            trials_run=1,
            passed=0,
            required_passes=1,
            trial_results=[trial],
            total_usage=UsageStats(input_tokens=1200, output_tokens=300, api_calls=2),
        )
        summary = format_task_summary(result)

        assert "Code: ✗ 0/5" in summary
        assert "- bad 0" in summary
        assert "... +2 more" in summary
        assert "1.2k in / 300 out" in summary
        assert summary.endswith("Task failed. Check the transcripts directory for details.")


def test_orchestration_summary_lists_failures_and_delegations():
    trial = OrchestratorTrialResult(
        trial_number=1,
        tool_invocations=[
            ToolInvocation(name="Task", input={"subagent_type": "general"}, id="t1", order=0)
        ],
        assertion_results=[
            AssertionResult(description="Writer delegated", passed=False),
            AssertionResult(description="Skill invoked", passed=True),
        ],
        transcript=[
            {"role": "user", "content": "Create a brief"},
            {
                "role": "assistant",
                "content": [
                    {"type": "text", "text": "Delegating."},
                    {"type": "tool_use", "name": "Task", "input": {"subagent_type": "general"}},
                ],
            },
        ],
    )
    result = EvalResult[OrchestratorTrialResult](
        task="orchestration",
        trials=1,
        trials_run=1,
        passed=0,
        required_passes=1,
        trial_results=[trial],
    )

    summary = format_orchestration_summary(result)

    assert summary.startswith("FAIL: orchestration - 0/1 trials passed (0%)")
    assert "  - Writer delegated" in summary
    assert "Skill invoked" not in summary
    assert '  - subagent_type: "general"' in summary
    assert "  ASSISTANT: Delegating." in summary


def test_reconstruct_conversation_handles_tool_results():
    lines = reconstruct_conversation(
        [{"role": "user", "content": [{"type": "tool_result", "content": "OK"}]}]
    )
    assert lines == ["USER: [tool_result] OK"]


def test_usage_totals():
    text = format_usage_totals(UsageStats(input_tokens=5, output_tokens=7, api_calls=3))
    assert "API Calls: 3" in text
    assert "Tokens: 5 in / 7 out" in text
