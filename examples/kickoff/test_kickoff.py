"""
Live evaluation suite. Needs ANTHROPIC_API_KEY; run from the repository root:

    pytest examples/kickoff -n auto
"""

from __future__ import annotations

import pytest

from plugin_evals import Harness
from plugin_evals.harness.report import format_orchestration_summary, format_task_summary

from .tasks import CONTENT_TASKS, ORCHESTRATION_TASKS

pytestmark = pytest.mark.anyio


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def harness(anthropic_client, eval_settings) -> Harness:
    return Harness(client=anthropic_client, settings=eval_settings)


@pytest.mark.parametrize("task", CONTENT_TASKS, ids=lambda task: task.name)
async def test_content_quality(task, harness, usage_ledger):
    result = await harness.evaluate(task)
    usage_ledger.append(result.total_usage)

    print(format_task_summary(result))
    assert result.task_passed, f"{result.passed}/{result.trials_run} trials passed"


@pytest.mark.parametrize("task", ORCHESTRATION_TASKS, ids=lambda task: task.name)
async def test_orchestration(task, harness, usage_ledger):
    result = await harness.evaluate_orchestration(task)
    usage_ledger.append(result.total_usage)

    assert result.task_passed, format_orchestration_summary(result)
