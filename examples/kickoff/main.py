from __future__ import annotations

import anyio
from anthropic import AsyncAnthropic
from kickoff.tasks import ALL_TASKS

from plugin_evals import Harness, Settings
from plugin_evals.harness.report import (
    format_orchestration_summary,
    format_task_summary,
    format_usage_totals,
)
from plugin_evals.logging import setup_logging


async def main() -> None:
    setup_logging()

    # 1. Settings come from ANTHROPIC_API_KEY, INTEGRATION_* and PLUGIN_EVALS_*
    settings = Settings.from_env()

    # 2. Setup harness
    harness = Harness(
        client=AsyncAnthropic(api_key=settings.api_key, max_retries=5),
        settings=settings,
    )

    # 3. Run evaluation, two tasks at a time
    result = await harness.run(ALL_TASKS, concurrency=2)

    for task_result in result.tasks:
        print(format_task_summary(task_result))
    for orchestration_result in result.orchestration:
        print(format_orchestration_summary(orchestration_result))
    print(format_usage_totals(result.total_usage))


if __name__ == "__main__":
    anyio.run(main)
