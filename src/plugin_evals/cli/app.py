from __future__ import annotations

import os
import pkgutil
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Final

from anthropic import AsyncAnthropic
from cyclopts import App

from plugin_evals.config import Settings
from plugin_evals.fixtures import (
    DEFAULT_TEMPLATES_DIR,
    FixtureDefinition,
    FixtureGenerator,
    check_all,
)
from plugin_evals.harness import Harness
from plugin_evals.harness.report import (
    format_orchestration_summary,
    format_task_summary,
    format_usage_totals,
)
from plugin_evals.logging import setup_logging
from plugin_evals.orchestration import OrchestratorTask
from plugin_evals.ratelimit import calculate_max_workers, probe_rate_limits
from plugin_evals.task import Task
from plugin_evals.usage import UsageLedger

app = App(name="plugin-evals", help="Evaluate a Claude Code plugin against the Messages API.")

MAX_RETRIES: Final = 5


def _client(settings: Settings) -> AsyncAnthropic:
    if not settings.has_api_key:
        raise SystemExit("ANTHROPIC_API_KEY is not set.")
    return AsyncAnthropic(api_key=settings.api_key, max_retries=MAX_RETRIES)


def _load(target: str) -> Any:
    """Resolve a `module:attribute` reference, importable from the working directory."""
    cwd = os.getcwd()
    if cwd not in sys.path:
        sys.path.insert(0, cwd)

    try:
        return pkgutil.resolve_name(target)
    except (ImportError, AttributeError, ValueError) as exc:
        raise SystemExit(f"Cannot load '{target}': {exc}") from exc


def _load_tasks(target: str) -> list[Task | OrchestratorTask]:
    loaded = _load(target)
    items = loaded if isinstance(loaded, Sequence) else [loaded]

    tasks = [item for item in items if isinstance(item, Task | OrchestratorTask)]
    if len(tasks) != len(items):
        raise SystemExit(f"'{target}' must be a task or a list of tasks.")
    return tasks


def _load_manifest(target: str) -> list[FixtureDefinition]:
    loaded = _load(target)
    if not all(isinstance(item, FixtureDefinition) for item in loaded):
        raise SystemExit(f"'{target}' must be a list of fixture definitions.")
    return list(loaded)


@app.command
async def run(target: str, *, concurrency: int | None = None, log_level: str = "INFO") -> None:
    """
    Evaluate tasks and print a summary per task.

    Parameters
    ----------
    target
        `module:attribute` naming a task or a list of tasks.
    concurrency
        Tasks evaluated at once. Defaults to INTEGRATION_MAX_CONCURRENCY,
        then to a value derived from the API rate limits.
    log_level
        Loguru level for harness logs.
    """
    setup_logging(log_level)
    settings = Settings.from_env()
    tasks = _load_tasks(target)
    client = _client(settings)

    if concurrency is None:
        concurrency = settings.max_concurrency
    if concurrency is None:
        limits = await probe_rate_limits(client, settings.generation_model)
        concurrency = calculate_max_workers(limits)

    harness = Harness(client=client, settings=settings)
    try:
        result = await harness.run(tasks, concurrency=concurrency)
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc

    for task_result in result.tasks:
        print(format_task_summary(task_result))
    for orchestration_result in result.orchestration:
        print(format_orchestration_summary(orchestration_result))

    ledger = UsageLedger(settings.usage_dir)
    ledger.append(result.total_usage)
    print(format_usage_totals(result.total_usage))

    if not result.passed:
        raise SystemExit(1)


@app.command(name="list")
def list_tasks(target: str) -> None:
    """List task names, trial counts and execution modes."""
    for task in _load_tasks(target):
        mode = task.execution_mode if isinstance(task, Task) else "orchestration"
        print(f"{task.name:<48} {task.trials:>3} trial(s)  {mode}")


@app.command
def usage() -> None:
    """Print the totals recorded in the usage ledger."""
    settings = Settings.from_env()
    print(format_usage_totals(UsageLedger(settings.usage_dir).totals()))


@app.command
async def workers() -> None:
    """Probe the API rate limits and print the suggested worker count."""
    settings = Settings.from_env()
    limits = await probe_rate_limits(_client(settings), settings.generation_model)

    if limits is None:
        print("Rate limits unavailable, using fallback.")
    else:
        print(
            f"Requests: {limits.requests_per_minute}/min  "
            f"Input: {limits.input_tokens_per_minute} TPM  "
            f"Output: {limits.output_tokens_per_minute} TPM"
        )
    print(calculate_max_workers(limits))


# Fixture subcommands
fixtures_app = App(name="fixtures", help="Fixture freshness and regeneration.")
app.command(fixtures_app)


def _templates_dir(settings: Settings) -> Path:
    return settings.plugin_root / DEFAULT_TEMPLATES_DIR


@fixtures_app.command
def check(target: str) -> None:
    """Report stale fixtures. Exits non-zero if any fixture is stale."""
    settings = Settings.from_env()
    results = check_all(
        _load_manifest(target), settings.fixtures_dir, _templates_dir(settings)
    )

    for result in results:
        mark = "stale" if result.is_stale else "ok"
        print(f"{mark:<6} {result.fixture}: {result.reason}")

    if any(result.is_stale for result in results):
        raise SystemExit(1)


@fixtures_app.command
async def regenerate(target: str) -> None:
    """Regenerate every stale fixture in the manifest."""
    setup_logging()
    settings = Settings.from_env()
    generator = FixtureGenerator(
        client=_client(settings),
        fixtures_dir=settings.fixtures_dir,
        templates_dir=_templates_dir(settings),
        model=settings.grader_model,
    )

    summary = await generator.regenerate_stale(_load_manifest(target))
    print(
        f"Checked {summary.checked}, stale {summary.stale}, "
        f"regenerated {summary.regenerated}, failed {len(summary.failed)}"
    )
    for failure in summary.failed:
        print(f"  - {failure}")

    if summary.failed:
        raise SystemExit(1)
