"""
pytest plumbing for live plugin evaluation suites.

Loaded automatically through the `pytest11` entry point. Suites running under
pytest-xdist get one usage ledger file per worker; the controller process
resets the output directories before workers start and prints the folded
totals once they are done.
"""

from __future__ import annotations

import os
from collections.abc import AsyncIterator

import pytest
from anthropic import AsyncAnthropic

from plugin_evals.config import Settings
from plugin_evals.e2e import SdkHarness
from plugin_evals.harness.report import format_usage_totals
from plugin_evals.usage import UsageLedger
from plugin_evals.utils.transcripts import TranscriptStore

WORKER_ENV_VAR = "PYTEST_XDIST_WORKER"


def worker_id() -> str:
    return os.environ.get(WORKER_ENV_VAR, "main")


def _is_worker(config: pytest.Config) -> bool:
    return hasattr(config, "workerinput")


def pytest_sessionstart(session: pytest.Session) -> None:
    if _is_worker(session.config):
        return

    settings = Settings.from_env()
    TranscriptStore(settings.transcripts_dir).clear()
    UsageLedger(settings.usage_dir).clear()


def pytest_terminal_summary(
    terminalreporter: pytest.TerminalReporter, exitstatus: int, config: pytest.Config
) -> None:
    if _is_worker(config):
        return

    usage = UsageLedger(Settings.from_env().usage_dir).totals()
    if usage.api_calls > 0:
        terminalreporter.write_line("")
        terminalreporter.write_line(format_usage_totals(usage))


@pytest.fixture(scope="session")
def eval_settings() -> Settings:
    return Settings.from_env()


@pytest.fixture
def require_api_key(eval_settings: Settings) -> None:
    if not eval_settings.has_api_key:
        pytest.skip("ANTHROPIC_API_KEY not set, skipping live evaluation")


@pytest.fixture
async def anthropic_client(
    eval_settings: Settings, require_api_key: None
) -> AsyncIterator[AsyncAnthropic]:
    client = AsyncAnthropic(api_key=eval_settings.api_key, max_retries=5)
    yield client
    await client.close()


@pytest.fixture(scope="session")
def usage_ledger(eval_settings: Settings) -> UsageLedger:
    return UsageLedger(eval_settings.usage_dir, worker_id=worker_id())


@pytest.fixture
def sdk_harness(eval_settings: Settings, require_api_key: None) -> SdkHarness:
    return SdkHarness(plugin_root=eval_settings.plugin_root.resolve())
