from __future__ import annotations

from . import assertions
from .exceptions import E2EAssertionError
from .model import AgentEvent, E2ERunResult, InitInfo, RunSummary, ToolEvent, Workspace
from .runner import SdkHarness

__all__ = [
    "AgentEvent",
    "E2EAssertionError",
    "E2ERunResult",
    "InitInfo",
    "RunSummary",
    "SdkHarness",
    "ToolEvent",
    "Workspace",
    "assertions",
]
