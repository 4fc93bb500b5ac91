from __future__ import annotations

from . import assertions
from .model import (
    AssertionResult,
    ContextFile,
    MockToolHandler,
    OrchestratorAssertion,
    OrchestratorTask,
    OrchestratorTrialResult,
    ToolInvocation,
)
from .runner import OrchestrationRunner, compose_orchestrator_prompt
from .tools import ORCHESTRATION_TOOLS, default_mock_handlers

__all__ = [
    "ORCHESTRATION_TOOLS",
    "AssertionResult",
    "ContextFile",
    "MockToolHandler",
    "OrchestrationRunner",
    "OrchestratorAssertion",
    "OrchestratorTask",
    "OrchestratorTrialResult",
    "ToolInvocation",
    "assertions",
    "compose_orchestrator_prompt",
    "default_mock_handlers",
]
