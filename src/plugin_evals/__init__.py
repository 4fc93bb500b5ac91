from __future__ import annotations

from loguru import logger

from .config import Settings
from .fixtures import FixtureDefinition, FixtureGenerator
from .grader import CodeChecks, CodeGraderConfig, ModelGraderConfig
from .harness import EvalResult, Harness, HarnessResult
from .orchestration import ContextFile, OrchestratorAssertion, OrchestratorTask, assertions
from .task import (
    AutonomousInput,
    ChallengerInput,
    ConversationTurn,
    InteractiveInput,
    SuccessCriteria,
    Task,
)
from .usage import UsageLedger, UsageStats

logger.disable("plugin_evals")

__all__ = [
    "AutonomousInput",
    "ChallengerInput",
    "CodeChecks",
    "CodeGraderConfig",
    "ContextFile",
    "ConversationTurn",
    "EvalResult",
    "FixtureDefinition",
    "FixtureGenerator",
    "Harness",
    "HarnessResult",
    "InteractiveInput",
    "ModelGraderConfig",
    "OrchestratorAssertion",
    "OrchestratorTask",
    "Settings",
    "SuccessCriteria",
    "Task",
    "UsageLedger",
    "UsageStats",
    "assertions",
]
