from __future__ import annotations

from .exceptions import FixtureNotFoundError, MissingResourceError, TaskError
from .model import (
    AutonomousInput,
    ChallengerInput,
    ChatMessage,
    ConversationTurn,
    ExecutionMode,
    InteractiveInput,
    SuccessCriteria,
    Task,
    TaskInput,
    Trial,
)
from .prompt import PluginContext, compose_system_prompt, compose_user_message
from .runner import TrialRunner, is_trial_passed, render_output

__all__ = [
    "AutonomousInput",
    "ChallengerInput",
    "ChatMessage",
    "ConversationTurn",
    "ExecutionMode",
    "FixtureNotFoundError",
    "InteractiveInput",
    "MissingResourceError",
    "PluginContext",
    "SuccessCriteria",
    "Task",
    "TaskError",
    "TaskInput",
    "Trial",
    "TrialRunner",
    "compose_system_prompt",
    "compose_user_message",
    "is_trial_passed",
    "render_output",
]
