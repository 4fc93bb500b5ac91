"""
Host tool schemas and default mock handlers for orchestration trials.

Schemas define what the model may call. Mock handlers return simulated
results so the tool-use loop can continue without side effects. `Read` calls
that target plugin files return the real file so the model exercises the
actual documentation.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from functools import partial
from pathlib import Path
from typing import Any, Final

from anthropic.types import ToolParam

from plugin_evals.task.prompt import PLUGIN_ROOT_VARIABLE

from .model import MockToolHandler

FALLBACK_RESULT: Final = "OK"

ORCHESTRATION_TOOLS: Final[list[ToolParam]] = [
    {
        "name": "Task",
        "description": "Spawn a subagent to handle a task autonomously.",
        "input_schema": {
            "type": "object",
            "properties": {
                "subagent_type": {
                    "type": "string",
                    "description": "The type of specialized agent to use for this task",
                },
                "prompt": {
                    "type": "string",
                    "description": "The task for the agent to perform",
                },
                "description": {
                    "type": "string",
                    "description": "Short description of the task",
                },
            },
            "required": ["subagent_type", "prompt"],
        },
    },
    {
        "name": "Skill",
        "description": "Invoke a skill inline in the current context.",
        "input_schema": {
            "type": "object",
            "properties": {
                "skill_name": {"type": "string", "description": "The skill to invoke"},
                "parameters": {
                    "type": "object",
                    "description": "Parameters to pass to the skill",
                },
            },
            "required": ["skill_name"],
        },
    },
    {
        "name": "Read",
        "description": "Read a file from the filesystem.",
        "input_schema": {
            "type": "object",
            "properties": {
                "file_path": {
                    "type": "string",
                    "description": "The absolute path to the file to read",
                },
            },
            "required": ["file_path"],
        },
    },
    {
        "name": "Write",
        "description": "Write content to a file.",
        "input_schema": {
            "type": "object",
            "properties": {
                "file_path": {
                    "type": "string",
                    "description": "The absolute path to the file to write",
                },
                "content": {"type": "string", "description": "The content to write"},
            },
            "required": ["file_path", "content"],
        },
    },
    {
        "name": "AskUserQuestion",
        "description": "Ask the user a clarifying question.",
        "input_schema": {
            "type": "object",
            "properties": {
                "questions": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "question": {"type": "string"},
                            "header": {"type": "string"},
                            "options": {
                                "type": "array",
                                "items": {
                                    "type": "object",
                                    "properties": {
                                        "label": {"type": "string"},
                                        "description": {"type": "string"},
                                    },
                                },
                            },
                            "multiSelect": {"type": "boolean"},
                        },
                    },
                },
            },
            "required": ["questions"],
        },
    },
    {
        "name": "Bash",
        "description": "Execute a bash command.",
        "input_schema": {
            "type": "object",
            "properties": {
                "command": {"type": "string", "description": "The command to execute"},
                "description": {
                    "type": "string",
                    "description": "Short description of what this command does",
                },
            },
            "required": ["command"],
        },
    },
    {
        "name": "Glob",
        "description": "Find files matching a glob pattern.",
        "input_schema": {
            "type": "object",
            "properties": {
                "pattern": {
                    "type": "string",
                    "description": "The glob pattern to match files against",
                },
                "path": {"type": "string", "description": "The directory to search in"},
            },
            "required": ["pattern"],
        },
    },
]

MOCK_CONFIG: Final = {
    "profiles": {
        "TestStartup": {
            "displayName": "TestStartup",
            "documentsRoot": "~/Startups",
            "documentsPath": "~/Startups/test-startup",
            "applicationsRoot": "~/Development",
            "applicationsPath": "~/Development/test-startup",
        }
    },
    "activeProfile": "TestStartup",
}

MOCK_INPUT_BRIEF: Final = """# Business Brief Input

## Problem Statement
Decision paralysis in SaaS evaluations with hidden assumptions and no audit trail.

## Solution Overview
AI-augmented decision matrix as a cognitive forcing function.

## Target Market
SMB beachhead via cross-functional SaaS evaluations.

## Business Model
Tiered SaaS, bootstrapped for high ARPU."""


def read_handler(plugin_root: Path, input: Mapping[str, Any]) -> str:
    file_path = input.get("file_path")
    if not isinstance(file_path, str) or not file_path:
        return "Error: No file_path provided"

    resolved = file_path.replace(PLUGIN_ROOT_VARIABLE, str(plugin_root))

    if "/plugin/" in resolved or resolved.startswith(str(plugin_root)):
        path = Path(resolved)
        if path.is_file():
            return path.read_text(encoding="utf-8")
        return f"Error: File not found: {resolved}"

    if "config.json" in resolved or ".lockstride" in resolved:
        return json.dumps(MOCK_CONFIG, indent=2)

    if ".business-brief-input.md" in resolved:
        return MOCK_INPUT_BRIEF

    return f"Mock file content for: {file_path}"


def task_handler(input: Mapping[str, Any]) -> str:
    subagent_type = input.get("subagent_type") or "unknown"
    return (
        f"Subagent {subagent_type} completed successfully. "
        "DRAFT-business-brief.md written to internal path."
    )


def skill_handler(input: Mapping[str, Any]) -> str:
    skill_name = input.get("skill_name") or "unknown"
    if "gathering-input" in skill_name:
        return (
            "Session complete. Structured input captured in .business-brief-input.md. "
            "Handing back to parent workflow."
        )
    return f"Skill {skill_name} completed successfully."


def default_mock_handlers(plugin_root: Path) -> dict[str, MockToolHandler]:
    return {
        "Read": partial(read_handler, plugin_root),
        "Task": task_handler,
        "Skill": skill_handler,
        "AskUserQuestion": lambda _: json.dumps({"answers": {"0": "1"}}),
        "Write": lambda _: "File written successfully.",
        "Bash": lambda _: "Command completed successfully.",
        "Glob": lambda _: "[]",
    }
