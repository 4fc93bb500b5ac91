from __future__ import annotations

from .code import run_code_grader
from .exceptions import GraderError, GraderParseError
from .judge import ModelGrader, parse_grader_response
from .model import (
    CheckResult,
    CodeChecks,
    CodeGraderConfig,
    CodeGraderResult,
    GraderConfig,
    GraderResult,
    ModelGraderConfig,
    ModelGraderDetails,
    ModelGraderResult,
)

__all__ = [
    "CheckResult",
    "CodeChecks",
    "CodeGraderConfig",
    "CodeGraderResult",
    "GraderConfig",
    "GraderError",
    "GraderParseError",
    "GraderResult",
    "ModelGrader",
    "ModelGraderConfig",
    "ModelGraderDetails",
    "ModelGraderResult",
    "parse_grader_response",
    "run_code_grader",
]
