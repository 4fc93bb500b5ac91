from __future__ import annotations

from .main import Harness, run_trials
from .model import EvalResult, HarnessResult
from .policy import PassPolicy, calculate_required_passes

__all__ = [
    "EvalResult",
    "Harness",
    "HarnessResult",
    "PassPolicy",
    "calculate_required_passes",
    "run_trials",
]
