from __future__ import annotations

import math

from attrs import frozen


def calculate_required_passes(trials: int, pass_rate: float) -> int:
    """
    Number of passing trials needed for a task to pass.

    Halves round up, so 3 trials at 0.67 need 2 passes (not 3) and 3 trials
    at 0.5 need 2. At least one pass is always required.
    """
    return max(1, math.floor(trials * pass_rate + 0.5))


@frozen
class PassPolicy:
    trials: int
    required_passes: int

    @classmethod
    def from_rate(cls, trials: int, pass_rate: float) -> PassPolicy:
        return cls(trials=trials, required_passes=calculate_required_passes(trials, pass_rate))

    @property
    def max_allowed_failures(self) -> int:
        return self.trials - self.required_passes

    def should_stop(self, passed: int, failed: int) -> bool:
        """True once the outcome is decided, either way."""
        return passed >= self.required_passes or failed > self.max_allowed_failures
