from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Final, Self

from attrs import frozen

DEFAULT_MODEL: Final = "claude-haiku-4-5"
DEFAULT_MIN_PASS_RATE: Final = 0.33


@frozen
class Settings:
    """Runtime configuration for an evaluation run, read from the environment."""

    api_key: str | None = None

    generation_model: str = DEFAULT_MODEL
    """Model that plays the plugin (document generation and orchestration)."""

    grader_model: str = DEFAULT_MODEL
    """Judge model used by model-based graders and fixture regeneration."""

    min_pass_rate: float = DEFAULT_MIN_PASS_RATE
    """Fraction of trials that must pass when a task does not set its own."""

    max_concurrency: int | None = None
    """Explicit worker count. None means probe the API rate limits."""

    plugin_root: Path = Path("plugin")
    fixtures_dir: Path = Path("fixtures")
    output_dir: Path = Path(".plugin-evals")

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)

    @property
    def transcripts_dir(self) -> Path:
        return self.output_dir / "transcripts"

    @property
    def usage_dir(self) -> Path:
        return self.output_dir / "usage"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Self:
        env = os.environ if environ is None else environ

        max_concurrency = env.get("INTEGRATION_MAX_CONCURRENCY")
        min_pass_rate = env.get("INTEGRATION_MIN_PASS_RATE")

        return cls(
            api_key=env.get("ANTHROPIC_API_KEY") or None,
            generation_model=env.get("INTEGRATION_GENERATION_MODEL", DEFAULT_MODEL),
            grader_model=env.get("INTEGRATION_GRADER_MODEL", DEFAULT_MODEL),
            min_pass_rate=(
                float(min_pass_rate) if min_pass_rate else DEFAULT_MIN_PASS_RATE
            ),
            max_concurrency=int(max_concurrency) if max_concurrency else None,
            plugin_root=Path(env.get("PLUGIN_EVALS_PLUGIN_ROOT", "plugin")),
            fixtures_dir=Path(env.get("PLUGIN_EVALS_FIXTURES_DIR", "fixtures")),
            output_dir=Path(env.get("PLUGIN_EVALS_OUTPUT_DIR", ".plugin-evals")),
        )
