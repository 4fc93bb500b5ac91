from __future__ import annotations

from collections.abc import Iterable
from functools import reduce
from operator import add
from typing import TYPE_CHECKING, Final, NamedTuple, Self

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from anthropic.types import Usage


class ModelPricing(NamedTuple):
    input: float
    output: float


# USD per million tokens
MODEL_PRICING: Final[dict[str, ModelPricing]] = {
    "claude-haiku-4-5": ModelPricing(input=0.8, output=4.0),
    "claude-sonnet-4-5": ModelPricing(input=3.0, output=15.0),
    "claude-opus-4-5": ModelPricing(input=15.0, output=75.0),
}
FALLBACK_PRICING: Final = MODEL_PRICING["claude-haiku-4-5"]


class UsageStats(BaseModel):
    """Token and cost counters. Records are immutable and combine with `+`."""

    model_config = ConfigDict(frozen=True)

    input_tokens: int = 0
    output_tokens: int = 0
    cache_creation_input_tokens: int = 0
    cache_read_input_tokens: int = 0
    api_calls: int = 0
    estimated_cost_usd: float = 0.0

    def __add__(self, other: UsageStats) -> UsageStats:
        return UsageStats(
            input_tokens=self.input_tokens + other.input_tokens,
            output_tokens=self.output_tokens + other.output_tokens,
            cache_creation_input_tokens=(
                self.cache_creation_input_tokens + other.cache_creation_input_tokens
            ),
            cache_read_input_tokens=(
                self.cache_read_input_tokens + other.cache_read_input_tokens
            ),
            api_calls=self.api_calls + other.api_calls,
            estimated_cost_usd=self.estimated_cost_usd + other.estimated_cost_usd,
        )

    @classmethod
    def from_response(cls, usage: Usage, model: str) -> Self:
        """Usage record for a single Messages API call."""
        pricing = MODEL_PRICING.get(model, FALLBACK_PRICING)
        cost = (
            usage.input_tokens / 1_000_000 * pricing.input
            + usage.output_tokens / 1_000_000 * pricing.output
        )
        return cls(
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
            cache_creation_input_tokens=usage.cache_creation_input_tokens or 0,
            cache_read_input_tokens=usage.cache_read_input_tokens or 0,
            api_calls=1,
            estimated_cost_usd=cost,
        )


def total(records: Iterable[UsageStats]) -> UsageStats:
    return reduce(add, records, UsageStats())


def format_token_count(tokens: int) -> str:
    if tokens < 1000:
        return str(tokens)
    if tokens < 1_000_000:
        return f"{tokens / 1000:.1f}k"
    return f"{tokens / 1_000_000:.2f}M"
