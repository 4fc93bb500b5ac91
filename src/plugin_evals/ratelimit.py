from __future__ import annotations

from typing import Final, NamedTuple

import anthropic
from anthropic import AsyncAnthropic
from loguru import logger

FALLBACK_WORKERS: Final = 2
OUTPUT_TPM_PER_WORKER: Final = 10_000
MAX_WORKERS: Final = 16


class RateLimits(NamedTuple):
    requests_per_minute: int
    input_tokens_per_minute: int
    output_tokens_per_minute: int


async def probe_rate_limits(client: AsyncAnthropic, model: str) -> RateLimits | None:
    """
    Detect the organisation's rate limits with a 1-token call.

    Returns None if the probe fails (missing key, network error, ...).
    """
    try:
        raw = await client.messages.with_raw_response.create(
            model=model,
            max_tokens=1,
            messages=[{"role": "user", "content": "hi"}],
        )
    except anthropic.APIError as exc:
        logger.debug("Rate limit probe failed: {}", exc)
        return None

    def header(name: str) -> int:
        return int(raw.headers.get(name) or 0)

    return RateLimits(
        requests_per_minute=header("anthropic-ratelimit-requests-limit"),
        input_tokens_per_minute=header("anthropic-ratelimit-input-tokens-limit"),
        output_tokens_per_minute=header("anthropic-ratelimit-output-tokens-limit"),
    )


def calculate_max_workers(limits: RateLimits | None) -> int:
    """
    Worker count that keeps concurrent trials under the output-token limit.

    Budget is ~10k output tokens per minute per worker: 10k TPM gives 1
    worker, 80k gives 8, and anything past 160k is capped at 16.
    """
    if limits is None or limits.output_tokens_per_minute == 0:
        return FALLBACK_WORKERS
    return max(1, min(limits.output_tokens_per_minute // OUTPUT_TPM_PER_WORKER, MAX_WORKERS))
