from __future__ import annotations

import re
from collections.abc import Iterator
from typing import Final

from anthropic import AsyncAnthropic
from attrs import define
from jinja2 import Environment, PackageLoader
from loguru import logger
from pydantic import ValidationError

from plugin_evals.usage import UsageStats

from .exceptions import GraderParseError
from .model import ModelGraderDetails, ModelGraderResult

env: Final = Environment(loader=PackageLoader("plugin_evals.grader", "templates"))
system_template: Final = env.get_template("judge_system.md.j2")
prompt_template: Final = env.get_template("judge_prompt.md.j2")

CODE_FENCE_PATTERN: Final = re.compile(r"```(?:json)?\s*\n?([\s\S]*?)\n?\s*```")
DEFAULT_THRESHOLD: Final = 0.7


def _candidates(text: str) -> Iterator[str]:
    # 1. the response is pure JSON
    yield text

    # 2. JSON inside a markdown code fence, with or without a language tag
    if match := CODE_FENCE_PATTERN.search(text):
        yield match.group(1)

    # 3. outermost object, first "{" to last "}"
    first, last = text.find("{"), text.rfind("}")
    if first != -1 and last > first:
        yield text[first : last + 1]


def parse_grader_response(text: str) -> ModelGraderDetails:
    """
    Parse a judge response into `ModelGraderDetails`.

    Extraction strategies are tried in order and the first candidate that
    validates wins. A candidate must carry an object `scores`, a numeric
    `overall` and a string `feedback`.

    Raises:
        GraderParseError: If no strategy yields valid grader JSON.
    """
    for candidate in _candidates(text.strip()):
        try:
            return ModelGraderDetails.model_validate_json(candidate)
        except ValidationError:
            continue

    raise GraderParseError("No valid grader JSON found in response")


def build_grader_prompt(output: str, rubric: str, reference: str | None = None) -> str:
    return prompt_template.render(output=output, rubric=rubric, reference=reference)


@define
class ModelGrader:
    """LLM-as-judge grader scoring text against a rubric."""

    client: AsyncAnthropic
    model: str
    max_tokens: int = 1024

    async def grade(
        self,
        output: str,
        rubric: str,
        threshold: float = DEFAULT_THRESHOLD,
        reference: str | None = None,
    ) -> ModelGraderResult:
        response = await self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            system=system_template.render(),
            messages=[
                {
                    "role": "user",
                    "content": build_grader_prompt(output, rubric, reference),
                }
            ],
        )
        usage = UsageStats.from_response(response.usage, self.model)

        response_text = next(
            (block.text for block in response.content if block.type == "text"), ""
        )

        try:
            details = parse_grader_response(response_text)
        except GraderParseError:
            logger.warning("Judge response could not be parsed, scoring 0")
            # fail closed: an unreadable verdict never passes
            details = ModelGraderDetails(
                scores={},
                overall=0.0,
                feedback=f"Failed to parse grader response: {response_text}",
            )

        return ModelGraderResult(
            passed=details.overall >= threshold,
            score=details.overall,
            details=details,
            usage=usage,
        )
