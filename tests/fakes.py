"""Scripted stand-ins for the Anthropic Messages client and the Agent SDK."""

from __future__ import annotations

import copy
from collections.abc import AsyncIterator
from typing import Any

from anthropic.types import Message, TextBlock, ToolUseBlock, Usage
from attrs import define, field
from claude_agent_sdk import ResultMessage, SystemMessage

MODEL = "claude-haiku-4-5"


def text_message(text: str, input_tokens: int = 100, output_tokens: int = 50) -> Message:
    return Message.model_construct(
        id="msg_test",
        type="message",
        role="assistant",
        model=MODEL,
        content=[TextBlock(type="text", text=text)],
        stop_reason="end_turn",
        stop_sequence=None,
        usage=Usage(input_tokens=input_tokens, output_tokens=output_tokens),
    )


def tool_message(*calls: tuple[str, dict[str, Any]], text: str | None = None) -> Message:
    content: list[TextBlock | ToolUseBlock] = []
    if text is not None:
        content.append(TextBlock(type="text", text=text))
    content.extend(
        ToolUseBlock(type="tool_use", id=f"toolu_{name}_{i}", name=name, input=args)
        for i, (name, args) in enumerate(calls)
    )
    return Message.model_construct(
        id="msg_test",
        type="message",
        role="assistant",
        model=MODEL,
        content=content,
        stop_reason="tool_use",
        stop_sequence=None,
        usage=Usage(input_tokens=100, output_tokens=50),
    )


@define
class FakeMessages:
    """Replays scripted responses; an exception in the script is raised instead."""

    responses: list[Message | Exception]
    calls: list[dict[str, Any]] = field(factory=list)

    async def create(self, **kwargs: Any) -> Message:
        self.calls.append(copy.deepcopy(kwargs))
        if not self.responses:
            raise AssertionError("FakeMessages ran out of scripted responses")

        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@define
class FakeClient:
    messages: FakeMessages

    @classmethod
    def scripted(cls, *responses: Message | Exception) -> FakeClient:
        return cls(messages=FakeMessages(list(responses)))




def init_message(**data: Any) -> SystemMessage:
    return SystemMessage(subtype="init", data=data)


def result_message(
    subtype: str = "success", cost: float | None = 0.12, result: str | None = "Done."
) -> ResultMessage:
    return ResultMessage(
        subtype=subtype,
        duration_ms=1500,
        duration_api_ms=1200,
        is_error=subtype != "success",
        num_turns=4,
        session_id="session_test",
        total_cost_usd=cost,
        result=result,
    )


@define
class ScriptedQuery:
    """
    Stands in for `claude_agent_sdk.query`.

    Fires the scripted hook inputs through the hooks registered in the options,
    the way the runtime would, then yields the scripted messages. An exception
    in the message script is raised at that point of the stream.
    """

    messages: list[Any]
    hook_inputs: list[dict[str, Any]] = field(factory=list)
    prompts: list[Any] = field(factory=list)
    options: list[Any] = field(factory=list)
    hook_outputs: list[dict[str, Any]] = field(factory=list)

    async def __call__(self, *, prompt: Any, options: Any) -> AsyncIterator[Any]:
        self.options.append(options)
        async for message in prompt:
            self.prompts.append(message)

        for hook_input in self.hook_inputs:
            for matcher in options.hooks.get(hook_input["hook_event_name"], []):
                if matcher.matcher not in (None, hook_input.get("tool_name")):
                    continue
                for hook in matcher.hooks:
                    self.hook_outputs.append(await hook(hook_input, None, {"signal": None}))

        for message in self.messages:
            if isinstance(message, Exception):
                raise message
            yield message
