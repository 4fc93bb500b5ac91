"""
Building blocks for orchestration assertions.

Assertions are pure functions over the ordered invocation list, e.g.

    gathering = tool("Skill", skill_name="gathering-input")
    writer = tool("Task", subagent_type="business-writer")
    OrchestratorAssertion(
        description="Task(business-writer) called after gathering-input",
        check=precedes(gathering, writer),
    )
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from .model import AssertionCheck, ToolInvocation

type InvocationPredicate = Callable[[ToolInvocation], bool]


def _field_matches(actual: Any, expected: Any) -> bool:
    # strings match by substring so unprefixed and prefixed identifiers both hit
    if isinstance(expected, str):
        return isinstance(actual, str) and expected in actual
    return actual == expected


def tool(name: str, **fields: Any) -> InvocationPredicate:
    """Predicate for invocations of `name` whose input fields match `fields`."""

    def predicate(invocation: ToolInvocation) -> bool:
        return invocation.name == name and all(
            _field_matches(invocation.input.get(key), value)
            for key, value in fields.items()
        )

    return predicate


def any_of(*predicates: InvocationPredicate) -> InvocationPredicate:
    def predicate(invocation: ToolInvocation) -> bool:
        return any(p(invocation) for p in predicates)

    return predicate


def find(
    invocations: Sequence[ToolInvocation], predicate: InvocationPredicate
) -> list[ToolInvocation]:
    return [invocation for invocation in invocations if predicate(invocation)]


def first(
    invocations: Sequence[ToolInvocation], predicate: InvocationPredicate
) -> ToolInvocation | None:
    matches = find(invocations, predicate)
    return min(matches, key=lambda inv: inv.order) if matches else None


def invoked(predicate: InvocationPredicate) -> AssertionCheck:
    """At least one invocation satisfies `predicate`."""
    return lambda invocations: bool(find(invocations, predicate))


def invoked_with(name: str, field: str, value: Any) -> AssertionCheck:
    """At least one `name` invocation has `input[field] == value` exactly."""
    return lambda invocations: any(
        inv.name == name and inv.input.get(field) == value for inv in invocations
    )


def all_match(predicate: InvocationPredicate, field: str, value: Any) -> AssertionCheck:
    """
    Every invocation selected by `predicate` has `input[field] == value`, and
    there is at least one such invocation.
    """

    def check(invocations: Sequence[ToolInvocation]) -> bool:
        selected = find(invocations, predicate)
        return bool(selected) and all(inv.input.get(field) == value for inv in selected)

    return check


def precedes(before: InvocationPredicate, after: InvocationPredicate) -> AssertionCheck:
    """
    The first `before` invocation comes earlier than the first `after` one.

    Both must exist. Ordering uses the recorded sequence index.
    """

    def check(invocations: Sequence[ToolInvocation]) -> bool:
        earlier = first(invocations, before)
        later = first(invocations, after)
        if earlier is None or later is None:
            return False
        return later.order > earlier.order

    return check
