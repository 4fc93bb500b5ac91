from __future__ import annotations

import re
from typing import Final

from .model import CheckResult, CodeChecks, CodeGraderResult

# {FIELD_NAME}-style template placeholders. Lowercase tokens such as {token}
# or {id} are legitimate technical text and are not matched.
PLACEHOLDER_PATTERN: Final = re.compile(
    r"\{[A-Z][A-Z_]+\}|\[TODO\]|\[PLACEHOLDER\]|\[TBD\]"
)
CODE_BLOCK_PATTERN: Final = re.compile(r"```[\s\S]*?```|~~~[\s\S]*?~~~")
TURN_SEPARATOR: Final = "---\n\n"

# A question line followed by a blank line and prose that is not a prompt for
# the user (numbered or bulleted options, bold labels, "Choose ...", ...).
# This is a narrow heuristic and is kept exactly as written.
SELF_ANSWER_PATTERN: Final = re.compile(
    r"\?[^\n]*\n\n"
    r"(?!(?:\d+\.|[-*]|\*\*|Enter|Choose|Select|Type|Would you like"
    r"|What would you|How would you|Do you want))"
    r"[\w]",
    re.ASCII,
)


def section_pattern(section: str) -> re.Pattern[str]:
    """
    Matches a level-2 header for `section`, e.g. "## Problem Statement" or
    "## 2. Market Size & Economics", case-insensitively at any line start.
    """
    return re.compile(
        rf"^##\s*(?:\d+\.?\s*)?{re.escape(section)}", re.IGNORECASE | re.MULTILINE
    )


def strip_code_blocks(text: str) -> str:
    return CODE_BLOCK_PATTERN.sub("", text)


def count_words(text: str) -> int:
    return len(text.split())


def count_turns(text: str) -> int:
    return text.count(TURN_SEPARATOR) + 1


def run_code_grader(output: str, checks: CodeChecks) -> CodeGraderResult:
    """Apply every configured check to `output`. Passes only if all checks pass."""
    results: list[CheckResult] = []

    if checks.sections_present:
        for section in checks.sections_present:
            found = section_pattern(section).search(output) is not None
            results.append(
                CheckResult(
                    check=f"section_{section}",
                    passed=found,
                    message=None if found else f"Missing section: {section}",
                )
            )

    if checks.min_word_count is not None:
        word_count = count_words(output)
        passed = word_count >= checks.min_word_count
        results.append(
            CheckResult(
                check="min_word_count",
                passed=passed,
                message=(
                    None
                    if passed
                    else f"Word count {word_count} < {checks.min_word_count}"
                ),
            )
        )

    if checks.no_placeholder_text:
        has_placeholders = (
            PLACEHOLDER_PATTERN.search(strip_code_blocks(output)) is not None
        )
        results.append(
            CheckResult(
                check="no_placeholder_text",
                passed=not has_placeholders,
                message="Contains placeholder text" if has_placeholders else None,
            )
        )

    lowered = output.lower()

    for text in checks.contains or []:
        found = text.lower() in lowered
        results.append(
            CheckResult(
                check=f"contains_{text}",
                passed=found,
                message=None if found else f"Missing expected text: {text}",
            )
        )

    for text in checks.not_contains or []:
        found = text.lower() in lowered
        results.append(
            CheckResult(
                check=f"not_contains_{text}",
                passed=not found,
                message=f"Contains forbidden text: {text}" if found else None,
            )
        )

    if checks.min_turns is not None:
        turns = count_turns(output)
        passed = turns >= checks.min_turns
        results.append(
            CheckResult(
                check="min_turns",
                passed=passed,
                message=(
                    None
                    if passed
                    else f"Only {turns} turns, expected {checks.min_turns}"
                ),
            )
        )

    if checks.contains_questions:
        has_questions = "?" in output
        results.append(
            CheckResult(
                check="contains_questions",
                passed=has_questions,
                message=None if has_questions else "No questions found in output",
            )
        )

    if checks.no_self_answering:
        self_answers = SELF_ANSWER_PATTERN.search(output) is not None
        results.append(
            CheckResult(
                check="no_self_answering",
                passed=not self_answers,
                message="Detected self-answering behavior" if self_answers else None,
            )
        )

    return CodeGraderResult(
        passed=all(result.passed for result in results),
        details=results,
    )
