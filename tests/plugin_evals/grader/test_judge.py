from __future__ import annotations

import pytest
from fakes import MODEL, FakeClient, text_message

from plugin_evals.grader import GraderParseError, ModelGrader, parse_grader_response
from plugin_evals.grader.judge import build_grader_prompt

VALID = '{"scores": {"clarity": 0.9}, "overall": 0.85, "feedback": "Solid."}'


class TestParseGraderResponse:
    def test_pure_json(self):
        details = parse_grader_response(VALID)
        assert details.overall == 0.85
        assert details.scores == {"clarity": 0.9}
        assert details.feedback == "Solid."

    def test_fenced_json(self):
        text = f"Here is my evaluation:\n\n```json\n{VALID}\n```\n"
        assert parse_grader_response(text).overall == 0.85

    def test_fence_without_language(self):
        assert parse_grader_response(f"```\n{VALID}\n```").overall == 0.85

    def test_embedded_object(self):
        text = f"After careful review I conclude {VALID} and that is final."
        assert parse_grader_response(text).feedback == "Solid."

    def test_integer_overall_accepted(self):
        details = parse_grader_response('{"scores": {}, "overall": 1, "feedback": ""}')
        assert details.overall == 1

    @pytest.mark.parametrize(
        "scores",
        ['{"q": "strong"}', '{"q": null}', '{"q": {"clarity": 0.9, "notes": ["ok"]}}'],
    )
    def test_score_values_are_not_type_checked(self, scores):
        details = parse_grader_response(
            f'{{"scores": {scores}, "overall": 0.9, "feedback": "Good."}}'
        )
        assert details.overall == 0.9
        assert "q" in details.scores

    @pytest.mark.parametrize(
        "text",
        [
            "I cannot grade this.",
            '{"scores": {}, "overall": "high", "feedback": "x"}',
            '{"scores": {}, "feedback": "missing overall"}',
            '{"scores": [], "overall": 0.5, "feedback": "x"}',
            '{"scores": {}, "overall": 0.5, "feedback": 3}',
        ],
    )
    def test_invalid_responses_raise(self, text):
        with pytest.raises(GraderParseError):
            parse_grader_response(text)


def test_grader_prompt_includes_reference_only_when_given():
    without = build_grader_prompt("doc", "rubric")
    with_reference = build_grader_prompt("doc", "rubric", reference="REFERENCE TEXT")

    assert "REFERENCE TEXT" not in without
    assert "REFERENCE TEXT" in with_reference
    assert "doc" in without
    assert "rubric" in without


class TestModelGrader:
    @pytest.mark.anyio
    async def test_passes_above_threshold(self):
        client = FakeClient.scripted(text_message(VALID))
        grader = ModelGrader(client=client, model=MODEL)  # ty: ignore[invalid-argument-type]

        result = await grader.grade("document", "Is it clear?", threshold=0.8)

        assert result.passed
        assert result.score == 0.85
        assert result.usage.api_calls == 1
        (call,) = client.messages.calls
        assert call["model"] == MODEL
        assert "Is it clear?" in call["messages"][0]["content"]

    @pytest.mark.anyio
    async def test_below_threshold_fails(self):
        client = FakeClient.scripted(text_message(VALID))
        grader = ModelGrader(client=client, model=MODEL)  # ty: ignore[invalid-argument-type]

        result = await grader.grade("document", "rubric", threshold=0.9)
        assert not result.passed

    @pytest.mark.anyio
    async def test_unparseable_response_fails_closed(self):
        client = FakeClient.scripted(text_message("Looks great to me!"))
        grader = ModelGrader(client=client, model=MODEL)  # ty: ignore[invalid-argument-type]

        result = await grader.grade("document", "rubric")

        assert not result.passed
        assert result.score == 0.0
        assert result.details.feedback.startswith("Failed to parse grader response")
        assert result.usage.api_calls == 1

    @pytest.mark.anyio
    async def test_qualitative_scores_still_pass(self):
        verdict = '{"scores": {"q": "strong"}, "overall": 0.9, "feedback": "Good."}'
        client = FakeClient.scripted(text_message(verdict))
        grader = ModelGrader(client=client, model=MODEL)  # ty: ignore[invalid-argument-type]

        result = await grader.grade("document", "rubric")

        assert result.passed
        assert result.details.scores == {"q": "strong"}
