from __future__ import annotations

import pytest
from pydantic import ValidationError

from plugin_evals.grader import CodeGraderConfig, ModelGraderConfig
from plugin_evals.task import (
    AutonomousInput,
    ChallengerInput,
    InteractiveInput,
    SuccessCriteria,
    Task,
)


def make_task(**overrides) -> Task:
    data = {
        "name": "market-analysis",
        "description": "Generates a market analysis",
        "trials": 3,
        "input": {
            "execution_mode": "autonomous",
            "startup_name": "Acme",
            "context": "B2B SaaS",
            "document_type": "market-analysis",
        },
        "graders": [
            {"type": "code", "checks": {"min_word_count": 100}},
            {"type": "model", "rubric": "Is it specific?"},
        ],
    }
    return Task.model_validate(data | overrides)


class TestTask:
    def test_discriminated_input_and_graders(self):
        task = make_task()

        assert isinstance(task.input, AutonomousInput)
        assert task.execution_mode == "autonomous"
        assert task.conversation == []
        assert isinstance(task.graders[0], CodeGraderConfig)
        assert isinstance(task.graders[1], ModelGraderConfig)
        assert task.graders[1].threshold == 0.7

    def test_interactive_conversation(self):
        task = make_task(
            input={
                "execution_mode": "interactive",
                "startup_name": "Acme",
                "context": "B2B SaaS",
                "skill": "brainstorming-names",
                "conversation": [
                    {"user_message": "Modern names", "trigger": "style"},
                    {"user_message": "Yes"},
                ],
            }
        )

        assert isinstance(task.input, InteractiveInput)
        assert [turn.trigger for turn in task.conversation] == ["style", None]

    def test_challenger_without_conversation(self):
        task = make_task(
            input={
                "execution_mode": "challenger",
                "startup_name": "Acme",
                "context": "Please challenge it",
                "document_type": "business-brief",
                "fixture": "business-brief.md",
            }
        )
        assert isinstance(task.input, ChallengerInput)
        assert task.conversation == []

    def test_trials_must_be_positive(self):
        with pytest.raises(ValidationError):
            make_task(trials=0)

    def test_unknown_execution_mode_rejected(self):
        with pytest.raises(ValidationError):
            make_task(input={"execution_mode": "batch", "startup_name": "Acme"})


class TestSuccessCriteria:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (">= 0.7", 0.7),
            (">0.5", 0.5),
            ("0.7", 0.7),
            (" >= .6 ", 0.6),
            (0.8, 0.8),
            (None, None),
        ],
    )
    def test_model_grader_score(self, value, expected):
        assert SuccessCriteria(model_grader_score=value).model_grader_score == expected

    @pytest.mark.parametrize("value", ["high", ">= high", "at least 0.7", ">= 0.7 or so"])
    def test_unreadable_threshold_rejected(self, value):
        with pytest.raises(ValidationError):
            SuccessCriteria(model_grader_score=value)

    def test_defaults(self):
        criteria = SuccessCriteria()
        assert criteria.all_code_graders_pass
        assert criteria.min_pass_rate is None
