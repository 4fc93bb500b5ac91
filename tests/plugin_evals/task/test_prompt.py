from __future__ import annotations

from pathlib import Path

import pytest

from plugin_evals.task import (
    FixtureNotFoundError,
    PluginContext,
    Task,
    compose_system_prompt,
    compose_user_message,
)


@pytest.fixture
def context(tmp_path: Path) -> PluginContext:
    plugin = tmp_path / "plugin"
    fixtures = tmp_path / "fixtures"

    files = {
        plugin / "agents" / "business-writer.md": "Writer agent. Root: ${CLAUDE_PLUGIN_ROOT}",
        plugin
        / "skills"
        / "generating-documents"
        / "assets"
        / "templates"
        / "market-analysis.md": "## Market Size\n## Competitors",
        plugin / "skills" / "gathering-input" / "SKILL.md": "Gathering skill body",
        plugin
        / "skills"
        / "gathering-input"
        / "references"
        / "business-brief-topic.md": "Business brief topic guide",
        plugin / "skills" / "gathering-input" / "references" / "probing.md": "Probe deeper",
        plugin / "skills" / "challenging-assumptions" / "SKILL.md": "Challenger skill",
        plugin
        / "skills"
        / "challenging-assumptions"
        / "references"
        / "domains"
        / "problem.md": "Problem domain challenges",
        fixtures / "business-brief.md": "# Acme Business Brief",
    }
    for path, content in files.items():
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")

    return PluginContext(plugin_root=plugin, fixtures_dir=fixtures)


def autonomous_task(**input_overrides) -> Task:
    return Task.model_validate(
        {
            "name": "autonomous",
            "description": "",
            "trials": 1,
            "input": {
                "execution_mode": "autonomous",
                "startup_name": "Acme",
                "context": "B2B SaaS for dentists",
                "document_type": "market-analysis",
            }
            | input_overrides,
            "graders": [],
        }
    )


class TestPluginContext:
    def test_substitutes_plugin_root(self, context):
        assert context.read("agents/business-writer.md") == (
            f"Writer agent. Root: {context.plugin_root}"
        )

    def test_missing_plugin_file_reads_as_none(self, context):
        assert context.read("agents/missing.md") is None

    def test_missing_fixture_raises(self, context):
        with pytest.raises(FixtureNotFoundError) as exc_info:
            context.load_fixture("missing.md")
        assert exc_info.value.path == context.fixtures_dir / "missing.md"

    def test_missing_reference_reads_as_none(self, context):
        assert context.load_reference("missing.md") is None


class TestAutonomous:
    def test_system_prompt(self, context):
        prompt = compose_system_prompt(autonomous_task(), context)
        assert "Writer agent." in prompt
        assert "## Market Size" in prompt

    def test_missing_plugin_files_still_compose(self, tmp_path):
        empty = PluginContext(plugin_root=tmp_path, fixtures_dir=tmp_path)
        prompt = compose_system_prompt(autonomous_task(), empty)
        assert "business-writer agent" in prompt

    def test_user_message_without_fixture(self, context):
        message = compose_user_message(autonomous_task(), context)
        assert 'Generate market-analysis for "Acme".' in message
        assert "Context:\nB2B SaaS for dentists" in message
        assert "Prior document" not in message

    def test_user_message_with_fixture(self, context):
        task = autonomous_task(context_fixture="business-brief.md")
        message = compose_user_message(task, context)
        assert "Prior document for context:" in message
        assert "# Acme Business Brief" in message

    def test_user_message_with_missing_fixture(self, context):
        task = autonomous_task(context_fixture="nope.md")
        with pytest.raises(FixtureNotFoundError):
            compose_user_message(task, context)


def test_interactive_system_prompt(context):
    task = Task.model_validate(
        {
            "name": "gathering",
            "description": "",
            "trials": 1,
            "input": {
                "execution_mode": "interactive",
                "startup_name": "Acme",
                "context": "B2B SaaS",
                "skill": "gathering-input",
                "document_type": "business-brief",
                "references": ["references/probing.md", "references/missing.md"],
                "conversation": [],
            },
            "graders": [],
        }
    )

    prompt = compose_system_prompt(task, context)
    assert "Gathering skill body" in prompt
    assert "Business brief topic guide" in prompt
    assert "Probe deeper" in prompt
    assert "- document_type: business-brief" in prompt


def test_challenger_prompts(context):
    task = Task.model_validate(
        {
            "name": "challenger",
            "description": "",
            "trials": 1,
            "input": {
                "execution_mode": "challenger",
                "startup_name": "Acme",
                "context": "Challenge my assumptions.",
                "document_type": "business-brief",
                "fixture": "business-brief.md",
            },
            "graders": [],
        }
    )

    system = compose_system_prompt(task, context)
    assert "Challenger skill" in system
    assert "Problem domain challenges" in system

    message = compose_user_message(task, context)
    assert message.startswith('I just completed this business-brief for "Acme":')
    assert "# Acme Business Brief" in message
