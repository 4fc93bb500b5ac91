from __future__ import annotations

import os

import pytest
from fakes import MODEL, FakeClient, text_message

from plugin_evals.fixtures import (
    FixtureDefinition,
    FixtureGenerator,
    TemplateNotFoundError,
    check_all,
    check_freshness,
)

BRIEF = FixtureDefinition(
    fixture="business-brief.md",
    template="business-brief",
    startup="Acme",
    document_type="business-brief",
    context="Dental practice scheduling SaaS",
)
PLAN = FixtureDefinition(
    fixture="business-plan.md",
    template="business-plan",
    startup="Acme",
    document_type="business-plan",
    context="Dental practice scheduling SaaS",
)


@pytest.fixture
def dirs(tmp_path):
    fixtures = tmp_path / "fixtures"
    templates = tmp_path / "templates"
    fixtures.mkdir()
    templates.mkdir()
    return fixtures, templates


def write(path, content: str, mtime: float) -> None:
    path.write_text(content, encoding="utf-8")
    os.utime(path, (mtime, mtime))


class TestCheckFreshness:
    def test_missing_template_is_skipped(self, dirs):
        fixtures, templates = dirs
        result = check_freshness(BRIEF, fixtures, templates)

        assert not result.is_stale
        assert "skipping" in result.reason

    def test_missing_fixture_is_stale(self, dirs):
        fixtures, templates = dirs
        write(templates / "business-brief.md", "## Problem", 1_000)

        result = check_freshness(BRIEF, fixtures, templates)
        assert result.is_stale
        assert result.reason == "Fixture does not exist"

    def test_newer_template_is_stale(self, dirs):
        fixtures, templates = dirs
        write(fixtures / "business-brief.md", "old", 1_000)
        write(templates / "business-brief.md", "## Problem", 2_000)

        result = check_freshness(BRIEF, fixtures, templates)
        assert result.is_stale
        assert result.template_mtime > result.fixture_mtime

    def test_up_to_date(self, dirs):
        fixtures, templates = dirs
        write(templates / "business-brief.md", "## Problem", 1_000)
        write(fixtures / "business-brief.md", "fresh", 2_000)

        assert not check_freshness(BRIEF, fixtures, templates).is_stale

    def test_check_all_keeps_manifest_order(self, dirs):
        fixtures, templates = dirs
        results = check_all([PLAN, BRIEF], fixtures, templates)
        assert [r.fixture for r in results] == ["business-plan.md", "business-brief.md"]


class TestFixtureGenerator:
    @pytest.mark.anyio
    async def test_regenerate_writes_model_output(self, dirs):
        fixtures, templates = dirs
        write(templates / "business-brief.md", "## Problem Statement", 1_000)
        client = FakeClient.scripted(text_message("# Acme\n\n## Problem Statement\n\nNo-shows."))
        generator = FixtureGenerator(
            client=client,  # ty: ignore[invalid-argument-type]
            fixtures_dir=fixtures,
            templates_dir=templates,
            model=MODEL,
        )

        path = await generator.regenerate(BRIEF)

        assert path == fixtures / "business-brief.md"
        assert path.read_text(encoding="utf-8").startswith("# Acme")
        prompt = client.messages.calls[0]["messages"][0]["content"]
        assert "## Problem Statement" in prompt
        assert "Dental practice scheduling SaaS" in prompt

    @pytest.mark.anyio
    async def test_regenerate_without_template(self, dirs):
        fixtures, templates = dirs
        generator = FixtureGenerator(
            client=FakeClient.scripted(),  # ty: ignore[invalid-argument-type]
            fixtures_dir=fixtures,
            templates_dir=templates,
        )

        with pytest.raises(TemplateNotFoundError):
            await generator.regenerate(BRIEF)

    @pytest.mark.anyio
    async def test_regenerate_stale_collects_failures(self, dirs):
        fixtures, templates = dirs
        write(templates / "business-brief.md", "## Problem", 1_000)
        write(templates / "business-plan.md", "## Financials", 1_000)
        client = FakeClient.scripted(
            text_message("# Brief"),
            RuntimeError("rate limited"),
        )
        generator = FixtureGenerator(
            client=client,  # ty: ignore[invalid-argument-type]
            fixtures_dir=fixtures,
            templates_dir=templates,
        )

        summary = await generator.regenerate_stale([BRIEF, PLAN])

        assert summary.checked == 2
        assert summary.stale == 2
        assert summary.regenerated == 1
        assert summary.failed == ["business-plan.md: rate limited"]
        assert (fixtures / "business-brief.md").read_text(encoding="utf-8") == "# Brief"
