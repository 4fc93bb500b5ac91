from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import Final

import anyio
from anthropic import AsyncAnthropic
from attrs import define
from jinja2 import Environment, PackageLoader
from loguru import logger

from .exceptions import FixtureError, TemplateNotFoundError
from .model import FixtureDefinition, FreshnessResult, RegenerationSummary

env: Final = Environment(loader=PackageLoader("plugin_evals.fixtures", "templates"))
regenerate_template: Final = env.get_template("regenerate.md.j2")

DEFAULT_TEMPLATES_DIR: Final = Path("skills", "generating-documents", "assets", "templates")


def _mtime(path: Path) -> datetime:
    return datetime.fromtimestamp(path.stat().st_mtime)


def check_freshness(
    definition: FixtureDefinition, fixtures_dir: Path, templates_dir: Path
) -> FreshnessResult:
    """
    A fixture is stale when it is missing or older than its template.

    Fixtures whose template does not exist are reported fresh and skipped.
    """
    fixture_path = fixtures_dir / definition.fixture
    template_path = templates_dir / f"{definition.template}.md"

    if not template_path.is_file():
        return FreshnessResult(
            fixture=definition.fixture,
            is_stale=False,
            reason=f"Template {definition.template}.md not found, skipping",
        )

    if not fixture_path.is_file():
        return FreshnessResult(
            fixture=definition.fixture,
            is_stale=True,
            reason="Fixture does not exist",
        )

    template_mtime = _mtime(template_path)
    fixture_mtime = _mtime(fixture_path)

    if template_mtime > fixture_mtime:
        return FreshnessResult(
            fixture=definition.fixture,
            is_stale=True,
            template_mtime=template_mtime,
            fixture_mtime=fixture_mtime,
            reason=(
                f"Template modified after fixture "
                f"({template_mtime.isoformat()} > {fixture_mtime.isoformat()})"
            ),
        )

    return FreshnessResult(
        fixture=definition.fixture,
        is_stale=False,
        template_mtime=template_mtime,
        fixture_mtime=fixture_mtime,
        reason="Fixture is up to date",
    )


def check_all(
    manifest: Sequence[FixtureDefinition], fixtures_dir: Path, templates_dir: Path
) -> list[FreshnessResult]:
    return [check_freshness(d, fixtures_dir, templates_dir) for d in manifest]


@define
class FixtureGenerator:
    """Regenerates stale fixtures from their templates with a small model."""

    client: AsyncAnthropic
    fixtures_dir: Path
    templates_dir: Path
    model: str = "claude-haiku-4-5"
    max_tokens: int = 4096

    async def regenerate(self, definition: FixtureDefinition) -> Path:
        """
        Regenerate a single fixture and return its path.

        Raises:
            TemplateNotFoundError: If the fixture's template does not exist.
            FixtureError: If the model does not answer with text.
        """
        template_path = anyio.Path(self.templates_dir / f"{definition.template}.md")
        if not await template_path.is_file():
            raise TemplateNotFoundError(f"Template not found: {definition.template}.md")

        prompt = regenerate_template.render(
            definition=definition,
            template=await template_path.read_text(encoding="utf-8"),
        )
        response = await self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=[{"role": "user", "content": prompt}],
        )

        block = response.content[0] if response.content else None
        if block is None or block.type != "text":
            raise FixtureError("Unexpected response type from API")

        fixture_path = anyio.Path(self.fixtures_dir / definition.fixture)
        await fixture_path.parent.mkdir(parents=True, exist_ok=True)
        await fixture_path.write_text(block.text, encoding="utf-8")
        return Path(fixture_path)

    async def regenerate_stale(
        self, manifest: Sequence[FixtureDefinition]
    ) -> RegenerationSummary:
        results = check_all(manifest, self.fixtures_dir, self.templates_dir)
        stale = {r.fixture for r in results if r.is_stale}
        summary = RegenerationSummary(checked=len(results), stale=len(stale))

        for definition in manifest:
            if definition.fixture not in stale:
                continue

            logger.info("Regenerating {}", definition.fixture)
            try:
                await self.regenerate(definition)
            except Exception as exc:
                logger.warning("Failed to regenerate {}: {}", definition.fixture, exc)
                summary.failed.append(f"{definition.fixture}: {exc}")
            else:
                summary.regenerated += 1

        return summary
