from __future__ import annotations

from pathlib import Path
from typing import Final

from attrs import frozen
from jinja2 import Environment, PackageLoader

from .exceptions import FixtureNotFoundError
from .model import AutonomousInput, ChallengerInput, InteractiveInput, Task

env: Final = Environment(
    loader=PackageLoader("plugin_evals.task", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
)

PLUGIN_ROOT_VARIABLE: Final = "${CLAUDE_PLUGIN_ROOT}"
SECTION_SEPARATOR: Final = "\n\n---\n\n"

# document type -> challenger domain reference
CHALLENGER_DOMAINS: Final[dict[str, str]] = {
    "market-analysis": "market",
    "business-brief": "problem",
    "product-brief": "solution",
    "product-spec": "solution",
    "business-plan": "financials",
    "pitch-deck": "financials",
}
DEFAULT_CHALLENGER_DOMAIN: Final = "market"


@frozen
class PluginContext:
    """
    Read access to the plugin under test and to the evaluation fixtures.

    Plugin files are optional context: a missing file reads as `None`.
    Fixtures are required inputs: a missing fixture raises.
    """

    plugin_root: Path
    fixtures_dir: Path

    def substitute(self, content: str) -> str:
        return content.replace(PLUGIN_ROOT_VARIABLE, str(self.plugin_root))

    def read(self, relative_path: str | Path) -> str | None:
        path = self.plugin_root / relative_path
        if not path.is_file():
            return None
        return self.substitute(path.read_text(encoding="utf-8"))

    def load_fixture(self, name: str) -> str:
        path = self.fixtures_dir / name
        if not path.is_file():
            raise FixtureNotFoundError("Fixture not found", path)
        return path.read_text(encoding="utf-8")

    def load_reference(self, relative_path: str) -> str | None:
        path = self.fixtures_dir / relative_path
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")


def template_path(document_type: str) -> Path:
    return Path(
        "skills", "generating-documents", "assets", "templates", f"{document_type}.md"
    )


def skill_path(skill: str) -> Path:
    return Path("skills", skill, "SKILL.md")


def compose_system_prompt(task: Task, ctx: PluginContext) -> str:
    match task.input:
        case AutonomousInput() as input:
            return _autonomous_system_prompt(input, ctx)
        case InteractiveInput() as input:
            return _interactive_system_prompt(input, ctx)
        case ChallengerInput() as input:
            return _challenger_system_prompt(input, ctx)


def compose_user_message(task: Task, ctx: PluginContext) -> str:
    """
    Render the opening user message for a task.

    Raises:
        FixtureNotFoundError: If the task references a fixture that is missing.
    """
    match task.input:
        case AutonomousInput(context_fixture=fixture_name) as input:
            fixture = ctx.load_fixture(fixture_name) if fixture_name else None
            return env.get_template("autonomous_user.md.j2").render(
                input=input, fixture=fixture
            )
        case InteractiveInput() as input:
            return env.get_template("interactive_user.md.j2").render(input=input)
        case ChallengerInput(fixture=fixture_name) as input:
            return env.get_template("challenger_user.md.j2").render(
                input=input, fixture=ctx.load_fixture(fixture_name)
            )


def _autonomous_system_prompt(input: AutonomousInput, ctx: PluginContext) -> str:
    return env.get_template("autonomous_system.md.j2").render(
        agent=ctx.read(Path("agents", "business-writer.md")) or "",
        template=ctx.read(template_path(input.document_type)) or "",
    )


def _interactive_system_prompt(input: InteractiveInput, ctx: PluginContext) -> str:
    skill_dir = Path("skills", input.skill)
    references = [ctx.read(skill_dir / ref) for ref in input.references]

    topic = None
    if input.document_type and input.skill == "gathering-input":
        topic = ctx.read(
            skill_dir / "references" / f"{input.document_type}-topic.md"
        )

    return env.get_template("interactive_system.md.j2").render(
        input=input,
        skill=ctx.read(skill_path(input.skill)) or "",
        topic=topic,
        references=SECTION_SEPARATOR.join(ref for ref in references if ref),
    )


def _challenger_system_prompt(input: ChallengerInput, ctx: PluginContext) -> str:
    domain = CHALLENGER_DOMAINS.get(input.document_type, DEFAULT_CHALLENGER_DOMAIN)
    skill_dir = Path("skills", "challenging-assumptions")

    return env.get_template("challenger_system.md.j2").render(
        input=input,
        skill=ctx.read(skill_dir / "SKILL.md") or "",
        domain=ctx.read(skill_dir / "references" / "domains" / f"{domain}.md") or "",
    )
