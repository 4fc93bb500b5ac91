from __future__ import annotations

import re
from pathlib import Path

import anyio
from attrs import define
from loguru import logger
from pydantic import BaseModel

_UNSAFE_CHARS = re.compile(r"[^a-z0-9-]", re.IGNORECASE)


def sanitize_filename(name: str) -> str:
    return _UNSAFE_CHARS.sub("-", name).lower()


@define
class TranscriptStore:
    """Debug transcripts, one JSON file per task trial."""

    directory: Path

    def path_for(self, task_name: str, trial_number: int) -> Path:
        return self.directory / f"{sanitize_filename(task_name)}-trial-{trial_number}.json"

    async def write(self, task_name: str, trial_number: int, payload: BaseModel) -> Path:
        path = anyio.Path(self.path_for(task_name, trial_number))
        await path.parent.mkdir(parents=True, exist_ok=True)
        await path.write_text(payload.model_dump_json(indent=2), encoding="utf-8")
        return Path(path)

    def clear(self) -> int:
        """Remove transcripts from previous runs. Returns the number removed."""
        if not self.directory.exists():
            return 0

        removed = 0
        for path in self.directory.glob("*.json"):
            path.unlink()
            removed += 1

        logger.debug("Cleared {} transcript file(s) in {}", removed, self.directory)
        return removed
