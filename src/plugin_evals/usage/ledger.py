from __future__ import annotations

from pathlib import Path

from attrs import define
from loguru import logger

from .model import UsageStats, total


@define
class UsageLedger:
    """
    Append-only usage store shared by test workers.

    Each worker appends records to its own `usage-<worker_id>.jsonl` file, so
    no state is shared between processes. Totals are a fold over every file.
    """

    directory: Path
    worker_id: str = "main"

    @property
    def path(self) -> Path:
        return self.directory / f"usage-{self.worker_id}.jsonl"

    def append(self, record: UsageStats) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(record.model_dump_json() + "\n")

    def read(self) -> list[UsageStats]:
        if not self.directory.exists():
            return []

        records: list[UsageStats] = []
        for path in sorted(self.directory.glob("usage-*.jsonl")):
            for line in path.read_text(encoding="utf-8").splitlines():
                if line.strip():
                    records.append(UsageStats.model_validate_json(line))
        return records

    def totals(self) -> UsageStats:
        return total(self.read())

    def clear(self) -> int:
        """Remove all worker files. Returns the number of files removed."""
        if not self.directory.exists():
            return 0

        removed = 0
        for path in self.directory.glob("usage-*.jsonl"):
            path.unlink()
            removed += 1

        logger.debug("Cleared {} usage ledger file(s) in {}", removed, self.directory)
        return removed
