from __future__ import annotations

from .ledger import UsageLedger
from .model import UsageStats, format_token_count, total

__all__ = [
    "UsageLedger",
    "UsageStats",
    "format_token_count",
    "total",
]
