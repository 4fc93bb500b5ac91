from __future__ import annotations

import pytest
from anthropic.types import Usage

from plugin_evals.usage import UsageLedger, UsageStats, format_token_count, total


class TestUsageStats:
    def test_identity(self):
        stats = UsageStats(input_tokens=10, output_tokens=5, api_calls=1)
        assert stats + UsageStats() == stats
        assert UsageStats() + stats == stats

    def test_addition_returns_new_record(self):
        a = UsageStats(input_tokens=10, output_tokens=5, api_calls=1, estimated_cost_usd=0.5)
        b = UsageStats(input_tokens=1, output_tokens=2, api_calls=2, estimated_cost_usd=0.25)

        combined = a + b
        assert combined == UsageStats(
            input_tokens=11, output_tokens=7, api_calls=3, estimated_cost_usd=0.75
        )
        assert a.input_tokens == 10

    def test_from_response_prices_known_model(self):
        usage = Usage(input_tokens=1_000_000, output_tokens=1_000_000)
        stats = UsageStats.from_response(usage, "claude-sonnet-4-5")

        assert stats.api_calls == 1
        assert stats.estimated_cost_usd == pytest.approx(18.0)

    def test_unknown_model_prices_as_haiku(self):
        usage = Usage(input_tokens=1_000_000, output_tokens=0)
        stats = UsageStats.from_response(usage, "some-future-model")
        assert stats.estimated_cost_usd == pytest.approx(0.8)

    def test_total(self):
        records = [UsageStats(input_tokens=i, api_calls=1) for i in range(5)]
        assert total(records) == UsageStats(input_tokens=10, api_calls=5)
        assert total([]) == UsageStats()


def test_format_token_count():
    assert format_token_count(999) == "999"
    assert format_token_count(1500) == "1.5k"
    assert format_token_count(2_500_000) == "2.50M"


class TestUsageLedger:
    def test_fold_across_workers(self, tmp_path):
        gw0 = UsageLedger(tmp_path, worker_id="gw0")
        gw1 = UsageLedger(tmp_path, worker_id="gw1")

        gw0.append(UsageStats(input_tokens=100, api_calls=1))
        gw0.append(UsageStats(input_tokens=50, api_calls=1))
        gw1.append(UsageStats(output_tokens=20, api_calls=1))

        assert gw0.path != gw1.path
        assert len(gw0.read()) == 3
        assert gw1.totals() == UsageStats(input_tokens=150, output_tokens=20, api_calls=3)

    def test_empty_directory(self, tmp_path):
        ledger = UsageLedger(tmp_path / "missing")
        assert ledger.totals() == UsageStats()
        assert ledger.clear() == 0

    def test_clear(self, tmp_path):
        UsageLedger(tmp_path, worker_id="gw0").append(UsageStats(api_calls=1))
        UsageLedger(tmp_path, worker_id="gw1").append(UsageStats(api_calls=1))

        ledger = UsageLedger(tmp_path)
        assert ledger.clear() == 2
        assert ledger.read() == []
