"""Tests for the usage aggregator."""

import random
from datetime import date

from cursor_usage.calculator import (
    model_totals,
    summarize,
    usage_by_day,
    usage_by_model_and_day,
)
from cursor_usage.models import UsageRow


def _row(day, model="gpt-4", tokens="100", cost="0.50"):
    return UsageRow(date=day, model=model, total_tokens=tokens, cost=cost)


def _rows():
    return [
        _row("2024-01-02T10:00:00", "claude-4-sonnet", "1000", "0.10"),
        _row("2024-01-01T08:00:00", "gpt-4", "100", "0.50"),
        _row("2024-01-01T20:00:00", "gpt-4", "200", "1.00"),
        _row("2024-01-02T11:00:00", "", "50", "abc"),
        _row("garbage", "gpt-4", "oops", "0.25"),
    ]


class TestUsageByDay:
    def test_single_bucket(self):
        rows = [
            _row("2024-01-01", tokens="100", cost="0.50"),
            _row("2024-01-01", tokens="200", cost="1.00"),
        ]
        daily = usage_by_day(rows)
        assert len(daily) == 1
        assert daily[0].date == date(2024, 1, 1)
        assert daily[0].key == "Mon Jan 01 2024"
        assert daily[0].label == "Jan 1"
        assert daily[0].total_tokens == 300
        assert abs(daily[0].total_cost - 1.50) < 1e-9
        assert daily[0].requests == 2

    def test_sorted_ascending_invalid_last(self):
        daily = usage_by_day(_rows())
        assert [d.key for d in daily] == ["Mon Jan 01 2024", "Tue Jan 02 2024", "Invalid Date"]

    def test_bad_values_count_as_zero(self):
        daily = usage_by_day(_rows())
        jan2 = daily[1]
        assert jan2.total_tokens == 1050
        assert abs(jan2.total_cost - 0.10) < 1e-9
        assert jan2.requests == 2
        invalid = daily[2]
        assert invalid.total_tokens == 0
        assert invalid.date is None
        assert invalid.requests == 1

    def test_bad_cost_contributes_zero(self):
        daily = usage_by_day([_row("2024-01-01", cost="abc")])
        assert daily[0].total_cost == 0

    def test_missing_columns(self):
        daily = usage_by_day([UsageRow(date="2024-01-01")])
        assert daily[0].total_tokens == 0
        assert daily[0].requests == 1

    def test_empty(self):
        assert usage_by_day([]) == []

    def test_out_of_range_date_only_affects_its_row(self):
        rows = [_row("0001-01-01T00:00:00+14:00", "a", "1", "1"), _row("2024-01-01", "b", "2", "2")]
        daily = usage_by_day(rows)
        assert [d.key for d in daily] == ["Mon Jan 01 2024", "Invalid Date"]
        assert daily[0].total_tokens == 2
        assert daily[1].requests == 1

    def test_conservation(self):
        rng = random.Random(7)
        days = ["2024-01-01", "2024-01-02", "2024-02-29", "garbage", ""]
        rows = [
            _row(rng.choice(days), tokens=str(rng.randint(0, 5000)),
                 cost=f"{rng.random():.4f}")
            for _ in range(300)
        ]
        daily = usage_by_day(rows)
        assert sum(d.total_tokens for d in daily) == sum(int(r.total_tokens) for r in rows)
        assert abs(sum(d.total_cost for d in daily) - sum(float(r.cost) for r in rows)) < 1e-6
        assert sum(d.requests for d in daily) == len(rows)


class TestUsageByModelAndDay:
    def test_nested(self):
        usage = usage_by_model_and_day(_rows())
        assert set(usage) == {"claude-4-sonnet", "gpt-4", "Unknown"}
        gpt = usage["gpt-4"]["Mon Jan 01 2024"]
        assert gpt.total_tokens == 300
        assert gpt.requests == 2
        assert abs(gpt.total_cost - 1.5) < 1e-9

    def test_blank_model_is_unknown(self):
        usage = usage_by_model_and_day(_rows())
        assert usage["Unknown"]["Tue Jan 02 2024"].total_tokens == 50

    def test_invalid_date_bucket(self):
        usage = usage_by_model_and_day(_rows())
        assert usage["gpt-4"]["Invalid Date"].requests == 1

    def test_conservation(self):
        usage = usage_by_model_and_day(_rows())
        requests = sum(t.requests for days in usage.values() for t in days.values())
        assert requests == len(_rows())


class TestModelTotals:
    def test_sorted_by_tokens(self):
        totals = model_totals(_rows())
        assert list(totals) == ["claude-4-sonnet", "gpt-4", "Unknown"]
        assert totals["gpt-4"].requests == 3


class TestSummarize:
    def test_totals(self):
        stats = summarize(_rows())
        assert stats.total_tokens == 1350
        assert abs(stats.total_cost - 1.85) < 1e-9
        assert stats.total_requests == 5
        assert stats.model_count == 2

    def test_averages(self):
        stats = summarize(_rows())
        assert stats.average_tokens_per_request == 270
        assert abs(stats.average_cost_per_request - 0.37) < 1e-9

    def test_empty(self):
        stats = summarize([])
        assert stats.total_tokens == 0
        assert stats.average_tokens_per_request == 0
        assert stats.average_cost_per_request == 0.0
