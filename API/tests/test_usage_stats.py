from datetime import datetime, timezone

import pytest

from container_health.core.errors import StatsParseError
from container_health.domain.container import UsageSnapshot
from container_health.schemas.engine import parse_engine_timestamp, parse_stats
from container_health.services.usage_stats import UsageStatsCalculator, cpu_percent


def snapshot(**overrides):
    values = dict(
        container_cpu=300,
        previous_container_cpu=100,
        system_cpu=2000,
        previous_system_cpu=1000,
        online_cpus=4,
        memory_usage=104857600,
        memory_limit=209715200,
    )
    values.update(overrides)
    return UsageSnapshot(**values)


def test_cpu_percent_from_deltas():
    # cpu delta 200, system delta 1000, 4 cpus
    assert cpu_percent(snapshot()) == 80.0


def test_cpu_percent_is_zero_without_system_progress():
    assert cpu_percent(snapshot(system_cpu=1000)) == 0.0
    assert cpu_percent(snapshot(system_cpu=900)) == 0.0


def test_cpu_percent_never_negative():
    assert cpu_percent(snapshot(container_cpu=50)) == 0.0


def test_cpu_percent_treats_missing_cpu_count_as_one():
    assert cpu_percent(snapshot(online_cpus=0)) == 20.0


def test_formatted_figures():
    calculator = UsageStatsCalculator()

    formatted = calculator.format(calculator.compute(snapshot()))

    assert formatted == {
        "cpu_percent": "80.00%",
        "memory_usage": "100.00 MB",
        "memory_limit": "200.00 MB",
        "memory_percent": "50.00%",
    }


def test_zero_memory_limit_is_reported_unavailable():
    calculator = UsageStatsCalculator()

    figures = calculator.compute(snapshot(memory_usage=1024, memory_limit=0))

    assert figures.memory_percent == 0.0
    assert figures.memory_available is False
    assert calculator.format(figures)["memory_percent"] == "0%"


def test_memory_percent_is_capped():
    figures = UsageStatsCalculator().compute(snapshot(memory_usage=300, memory_limit=200))
    assert figures.memory_percent == 100.0


def test_unavailable_figures():
    assert UsageStatsCalculator().format_unavailable() == {
        "cpu_percent": "0%",
        "memory_usage": "0 MB",
        "memory_limit": "0 MB",
        "memory_percent": "0%",
    }


# ---------------------------
# Stats payload parsing
# ---------------------------
STATS_PAYLOAD = {
    "read": "2025-03-01T10:00:05.123456789Z",
    "name": "/bot-acme",
    "cpu_stats": {
        "cpu_usage": {"total_usage": 300},
        "system_cpu_usage": 2000,
        "online_cpus": 4,
    },
    "precpu_stats": {
        "cpu_usage": {"total_usage": 100},
        "system_cpu_usage": 1000,
    },
    "memory_stats": {"usage": 104857600, "limit": 209715200},
}


def test_parse_stats():
    parsed = parse_stats(STATS_PAYLOAD)

    assert parsed.container_cpu == 300
    assert parsed.previous_system_cpu == 1000
    assert parsed.online_cpus == 4
    assert parsed.memory_limit == 209715200
    assert parsed.read_at == datetime(2025, 3, 1, 10, 0, 5, 123456, tzinfo=timezone.utc)


def test_parse_stats_counts_per_cpu_usage_when_online_cpus_missing():
    payload = {
        "cpu_stats": {
            "cpu_usage": {"total_usage": 10, "percpu_usage": [5, 5]},
            "system_cpu_usage": 100,
        },
    }
    parsed = parse_stats(payload)

    assert parsed.online_cpus == 2
    assert parsed.memory_limit == 0


def test_parse_stats_of_stopped_container():
    payload = {
        "read": "0001-01-01T00:00:00Z",
        "cpu_stats": {"cpu_usage": {"total_usage": 0}},
        "precpu_stats": {"cpu_usage": {"total_usage": 0}},
        "memory_stats": {},
    }
    parsed = parse_stats(payload)

    assert parsed.read_at is None
    assert cpu_percent(parsed) == 0.0


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"cpu_stats": {"cpu_usage": {"total_usage": "lots"}}},
        {"cpu_stats": {}, "memory_stats": {"usage": [1]}},
        "not json",
        None,
    ],
)
def test_parse_stats_rejects_malformed_payloads(payload):
    with pytest.raises(StatsParseError):
        parse_stats(payload)


def test_parse_engine_timestamp_forms():
    assert parse_engine_timestamp(0) is None
    assert parse_engine_timestamp(None) is None
    assert parse_engine_timestamp("garbage") is None
    assert parse_engine_timestamp(1735689600) == datetime(2025, 1, 1, tzinfo=timezone.utc)
    assert parse_engine_timestamp("2025-01-01T00:00:00+02:00").utcoffset().total_seconds() == 7200
