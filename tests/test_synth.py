"""Tests for the series synthesizer."""

from datetime import datetime, timedelta, timezone

import numpy as np
import pytest

from chartsync.domain import synth
from chartsync.domain.models import BALANCE, TRAFFIC, TimeUnit
from chartsync.domain.synth import synthesize, synthesize_range

NOW = datetime(2024, 3, 15, 12, 30, tzinfo=timezone.utc)


class _MidpointRandom:
    """Deterministic source: always the middle of the range."""

    def uniform(self, low, high):
        return (low + high) / 2


class _LowRandom:
    def uniform(self, low, high):
        return low


class TestSynthesizeStructure:
    """Count, spacing and ordering invariants."""

    @pytest.mark.parametrize(
        "count,unit",
        [(60, TimeUnit.MINUTE), (24, TimeUnit.HOUR), (7, TimeUnit.DAY), (90, TimeUnit.DAY)],
    )
    def test_length_and_spacing(self, count, unit):
        series = synthesize(count, unit, now=NOW)

        assert len(series) == count
        assert series[-1].timestamp == NOW
        assert series[0].timestamp == NOW - unit.delta * (count - 1)
        for previous, current in zip(series, series[1:]):
            assert current.timestamp - previous.timestamp == unit.delta

    def test_last_hour_scenario(self):
        series = synthesize(60, TimeUnit.MINUTE, now=NOW)

        assert len(series) == 60
        assert NOW - series[0].timestamp == timedelta(minutes=59)
        assert all(sample.values["balance"] >= 40000 for sample in series)

    def test_zero_count_is_empty(self):
        assert synthesize(0, TimeUnit.DAY, now=NOW) == ()

    def test_naive_now_is_treated_as_utc(self):
        series = synthesize(3, TimeUnit.HOUR, now=datetime(2024, 1, 1, 6, 0))
        assert series[-1].timestamp == datetime(2024, 1, 1, 6, 0, tzinfo=timezone.utc)

    def test_default_now_is_current_time(self):
        before = datetime.now(timezone.utc)
        series = synthesize(2, TimeUnit.MINUTE)
        after = datetime.now(timezone.utc)
        assert before <= series[-1].timestamp <= after


class TestBalanceValues:
    """Single-channel values."""

    def test_values_respect_floor_and_precision(self):
        rng = np.random.default_rng(7)
        for _ in range(20):
            series = synthesize(90, TimeUnit.DAY, now=NOW, rng=rng)
            for sample in series:
                value = sample.values["balance"]
                assert value >= 40000
                assert round(value, 2) == value

    def test_values_stay_within_trend_and_noise_band(self):
        series = synthesize(90, TimeUnit.DAY, now=NOW, rng=np.random.default_rng(1))
        for sample in series:
            assert 80000 - 10000 - 1500 <= sample.values["balance"] <= 80000 + 10000 + 1500

    def test_exact_values_with_deterministic_source(self):
        series = synthesize(4, TimeUnit.DAY, now=NOW, rng=_MidpointRandom())
        assert [sample.values["balance"] for sample in series] == [70000.0, 80000.0, 90000.0, 80000.0]

    def test_floor_applies(self, monkeypatch):
        monkeypatch.setattr(synth, "BASE_VALUE", 20000.0)
        series = synthesize(10, TimeUnit.DAY, now=NOW, rng=_LowRandom())
        assert all(sample.values["balance"] == 40000.0 for sample in series)

    def test_seeded_generators_reproduce(self):
        first = synthesize(30, TimeUnit.DAY, now=NOW, rng=np.random.default_rng(42))
        second = synthesize(30, TimeUnit.DAY, now=NOW, rng=np.random.default_rng(42))
        assert first == second

    def test_single_channel_shape(self):
        series = synthesize(5, TimeUnit.DAY, now=NOW, profile=BALANCE)
        assert all(sample.channels == ("balance",) for sample in series)


class TestTrafficValues:
    """Dual-channel values."""

    def test_channels_and_bounds(self):
        series = synthesize(90, TimeUnit.DAY, now=NOW, rng=np.random.default_rng(3), profile=TRAFFIC)
        for sample in series:
            assert sample.channels == ("desktop", "mobile")
            assert 100 <= sample.values["desktop"] <= 500
            assert 100 <= sample.values["mobile"] <= 400
            assert sample.values["desktop"].is_integer()
            assert sample.values["mobile"].is_integer()

    def test_deterministic_source(self):
        series = synthesize(2, TimeUnit.DAY, now=NOW, rng=_MidpointRandom(), profile=TRAFFIC)
        assert dict(series[0].values) == {"desktop": 300.0, "mobile": 250.0}


class TestSynthesizeRange:
    @pytest.mark.parametrize("token,count", [("1h", 60), ("1d", 24), ("7d", 7), ("30d", 30), ("3m", 90), ("??", 90)])
    def test_cardinality(self, token, count):
        assert len(synthesize_range(token, now=NOW)) == count

    def test_hourly_spacing(self):
        series = synthesize_range("1d", now=NOW)
        assert series[1].timestamp - series[0].timestamp == timedelta(hours=1)
