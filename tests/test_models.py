"""Tests for series models and wire format."""

from datetime import datetime, timedelta, timezone

import pytest

from chartsync.domain.models import (
    Sample,
    format_timestamp,
    get_profile,
    parse_timestamp,
    series_from_payload,
    series_to_payload,
    validate_series,
)

T0 = datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)


class TestTimestamps:
    def test_format_matches_browser_iso(self):
        assert format_timestamp(T0) == "2024-01-02T03:04:05.678Z"

    def test_parse_z_suffix(self):
        assert parse_timestamp("2024-01-02T03:04:05.678Z") == T0

    def test_parse_offset_is_normalized_to_utc(self):
        parsed = parse_timestamp("2024-01-02T05:04:05.678+02:00")
        assert parsed == T0
        assert parsed.tzinfo == timezone.utc

    def test_parse_date_only(self):
        assert parse_timestamp("2024-01-02") == datetime(2024, 1, 2, tzinfo=timezone.utc)


class TestSample:
    def test_to_dict(self):
        sample = Sample(T0, {"balance": 81234.56})
        assert sample.to_dict() == {"date": "2024-01-02T03:04:05.678Z", "balance": 81234.56}

    def test_from_dict_dual_channel(self):
        sample = Sample.from_dict({"date": "2024-01-02", "desktop": 222, "mobile": 150})
        assert sample.channels == ("desktop", "mobile")
        assert sample.values["desktop"] == 222.0

    def test_values_are_read_only(self):
        sample = Sample(T0, {"balance": 50000.0})
        with pytest.raises(TypeError):
            sample.values["balance"] = -1.0
        assert sample.values["balance"] == 50000.0

    def test_values_are_copied_from_input(self):
        raw = {"balance": 50000.0}
        sample = Sample(T0, raw)
        raw["balance"] = -1.0
        assert sample.values["balance"] == 50000.0

    def test_equality_is_by_content(self):
        assert Sample(T0, {"balance": 1.0}) == Sample(T0, {"balance": 1.0})
        assert Sample(T0, {"balance": 1.0}) != Sample(T0, {"balance": 2.0})

    @pytest.mark.parametrize(
        "payload",
        [
            {"balance": 1.0},
            {"date": "2024-01-02"},
            {"date": "2024-01-02", "balance": "lots"},
            {"date": "2024-01-02", "balance": True},
            {"date": "not a date", "balance": 1.0},
            ["2024-01-02", 1.0],
        ],
    )
    def test_from_dict_rejects_bad_input(self, payload):
        with pytest.raises(ValueError):
            Sample.from_dict(payload)

    def test_deep_equality(self):
        assert Sample(T0, {"balance": 1.0}) == Sample(T0, {"balance": 1.0})
        assert Sample(T0, {"balance": 1.0}) != Sample(T0, {"balance": 2.0})


class TestValidateSeries:
    def test_accepts_increasing(self):
        series = validate_series(
            [Sample(T0 + timedelta(days=i), {"balance": 1.0}) for i in range(3)]
        )
        assert isinstance(series, tuple)
        assert len(series) == 3

    def test_rejects_duplicate_timestamps(self):
        with pytest.raises(ValueError):
            validate_series([Sample(T0, {"balance": 1.0}), Sample(T0, {"balance": 2.0})])

    def test_rejects_decreasing_timestamps(self):
        with pytest.raises(ValueError):
            validate_series(
                [Sample(T0, {"balance": 1.0}), Sample(T0 - timedelta(minutes=1), {"balance": 2.0})]
            )

    def test_rejects_mixed_channels(self):
        with pytest.raises(ValueError):
            validate_series(
                [
                    Sample(T0, {"balance": 1.0}),
                    Sample(T0 + timedelta(hours=1), {"desktop": 1.0, "mobile": 2.0}),
                ]
            )

    def test_payload_round_trip(self):
        series = tuple(Sample(T0 + timedelta(hours=i), {"balance": 80000.0 + i}) for i in range(4))
        assert series_from_payload(series_to_payload(series)) == series


def test_get_profile_unknown():
    assert get_profile("traffic").channels == ("desktop", "mobile")
    with pytest.raises(ValueError):
        get_profile("weather")
