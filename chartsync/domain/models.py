"""
Series Domain Model - timestamped metric samples for area charts.

A series is an immutable, ordered tuple of samples. Every sample in a series
carries the same channel names (e.g. "balance", or "desktop" + "mobile") and
timestamps strictly increase from oldest to newest.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Tuple


class TimeUnit(str, Enum):
    """Spacing between consecutive samples."""
    MINUTE = "minute"
    HOUR = "hour"
    DAY = "day"

    @property
    def delta(self) -> timedelta:
        """Step as a timedelta."""
        if self is TimeUnit.MINUTE:
            return timedelta(minutes=1)
        if self is TimeUnit.HOUR:
            return timedelta(hours=1)
        return timedelta(days=1)


@dataclass(frozen=True)
class ChannelRange:
    """Inclusive bounds for an independently generated channel."""
    low: float
    high: float


@dataclass(frozen=True)
class SeriesProfile:
    """
    Value shape of a series.

    Attributes:
        name: Profile identifier used on the wire ("balance", "traffic")
        channels: Channel names carried by every sample
        bounds: Per-channel uniform ranges; empty for trend-shaped profiles
    """
    name: str
    channels: Tuple[str, ...]
    bounds: Mapping[str, ChannelRange] = field(default_factory=dict)


BALANCE = SeriesProfile(name="balance", channels=("balance",))
TRAFFIC = SeriesProfile(
    name="traffic",
    channels=("desktop", "mobile"),
    bounds={
        "desktop": ChannelRange(100, 500),
        "mobile": ChannelRange(100, 400),
    },
)

PROFILES: Dict[str, SeriesProfile] = {
    BALANCE.name: BALANCE,
    TRAFFIC.name: TRAFFIC,
}


def get_profile(name: str) -> SeriesProfile:
    """Look up a profile by name, raising ValueError for unknown names."""
    try:
        return PROFILES[name]
    except KeyError:
        raise ValueError(f"Unknown series profile: {name!r}") from None


def format_timestamp(value: datetime) -> str:
    """Serialize as UTC ISO-8601 with millisecond precision and a Z suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(text: str) -> datetime:
    """Parse ISO-8601 (including a trailing Z or a bare date) into aware UTC."""
    raw = text.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    value = datetime.fromisoformat(raw)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class Sample:
    """One point of a series: a timestamp plus named numeric channels."""
    timestamp: datetime
    values: Mapping[str, float]

    def __post_init__(self):
        # Read-only view over a private copy
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    @property
    def channels(self) -> Tuple[str, ...]:
        return tuple(sorted(self.values))

    def to_dict(self) -> Dict[str, Any]:
        """Wire form: {"date": "...", <channel>: value, ...}."""
        payload: Dict[str, Any] = {"date": format_timestamp(self.timestamp)}
        payload.update(self.values)
        return payload

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Sample":
        """Build a sample from its wire form, raising ValueError on bad input."""
        if not isinstance(payload, Mapping) or "date" not in payload:
            raise ValueError("sample must be an object with a 'date' field")
        values: Dict[str, float] = {}
        for key, raw in payload.items():
            if key == "date":
                continue
            if isinstance(raw, bool) or not isinstance(raw, (int, float)):
                raise ValueError(f"channel {key!r} is not numeric: {raw!r}")
            values[key] = float(raw)
        if not values:
            raise ValueError("sample carries no channels")
        return cls(timestamp=parse_timestamp(str(payload["date"])), values=values)


Series = Tuple[Sample, ...]


def validate_series(samples: Iterable[Sample]) -> Series:
    """
    Freeze samples into a Series, checking the shape invariants.

    Raises:
        ValueError: mixed channel shapes, or timestamps that are not strictly
            increasing
    """
    series = tuple(samples)
    if not series:
        return series

    shape = series[0].channels
    for previous, current in zip(series, series[1:]):
        if current.channels != shape:
            raise ValueError(
                f"channel shape changed from {shape} to {current.channels}"
            )
        if current.timestamp <= previous.timestamp:
            raise ValueError(
                f"timestamps not strictly increasing at {format_timestamp(current.timestamp)}"
            )
    return series


def series_to_payload(series: Series) -> List[Dict[str, Any]]:
    """Serialize a series to the list carried under "data"."""
    return [sample.to_dict() for sample in series]


def series_from_payload(items: Iterable[Mapping[str, Any]]) -> Series:
    """Parse and validate the "data" list of a metrics response."""
    return validate_series(Sample.from_dict(item) for item in items)
