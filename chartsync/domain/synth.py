"""
Series Synthesizer - plausible placeholder series for a resolved range.

Only the structure is deterministic: sample count, spacing and value bounds.
Values come from an injectable random source so callers can pin them down.
"""

import math
from datetime import datetime, timezone
from typing import Dict, Optional, Protocol

import numpy as np

from .models import BALANCE, Sample, Series, SeriesProfile, TimeUnit
from .resolver import resolve

# Single-channel (balance) shape
BASE_VALUE = 80000.0
AMPLITUDE = 20000.0
TREND_SCALE = 0.5
NOISE_SCALE = 0.075
FLOOR_VALUE = 40000.0


class RandomSource(Protocol):
    """Anything that can draw a uniform float, e.g. numpy.random.Generator."""

    def uniform(self, low: float, high: float) -> float:
        ...


def _balance_value(i: int, count: int, rng: RandomSource) -> float:
    trend = math.sin((i / count) * math.pi * 2) * AMPLITUDE * TREND_SCALE
    noise_span = AMPLITUDE * NOISE_SCALE
    noise = float(rng.uniform(-noise_span, noise_span))
    return round(max(FLOOR_VALUE, BASE_VALUE + trend + noise), 2)


def _bounded_values(profile: SeriesProfile, rng: RandomSource) -> Dict[str, float]:
    # Channels are drawn independently of each other
    values = {}
    for channel in profile.channels:
        bounds = profile.bounds[channel]
        values[channel] = float(round(rng.uniform(bounds.low, bounds.high)))
    return values


def synthesize(
    count: int,
    unit: TimeUnit,
    now: Optional[datetime] = None,
    rng: Optional[RandomSource] = None,
    profile: SeriesProfile = BALANCE,
) -> Series:
    """
    Generate `count` samples ending at `now`, oldest first.

    Args:
        count: Number of samples
        unit: Spacing between samples
        now: Timestamp of the newest sample (default: current UTC time)
        rng: Random source (default: a fresh numpy Generator)
        profile: Value shape; BALANCE follows a sine trend with small noise
            floored at 40000, bounded profiles draw each channel uniformly

    Returns:
        Tuple of Sample, strictly increasing timestamps
    """
    if count <= 0:
        return ()
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    if rng is None:
        rng = np.random.default_rng()

    step = unit.delta
    samples = []
    for i in range(count - 1, -1, -1):
        if profile.bounds:
            values = _bounded_values(profile, rng)
        else:
            values = {profile.channels[0]: _balance_value(i, count, rng)}
        samples.append(Sample(timestamp=now - step * i, values=values))
    return tuple(samples)


def synthesize_range(
    token: Optional[str],
    now: Optional[datetime] = None,
    rng: Optional[RandomSource] = None,
    profile: SeriesProfile = BALANCE,
) -> Series:
    """Resolve a range token and synthesize a series for it."""
    resolved = resolve(token)
    return synthesize(resolved.count, resolved.unit, now=now, rng=rng, profile=profile)
