"""Domain layer - series models, range resolution and synthesis."""

from .models import (
    BALANCE,
    TRAFFIC,
    ChannelRange,
    Sample,
    Series,
    SeriesProfile,
    TimeUnit,
    get_profile,
)
from .resolver import RANGE_TOKENS, ResolvedRange, resolve
from .synth import synthesize, synthesize_range

__all__ = [
    "BALANCE",
    "TRAFFIC",
    "ChannelRange",
    "Sample",
    "Series",
    "SeriesProfile",
    "TimeUnit",
    "get_profile",
    "RANGE_TOKENS",
    "ResolvedRange",
    "resolve",
    "synthesize",
    "synthesize_range",
]
