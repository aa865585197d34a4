"""
Range Resolver - maps a time-range token to a sample count and step.

Unknown tokens are not an error: they resolve to the quarterly 90-day view,
the same as "90d" and "3m".
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from .models import TimeUnit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedRange:
    """Concrete shape of a time range."""
    count: int
    unit: TimeUnit


QUARTER = ResolvedRange(90, TimeUnit.DAY)

RANGES: Dict[str, ResolvedRange] = {
    "1h": ResolvedRange(60, TimeUnit.MINUTE),
    "1d": ResolvedRange(24, TimeUnit.HOUR),
    "7d": ResolvedRange(7, TimeUnit.DAY),
    "30d": ResolvedRange(30, TimeUnit.DAY),
    "90d": QUARTER,
    "3m": QUARTER,
}

RANGE_TOKENS = tuple(RANGES)


def is_known_range(token: Optional[str]) -> bool:
    return token in RANGES


def resolve(token: Optional[str]) -> ResolvedRange:
    """
    Resolve a range token.

    Args:
        token: One of "1h", "1d", "7d", "30d", "90d", "3m"

    Returns:
        ResolvedRange(count, unit); 90 days for anything unrecognized
    """
    resolved = RANGES.get(token) if token else None
    if resolved is None:
        logger.debug("Unrecognized time range %r, using 90-day default", token)
        return QUARTER
    return resolved
