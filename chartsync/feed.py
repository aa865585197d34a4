"""Chart feeds: one consumer per chart, switching between time ranges."""

import logging
from typing import Optional

from .sync_cache import ChartState, Listener, Observer, SyncCache

logger = logging.getLogger(__name__)

DEFAULT_TIME_RANGE = "90d"
COMPACT_TIME_RANGE = "7d"

FUNDS_IN_USE = "Funds in Use"
SALES_LEDGER = "Sales Ledger"


class ChartFeed:
    """
    Feeds one chart from a SyncCache.

    Holds the chart's selected range and a single observer on it. Selecting
    another range closes the old observer first, so the old range stops
    polling unless something else still observes it.
    """

    def __init__(
        self,
        title: str,
        cache: SyncCache,
        time_range: Optional[str] = None,
        compact: bool = False,
        listener: Optional[Listener] = None,
    ):
        self.title = title
        self.cache = cache
        self.listener = listener
        if time_range is None:
            time_range = COMPACT_TIME_RANGE if compact else DEFAULT_TIME_RANGE
        self._time_range = time_range
        self._observer: Optional[Observer] = None

    @property
    def time_range(self) -> str:
        return self._time_range

    @property
    def state(self) -> ChartState:
        if self._observer is None:
            raise RuntimeError(f"{self.title} feed is not started")
        return self._observer.state

    @property
    def started(self) -> bool:
        return self._observer is not None

    def start(self) -> ChartState:
        """Begin observing the current range (requires a running event loop)."""
        if self._observer is None:
            self._observer = self.cache.observe(self._time_range, self._on_change)
        return self._observer.state

    def select_range(self, time_range: str) -> ChartState:
        """Switch to another range; returns the new range's immediate state."""
        if time_range == self._time_range and self._observer is not None:
            return self._observer.state

        logger.info("%s: range %s -> %s", self.title, self._time_range, time_range)
        if self._observer is not None:
            self._observer.close()
            self._observer = None
        self._time_range = time_range
        return self.start()

    def close(self) -> None:
        if self._observer is not None:
            self._observer.close()
            self._observer = None

    def _on_change(self, state: ChartState) -> None:
        if self.listener is not None:
            self.listener(state)


def funds_in_use(cache: SyncCache, compact: bool = False, listener: Optional[Listener] = None) -> ChartFeed:
    return ChartFeed(FUNDS_IN_USE, cache, compact=compact, listener=listener)


def sales_ledger(cache: SyncCache, compact: bool = False, listener: Optional[Listener] = None) -> ChartFeed:
    return ChartFeed(SALES_LEDGER, cache, compact=compact, listener=listener)
