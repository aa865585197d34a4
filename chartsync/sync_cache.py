"""
Sync cache for chart series.

One CacheEntry per time-range token, owned by a SyncCache instance:
- first observation hands out a synthesized placeholder and fetches at once
- observed tokens are re-fetched every poll interval, one fetch at a time
- data younger than the staleness window is reused without a new fetch
- a fetched series equal to the delivered one does not notify listeners
- transport failures keep the last good series (or the placeholder)
- responses apply in issuance order; late, older responses are dropped
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Protocol, Set, Tuple

from .config import Config
from .domain.models import BALANCE, Series, SeriesProfile
from .domain.synth import synthesize_range
from .errors import TransportError

logger = logging.getLogger(__name__)


class SeriesFetcher(Protocol):
    """Remote side of the cache (see providers.metrics.MetricsProvider)."""

    async def fetch(self, token: str) -> Series:
        ...


@dataclass
class FetchResult:
    """Outcome of one fetch attempt."""
    success: bool
    series: Optional[Series] = None
    error: Optional[TransportError] = None


@dataclass(frozen=True)
class ChartState:
    """What a chart consumes: the current series and whether it is still loading."""
    time_range: str
    series: Series
    is_loading: bool
    is_placeholder: bool = False


Listener = Callable[[ChartState], None]


@dataclass
class CacheEntry:
    """Cached series and polling state for one token."""
    token: str
    series: Optional[Series] = None
    fetched_at: Optional[float] = None
    is_placeholder: bool = False
    error: Optional[TransportError] = None
    observers: List["Observer"] = field(default_factory=list)
    poll_task: Optional[asyncio.Task] = None
    in_flight: Set[asyncio.Task] = field(default_factory=set)
    issued: int = 0
    applied: int = 0

    def is_stale(self, now: float, stale_time: float) -> bool:
        return self.fetched_at is None or now - self.fetched_at >= stale_time

    def snapshot(self) -> ChartState:
        return ChartState(
            time_range=self.token,
            series=self.series or (),
            is_loading=self.series is None,
            is_placeholder=self.is_placeholder,
        )


class Observer:
    """Handle returned by SyncCache.observe; close it to stop observing."""

    def __init__(self, cache: "SyncCache", entry: CacheEntry, listener: Optional[Listener]):
        self._cache = cache
        self._entry = entry
        self.listener = listener
        self._closed = False

    @property
    def time_range(self) -> str:
        return self._entry.token

    @property
    def state(self) -> ChartState:
        return self._entry.snapshot()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._cache._detach(self._entry, self)

    def _deliver(self, state: ChartState) -> None:
        if self.listener is None:
            return
        try:
            self.listener(state)
        except Exception:
            logger.exception("Listener for %s failed", state.time_range)


class SyncCache:
    """
    Keeps observed series fresh by polling a fetcher.

    Args:
        fetcher: Object with `async fetch(token) -> Series` raising TransportError
        poll_interval: Seconds between fetches while a token is observed
        stale_time: Seconds a successful result counts as fresh
        placeholder: Hand out synthesized data before the first fetch lands
        profile: Value shape of the synthesized placeholder
        placeholder_factory: Override for placeholder generation (token -> Series)
        clock: Monotonic clock in seconds, injectable for tests

    observe() must be called with a running event loop.
    """

    def __init__(
        self,
        fetcher: SeriesFetcher,
        poll_interval: float = 1.0,
        stale_time: float = 0.5,
        placeholder: bool = True,
        profile: SeriesProfile = BALANCE,
        placeholder_factory: Optional[Callable[[str], Series]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        if stale_time < 0:
            raise ValueError("stale_time must not be negative")

        self.fetcher = fetcher
        self.poll_interval = poll_interval
        self.stale_time = stale_time
        self.placeholder_enabled = placeholder
        self.profile = profile
        self.clock = clock
        self._placeholder_factory = placeholder_factory or (
            lambda token: synthesize_range(token, profile=profile)
        )
        self._entries: Dict[str, CacheEntry] = {}

    @classmethod
    def from_config(
        cls,
        config: Config,
        fetcher: SeriesFetcher,
        profile: SeriesProfile = BALANCE,
    ) -> "SyncCache":
        return cls(
            fetcher,
            poll_interval=config.poll_interval,
            stale_time=config.stale_time,
            placeholder=config.placeholder_enabled,
            profile=profile,
        )

    # ============== OBSERVATION ==============

    def observe(self, token: str, listener: Optional[Listener] = None) -> Observer:
        """
        Start observing `token`.

        The returned observer's `state` is usable immediately (placeholder
        data when enabled). `listener` is called with a new ChartState each
        time the series content for `token` changes.
        """
        loop = asyncio.get_running_loop()

        entry = self._entries.get(token)
        if entry is None:
            entry = CacheEntry(token=token)
            self._entries[token] = entry

        if entry.series is None and self.placeholder_enabled:
            entry.series = self._placeholder_factory(token)
            entry.is_placeholder = True

        observer = Observer(self, entry, listener)
        entry.observers.append(observer)

        if entry.in_flight:
            logger.debug("Fetch already in flight for %s", token)
        elif entry.is_stale(self.clock(), self.stale_time):
            self._issue(entry)
        else:
            logger.debug("Cache hit for %s (fresh)", token)

        if entry.poll_task is None:
            entry.poll_task = loop.create_task(self._poll(entry))
            logger.info("Started polling %s every %.3fs", token, self.poll_interval)

        return observer

    def get_state(self, token: str) -> Optional[ChartState]:
        entry = self._entries.get(token)
        return entry.snapshot() if entry is not None else None

    def is_polling(self, token: str) -> bool:
        entry = self._entries.get(token)
        return entry is not None and entry.poll_task is not None

    def tokens(self) -> Tuple[str, ...]:
        return tuple(self._entries)

    async def close(self) -> None:
        """Detach every observer and cancel all polling and fetches."""
        pending = []
        for entry in self._entries.values():
            for observer in entry.observers:
                observer._closed = True
            entry.observers.clear()
            if entry.poll_task is not None:
                pending.append(entry.poll_task)
            pending.extend(entry.in_flight)
            self._stop(entry)
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    def _detach(self, entry: CacheEntry, observer: Observer) -> None:
        if observer in entry.observers:
            entry.observers.remove(observer)
        if not entry.observers:
            self._stop(entry)

    def _stop(self, entry: CacheEntry) -> None:
        if entry.poll_task is not None:
            entry.poll_task.cancel()
            entry.poll_task = None
            logger.info("Stopped polling %s", entry.token)
        for task in list(entry.in_flight):
            task.cancel()
        entry.in_flight.clear()

    # ============== FETCHING ==============

    async def _poll(self, entry: CacheEntry) -> None:
        try:
            while True:
                await asyncio.sleep(self.poll_interval)
                if entry.in_flight:
                    logger.debug("Fetch still pending for %s, skipping poll cycle", entry.token)
                    continue
                self._issue(entry)
        except asyncio.CancelledError:
            logger.debug("Poll loop for %s cancelled", entry.token)
            raise

    def _issue(self, entry: CacheEntry) -> None:
        entry.issued += 1
        task = asyncio.get_running_loop().create_task(self._fetch(entry, entry.issued))
        entry.in_flight.add(task)
        task.add_done_callback(lambda done: self._fetch_done(entry, done))

    def _fetch_done(self, entry: CacheEntry, task: asyncio.Task) -> None:
        entry.in_flight.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Fetch for %s raised %s: %s", entry.token, type(exc).__name__, exc,
                exc_info=exc,
            )

    async def _attempt(self, token: str) -> FetchResult:
        try:
            series = await self.fetcher.fetch(token)
        except TransportError as exc:
            logger.warning("Fetch failed for %s: %s", token, exc)
            return FetchResult(success=False, error=exc)
        return FetchResult(success=True, series=tuple(series))

    async def _fetch(self, entry: CacheEntry, seq: int) -> None:
        result = await self._attempt(entry.token)

        if not entry.observers:
            logger.debug("Dropping response #%d for unobserved %s", seq, entry.token)
            return
        if seq < entry.applied:
            logger.debug(
                "Discarding out-of-order response #%d for %s (latest #%d)",
                seq, entry.token, entry.applied,
            )
            return

        entry.applied = seq
        self._apply(entry, result)

    def _apply(self, entry: CacheEntry, result: FetchResult) -> None:
        if not result.success:
            entry.error = result.error
            if entry.series is None:
                # Nothing to show yet: fall back to synthesized data
                entry.series = self._placeholder_factory(entry.token)
                entry.is_placeholder = True
                self._notify(entry)
            return

        entry.error = None
        entry.fetched_at = self.clock()
        if result.series == entry.series:
            entry.is_placeholder = False
            logger.debug("Series for %s unchanged, not notifying", entry.token)
            return

        entry.series = result.series
        entry.is_placeholder = False
        self._notify(entry)

    def _notify(self, entry: CacheEntry) -> None:
        state = entry.snapshot()
        for observer in list(entry.observers):
            observer._deliver(state)
