"""Main entry point: serve the metrics API or watch a chart feed."""

import argparse
import asyncio
import logging
import signal
import sys
from datetime import datetime, timezone
from typing import Optional, Sequence

import uvicorn
from dotenv import load_dotenv

from .chart import describe_range, y_axis_domain
from .config import Config
from .domain.models import get_profile
from .feed import FUNDS_IN_USE, ChartFeed
from .http_client import close_http_client, get_http_client
from .providers.metrics import MetricsProvider
from .sync_cache import ChartState, SyncCache
from .web_api import configure_api, web_api

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        level=getattr(logging, level, logging.INFO),
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def log_state(state: ChartState) -> None:
    """Console consumer: summarize each delivered update."""
    if not state.series:
        logger.info("%s: loading...", describe_range(state.time_range))
        return
    last = state.series[-1]
    totals = [sum(sample.values.values()) for sample in state.series]
    logger.info(
        "%s: %d samples%s, last %s %s, y-domain %s",
        describe_range(state.time_range),
        len(state.series),
        " (placeholder)" if state.is_placeholder else "",
        last.timestamp.isoformat(),
        dict(last.values),
        y_axis_domain(totals),
    )


def serve(config: Config) -> None:
    configure_api(latency=config.api_latency)
    logger.info("Starting metrics API on %s:%d", config.host, config.port)
    uvicorn.run(web_api, host=config.host, port=config.port, log_level=config.log_level.lower())


async def watch(
    config: Config,
    time_range: Optional[str],
    profile_name: str,
    duration: Optional[float],
    compact: bool,
) -> None:
    profile = get_profile(profile_name)
    http_client = get_http_client(config.http_timeout, config.max_concurrent_requests)
    semaphore = asyncio.Semaphore(config.max_concurrent_requests)
    provider = MetricsProvider(config, http_client, semaphore=semaphore, profile=profile)
    cache = SyncCache.from_config(config, provider, profile=profile)

    if time_range is None:
        time_range = config.compact_time_range if compact else config.default_time_range
    feed = ChartFeed(FUNDS_IN_USE, cache, time_range=time_range, listener=log_state)

    stop_event = asyncio.Event()

    def async_signal_handler(signum):
        logger.info("Signal %d received, shutting down gracefully...", signum)
        stop_event.set()

    loop = asyncio.get_running_loop()
    for signum in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(signum, lambda s=signum: async_signal_handler(s))
        except NotImplementedError:
            logger.debug("Signal handlers not supported on this platform")

    logger.info("Watching %s from %s at %s", time_range, config.api_base_url,
                datetime.now(timezone.utc).isoformat())
    try:
        log_state(feed.start())
        if duration is None:
            await stop_event.wait()
        else:
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=duration)
            except asyncio.TimeoutError:
                pass
    finally:
        feed.close()
        await cache.close()
        await close_http_client()
        logger.info("Shutdown complete")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chartsync", description=__doc__)
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("serve", help="Run the metrics API")

    watch_cmd = commands.add_parser("watch", help="Poll a time range and log updates")
    watch_cmd.add_argument("--range", dest="time_range", default=None,
                           help="Time range token (1h, 1d, 7d, 30d, 90d, 3m)")
    watch_cmd.add_argument("--profile", default="balance", choices=["balance", "traffic"])
    watch_cmd.add_argument("--duration", type=float, default=None,
                           help="Stop after this many seconds")
    watch_cmd.add_argument("--compact", action="store_true",
                           help="Use the compact (mobile) default range")
    return parser


def run(argv: Optional[Sequence[str]] = None) -> None:
    """Synchronous entry point."""
    load_dotenv()
    args = build_parser().parse_args(argv)
    config = Config.from_env()
    configure_logging(config.log_level)

    try:
        if args.command == "serve":
            serve(config)
        else:
            asyncio.run(watch(config, args.time_range, args.profile, args.duration, args.compact))
    except KeyboardInterrupt:
        logger.info("Stopped by user")
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    run()
