"""Configuration management for the chart sync service."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


def _env_ms(name: str, default: int) -> float:
    """Read a millisecond setting and return seconds."""
    value = int(os.getenv(name, str(default)))
    if value < 0:
        raise ValueError(f"{name} must not be negative")
    return value / 1000.0


@dataclass
class Config:
    """Application configuration loaded from environment variables."""

    # Metrics backend
    api_base_url: str = "http://127.0.0.1:8000"
    api_latency: float = 0.2  # seconds injected by the mock endpoint

    # Sync cache (seconds)
    poll_interval: float = 1.0
    stale_time: float = 0.5
    placeholder_enabled: bool = True

    # Chart defaults
    default_time_range: str = "90d"
    compact_time_range: str = "7d"

    # Network settings
    http_timeout: int = 30
    max_concurrent_requests: int = 5

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from environment variables."""
        return cls(
            api_base_url=os.getenv("CHARTSYNC_API_BASE_URL", "http://127.0.0.1:8000").strip().rstrip("/"),
            api_latency=_env_ms("CHARTSYNC_API_LATENCY_MS", 200),
            poll_interval=_env_ms("CHARTSYNC_POLL_INTERVAL_MS", 1000),
            stale_time=_env_ms("CHARTSYNC_STALE_TIME_MS", 500),
            placeholder_enabled=_env_bool("CHARTSYNC_PLACEHOLDER", True),
            default_time_range=os.getenv("CHARTSYNC_DEFAULT_RANGE", "90d").strip() or "90d",
            compact_time_range=os.getenv("CHARTSYNC_COMPACT_RANGE", "7d").strip() or "7d",
            http_timeout=int(os.getenv("CHARTSYNC_HTTP_TIMEOUT", "30")),
            max_concurrent_requests=int(os.getenv("CHARTSYNC_MAX_CONCURRENT_REQUESTS", "5")),
            host=os.getenv("CHARTSYNC_HOST", "127.0.0.1").strip() or "127.0.0.1",
            port=int(os.getenv("CHARTSYNC_PORT", "8000")),
            log_level=os.getenv("CHARTSYNC_LOG_LEVEL", "INFO").strip().upper() or "INFO",
        )
