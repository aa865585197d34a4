"""Shared HTTP client for the metrics backend."""

import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

# Global HTTP client (for connection pooling)
_http_client: Optional[httpx.AsyncClient] = None


def get_http_client(timeout: float = 30, max_connections: int = 10) -> httpx.AsyncClient:
    """Get or create global HTTP client."""
    global _http_client
    if _http_client is None:
        _http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            limits=httpx.Limits(
                max_keepalive_connections=max_connections,
                max_connections=max_connections,
            ),
        )
        logger.debug("Created shared HTTP client (timeout=%ss)", timeout)
    return _http_client


async def close_http_client() -> None:
    """Close global HTTP client."""
    global _http_client
    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None
        logger.debug("Closed shared HTTP client")
