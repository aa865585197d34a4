"""Remote fetch adapter for the metrics endpoint."""

import asyncio
import contextlib
import logging
from typing import Optional

import httpx

from ..config import Config
from ..domain.models import BALANCE, Series, SeriesProfile, series_from_payload
from ..errors import TransportError

logger = logging.getLogger(__name__)

METRICS_PATH = "/api/metrics"


class MetricsProvider:
    """
    Fetches a series for a time range from `GET /api/metrics`.

    Every failure surfaces as TransportError:
    - non-2xx status
    - network errors and timeouts (any httpx.HTTPError)
    - payloads without a valid "data" series

    There is no retry here; the sync cache polls on a fixed cadence and the
    next cycle is the retry.
    """

    def __init__(
        self,
        config: Config,
        http_client: httpx.AsyncClient,
        semaphore: Optional[asyncio.Semaphore] = None,
        profile: SeriesProfile = BALANCE,
    ):
        self.config = config
        self.http_client = http_client
        self.semaphore = semaphore
        self.profile = profile

    @property
    def url(self) -> str:
        return f"{self.config.api_base_url}{METRICS_PATH}"

    def _params(self, token: str) -> dict:
        params = {"timeRange": token}
        if self.profile is not BALANCE:
            params["profile"] = self.profile.name
        return params

    async def fetch(self, token: str) -> Series:
        """
        Fetch the series for `token`.

        Raises:
            TransportError: on any failure
        """
        guard = self.semaphore if self.semaphore is not None else contextlib.nullcontext()
        async with guard:
            try:
                response = await self.http_client.get(
                    self.url,
                    params=self._params(token),
                    timeout=self.config.http_timeout,
                )
            except httpx.HTTPError as exc:
                raise TransportError(f"GET {self.url} failed: {exc}") from exc

        if not response.is_success:
            raise TransportError(
                f"GET {self.url} returned {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
            series = series_from_payload(payload["data"])
        except (ValueError, KeyError, TypeError) as exc:
            raise TransportError(
                f"Malformed metrics payload for {token}: {exc}",
                status_code=response.status_code,
            ) from exc

        logger.debug("Fetched %d samples for %s", len(series), token)
        return series
