"""Web API - mock metrics backend serving synthesized chart series."""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query, status
from pydantic import BaseModel

from .domain.models import get_profile, series_to_payload
from .domain.resolver import is_known_range
from .domain.synth import synthesize_range

logger = logging.getLogger(__name__)

# Artificial latency to emulate a real backend (seconds)
_latency = 0.2


def configure_api(latency: Optional[float] = None) -> None:
    """Configure runtime knobs of the API."""
    global _latency
    if latency is not None:
        if latency < 0:
            raise ValueError("latency must not be negative")
        _latency = latency


# ============== PYDANTIC MODELS ==============

class MetricsResponse(BaseModel):
    data: List[Dict[str, Any]]


# ============== FASTAPI APP ==============

web_api = FastAPI(title="Chart Metrics API")


@web_api.get("/healthz")
async def healthz():
    """Unauthenticated health probe endpoint."""
    return {"status": "ok"}


@web_api.get("/api/metrics", response_model=MetricsResponse)
async def api_metrics(
    time_range: str = Query("3m", alias="timeRange"),
    profile: str = Query("balance"),
):
    """
    Synthesized series for a time range.

    Unknown ranges get the 90-day series. `profile` selects the value shape:
    "balance" (single channel) or "traffic" (desktop + mobile).
    """
    try:
        series_profile = get_profile(profile)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    if not is_known_range(time_range):
        logger.debug("Unknown timeRange %r requested, serving 90 days", time_range)

    if _latency > 0:
        await asyncio.sleep(_latency)

    series = synthesize_range(time_range, profile=series_profile)
    return {"data": series_to_payload(series)}
