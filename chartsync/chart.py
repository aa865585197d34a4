"""Area chart presentation helpers: axis domain, labels and PNG rendering."""

import io
import logging
import math
from datetime import datetime
from typing import Iterable, Optional, Tuple

import matplotlib
import matplotlib.dates as mdates
import matplotlib.pyplot as plt
import pandas as pd

from .domain.models import Series

matplotlib.use("Agg")  # Non-GUI backend

logger = logging.getLogger(__name__)

AXIS_STEP = 1000
DEFAULT_PAD = 1000

RANGE_DESCRIPTIONS = {
    "1h": "Last hour",
    "1d": "Last 24 hours",
    "7d": "Last 7 days",
    "30d": "Last 30 days",
    "90d": "Last 3 months",
}


def describe_range(token: Optional[str]) -> str:
    """Human label for a range token ("Last 3 months" by default)."""
    return RANGE_DESCRIPTIONS.get(token or "", "Last 3 months")


def format_tick(timestamp: datetime, token: Optional[str]) -> str:
    """Axis/tooltip label: clock time for the hourly view, month + day otherwise."""
    if token == "1h":
        hour = timestamp.strftime("%I").lstrip("0") or "12"
        return f"{hour}:{timestamp:%M} {timestamp:%p}"
    return f"{timestamp:%b} {timestamp.day}"


def y_axis_domain(values: Iterable[float]) -> Optional[Tuple[int, int]]:
    """
    Y-axis bounds rounded outward to the nearest 1000.

    Pads by 10% of the value span, or by 1000 when all values are equal.
    Returns None when there are no values.
    """
    values = list(values)
    if not values:
        return None
    low, high = min(values), max(values)
    pad = (high - low) * 0.1 or DEFAULT_PAD
    return (
        math.floor((low - pad) / AXIS_STEP) * AXIS_STEP,
        math.ceil((high + pad) / AXIS_STEP) * AXIS_STEP,
    )


def series_to_frame(series: Series) -> pd.DataFrame:
    """Series as a DataFrame indexed by timestamp, one column per channel."""
    if not series:
        return pd.DataFrame()
    frame = pd.DataFrame(
        [dict(sample.values) for sample in series],
        index=pd.DatetimeIndex([sample.timestamp for sample in series], name="date"),
    )
    return frame


def render_area_chart(
    series: Series,
    title: str,
    token: Optional[str] = None,
    figsize: tuple = (10, 4),
) -> Optional[bytes]:
    """
    Render a series as a stacked area chart PNG.

    Args:
        series: Series to plot (one area per channel)
        title: Chart title
        token: Active range token, drives the subtitle and tick labels
        figsize: Figure size (width, height) in inches

    Returns:
        PNG bytes or None when there are fewer than two samples
    """
    if len(series) < 2:
        logger.debug("Not enough samples to render %s", title)
        return None

    frame = series_to_frame(series)
    totals = frame.sum(axis=1)

    fig, ax = plt.subplots(figsize=figsize)
    try:
        ax.stackplot(
            frame.index.to_pydatetime(),
            *[frame[column].to_numpy() for column in frame.columns],
            labels=list(frame.columns),
            alpha=0.6,
        )
        domain = y_axis_domain(totals)
        if domain is not None:
            ax.set_ylim(*domain)

        ax.set_title(f"{title}\n{describe_range(token)}", fontsize=12)
        ax.grid(True, axis="y", alpha=0.3)
        ax.xaxis.set_major_formatter(
            plt.FuncFormatter(lambda x, p: format_tick(mdates.num2date(x), token))
        )
        if len(frame.columns) > 1:
            ax.legend(loc="upper left")
        fig.tight_layout()

        buf = io.BytesIO()
        fig.savefig(buf, format="png", dpi=100)
    finally:
        plt.close(fig)

    logger.debug("%s chart rendered with %d samples", title, len(series))
    return buf.getvalue()
