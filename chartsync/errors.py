"""Errors raised at the remote fetch boundary."""

from typing import Optional


class TransportError(Exception):
    """Fetching a series failed: non-2xx status, network error or bad payload."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
