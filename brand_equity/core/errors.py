"""Exception types shared by the provider adapters."""

from typing import Optional


class UpstreamError(RuntimeError):
    """Raised when a third-party provider call does not yield usable data."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MergeDepthError(ValueError):
    """Raised when a JSON blob nests deeper than the merge allows."""
