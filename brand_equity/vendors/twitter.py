"""X (Twitter) API v2 user lookup."""

import logging
from typing import Optional

import requests

from brand_equity.core.errors import UpstreamError

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_BASE_URL = "https://api.x.com/2"

REQUEST_TIMEOUT = 8


class TwitterError(UpstreamError):
    """Raised when the X API rejects or fails a user lookup."""


def fetch_followers_count(username: str, bearer_token: str) -> Optional[int]:
    """Return ``public_metrics.followers_count`` for a handle, or ``None`` if absent."""
    url = f"{_BASE_URL}/users/by/username/{username.lstrip('@')}"
    headers = {"Authorization": f"Bearer {bearer_token}", "User-Agent": "BrandEquityAnalyzer/1.0"}
    try:
        response = _SESSION.get(url, params={"user.fields": "public_metrics"}, headers=headers, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as exc:
        raise TwitterError(f"X API request failed: {exc}") from exc

    if response.status_code >= 400:
        logger.error("X API failed (%s): %s", response.status_code, response.text[:300])
        raise TwitterError(f"HTTP {response.status_code}", status_code=response.status_code)
    try:
        data = response.json()
    except ValueError as exc:
        raise TwitterError("X API returned invalid JSON") from exc
    if not isinstance(data, dict):
        raise TwitterError(f"X API returned {type(data).__name__}, expected object")

    count = ((data.get("data") or {}).get("public_metrics") or {}).get("followers_count")
    if isinstance(count, int) and not isinstance(count, bool) and count >= 0:
        return count
    return None
