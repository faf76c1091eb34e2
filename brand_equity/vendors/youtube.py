"""YouTube Data API v3 channel statistics."""

import logging
from typing import Any, Dict, Optional

import requests

from brand_equity.core.errors import UpstreamError

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_CHANNELS_URL = "https://www.googleapis.com/youtube/v3/channels"

REQUEST_TIMEOUT = 8


class YouTubeError(UpstreamError):
    """Raised when a channel lookup fails or finds nothing."""


def fetch_channel(api_key: str, channel_id: Optional[str] = None, username: Optional[str] = None) -> Dict[str, Any]:
    """Return the first channel item (statistics + snippet) for an id or legacy username."""
    params = {"part": "statistics,snippet", "key": api_key}
    if channel_id:
        params["id"] = channel_id
    elif username:
        params["forUsername"] = username
    else:
        raise ValueError("channel_id or username is required")

    try:
        response = _SESSION.get(_CHANNELS_URL, params=params, headers={"Accept": "application/json"}, timeout=REQUEST_TIMEOUT)
        data = response.json()
    except requests.RequestException as exc:
        raise YouTubeError(f"YouTube request failed: {exc}") from exc
    except ValueError as exc:
        raise YouTubeError("YouTube returned invalid JSON") from exc
    if not isinstance(data, dict):
        raise YouTubeError(f"YouTube returned {type(data).__name__}, expected object", status_code=response.status_code)

    if "error" in data:
        message = (data.get("error") or {}).get("message") or "Failed to fetch YouTube channel data"
        logger.error("YouTube API error: %s", message)
        raise YouTubeError(message, status_code=response.status_code)
    if response.status_code >= 400:
        raise YouTubeError(f"HTTP {response.status_code}", status_code=response.status_code)

    items = data.get("items") or []
    if not items:
        raise YouTubeError("Channel not found")
    return items[0]
