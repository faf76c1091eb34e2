"""SerpAPI helpers for Instagram and Facebook follower lookups."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional

from serpapi import GoogleSearch

from brand_equity.core.errors import UpstreamError
from brand_equity.etl.followers import parse_count

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10

# platform -> (SerpAPI engine, URL pattern capturing the username)
SUPPORTED_PLATFORMS = {
    "instagram": ("instagram_user", re.compile(r"instagram\.com/([^/?#]+)")),
    "facebook": ("facebook_user", re.compile(r"facebook\.com/(?:pages/[^/]+/)?([^/?#]+)")),
}

# Nested objects SerpAPI uses for profile metadata, per platform.
_INFO_KEYS = {"instagram": "user_info", "facebook": "page_info"}
_FALLBACK_FIELDS = {"instagram": ("followers", "followers_count"), "facebook": ("followers", "fans")}


class SerpApiError(UpstreamError):
    """Raised when SerpAPI returns an error response or an empty payload."""


def resolve_platform(platform: str) -> Optional[str]:
    lowered = (platform or "").lower()
    for name in SUPPORTED_PLATFORMS:
        if name in lowered:
            return name
    return None


def extract_username(url: str, platform: str) -> Optional[str]:
    resolved = resolve_platform(platform)
    if not resolved or not url:
        return None
    match = SUPPORTED_PLATFORMS[resolved][1].search(url)
    return match.group(1) if match else None


def build_serpapi_params(platform: str, username: str, api_key: str) -> Dict[str, Any]:
    """Construct SerpAPI request parameters for a profile lookup."""
    resolved = resolve_platform(platform)
    if not resolved:
        raise ValueError(f"SerpAPI does not support platform {platform!r}")
    if not username or not username.strip():
        raise ValueError("Username must be provided for SerpAPI lookups.")

    engine = SUPPORTED_PLATFORMS[resolved][0]
    return {"engine": engine, "username": username.strip(), "api_key": api_key}


def fetch_profile(platform: str, username: str, api_key: str) -> Dict[str, Any]:
    """Call SerpAPI once and return the raw JSON response."""
    params = build_serpapi_params(platform, username, api_key)
    logger.info("Calling SerpAPI engine=%s username=%s", params["engine"], params["username"])

    search = GoogleSearch(params)
    search.timeout = REQUEST_TIMEOUT
    try:
        data = search.get_dict()
    except Exception as exc:  # noqa: BLE001
        raise SerpApiError(f"SerpAPI request failed: {exc}") from exc
    if not data:
        raise SerpApiError("SerpAPI returned an empty payload.")
    if not isinstance(data, dict):
        raise SerpApiError(f"SerpAPI returned {type(data).__name__}, expected object")
    if "error" in data:
        raise SerpApiError(f"SerpAPI returned an error response: {data.get('error')}")
    return data


def parse_followers(data: Optional[Dict[str, Any]], platform: str) -> Optional[int]:
    """Extract a follower count from a SerpAPI profile response."""
    resolved = resolve_platform(platform)
    if not data or not resolved:
        return None

    info = data.get(_INFO_KEYS[resolved]) or {}
    candidates = [info.get("followers_count")]
    candidates.extend(data.get(name) for name in _FALLBACK_FIELDS[resolved])
    for value in candidates:
        count = parse_count(value)
        if count is not None and count > 0:
            return count
    return None
