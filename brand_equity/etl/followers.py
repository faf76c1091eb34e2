"""Follower-count extraction from heterogeneous scraper payloads."""

import logging
import math
import re
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# Tried in order; the first field holding a positive count wins.
FOLLOWER_FIELDS = (
    "followers",
    "follower_count",
    "followers_count",
    "followerCount",
    "subscriber_count",
    "subscribers",
    "fans",
    "fan_count",
    "user_followers",
    "stats.followers",
    "metrics.followers",
    "data.followers",
)

# Consulted only when no generic field matched. These accept a measured zero.
PLATFORM_FIELDS = {
    "instagram": ("edge_followed_by.count", "user.follower_count", "user.edge_followed_by.count"),
    "twitter": ("public_metrics.followers_count", "data.public_metrics.followers_count", "user.followers_count"),
    "x": ("public_metrics.followers_count", "data.public_metrics.followers_count", "user.followers_count"),
    "facebook": ("page_info.followers_count", "likes", "fan_count"),
    "tiktok": ("stats.followerCount", "userInfo.stats.followerCount", "authorStats.followerCount"),
    "linkedin": ("followersCount", "company.follower_count", "company.followers"),
    "youtube": ("statistics.subscriberCount", "subscriberCount", "channel.subscriber_count"),
    "twitch": ("total", "channel.followers"),
    "github": ("user.followers", "profile.followers"),
    "pinterest": ("follower_count", "user.follower_count"),
}

_SUFFIXES = {"k": 1_000, "m": 1_000_000, "b": 1_000_000_000}
_ABBREVIATED = re.compile(r"^\s*([\d.,]+)\s*([kmb])\b", re.IGNORECASE)

_URL_PATTERNS = {
    "youtube": re.compile(r"youtube\.com/(?:@|c/|user/|channel/)([^/?#]+)"),
    "github": re.compile(r"github\.com/([^/?#]+)"),
    "twitter": re.compile(r"(?:twitter|x)\.com/@?([^/?#]+)"),
    "x": re.compile(r"(?:twitter|x)\.com/@?([^/?#]+)"),
    "instagram": re.compile(r"instagram\.com/([^/?#]+)"),
    "tiktok": re.compile(r"tiktok\.com/@?([^/?#]+)"),
    "linkedin": re.compile(r"linkedin\.com/(?:in/|company/)?([^/?#]+)"),
}


def get_nested(data: Any, dotted: str) -> Any:
    """Look up ``a.b.c`` in nested dicts, returning ``None`` on any miss."""
    current = data
    for part in dotted.split("."):
        if not isinstance(current, dict) or part not in current:
            return None
        current = current[part]
    return current


def parse_count(value: Any) -> Optional[int]:
    """Turn ``1234``, ``"12,345"``, ``"1.2M"`` or ``"3K followers"`` into an int."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, float):
        return int(value) if math.isfinite(value) and value >= 0 else None
    if not isinstance(value, str):
        return None

    try:
        number = float(value.strip().replace(",", ""))
    except ValueError:
        pass
    else:
        return int(number) if math.isfinite(number) and number >= 0 else None

    match = _ABBREVIATED.match(value)
    if match:
        try:
            number = float(match.group(1).replace(",", ""))
        except ValueError:
            return None
        return int(round(number * _SUFFIXES[match.group(2).lower()]))

    digits = "".join(ch for ch in value if ch.isdigit())
    return int(digits) if digits else None


def extract_followers(data: Optional[Dict[str, Any]], platform: str) -> Optional[int]:
    """Resolve a follower count from a scraped profile payload."""
    if not isinstance(data, dict):
        return None

    for field_name in FOLLOWER_FIELDS:
        count = parse_count(get_nested(data, field_name))
        if count is not None and count > 0:
            return count

    for field_name in PLATFORM_FIELDS.get((platform or "").lower(), ()):
        count = parse_count(get_nested(data, field_name))
        if count is not None:
            logger.debug("Resolved %s followers from platform field %s", platform, field_name)
            return count
    return None


def extract_identifier(url: Optional[str], platform: str) -> Optional[str]:
    """Pull the username or channel handle out of a profile URL."""
    pattern = _URL_PATTERNS.get((platform or "").lower())
    if not url or not pattern:
        return None
    match = pattern.search(url)
    return match.group(1) if match else None
