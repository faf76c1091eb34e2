"""Social follower handlers: scraped profiles plus per-provider follower lookups."""

import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from brand_equity.core.concurrency import fan_out
from brand_equity.core.config import get_settings
from brand_equity.core.errors import UpstreamError
from brand_equity.etl.followers import extract_followers, extract_identifier, parse_count
from brand_equity.models import SocialProfile
from brand_equity.vendors import github, scrapapi, serp_client, twitter, youtube

logger = logging.getLogger(__name__)

Response = Tuple[Dict[str, Any], int]

# YouTube channel ids; anything else in a channel URL is a handle or legacy username.
_CHANNEL_ID = re.compile(r"^UC[\w-]{22}$")


def _profiles_from(payload: Dict[str, Any]) -> Optional[List[SocialProfile]]:
    raw = payload.get("profiles")
    if not isinstance(raw, list) or not all(isinstance(item, dict) for item in raw):
        return None
    return [SocialProfile.from_payload(item) for item in raw]


def fetch_social_followers(payload: Dict[str, Any]) -> Response:
    """Scrape every profile in parallel and resolve a follower count for each."""
    profiles = _profiles_from(payload)
    if profiles is None:
        return {"success": False, "error": "profiles must be a list of objects"}, 400
    if not profiles:
        return {"success": True, "profiles": [], "totalFollowers": 0}, 200

    api_key = get_settings().scrapapi_key
    if not api_key:
        logger.warning("SCRAPAPI_KEY not configured - follower counts unavailable")
        for profile in profiles:
            profile.followers = None
        return {
            "success": True,
            "profiles": [profile.to_payload() for profile in profiles],
            "totalFollowers": 0,
            "error": "ScrapAPI key not configured",
        }, 200

    def _resolve(profile: SocialProfile) -> SocialProfile:
        if not profile.url:
            raise ValueError(f"{profile.platform} profile has no url")
        data = scrapapi.scrape_social_profile(profile.url, api_key)
        profile.followers = extract_followers(data, profile.platform)
        profile.verified = bool(data.get("verified") or profile.verified)
        return profile

    resolved = fan_out(_resolve, profiles)
    enriched = []
    for original, result in zip(profiles, resolved):
        if result is None:
            original.followers = None
            result = original
        enriched.append(result)

    total = sum(profile.followers for profile in enriched if profile.followers is not None)
    logger.info("Resolved followers for %d profiles, total=%d", len(enriched), total)
    return {"success": True, "profiles": [profile.to_payload() for profile in enriched], "totalFollowers": total}, 200


def _native_followers(platform: str, identifier: str, settings) -> Optional[Tuple[Optional[int], str]]:
    """Ask the platform's own API for a count; ``None`` when no native API applies."""
    if platform == "youtube" and settings.youtube_api_key:
        if _CHANNEL_ID.match(identifier):
            channel = youtube.fetch_channel(settings.youtube_api_key, channel_id=identifier)
        else:
            channel = youtube.fetch_channel(settings.youtube_api_key, username=identifier)
        stats = channel.get("statistics") or {}
        count = None if stats.get("hiddenSubscriberCount") else parse_count(stats.get("subscriberCount"))
        return count, "youtube-api"
    if platform == "github":
        user = github.fetch_user(identifier, settings.github_token or None)
        return parse_count(user.get("followers")), "github-api"
    if platform in ("twitter", "x") and settings.twitter_bearer_token:
        return twitter.fetch_followers_count(identifier, settings.twitter_bearer_token), "x-api"
    return None


def fetch_unified_followers(payload: Dict[str, Any]) -> Response:
    """Follower counts from official platform APIs, falling back to a ScrapAPI scrape per profile."""
    profiles = _profiles_from(payload)
    if not profiles:
        return {"success": False, "error": "profiles must be a non-empty list of objects"}, 400

    settings = get_settings()

    def _resolve(profile: SocialProfile) -> Dict[str, Any]:
        platform = profile.platform.lower()
        identifier = extract_identifier(profile.url, platform)
        followers, source = None, None

        if identifier:
            try:
                native = _native_followers(platform, identifier, settings)
            except UpstreamError as exc:
                logger.info("Native %s lookup for %s failed, falling back: %s", platform, identifier, exc)
                native = None
            if native is not None:
                followers, source = native

        if followers is None and profile.url and settings.scrapapi_key:
            try:
                data = scrapapi.scrape_social_profile(profile.url, settings.scrapapi_key)
            except UpstreamError as exc:
                logger.warning("ScrapAPI fallback failed for %s: %s", profile.url, exc)
            else:
                followers, source = extract_followers(data, platform), "scrapapi"

        entry = profile.to_payload()
        entry.update(
            {
                "username": identifier or entry.get("username"),
                "followers": followers,
                "source": source if followers is not None else None,
            }
        )
        if followers is None:
            entry["error"] = "Could not fetch follower count"
        return entry

    results = fan_out(_resolve, profiles)
    entries = []
    for profile, result in zip(profiles, results):
        if result is None:
            result = dict(profile.to_payload(), followers=None, source=None, error="lookup failed")
        entries.append(result)

    total = sum(entry["followers"] for entry in entries if entry["followers"] is not None)
    return {"success": True, "profiles": entries, "totalFollowers": total}, 200


def fetch_serpapi_followers(payload: Dict[str, Any]) -> Response:
    """Instagram and Facebook follower counts through SerpAPI; other platforms are reported unsupported."""
    profiles = _profiles_from(payload)
    if profiles is None:
        return {"success": False, "error": "profiles must be a list of objects"}, 400

    api_key = get_settings().serpapi_key

    def _lookup(profile: SocialProfile) -> Dict[str, Any]:
        entry = profile.to_payload()
        entry.update({"followers": None, "source": "SerpAPI"})
        if not serp_client.resolve_platform(profile.platform):
            entry["error"] = f"Platform {profile.platform} not supported by SerpAPI"
            return entry
        username = serp_client.extract_username(profile.url or "", profile.platform)
        if not username:
            entry["error"] = "Could not extract username from URL"
            return entry
        entry["username"] = username
        if not api_key:
            entry["error"] = "SerpAPI key not configured"
            return entry
        try:
            data = serp_client.fetch_profile(profile.platform, username, api_key)
        except (UpstreamError, ValueError) as exc:
            logger.warning("SerpAPI lookup failed for %s/%s: %s", profile.platform, username, exc)
            entry["error"] = str(exc)
            return entry
        entry["followers"] = serp_client.parse_followers(data, profile.platform)
        return entry

    results = fan_out(_lookup, profiles)
    entries = []
    for profile, result in zip(profiles, results):
        if result is None:
            result = dict(profile.to_payload(), followers=None, source="SerpAPI", error="lookup failed")
        entries.append(result)

    envelope: Dict[str, Any] = {"success": True, "profiles": entries}
    if not api_key:
        envelope["error"] = "SerpAPI key not configured"
    return envelope, 200


def fetch_github_followers(payload: Dict[str, Any]) -> Response:
    username = str(payload.get("username") or "").strip()
    if not username:
        return {"success": False, "error": "GitHub username is required"}, 400

    try:
        user = github.fetch_user(username, get_settings().github_token or None)
    except UpstreamError as exc:
        return {"success": True, "data": {"followers": None}, "error": str(exc)}, 200

    return {
        "success": True,
        "data": {
            "followers": user.get("followers"),
            "following": user.get("following"),
            "public_repos": user.get("public_repos"),
            "name": user.get("name"),
            "bio": user.get("bio"),
            "avatar": user.get("avatar_url"),
            "company": user.get("company"),
            "blog": user.get("blog"),
        },
    }, 200


def fetch_youtube_followers(payload: Dict[str, Any]) -> Response:
    channel_id = str(payload.get("channelId") or "").strip() or None
    channel_username = str(payload.get("channelUsername") or "").strip() or None
    if not channel_id and not channel_username:
        return {"success": False, "error": "Either channelId or channelUsername is required"}, 400

    api_key = get_settings().youtube_api_key
    if not api_key:
        return {"success": True, "data": {"subscribers": None}, "error": "YouTube API key not configured"}, 200

    try:
        channel = youtube.fetch_channel(api_key, channel_id=channel_id, username=channel_username)
    except UpstreamError as exc:
        return {"success": True, "data": {"subscribers": None}, "error": str(exc)}, 200

    stats = channel.get("statistics") or {}
    snippet = channel.get("snippet") or {}
    subscribers = None if stats.get("hiddenSubscriberCount") else parse_count(stats.get("subscriberCount"))
    return {
        "success": True,
        "data": {
            "subscribers": subscribers,
            "views": parse_count(stats.get("viewCount")),
            "videos": parse_count(stats.get("videoCount")),
            "title": snippet.get("title"),
            "description": snippet.get("description"),
            "thumbnail": ((snippet.get("thumbnails") or {}).get("medium") or {}).get("url"),
        },
    }, 200


def fetch_twitter_followers(payload: Dict[str, Any]) -> Response:
    username = str(payload.get("username") or "").strip().lstrip("@")
    if not username:
        return {"success": False, "error": "Username is required"}, 400

    envelope: Dict[str, Any] = {"success": True, "username": username, "followers_count": None}
    bearer_token = get_settings().twitter_bearer_token
    if not bearer_token:
        envelope["error"] = "Twitter API credentials not configured"
        return envelope, 200

    try:
        envelope["followers_count"] = twitter.fetch_followers_count(username, bearer_token)
    except UpstreamError as exc:
        envelope["error"] = str(exc)
        return envelope, 200

    if envelope["followers_count"] is None:
        envelope["error"] = "Could not fetch followers count"
    return envelope, 200
