"""ScrapAPI scraping endpoints used for social profiles and Trustpilot pages."""

import logging
from typing import Any, Dict

import requests

from brand_equity.core.errors import UpstreamError

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_BASE_URL = "https://api.scrapapi.com/scrapers"

PROFILE_TIMEOUT = 15
TRUSTPILOT_TIMEOUT = 25


class ScrapApiError(UpstreamError):
    """Raised when a ScrapAPI scrape fails or returns an unusable body."""


def _scrape(path: str, url: str, api_key: str, timeout: int) -> Dict[str, Any]:
    params = {"api_key": api_key, "url": url}
    try:
        response = _SESSION.get(f"{_BASE_URL}/{path}", params=params, timeout=timeout)
    except requests.RequestException as exc:
        raise ScrapApiError(f"scrape of {url} failed: {exc}") from exc
    if response.status_code >= 400:
        raise ScrapApiError(f"scrape of {url} returned HTTP {response.status_code}", status_code=response.status_code)
    try:
        data = response.json()
    except ValueError as exc:
        raise ScrapApiError(f"scrape of {url} returned invalid JSON") from exc
    if not isinstance(data, dict):
        raise ScrapApiError(f"scrape of {url} returned {type(data).__name__}, expected object")
    return data


def scrape_social_profile(url: str, api_key: str) -> Dict[str, Any]:
    """Scrape a public social profile page and return the raw extracted fields."""
    logger.info("Scraping social profile %s", url)
    return _scrape("instagram", url, api_key, PROFILE_TIMEOUT)


def scrape_trustpilot(url: str, api_key: str) -> Dict[str, Any]:
    logger.info("Scraping Trustpilot page %s", url)
    return _scrape("trustpilot", url, api_key, TRUSTPILOT_TIMEOUT)
