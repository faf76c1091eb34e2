"""Homepage fetching and analytics tag discovery."""

from __future__ import annotations

import logging
import re
from typing import List, Optional
from urllib.parse import urlparse, urlunparse

import requests
from bs4 import BeautifulSoup

from brand_equity.core.errors import UpstreamError

logger = logging.getLogger(__name__)
_SESSION = requests.Session()

USER_AGENT = "BrandEquityAnalyzer/1.0 (+https://brand-equity.app/contact)"
REQUEST_TIMEOUT = 10

GA4_ID_REGEX = re.compile(r"\bG-[A-Z0-9]{6,}\b")
GTM_ID_REGEX = re.compile(r"\bGTM-[A-Z0-9]{6,}\b")


class SiteFetchError(UpstreamError):
    """Raised when the business website cannot be fetched."""


def sanitize_website(raw_url: str) -> Optional[str]:
    """Normalise raw website strings into absolute https URLs."""

    if not raw_url:
        return None

    url = raw_url.strip()
    if not url:
        return None

    parsed = urlparse(url, scheme="https")
    if not parsed.netloc:
        parsed = urlparse(f"https://{url}")

    if not parsed.netloc:
        return None

    normalized_path = parsed.path or "/"
    normalized = parsed._replace(path=normalized_path, fragment="")
    return urlunparse(normalized)


def fetch_html(url: str) -> str:
    """Fetch a page following redirects and return its markup."""
    headers = {"User-Agent": USER_AGENT, "Accept": "text/html,application/xhtml+xml"}
    try:
        response = _SESSION.get(url, headers=headers, timeout=REQUEST_TIMEOUT, allow_redirects=True)
    except requests.RequestException as exc:
        raise SiteFetchError(f"Failed to fetch site: {exc}") from exc
    if response.status_code >= 400:
        raise SiteFetchError(f"Failed to fetch site: {response.status_code}", status_code=response.status_code)
    return response.text


def extract_tracking_ids(html: str) -> List[str]:
    """Return GA4 (``G-``) and Tag Manager (``GTM-``) ids found in the page, in first-seen order."""
    soup = BeautifulSoup(html or "", "html.parser")
    chunks: List[str] = []
    for script in soup.find_all("script"):
        if script.get("src"):
            chunks.append(script["src"])
        if script.string:
            chunks.append(script.string)
    for frame in soup.find_all("iframe", src=True):
        chunks.append(frame["src"])

    # Script and iframe ids lead the order; the whole document is scanned last.
    chunks.append(html or "")

    found: List[str] = []
    for chunk in chunks:
        for regex in (GA4_ID_REGEX, GTM_ID_REGEX):
            for match in regex.findall(chunk):
                if match not in found:
                    found.append(match)
    logger.debug("Discovered tracking ids: %s", found)
    return found


def first_measurement_id(ids: List[str]) -> Optional[str]:
    return next((tag for tag in ids if tag.startswith("G-")), None)
