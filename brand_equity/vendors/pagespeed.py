"""PageSpeed Insights (Lighthouse) client."""

import logging
from typing import Any, Dict

import requests

from brand_equity.core.errors import UpstreamError

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_RUN_URL = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"

REQUEST_TIMEOUT = 30
CATEGORIES = ("performance", "accessibility", "best-practices", "seo")
STRATEGIES = ("mobile", "desktop")


class PageSpeedError(UpstreamError):
    """Raised when a PageSpeed run fails."""


def run_pagespeed(url: str, strategy: str, api_key: str) -> Dict[str, Any]:
    """Run one Lighthouse audit and return the raw response document."""
    params = [("url", url), ("key", api_key), ("strategy", strategy)]
    params.extend(("category", category) for category in CATEGORIES)
    try:
        response = _SESSION.get(_RUN_URL, params=params, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as exc:
        raise PageSpeedError(f"PageSpeed {strategy} run failed: {exc}") from exc
    if response.status_code >= 400:
        logger.error("PageSpeed %s run for %s returned HTTP %s", strategy, url, response.status_code)
        raise PageSpeedError(f"PageSpeed API error: {strategy}={response.status_code}", status_code=response.status_code)
    try:
        document = response.json()
    except ValueError as exc:
        raise PageSpeedError("PageSpeed returned invalid JSON") from exc
    if not isinstance(document, dict):
        raise PageSpeedError(f"PageSpeed returned {type(document).__name__}, expected object")
    return document
