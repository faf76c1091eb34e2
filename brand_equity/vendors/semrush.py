"""SEMrush Analytics API client (semicolon separated CSV responses)."""

import logging
from typing import List, Optional

import requests

from brand_equity.core.errors import UpstreamError

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_API_URL = "https://api.semrush.com/"

REQUEST_TIMEOUT = 15
NOTHING_FOUND = "Nothing found."


class SemrushError(UpstreamError):
    """Raised when a SEMrush report call fails."""


def _report(params: dict) -> Optional[List[str]]:
    try:
        response = _SESSION.get(_API_URL, params=params, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as exc:
        raise SemrushError(f"SEMrush {params['type']} request failed: {exc}") from exc
    if response.status_code >= 400:
        raise SemrushError(f"SEMrush {params['type']} returned HTTP {response.status_code}", status_code=response.status_code)

    text = response.text.strip()
    if "NOTHING FOUND" in text.upper():
        return None
    if text.startswith("ERROR"):
        raise SemrushError(f"SEMrush {params['type']} error: {text[:200]}")
    return parse_report(text)


def parse_report(text: str) -> Optional[List[str]]:
    """Return the first data row of a SEMrush CSV report, or ``None`` when empty."""
    lines = [line for line in text.strip().splitlines() if line.strip()]
    if len(lines) < 2 or lines[1].strip() == NOTHING_FOUND:
        return None
    return [value.strip() for value in lines[1].split(";")]


def domain_overview(domain: str, api_key: str, database: str = "us") -> Optional[List[str]]:
    """Columns: Domain;Organic Keywords;Organic Traffic;Organic Cost;..."""
    logger.info("Fetching SEMrush domain overview for %s", domain)
    return _report(
        {"type": "domain_overview", "key": api_key, "display_limit": 1, "domain": domain, "database": database}
    )


def backlinks_overview(domain: str, api_key: str) -> Optional[List[str]]:
    """Columns: Target;Backlinks;Domains;IP Addresses;..."""
    logger.info("Fetching SEMrush backlinks overview for %s", domain)
    return _report({"type": "backlinks_overview", "key": api_key, "target": domain, "target_type": "root_domain"})
