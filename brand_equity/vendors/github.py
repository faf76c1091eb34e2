"""GitHub REST API client for public profile counts."""

import logging
from typing import Any, Dict, Optional

import requests

from brand_equity.core.errors import UpstreamError

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_BASE_URL = "https://api.github.com"

REQUEST_TIMEOUT = 8
USER_AGENT = "BrandEquityAnalyzer/1.0"


class GitHubError(UpstreamError):
    """Raised when the GitHub API rejects or fails a user lookup."""


class GitHubUserNotFound(GitHubError):
    pass


def fetch_user(username: str, token: Optional[str] = None) -> Dict[str, Any]:
    """Return the public user document; a token only raises the rate limit."""
    headers = {"Accept": "application/vnd.github.v3+json", "User-Agent": USER_AGENT}
    if token:
        headers["Authorization"] = f"token {token}"

    try:
        response = _SESSION.get(f"{_BASE_URL}/users/{username}", headers=headers, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as exc:
        raise GitHubError(f"GitHub request failed: {exc}") from exc

    try:
        data = response.json()
    except ValueError as exc:
        raise GitHubError("GitHub returned invalid JSON", status_code=response.status_code) from exc
    if not isinstance(data, dict):
        raise GitHubError(f"GitHub returned {type(data).__name__}, expected object", status_code=response.status_code)

    if response.status_code == 404:
        raise GitHubUserNotFound("GitHub user not found", status_code=404)
    if response.status_code >= 400 or "message" in data:
        message = data.get("message") or f"HTTP {response.status_code}"
        logger.error("GitHub API error for %s: %s", username, message)
        raise GitHubError(message, status_code=response.status_code)
    return data
