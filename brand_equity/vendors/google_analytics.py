"""Google Analytics 4 Data and Admin API access with service-account tokens."""

import logging
import time
from typing import Any, Dict, Iterator, List, Optional

import requests
from jose import jwt
from jose.exceptions import JOSEError

from brand_equity.core.errors import UpstreamError

logger = logging.getLogger(__name__)
_SESSION = requests.Session()

TOKEN_URL = "https://oauth2.googleapis.com/token"
DATA_API_URL = "https://analyticsdata.googleapis.com/v1beta"
ADMIN_API_URL = "https://analyticsadmin.googleapis.com/v1beta"

READONLY_SCOPE = "https://www.googleapis.com/auth/analytics.readonly"
EDIT_SCOPE = "https://www.googleapis.com/auth/analytics.edit"
TOKEN_LIFETIME_SECONDS = 3600
REQUEST_TIMEOUT = 15

# Order matters: runReport returns metric values positionally.
REPORT_METRICS = ("activeUsers", "sessions", "screenPageViews", "bounceRate", "averageSessionDuration")


class AnalyticsError(UpstreamError):
    """Raised when a token exchange or an Analytics API call fails."""


def build_assertion(client_email: str, private_key_pem: str, scopes: str, now: Optional[int] = None) -> str:
    """Sign the RS256 JWT assertion used for the service-account token grant."""
    issued_at = int(now if now is not None else time.time())
    claims = {
        "iss": client_email,
        "scope": scopes,
        "aud": TOKEN_URL,
        "iat": issued_at,
        "exp": issued_at + TOKEN_LIFETIME_SECONDS,
    }
    try:
        return jwt.encode(claims, private_key_pem, algorithm="RS256")
    except JOSEError as exc:
        raise AnalyticsError(f"could not sign service account assertion: {exc}") from exc


def service_account_token(client_email: str, private_key_pem: str, scopes: str = READONLY_SCOPE) -> str:
    """Exchange a locally signed assertion for an OAuth access token."""
    assertion = build_assertion(client_email, private_key_pem, scopes)
    form = {"grant_type": "urn:ietf:params:oauth:grant-type:jwt-bearer", "assertion": assertion}
    try:
        response = _SESSION.post(TOKEN_URL, data=form, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as exc:
        raise AnalyticsError(f"token exchange failed: {exc}") from exc
    if response.status_code >= 400:
        logger.error("Service account token exchange failed: %s", response.text[:300])
        raise AnalyticsError("service account token exchange failed", status_code=response.status_code)
    try:
        data = response.json()
    except ValueError as exc:
        raise AnalyticsError("token endpoint returned invalid JSON") from exc
    token = data.get("access_token") if isinstance(data, dict) else None
    if not token:
        raise AnalyticsError("token endpoint returned no access_token")
    return token


def _authorized_json(method: str, url: str, token: str, **kwargs: Any) -> Dict[str, Any]:
    headers = {"Authorization": f"Bearer {token}"}
    try:
        response = _SESSION.request(method, url, headers=headers, timeout=REQUEST_TIMEOUT, **kwargs)
    except requests.RequestException as exc:
        raise AnalyticsError(f"Analytics request failed: {exc}") from exc
    if response.status_code >= 400:
        raise AnalyticsError(f"Analytics request failed: {response.text[:300]}", status_code=response.status_code)
    try:
        data = response.json()
    except ValueError as exc:
        raise AnalyticsError("Analytics API returned invalid JSON") from exc
    if not isinstance(data, dict):
        raise AnalyticsError(f"Analytics API returned {type(data).__name__}, expected object")
    return data


def run_report(property_id: str, token: str) -> List[Optional[str]]:
    """Run the fixed 30-day report and return raw metric values in ``REPORT_METRICS`` order."""
    body = {
        "dateRanges": [{"startDate": "30daysAgo", "endDate": "yesterday"}],
        "metrics": [{"name": name} for name in REPORT_METRICS],
    }
    data = _authorized_json("POST", f"{DATA_API_URL}/properties/{property_id}:runReport", token, json=body)
    rows = data.get("rows") or []
    values = (rows[0].get("metricValues") if rows else None) or []
    padded = [entry.get("value") for entry in values] + [None] * len(REPORT_METRICS)
    return padded[: len(REPORT_METRICS)]


def iter_property_ids(token: str) -> Iterator[str]:
    data = _authorized_json("GET", f"{ADMIN_API_URL}/accountSummaries", token)
    for account in data.get("accountSummaries") or []:
        for prop in account.get("propertySummaries") or []:
            property_id = (prop.get("property") or "").rsplit("/", 1)[-1]
            if property_id:
                yield property_id


def find_property_for_measurement_id(measurement_id: str, token: str) -> Optional[str]:
    """Walk account summaries and web data streams until one carries ``measurement_id``."""
    for property_id in iter_property_ids(token):
        try:
            streams = _authorized_json("GET", f"{ADMIN_API_URL}/properties/{property_id}/dataStreams", token)
        except AnalyticsError as exc:
            logger.debug("Skipping property %s: %s", property_id, exc)
            continue
        for stream in streams.get("dataStreams") or []:
            if (stream.get("webStreamData") or {}).get("measurementId") == measurement_id:
                return property_id
    return None
