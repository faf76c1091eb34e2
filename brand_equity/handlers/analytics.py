"""Google Analytics 4 handlers: 30-day traffic report and property auto-discovery."""

import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from brand_equity.core import db
from brand_equity.core.config import get_settings
from brand_equity.core.errors import UpstreamError
from brand_equity.vendors import google_analytics, site_fetcher

logger = logging.getLogger(__name__)

Response = Tuple[Dict[str, Any], int]


def _number(raw: Optional[str]) -> Optional[float]:
    if raw is None:
        return None
    try:
        number = float(raw)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def map_report(values: List[Optional[str]], property_id: str, website_url: Optional[str]) -> Dict[str, Any]:
    """Map runReport metric values (``REPORT_METRICS`` order) to the analytics payload."""
    users, sessions, pageviews, bounce_rate, duration = (_number(value) for value in values)
    return {
        "sessions": int(sessions) if sessions is not None else None,
        "users": int(users) if users is not None else None,
        "pageviews": int(pageviews) if pageviews is not None else None,
        "avg_session_duration": round(duration) if duration is not None else None,
        "bounce_rate": round(bounce_rate, 2) if bounce_rate is not None else None,
        "propertyId": property_id,
        "websiteUrl": website_url,
    }


def _resolve_bearer(access_token: Optional[str]) -> Optional[str]:
    """Service account first, then the caller's OAuth token."""
    settings = get_settings()
    if settings.has_service_account:
        try:
            return google_analytics.service_account_token(settings.google_sa_email, settings.google_sa_private_key)
        except UpstreamError as exc:
            logger.warning("Service account token unavailable, trying caller token: %s", exc)
    return access_token or None


def analyze_analytics(payload: Dict[str, Any]) -> Response:
    property_id = str(payload.get("propertyId") or "").strip()
    if not property_id:
        return {"success": False, "error": "Google Analytics property ID required"}, 400
    website_url = payload.get("websiteUrl") or None
    report_id = payload.get("reportId") or None

    bearer = _resolve_bearer(payload.get("accessToken"))
    if not bearer:
        return {"success": False, "error": "No GA4 credentials available (Service Account or OAuth token)"}, 200

    try:
        values = google_analytics.run_report(property_id, bearer)
    except UpstreamError as exc:
        logger.error("GA4 report failed for property %s: %s", property_id, exc)
        return {"success": False, "error": f"GA4 request failed: {exc}"}, 200

    analysis = map_report(values, property_id, website_url)

    if report_id:
        patch = {"analytics": analysis, "last_updated": datetime.now(timezone.utc).isoformat()}
        try:
            db.merge_report_analysis(report_id, patch)
        except db.PERSISTENCE_ERRORS as exc:
            logger.warning("Analytics merge non-fatal error for report %s: %s", report_id, exc)

    return {"success": True, "data": analysis}, 200


def auto_discover_ga4(payload: Dict[str, Any]) -> Response:
    """Find the GA4 property behind a website's measurement id and store it on the business."""
    business_id = str(payload.get("businessId") or "").strip()
    website_url = site_fetcher.sanitize_website(str(payload.get("websiteUrl") or ""))
    if not business_id or not website_url:
        return {"success": False, "error": "businessId and websiteUrl are required"}, 400

    try:
        html = site_fetcher.fetch_html(website_url)
    except UpstreamError as exc:
        return {"success": False, "error": str(exc)}, 200

    ids = site_fetcher.extract_tracking_ids(html)
    measurement_id = site_fetcher.first_measurement_id(ids)
    if not measurement_id:
        return {"success": False, "error": "No GA4 measurement ID found on site", "ids": ids}, 200

    settings = get_settings()
    if not settings.has_service_account:
        return {"success": False, "error": "Service Account credentials missing"}, 200

    scopes = f"{google_analytics.READONLY_SCOPE} {google_analytics.EDIT_SCOPE}"
    try:
        token = google_analytics.service_account_token(settings.google_sa_email, settings.google_sa_private_key, scopes)
        property_id = google_analytics.find_property_for_measurement_id(measurement_id, token)
    except UpstreamError as exc:
        return {"success": False, "error": f"Admin API failed: {exc}"}, 200

    if not property_id:
        return {"success": False, "error": "Property not found for measurement ID"}, 200

    try:
        db.set_business_analytics_property(business_id, property_id)
    except db.PERSISTENCE_ERRORS as exc:
        logger.error("Failed to save property %s for business %s: %s", property_id, business_id, exc)
        return {"success": False, "error": f"Failed to save propertyId: {exc}"}, 200

    return {"success": True, "propertyId": property_id, "measurementId": measurement_id}, 200
