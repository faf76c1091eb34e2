"""Review-site reputation handlers: Google reviews and Trustpilot."""

import logging
from typing import Any, Dict, Optional, Tuple

from brand_equity.core.config import get_settings
from brand_equity.core.errors import UpstreamError
from brand_equity.etl.transform import (
    empty_google_reviews,
    empty_trustpilot,
    is_usable_trustpilot,
    to_google_reviews,
    to_trustpilot_summary,
    trustpilot_candidate_urls,
)
from brand_equity.vendors import google_places, scrapapi

logger = logging.getLogger(__name__)

Response = Tuple[Dict[str, Any], int]


def fetch_google_reviews(payload: Dict[str, Any]) -> Response:
    """Look up the subject business on Google Maps and return its rating and latest reviews."""
    name = str(payload.get("businessName") or "").strip()
    if not name:
        return {"success": False, "error": "businessName is required"}, 400
    address = str(payload.get("address") or "").strip()
    website = payload.get("website") or None

    api_key = get_settings().google_maps_api_key
    if not api_key:
        return {"success": True, "data": empty_google_reviews(name), "error": "Google Maps API key not configured"}, 200

    query = f"{name} {address}" if address else name
    try:
        candidate = google_places.find_place(query, api_key)
    except UpstreamError as exc:
        logger.error("Find place failed for %r: %s", name, exc)
        return {"success": True, "data": empty_google_reviews(name), "error": str(exc)}, 200

    if not candidate:
        logger.warning("No Google place found for %r", name)
        return {"success": True, "data": empty_google_reviews(name)}, 200

    details: Optional[Dict[str, Any]] = None
    if candidate.get("place_id") and not candidate.get("reviews"):
        try:
            details = google_places.place_details(
                candidate["place_id"], api_key, fields=google_places.DETAIL_FIELDS
            )
        except UpstreamError as exc:
            logger.warning("Place details failed for %s: %s", candidate["place_id"], exc)

    return {"success": True, "data": to_google_reviews(name, candidate, details, website)}, 200


def fetch_trustpilot_reviews(payload: Dict[str, Any]) -> Response:
    name = str(payload.get("businessName") or "").strip() or None
    domain = str(payload.get("domain") or "").strip() or None
    if not name and not domain:
        return {"success": False, "error": "businessName or domain is required"}, 400
    label = name or domain

    api_key = get_settings().scrapapi_key
    if not api_key:
        return {"success": True, "data": empty_trustpilot(label), "error": "ScrapAPI key not configured"}, 200

    last_error = None
    for url in trustpilot_candidate_urls(name, domain):
        try:
            data = scrapapi.scrape_trustpilot(url, api_key)
        except UpstreamError as exc:
            logger.warning("Trustpilot scrape failed for %s: %s", url, exc)
            last_error = str(exc)
            continue
        if is_usable_trustpilot(data):
            logger.info("Trustpilot data found at %s", url)
            return {"success": True, "data": to_trustpilot_summary(label, data)}, 200

    envelope: Dict[str, Any] = {"success": True, "data": empty_trustpilot(label)}
    envelope["error"] = last_error or "No Trustpilot data found"
    return envelope, 200
