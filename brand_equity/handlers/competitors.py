"""Competitor discovery and competitor review handlers (Google Places)."""

import logging
from typing import Any, Dict, List, Optional, Tuple

from brand_equity.core.concurrency import fan_out
from brand_equity.core.config import get_settings
from brand_equity.core.errors import UpstreamError
from brand_equity.etl.transform import exclude_business, to_competitor, to_place_reviews
from brand_equity.models import Business
from brand_equity.vendors import google_places

logger = logging.getLogger(__name__)

DEFAULT_RADIUS_METERS = 5000
DEFAULT_LIMIT = 5

Response = Tuple[Dict[str, Any], int]


def _positive_int(value: Any, default: int, name: str) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        raise ValueError(f"{name} must be numeric")
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be numeric") from exc
    if number <= 0:
        raise ValueError(f"{name} must be positive")
    return number


def search_competitors(payload: Dict[str, Any]) -> Response:
    """Find nearby businesses similar to the subject business.

    Required JSON fields: businessName, address
    Optional: industry (used as the search keyword), radius (m), limit
    """
    name = str(payload.get("businessName") or "").strip()
    address = str(payload.get("address") or "").strip()
    if not name or not address:
        return {"success": False, "error": "businessName and address are required"}, 400

    try:
        radius = _positive_int(payload.get("radius"), DEFAULT_RADIUS_METERS, "radius")
        limit = _positive_int(payload.get("limit"), DEFAULT_LIMIT, "limit")
    except ValueError as exc:
        return {"success": False, "error": str(exc)}, 400

    business = Business(name=name, address=address, industry=(payload.get("industry") or None))
    envelope: Dict[str, Any] = {"success": True, "competitors": [], "searchedBusiness": business.to_payload()}

    api_key = get_settings().google_maps_api_key
    if not api_key:
        envelope["error"] = "Google Maps API key not configured"
        return envelope, 200

    try:
        business.latitude, business.longitude = google_places.geocode(address, api_key)
    except UpstreamError as exc:
        logger.error("Geocoding failed for %r: %s", address, exc)
        envelope["error"] = f"Could not geocode address: {exc}"
        return envelope, 200

    keyword = business.industry or business.name
    logger.info("Searching competitors for %r within %dm (keyword=%r)", name, radius, keyword)
    try:
        results = google_places.nearby_search(business.latitude, business.longitude, radius, keyword, api_key)
    except UpstreamError as exc:
        envelope["error"] = f"Nearby search failed: {exc}"
        return envelope, 200

    if not results:
        logger.warning("Nearby search returned no results for keyword %r", keyword)
        envelope["error"] = "No businesses found near the given address"
        return envelope, 200

    others = exclude_business(results, name)[:limit]
    envelope["competitors"] = [to_competitor(result).to_payload() for result in others]
    logger.info("Found %d competitors for %r", len(envelope["competitors"]), name)
    return envelope, 200


def _normalize_place_ids(payload: Dict[str, Any]) -> Optional[List[str]]:
    """Return the requested ids, or ``None`` when neither field is present."""
    if "placeIds" in payload and payload["placeIds"] is not None:
        raw = payload["placeIds"]
        if not isinstance(raw, list):
            return []
    elif payload.get("placeId"):
        raw = [payload["placeId"]]
    else:
        return None
    ids = []
    for value in raw:
        if isinstance(value, str) and value.strip() and value.strip() not in ids:
            ids.append(value.strip())
    return ids


def fetch_competitor_reviews(payload: Dict[str, Any]) -> Response:
    """Fetch up to five reviews for each place id, in parallel."""
    place_ids = _normalize_place_ids(payload)
    if place_ids is None:
        return {"success": False, "error": "placeId or placeIds is required"}, 400
    if not place_ids:
        return {"success": False, "error": "placeIds must contain at least one place id"}, 400

    api_key = get_settings().google_maps_api_key
    if not api_key:
        return {"success": True, "competitorsReviews": [], "error": "Google Maps API key not configured"}, 200

    def _fetch(place_id: str) -> Dict[str, Any]:
        details = google_places.place_details(place_id, api_key)
        return to_place_reviews(place_id, details).to_payload()

    results = fan_out(_fetch, place_ids)
    reviews = [result for result in results if result is not None]
    envelope: Dict[str, Any] = {"success": True, "competitorsReviews": reviews}
    if len(reviews) < len(place_ids):
        logger.warning("Reviews unavailable for %d of %d places", len(place_ids) - len(reviews), len(place_ids))
    return envelope, 200
