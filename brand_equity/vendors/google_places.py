"""Client utilities for the Google Geocoding and Places APIs."""

import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

from brand_equity.core.errors import UpstreamError

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_BASE_URL = "https://maps.googleapis.com/maps/api/place"
_GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"

REQUEST_TIMEOUT = 8
AUTOCOMPLETE_TIMEOUT = 5
REVIEW_FIELDS = "name,rating,user_ratings_total,reviews"
FIND_PLACE_FIELDS = "place_id,name,formatted_address,website,formatted_phone_number,rating,user_ratings_total,reviews"
DETAIL_FIELDS = "name,rating,user_ratings_total,reviews,formatted_address,website,formatted_phone_number"


class GooglePlacesError(UpstreamError):
    """Raised when the Places or Geocoding API returns a non-successful response."""


def _get(url: str, params: Dict[str, Any], timeout: int = REQUEST_TIMEOUT) -> Dict[str, Any]:
    try:
        response = _SESSION.get(url, params=params, timeout=timeout)
    except requests.RequestException as exc:
        raise GooglePlacesError(f"request failed: {exc}") from exc
    if response.status_code >= 400:
        raise GooglePlacesError(f"HTTP {response.status_code}", status_code=response.status_code)
    try:
        payload = response.json()
    except ValueError as exc:
        raise GooglePlacesError("response was not valid JSON") from exc
    if not isinstance(payload, dict):
        raise GooglePlacesError(f"expected a JSON object, got {type(payload).__name__}")
    return payload


def _check_status(payload: Dict[str, Any], operation: str, allowed=("OK", "ZERO_RESULTS")) -> str:
    status = payload.get("status")
    if status not in allowed:
        logger.error("%s failed: status=%s, error_message=%s", operation, status, payload.get("error_message"))
        raise GooglePlacesError(payload.get("error_message") or status or "unknown status")
    return status


def geocode(address: str, api_key: str) -> Tuple[float, float]:
    """Resolve an address to ``(lat, lng)``; zero results count as a failure."""
    payload = _get(_GEOCODE_URL, {"address": address, "key": api_key})
    _check_status(payload, "geocode", allowed=("OK",))
    results = payload.get("results") or []
    if not results:
        raise GooglePlacesError("ZERO_RESULTS")
    location = results[0].get("geometry", {}).get("location", {})
    if "lat" not in location or "lng" not in location:
        raise GooglePlacesError("geocode result has no location")
    return location["lat"], location["lng"]


def nearby_search(lat: float, lng: float, radius: int, keyword: str, api_key: str) -> List[Dict[str, Any]]:
    params = {
        "location": f"{lat},{lng}",
        "radius": radius,
        "keyword": keyword,
        "key": api_key,
    }
    payload = _get(f"{_BASE_URL}/nearbysearch/json", params)
    _check_status(payload, "nearby_search")
    return payload.get("results") or []


def place_details(place_id: str, api_key: str, fields: str = REVIEW_FIELDS) -> Dict[str, Any]:
    params = {"place_id": place_id, "key": api_key, "fields": fields}
    payload = _get(f"{_BASE_URL}/details/json", params)
    _check_status(payload, "place_details", allowed=("OK",))
    result = payload.get("result")
    if not result:
        raise GooglePlacesError(f"no details returned for {place_id}")
    return result


def find_place(query: str, api_key: str) -> Optional[Dict[str, Any]]:
    """Return the first find-place candidate for a free-text query, if any."""
    params = {
        "input": query,
        "inputtype": "textquery",
        "fields": FIND_PLACE_FIELDS,
        "key": api_key,
    }
    payload = _get(f"{_BASE_URL}/findplacefromtext/json", params)
    _check_status(payload, "find_place")
    candidates = payload.get("candidates") or []
    return candidates[0] if candidates else None


def autocomplete(text: str, api_key: str) -> List[Dict[str, Any]]:
    params = {"input": text, "types": "address", "key": api_key}
    payload = _get(f"{_BASE_URL}/autocomplete/json", params, timeout=AUTOCOMPLETE_TIMEOUT)
    _check_status(payload, "autocomplete")
    return payload.get("predictions") or []
