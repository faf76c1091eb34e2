"""Address autocomplete for the business setup form."""

import logging
from typing import Any, Dict, Tuple

from brand_equity.core.config import get_settings
from brand_equity.core.errors import UpstreamError
from brand_equity.etl.transform import to_prediction
from brand_equity.vendors import google_places

logger = logging.getLogger(__name__)

MIN_INPUT_LENGTH = 3


def autocomplete_address(payload: Dict[str, Any]) -> Tuple[Dict[str, Any], int]:
    text = str(payload.get("input") or "").strip()
    if len(text) < MIN_INPUT_LENGTH:
        return {"success": True, "predictions": []}, 200

    api_key = get_settings().google_maps_api_key
    if not api_key:
        return {"success": True, "predictions": [], "error": "Google Maps API key not configured"}, 200

    try:
        predictions = google_places.autocomplete(text, api_key)
    except UpstreamError as exc:
        logger.error("Autocomplete failed for %r: %s", text, exc)
        return {"success": True, "predictions": [], "error": str(exc)}, 200

    return {"success": True, "predictions": [to_prediction(p) for p in predictions if isinstance(p, dict)]}, 200
