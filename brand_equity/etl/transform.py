"""Utilities for transforming provider responses into response payload shapes."""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from brand_equity.models import Competitor, PlaceReviews, Review

logger = logging.getLogger(__name__)

MAX_REVIEWS = 5

_IGNORE_TYPES = {"point_of_interest", "establishment", "political", "premise"}


def _extract_primary_type(types: Iterable[str]) -> Optional[str]:
    for type_name in types or []:
        if type_name not in _IGNORE_TYPES:
            return type_name
    return None


def _rating(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value) if 0 <= value <= 5 else None


def _count(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value if value >= 0 else None


def epoch_to_iso(seconds: Any) -> Optional[str]:
    """Render epoch seconds as an ISO-8601 UTC timestamp with a ``Z`` suffix."""
    if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
        return None
    try:
        moment = datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def exclude_business(results: Iterable[Dict[str, Any]], business_name: str) -> List[Dict[str, Any]]:
    """Drop results named exactly like the subject business (case-insensitive), keeping order."""
    own_name = (business_name or "").strip().lower()
    return [result for result in results if (result.get("name") or "").strip().lower() != own_name]


def to_competitor(result: Dict[str, Any]) -> Competitor:
    return Competitor(
        name=result.get("name") or "",
        place_id=result.get("place_id") or "",
        address=result.get("vicinity") or result.get("formatted_address"),
        rating=_rating(result.get("rating")),
        review_count=_count(result.get("user_ratings_total")),
        phone=result.get("formatted_phone_number"),
        website=result.get("website"),
        business_type=_extract_primary_type(result.get("types", [])),
    )


def to_review(raw: Dict[str, Any]) -> Review:
    return Review(
        author=raw.get("author_name") or "Anonymous",
        rating=_rating(raw.get("rating")),
        text=raw.get("text") or "",
        time=epoch_to_iso(raw.get("time")),
        time_relative=raw.get("relative_time_description"),
        profile_photo_url=raw.get("profile_photo_url"),
    )


def to_reviews(raw_reviews: Any, limit: int = MAX_REVIEWS) -> List[Review]:
    """Map the first ``limit`` reviews in provider order."""
    if not isinstance(raw_reviews, list):
        return []
    return [to_review(raw) for raw in raw_reviews[:limit] if isinstance(raw, dict)]


def to_place_reviews(place_id: str, details: Dict[str, Any]) -> PlaceReviews:
    return PlaceReviews(
        business_name=details.get("name"),
        place_id=place_id,
        rating=_rating(details.get("rating")),
        review_count=_count(details.get("user_ratings_total")),
        reviews=to_reviews(details.get("reviews")),
    )


def empty_google_reviews(business_name: Optional[str]) -> Dict[str, Any]:
    return {
        "businessName": business_name or "Unknown",
        "rating": None,
        "totalReviews": None,
        "reviews": [],
        "placeId": None,
        "address": None,
        "website": None,
        "phoneNumber": None,
        "source": "N/A",
    }


def to_google_reviews(
    business_name: str,
    candidate: Dict[str, Any],
    details: Optional[Dict[str, Any]] = None,
    fallback_website: Optional[str] = None,
) -> Dict[str, Any]:
    """Combine a find-place candidate with optional place details; details win where present."""
    details = details or {}

    def pick(key: str) -> Any:
        value = details.get(key)
        return value if value not in (None, "") else candidate.get(key)

    raw_reviews = details.get("reviews") or candidate.get("reviews")
    return {
        "businessName": details.get("name") or business_name,
        "rating": _rating(pick("rating")),
        "totalReviews": _count(pick("user_ratings_total")),
        "reviews": [review.to_payload() for review in to_reviews(raw_reviews)],
        "placeId": candidate.get("place_id"),
        "address": pick("formatted_address"),
        "website": pick("website") or fallback_website,
        "phoneNumber": pick("formatted_phone_number"),
        "source": "Google",
    }


def to_prediction(raw: Dict[str, Any]) -> Dict[str, Any]:
    structured = raw.get("structured_formatting") or {}
    description = raw.get("description") or ""
    return {
        "description": description,
        "place_id": raw.get("place_id"),
        "structured_formatting": {
            "main_text": structured.get("main_text") or description,
            "secondary_text": structured.get("secondary_text") or "",
        },
    }


# ---------- Trustpilot ----------

_TRUSTPILOT_REVIEW_URL = "https://www.trustpilot.com/review/{}"


def trustpilot_candidate_urls(business_name: Optional[str], domain: Optional[str]) -> List[str]:
    """Domain URL first, then a slug of the business name."""
    urls = []
    if domain:
        bare = re.sub(r"^https?://", "", domain.strip(), flags=re.IGNORECASE)
        bare = re.sub(r"^www\.", "", bare, flags=re.IGNORECASE).split("/")[0]
        if bare:
            urls.append(_TRUSTPILOT_REVIEW_URL.format(bare))
    if business_name:
        slug = re.sub(r"[^\w-]", "", re.sub(r"\s+", "-", business_name.strip().lower()))
        if slug:
            urls.append(_TRUSTPILOT_REVIEW_URL.format(slug))
    return urls


def is_usable_trustpilot(data: Optional[Dict[str, Any]]) -> bool:
    if not isinstance(data, dict):
        return False
    reviews = data.get("reviews")
    return bool(
        data.get("rating")
        or data.get("reviewCount")
        or data.get("totalReviews")
        or (isinstance(reviews, list) and reviews)
    )


def _to_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number or None


def _to_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        number = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None
    return number if number > 0 else None


def empty_trustpilot(label: Optional[str]) -> Dict[str, Any]:
    return {"businessName": label or "Unknown", "rating": None, "totalReviews": None, "reviews": [], "source": "N/A"}


def to_trustpilot_summary(label: str, data: Dict[str, Any]) -> Dict[str, Any]:
    """Shape a scraped Trustpilot page into the rating summary with up to five titled reviews."""
    reviews = []
    for review in (data.get("reviews") or [])[:MAX_REVIEWS]:
        if not isinstance(review, dict) or not review.get("title"):
            continue
        reviews.append(
            {
                "title": review["title"],
                "rating": _to_int(review.get("rating")),
                "date": review.get("date"),
            }
        )
    return {
        "businessName": label,
        "rating": _to_float(data.get("rating") or data.get("score")),
        "totalReviews": _to_int(data.get("reviewCount") or data.get("totalReviews") or data.get("total_reviews")),
        "reviews": reviews,
        "source": "Trustpilot",
    }


def combine_reputation(google: Optional[Dict[str, Any]], trustpilot: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Blend the Google and Trustpilot summaries into one reputation block.

    Only sources with a measured rating count towards the average; recent
    reviews keep Google first and are tagged with their source.
    """
    sources = [("Google", google), ("Trustpilot", trustpilot)]
    rated = [(label, data) for label, data in sources if data and data.get("rating") is not None]

    average = sum(data["rating"] for _, data in rated) / len(rated) if rated else None
    counts = [data["totalReviews"] for _, data in rated if data.get("totalReviews")]

    recent = []
    for label, data in sources:
        for review in (data or {}).get("reviews") or []:
            recent.append(dict(review, source=label))

    return {
        "average_rating": round(average, 1) if average is not None else None,
        "total_reviews": sum(counts) if counts else None,
        "review_sources": [label for label, _ in rated],
        "sentiment_score": round(average / 5 * 100) if average is not None else None,
        "recent_reviews": recent[:MAX_REVIEWS],
        "review_breakdown": {"google": google, "trustpilot": trustpilot},
    }
