"""Full brand analysis: reviews, competitors and followers gathered in one request."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from brand_equity.core import db
from brand_equity.core.concurrency import fan_out
from brand_equity.etl.scoring import bare_domain
from brand_equity.etl.transform import combine_reputation
from brand_equity.handlers import competitors, reputation, social

logger = logging.getLogger(__name__)

Response = Tuple[Dict[str, Any], int]

COMPETITOR_RADIUS_METERS = 5000
COMPETITOR_LIMIT = 5


def _data_of(response: Response) -> Optional[Dict[str, Any]]:
    body, status = response
    if status != 200 or not body.get("success"):
        return None
    return body.get("data")


def _competitor_summary(
    searched: Dict[str, Any], found: List[Dict[str, Any]], error: Optional[str] = None
) -> Dict[str, Any]:
    summary: Dict[str, Any] = {"competitors": found, "searchedBusiness": searched, "totalCompetitors": len(found)}
    if error:
        summary["error"] = error
    return summary


def analyze_competitors(name: str, address: Optional[str], industry: Optional[str]) -> Dict[str, Any]:
    """Competitor search followed by a review fetch for every competitor found."""
    searched = {"name": name, "address": address}
    if not address:
        return _competitor_summary(searched, [], "Address not provided")

    body, status = competitors.search_competitors(
        {
            "businessName": name,
            "address": address,
            "industry": industry,
            "radius": COMPETITOR_RADIUS_METERS,
            "limit": COMPETITOR_LIMIT,
        }
    )
    searched = body.get("searchedBusiness") or searched
    found = body.get("competitors") or []
    if status != 200 or not body.get("success") or not found:
        return _competitor_summary(searched, [], body.get("error") or "No competitors found in this area")

    body, status = competitors.fetch_competitor_reviews({"placeIds": [item["placeId"] for item in found]})
    by_place = {entry["placeId"]: entry for entry in body.get("competitorsReviews") or []} if status == 200 else {}

    enriched = []
    for competitor in found:
        reviews = by_place.get(competitor["placeId"]) or {}
        enriched.append(
            dict(
                competitor,
                reviews=reviews.get("reviews") or [],
                googleRating=reviews.get("rating") if reviews.get("rating") is not None else competitor.get("rating"),
                googleReviewCount=(
                    reviews.get("reviewCount") if reviews.get("reviewCount") is not None else competitor.get("reviewCount")
                ),
            )
        )
    return _competitor_summary(searched, enriched)


def analyze_social(profiles: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(profiles, list) or not profiles:
        return None
    body, status = social.fetch_unified_followers({"profiles": profiles})
    if status != 200 or not body.get("success"):
        return None
    return {"detected_platforms": body["profiles"], "total_followers": body["totalFollowers"], "profiles": body["profiles"]}


def analyze_brand(payload: Dict[str, Any]) -> Response:
    """Run every reputation, competitor and follower lookup in parallel and merge them into the report.

    A failed branch yields ``None`` (an empty summary for competitors).
    Persisting into ``reportId`` is additive and non-fatal.
    """
    name = str(payload.get("businessName") or "").strip()
    if not name:
        return {"success": False, "error": "Business name is required"}, 400
    address = str(payload.get("address") or "").strip() or None
    website = str(payload.get("websiteUrl") or "").strip() or None
    industry = str(payload.get("industry") or "").strip() or None
    report_id = payload.get("reportId") or None

    logger.info("Starting brand analysis for %r", name)
    branches = {
        "googleReviews": lambda: _data_of(
            reputation.fetch_google_reviews({"businessName": name, "address": address, "website": website})
        ),
        "trustpilotReviews": lambda: _data_of(
            reputation.fetch_trustpilot_reviews({"businessName": name, "domain": bare_domain(website or "") or None})
        ),
        "competitors": lambda: analyze_competitors(name, address, industry),
        "socialMedia": lambda: analyze_social(payload.get("socialProfiles")),
    }
    results = dict(zip(branches, fan_out(lambda branch: branch(), list(branches.values()))))
    if results["competitors"] is None:
        results["competitors"] = _competitor_summary({"name": name, "address": address}, [], "Competitor analysis failed")

    result = dict(results, combinedReputation=combine_reputation(results["googleReviews"], results["trustpilotReviews"]))

    if report_id:
        # `social` is the key the dashboard reads; `socialMedia` mirrors the response.
        patch = dict(result, social=result["socialMedia"], last_updated=datetime.now(timezone.utc).isoformat())
        try:
            db.merge_report_analysis(report_id, patch)
        except db.PERSISTENCE_ERRORS as exc:
            logger.warning("Brand analysis merge non-fatal error for report %s: %s", report_id, exc)

    logger.info("Brand analysis completed for %r", name)
    return {"success": True, "data": result}, 200
