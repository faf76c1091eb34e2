"""Derived scores for website (PageSpeed) and SEO (SEMrush) signals."""

import re
from typing import Any, Dict, List, Optional, Sequence

# Lighthouse category id -> response key
LIGHTHOUSE_CATEGORIES = {
    "performance": "performance",
    "accessibility": "accessibility",
    "best-practices": "bestPractices",
    "seo": "seo",
}

DEFAULT_RECOMMENDATION = "Strong SEO foundation - focus on maintaining and growing organic reach"


def clamp_score(value: Any) -> int:
    """Coerce a score to an integer in 0..100; raises ``ValueError`` when not numeric."""
    if isinstance(value, bool):
        raise ValueError("score must be numeric")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError("score must be numeric") from exc
    if number != number:
        raise ValueError("score must be numeric")
    return int(round(min(100.0, max(0.0, number))))


# ---------- PageSpeed ----------


def lighthouse_scores(document: Optional[Dict[str, Any]]) -> Dict[str, Optional[int]]:
    categories = ((document or {}).get("lighthouseResult") or {}).get("categories") or {}
    scores: Dict[str, Optional[int]] = {}
    for category, key in LIGHTHOUSE_CATEGORIES.items():
        score = (categories.get(category) or {}).get("score")
        scores[key] = round(score * 100) if isinstance(score, (int, float)) and not isinstance(score, bool) else None
    return scores


def first_contentful_paint_seconds(document: Optional[Dict[str, Any]]) -> Optional[float]:
    audits = ((document or {}).get("lighthouseResult") or {}).get("audits") or {}
    value = (audits.get("first-contentful-paint") or {}).get("numericValue")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value / 1000


def pagespeed_result(mobile: Optional[Dict[str, Any]], desktop: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "mobile": lighthouse_scores(mobile),
        "desktop": lighthouse_scores(desktop),
        "loadingTime": {
            "mobile": first_contentful_paint_seconds(mobile),
            "desktop": first_contentful_paint_seconds(desktop),
        },
    }


# ---------- SEMrush ----------


def bare_domain(value: str) -> str:
    """Strip scheme and path: ``https://acme.com/about`` -> ``acme.com``."""
    return re.sub(r"^https?://", "", (value or "").strip(), flags=re.IGNORECASE).split("/")[0]


def _column_int(row: Optional[Sequence[str]], index: int) -> Optional[int]:
    """Integer value of one report column; ``None`` when the row or the column is missing."""
    if not row or len(row) <= index:
        return None
    try:
        return int(float(row[index]))
    except (ValueError, OverflowError):
        return None


def seo_health_score(keywords: int, traffic: int, referring_domains: int, authority: int) -> int:
    keywords_score = min(100.0, keywords / 100 * 100)
    traffic_score = min(100.0, traffic / 1000 * 100)
    backlink_score = min(100.0, referring_domains / 100 * 100)
    blended = keywords_score * 0.3 + traffic_score * 0.3 + backlink_score * 0.2 + authority * 0.2
    return max(0, min(100, round(blended)))


# metric key -> (threshold, advice given when the measured value is below it)
_RECOMMENDATION_RULES = (
    ("organic_keywords", 100, "Expand keyword targeting and create more optimized content"),
    ("organic_traffic", 1000, "Improve on-page SEO to increase organic traffic"),
    ("referring_domains", 50, "Build more high-quality backlinks from relevant domains"),
    ("authority_score", 30, "Focus on acquiring links from high-authority domains"),
    ("seo_health_score", 50, "Conduct a comprehensive SEO audit to identify critical issues"),
)


def seo_recommendations(metrics: Dict[str, Any]) -> List[str]:
    """Advice for each measured metric under its threshold; unknown metrics give no advice."""
    if metrics["seo_health_score"] is None:
        return []
    recommendations = [
        advice
        for key, threshold, advice in _RECOMMENDATION_RULES
        if metrics[key] is not None and metrics[key] < threshold
    ]
    return recommendations or [DEFAULT_RECOMMENDATION]


def semrush_metrics(overview: Optional[Sequence[str]], backlinks: Optional[Sequence[str]]) -> Dict[str, Any]:
    """Build the SEO result from the first data rows of both reports.

    Overview columns: Domain;Organic Keywords;Organic Traffic;...
    Backlinks columns: Target;Backlinks;Domains;...

    Counts a report did not return stay ``None``. The health score treats them
    as zero and is ``None`` only when neither report returned data.
    """
    keywords = _column_int(overview, 1)
    traffic = _column_int(overview, 2)
    backlinks_count = _column_int(backlinks, 1)
    referring_domains = _column_int(backlinks, 2)
    authority = min(100, backlinks_count // 100 + 20) if backlinks_count is not None else None

    health = None
    if overview or backlinks:
        health = seo_health_score(keywords or 0, traffic or 0, referring_domains or 0, authority or 0)

    metrics: Dict[str, Any] = {
        "organic_keywords": keywords,
        "organic_traffic": traffic,
        "search_visibility": traffic // 100 if traffic is not None else None,
        "backlinks_count": backlinks_count,
        "referring_domains": referring_domains,
        "authority_score": authority,
        "domain_authority": authority,
        "seo_health_score": health,
    }
    metrics["recommendations"] = seo_recommendations(metrics)
    return metrics
