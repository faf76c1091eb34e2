"""Generated-text handlers: score breakdown narratives and Perplexity enrichment."""

import json
import logging
from typing import Any, Dict, Optional, Tuple

from brand_equity.core.config import get_settings
from brand_equity.core.errors import UpstreamError
from brand_equity.etl.scoring import clamp_score
from brand_equity.models import ScoreBreakdown
from brand_equity.vendors import chat_completions

logger = logging.getLogger(__name__)

Response = Tuple[Dict[str, Any], int]

# Upstream statuses returned to the caller unchanged, with a readable message.
PASSTHROUGH_ERRORS = {
    429: "Rate limit exceeded. Please try again in a moment.",
    402: "AI credits exhausted. Please add credits to continue.",
}

PERPLEXITY_MODEL = "sonar-pro"

SYSTEM_PROMPT = """You are a brand equity analysis expert. Generate a detailed, actionable breakdown explaining why a business scored {score}/100 in {category}.

Be specific, educational, and actionable. Structure your response with:
1. What was measured (2-3 key factors)
2. What they did well (strengths contributing to score)
3. What needs improvement (weaknesses lowering the score)
4. Specific next steps to improve (3-5 concrete actions)

Use the provided analysis data to be specific. Keep explanations clear and professional."""

USER_PROMPT = """Analyze {category} performance for {business_name}:

Score: {score}/100

Analysis Data: {analysis_data}

Provide a detailed breakdown explaining this score."""

ENRICHMENT_PROMPT = """You are an analyst. Using only public web signals, estimate the following for the business. Return STRICT JSON only with the schema fields below. If unknown, set null.

Business:
- Name: {name}
- Website: {website}
- Location: {location}
- Industry: {industry}

Schema:
{{
  "website": {{
    "estimated_monthly_visitors": number|null,
    "top_keywords": string[]|null
  }},
  "social": {{
    "total_followers": number|null,
    "engagement_rate": string|null
  }},
  "reputation": {{
    "average_rating": number|null,
    "total_reviews": number|null
  }},
  "visibility": {{
    "brand_search_volume": number|null,
    "online_mentions": number|null
  }},
  "notes": string[]
}}"""


def empty_enrichment() -> Dict[str, Any]:
    return {
        "website": {"estimated_monthly_visitors": None, "top_keywords": None},
        "social": {"total_followers": None, "engagement_rate": None},
        "reputation": {"average_rating": None, "total_reviews": None},
        "visibility": {"brand_search_volume": None, "online_mentions": None},
        "notes": [],
    }


def build_breakdown_messages(breakdown: ScoreBreakdown, business_name: Optional[str], analysis_data: Any):
    return [
        {"role": "system", "content": SYSTEM_PROMPT.format(score=breakdown.score, category=breakdown.category)},
        {
            "role": "user",
            "content": USER_PROMPT.format(
                category=breakdown.category,
                business_name=business_name or "this business",
                score=breakdown.score,
                analysis_data=json.dumps(analysis_data, indent=2, default=str),
            ),
        },
    ]


def generate_score_breakdown(payload: Dict[str, Any]) -> Response:
    category = str(payload.get("category") or "").strip()
    if not category or payload.get("score") is None:
        return {"success": False, "error": "category and score are required"}, 400
    try:
        breakdown = ScoreBreakdown(category=category, score=clamp_score(payload["score"]))
    except ValueError as exc:
        return {"success": False, "error": str(exc)}, 400

    settings = get_settings()
    if not settings.ai_gateway_api_key:
        return {"success": True, "breakdown": None, "error": "AI gateway API key not configured"}, 200

    messages = build_breakdown_messages(breakdown, payload.get("businessName"), payload.get("analysisData"))
    try:
        breakdown.explanation = chat_completions.complete(
            settings.ai_gateway_url,
            settings.ai_gateway_api_key,
            settings.ai_gateway_model,
            messages,
            temperature=0.7,
            max_tokens=800,
        )
    except UpstreamError as exc:
        if exc.status_code in PASSTHROUGH_ERRORS:
            return {"success": False, "error": PASSTHROUGH_ERRORS[exc.status_code]}, exc.status_code
        logger.error("Score breakdown generation failed for %s: %s", category, exc)
        return {"success": True, "breakdown": None, "error": str(exc)}, 200

    return {"success": True, "breakdown": breakdown.explanation}, 200


def strip_code_fences(text: str) -> str:
    """Remove a surrounding Markdown code fence (```json ... ```) if present."""
    data = (text or "").strip()
    if data.startswith("```"):
        first_newline = data.find("\n")
        closing = data.rfind("```")
        if first_newline != -1 and closing > first_newline:
            data = data[first_newline + 1 : closing].strip()
        else:
            data = data.strip("`").strip()
    return data


def enrich_with_perplexity(payload: Dict[str, Any]) -> Response:
    name = str(payload.get("businessName") or "").strip()
    website = str(payload.get("websiteUrl") or "").strip()
    if not name and not website:
        return {"success": False, "error": "Provide websiteUrl or businessName"}, 400

    api_key = get_settings().perplexity_api_key
    if not api_key:
        return {"success": True, "data": empty_enrichment(), "error": "Perplexity API key not configured"}, 200

    prompt = ENRICHMENT_PROMPT.format(
        name=name,
        website=website,
        location=payload.get("location") or "",
        industry=payload.get("industry") or "",
    )
    messages = [
        {"role": "system", "content": "Return only JSON, no prose."},
        {"role": "user", "content": prompt},
    ]
    try:
        content = chat_completions.complete(
            chat_completions.PERPLEXITY_URL, api_key, PERPLEXITY_MODEL, messages, temperature=0.2, max_tokens=800
        )
    except UpstreamError as exc:
        return {"success": True, "data": empty_enrichment(), "error": f"Perplexity failed: {exc}"}, 200

    try:
        data = json.loads(strip_code_fences(content))
    except ValueError:
        logger.warning("Perplexity returned non-JSON content for %r", name or website)
        return {"success": True, "data": empty_enrichment(), "error": "Failed to parse Perplexity JSON"}, 200
    if not isinstance(data, dict):
        return {"success": True, "data": empty_enrichment(), "error": "Perplexity JSON was not an object"}, 200

    return {"success": True, "data": data}, 200
