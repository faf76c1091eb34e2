"""Website performance (PageSpeed) and SEO (SEMrush) handlers."""

import logging
from typing import Any, Dict, Tuple

from brand_equity.core.concurrency import fan_out
from brand_equity.core.config import get_settings
from brand_equity.etl.scoring import bare_domain, pagespeed_result, semrush_metrics
from brand_equity.vendors import pagespeed, semrush

logger = logging.getLogger(__name__)

Response = Tuple[Dict[str, Any], int]


def analyze_pagespeed(payload: Dict[str, Any]) -> Response:
    url = str(payload.get("url") or "").strip()
    if not url:
        return {"success": False, "error": "URL is required"}, 400

    empty = pagespeed_result(None, None)
    api_key = get_settings().pagespeed_api_key
    if not api_key:
        return {"success": True, "result": empty, "error": "PageSpeed API key not configured"}, 200

    mobile, desktop = fan_out(lambda strategy: pagespeed.run_pagespeed(url, strategy, api_key), pagespeed.STRATEGIES)
    envelope: Dict[str, Any] = {"success": True, "result": pagespeed_result(mobile, desktop)}
    failed = [name for name, doc in zip(pagespeed.STRATEGIES, (mobile, desktop)) if doc is None]
    if failed:
        envelope["error"] = f"PageSpeed run failed for: {', '.join(failed)}"
    return envelope, 200


def analyze_semrush(payload: Dict[str, Any]) -> Response:
    domain = bare_domain(str(payload.get("domain") or ""))
    if not domain:
        return {"success": False, "error": "Domain is required"}, 400

    api_key = get_settings().semrush_api_key
    if not api_key:
        return {"success": True, "result": semrush_metrics(None, None), "error": "SEMrush API key not configured"}, 200

    reports = (semrush.domain_overview, semrush.backlinks_overview)
    overview, backlinks = fan_out(lambda report: report(domain, api_key), reports)
    result = semrush_metrics(overview, backlinks)
    envelope: Dict[str, Any] = {"success": True, "result": result}
    if result["seo_health_score"] is None:
        envelope["error"] = f"No SEMrush data found for {domain}"
    logger.info("SEMrush analysis for %s: health=%s", domain, result["seo_health_score"])
    return envelope, 200
