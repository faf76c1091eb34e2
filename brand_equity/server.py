"""HTTP entrypoint exposing the brand analysis handlers (Cloud Run friendly)."""

from __future__ import annotations

import logging
import os
from typing import Any, Callable, Dict, Tuple

from flask import Flask, jsonify, request

from brand_equity.core.config import get_settings
from brand_equity.core.logging_setup import configure_logging
from brand_equity.handlers import analytics, brand_analysis, competitors, insights, places, reputation, social, website

logger = logging.getLogger(__name__)

Handler = Callable[[Dict[str, Any]], Tuple[Dict[str, Any], int]]

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
}

# path -> handler; every route accepts POST (and OPTIONS for preflight).
ROUTES: Dict[str, Handler] = {
    "/competitor-search": competitors.search_competitors,
    "/competitor-reviews": competitors.fetch_competitor_reviews,
    "/google-reviews": reputation.fetch_google_reviews,
    "/trustpilot-reviews": reputation.fetch_trustpilot_reviews,
    "/social-followers": social.fetch_social_followers,
    "/serpapi-followers": social.fetch_serpapi_followers,
    "/github-followers": social.fetch_github_followers,
    "/youtube-followers": social.fetch_youtube_followers,
    "/twitter-followers": social.fetch_twitter_followers,
    "/unified-followers": social.fetch_unified_followers,
    "/brand-analysis": brand_analysis.analyze_brand,
    "/analytics": analytics.analyze_analytics,
    "/auto-discover-ga4": analytics.auto_discover_ga4,
    "/score-breakdown": insights.generate_score_breakdown,
    "/perplexity-enrichment": insights.enrich_with_perplexity,
    "/pagespeed": website.analyze_pagespeed,
    "/semrush": website.analyze_semrush,
}


def _request_payload() -> Dict[str, Any]:
    if request.method == "GET":
        return request.args.to_dict()
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def _dispatch(handler: Handler) -> Any:
    if request.method == "OPTIONS":
        return "", 200
    try:
        body, status = handler(_request_payload())
    except Exception as exc:  # noqa: BLE001
        logger.exception("Handler %s failed: %s", handler.__name__, exc)
        return jsonify({"success": False, "error": "internal server error"}), 500
    return jsonify(body), status


def _add_cors_headers(response):
    for header, value in CORS_HEADERS.items():
        response.headers[header] = value
    return response


def create_app() -> Flask:
    """Build the Flask app; settings are loaded (and missing credentials reported) up front."""
    settings = get_settings()
    configure_logging(settings)

    app = Flask(__name__)
    app.after_request(_add_cors_headers)

    @app.get("/")
    def root() -> Any:
        """Simple root to avoid 404 on GET /"""
        return "ok", 200

    @app.get("/healthz")
    def healthcheck() -> Any:
        """Lightweight health endpoint; reports credential presence without calling providers."""
        return (
            jsonify(
                {
                    "status": "ok",
                    "credentials": get_settings().credential_status(),
                    "revision": os.getenv("K_REVISION", "unknown"),
                }
            ),
            200,
        )

    for path, handler in ROUTES.items():
        app.add_url_rule(
            path,
            endpoint=handler.__name__,
            view_func=lambda handler=handler: _dispatch(handler),
            methods=["POST", "OPTIONS"],
        )

    app.add_url_rule(
        "/places-autocomplete",
        endpoint="autocomplete_address",
        view_func=lambda: _dispatch(places.autocomplete_address),
        methods=["GET", "POST", "OPTIONS"],
    )
    return app


def main() -> None:
    """Bind on 0.0.0.0 and the injected PORT (8080 when unset)."""
    app = create_app()
    port = get_settings().port
    logger.info("[BOOT] Binding on 0.0.0.0:%d", port)
    app.run(host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
