import pytest

from brand_equity.etl import scoring


@pytest.mark.parametrize("value, expected", [(55, 55), ("72.6", 73), (-4, 0), (140, 100), (99.4, 99)])
def test_clamp_score(value, expected):
    assert scoring.clamp_score(value) == expected


@pytest.mark.parametrize("value", ["high", None, True, float("nan")])
def test_clamp_score_rejects_non_numeric(value):
    with pytest.raises(ValueError):
        scoring.clamp_score(value)


def test_pagespeed_result_scales_scores_and_keeps_nulls():
    mobile = {
        "lighthouseResult": {
            "categories": {"performance": {"score": 0.87}, "seo": {"score": 1}, "accessibility": {"score": 0}},
            "audits": {"first-contentful-paint": {"numericValue": 1830.5}},
        }
    }

    result = scoring.pagespeed_result(mobile, None)

    assert result["mobile"] == {"performance": 87, "accessibility": 0, "bestPractices": None, "seo": 100}
    assert result["desktop"] == {"performance": None, "accessibility": None, "bestPractices": None, "seo": None}
    assert result["loadingTime"] == {"mobile": 1.8305, "desktop": None}


def test_bare_domain():
    assert scoring.bare_domain("https://www.acme.com/about?x=1") == "www.acme.com"
    assert scoring.bare_domain("acme.com") == "acme.com"
    assert scoring.bare_domain("") == ""


def test_semrush_metrics_blend():
    overview = ["acme.com", "250", "4000", "1200"]
    backlinks = ["acme.com", "1500", "40", "30"]

    metrics = scoring.semrush_metrics(overview, backlinks)

    assert metrics["organic_keywords"] == 250
    assert metrics["organic_traffic"] == 4000
    assert metrics["search_visibility"] == 40
    assert metrics["authority_score"] == 35
    assert metrics["domain_authority"] == 35
    # 100*0.3 + 100*0.3 + 40*0.2 + 35*0.2
    assert metrics["seo_health_score"] == 75
    assert metrics["recommendations"] == ["Build more high-quality backlinks from relevant domains"]


def test_semrush_metrics_without_data():
    metrics = scoring.semrush_metrics(None, None)

    assert metrics == {
        "organic_keywords": None,
        "organic_traffic": None,
        "search_visibility": None,
        "backlinks_count": None,
        "referring_domains": None,
        "authority_score": None,
        "domain_authority": None,
        "seo_health_score": None,
        "recommendations": [],
    }


def test_semrush_metrics_with_only_overview():
    metrics = scoring.semrush_metrics(["acme.com", "40", "300"], None)

    assert metrics["organic_keywords"] == 40
    assert metrics["search_visibility"] == 3
    assert metrics["backlinks_count"] is None
    assert metrics["referring_domains"] is None
    assert metrics["authority_score"] is None
    # 40*0.3 + 30*0.3 with the missing backlink sub-scores counted as zero
    assert metrics["seo_health_score"] == 21
    assert metrics["recommendations"] == [
        "Expand keyword targeting and create more optimized content",
        "Improve on-page SEO to increase organic traffic",
        "Conduct a comprehensive SEO audit to identify critical issues",
    ]


def test_semrush_metrics_unparseable_column_is_null():
    metrics = scoring.semrush_metrics(["acme.com", "n/a", "inf"], ["acme.com", "1500", "40"])

    assert metrics["organic_keywords"] is None
    assert metrics["organic_traffic"] is None
    assert metrics["backlinks_count"] == 1500


def test_semrush_strong_foundation():
    metrics = scoring.semrush_metrics(["d", "5000", "90000"], ["d", "900000", "800"])

    assert metrics["authority_score"] == 100
    assert metrics["seo_health_score"] == 100
    assert metrics["recommendations"] == [scoring.DEFAULT_RECOMMENDATION]
