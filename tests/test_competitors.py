import pytest

from brand_equity.handlers import competitors
from brand_equity.vendors import google_places
from conftest import DummyResponse


@pytest.fixture
def calls(monkeypatch):
    """Fail loudly if a handler reaches the Places API unexpectedly."""
    recorded = []

    def _forbidden(*args, **kwargs):
        recorded.append(args)
        raise AssertionError("unexpected outbound call")

    for name in ("geocode", "nearby_search", "place_details"):
        monkeypatch.setattr(google_places, name, _forbidden)
    return recorded


@pytest.mark.parametrize("payload", [{}, {"businessName": "Acme"}, {"address": "1 Main St"}, {"businessName": " ", "address": "x"}])
def test_search_requires_name_and_address(use_settings, calls, payload):
    use_settings(competitors, google_maps_api_key="key")

    body, status = competitors.search_competitors(payload)

    assert status == 400
    assert body["success"] is False
    assert calls == []


def test_search_rejects_bad_limit(use_settings, calls):
    use_settings(competitors, google_maps_api_key="key")

    body, status = competitors.search_competitors({"businessName": "Acme", "address": "x", "limit": "many"})

    assert status == 400
    assert calls == []


def test_search_without_credential_returns_empty_success(use_settings, calls):
    use_settings(competitors, google_maps_api_key="")

    body, status = competitors.search_competitors({"businessName": "Acme", "address": "1 Main St"})

    assert status == 200
    assert body["success"] is True
    assert body["competitors"] == []
    assert body["searchedBusiness"] == {"name": "Acme", "address": "1 Main St"}
    assert "error" in body
    assert calls == []


def test_search_geocode_failure(use_settings, monkeypatch):
    use_settings(competitors, google_maps_api_key="key")

    def fail_geocode(address, key):
        raise google_places.GooglePlacesError("ZERO_RESULTS")

    monkeypatch.setattr(google_places, "geocode", fail_geocode)

    body, status = competitors.search_competitors({"businessName": "Acme", "address": "nowhere"})

    assert status == 200
    assert body["success"] is True
    assert body["competitors"] == []
    assert body["error"].startswith("Could not geocode address")


def test_search_end_to_end_excludes_self(use_settings, monkeypatch):
    use_settings(competitors, google_maps_api_key="key")
    seen = {}

    monkeypatch.setattr(google_places, "geocode", lambda address, key: (10.0, 20.0))

    def fake_nearby(lat, lng, radius, keyword, key):
        seen.update(lat=lat, lng=lng, radius=radius, keyword=keyword)
        return [
            {"name": "Acme Pest Control", "place_id": "self", "rating": 4.9, "user_ratings_total": 99},
            {"name": "Bob's Pest", "place_id": "p1", "rating": 4.2, "user_ratings_total": 10, "vicinity": "2 Side St"},
        ]

    monkeypatch.setattr(google_places, "nearby_search", fake_nearby)

    body, status = competitors.search_competitors({"businessName": "acme pest control", "address": "1 Main St"})

    assert status == 200
    assert body["success"] is True
    assert seen == {"lat": 10.0, "lng": 20.0, "radius": 5000, "keyword": "acme pest control"}
    assert len(body["competitors"]) == 1
    competitor = body["competitors"][0]
    assert competitor["name"] == "Bob's Pest"
    assert competitor["rating"] == 4.2
    assert competitor["reviewCount"] == 10
    assert competitor["placeId"] == "p1"


def test_search_truncates_to_limit_in_upstream_order(use_settings, monkeypatch):
    use_settings(competitors, google_maps_api_key="key")
    monkeypatch.setattr(google_places, "geocode", lambda address, key: (0, 0))
    monkeypatch.setattr(
        google_places,
        "nearby_search",
        lambda *args: [{"name": f"Shop {i}", "place_id": f"p{i}"} for i in range(8)],
    )

    body, _ = competitors.search_competitors({"businessName": "Acme", "address": "x", "limit": 3, "industry": "bakery"})

    assert [c["placeId"] for c in body["competitors"]] == ["p0", "p1", "p2"]


def test_search_uses_industry_as_keyword(use_settings, monkeypatch):
    use_settings(competitors, google_maps_api_key="key")
    seen = {}
    monkeypatch.setattr(google_places, "geocode", lambda address, key: (0, 0))

    def fake_nearby(lat, lng, radius, keyword, key):
        seen.update(keyword=keyword, radius=radius)
        return []

    monkeypatch.setattr(google_places, "nearby_search", fake_nearby)

    body, _ = competitors.search_competitors({"businessName": "Acme", "address": "x", "industry": "bakery", "radius": 1200})

    assert seen == {"keyword": "bakery", "radius": 1200}
    assert body["competitors"] == []
    assert "error" in body


def test_reviews_require_place_id(use_settings, calls):
    use_settings(competitors, google_maps_api_key="key")

    assert competitors.fetch_competitor_reviews({})[1] == 400
    assert competitors.fetch_competitor_reviews({"placeIds": []})[1] == 400
    assert competitors.fetch_competitor_reviews({"placeIds": "p1"})[1] == 400
    assert calls == []


def test_reviews_without_credential(use_settings, calls):
    use_settings(competitors)

    body, status = competitors.fetch_competitor_reviews({"placeId": "p1"})

    assert status == 200
    assert body["success"] is True
    assert body["competitorsReviews"] == []
    assert "error" in body


def test_reviews_truncate_and_skip_failed_places(use_settings, monkeypatch):
    use_settings(competitors, google_maps_api_key="key")

    def fake_details(place_id, key):
        if place_id == "broken":
            raise google_places.GooglePlacesError("NOT_FOUND")
        return {
            "name": f"Biz {place_id}",
            "rating": 4.0,
            "user_ratings_total": 10,
            "reviews": [{"author_name": f"r{i}", "rating": 5, "text": "", "time": 0} for i in range(10)],
        }

    monkeypatch.setattr(google_places, "place_details", fake_details)

    body, status = competitors.fetch_competitor_reviews({"placeIds": ["p1", "broken", "p2"]})

    assert status == 200
    assert [entry["placeId"] for entry in body["competitorsReviews"]] == ["p1", "p2"]
    reviews = body["competitorsReviews"][0]["reviews"]
    assert [r["author"] for r in reviews] == ["r0", "r1", "r2", "r3", "r4"]
    assert reviews[0]["time"] == "1970-01-01T00:00:00.000Z"


def test_search_with_non_object_geocode_body(use_settings, dummy_session):
    use_settings(competitors, google_maps_api_key="key")
    dummy_session(google_places, DummyResponse(payload=[]))

    body, status = competitors.search_competitors({"businessName": "Acme", "address": "1 Main St"})

    assert status == 200
    assert body["success"] is True
    assert body["competitors"] == []
    assert body["error"].startswith("Could not geocode address")
