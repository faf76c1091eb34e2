import pytest

from brand_equity.handlers import social
from brand_equity.vendors import github, scrapapi, serp_client, twitter, youtube
from conftest import JSON_NULL, DummyResponse


@pytest.fixture
def no_scrape(monkeypatch):
    calls = []
    monkeypatch.setattr(scrapapi, "scrape_social_profile", lambda url, key: calls.append(url))
    return calls


@pytest.mark.parametrize("payload", [{}, {"profiles": "instagram"}, {"profiles": ["https://x.com/acme"]}])
def test_social_followers_requires_profile_list(use_settings, no_scrape, payload):
    use_settings(social, scrapapi_key="key")

    body, status = social.fetch_social_followers(payload)

    assert status == 400
    assert body["success"] is False
    assert no_scrape == []


def test_social_followers_empty_list(use_settings, no_scrape):
    use_settings(social, scrapapi_key="key")

    assert social.fetch_social_followers({"profiles": []}) == ({"success": True, "profiles": [], "totalFollowers": 0}, 200)


def test_social_followers_without_credential_nulls_counts(use_settings, no_scrape):
    use_settings(social)
    profiles = [
        {"platform": "instagram", "url": "https://instagram.com/acme", "followers": 500, "username": "acme"},
        {"platform": "tiktok", "url": "https://tiktok.com/@acme"},
    ]

    body, status = social.fetch_social_followers({"profiles": profiles})

    assert status == 200
    assert body["totalFollowers"] == 0
    assert all("followers" in p and p["followers"] is None for p in body["profiles"])
    assert body["profiles"][0]["username"] == "acme"
    assert no_scrape == []


def test_social_followers_resolves_counts_and_keeps_failed_profiles(use_settings, monkeypatch):
    use_settings(social, scrapapi_key="key")
    scraped = {
        "https://instagram.com/acme": {"follower_count": "1.2K", "verified": True},
        "https://twitter.com/acme": {"public_metrics": {"followers_count": 0}},
    }

    def fake_scrape(url, key):
        if url not in scraped:
            raise scrapapi.ScrapApiError("HTTP 500", status_code=500)
        return scraped[url]

    monkeypatch.setattr(scrapapi, "scrape_social_profile", fake_scrape)
    profiles = [
        {"platform": "instagram", "url": "https://instagram.com/acme"},
        {"platform": "twitter", "url": "https://twitter.com/acme", "verified": True},
        {"platform": "facebook", "url": "https://facebook.com/acme", "followers": 40},
    ]

    body, status = social.fetch_social_followers({"profiles": profiles})

    assert status == 200
    instagram, twitter_profile, facebook = body["profiles"]
    assert instagram["followers"] == 1200
    assert instagram["verified"] is True
    assert twitter_profile["followers"] == 0
    assert twitter_profile["verified"] is True
    assert facebook["followers"] is None
    assert facebook["url"] == "https://facebook.com/acme"
    assert body["totalFollowers"] == 1200


def test_serpapi_followers(use_settings, monkeypatch):
    use_settings(social, serpapi_key="key")
    monkeypatch.setattr(
        serp_client, "fetch_profile", lambda platform, username, key: {"user_info": {"followers_count": 900}}
    )
    profiles = [
        {"platform": "instagram", "url": "https://instagram.com/acme"},
        {"platform": "linkedin", "url": "https://linkedin.com/company/acme"},
    ]

    body, status = social.fetch_serpapi_followers({"profiles": profiles})

    assert status == 200
    instagram, linkedin = body["profiles"]
    assert instagram["followers"] == 900
    assert instagram["username"] == "acme"
    assert instagram["source"] == "SerpAPI"
    assert linkedin["followers"] is None
    assert "not supported" in linkedin["error"]


def test_serpapi_followers_without_credential(use_settings, monkeypatch):
    use_settings(social)
    monkeypatch.setattr(serp_client, "fetch_profile", lambda *args: pytest.fail("unexpected SerpAPI call"))

    body, status = social.fetch_serpapi_followers({"profiles": [{"platform": "instagram", "url": "https://instagram.com/acme"}]})

    assert status == 200
    assert body["success"] is True
    assert body["profiles"][0]["followers"] is None
    assert "error" in body


def test_github_followers(use_settings, monkeypatch):
    use_settings(social, github_token="")
    seen = {}

    def fake_fetch(username, token=None):
        seen.update(username=username, token=token)
        return {"followers": 12, "following": 3, "public_repos": 7, "avatar_url": "https://img", "login": username}

    monkeypatch.setattr(github, "fetch_user", fake_fetch)

    body, status = social.fetch_github_followers({"username": "octocat"})

    assert status == 200
    assert seen == {"username": "octocat", "token": None}
    assert body["data"]["followers"] == 12
    assert body["data"]["avatar"] == "https://img"
    assert body["data"]["blog"] is None


def test_github_followers_not_found(use_settings, monkeypatch):
    use_settings(social)

    def missing(username, token=None):
        raise github.GitHubUserNotFound("GitHub user not found", status_code=404)

    monkeypatch.setattr(github, "fetch_user", missing)

    body, status = social.fetch_github_followers({"username": "ghost"})

    assert status == 200
    assert body == {"success": True, "data": {"followers": None}, "error": "GitHub user not found"}


def test_github_followers_requires_username(use_settings):
    use_settings(social)

    assert social.fetch_github_followers({})[1] == 400


def test_youtube_followers(use_settings, monkeypatch):
    use_settings(social, youtube_api_key="key")
    channel = {
        "statistics": {"subscriberCount": "1500", "viewCount": "99000", "videoCount": "42"},
        "snippet": {"title": "Acme TV", "description": "d", "thumbnails": {"medium": {"url": "https://thumb"}}},
    }
    monkeypatch.setattr(youtube, "fetch_channel", lambda key, channel_id=None, username=None: channel)

    body, status = social.fetch_youtube_followers({"channelId": "UC1"})

    assert status == 200
    assert body["data"] == {
        "subscribers": 1500,
        "views": 99000,
        "videos": 42,
        "title": "Acme TV",
        "description": "d",
        "thumbnail": "https://thumb",
    }


def test_youtube_hidden_subscribers_are_null(use_settings, monkeypatch):
    use_settings(social, youtube_api_key="key")
    channel = {"statistics": {"hiddenSubscriberCount": True, "subscriberCount": "0"}, "snippet": {}}
    monkeypatch.setattr(youtube, "fetch_channel", lambda key, channel_id=None, username=None: channel)

    body, _ = social.fetch_youtube_followers({"channelUsername": "acme"})

    assert body["data"]["subscribers"] is None


def test_youtube_without_credential_is_empty_success(use_settings):
    use_settings(social)

    body, status = social.fetch_youtube_followers({"channelId": "UC1"})

    assert status == 200
    assert body["success"] is True
    assert body["data"] == {"subscribers": None}


def test_youtube_requires_channel(use_settings):
    use_settings(social, youtube_api_key="key")

    assert social.fetch_youtube_followers({})[1] == 400


def test_twitter_followers(use_settings, monkeypatch):
    use_settings(social, twitter_bearer_token="bearer")
    monkeypatch.setattr(twitter, "fetch_followers_count", lambda username, token: 321)

    assert social.fetch_twitter_followers({"username": "@acme"}) == (
        {"success": True, "username": "acme", "followers_count": 321},
        200,
    )


def test_twitter_without_credential_is_empty_success(use_settings, monkeypatch):
    use_settings(social)
    monkeypatch.setattr(twitter, "fetch_followers_count", lambda *args: pytest.fail("unexpected X API call"))

    body, status = social.fetch_twitter_followers({"username": "acme"})

    assert status == 200
    assert body["success"] is True
    assert body["followers_count"] is None
    assert "error" in body


def test_twitter_upstream_failure(use_settings, monkeypatch):
    use_settings(social, twitter_bearer_token="bearer")

    def fail(username, token):
        raise twitter.TwitterError("HTTP 503", status_code=503)

    monkeypatch.setattr(twitter, "fetch_followers_count", fail)

    body, status = social.fetch_twitter_followers({"username": "acme"})

    assert status == 200
    assert body["followers_count"] is None
    assert body["error"] == "HTTP 503"


def test_youtube_null_body_is_empty_success(use_settings, dummy_session):
    use_settings(social, youtube_api_key="key")
    dummy_session(youtube, DummyResponse(payload=JSON_NULL))

    body, status = social.fetch_youtube_followers({"channelId": "UC1"})

    assert status == 200
    assert body["success"] is True
    assert body["data"] == {"subscribers": None}
    assert "expected object" in body["error"]


def test_unified_followers_requires_profiles(use_settings):
    use_settings(social, scrapapi_key="key")

    for payload in ({}, {"profiles": []}, {"profiles": ["https://github.com/acme"]}):
        body, status = social.fetch_unified_followers(payload)
        assert status == 400
        assert body["success"] is False


def test_unified_followers_prefers_native_apis_and_falls_back_to_scrape(use_settings, monkeypatch):
    use_settings(social, scrapapi_key="scrape", youtube_api_key="yt", twitter_bearer_token="bearer")
    channel_calls = []
    scraped = []

    def fake_channel(key, channel_id=None, username=None):
        channel_calls.append((channel_id, username))
        return {"statistics": {"subscriberCount": "2500"}}

    def failing_twitter(username, token):
        raise twitter.TwitterError("HTTP 429", status_code=429)

    def fake_scrape(url, key):
        scraped.append(url)
        return {"followers": "1.5K"}

    monkeypatch.setattr(youtube, "fetch_channel", fake_channel)
    monkeypatch.setattr(github, "fetch_user", lambda username, token=None: {"followers": 42})
    monkeypatch.setattr(twitter, "fetch_followers_count", failing_twitter)
    monkeypatch.setattr(scrapapi, "scrape_social_profile", fake_scrape)
    profiles = [
        {"platform": "YouTube", "url": "https://www.youtube.com/@acmechannel"},
        {"platform": "github", "url": "https://github.com/acme"},
        {"platform": "twitter", "url": "https://x.com/acme"},
        {"platform": "pinterest", "url": "https://pinterest.com/acme"},
    ]

    body, status = social.fetch_unified_followers({"profiles": profiles})

    assert status == 200
    youtube_entry, github_entry, twitter_entry, pinterest_entry = body["profiles"]
    assert channel_calls == [(None, "acmechannel")]
    assert (youtube_entry["followers"], youtube_entry["source"]) == (2500, "youtube-api")
    assert (github_entry["followers"], github_entry["source"], github_entry["username"]) == (42, "github-api", "acme")
    assert (twitter_entry["followers"], twitter_entry["source"]) == (1500, "scrapapi")
    assert pinterest_entry["source"] == "scrapapi"
    assert sorted(scraped) == ["https://pinterest.com/acme", "https://x.com/acme"]
    assert body["totalFollowers"] == 2500 + 42 + 1500 + 1500


def test_unified_followers_unresolved_profile_is_null(use_settings, monkeypatch):
    use_settings(social)

    def missing_user(username, token=None):
        raise github.GitHubUserNotFound("GitHub user not found", status_code=404)

    monkeypatch.setattr(github, "fetch_user", missing_user)

    body, status = social.fetch_unified_followers({"profiles": [{"platform": "github", "url": "https://github.com/ghost"}]})

    assert status == 200
    entry = body["profiles"][0]
    assert entry["followers"] is None
    assert entry["source"] is None
    assert entry["error"] == "Could not fetch follower count"
    assert body["totalFollowers"] == 0


def test_unified_followers_uses_channel_id_when_url_carries_one(use_settings, monkeypatch):
    use_settings(social, youtube_api_key="yt")
    seen = []

    def fake_channel(key, channel_id=None, username=None):
        seen.append((channel_id, username))
        return {"statistics": {"hiddenSubscriberCount": True, "subscriberCount": "100"}}

    monkeypatch.setattr(youtube, "fetch_channel", fake_channel)
    url = "https://www.youtube.com/channel/UC_x5XG1OV2P6uZZ5FSM9Ttw"

    body, _ = social.fetch_unified_followers({"profiles": [{"platform": "youtube", "url": url}]})

    assert seen == [("UC_x5XG1OV2P6uZZ5FSM9Ttw", None)]
    assert body["profiles"][0]["followers"] is None
