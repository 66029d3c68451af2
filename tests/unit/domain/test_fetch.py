import pytest

from mixtape.domain.mixtapes.fetch import RequestConfig, follow_pages, sequential_fetch
from tests.support.stubs import FakeResponse, error_response, timeout_error, tracks_page_payload


@pytest.mark.unit
def test_build_adds_bearer_header_and_json_content_type(api_client):
    get = api_client.build("tok", "search", params={"q": "x"})
    assert get.url == "https://api.spotify.com/v1/search"
    assert get.method == "GET"
    assert get.headers == {"Authorization": "Bearer tok"}
    assert get.params == {"q": "x"}

    post = api_client.build("tok", "/users/u1/playlists", method="POST", json={"name": "n"})
    assert post.url == "https://api.spotify.com/v1/users/u1/playlists"
    assert post.headers["Content-Type"] == "application/json"
    assert post.json == {"name": "n"}


@pytest.mark.unit
def test_build_keeps_absolute_urls(api_client):
    config = api_client.build("tok", "https://api.spotify.com/v1/playlists/p1/tracks?offset=100")
    assert config.url == "https://api.spotify.com/v1/playlists/p1/tracks?offset=100"


@pytest.mark.unit
def test_sequential_fetch_returns_bodies_in_request_order(api_client, fake_http):
    fake_http.on("GET", "a", FakeResponse(200, {"n": 1}))
    fake_http.on("GET", "b", FakeResponse(200, {"n": 2}))
    fake_http.on("GET", "c", FakeResponse(200, {"n": 3}))

    configs = [api_client.build("tok", path) for path in ("c", "a", "b")]
    results = sequential_fetch(api_client, configs)

    assert results == [{"n": 3}, {"n": 1}, {"n": 2}]
    assert [call["path"] for call in fake_http.calls] == ["c", "a", "b"]


@pytest.mark.unit
def test_sequential_fetch_collects_errors_without_short_circuit(api_client, fake_http):
    fake_http.on("POST", "batch", FakeResponse(201, {"ok": 1}), error_response(500, "boom"), FakeResponse(201, {"ok": 3}))

    configs = [api_client.build("tok", "batch", method="POST", json={"i": i}) for i in range(3)]
    results = sequential_fetch(api_client, configs)

    assert results[0] == {"ok": 1}
    assert results[1] == {"error": {"status": 500, "message": "boom"}}
    assert results[2] == {"ok": 3}
    assert [call["json"] for call in fake_http.calls] == [{"i": 0}, {"i": 1}, {"i": 2}]


@pytest.mark.unit
def test_sequential_fetch_of_nothing_makes_no_calls(api_client, fake_http):
    assert sequential_fetch(api_client, []) == []
    assert fake_http.calls == []


@pytest.mark.unit
def test_send_passes_timeout(api_client, fake_http, api_settings):
    fake_http.on("GET", "me", FakeResponse(200, {"id": "u"}))
    api_client.send(api_client.build("tok", "me"))
    assert fake_http.calls[0]["timeout"] == api_settings.request_timeout_seconds


@pytest.mark.unit
def test_send_retries_once_on_rate_limit_using_retry_after(api_client, fake_http, sleeps):
    fake_http.on(
        "GET",
        "search",
        FakeResponse(429, {"error": {"status": 429, "message": "slow down"}}, headers={"Retry-After": "2"}),
        FakeResponse(200, {"tracks": {"items": []}}),
    )

    body = api_client.send(api_client.build("tok", "search"))

    assert body == {"tracks": {"items": []}}
    assert len(fake_http.calls) == 2
    assert sleeps == [2.0]


@pytest.mark.unit
def test_send_caps_retry_after_and_gives_up_after_budget(api_client, fake_http, sleeps):
    fake_http.on(
        "GET",
        "search",
        FakeResponse(429, {"error": {"status": 429, "message": "slow down"}}, headers={"Retry-After": "600"}),
    )

    body = api_client.send(api_client.build("tok", "search"))

    assert body["error"]["status"] == 429
    assert len(fake_http.calls) == 2
    assert sleeps == [5.0]


@pytest.mark.unit
def test_timeout_becomes_upstream_unavailable_body(api_client, fake_http):
    fake_http.on("GET", "search", timeout_error())

    body = api_client.send(api_client.build("tok", "search"))

    assert body["error"]["status"] == 503
    assert "did not respond" in body["error"]["message"]


@pytest.mark.unit
@pytest.mark.parametrize(
    "response,expected",
    [
        (FakeResponse(201, None), {}),
        (FakeResponse(200, content=b"<html>"), {"error": {"status": 502, "message": "Malformed response from Spotify"}}),
        (FakeResponse(500, content=b"<html>"), {"error": {"status": 500, "message": "Malformed response from Spotify"}}),
        (FakeResponse(404, None, reason="Not Found"), {"error": {"status": 404, "message": "Not Found"}}),
        (FakeResponse(403, {"detail": "nope"}, reason="Forbidden"), {"error": {"status": 403, "message": "Forbidden"}}),
    ],
)
def test_send_normalizes_odd_bodies(api_client, fake_http, response, expected):
    fake_http.on("GET", "thing", response)
    assert api_client.send(api_client.build("tok", "thing")) == expected


@pytest.mark.unit
def test_follow_pages_walks_next_links(api_client, fake_http):
    second = "https://api.spotify.com/v1/playlists/p1/tracks?offset=100"
    third = "https://api.spotify.com/v1/playlists/p1/tracks?offset=200"
    fake_http.on(
        "GET",
        "playlists/p1/tracks",
        FakeResponse(200, tracks_page_payload(["t2"], next_url=third)),
        FakeResponse(200, tracks_page_payload(["t3"])),
    )

    pages = list(follow_pages(api_client, tracks_page_payload(["t1"], next_url=second), access_token="tok"))

    assert [page["items"][0]["track"]["id"] for page in pages] == ["t1", "t2", "t3"]
    assert [call["url"] for call in fake_http.calls] == [second, third]


@pytest.mark.unit
def test_follow_pages_stops_at_error_page(api_client, fake_http):
    fake_http.on("GET", "playlists/p1/tracks", error_response(502, "bad gateway"))
    first = tracks_page_payload(["t1"], next_url="https://api.spotify.com/v1/playlists/p1/tracks?offset=100")

    pages = list(follow_pages(api_client, first, access_token="tok"))

    assert len(pages) == 2
    assert pages[1]["error"]["status"] == 502


@pytest.mark.unit
def test_request_config_defaults():
    config = RequestConfig(url="https://example/x")
    assert config.method == "GET"
    assert config.headers == {}
    assert config.params is None
    assert config.json is None
