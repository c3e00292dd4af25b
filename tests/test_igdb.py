import pytest
import requests

from myhomegames import igdb
from myhomegames.igdb import IGDBClient, IGDBError, to_suggestion
from tests.helpers import AUTH


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


GAME = {
    "id": 1942,
    "name": "The Witcher 3",
    "summary": "Monsters.",
    "cover": {"url": "//images.igdb.com/igdb/image/upload/t_thumb/abc.jpg"},
    "first_release_date": 1431993600,
}


@pytest.fixture
def igdb_calls(monkeypatch):
    calls = []

    def fake_post(url, **kwargs):
        calls.append((url, kwargs))
        if url == igdb.TOKEN_URL:
            return FakeResponse({"access_token": "app-token", "expires_in": 3600})
        return FakeResponse([GAME])

    monkeypatch.setattr(igdb.requests, "post", fake_post)
    return calls


def test_search(client, igdb_calls):
    resp = client.get("/igdb/search?q=witcher", headers=AUTH)
    assert resp.status_code == 200
    assert resp.get_json() == {"games": [{
        "id": 1942,
        "name": "The Witcher 3",
        "summary": "Monsters.",
        "cover": "https://images.igdb.com/igdb/image/upload/t_cover_big/abc.jpg",
        "releaseDate": 2015,
    }]}

    url, kwargs = igdb_calls[-1]
    assert url == igdb.GAMES_URL
    assert kwargs["headers"]["Authorization"] == "Bearer app-token"
    assert b'search "witcher"' in kwargs["data"]


def test_token_is_cached(client, igdb_calls):
    client.get("/igdb/search?q=a", headers=AUTH)
    client.get("/igdb/search?q=b", headers=AUTH)
    assert [u for u, _ in igdb_calls].count(igdb.TOKEN_URL) == 1


def test_search_requires_query(client, igdb_calls):
    resp = client.get("/igdb/search?q=%20", headers=AUTH)
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Missing search query"}
    assert igdb_calls == []


def test_search_upstream_failure(client, monkeypatch):
    def fake_post(url, **kwargs):
        if url == igdb.TOKEN_URL:
            return FakeResponse({"access_token": "t", "expires_in": 3600})
        return FakeResponse({"message": "boom"}, status_code=502)

    monkeypatch.setattr(igdb.requests, "post", fake_post)
    resp = client.get("/igdb/search?q=x", headers=AUTH)
    assert resp.status_code == 500
    assert resp.get_json()["error"] == "Failed to search IGDB"


def test_search_requires_token(client, igdb_calls):
    assert client.get("/igdb/search?q=x").status_code == 401


def test_unconfigured_client():
    with pytest.raises(IGDBError):
        IGDBClient("", "").search("x")


def test_suggestion_without_cover_or_date():
    assert to_suggestion({"id": 1, "name": "Bare"}) == {
        "id": 1, "name": "Bare", "summary": "", "cover": None, "releaseDate": None,
    }


def test_search_without_credentials(app, client, monkeypatch):
    igdb_client = app.extensions["igdb"]
    monkeypatch.setattr(igdb_client, "client_secret", "")
    resp = client.get("/igdb/search?q=x", headers=AUTH)
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Failed to search IGDB", "detail": "IGDB credentials not configured"}
