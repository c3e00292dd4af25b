from tests.helpers import AUTH, COLLECTIONS, read_resource, touch, write_resource


def test_list_collections(client, metadata_root):
    touch(metadata_root / "content" / "collections" / "c1" / "background.webp")
    resp = client.get("/collections", headers=AUTH)
    assert resp.status_code == 200
    collections = resp.get_json()["collections"]
    assert collections[0] == {
        "id": "c1",
        "title": "Favourites",
        "summary": "",
        "cover": "/collection-covers/c1",
        "gameCount": 3,
        "background": "/collection-backgrounds/c1",
    }
    assert collections[1]["gameCount"] == 0
    assert "background" not in collections[1]


def test_get_collection(client):
    assert client.get("/collections/c2", headers=AUTH).get_json()["title"] == "Backlog"
    resp = client.get("/collections/nope", headers=AUTH)
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Collection not found"}


def test_collection_games_keep_order(client):
    resp = client.get("/collections/c1/games", headers=AUTH)
    assert resp.status_code == 200
    games = resp.get_json()["games"]
    assert [g["id"] for g in games] == ["g2", "g1"]
    assert games[0]["title"] == "Bar"


def test_collection_games_unknown(client):
    assert client.get("/collections/nope/games", headers=AUTH).status_code == 404


def test_update_collection(client, metadata_root):
    resp = client.put(
        "/collections/c1",
        json={"title": "Best", "summary": "Top picks", "unknownField": "x", "games": []},
        headers=AUTH,
    )
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["status"] == "success"
    assert body["collection"]["title"] == "Best"
    assert body["collection"]["gameCount"] == 3

    stored = read_resource(metadata_root, "games-collections.json")[0]
    assert stored == {"id": "c1", "title": "Best", "summary": "Top picks", "games": ["g2", "g1", "gone"]}
    assert client.get("/collections/c1", headers=AUTH).get_json()["title"] == "Best"


def test_update_collection_without_fields(client):
    resp = client.put("/collections/c1", json={"unknownField": 1}, headers=AUTH)
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "No valid fields to update"}


def test_reorder_collection(client, metadata_root):
    resp = client.put("/collections/c1/games/order", json={"gameIds": ["g1", "g2"]}, headers=AUTH)
    assert resp.status_code == 200
    assert resp.get_json()["collection"]["gameCount"] == 2

    assert read_resource(metadata_root, "games-collections.json")[0]["games"] == ["g1", "g2"]
    games = client.get("/collections/c1/games", headers=AUTH).get_json()["games"]
    assert [g["id"] for g in games] == ["g1", "g2"]


def test_reorder_rejects_bad_body(client, metadata_root):
    for body in ({}, {"gameIds": "g1"}, {"gameIds": [1, 2]}):
        resp = client.put("/collections/c1/games/order", json=body, headers=AUTH)
        assert resp.status_code == 400
    assert read_resource(metadata_root, "games-collections.json") == COLLECTIONS


def test_reload_collection(client, metadata_root):
    edited = [dict(c) for c in COLLECTIONS]
    edited[1]["title"] = "Later"
    write_resource(metadata_root, "games-collections.json", edited)

    resp = client.post("/collections/c2/reload", headers=AUTH)
    assert resp.status_code == 200
    assert resp.get_json()["collection"]["title"] == "Later"


def test_delete_collection(client, metadata_root):
    cover = metadata_root / "content" / "collections" / "c2" / "cover.webp"
    touch(cover)

    resp = client.delete("/collections/c2", headers=AUTH)
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "success", "message": "Collection deleted"}
    assert [c["id"] for c in read_resource(metadata_root, "games-collections.json")] == ["c1"]
    assert not cover.parent.exists()
    assert client.get("/collections/c2", headers=AUTH).status_code == 404


def test_collections_require_token(client):
    assert client.get("/collections").status_code == 401
    assert client.delete("/collections/c1").status_code == 401
