"""Pytest fixtures shared across the test suite."""
import json

import pytest

from myhomegames import create_app
from tests.helpers import CATEGORIES, COLLECTIONS, LIBRARY, RECOMMENDED, TOKEN, write_resource


@pytest.fixture
def metadata_root(tmp_path):
    """A metadata tree with one file per resource and an Italian settings file."""

    root = tmp_path / "MyHomeGames"
    write_resource(root, "games-library.json", LIBRARY)
    write_resource(root, "games-recommended.json", RECOMMENDED)
    write_resource(root, "games-categories.json", CATEGORIES)
    write_resource(root, "games-collections.json", COLLECTIONS)
    (root / "settings.json").write_text(json.dumps({"language": "it"}), encoding="utf-8")
    return root


@pytest.fixture
def app(metadata_root):
    return create_app(
        str(metadata_root),
        TESTING=True,
        API_TOKEN=TOKEN,
        IGDB_CLIENT_ID="igdb-id",
        IGDB_CLIENT_SECRET="igdb-secret",
        TWITCH_CLIENT_ID="twitch-id",
        TWITCH_CLIENT_SECRET="twitch-secret",
        API_BASE="http://127.0.0.1:4000",
    )


@pytest.fixture
def client(app):
    return app.test_client()
