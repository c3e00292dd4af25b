"""Fixture data and small helpers shared by the test modules."""
import json
from pathlib import Path

TOKEN = "test-token"
AUTH = {"X-Auth-Token": TOKEN}

LIBRARY = [
    {"id": "g1", "title": "Foo", "year": 1999},
    {
        "id": "g2",
        "title": "Bar",
        "summary": "A game",
        "stars": 8,
        "genre": ["Action", "genre_rpg"],
        "command": "sh",
        "criticratings": 85,
        "userratings": 7.5,
    },
    {"id": "g3", "title": "Baz", "genre": "Puzzle", "day": 3, "month": 4, "year": 2010},
]

RECOMMENDED = [
    {"id": "featured", "games": ["g1", "g2", "missing"]},
    {"id": "classics", "games": ["g3"]},
]

CATEGORIES = [
    {"id": "genre_action", "title": "action"},
    {"id": "genre_puzzle", "title": "puzzle"},
    {"id": "genre_rpg", "title": "rpg"},
    {"id": "genre_strategy", "title": "strategy"},
]

COLLECTIONS = [
    {"id": "c1", "title": "Favourites", "summary": "", "games": ["g2", "g1", "gone"]},
    {"id": "c2", "title": "Backlog", "games": []},
]


def touch(p: Path, data: bytes = b""):
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_bytes(data or b"stub")


def write_resource(root: Path, name: str, data) -> Path:
    p = root / "metadata" / name
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return p


def read_resource(root: Path, name: str):
    return json.loads((root / "metadata" / name).read_text("utf-8"))


def mock_popen_calls(pid: int = 4242, error: Exception = None):
    calls = []

    class _P:
        def __init__(self, *a, **kw):
            calls.append((a, kw))
            if error is not None:
                raise error
            self.pid = pid

    return _P, calls
