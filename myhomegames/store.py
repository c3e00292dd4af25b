"""In-memory views over the metadata files.

``GameStore`` is the id -> game index every other resource resolves through.
``CollectionStore`` keeps the collections list cached between explicit
reloads. Neither locks: two writers racing on the same file means the last
write wins.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional

from flask import current_app

from .api_utils import StorageError
from .models import Category, RecommendedSection
from .storage import (
    CATEGORIES_FILE,
    COLLECTIONS_FILE,
    LIBRARY_FILE,
    RECOMMENDED_FILE,
    MetadataLayout,
    read_json,
    read_json_strict,
    write_json,
)

logger = logging.getLogger(__name__)


def _raw_list(path, name: str) -> List[Any]:
    data = read_json_strict(path)
    if not isinstance(data, list):
        raise StorageError(f"{name} does not hold a list")
    return data


def find_record(records: List[Any], record_id) -> Optional[dict]:
    for item in records:
        if isinstance(item, dict) and str(item.get("id")) == str(record_id):
            return item
    return None


def _records(data: Any, name: str) -> List[dict]:
    if not isinstance(data, list):
        if data is not None:
            logger.warning("Invalid format in %s, expected array, got %s", name, type(data).__name__)
        return []
    return [item for item in data if isinstance(item, dict) and item.get("id") is not None]


class GameStore:
    def __init__(self, layout: MetadataLayout):
        self.layout = layout
        self._games: Dict[str, dict] = {}

    @property
    def path(self):
        return self.layout.resource(LIBRARY_FILE)

    def load(self) -> List[dict]:
        games = _records(read_json(self.path, []), LIBRARY_FILE)
        self._games = {str(g["id"]): g for g in games}
        return games

    def reload(self) -> int:
        self.load()
        return len(self._games)

    def read_fresh(self) -> List[Any]:
        """The library file as it is on disk right now (raises StorageError)."""
        return _raw_list(self.path, LIBRARY_FILE)

    def save(self, records: List[Any]) -> None:
        write_json(self.path, records)

    def get(self, game_id: str) -> Optional[dict]:
        return self._games.get(str(game_id))

    def all(self) -> List[dict]:
        return list(self._games.values())

    def update(self, game_id: str, fields: Dict[str, Any]) -> None:
        game = self._games.get(str(game_id))
        if game is not None:
            game.update(fields)

    def remove_field(self, game_id: str, key: str) -> None:
        game = self._games.get(str(game_id))
        if game is not None:
            game.pop(key, None)

    def discard(self, game_id: str) -> None:
        self._games.pop(str(game_id), None)

    def __contains__(self, game_id) -> bool:
        return str(game_id) in self._games

    def __len__(self) -> int:
        return len(self._games)

    def __iter__(self) -> Iterator[dict]:
        return iter(list(self._games.values()))


class CollectionStore:
    def __init__(self, layout: MetadataLayout):
        self.layout = layout
        self._collections: List[dict] = []

    @property
    def path(self):
        return self.layout.resource(COLLECTIONS_FILE)

    def reload(self) -> List[dict]:
        self._collections = _records(read_json(self.path, []), COLLECTIONS_FILE)
        return self._collections

    def all(self) -> List[dict]:
        return list(self._collections)

    def get(self, collection_id: str) -> Optional[dict]:
        for c in self._collections:
            if str(c["id"]) == str(collection_id):
                return c
        return None

    def read_fresh(self) -> List[Any]:
        return _raw_list(self.path, COLLECTIONS_FILE)

    def save(self, records: List[Any]) -> None:
        write_json(self.path, records)
        self._collections = _records(records, COLLECTIONS_FILE)


def load_sections(layout: MetadataLayout) -> List[RecommendedSection]:
    """Read the recommended file, accepting the current and both legacy shapes.

    Current: ``[{"id": ..., "games": [id, ...]}, ...]``. Legacy: a flat list of
    ids, or a flat list of game objects; either becomes one section named
    ``recommended``.
    """
    data = read_json(layout.resource(RECOMMENDED_FILE), [])
    if not isinstance(data, list) or not data:
        return []

    first = data[0]
    if isinstance(first, str):
        return [RecommendedSection(id="recommended", games=[i for i in data if isinstance(i, str)])]
    if isinstance(first, dict) and "games" not in first and first.get("id") is not None:
        ids = [str(g["id"]) for g in data if isinstance(g, dict) and g.get("id") is not None]
        return [RecommendedSection(id="recommended", games=ids)]

    sections: List[RecommendedSection] = []
    for item in data:
        if not isinstance(item, dict) or item.get("id") is None:
            continue
        games = item.get("games") or []
        sections.append(RecommendedSection(id=str(item["id"]), games=[str(g) for g in games if g is not None]))
    return sections


def load_categories(layout: MetadataLayout) -> List[Category]:
    data = read_json(layout.resource(CATEGORIES_FILE), [])
    if not isinstance(data, list):
        logger.warning("Invalid format in %s, expected array, got %s", CATEGORIES_FILE, type(data).__name__)
        return []
    categories = []
    for item in data:
        c = Category.from_stored(item)
        if c is None:
            logger.warning("Skipping category entry without a title in %s: %r", CATEGORIES_FILE, item)
            continue
        categories.append(c)
    return categories


def save_categories(layout: MetadataLayout, categories: List[Category]) -> None:
    write_json(layout.resource(CATEGORIES_FILE), [c.to_dict() for c in categories])


@dataclass
class AppState:
    layout: MetadataLayout
    games: GameStore
    collections: CollectionStore

    @classmethod
    def create(cls, layout: MetadataLayout) -> "AppState":
        state = cls(layout=layout, games=GameStore(layout), collections=CollectionStore(layout))
        state.games.load()
        state.collections.reload()
        return state


def app_state() -> AppState:
    return current_app.extensions["myhomegames"]
