"""Shape stored records into API responses.

Nothing here touches the stored dicts; every function returns a new one.
Cover urls are synthesized from the id, never stored.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from .models import Category
from .storage import MetadataLayout
from .utils import encode_id

GAME_SCALAR_FIELDS = ("day", "month", "year", "stars", "genre", "criticratings", "userratings")


def _background(layout: Optional[MetadataLayout], kind: str, entity_id, route: str) -> Optional[str]:
    if layout is None:
        return None
    try:
        path = layout.content_file(kind, str(entity_id), "background.webp")
    except ValueError:
        return None
    return f"/{route}/{encode_id(entity_id)}" if path.exists() else None


def game_to_json(game: Dict, layout: Optional[MetadataLayout] = None) -> Dict:
    """Project one game.

    Optional fields are present as ``None`` when unset, except ``command``,
    which clients expect to be absent entirely when there is no executable.
    ``background`` is only added when a layout is given and the file exists.
    """
    data = {
        "id": game["id"],
        "title": game.get("title"),
        "summary": game.get("summary") or "",
        "cover": f"/covers/{encode_id(game['id'])}",
    }
    for key in GAME_SCALAR_FIELDS:
        data[key] = game.get(key)
    if game.get("command") is not None:
        data["command"] = game["command"]

    background = _background(layout, "games", game["id"], "backgrounds")
    if background:
        data["background"] = background
    return data


def games_to_json(games: Iterable[Dict]) -> List[Dict]:
    return [game_to_json(g) for g in games]


def resolve_games(ids: Iterable[str], index) -> List[Dict]:
    """Look ids up in the game index, keeping order and dropping unknown ids."""
    found = []
    for gid in ids:
        game = index.get(gid)
        if game is not None:
            found.append(game_to_json(game))
    return found


def collection_to_json(collection: Dict, layout: Optional[MetadataLayout] = None) -> Dict:
    data = {
        "id": collection["id"],
        "title": collection.get("title"),
        "summary": collection.get("summary") or "",
        "cover": f"/collection-covers/{encode_id(collection['id'])}",
        "gameCount": len(collection.get("games") or []),
    }
    background = _background(layout, "collections", collection["id"], "collection-backgrounds")
    if background:
        data["background"] = background
    return data


def category_to_json(category: Category) -> Dict:
    return {
        "id": category.id,
        "title": category.title,
        "cover": f"/category-covers/{encode_id(category.id)}",
    }
