"""Public image routes (no token: <img> tags cannot send one)."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

from flask import Blueprint, Response, current_app, jsonify, send_file

from ..store import app_state

bp = Blueprint("media", __name__)


def _image_path(kind: str, entity_id: str, filename: str) -> Optional[Path]:
    try:
        p = app_state().layout.content_file(kind, entity_id, filename)
    except ValueError:
        return None
    return p if p.is_file() else None


def _empty_webp_404() -> Response:
    # an image content type keeps browsers from flagging the miss as CORB
    return Response(b"", status=404, mimetype="image/webp")


def _serve(kind: str, entity_id: str, filename: str):
    p = _image_path(kind, entity_id, filename)
    if p is None:
        current_app.logger.debug("No %s for %s/%s", filename, kind, entity_id)
        return _empty_webp_404()
    return send_file(p, mimetype="image/webp")


@bp.get("/covers/<game_id>")
def game_cover(game_id):
    return _serve("games", game_id, "cover.webp")


@bp.get("/backgrounds/<game_id>")
def game_background(game_id):
    return _serve("games", game_id, "background.webp")


@bp.get("/category-covers/<category_id>")
def category_cover(category_id):
    return _serve("categories", category_id, "cover.webp")


@bp.get("/collection-covers/<collection_id>")
def collection_cover(collection_id):
    p = _image_path("collections", collection_id, "cover.webp")
    if p is None:
        return jsonify({"error": "Cover not found"}), 404
    return send_file(p, mimetype="image/webp")


@bp.get("/collection-backgrounds/<collection_id>")
def collection_background(collection_id):
    return _serve("collections", collection_id, "background.webp")
