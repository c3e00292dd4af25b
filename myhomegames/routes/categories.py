"""Categories (genres): list, create, delete-when-unused."""
from __future__ import annotations

import logging
from typing import List, Optional

from flask import Blueprint, jsonify, request

from ..api_utils import BadRequestError, ConflictError, NotFoundError, StorageError, handle_api_errors
from ..auth import require_token
from ..models import Category, Genre, normalize_title
from ..projection import category_to_json
from ..storage import remove_tree
from ..store import app_state, load_categories, save_categories

logger = logging.getLogger(__name__)

bp = Blueprint("categories", __name__)


def _find(categories: List[Category], key: str) -> Optional[int]:
    for i, c in enumerate(categories):
        if c.id == key:
            return i
    wanted = normalize_title(key)
    for i, c in enumerate(categories):
        if normalize_title(c.title) == wanted:
            return i
    return None


def _games_for_reference_check() -> List[dict]:
    state = app_state()
    try:
        records = state.games.read_fresh()
    except StorageError as e:
        logger.error("Failed to reload games for category deletion check: %s", e)
        return state.games.all()
    return [r for r in records if isinstance(r, dict)]


@bp.get("/categories")
@handle_api_errors
@require_token
def list_categories():
    categories = load_categories(app_state().layout)
    return jsonify({"categories": [category_to_json(c) for c in categories]})


@bp.post("/categories")
@handle_api_errors
@require_token
def create_category():
    payload = request.get_json(silent=True)
    title = payload.get("title") if isinstance(payload, dict) else None
    if not isinstance(title, str) or not title.strip():
        raise BadRequestError("Title is required")

    layout = app_state().layout
    new = Category.from_title(title)
    categories = load_categories(layout)

    if any(normalize_title(c.title) == new.title for c in categories):
        raise ConflictError("Category already exists", payload={"category": new.title})
    if any(c.id == new.id for c in categories):
        raise ConflictError("Category id already exists", payload={"category": new.id})

    categories.append(new)
    categories.sort(key=lambda c: c.title.lower())
    try:
        save_categories(layout, categories)
    except StorageError as e:
        raise StorageError("Failed to create category") from e

    logger.info("Created category %s", new.id)
    return jsonify({"category": category_to_json(new)})


@bp.delete("/categories/<category_id>")
@handle_api_errors
@require_token
def delete_category(category_id):
    layout = app_state().layout
    categories = load_categories(layout)
    index = _find(categories, category_id)
    if index is None:
        raise NotFoundError("Category not found")
    category = categories[index]

    genres = (Genre.coerce(g.get("genre")) for g in _games_for_reference_check())
    if any(Genre.matches(genre, category.id, category.title) for genre in genres):
        raise ConflictError(
            "Category is still in use by one or more games",
            payload={"message": "Cannot delete category that is assigned to games"},
        )

    del categories[index]
    try:
        save_categories(layout, categories)
    except StorageError as e:
        raise StorageError("Failed to delete category") from e

    try:
        remove_tree(layout.content_dir("categories", category.id))
    except ValueError:
        pass
    return jsonify({"status": "success", "message": "Category deleted"})
