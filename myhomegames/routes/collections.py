"""Collections: cached list, resolved game views, edits and manual ordering."""
from __future__ import annotations

from typing import Any, Dict, List

from flask import Blueprint, jsonify, request

from ..api_utils import BadRequestError, NotFoundError, StorageError, handle_api_errors
from ..auth import require_token
from ..projection import collection_to_json, resolve_games
from ..storage import remove_tree
from ..store import app_state, find_record

bp = Blueprint("collections", __name__)

COLLECTION_EDITABLE_FIELDS = ("title", "summary")


def _collection_or_404(collection_id: str) -> Dict:
    collection = app_state().collections.get(collection_id)
    if collection is None:
        raise NotFoundError("Collection not found")
    return collection


def _read_for_write(error: str) -> List[Any]:
    try:
        return app_state().collections.read_fresh()
    except StorageError as e:
        raise StorageError(error) from e


def _save(records: List[Any], error: str) -> None:
    try:
        app_state().collections.save(records)
    except StorageError as e:
        raise StorageError(error) from e


@bp.get("/collections")
@handle_api_errors
@require_token
def list_collections():
    state = app_state()
    return jsonify({"collections": [collection_to_json(c, state.layout) for c in state.collections.all()]})


@bp.get("/collections/<collection_id>")
@handle_api_errors
@require_token
def get_collection(collection_id):
    return jsonify(collection_to_json(_collection_or_404(collection_id), app_state().layout))


@bp.get("/collections/<collection_id>/games")
@handle_api_errors
@require_token
def collection_games(collection_id):
    collection = _collection_or_404(collection_id)
    return jsonify({"games": resolve_games(collection.get("games") or [], app_state().games)})


@bp.put("/collections/<collection_id>")
@handle_api_errors
@require_token
def update_collection(collection_id):
    _collection_or_404(collection_id)
    updates = request.get_json(silent=True)
    if not isinstance(updates, dict):
        updates = {}
    fields = {k: updates[k] for k in COLLECTION_EDITABLE_FIELDS if k in updates}
    if not fields:
        raise BadRequestError("No valid fields to update")

    records = _read_for_write("Failed to save collection updates")
    record = find_record(records, collection_id)
    if record is None:
        raise NotFoundError("Collection not found")
    record.update(fields)
    _save(records, "Failed to save collection updates")

    return jsonify({"status": "success", "collection": collection_to_json(record, app_state().layout)})


@bp.put("/collections/<collection_id>/games/order")
@handle_api_errors
@require_token
def reorder_collection(collection_id):
    _collection_or_404(collection_id)
    payload = request.get_json(silent=True)
    game_ids = payload.get("gameIds") if isinstance(payload, dict) else None
    if not isinstance(game_ids, list) or not all(isinstance(g, str) for g in game_ids):
        raise BadRequestError("gameIds must be an array of game ids")

    records = _read_for_write("Failed to save collection order")
    record = find_record(records, collection_id)
    if record is None:
        raise NotFoundError("Collection not found")
    record["games"] = list(game_ids)
    _save(records, "Failed to save collection order")

    return jsonify({"status": "success", "collection": collection_to_json(record, app_state().layout)})


@bp.post("/collections/<collection_id>/reload")
@handle_api_errors
@require_token
def reload_collection(collection_id):
    app_state().collections.reload()
    collection = _collection_or_404(collection_id)
    return jsonify({"status": "reloaded", "collection": collection_to_json(collection, app_state().layout)})


@bp.delete("/collections/<collection_id>")
@handle_api_errors
@require_token
def delete_collection(collection_id):
    _collection_or_404(collection_id)
    records = _read_for_write("Failed to delete collection")
    record = find_record(records, collection_id)
    if record is None:
        raise NotFoundError("Collection not found")
    records.remove(record)
    _save(records, "Failed to delete collection")

    try:
        remove_tree(app_state().layout.content_dir("collections", collection_id))
    except ValueError:
        pass
    return jsonify({"status": "success", "message": "Collection deleted"})
