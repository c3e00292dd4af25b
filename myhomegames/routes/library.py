"""Library games: listing, single-game reads, edits and deletes, executable upload."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable

from flask import Blueprint, jsonify, request

from ..api_utils import BadRequestError, NotFoundError, StorageError, handle_api_errors
from ..auth import require_token
from ..launch import SCRIPT_NAMES, make_executable
from ..models import Genre
from ..projection import game_to_json, games_to_json
from ..storage import remove_files, remove_tree
from ..store import app_state, find_record
from ..utils import normalize_exec_tag

logger = logging.getLogger(__name__)

bp = Blueprint("library", __name__)

GAME_EDITABLE_FIELDS = ("title", "summary", "year", "month", "day", "stars", "genre", "command")


def _game_or_404(game_id: str) -> Dict:
    game = app_state().games.get(game_id)
    if game is None:
        raise NotFoundError("Game not found")
    return game


def _persist_game(game_id: str, fields: Dict[str, Any], drop: Iterable[str] = ()) -> Dict:
    """Merge ``fields`` into the game as stored on disk right now and write it back.

    The file is re-read instead of trusting the index so edits made to other
    games since the last load are kept.
    """
    state = app_state()
    try:
        records = state.games.read_fresh()
    except StorageError as e:
        raise StorageError("Failed to save game updates") from e

    record = find_record(records, game_id)
    if record is None:
        raise NotFoundError("Game not found in library")

    record.update(fields)
    for key in drop:
        record.pop(key, None)

    try:
        state.games.save(records)
    except StorageError as e:
        raise StorageError("Failed to save game updates") from e

    state.games.update(game_id, fields)
    for key in drop:
        state.games.remove_field(game_id, key)
    return record


@bp.get("/libraries/library/games")
@handle_api_errors
@require_token
def library_games():
    games = app_state().games.load()
    return jsonify({"games": games_to_json(games)})


@bp.get("/games/<game_id>")
@handle_api_errors
@require_token
def get_game(game_id):
    game = _game_or_404(game_id)
    return jsonify(game_to_json(game, app_state().layout))


@bp.put("/games/<game_id>")
@handle_api_errors
@require_token
def update_game(game_id):
    _game_or_404(game_id)
    updates = request.get_json(silent=True)
    if not isinstance(updates, dict):
        updates = {}

    fields = {k: updates[k] for k in GAME_EDITABLE_FIELDS if k in updates}
    if not fields:
        raise BadRequestError("No valid fields to update")

    drop = []
    if "command" in fields:
        command = fields["command"]
        if command is None or (isinstance(command, str) and not command.strip()):
            # unlink the executable
            del fields["command"]
            drop.append("command")
        else:
            tag = normalize_exec_tag(command)
            if tag not in SCRIPT_NAMES:
                raise BadRequestError('Invalid command: must be "sh" or "bat"')
            fields["command"] = tag

    if "genre" in fields:
        try:
            fields["genre"] = Genre.dump(Genre.parse(fields["genre"]))
        except ValueError as e:
            raise BadRequestError(str(e)) from e

    layout = app_state().layout
    record = _persist_game(game_id, fields, drop)
    if drop:
        # the record no longer points at a script, so the files can go
        try:
            remove_files(layout.content_dir("games", game_id), SCRIPT_NAMES.values())
        except ValueError:
            pass
    return jsonify({"status": "success", "game": game_to_json(record, layout)})


@bp.post("/games/<game_id>/reload")
@handle_api_errors
@require_token
def reload_game(game_id):
    state = app_state()
    state.games.load()
    game = _game_or_404(game_id)
    return jsonify({"status": "reloaded", "game": game_to_json(game, state.layout)})


@bp.delete("/games/<game_id>")
@handle_api_errors
@require_token
def delete_game(game_id):
    state = app_state()
    _game_or_404(game_id)
    try:
        records = state.games.read_fresh()
    except StorageError as e:
        raise StorageError("Failed to delete game") from e

    record = find_record(records, game_id)
    if record is None:
        raise NotFoundError("Game not found in library")
    records.remove(record)
    try:
        state.games.save(records)
    except StorageError as e:
        raise StorageError("Failed to delete game") from e

    state.games.discard(game_id)
    try:
        remove_tree(state.layout.content_dir("games", game_id))
    except ValueError:
        pass
    logger.info("Deleted game %s", game_id)
    return jsonify({"status": "success", "message": "Game deleted"})


@bp.post("/games/<game_id>/upload-executable")
@handle_api_errors
@require_token
def upload_executable(game_id):
    _game_or_404(game_id)
    upload = request.files.get("file")
    if upload is None or not upload.filename:
        raise BadRequestError("No file uploaded")

    tag = Path(upload.filename).suffix.lower().lstrip(".")
    if tag not in SCRIPT_NAMES:
        raise BadRequestError("Only .sh and .bat files are allowed")

    layout = app_state().layout
    folder = layout.content_dir("games", game_id)
    target = folder / SCRIPT_NAMES[tag]
    staged = folder / f".{SCRIPT_NAMES[tag]}.part"
    try:
        try:
            folder.mkdir(parents=True, exist_ok=True)
            upload.save(str(staged))
            if tag == "sh":
                make_executable(staged)
        except OSError as e:
            raise StorageError("Failed to save executable") from e

        # the current script stays in place until the record is saved
        record = _persist_game(game_id, {"command": tag})
        try:
            os.replace(staged, target)
        except OSError as e:
            raise StorageError("Failed to save executable") from e
    finally:
        remove_files(folder, [staged.name])
    return jsonify({"status": "success", "game": game_to_json(record, layout)})
