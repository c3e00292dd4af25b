from flask import Blueprint, jsonify, request

from ..api_utils import BadRequestError, NotFoundError, handle_api_errors
from ..auth import require_token
from ..launch import launch_game
from ..store import app_state

bp = Blueprint("launcher", __name__)


@bp.get("/launcher")
@handle_api_errors
@require_token
def launcher():
    game_id = request.args.get("gameId")
    if not game_id:
        raise BadRequestError("Missing gameId")

    state = app_state()
    game = state.games.get(game_id)
    if game is None:
        raise NotFoundError("Game not found")

    result = launch_game(game, state.layout)
    if not result.ok:
        return jsonify({"error": "Launch failed", "detail": result.detail}), result.status
    return jsonify({"status": "launched", "pid": result.pid})


@bp.post("/reload-games")
@handle_api_errors
@require_token
def reload_games():
    state = app_state()
    count = state.games.reload()
    collections = state.collections.reload()
    return jsonify({"status": "reloaded", "count": count, "collections": len(collections)})
