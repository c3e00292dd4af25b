from flask import Blueprint, jsonify

from ..api_utils import handle_api_errors
from ..auth import require_token
from ..projection import resolve_games
from ..store import app_state, load_sections

bp = Blueprint("recommended", __name__)


@bp.get("/recommended")
@handle_api_errors
@require_token
def recommended():
    state = app_state()
    sections = [
        {"id": s.id, "games": resolve_games(s.games, state.games)}
        for s in load_sections(state.layout)
    ]
    return jsonify({"sections": sections})
